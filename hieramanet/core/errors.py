"""
Error types for HieraManet.

Zero-length vector normalization is not an error here: it yields the zero
vector (see :meth:`hieramanet.core.vector.Vector3.normalized`).
"""

from __future__ import annotations

from typing import Optional


class HieraManetError(Exception):
    """Base class for all HieraManet errors."""


class ConfigurationError(HieraManetError):
    """Configuration could not be parsed or validated."""


class ExportError(HieraManetError):
    """The statistics output target could not be opened or appended to."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class RunError(HieraManetError):
    """A single simulation run failed."""

    def __init__(self, run_number: int, message: str):
        super().__init__(f"Run {run_number} failed: {message}")
        self.run_number = run_number
