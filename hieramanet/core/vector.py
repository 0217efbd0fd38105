"""
Vector math for HieraManet.

Small 3D vector type used by every mobility model.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence
import numpy as np


@dataclass
class Vector3:
    """3D vector representation."""
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def __post_init__(self):
        """Convert to float if needed."""
        self.x = float(self.x)
        self.y = float(self.y)
        self.z = float(self.z)

    def to_array(self) -> np.ndarray:
        """Convert to numpy array."""
        return np.array([self.x, self.y, self.z])

    def to_list(self) -> List[float]:
        return [self.x, self.y, self.z]

    @classmethod
    def from_array(cls, arr: np.ndarray) -> Vector3:
        """Create from numpy array."""
        return cls(x=arr[0], y=arr[1], z=arr[2])

    @classmethod
    def from_sequence(cls, seq: Sequence[float]) -> Vector3:
        """Create from a list or tuple; a missing z defaults to 0."""
        if len(seq) == 2:
            return cls(seq[0], seq[1], 0.0)
        return cls(x=seq[0], y=seq[1], z=seq[2])

    def copy(self) -> Vector3:
        return Vector3(self.x, self.y, self.z)

    def __add__(self, other: Vector3) -> Vector3:
        return Vector3(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: Vector3) -> Vector3:
        return Vector3(self.x - other.x, self.y - other.y, self.z - other.z)

    def __mul__(self, scalar: float) -> Vector3:
        return Vector3(self.x * scalar, self.y * scalar, self.z * scalar)

    def __rmul__(self, scalar: float) -> Vector3:
        return self.__mul__(scalar)

    def norm(self) -> float:
        """Compute Euclidean norm."""
        return float(np.sqrt(self.x**2 + self.y**2 + self.z**2))

    def normalized(self) -> Vector3:
        """
        Return the unit vector in the same direction.

        A zero-length vector has no direction; the zero vector is returned
        instead of dividing by zero.
        """
        n = self.norm()
        if n == 0.0:
            return Vector3(0.0, 0.0, 0.0)
        return Vector3(self.x / n, self.y / n, self.z / n)

    def distance_to(self, other: Vector3) -> float:
        return (self - other).norm()

    def dot(self, other: Vector3) -> float:
        """Dot product."""
        return self.x * other.x + self.y * other.y + self.z * other.z


def normalize(v: Vector3) -> Vector3:
    """Functional form of :meth:`Vector3.normalized`."""
    return v.normalized()
