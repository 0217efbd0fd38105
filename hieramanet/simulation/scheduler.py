"""
Tick scheduler for HieraManet.

Discrete-event loop with its own simulated clock. A periodic tick is
re-queued after every execution; the run horizon is enforced by whoever
calls :meth:`TickScheduler.run_until` and :meth:`TickScheduler.stop`, never
by the tick itself.
"""

from __future__ import annotations

import heapq
import itertools
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Callable, List, Optional

from loguru import logger

# Events up to this far past the horizon still run; absorbs float error in
# time comparisons.
TIME_EPSILON = 1e-9


class SchedulerStatus(Enum):
    """Status of the scheduler."""
    IDLE = auto()
    RUNNING = auto()
    STOPPED = auto()


@dataclass(order=True)
class ScheduledEvent:
    """Event in the scheduler timeline; equal times run in insertion order."""

    time: float
    sequence: int
    callback: Callable[[float], None] = field(compare=False)
    periodic: bool = field(default=False, compare=False)


class TickScheduler:
    """
    Periodic tick scheduler.

    Ticks are strictly periodic: tick k runs at ``origin + k * interval``
    (k >= 1). Times are computed from the tick index, not accumulated, so
    long runs do not drift.
    """

    def __init__(self, origin: float = 0.0):
        self._status = SchedulerStatus.IDLE
        self._now = origin
        self._origin = origin
        self._queue: List[ScheduledEvent] = []
        self._sequence = itertools.count()
        self._interval: Optional[float] = None
        self._tick_callback: Optional[Callable[[float], None]] = None
        self._tick_index = 0
        self._tick_count = 0
        self._in_run = False

    @property
    def status(self) -> SchedulerStatus:
        return self._status

    @property
    def now(self) -> float:
        """Current simulated time."""
        return self._now

    @property
    def tick_count(self) -> int:
        """Number of ticks executed so far."""
        return self._tick_count

    @property
    def interval(self) -> Optional[float]:
        return self._interval

    @property
    def pending_events(self) -> int:
        return len(self._queue)

    def start(self, interval: float, callback: Callable[[float], None]) -> None:
        """
        Start periodic ticking.

        Args:
            interval: Tick period in simulated seconds
            callback: Called with the current time at every tick
        """
        if self._status != SchedulerStatus.IDLE:
            raise RuntimeError(f"Cannot start scheduler in state {self._status.name}")
        if interval <= 0:
            raise ValueError(f"Tick interval must be positive, got {interval}")

        self._interval = interval
        self._tick_callback = callback
        self._status = SchedulerStatus.RUNNING
        self._schedule_next_tick()

        logger.debug(f"Scheduler started, first tick at t={self._origin + interval:.3f}s")

    def schedule(self, delay: float, callback: Callable[[float], None]) -> ScheduledEvent:
        """Schedule a one-shot event `delay` seconds from now."""
        if self._status == SchedulerStatus.STOPPED:
            raise RuntimeError("Cannot schedule on a stopped scheduler")
        if delay < 0:
            raise ValueError(f"Cannot schedule in the past (delay={delay})")

        event = ScheduledEvent(self._now + delay, next(self._sequence), callback)
        heapq.heappush(self._queue, event)
        return event

    def _schedule_next_tick(self) -> None:
        self._tick_index += 1
        event = ScheduledEvent(
            time=self._origin + self._tick_index * self._interval,
            sequence=next(self._sequence),
            callback=self._tick_callback,
            periodic=True,
        )
        heapq.heappush(self._queue, event)

    def run_until(self, horizon: float) -> int:
        """
        Execute all events due up to `horizon`, then move the clock there.

        One-shot events run in any state but STOPPED; ticks only run once
        started. The status is never changed here: stopping is the caller's
        decision.

        Returns:
            Number of events executed
        """
        if self._in_run:
            raise RuntimeError("Scheduler is already running events")
        if horizon < self._now:
            raise ValueError(f"Horizon {horizon} is before current time {self._now}")

        executed = 0
        self._in_run = True
        try:
            while (self._status != SchedulerStatus.STOPPED and self._queue
                   and self._queue[0].time <= horizon + TIME_EPSILON):
                event = heapq.heappop(self._queue)
                self._now = event.time
                event.callback(self._now)
                executed += 1

                if event.periodic:
                    self._tick_count += 1
                    if self._status == SchedulerStatus.RUNNING:
                        self._schedule_next_tick()
        finally:
            self._in_run = False

        if self._status != SchedulerStatus.STOPPED:
            self._now = max(self._now, horizon)
        return executed

    def stop(self) -> None:
        """Stop the scheduler and drop pending events."""
        if self._status == SchedulerStatus.STOPPED:
            return
        self._status = SchedulerStatus.STOPPED
        self._queue.clear()
        logger.debug(f"Scheduler stopped at t={self._now:.3f}s after {self._tick_count} ticks")
