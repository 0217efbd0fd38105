"""
Waypoint mobility for HieraManet.

Provides:
- Waypoint tracks with step (teleport) semantics, used by the Super-Leader
- The Super-Leader planner that samples its relocation
- Random-waypoint tracks, used by Cluster-Leaders in independent mode
"""

from __future__ import annotations

import bisect
from collections import deque
from dataclasses import dataclass
from typing import Deque, List, Optional

import numpy as np
from loguru import logger

from hieramanet.core.vector import Vector3


@dataclass(frozen=True)
class Waypoint:
    """A timed target position."""
    time: float  # seconds
    target: Vector3


class WaypointTrack:
    """
    Ordered sequence of waypoints with step semantics.

    The position stays at the target of the last waypoint reached and jumps
    to the next target exactly at that waypoint's time. There is no
    interpolation between waypoints.
    """

    def __init__(self, waypoints: List[Waypoint] = None):
        self._waypoints: List[Waypoint] = []
        self._times: List[float] = []
        for waypoint in waypoints or []:
            self.add_waypoint(waypoint)

    def add_waypoint(self, waypoint: Waypoint) -> None:
        """Append a waypoint; times must be strictly increasing."""
        if self._times and waypoint.time <= self._times[-1]:
            raise ValueError(
                f"Waypoint at t={waypoint.time} does not follow t={self._times[-1]}"
            )
        self._waypoints.append(waypoint)
        self._times.append(waypoint.time)

    @property
    def waypoints(self) -> List[Waypoint]:
        return list(self._waypoints)

    def __len__(self) -> int:
        return len(self._waypoints)

    def position_at(self, t: float) -> Vector3:
        """Get the position at simulated time t."""
        if not self._waypoints:
            raise ValueError("Track has no waypoints")

        idx = bisect.bisect_right(self._times, t) - 1
        if idx < 0:
            # Before the first waypoint the agent sits at its initial target
            idx = 0
        return self._waypoints[idx].target.copy()


class SuperLeaderPlanner:
    """
    Plans the Super-Leader track.

    The track starts at the initial position at t=0 and contains exactly one
    relocation, at a time drawn uniformly from [sim_time/2, sim_time] to a
    target drawn uniformly from [0, area_size] on x and y.
    """

    def __init__(
        self,
        sim_time: float,
        area_size: float,
        rng: np.random.Generator,
        start_position: Vector3 = None,
    ):
        self.sim_time = sim_time
        self.area_size = area_size
        self.start_position = start_position or Vector3(50.0, 50.0, 0.0)
        self.track = self._plan(rng)

    def _plan(self, rng: np.random.Generator) -> WaypointTrack:
        track = WaypointTrack([Waypoint(0.0, self.start_position.copy())])

        if self.sim_time <= 0:
            logger.debug("Zero-length horizon: super-leader never relocates")
            return track

        move_time = float(rng.uniform(self.sim_time / 2.0, self.sim_time))
        x = float(rng.uniform(0.0, self.area_size))
        y = float(rng.uniform(0.0, self.area_size))
        track.add_waypoint(Waypoint(move_time, Vector3(x, y, 0.0)))

        logger.debug(f"Super-leader relocates to ({x:.2f}, {y:.2f}) at t={move_time:.2f}s")
        return track

    @property
    def relocation(self) -> Optional[Waypoint]:
        """The relocation waypoint, if the track has one."""
        waypoints = self.track.waypoints
        return waypoints[1] if len(waypoints) > 1 else None

    def position_at(self, t: float) -> Vector3:
        return self.track.position_at(t)


@dataclass
class _Leg:
    """One move-then-pause leg of a random-waypoint track."""
    depart: float
    arrive: float
    resume: float  # end of the pause at the destination
    origin: Vector3
    destination: Vector3


class RandomWaypointTrack:
    """
    Random-waypoint mobility.

    The agent starts at a uniformly drawn point of the area, travels in a
    straight line to a uniformly drawn destination at a uniformly drawn
    speed, pauses, and repeats. Legs are generated lazily as time advances
    and dropped once passed, all from the track's own random stream.
    """

    def __init__(
        self,
        area_size: float,
        rng: np.random.Generator,
        speed_min: float = 0.5,
        speed_max: float = 1.5,
        pause: float = 5.0,
    ):
        self.area_size = area_size
        self.speed_min = speed_min
        self.speed_max = speed_max
        self.pause = pause
        self._rng = rng
        self._legs: Deque[_Leg] = deque()
        self._start = self._random_point()

    def _random_point(self) -> Vector3:
        return Vector3(
            self._rng.uniform(0.0, self.area_size),
            self._rng.uniform(0.0, self.area_size),
            0.0,
        )

    def _next_leg(self) -> _Leg:
        if self._legs:
            origin = self._legs[-1].destination
            depart = self._legs[-1].resume
        else:
            origin = self._start
            depart = 0.0

        destination = self._random_point()
        speed = float(self._rng.uniform(self.speed_min, self.speed_max))
        distance = destination.distance_to(origin)
        travel = distance / speed if speed > 0 else 0.0
        arrive = depart + travel
        leg = _Leg(depart, arrive, arrive + max(self.pause, 0.0), origin, destination)
        self._legs.append(leg)
        return leg

    @property
    def start_position(self) -> Vector3:
        return self._start.copy()

    def position_at(self, t: float) -> Vector3:
        """
        Get the position at simulated time t.

        Queries are expected in non-decreasing time order: legs that ended
        before the latest query are dropped, so earlier times raise.
        """
        if t <= 0:
            return self._start.copy()

        while not self._legs or self._legs[-1].resume < t:
            leg = self._next_leg()
            if leg.resume <= leg.depart:
                # Zero-length leg with no pause: the agent cannot advance
                return leg.destination.copy()
            while len(self._legs) > 1 and self._legs[0].resume < t:
                self._legs.popleft()

        for leg in reversed(self._legs):
            if t >= leg.depart:
                break
        else:
            raise ValueError(
                f"t={t} precedes the retained track (from t={self._legs[0].depart})"
            )

        if t >= leg.arrive:
            return leg.destination.copy()
        alpha = (t - leg.depart) / (leg.arrive - leg.depart)
        return leg.origin + (leg.destination - leg.origin) * alpha
