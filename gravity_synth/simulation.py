"""
Main class for handling the active points.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from .constants import CANVAS_SIZE, KEY_COUNT, SPAWN_RADIUS_DIVISOR, TWO_PI
from .params import ParameterStore
from .point import Point

logger = logging.getLogger(__name__)


class Simulation:
    """
    Container that owns Point instances and advances them one step per
    frame, reading the knob parameters live on every tick.
    """

    def __init__(self, params: ParameterStore, canvas_size: float = CANVAS_SIZE):
        if canvas_size <= 0:
            raise ValueError("canvas_size must be positive")
        self.params = params
        self.canvas_size = float(canvas_size)
        self.points: List[Point] = []

    @property
    def center(self) -> float:
        return self.canvas_size / 2

    @property
    def spawn_radius(self) -> float:
        return self.canvas_size / SPAWN_RADIUS_DIVISOR

    def spawn(self, key_index: int, playback_offset: Optional[float] = None) -> Point:
        """Create a falling point on the rim, its angle fixed by the key."""
        if not 0 <= key_index < KEY_COUNT:
            raise ValueError(f"key index must be in [0, {KEY_COUNT - 1}], got {key_index}")
        point = Point(
            self,
            key_index,
            angle=key_index / KEY_COUNT * TWO_PI,
            radius=self.spawn_radius,
            playback_offset=playback_offset,
        )
        self.points.append(point)
        return point

    def clear(self) -> None:
        self.points = []

    def tick(self, now: float) -> None:
        """
        Advance every point once, in insertion order. Expired points are
        dropped after the scan so the list is never mutated mid-iteration.
        """
        if not self.points:
            return

        gravity_speed = self.params.effective("gravity_speed")
        gravity_radius = self.params.effective("gravity_radius")
        orbit_speed = self.params.effective("orbit_speed")
        orbit_size = self.params.effective("orbit_size")

        expired: List[Point] = []
        for point in self.points:
            point.record_trail()
            if point.falling:
                point.fall(gravity_speed, gravity_radius, orbit_size, now)
            else:
                point.orbit(orbit_speed, orbit_size)
                if point.expired(now):
                    expired.append(point)

        if expired:
            gone = {id(point) for point in expired}
            self.points = [p for p in self.points if id(p) not in gone]
            logger.debug("Removed %d expired points, %d active", len(expired), len(self.points))
