"""
Mutable representation of a point that belongs to a Simulation.
"""

from __future__ import annotations

import math
from collections import deque
from enum import Enum
from typing import TYPE_CHECKING, Deque, Optional

import numpy as np

from .constants import FADE_MS, ORBIT_DWELL_MS, TRAIL_LENGTH
from .utils import clamp, remap

if TYPE_CHECKING:  # Avoid circular import during runtime
    from .simulation import Simulation


class PointState(str, Enum):
    FALLING = "falling"
    ORBITING = "orbiting"


class Point:
    """
    One note's trajectory in polar coordinates about the canvas center. The
    Simulation instance is stored on the point as ``self.simulation`` so every
    point knows where it belongs.
    """

    def __init__(
        self,
        simulation: Simulation,
        key_index: int,
        angle: float,
        radius: float,
        playback_offset: Optional[float] = None,
    ) -> None:
        self.simulation = simulation
        self.key_index = int(key_index)
        self.angle = float(angle)
        self.radius = float(radius)
        self.state = PointState.FALLING
        self.stuck_at: Optional[float] = None
        self.playback_offset = playback_offset
        self.trail: Deque[np.ndarray] = deque(maxlen=TRAIL_LENGTH)

    @property
    def falling(self) -> bool:
        return self.state is PointState.FALLING

    @property
    def position(self) -> np.ndarray:
        center = self.simulation.center
        return np.array(
            [center + math.cos(self.angle) * self.radius,
             center + math.sin(self.angle) * self.radius],
            dtype=float,
        )

    def record_trail(self) -> None:
        """Push the current position; the deque drops the oldest past TRAIL_LENGTH."""
        self.trail.append(self.position)

    def fall(self, angle_step: float, radius_step: float, orbit_size: float, now: float) -> None:
        """Spiral inward; stick to the orbit once the radius drops below it."""
        self.angle += angle_step
        self.radius -= radius_step
        if self.radius < orbit_size:
            self.state = PointState.ORBITING
            self.stuck_at = now

    def orbit(self, angle_step: float, orbit_size: float) -> None:
        self.angle += angle_step
        self.radius = orbit_size

    def orbit_age(self, now: float) -> float:
        if self.stuck_at is None:
            return 0.0
        return now - self.stuck_at

    def expired(self, now: float) -> bool:
        return not self.falling and self.orbit_age(now) >= ORBIT_DWELL_MS

    def alpha(self, now: float) -> float:
        if self.falling:
            return 255.0
        return clamp(remap(self.orbit_age(now), 0.0, FADE_MS, 255.0, 0.0), 0.0, 255.0)
