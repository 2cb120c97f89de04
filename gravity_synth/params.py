"""
Live controller parameters. Each knob writes a raw 0-127 value; consumers
read either the raw value or the effective value mapped into the operating
range of whatever the parameter drives.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from .constants import (
    ANGLE_SCALE,
    INDICATOR_RANGE_DEG,
    RADIUS_SCALE,
    RAW_MAX,
    RAW_MIN,
    ROTATION_SCALE,
)
from .music.constants import LEVEL_RANGE, SPEED_FACTOR_RANGE
from .utils import clamp, remap

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParameterSpec:
    name: str
    knob: str
    default: float = 0.0
    out_range: Tuple[float, float] = (RAW_MIN, RAW_MAX)
    # When set, the upper bound of the output range is the raw value itself
    # divided by this scale, so the effective value grows quadratically.
    nested_scale: Optional[float] = None

    def effective(self, raw: float) -> float:
        if self.nested_scale is not None:
            return remap(raw, RAW_MIN, RAW_MAX, 0.0, raw / self.nested_scale)
        return remap(raw, RAW_MIN, RAW_MAX, *self.out_range)


PARAMETERS: Tuple[ParameterSpec, ...] = (
    ParameterSpec("gravity_speed", "g1", nested_scale=ANGLE_SCALE),
    ParameterSpec("gravity_radius", "g2", nested_scale=RADIUS_SCALE),
    ParameterSpec("orbit_size", "g3"),
    ParameterSpec("orbit_speed", "g4", nested_scale=ROTATION_SCALE),
    ParameterSpec("note_speed", "a1", default=1.0, out_range=SPEED_FACTOR_RANGE),
    ParameterSpec("note_volume", "a2", out_range=LEVEL_RANGE),
    ParameterSpec("note_sustain", "a3", out_range=LEVEL_RANGE),
    ParameterSpec("note_release", "a4", out_range=LEVEL_RANGE),
)

SPECS_BY_NAME: Dict[str, ParameterSpec] = {spec.name: spec for spec in PARAMETERS}
KNOB_TO_NAME: Dict[str, str] = {spec.knob: spec.name for spec in PARAMETERS}


class ParameterStore:
    """
    Holds the raw value of every named control. Values are clamped into the
    controller's 0-127 range on write, so effective ranges stay bounded.
    """

    def __init__(self) -> None:
        self._raw: Dict[str, float] = {spec.name: spec.default for spec in PARAMETERS}

    def set(self, name: str, raw_value: float) -> float:
        spec = SPECS_BY_NAME[name]
        value = clamp(float(raw_value), RAW_MIN, RAW_MAX)
        if value != raw_value:
            logger.debug("Clamped %s from %s to %s", name, raw_value, value)
        self._raw[spec.name] = value
        return value

    def set_knob(self, knob_id: str, raw_value: float) -> str:
        """Store a knob turn and return the parameter name it drives."""
        name = KNOB_TO_NAME[knob_id]
        self.set(name, raw_value)
        return name

    def get(self, name: str) -> float:
        return self._raw[name]

    def effective(self, name: str) -> float:
        return SPECS_BY_NAME[name].effective(self._raw[name])

    def indicator_angle(self, name: str) -> float:
        """Rotation in degrees for the knob's on-screen indicator."""
        return remap(self._raw[name], RAW_MIN, RAW_MAX, *INDICATOR_RANGE_DEG)

    def audio_levels(self) -> Tuple[float, float, float]:
        return (
            self.effective("note_volume"),
            self.effective("note_sustain"),
            self.effective("note_release"),
        )

    def snapshot(self) -> Dict[str, float]:
        return dict(self._raw)
