"""
Utilities for turning the live instrument state into the payload the
frontend draws each frame: points with their trails, the glowing screen
border and the knob indicators.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Any, Dict, List

from .constants import GLOW_RATE, KEY_COUNT, POINT_DIAMETER, POINT_RGB, TRAIL_MAX_ALPHA
from .params import PARAMETERS
from .point import Point
from .recorder import RecorderMode
from .utils import remap

if TYPE_CHECKING:
    from .instrument import Instrument

# Border stroke colors, glowing between "on" and "off"
CHROME_COLORS = {
    RecorderMode.IDLE: ("#636363", "#636363"),
    RecorderMode.RECORDING: ("#FF4A4A", "#FFA216"),
    RecorderMode.PLAYING: ("#59D60C", "#55EE89"),
}


def point_color(key_index: int) -> List[int]:
    """Warm orange, bluer for the low keys."""
    blue = remap(key_index, 0, KEY_COUNT, 150, 50)
    return [POINT_RGB[0], POINT_RGB[1], int(round(blue))]


def _trail_payload(point: Point) -> List[Dict[str, Any]]:
    count = len(point.trail)
    return [
        {
            "x": float(pos[0]),
            "y": float(pos[1]),
            "alpha": remap(j, 0, count, 0, TRAIL_MAX_ALPHA),
        }
        for j, pos in enumerate(point.trail)
    ]


def point_payload(point: Point, now: float) -> Dict[str, Any]:
    x, y = point.position
    return {
        "keyIndex": point.key_index,
        "state": point.state.value,
        "x": float(x),
        "y": float(y),
        "angle": point.angle,
        "radius": point.radius,
        "alpha": point.alpha(now),
        "color": point_color(point.key_index),
        "diameter": POINT_DIAMETER,
        "playbackOffset": point.playback_offset,
        "trail": _trail_payload(point),
    }


def chrome_payload(mode: RecorderMode, frame_count: int) -> Dict[str, Any]:
    stroke_on, stroke_off = CHROME_COLORS[mode]
    return {
        "strokeOn": stroke_on,
        "strokeOff": stroke_off,
        "glow": abs(math.sin(frame_count * GLOW_RATE)),
    }


def build_frame(instrument: Instrument, now: float) -> Dict[str, Any]:
    params = instrument.params
    simulation = instrument.simulation
    return {
        "t": now,
        "frame": instrument.frame_count,
        "canvasSize": simulation.canvas_size,
        "mode": instrument.recorder.mode.value,
        "chrome": chrome_payload(instrument.recorder.mode, instrument.frame_count),
        "knobs": {spec.knob: params.indicator_angle(spec.name) for spec in PARAMETERS},
        "parameters": params.snapshot(),
        "points": [point_payload(point, now) for point in simulation.points],
    }
