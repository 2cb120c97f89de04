"""
Runtime configuration read from ``GRAVITY_SYNTH_*`` environment variables.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import List, Optional

from .constants import CANVAS_SIZE

PREFIX = "GRAVITY_SYNTH_"


def _env(name: str) -> Optional[str]:
    raw = os.getenv(PREFIX + name)
    if raw is None or raw.strip() == "":
        return None
    return raw.strip()


def env_bool(name: str, default: bool) -> bool:
    raw = _env(name)
    if raw is None:
        return default
    return raw.lower() in ("1", "true", "yes", "on")


def env_float(name: str, default: float, min_value: Optional[float] = None) -> float:
    raw = _env(name)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{PREFIX}{name} must be a number, got {raw!r}") from None
    if min_value is not None and value < min_value:
        raise ValueError(f"{PREFIX}{name} must be >= {min_value}, got {value}")
    return value


@dataclass
class Settings:
    canvas_size: float = CANVAS_SIZE
    fps: float = 60.0
    midi_enabled: bool = True
    midi_port: Optional[str] = None
    cors_origins: List[str] = field(default_factory=lambda: ["http://localhost:5173"])
    note_queue_size: int = 256
    min_playback_delay_ms: float = 50.0
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        defaults = cls()
        origins = _env("CORS_ORIGINS")
        return cls(
            canvas_size=env_float("CANVAS_SIZE", defaults.canvas_size, min_value=1),
            fps=env_float("FPS", defaults.fps, min_value=1),
            midi_enabled=env_bool("MIDI", defaults.midi_enabled),
            midi_port=_env("MIDI_PORT"),
            cors_origins=(
                [o.strip() for o in origins.split(",") if o.strip()]
                if origins is not None
                else defaults.cors_origins
            ),
            note_queue_size=int(env_float("NOTE_QUEUE", defaults.note_queue_size, min_value=1)),
            min_playback_delay_ms=env_float(
                "MIN_DELAY_MS", defaults.min_playback_delay_ms, min_value=1
            ),
            log_level=_env("LOG_LEVEL") or defaults.log_level,
        )
