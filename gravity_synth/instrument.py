"""
The instrument: one session's worth of state wired together.

An Instrument owns its parameter store, point simulation, recorder and audio
trigger, so several can live side by side (tests build one per case).
Decoded controller events go in through ``handle``; the frame loop calls
``advance_frame`` and the frontend reads ``frame()``.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from .audio import AudioTrigger
from .clock import Scheduler
from .constants import CANVAS_SIZE
from .controller import ButtonKind, ButtonPressed, ControllerEvent, KeyPressed, KnobChanged
from .frames import build_frame
from .music import key_to_pitch
from .params import ParameterStore
from .point import Point
from .recorder import DEFAULT_MIN_DELAY_MS, RecordedEvent, Recorder
from .simulation import Simulation

logger = logging.getLogger(__name__)


class Instrument:
    def __init__(
        self,
        scheduler: Scheduler,
        audio: AudioTrigger,
        canvas_size: float = CANVAS_SIZE,
        min_playback_delay_ms: float = DEFAULT_MIN_DELAY_MS,
    ) -> None:
        self.scheduler = scheduler
        self.audio = audio
        self.canvas_size = canvas_size
        self.min_playback_delay_ms = min_playback_delay_ms
        self._build()

    def _build(self) -> None:
        self.params = ParameterStore()
        self.simulation = Simulation(self.params, canvas_size=self.canvas_size)
        self.recorder = Recorder(
            self.scheduler,
            self.params,
            on_replay=self._replay,
            min_delay_ms=self.min_playback_delay_ms,
        )
        self.frame_count = 0

    def handle(self, event: ControllerEvent) -> None:
        if isinstance(event, KeyPressed):
            self.press_key(event.index)
        elif isinstance(event, KnobChanged):
            self.turn_knob(event.knob_id, event.raw_value)
        elif isinstance(event, ButtonPressed):
            self.press_button(event.kind)
        else:
            raise TypeError(f"Unsupported controller event: {event!r}")

    def press_key(self, key_index: int) -> Point:
        point = self._trigger(key_index)
        self.recorder.capture(key_index)
        return point

    def turn_knob(self, knob_id: str, raw_value: float) -> None:
        name = self.params.set_knob(knob_id, raw_value)
        logger.debug("Knob %s (%s) -> %s", knob_id, name, self.params.get(name))

    def press_button(self, kind: ButtonKind) -> None:
        if kind is ButtonKind.RECORD:
            self.recorder.toggle()
        elif kind is ButtonKind.RESET:
            self.reset()

    def reset(self) -> None:
        """Throw away every point, recording, knob value and unplayed note."""
        self.recorder.stop()
        self.audio.clear()
        self._build()
        logger.info("Instrument reset")

    def advance_frame(self) -> None:
        self.simulation.tick(self.scheduler.now())
        self.frame_count += 1

    def frame(self) -> Dict[str, Any]:
        return build_frame(self, self.scheduler.now())

    def _trigger(self, key_index: int, playback_offset: Optional[float] = None) -> Point:
        point = self.simulation.spawn(key_index, playback_offset=playback_offset)
        volume, sustain, release = self.params.audio_levels()
        self.audio.play_note(key_to_pitch(key_index), volume, sustain, release)
        return point

    def _replay(self, event: RecordedEvent, offset: float) -> None:
        self._trigger(event.key_index, playback_offset=offset)
