"""
Recorder - captures key presses with wall-clock timestamps and loops them
back on its own timer chain.

A single Record button cycles the session:

    Idle/Playing --press--> Recording   (buffer cleared, playback stopped)
    Recording    --press--> Playing     (buffer frozen, loop from event 0)

Playback tempo follows the ``note_speed`` knob live: every gap between two
recorded events is multiplied by the current speed factor when the next
firing is scheduled.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Tuple

from .clock import Scheduler, TimerHandle
from .params import ParameterStore

logger = logging.getLogger(__name__)

DEFAULT_MIN_DELAY_MS = 50.0


class RecorderMode(str, Enum):
    IDLE = "idle"
    RECORDING = "recording"
    PLAYING = "playing"


@dataclass(frozen=True)
class RecordedEvent:
    key_index: int
    timestamp: float


# Called with the event being replayed and its offset from the first event.
ReplayCallback = Callable[[RecordedEvent, float], None]


class Recorder:
    def __init__(
        self,
        scheduler: Scheduler,
        params: ParameterStore,
        on_replay: ReplayCallback,
        min_delay_ms: float = DEFAULT_MIN_DELAY_MS,
    ) -> None:
        if min_delay_ms <= 0:
            raise ValueError("min_delay_ms must be positive")
        self.scheduler = scheduler
        self.params = params
        self.on_replay = on_replay
        self.min_delay_ms = float(min_delay_ms)

        self._mode = RecorderMode.IDLE
        self._events: List[RecordedEvent] = []
        self._frozen: Tuple[RecordedEvent, ...] = ()
        self._cursor = 0
        self._session = 0  # bumped on every transition; stale timers compare against it
        self._pending: Optional[TimerHandle] = None

    @property
    def mode(self) -> RecorderMode:
        return self._mode

    @property
    def events(self) -> Tuple[RecordedEvent, ...]:
        if self._mode is RecorderMode.RECORDING:
            return tuple(self._events)
        return self._frozen

    @property
    def cursor(self) -> int:
        return self._cursor

    def toggle(self) -> RecorderMode:
        """Record button: start a new take, or finish the take and loop it."""
        if self._mode is RecorderMode.RECORDING:
            self._start_playback()
        else:
            self._start_recording()
        return self._mode

    def stop(self) -> None:
        """Return to Idle from any mode, cancelling pending playback."""
        self._enter(RecorderMode.IDLE)

    def capture(self, key_index: int) -> Optional[RecordedEvent]:
        """Append a live key press while recording; ignored otherwise."""
        if self._mode is not RecorderMode.RECORDING:
            return None
        event = RecordedEvent(key_index=key_index, timestamp=self.scheduler.now())
        self._events.append(event)
        return event

    def speed_factor(self) -> float:
        return self.params.effective("note_speed")

    def next_delay(self, cursor: int) -> float:
        """
        Delay before firing ``cursor``, given that ``cursor - 1`` just fired.
        The wrap from the last event back to the first reuses the last
        recorded gap. Non-positive delays are raised to ``min_delay_ms``.
        """
        events = self._frozen
        if len(events) < 2:
            return self.min_delay_ms
        if cursor == 0:
            gap = events[-1].timestamp - events[-2].timestamp
        else:
            gap = events[cursor].timestamp - events[cursor - 1].timestamp
        delay = gap * self.speed_factor()
        if delay <= 0:
            return self.min_delay_ms
        return delay

    def _enter(self, mode: RecorderMode) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None
        self._session += 1
        self._mode = mode

    def _start_recording(self) -> None:
        self._enter(RecorderMode.RECORDING)
        self._events = []
        self._frozen = ()
        self._cursor = 0
        logger.info("Recorder: recording")

    def _start_playback(self) -> None:
        self._enter(RecorderMode.PLAYING)
        self._frozen = tuple(self._events)
        self._cursor = 0
        logger.info("Recorder: playing back %d events", len(self._frozen))
        if not self._frozen:
            return
        self._schedule(0.0)

    def _schedule(self, delay_ms: float) -> None:
        session = self._session
        self._pending = self.scheduler.call_later(delay_ms, lambda: self._fire(session))

    def _fire(self, session: int) -> None:
        if session != self._session or self._mode is not RecorderMode.PLAYING:
            return
        self._pending = None
        events = self._frozen
        if not events:
            return

        event = events[self._cursor]
        offset = event.timestamp - events[0].timestamp

        self._cursor += 1
        if self._cursor == len(events):
            self._cursor = 0

        self.on_replay(event, offset)

        # The replay callback may have changed mode (e.g. a reset).
        if session == self._session and self._mode is RecorderMode.PLAYING:
            self._schedule(self.next_delay(self._cursor))
