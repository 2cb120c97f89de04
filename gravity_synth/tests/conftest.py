import heapq
import itertools
from typing import Callable, List, Tuple

import pytest

from gravity_synth.instrument import Instrument
from gravity_synth.params import ParameterStore
from gravity_synth.simulation import Simulation


class ManualTimer:
    def __init__(self) -> None:
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Fake wall clock; timers only run when the test advances time."""

    def __init__(self, start: float = 0.0) -> None:
        self._now = start
        self._seq = itertools.count()
        self._queue: List[Tuple[float, int, ManualTimer, Callable[[], None]]] = []
        self.requested_delays: List[float] = []

    def now(self) -> float:
        return self._now

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> ManualTimer:
        self.requested_delays.append(delay_ms)
        timer = ManualTimer()
        due = self._now + max(0.0, delay_ms)
        heapq.heappush(self._queue, (due, next(self._seq), timer, callback))
        return timer

    @property
    def pending(self) -> int:
        return sum(1 for _, _, timer, _ in self._queue if not timer.cancelled)

    def advance(self, ms: float) -> None:
        """Move the clock forward, running every timer that falls due on the way."""
        target = self._now + ms
        while self._queue and self._queue[0][0] <= target:
            due, _, timer, callback = heapq.heappop(self._queue)
            self._now = due
            if not timer.cancelled:
                callback()
        self._now = target


class RecordingAudio:
    def __init__(self) -> None:
        self.notes: List[Tuple[str, float, float, float]] = []

    def play_note(self, pitch: str, volume: float, sustain: float, release: float) -> None:
        self.notes.append((pitch, volume, sustain, release))

    def clear(self) -> None:
        self.notes.clear()


@pytest.fixture()
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture()
def audio() -> RecordingAudio:
    return RecordingAudio()


@pytest.fixture()
def params() -> ParameterStore:
    return ParameterStore()


@pytest.fixture()
def simulation(params: ParameterStore) -> Simulation:
    return Simulation(params)


@pytest.fixture()
def instrument(scheduler: ManualScheduler, audio: RecordingAudio) -> Instrument:
    return Instrument(scheduler, audio)


class StickyScheduler(ManualScheduler):
    """Timers ignore cancel(), so stale callbacks still run when due."""

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> ManualTimer:
        timer = super().call_later(delay_ms, callback)
        timer.cancel = lambda: None
        return timer


@pytest.fixture()
def sticky_scheduler() -> StickyScheduler:
    return StickyScheduler()
