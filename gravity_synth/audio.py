"""
Audio trigger seam. The engine only ever fires notes; synthesis happens in
the frontend, which drains the queued note events.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Any, Callable, Deque, Dict, List, Protocol

from .music import note_on_event, pitch_to_midi

logger = logging.getLogger(__name__)


class AudioTrigger(Protocol):
    def play_note(self, pitch: str, volume: float, sustain: float, release: float) -> None:
        ...

    def clear(self) -> None:
        """Forget notes fired but not yet played."""
        ...


class NoteQueue:
    """
    Fire-and-forget trigger that buffers ``note_on`` payloads until the
    frontend collects them. When nobody drains the queue the oldest notes are
    dropped once ``maxlen`` is reached.
    """

    def __init__(self, clock: Callable[[], float], maxlen: int = 256) -> None:
        self._clock = clock
        self._notes: Deque[Dict[str, Any]] = deque(maxlen=maxlen)

    def play_note(self, pitch: str, volume: float, sustain: float, release: float) -> None:
        try:
            midi = pitch_to_midi(pitch)
        except ValueError:
            logger.warning("Dropping note with unknown pitch %r", pitch)
            return
        self._notes.append(
            note_on_event(self._clock(), pitch, midi, volume, sustain, release)
        )

    def drain(self) -> List[Dict[str, Any]]:
        notes = list(self._notes)
        self._notes.clear()
        return notes

    def clear(self) -> None:
        self._notes.clear()

    def __len__(self) -> int:
        return len(self._notes)


__all__ = ["AudioTrigger", "NoteQueue"]
