"""
Controller input: raw MIDI messages in, typed instrument events out.

The controller sends
- note-on for notes 48..72 from its 25 keys,
- note-on 44 / 45 from the Record / Reset buttons,
- control change 1..8 from its knobs (g1..g4 drive the motion, a1..a4 the
  sound).

Anything else decodes to ``None`` and is ignored. ``MidiInput`` polls a port
through mido; with no device attached it stays in a degraded, disconnected
state instead of failing, so the instrument keeps running on other input.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Optional, Sequence, Union

import mido

from .constants import KEY_COUNT

logger = logging.getLogger(__name__)

NOTE_ON = 0x90
CONTROL_CHANGE = 0xB0
FIRST_KEY_NOTE = 48
RECORD_NOTE = 44
RESET_NOTE = 45
KNOB_CONTROLS = {1: "g1", 2: "g2", 3: "g3", 4: "g4", 5: "a1", 6: "a2", 7: "a3", 8: "a4"}


class ButtonKind(str, Enum):
    RECORD = "record"
    RESET = "reset"


@dataclass(frozen=True)
class KeyPressed:
    index: int
    velocity: int = 127


@dataclass(frozen=True)
class KnobChanged:
    knob_id: str
    raw_value: int


@dataclass(frozen=True)
class ButtonPressed:
    kind: ButtonKind


ControllerEvent = Union[KeyPressed, KnobChanged, ButtonPressed]


def decode_message(data: Sequence[int]) -> Optional[ControllerEvent]:
    """
    Decode one raw [status, data1, data2] message. Any channel is accepted;
    anything that is not a three-byte message (clock, SysEx) decodes to None.
    """
    if len(data) != 3:
        return None
    status, data1, data2 = int(data[0]), int(data[1]), int(data[2])
    kind = status & 0xF0

    if kind == NOTE_ON:
        # Note-on with velocity 0 is a note-off in running-status streams.
        if data2 == 0:
            return None
        if FIRST_KEY_NOTE <= data1 < FIRST_KEY_NOTE + KEY_COUNT:
            return KeyPressed(index=data1 - FIRST_KEY_NOTE, velocity=data2)
        if data1 == RECORD_NOTE:
            return ButtonPressed(ButtonKind.RECORD)
        if data1 == RESET_NOTE:
            return ButtonPressed(ButtonKind.RESET)
        return None

    if kind == CONTROL_CHANGE:
        knob_id = KNOB_CONTROLS.get(data1)
        if knob_id is None:
            return None
        return KnobChanged(knob_id=knob_id, raw_value=data2)

    return None


class MidiInput:
    """Non-blocking MIDI input, polled once per frame."""

    def __init__(self, port_name: Optional[str] = None) -> None:
        self.port_name = port_name
        self._inport = None

    def __repr__(self):
        return f"MidiInput(port_name={self.port_name}, connected={self.connected})"

    @property
    def connected(self) -> bool:
        return self._inport is not None

    def open(self) -> bool:
        """
        Open the first input whose name contains ``port_name`` (or the first
        input at all). Returns False and stays degraded when none is found.
        """
        try:
            names = mido.get_input_names()
        except Exception as exc:  # rtmidi raises its own error types per platform
            logger.warning("MIDI backend unavailable: %s", exc)
            return False

        matches = [n for n in names if self.port_name is None or self.port_name in n]
        if not matches:
            logger.warning("No MIDI input devices found. Available: %s", names)
            return False

        try:
            self._inport = mido.open_input(matches[0])
        except OSError as exc:
            logger.warning("Could not open MIDI input %r: %s", matches[0], exc)
            return False
        self.port_name = matches[0]
        logger.info("Opened MIDI input %r", self.port_name)
        return True

    def poll(self) -> Iterator[ControllerEvent]:
        if self._inport is None:
            return
        for msg in self._inport.iter_pending():
            event = decode_message(msg.bytes())
            if event is None:
                logger.debug("Ignoring MIDI message %s", msg)
                continue
            yield event

    def close(self) -> None:
        if self._inport is not None:
            self._inport.close()
            self._inport = None
