from ..constants import KEY_COUNT
from .constants import BASE_MIDI, NOTE_NAMES


def key_to_midi(key_index: int) -> int:
    """
    Map a controller key (0 = leftmost) to a MIDI note. The 25 keys span two
    chromatic octaves upward from middle C.
    """
    if not 0 <= key_index < KEY_COUNT:
        raise ValueError(f"key index must be in [0, {KEY_COUNT - 1}], got {key_index}")
    return BASE_MIDI + key_index


def midi_to_pitch(midi: int) -> str:
    """Scientific pitch name for a MIDI note, e.g. 60 -> 'C4', 70 -> 'A#4'."""
    if not 0 <= midi <= 127:
        raise ValueError(f"MIDI note out of range: {midi}")
    octave = midi // 12 - 1
    return f"{NOTE_NAMES[midi % 12]}{octave}"


def key_to_pitch(key_index: int) -> str:
    return midi_to_pitch(key_to_midi(key_index))


_PITCH_TO_MIDI = {midi_to_pitch(midi): midi for midi in range(128)}


def pitch_to_midi(pitch: str) -> int:
    """Inverse of ``midi_to_pitch`` for names like 'C4' or 'F#5'."""
    try:
        return _PITCH_TO_MIDI[pitch]
    except KeyError:
        raise ValueError(f"Unknown pitch name: {pitch}") from None
