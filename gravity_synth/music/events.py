from typing import Any, Dict


def note_on_event(
    t: float,
    pitch: str,
    midi: int,
    volume: float,
    sustain: float,
    release: float,
) -> Dict[str, Any]:
    """
    Payload for one fired note. The frontend synth plays it as-is; ``t`` is
    the wall-clock millisecond timestamp the note was triggered at.
    """
    return {
        "t": t,
        "type": "note_on",
        "pitch": pitch,
        "midi": midi,
        "volume": volume,
        "sustain": sustain,
        "release": release,
    }
