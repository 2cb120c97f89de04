from .events import note_on_event
from .note_mapping import key_to_midi, key_to_pitch, midi_to_pitch, pitch_to_midi

__all__ = ["note_on_event", "key_to_midi", "key_to_pitch", "midi_to_pitch", "pitch_to_midi"]
