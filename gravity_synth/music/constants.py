# Key 0 of the controller plays middle C
BASE_MIDI = 60  # C4

# Chromatic note names, MIDI pitch class order
NOTE_NAMES = ("C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B")

# Effective range of the volume / sustain / release knobs
LEVEL_RANGE = (0.1, 1.0)

# Playback delay multiplier: knob at 0 plays slower, at 127 faster
SPEED_FACTOR_RANGE = (1.5, 0.5)
