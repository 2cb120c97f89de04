import math

# Canvas the frontend draws on (square, scene units)
CANVAS_SIZE = 600
SPAWN_RADIUS_DIVISOR = 2.2  # spawn radius = canvas_size / 2.2

# Controller keyboard
KEY_COUNT = 25
TWO_PI = 2 * math.pi

# Raw controller range
RAW_MIN = 0
RAW_MAX = 127

# Knob scales for the nested speed laws
ANGLE_SCALE = 2000
RADIUS_SCALE = 20
ROTATION_SCALE = 200

# Point lifecycle
TRAIL_LENGTH = 5
ORBIT_DWELL_MS = 10000.0
FADE_MS = 3000.0

# Rendering hints for the frontend
POINT_DIAMETER = 15
POINT_RGB = (249, 166)  # blue channel depends on the key
TRAIL_MAX_ALPHA = 100
INDICATOR_RANGE_DEG = (-150.0, 150.0)
GLOW_RATE = 0.03
