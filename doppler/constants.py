#!/usr/bin/env python3
"""
Shared constants for the Doppler Simulator (SI units unless stated otherwise).

Keeping constants in one place helps ensure values are consistent across the
codebase and makes tuning easier.
"""

# Physical defaults
SOUND_SPEED = 343.0  # m/s, air at room temperature
EMITTED_FREQ = 4.0  # Hz; deliberately low so individual wavefronts stay visible

# Allowed configuration ranges (values outside are clamped)
SOUND_SPEED_RANGE = (SOUND_SPEED * 0.5, SOUND_SPEED * 2.0)  # m/s
FREQUENCY_RANGE = (EMITTED_FREQ * 0.5, EMITTED_FREQ * 2.0)  # Hz

# Time handling
REAL_TIME_FACTOR = 0.5  # model seconds per real second at normal speed
TIME_STEP_MAX = 0.05  # s; largest real frame step accepted, prevents jumps

# Kinematics
VELOCITY_DECAY = 0.5  # per-step factor applied to released bodies
MIN_VELOCITY_MAG = 0.01  # m/s; below this a body is considered at rest
KEY_VELOCITY = 100.0  # m/s; keyboard impulse
DRAG_GAIN = 4.0  # 1/s; drag velocity per meter of pointer offset
DRAG_MAX_SPEED = 150.0  # m/s

# Doppler clamp
FREQ_MIN = 0.1  # Hz
FREQ_MAX_FACTOR = 5.0  # observed frequency never exceeds this multiple of emitted
DENOMINATOR_EPSILON = 1e-6  # m/s

# Wavefronts
WAVE_MAX_AGE = 10.0  # s

# Waveform graphs
WAVEFORM_SIZE = 200  # samples per ring
WAVEFORM_AMPLITUDE = 1.0

# Time reversal
SNAPSHOT_CAPACITY = 600  # roughly ten seconds of frames at 60 FPS

# Motion trails
TRAIL_SAMPLE_INTERVAL = 0.05  # model seconds between trail points
TRAIL_MAX_POINTS = 100
TRAIL_MAX_AGE = 2.0  # model seconds

# Microphone probe
MIC_TOLERANCE = 3.0  # m; |radius - distance| window counted as a crossing
MIC_COOLDOWN = 0.05  # model seconds between detections
MIC_POSITION = (300.0, 450.0)  # m

# Initial positions (m)
SOURCE_POSITION = (100.0, 300.0)
OBSERVER_POSITION = (500.0, 300.0)

# Rendering (viewport)
VIEW_WIDTH = 1100
VIEW_HEIGHT = 800
BACKGROUND_COLOR = (10, 12, 18)
GRID_COLOR = (40, 45, 60)
GRID_FINE_COLOR = (30, 34, 50)
SOURCE_COLOR = (255, 110, 90)
OBSERVER_COLOR = (90, 170, 255)
WAVE_COLOR = (180, 180, 200)
MICROPHONE_COLOR = (200, 200, 200)
DETECTION_COLOR = (255, 255, 0)
SELECTION_COLOR = (255, 255, 0)
VELOCITY_VECTOR_COLOR = (255, 255, 255)
LINE_OF_SIGHT_COLOR = (90, 90, 110)
GRAPH_BACKGROUND = (20, 22, 32)
TEXT_COLOR = (200, 200, 200)

# Camera zoom bounds (meters-per-pixel)
DEFAULT_METERS_PER_PIXEL = 1.0
MIN_METERS_PER_PIXEL = 0.05
MAX_METERS_PER_PIXEL = 50.0

# Safety: avoid drawing outside reasonable integer pixel ranges
SAFE_COORD_LIMIT = 30000
