"""Configuration constants for labyrinth."""

# Maze settings
DIMENSION = (15, 15)  # (width, height) in cells, normalized to odd values
MIN_DIMENSION = 5

# Transition clock settings
CLOCK_DELAY_S = 0.010  # delay before the first tick
CLOCK_PERIOD_S = 0.005  # fixed rate between ticks
SHUTDOWN_TIMEOUT_S = 1.0

# Navigation settings
ROTATION_STEP = 0.5  # degrees per tick
TRANSLATION_STEP = 0.01  # world units per tick, much smaller than rotation
MOVE_DISTANCE = 1.0  # one cell per move request
TURN_ANGLE = 90.0  # degrees per turn request

# Camera settings
CAMERA_HEIGHT = 0.0  # y of the camera while walking the maze
LOOK_DIRECTION_DECIMALS = 3  # facing vector is rounded to avoid cos/sin noise
FOV_Y = 45.0  # degrees
Z_NEAR = 0.1
Z_FAR = 100.0

# Minimap (top-down orthographic view)
MINIMAP_HEIGHT = 2.0
MINIMAP_BORDER_PERCENT = 3.0
MINIMAP_LANDSCAPE_FRACTION = 5  # width = surface width / 5
MINIMAP_PORTRAIT_FRACTION = 2  # height = surface height / 2

# Messages
EXIT_MESSAGE = "Congratulations, you found the exit!"

# Console log line layout
LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s | %(message)s"
LOG_DATEFMT = "%H:%M:%S"
