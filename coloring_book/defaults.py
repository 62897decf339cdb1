"""
ColorBook shared defaults.
"""

# Line art binarization
DEFAULT_THRESHOLD = 200
DEFAULT_DILATION_RADIUS = 1
EDGE_MAGNITUDE_THRESHOLD = 50.0

# Flood fill
DEFAULT_TOLERANCE = 32
ERASE_COLOR = (255, 255, 255)

# Viewport
MIN_ZOOM = 0.1
MAX_ZOOM = 5.0
ZOOM_STEP = 0.1
FIT_MAX_ZOOM = 0.9
FIT_PADDING = 40

# Tools
DEFAULT_BRUSH_WIDTH = 10
DEFAULT_COLOR = "#000000"

# Palette extraction
DEFAULT_PALETTE_SIZE = 8
PALETTE_SAMPLE_STEP = 10
PALETTE_QUANT = 32

# Image fetching
HTTP_TIMEOUT_S = 15
