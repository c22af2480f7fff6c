# config.py
"""
Application configuration constants for PhotoGrid
"""

# Template defaults
DEFAULT_TEMPLATE = "2x2"

# Per-cell zoom bounds (multiplier on top of the cover fit)
MIN_CELL_SCALE = 1.0
MAX_CELL_SCALE = 4.0

# Pinch distances below this (device px) cannot anchor a zoom ratio
MIN_PINCH_DISTANCE = 1.0

# Mouse wheel zoom step per 120 units of angle delta
WHEEL_ZOOM_STEP = 1.1

# Interactive stage
PREVIEW_MIN_SIZE = 360
PREVIEW_PADDING = 12
PREVIEW_GAP = 8
PREVIEW_CORNER_RADIUS = 12

# Export surface (square, px)
EXPORT_SIZE = 2048
EXPORT_PADDING = 40
EXPORT_GAP = 24
EXPORT_CORNER_RADIUS = 24
EXPORT_BORDER_WIDTH = 2
EXPORT_FILENAME_PREFIX = "collage"
EXPORT_FORMAT = "png"

# Pan units are converted to export pixels relative to this preview cell
# size when the real preview stage size is unknown.
REFERENCE_PREVIEW_CELL_SIZE = 260

# Colors (RGBA)
BACKGROUND_COLOR = (250, 250, 250, 255)
BORDER_COLOR = (0, 0, 0, 20)
PLACEHOLDER_COLOR = (238, 238, 238, 255)
PLACEHOLDER_TEXT_COLOR = (160, 160, 160, 255)
SELECTION_COLOR = (29, 78, 216, 255)

# Supported image formats
SUPPORTED_IMAGE_FORMATS = ['png', 'jpg', 'jpeg', 'bmp', 'webp', 'gif', 'tiff']

# Decoded photos are downscaled so neither side exceeds this
MAX_IMAGE_DIMENSION = 4000

# Parallel decodes per load batch
DECODE_WORKERS = 4

# Log file rotation
LOG_FILENAME = "photogrid.log"
LOG_MAX_BYTES = 1_048_576
LOG_BACKUP_COUNT = 5

# Photos are downscaled to this size for on-screen painting only
PREVIEW_IMAGE_MAX_DIMENSION = 1600
