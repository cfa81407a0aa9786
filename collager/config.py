# config.py
"""
Application configuration constants for Techo Collager
"""
import os

# Transform limits
MAX_SCALE = 5.0                  # Nominal zoom cap; cover-fit minimum wins above it
ZOOM_STEP_RATIO = 0.1            # Toolbar step, as a fraction of the cover-fit scale
WHEEL_ZOOM_FACTOR = 0.001        # Per wheel angle unit, as a fraction of the cover-fit scale
WHEEL_IDLE_MS = 300              # Wheel zoom is committed to history after this idle time

# Screen geometry
MM_TO_PX = 3.78                  # CSS-style approximation used on screen
VIEWPORT_PADDING = 80
MAX_VIEWPORT_SCALE = 1.2
CELL_BORDER_PT = 0.2
CELL_BORDER_COLOR = (211, 211, 211)

# Print settings
PRINT_DPI = 300

# History settings
HISTORY_LIMIT = None             # None keeps every edit
COALESCE_GESTURES = True         # One history entry per drag / wheel burst

# Startup preset (environment override)
DEFAULT_PRESET_ID = os.environ.get("COLLAGER_PRESET", "POLAROID_A4")

# Supported image formats
SUPPORTED_IMAGE_FORMATS = ['png', 'jpg', 'jpeg', 'bmp', 'webp', 'gif', 'tiff']

# Image dimension limits
MAX_IMAGE_DIMENSION = 20000      # Reject decoded images larger than this on either side

# Performance monitor settings
MEMORY_THRESHOLD_BYTES = 500 << 20  # 500 MB
MEMORY_CLEANUP_INTERVAL_SECS = 300  # 5 minutes in seconds
MEMORY_TRIM_KEEP = 20               # Undo entries kept when trimming under pressure

# Logging
LOG_FILE_NAME = "collager.log"
LOG_MAX_BYTES = 1_048_576
LOG_BACKUP_COUNT = 5

# Shortcuts
OPEN_SHORTCUT = "Ctrl+O"
PRINT_SHORTCUT = "Ctrl+P"
