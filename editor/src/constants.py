"""
Profile Frame Studio - Constants and Configuration

This module contains all constant values used throughout the application:
- Preview and output geometry
- Scale constraints and control step sizes
- Gesture tuning
- Camera and export settings
"""

# ======================================================================
# GEOMETRY
# ======================================================================
# Preview space: the on-screen circular viewport, in widget pixels.
# Output space: the exported square raster, in image pixels.
# Translation is always stored in preview space and rescaled by
# OUTPUT_SIZE / PREVIEW_DIAMETER when rendering the output.

PREVIEW_DIAMETER = 288
OUTPUT_SIZE = 1080

# Border drawn around the preview circle (pointer coordinates are offset by it)
PREVIEW_BORDER_WIDTH = 4

# Overlay drawn over the live preview so the final framing stays visible
OVERLAY_PREVIEW_OPACITY = 0.6

# Supersampling factor for the antialiased circular clip mask
CLIP_MASK_SUPERSAMPLE = 4

# ======================================================================
# SCALE CONSTRAINTS
# ======================================================================

SCALE_MIN = 0.5
SCALE_MAX = 3.0

DEFAULT_SCALE = 1.0
DEFAULT_ROTATION = 0.0

# ======================================================================
# CONTROL STEPS
# ======================================================================

ZOOM_STEP = 0.1      # Zoom in/out buttons (additive)
ROTATE_STEP = 5.0    # Rotate buttons (degrees)

# Mouse wheel zoom (multiplicative, applied once per wheel event)
WHEEL_ZOOM_OUT = 0.9
WHEEL_ZOOM_IN = 1.1

# Absolute size presets, in UI order
SIZE_PRESETS = {
    'small': 0.7,
    'fit': 1.0,
    'large': 1.3,
}

# Preset highlight thresholds
PRESET_SMALL_BELOW = 0.8
PRESET_FIT_TOLERANCE = 0.1
PRESET_LARGE_ABOVE = 1.2

# ======================================================================
# CAMERA
# ======================================================================

CAMERA_DEVICE_INDEX = 0          # User-facing camera on most laptops
CAMERA_REQUEST_WIDTH = 1080
CAMERA_REQUEST_HEIGHT = 1080
CAMERA_PREVIEW_INTERVAL_MS = 33  # ~30 fps live preview refresh

# ======================================================================
# CAPTURE & EXPORT
# ======================================================================

FLASH_DURATION_MS = 150
EXPORT_FORMAT = 'PNG'
EXPORT_FILENAME_PATTERN = 'profile-{timestamp}.png'

DEFAULT_TEMPLATE_NAME = 'facebook.png'

# ======================================================================
# UI
# ======================================================================

RESULT_DISPLAY_SIZE = 256
WINDOW_BACKGROUND = '#18181b'
