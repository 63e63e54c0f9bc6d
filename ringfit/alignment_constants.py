"""
Constants for overlay alignment.

This module contains the per-channel smoothing weights, deadzone
thresholds, and scale limits used to turn raw per-frame landmarks into a
steady overlay transform.
"""

# =============================================================================
# Exponential Smoothing Weights (fraction of the raw value blended per frame)
# =============================================================================

POSITION_ALPHA = 0.22   # Tracks slightly faster to avoid visible lag
ROTATION_ALPHA = 0.18
SCALE_ALPHA = 0.15


# =============================================================================
# Deadzone Thresholds (minimum change before a new value is committed)
# =============================================================================

POSITION_DEADZONE_PX = 1.5
ROTATION_DEADZONE_DEG = 0.8
SCALE_DEADZONE_PX = 0.8


# =============================================================================
# Scale Constants
# =============================================================================

# Smallest overlay footprint (pixels)
MIN_SCALE_PX = 24.0

# Fallback px/mm divisor when the palm span collapses: viewport width / 300
FALLBACK_VIEWPORT_MM = 300.0

# Palm spans at or below this cannot give a usable px/mm (pixels)
MIN_ALIGNMENT_PALM_PX = 1.0

# Overlay size before the first visible frame: max(40, diameter * 3)
HIDDEN_MIN_SCALE_PX = 40.0
HIDDEN_SCALE_PER_MM = 3.0

# Diameter used when nothing better is known (mm)
DEFAULT_TARGET_DIAMETER_MM = 18.0


# =============================================================================
# Posture Heuristics
# =============================================================================

# Finger axis tilt beyond this counts as slanted (degrees)
SLANTED_ANGLE_DEG = 20.0

# Wrist-to-middle-MCP vertical span below this suggests a side view (normalized)
SIDE_VIEW_SPAN = 0.25
