"""
Shared visualization constants for debug output.

This module provides centralized configuration for fonts, colors, sizes, and
layout used by the debug overlay in visualization.py.

Example usage:
    from ringfit.viz_constants import Color, FontScale, FONT_FACE

    cv2.putText(img, "Ring", (20, 100), FONT_FACE,
                FontScale.BODY, Color.WHITE, 2, cv2.LINE_AA)
"""

import cv2

# ============================================================================
# FONT SETTINGS
# ============================================================================

# Font face used across all visualizations
FONT_FACE = cv2.FONT_HERSHEY_SIMPLEX


class FontScale:
    """Font scale constants at the 1200px reference height."""
    BODY = 1.5           # Result lines


class FontThickness:
    """Font thickness (stroke width) for text rendering."""
    BODY = 2


# ============================================================================
# COLORS (BGR format for OpenCV)
# ============================================================================

class Color:
    """
    Standard colors used across all visualizations.

    All colors in BGR format (Blue, Green, Red) as required by OpenCV.
    """
    WHITE = (255, 255, 255)
    BLACK = (0, 0, 0)
    RED = (0, 0, 255)
    GREEN = (0, 255, 0)
    CYAN = (255, 255, 0)
    YELLOW = (0, 255, 255)
    MAGENTA = (255, 0, 255)
    ORANGE = (0, 128, 255)

    # Semantic colors
    LANDMARK = WHITE        # Hand skeleton points
    PALM_SPAN = CYAN        # Index MCP to pinky MCP
    KNUCKLE_SPAN = ORANGE   # Ring MCP to ring PIP
    OVERLAY = MAGENTA       # Overlay footprint
    OVERLAY_CLAMPED = YELLOW

    TEXT_PRIMARY = WHITE
    TEXT_SUCCESS = GREEN
    TEXT_ERROR = RED
    TEXT_WARNING = YELLOW


# ============================================================================
# DRAWING SIZES
# ============================================================================

class Size:
    """Size constants for drawing geometric elements, in pixels."""
    POINT_RADIUS = 5
    JOINT_RADIUS = 10
    LINE_THICK = 4


# ============================================================================
# LAYOUT CONSTANTS
# ============================================================================

class Layout:
    """Layout positioning constants for the result text block."""
    RESULT_TEXT_Y_START = 60
    RESULT_TEXT_LINE_HEIGHT = 55
    RESULT_TEXT_X_OFFSET = 40
    RESULT_PANEL_WIDTH = 900


# Reference image height for font scaling
FONT_REFERENCE_HEIGHT = 1200


def get_scaled_font_size(base_scale: float, image_height: int,
                         reference_height: int = FONT_REFERENCE_HEIGHT,
                         min_scale: float = 0.5) -> float:
    """
    Scale font size based on image dimensions for consistent appearance.

    Example:
        # For a 2400px tall image, double the font size
        scale = get_scaled_font_size(FontScale.BODY, 2400)
        # scale = 1.5 * 2 = 3.0
    """
    scale_factor = image_height / reference_height
    return max(base_scale * scale_factor, min_scale)
