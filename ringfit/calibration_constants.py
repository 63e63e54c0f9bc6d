"""
Constants for pixel-to-millimeter calibration.

This module contains the anatomical palm-width estimates used when no
reference object is available, and the validity limits for calibration.
"""

from .hand_size import Gender, HandSize

# =============================================================================
# Anatomical Calibration Constants
# =============================================================================

# Estimated palm width (index MCP to pinky MCP) in mm per gender and size
PALM_WIDTH_MM = {
    Gender.MALE: {
        HandSize.XS: 76.0,
        HandSize.S: 80.0,
        HandSize.M: 84.0,
        HandSize.L: 88.0,
        HandSize.XL: 92.0,
    },
    Gender.FEMALE: {
        HandSize.XS: 68.0,
        HandSize.S: 72.0,
        HandSize.M: 76.0,
        HandSize.L: 80.0,
        HandSize.XL: 84.0,
    },
    Gender.CHILD: {
        HandSize.XS: 52.0,
        HandSize.S: 56.0,
        HandSize.M: 60.0,
        HandSize.L: 64.0,
        HandSize.XL: 68.0,
    },
}

# Population average palm width, used without a hand profile
AVERAGE_PALM_WIDTH_MM = 79.0

# Palm spans below this suggest an occluded or degenerate hand (pixels)
MIN_PALM_WIDTH_PX = 10.0


# =============================================================================
# Reference Calibration Constants
# =============================================================================

# Lower bound for the measured reference span (pixels)
MIN_REFERENCE_PX = 1.0

# ISO/IEC 7810 ID-1 card width, the usual reference object (mm)
CREDIT_CARD_WIDTH_MM = 85.60
