"""
Constants for confidence scoring module.

This module contains thresholds and weights used in confidence calculation
for hand detection, tracking continuity, and measurement stability.
"""

# =============================================================================
# Detection Confidence Constants
# =============================================================================

# Score assumed for a present hand when the detector reports none
DETECTION_DEFAULT_SCORE = 1.0


# =============================================================================
# Stability Confidence Constants
# =============================================================================

# Coefficient of variation thresholds
# CV = std_dev / mean
STABILITY_CV_POOR = 0.08  # CV beyond this scores zero

# Median-mean consistency threshold (fractional difference)
STABILITY_CONSISTENCY_THRESHOLD = 0.05

# Outlier detection threshold (fraction of the median)
STABILITY_OUTLIER_TOLERANCE = 0.10

# Minimum samples before stability can score fully
STABILITY_MIN_SAMPLES = 5

# Diameter range (mm); clamped samples sit on the bounds
STABILITY_DIAMETER_MIN_MM = 14.0
STABILITY_DIAMETER_MAX_MM = 22.2

# Stability confidence component weights
STABILITY_WEIGHT_VARIANCE = 0.4      # Variance: 40%
STABILITY_WEIGHT_CONSISTENCY = 0.2   # Consistency: 20%
STABILITY_WEIGHT_OUTLIERS = 0.2      # Outliers: 20%
STABILITY_WEIGHT_RANGE = 0.2         # Range: 20%

# Range score values
STABILITY_RANGE_SCORE_INSIDE = 1.0   # Strictly inside the clamp range
STABILITY_RANGE_SCORE_BOUND = 0.5    # Pinned to a clamp bound


# =============================================================================
# Overall Confidence Constants
# =============================================================================

WEIGHT_DETECTION = 0.30   # Detection: 30%
WEIGHT_TRACKING = 0.20    # Tracking continuity: 20%
WEIGHT_STABILITY = 0.50   # Measurement stability: 50%

# Confidence level thresholds
CONFIDENCE_LEVEL_HIGH_THRESHOLD = 0.85   # > 0.85 = high
CONFIDENCE_LEVEL_MEDIUM_THRESHOLD = 0.6  # >= 0.6 = medium, < 0.6 = low
