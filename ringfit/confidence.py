"""
Confidence scoring utilities.

This module handles:
- Hand detection confidence
- Tracking continuity confidence
- Measurement stability confidence over the sample window
- Aggregate confidence calculation

All thresholds and weights are imported from confidence_constants.py.
"""

import logging
from typing import Any, Dict, Optional, Sequence

import numpy as np

from .confidence_constants import (
    # Detection confidence constants
    DETECTION_DEFAULT_SCORE,
    # Stability confidence constants
    STABILITY_CV_POOR,
    STABILITY_CONSISTENCY_THRESHOLD,
    STABILITY_OUTLIER_TOLERANCE,
    STABILITY_MIN_SAMPLES,
    STABILITY_DIAMETER_MIN_MM,
    STABILITY_DIAMETER_MAX_MM,
    STABILITY_WEIGHT_VARIANCE,
    STABILITY_WEIGHT_CONSISTENCY,
    STABILITY_WEIGHT_OUTLIERS,
    STABILITY_WEIGHT_RANGE,
    STABILITY_RANGE_SCORE_INSIDE,
    STABILITY_RANGE_SCORE_BOUND,
    # Overall confidence constants
    WEIGHT_DETECTION,
    WEIGHT_TRACKING,
    WEIGHT_STABILITY,
    CONFIDENCE_LEVEL_HIGH_THRESHOLD,
    CONFIDENCE_LEVEL_MEDIUM_THRESHOLD,
)

logger = logging.getLogger(__name__)


def compute_detection_confidence(
    hand_present: bool,
    detection_score: Optional[float] = None,
) -> float:
    """
    Compute confidence score from hand detection.

    Args:
        hand_present: Whether the frame carried a complete hand
        detection_score: Detector score if the collaborator reports one

    Returns:
        Detection confidence score [0, 1]
    """
    if not hand_present:
        return 0.0
    if detection_score is None:
        return DETECTION_DEFAULT_SCORE
    return float(np.clip(detection_score, 0, 1))


def compute_tracking_confidence(visible_frames: int, total_frames: int) -> float:
    """Fraction of processed frames in which the hand was visible."""
    if total_frames <= 0:
        return 0.0
    return float(np.clip(visible_frames / total_frames, 0, 1))


def compute_stability_confidence(samples: Sequence[float]) -> float:
    """
    Compute confidence score from measurement stability.

    Uses constants:
    - STABILITY_CV_POOR: Coefficient of variation threshold (0.08)
    - STABILITY_CONSISTENCY_THRESHOLD: Median-mean difference threshold (0.05)
    - STABILITY_OUTLIER_TOLERANCE: Outlier band around the median (10%)
    - STABILITY_MIN_SAMPLES: Samples needed for a full score (5)
    - STABILITY_WEIGHT_*: Component weights (variance: 40%, consistency: 20%,
      outliers: 20%, range: 20%)

    Args:
        samples: Raw diameter samples in mm (sentinel zeros excluded)

    Returns:
        Stability confidence score [0, 1]
    """
    values = np.asarray(list(samples), dtype=np.float64)

    if len(values) == 0:
        return 0.0

    median = float(np.median(values))
    mean = float(np.mean(values))
    std = float(np.std(values))

    # 1. Variance score (lower variance = higher confidence)
    coefficient_of_variation = std / (mean + 1e-8)
    variance_score = max(0, 1.0 - coefficient_of_variation / STABILITY_CV_POOR)

    # 2. Median-Mean consistency
    median_mean_diff = abs(median - mean) / (median + 1e-8)
    consistency_score = max(0, 1.0 - median_mean_diff / STABILITY_CONSISTENCY_THRESHOLD)

    # 3. Outlier ratio (samples far from median)
    outliers = np.sum(np.abs(values - median) > STABILITY_OUTLIER_TOLERANCE * median)
    outlier_score = max(0, 1.0 - outliers / len(values))

    # 4. Clamp bound check: a median pinned to a bound means clamped input
    if STABILITY_DIAMETER_MIN_MM < median < STABILITY_DIAMETER_MAX_MM:
        range_score = STABILITY_RANGE_SCORE_INSIDE
    else:
        range_score = STABILITY_RANGE_SCORE_BOUND

    stability_conf = (
        STABILITY_WEIGHT_VARIANCE * variance_score +
        STABILITY_WEIGHT_CONSISTENCY * consistency_score +
        STABILITY_WEIGHT_OUTLIERS * outlier_score +
        STABILITY_WEIGHT_RANGE * range_score
    )

    # Few samples cannot establish stability yet
    fill = min(1.0, len(values) / STABILITY_MIN_SAMPLES)

    return float(np.clip(stability_conf * fill, 0, 1))


def confidence_level(overall: float) -> str:
    if overall > CONFIDENCE_LEVEL_HIGH_THRESHOLD:
        return "high"
    if overall >= CONFIDENCE_LEVEL_MEDIUM_THRESHOLD:
        return "medium"
    return "low"


def compute_overall_confidence(
    detection_confidence: float,
    tracking_confidence: float,
    stability_confidence: float,
) -> Dict[str, Any]:
    """
    Compute overall confidence by combining component scores.

    Returns:
        Dictionary containing:
        - overall: Overall confidence [0, 1]
        - detection: Detection component score
        - tracking: Tracking component score
        - stability: Stability component score
        - level: "high", "medium", or "low"
    """
    overall = (
        WEIGHT_DETECTION * detection_confidence +
        WEIGHT_TRACKING * tracking_confidence +
        WEIGHT_STABILITY * stability_confidence
    )
    overall = float(np.clip(overall, 0, 1))

    return {
        "overall": overall,
        "detection": float(detection_confidence),
        "tracking": float(tracking_confidence),
        "stability": float(stability_confidence),
        "level": confidence_level(overall),
    }
