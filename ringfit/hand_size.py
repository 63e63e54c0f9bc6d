"""
Hand size classification.

This module handles:
- Gender and hand-size enums used to key the anatomical tables
- Palm-ratio based size bucketing
- Gender estimation from finger proportions
"""

import logging
from enum import Enum
from typing import Any, Dict, Sequence, Tuple

from .geometry_constants import FINGER_LANDMARKS
from .landmarks import Viewport
from .geometry import pixel_distance

logger = logging.getLogger(__name__)


class Gender(Enum):
    MALE = "male"
    FEMALE = "female"
    CHILD = "child"

    @classmethod
    def parse(cls, value: str) -> "Gender":
        """Parse a case-insensitive gender name; raises ValueError if unknown."""
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            choices = ", ".join(g.value for g in cls)
            raise ValueError(f"Unknown gender: {value!r}. Use one of: {choices}") from None


class HandSize(Enum):
    XS = "xs"
    S = "s"
    M = "m"
    L = "l"
    XL = "xl"

    @classmethod
    def parse(cls, value: str) -> "HandSize":
        """Parse a case-insensitive size name; raises ValueError if unknown."""
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            choices = ", ".join(s.value for s in cls)
            raise ValueError(f"Unknown hand size: {value!r}. Use one of: {choices}") from None


# Upper palm-ratio bounds (exclusive) for XS, S, M, L; anything above is XL
PALM_RATIO_THRESHOLDS: Dict[Gender, Tuple[float, float, float, float]] = {
    Gender.MALE: (0.20, 0.23, 0.26, 0.29),
    Gender.FEMALE: (0.17, 0.20, 0.23, 0.26),
    Gender.CHILD: (0.12, 0.15, 0.18, 0.21),
}

_BUCKETS = (HandSize.XS, HandSize.S, HandSize.M, HandSize.L)

# Index-to-ring length ratio below which a hand reads as male (2D:4D)
DIGIT_RATIO_MALE_THRESHOLD = 0.95


def palm_ratio(palm_width_px: float, viewport_width: float) -> float:
    """Palm width as a fraction of the viewport width."""
    if viewport_width <= 0:
        return 0.0
    return palm_width_px / viewport_width


def classify_hand_size(
    palm_width_px: float,
    viewport_width: float,
    gender: Gender,
) -> HandSize:
    """
    Classify a measured palm width into a size bucket.

    Args:
        palm_width_px: Index-MCP to pinky-MCP span in pixels
        viewport_width: Width of the frame in pixels
        gender: Selects the threshold row

    Returns:
        HandSize bucket; every ratio maps to a bucket
    """
    ratio = palm_ratio(palm_width_px, viewport_width)
    for bucket, upper in zip(_BUCKETS, PALM_RATIO_THRESHOLDS[gender]):
        if ratio < upper:
            return bucket
    return HandSize.XL


def estimate_gender(landmarks: Sequence[Any]) -> Gender:
    """
    Estimate gender from the index/ring finger length ratio (2D:4D).

    A coarse heuristic; CHILD is never inferred.
    """
    index = FINGER_LANDMARKS["index"]
    ring = FINGER_LANDMARKS["ring"]
    # Ratio is scale-free, so a unit viewport is enough
    unit = Viewport(1.0, 1.0)
    index_len = pixel_distance(landmarks[index[0]], landmarks[index[3]], unit)
    ring_len = pixel_distance(landmarks[ring[0]], landmarks[ring[3]], unit)

    if ring_len <= 0:
        return Gender.FEMALE

    ratio = index_len / ring_len
    logger.debug(f"Digit ratio 2D:4D = {ratio:.3f}")
    return Gender.MALE if ratio < DIGIT_RATIO_MALE_THRESHOLD else Gender.FEMALE
