"""
Geometric computation utilities over normalized hand landmarks.

This module handles:
- Pixel distances between landmarks in a given viewport
- Landmark-to-landmark angles and overlay rotation normalization
- Palm span and ring knuckle span measurement
"""

from typing import Any, Sequence, Tuple

import numpy as np

from .geometry_constants import (
    PALM_INDEX,
    PALM_PINKY,
    RING_MCP,
    RING_PIP,
    ROTATION_LIMIT_DEG,
)
from .landmarks import Viewport


def to_pixels(lm: Any, viewport: Viewport) -> Tuple[float, float]:
    """Scale a normalized landmark to pixel coordinates (no mirroring)."""
    return float(lm.x * viewport.width), float(lm.y * viewport.height)


def pixel_distance(a: Any, b: Any, viewport: Viewport) -> float:
    """
    2D Euclidean distance between two landmarks in pixels.

    Depth (z) is ignored; the measurement is a 2D-plane approximation.

    Args:
        a: First landmark (normalized x, y)
        b: Second landmark (normalized x, y)
        viewport: Frame size the landmarks are normalized against

    Returns:
        Distance in pixels
    """
    dx = (a.x - b.x) * viewport.width
    dy = (a.y - b.y) * viewport.height
    return float(np.hypot(dx, dy))


def angle_degrees(a: Any, b: Any) -> float:
    """Angle of the vector a->b in degrees, atan2 convention, unnormalized."""
    return float(np.degrees(np.arctan2(b.y - a.y, b.x - a.x)))


def normalize_rotation(angle_deg: float) -> float:
    """
    Fold an angle into [-90, 90].

    Overlay rotation is axis-symmetric for a band, so angles above 90 lose
    180 degrees and angles below -90 gain 180 degrees.
    """
    angle = float(angle_deg)
    while angle > ROTATION_LIMIT_DEG:
        angle -= 180.0
    while angle < -ROTATION_LIMIT_DEG:
        angle += 180.0
    return angle


def palm_width_px(landmarks: Sequence[Any], viewport: Viewport) -> float:
    """Span between index MCP and pinky MCP in pixels."""
    return pixel_distance(landmarks[PALM_INDEX], landmarks[PALM_PINKY], viewport)


def knuckle_span_px(landmarks: Sequence[Any], viewport: Viewport) -> float:
    """Span between ring MCP and ring PIP in pixels."""
    return pixel_distance(landmarks[RING_MCP], landmarks[RING_PIP], viewport)
