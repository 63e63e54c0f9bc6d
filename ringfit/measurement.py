"""
Per-frame finger diameter estimation.

This module handles:
- Ring knuckle span measurement
- Conversion to millimeters through the active calibration
- Clamping to the plausible ring-finger range
"""

import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence, Tuple

import numpy as np

from .calibration import (
    Calibration,
    CalibrationMethod,
    HandProfile,
    ReferenceScale,
    calibrate,
)
from .geometry import knuckle_span_px, to_pixels
from .geometry_constants import (
    KNUCKLE_TO_WIDTH_FACTOR,
    MAX_DIAMETER_MM,
    MIN_DIAMETER_MM,
    NO_MEASUREMENT,
    RING_MCP,
    RING_PIP,
)
from .hand_size import HandSize
from .landmarks import Viewport, has_full_hand

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DiameterEstimate:
    """
    One frame's raw measurement.

    diameter_mm is the MeasurementSample: in [14.0, 22.2], or exactly 0.0
    when the frame gave no usable measurement.
    """
    diameter_mm: float
    circumference_mm: float
    method: CalibrationMethod
    hand_size: Optional[HandSize] = None
    px_per_mm: Optional[float] = None
    coordinates: Tuple[Dict[str, Any], ...] = ()

    @property
    def usable(self) -> bool:
        return self.diameter_mm > NO_MEASUREMENT

    def to_dict(self) -> Dict[str, Any]:
        return {
            "diameter_mm": round(self.diameter_mm, 3),
            "circumference_mm": round(self.circumference_mm, 3),
            "method": self.method,
            "hand_size": self.hand_size.value if self.hand_size else None,
            "px_per_mm": round(self.px_per_mm, 4) if self.px_per_mm else None,
            "coordinates": list(self.coordinates),
        }


def clamp_diameter(diameter_mm: float) -> float:
    """Clamp to the plausible adult ring-finger diameter range."""
    return float(np.clip(diameter_mm, MIN_DIAMETER_MM, MAX_DIAMETER_MM))


def _ring_coordinates(landmarks: Sequence[Any], viewport: Viewport) -> Tuple[Dict[str, Any], ...]:
    coords = []
    for idx in (RING_MCP, RING_PIP):
        lm = landmarks[idx]
        x, y = to_pixels(lm, viewport)
        coords.append({"x": x, "y": y, "z": getattr(lm, "z", None)})
    return tuple(coords)


def degenerate_estimate(method: CalibrationMethod) -> DiameterEstimate:
    return DiameterEstimate(NO_MEASUREMENT, NO_MEASUREMENT, method)


def diameter_from_calibration(
    landmarks: Sequence[Any],
    viewport: Viewport,
    calibration: Calibration,
) -> DiameterEstimate:
    """
    Convert the ring knuckle span to a clamped diameter with a given calibration.

    Args:
        landmarks: 21-point hand skeleton (normalized)
        viewport: Frame size in pixels
        calibration: Output from calibrate()

    Returns:
        DiameterEstimate; diameter 0.0 if the calibration is invalid
    """
    if not calibration.valid or not has_full_hand(landmarks):
        return degenerate_estimate(calibration.method)

    span_px = knuckle_span_px(landmarks, viewport)
    finger_width_px = span_px * KNUCKLE_TO_WIDTH_FACTOR
    raw_mm = finger_width_px * calibration.mm_per_px
    diameter_mm = clamp_diameter(raw_mm)

    if diameter_mm != raw_mm:
        logger.debug(f"Diameter {raw_mm:.2f}mm clamped to {diameter_mm:.2f}mm")

    return DiameterEstimate(
        diameter_mm=diameter_mm,
        circumference_mm=diameter_mm * math.pi,
        method=calibration.method,
        hand_size=calibration.hand_size,
        px_per_mm=calibration.px_per_mm,
        coordinates=_ring_coordinates(landmarks, viewport),
    )


def estimate_diameter(
    landmarks: Optional[Sequence[Any]],
    viewport: Viewport,
    reference: Optional[ReferenceScale] = None,
    profile: Optional[HandProfile] = None,
) -> DiameterEstimate:
    """
    Estimate the ring-finger diameter for one frame.

    Uses the reference scale when supplied, otherwise the anatomical palm
    estimate for the profile. Never raises for routine failures: missing
    landmarks or a degenerate palm give the 0.0 sentinel.

    Args:
        landmarks: 21-point hand skeleton, or None on a detector miss
        viewport: Frame size in pixels
        reference: Optional user calibration anchor
        profile: Optional hand profile for anatomical calibration

    Returns:
        DiameterEstimate with the sample, method, and detected hand size
    """
    method: CalibrationMethod = "reference" if reference is not None else "landmarks"
    if not has_full_hand(landmarks):
        return degenerate_estimate(method)

    calibration = calibrate(landmarks, viewport, reference=reference, profile=profile)
    return diameter_from_calibration(landmarks, viewport, calibration)
