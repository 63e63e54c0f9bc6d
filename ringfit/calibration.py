"""
Pixel-to-millimeter calibration.

This module handles:
- Reference-object calibration (known length mapped to a measured span)
- Anatomical calibration from palm width and a hand profile
- Automatic fallback from reference to anatomical mode
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional, Sequence, Literal

from .calibration_constants import (
    AVERAGE_PALM_WIDTH_MM,
    MIN_PALM_WIDTH_PX,
    MIN_REFERENCE_PX,
    PALM_WIDTH_MM,
)
from .geometry import palm_width_px
from .hand_size import Gender, HandSize, classify_hand_size
from .landmarks import Viewport, has_full_hand

logger = logging.getLogger(__name__)

CalibrationMethod = Literal["reference", "landmarks"]


@dataclass(frozen=True)
class ReferenceScale:
    """A known physical length (mm) and the pixel span it was measured at."""
    known_mm: float
    measured_px: float


@dataclass(frozen=True)
class HandProfile:
    """Selects an anatomical palm-width estimate; size None means classify."""
    gender: Gender
    size: Optional[HandSize] = None


@dataclass(frozen=True)
class Calibration:
    """
    Result of a calibration step.

    ``valid`` is False when the inputs cannot support a conversion; the
    conversion factors are 0.0 in that case.
    """
    px_per_mm: float
    mm_per_px: float
    method: CalibrationMethod
    hand_size: Optional[HandSize] = None
    palm_width_px: Optional[float] = None
    valid: bool = True


def compute_mm_per_pixel(reference: ReferenceScale) -> float:
    """Millimeters per pixel from a reference; measured span clamped to >= 1 px."""
    return reference.known_mm / max(MIN_REFERENCE_PX, reference.measured_px)


def estimated_palm_width_mm(profile: Optional[HandProfile], hand_size: Optional[HandSize]) -> float:
    """Look up the anatomical palm width for a profile and resolved size."""
    if profile is None or hand_size is None:
        return AVERAGE_PALM_WIDTH_MM
    return PALM_WIDTH_MM[profile.gender][hand_size]


def calibrate_reference(reference: ReferenceScale) -> Calibration:
    mm_per_px = compute_mm_per_pixel(reference)
    px_per_mm = 1.0 / mm_per_px if mm_per_px > 0 else 0.0
    return Calibration(
        px_per_mm=px_per_mm,
        mm_per_px=mm_per_px,
        method="reference",
        valid=mm_per_px > 0,
    )


def calibrate_anatomical(
    landmarks: Optional[Sequence[Any]],
    viewport: Viewport,
    profile: Optional[HandProfile] = None,
) -> Calibration:
    """
    Calibrate from the palm span and an anatomical palm-width estimate.

    Args:
        landmarks: 21-point hand skeleton (normalized)
        viewport: Frame size in pixels
        profile: Gender and optional size; None uses the population average

    Returns:
        Calibration with method="landmarks"; valid=False when the palm is
        missing or narrower than MIN_PALM_WIDTH_PX
    """
    if not has_full_hand(landmarks):
        logger.debug("Anatomical calibration: incomplete landmarks")
        return Calibration(0.0, 0.0, "landmarks", valid=False)

    palm_px = palm_width_px(landmarks, viewport)
    if palm_px < MIN_PALM_WIDTH_PX:
        logger.debug(f"Anatomical calibration: palm span {palm_px:.1f}px too small")
        return Calibration(0.0, 0.0, "landmarks", palm_width_px=palm_px, valid=False)

    hand_size = None
    if profile is not None:
        hand_size = profile.size
        if hand_size is None:
            hand_size = classify_hand_size(palm_px, viewport.width, profile.gender)

    palm_mm = estimated_palm_width_mm(profile, hand_size)
    px_per_mm = palm_px / palm_mm
    logger.debug(
        f"Anatomical calibration: palm={palm_px:.1f}px, estimate={palm_mm:.0f}mm "
        f"({hand_size.value if hand_size else 'average'}) -> {px_per_mm:.3f} px/mm"
    )

    return Calibration(
        px_per_mm=px_per_mm,
        mm_per_px=1.0 / px_per_mm,
        method="landmarks",
        hand_size=hand_size,
        palm_width_px=palm_px,
    )


def calibrate(
    landmarks: Optional[Sequence[Any]],
    viewport: Viewport,
    reference: Optional[ReferenceScale] = None,
    profile: Optional[HandProfile] = None,
) -> Calibration:
    """Reference mode when a usable reference is supplied, otherwise anatomical mode."""
    if reference is not None:
        calibration = calibrate_reference(reference)
        if calibration.valid:
            return calibration
        logger.debug(f"Unusable reference {reference}, falling back to anatomical calibration")
    return calibrate_anatomical(landmarks, viewport, profile)
