"""
Ring finger measurement and overlay alignment from hand landmarks.
"""

from .landmarks import Landmark, Viewport, FrameInput, frames_from_json
from .geometry import pixel_distance, angle_degrees, normalize_rotation
from .hand_size import Gender, HandSize, classify_hand_size, estimate_gender
from .calibration import ReferenceScale, HandProfile, Calibration, calibrate, compute_mm_per_pixel
from .measurement import DiameterEstimate, estimate_diameter
from .stabilizer import Stabilizer, StabilizedMeasurement, stabilize_measurements
from .alignment import (
    AlignmentParams,
    AlignmentState,
    OverlayTransform,
    compute_raw_transform,
    update_alignment,
)
from .sizing import RingSizeEntry, RING_SIZE_TABLE, size_from_circumference, size_from_diameter
from .session import TrackingSession, FrameResult

__version__ = "0.1.0"

__all__ = [
    "Landmark",
    "Viewport",
    "FrameInput",
    "frames_from_json",
    "pixel_distance",
    "angle_degrees",
    "normalize_rotation",
    "Gender",
    "HandSize",
    "classify_hand_size",
    "estimate_gender",
    "ReferenceScale",
    "HandProfile",
    "Calibration",
    "calibrate",
    "compute_mm_per_pixel",
    "DiameterEstimate",
    "estimate_diameter",
    "Stabilizer",
    "StabilizedMeasurement",
    "stabilize_measurements",
    "AlignmentParams",
    "AlignmentState",
    "OverlayTransform",
    "compute_raw_transform",
    "update_alignment",
    "RingSizeEntry",
    "RING_SIZE_TABLE",
    "size_from_circumference",
    "size_from_diameter",
    "TrackingSession",
    "FrameResult",
]
