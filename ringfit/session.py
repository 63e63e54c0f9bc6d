"""
Tracking session: one tracked hand, one camera stream.

This module handles:
- Ownership of the stabilizer window and alignment state for a session
- The per-frame pass (estimator -> stabilizer, and alignment in parallel)
- Session summary with stabilized size, ring size, and confidence

Each TrackingSession owns its buffers exclusively; track two hands or two
streams with two sessions.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence

from .alignment import (
    DEFAULT_PARAMS,
    AlignmentParams,
    AlignmentState,
    OverlayTransform,
    update_alignment,
)
from .alignment_constants import DEFAULT_TARGET_DIAMETER_MM
from .calibration import HandProfile, ReferenceScale, compute_mm_per_pixel
from .confidence import (
    compute_detection_confidence,
    compute_overall_confidence,
    compute_stability_confidence,
    compute_tracking_confidence,
)
from .hand_size import HandSize
from .landmarks import Viewport, has_full_hand
from .measurement import DiameterEstimate, estimate_diameter
from .sizing import RingSizeEntry, size_from_diameter
from .stabilizer import StabilizedMeasurement, Stabilizer

logger = logging.getLogger(__name__)

# Live tracking defaults: a slightly longer, tighter window than the
# stabilizer's own defaults
SESSION_WINDOW = 10
SESSION_TOLERANCE_PCT = 0.10


@dataclass(frozen=True)
class FrameResult:
    frame_index: int
    visible: bool
    sample: DiameterEstimate
    stabilized: StabilizedMeasurement
    transform: OverlayTransform
    ring_size: Optional[RingSizeEntry]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "frame_index": self.frame_index,
            "visible": self.visible,
            "sample": self.sample.to_dict(),
            "stabilized": self.stabilized.to_dict(),
            "transform": self.transform.to_dict(),
            "ring_size": self.ring_size.to_dict() if self.ring_size else None,
        }


class TrackingSession:
    """
    Frame-by-frame measurement and overlay tracking for one hand.

    Args:
        profile: Hand profile for anatomical calibration (None = average palm)
        reference: Optional reference scale; takes priority over the profile
        window: Stabilizer window length in frames
        tolerance_pct: Stabilizer outlier tolerance
        target_diameter_mm: Physical size of the ring being previewed; the
            live measurement is used when None
        alignment_params: Smoothing and deadzone settings
    """

    def __init__(
        self,
        profile: Optional[HandProfile] = None,
        reference: Optional[ReferenceScale] = None,
        window: int = SESSION_WINDOW,
        tolerance_pct: float = SESSION_TOLERANCE_PCT,
        target_diameter_mm: Optional[float] = None,
        alignment_params: AlignmentParams = DEFAULT_PARAMS,
    ):
        self.profile = profile
        self.reference = reference
        self.target_diameter_mm = target_diameter_mm
        self.alignment_params = alignment_params
        self.stabilizer = Stabilizer(window=window, tolerance_pct=tolerance_pct)
        self.alignment_state = AlignmentState()

        self.frames_processed = 0
        self.frames_visible = 0
        self.hand_size: Optional[HandSize] = None
        self._detection_total = 0.0

    @property
    def visible(self) -> bool:
        return self.alignment_state.visible

    def set_reference(self, reference: ReferenceScale) -> None:
        """Recalibrate; samples already in the window are kept."""
        logger.debug(f"Reference scale set: {reference}")
        self.reference = reference

    def clear_reference(self) -> None:
        self.reference = None

    def _overlay_diameter(self, sample: DiameterEstimate) -> float:
        if self.target_diameter_mm is not None and self.target_diameter_mm > 0:
            return self.target_diameter_mm
        stabilized = self.stabilizer.value()
        if stabilized > 0:
            return stabilized
        if sample.usable:
            return sample.diameter_mm
        return DEFAULT_TARGET_DIAMETER_MM

    def _overlay_px_per_mm(self, sample: DiameterEstimate) -> Optional[float]:
        if self.reference is not None:
            mm_per_px = compute_mm_per_pixel(self.reference)
            if mm_per_px > 0:
                return 1.0 / mm_per_px
        # Match the measurement's palm width when a profile is active
        if self.profile is not None and sample.usable:
            return sample.px_per_mm
        return None

    def process_frame(
        self,
        landmarks: Optional[Sequence[Any]],
        viewport: Viewport,
        detection_score: Optional[float] = None,
    ) -> FrameResult:
        """
        Run one synchronous pass for a detector result.

        Args:
            landmarks: 21-point hand skeleton, or None on a detector miss
            viewport: Frame size the landmarks are normalized against
            detection_score: Optional detector confidence for this hand

        Returns:
            FrameResult for this frame
        """
        index = self.frames_processed
        self.frames_processed += 1
        present = has_full_hand(landmarks)

        sample = estimate_diameter(landmarks, viewport, reference=self.reference, profile=self.profile)
        if sample.usable:
            self.stabilizer.push(sample.diameter_mm)
        if sample.hand_size is not None:
            self.hand_size = sample.hand_size

        transform, self.alignment_state = update_alignment(
            landmarks,
            viewport,
            self._overlay_diameter(sample),
            state=self.alignment_state,
            px_per_mm=self._overlay_px_per_mm(sample),
            params=self.alignment_params,
        )

        if present:
            self.frames_visible += 1
            self._detection_total += compute_detection_confidence(True, detection_score)

        stabilized = self.stabilizer.measurement()
        ring_size = size_from_diameter(stabilized.diameter_mm) if stabilized.diameter_mm > 0 else None

        return FrameResult(
            frame_index=index,
            visible=transform.visible,
            sample=sample,
            stabilized=stabilized,
            transform=transform,
            ring_size=ring_size,
        )

    def confidence(self) -> Dict[str, Any]:
        detection = self._detection_total / self.frames_visible if self.frames_visible else 0.0
        return compute_overall_confidence(
            detection,
            compute_tracking_confidence(self.frames_visible, self.frames_processed),
            compute_stability_confidence(self.stabilizer.samples),
        )

    def summary(self) -> Dict[str, Any]:
        """JSON-ready report of the session so far."""
        stabilized = self.stabilizer.measurement()
        has_measurement = stabilized.diameter_mm > 0
        ring_size = size_from_diameter(stabilized.diameter_mm) if has_measurement else None

        if self.frames_visible == 0:
            fail_reason = "hand_not_detected"
        elif not has_measurement:
            fail_reason = "no_usable_measurement"
        else:
            fail_reason = None

        confidence = self.confidence()
        return {
            "finger_diameter_mm": round(stabilized.diameter_mm, 3) if has_measurement else None,
            "finger_circumference_mm": round(stabilized.circumference_mm, 3) if has_measurement else None,
            "ring_size": ring_size.to_dict() if ring_size else None,
            "calibration_method": "reference" if self.reference is not None else "landmarks",
            "hand_size": self.hand_size.value if self.hand_size else None,
            "confidence": round(confidence["overall"], 3),
            "confidence_breakdown": confidence,
            "frames_processed": self.frames_processed,
            "frames_visible": self.frames_visible,
            "samples": len(self.stabilizer),
            "visible": self.visible,
            "fail_reason": fail_reason,
        }
