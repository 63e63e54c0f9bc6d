"""
Overlay alignment: landmarks to a steady screen-space ring transform.

This module handles:
- Raw per-frame position, rotation, and scale from the ring finger
- Per-channel exponential smoothing
- Deadzone gating against the last committed value
- Viewport clamping
- Simple hand posture heuristics

State is explicit: update_alignment() takes the previous AlignmentState and
returns the next one alongside the transform. Frames must be fed in
arrival order, since smoothing is order-dependent.
"""

import logging
from dataclasses import asdict, dataclass, replace
from typing import Any, Dict, Optional, Sequence, Tuple

import numpy as np

from .alignment_constants import (
    DEFAULT_TARGET_DIAMETER_MM,
    FALLBACK_VIEWPORT_MM,
    HIDDEN_MIN_SCALE_PX,
    HIDDEN_SCALE_PER_MM,
    MIN_ALIGNMENT_PALM_PX,
    MIN_SCALE_PX,
    POSITION_ALPHA,
    POSITION_DEADZONE_PX,
    ROTATION_ALPHA,
    ROTATION_DEADZONE_DEG,
    SCALE_ALPHA,
    SCALE_DEADZONE_PX,
    SIDE_VIEW_SPAN,
    SLANTED_ANGLE_DEG,
)
from .calibration_constants import AVERAGE_PALM_WIDTH_MM
from .geometry import angle_degrees, normalize_rotation, palm_width_px
from .geometry_constants import (
    MIDDLE_MCP,
    PALM_INDEX,
    PALM_PINKY,
    RING_MCP,
    RING_PIP,
    UPRIGHT_FINGER_ANGLE_DEG,
    WRIST,
)
from .landmarks import Viewport, has_full_hand

logger = logging.getLogger(__name__)

Point = Tuple[float, float]


@dataclass(frozen=True)
class AlignmentParams:
    position_alpha: float = POSITION_ALPHA
    rotation_alpha: float = ROTATION_ALPHA
    scale_alpha: float = SCALE_ALPHA
    position_deadzone_px: float = POSITION_DEADZONE_PX
    rotation_deadzone_deg: float = ROTATION_DEADZONE_DEG
    scale_deadzone_px: float = SCALE_DEADZONE_PX
    min_scale_px: float = MIN_SCALE_PX


DEFAULT_PARAMS = AlignmentParams()


@dataclass(frozen=True)
class HandPosture:
    outer_hand: bool
    inner_hand: bool
    side_portion: bool
    slanted_angle: bool


@dataclass(frozen=True)
class RawTransform:
    position: Point
    rotation_deg: float
    scale_px: float
    px_per_mm: float


@dataclass(frozen=True)
class OverlayTransform:
    """
    Target screen placement for the overlay.

    position is None while the hand is not visible; rotation and scale then
    hold the last committed values.
    """
    position: Optional[Point]
    rotation_deg: float
    scale_px: float
    visible: bool
    viewport_clamped: bool = False
    posture: Optional[HandPosture] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "position": (
                {"x": round(self.position[0], 2), "y": round(self.position[1], 2)}
                if self.position is not None else None
            ),
            "rotation_deg": round(self.rotation_deg, 3),
            "scale_px": round(self.scale_px, 3),
            "visible": self.visible,
            "viewport_clamped": self.viewport_clamped,
            "posture": asdict(self.posture) if self.posture is not None else None,
        }


@dataclass(frozen=True)
class AlignmentState:
    """
    Smoothing and deadzone state carried between frames.

    smoothed_* track the exponential filters; committed_* are the values
    last emitted after deadzone gating. Both survive missed frames.
    """
    smoothed_position: Optional[Point] = None
    smoothed_rotation: Optional[float] = None
    smoothed_scale: Optional[float] = None
    committed_position: Optional[Point] = None
    committed_rotation: Optional[float] = None
    committed_scale: Optional[float] = None
    visible: bool = False
    missed_frames: int = 0

    @property
    def initialized(self) -> bool:
        return self.committed_position is not None


def alignment_px_per_mm(landmarks: Sequence[Any], viewport: Viewport) -> float:
    """Pixels per mm from the palm span and the average palm width."""
    palm_px = palm_width_px(landmarks, viewport)
    if palm_px > MIN_ALIGNMENT_PALM_PX:
        return palm_px / AVERAGE_PALM_WIDTH_MM
    return viewport.width / FALLBACK_VIEWPORT_MM


def finger_rotation(landmarks: Sequence[Any]) -> float:
    """
    Ring finger tilt in [-90, 90], 0 for an upright finger.

    The MCP->PIP axis angle is taken relative to the upright direction and
    folded, so a finger pointing straight down also reads 0.
    """
    axis = angle_degrees(landmarks[RING_MCP], landmarks[RING_PIP])
    return normalize_rotation(axis - UPRIGHT_FINGER_ANGLE_DEG)


def compute_raw_transform(
    landmarks: Sequence[Any],
    viewport: Viewport,
    diameter_mm: float,
    px_per_mm: Optional[float] = None,
    min_scale_px: float = MIN_SCALE_PX,
) -> RawTransform:
    """
    Unsmoothed transform for one frame.

    Args:
        landmarks: 21-point hand skeleton (normalized)
        viewport: Frame size in pixels
        diameter_mm: Physical ring diameter to render
        px_per_mm: Dedicated calibration; derived from the palm if None
        min_scale_px: Lower bound on the overlay footprint

    Returns:
        RawTransform with the mirrored ring PIP position, rotation, and scale
    """
    pip = landmarks[RING_PIP]
    # Front-facing feeds are shown mirrored
    x = (1.0 - pip.x) * viewport.width
    y = pip.y * viewport.height

    if px_per_mm is None or px_per_mm <= 0:
        px_per_mm = alignment_px_per_mm(landmarks, viewport)

    scale_px = max(min_scale_px, diameter_mm * px_per_mm)

    return RawTransform(
        position=(float(x), float(y)),
        rotation_deg=finger_rotation(landmarks),
        scale_px=float(scale_px),
        px_per_mm=float(px_per_mm),
    )


def estimate_posture(landmarks: Sequence[Any], rotation_deg: float) -> HandPosture:
    """Coarse posture flags for guidance UIs."""
    span = abs(landmarks[WRIST].y - landmarks[MIDDLE_MCP].y)
    # Mirrored view: pinky MCP right of index MCP means the back of the hand
    outer = bool(landmarks[PALM_PINKY].x > landmarks[PALM_INDEX].x)
    return HandPosture(
        outer_hand=outer,
        inner_hand=not outer,
        side_portion=bool(span < SIDE_VIEW_SPAN),
        slanted_angle=bool(abs(rotation_deg) > SLANTED_ANGLE_DEG),
    )


def clamp_to_viewport(position: Point, scale_px: float, viewport: Viewport) -> Tuple[Point, bool]:
    """Keep the overlay's half-extent inside the viewport on both axes."""
    half = scale_px / 2.0
    x = min(viewport.width - half, max(half, position[0]))
    y = min(viewport.height - half, max(half, position[1]))
    clamped = x != position[0] or y != position[1]
    return (float(x), float(y)), clamped


def _blend(previous: float, raw: float, alpha: float) -> float:
    return previous + alpha * (raw - previous)


def _blend_rotation(previous: float, raw: float, alpha: float) -> float:
    # Shortest path on the 180-degree periodic axis
    delta = normalize_rotation(raw - previous)
    return normalize_rotation(previous + alpha * delta)


def _smooth(state: AlignmentState, raw: RawTransform, params: AlignmentParams) -> Tuple[Point, float, float]:
    if state.smoothed_position is None:
        return raw.position, raw.rotation_deg, raw.scale_px

    prev_x, prev_y = state.smoothed_position
    position = (
        _blend(prev_x, raw.position[0], params.position_alpha),
        _blend(prev_y, raw.position[1], params.position_alpha),
    )
    rotation = _blend_rotation(state.smoothed_rotation, raw.rotation_deg, params.rotation_alpha)
    scale = _blend(state.smoothed_scale, raw.scale_px, params.scale_alpha)
    return position, rotation, scale


def _commit(
    state: AlignmentState,
    position: Point,
    rotation: float,
    scale: float,
    params: AlignmentParams,
) -> Tuple[Point, float, float]:
    if not state.initialized:
        return position, rotation, scale

    committed_position = state.committed_position
    moved = float(np.hypot(position[0] - committed_position[0], position[1] - committed_position[1]))
    if moved > params.position_deadzone_px:
        committed_position = position

    committed_rotation = state.committed_rotation
    if abs(normalize_rotation(rotation - committed_rotation)) > params.rotation_deadzone_deg:
        committed_rotation = rotation

    committed_scale = state.committed_scale
    if abs(scale - committed_scale) > params.scale_deadzone_px:
        committed_scale = scale

    return committed_position, committed_rotation, committed_scale


def hidden_transform(state: AlignmentState, diameter_mm: float) -> OverlayTransform:
    """Transform for a frame without a usable hand; the overlay is hidden."""
    if state.initialized:
        rotation = state.committed_rotation
        scale = state.committed_scale
    else:
        diameter = diameter_mm if diameter_mm > 0 else DEFAULT_TARGET_DIAMETER_MM
        rotation = 0.0
        scale = max(HIDDEN_MIN_SCALE_PX, diameter * HIDDEN_SCALE_PER_MM)
    return OverlayTransform(position=None, rotation_deg=rotation, scale_px=scale, visible=False)


def update_alignment(
    landmarks: Optional[Sequence[Any]],
    viewport: Viewport,
    diameter_mm: float,
    state: Optional[AlignmentState] = None,
    px_per_mm: Optional[float] = None,
    params: AlignmentParams = DEFAULT_PARAMS,
) -> Tuple[OverlayTransform, AlignmentState]:
    """
    Advance the alignment by one frame.

    Args:
        landmarks: 21-point hand skeleton, or None when no hand was detected
        viewport: Frame size in pixels
        diameter_mm: Physical ring diameter to render
        state: State returned by the previous call (None for a new session)
        px_per_mm: Dedicated calibration; derived from the palm if None
        params: Smoothing and deadzone settings

    Returns:
        Tuple of (OverlayTransform, next AlignmentState). On a miss the
        transform is hidden and the smoothing state is kept so tracking
        resumes where it left off.
    """
    if state is None:
        state = AlignmentState()

    if not has_full_hand(landmarks):
        missed = state.missed_frames + 1
        logger.debug(f"No hand in frame ({missed} consecutive), overlay hidden")
        return hidden_transform(state, diameter_mm), replace(state, visible=False, missed_frames=missed)

    raw = compute_raw_transform(
        landmarks, viewport, diameter_mm, px_per_mm=px_per_mm, min_scale_px=params.min_scale_px
    )
    smoothed_position, smoothed_rotation, smoothed_scale = _smooth(state, raw, params)
    position, rotation, scale = _commit(state, smoothed_position, smoothed_rotation, smoothed_scale, params)

    clamped_position, clamped = clamp_to_viewport(position, scale, viewport)

    next_state = AlignmentState(
        smoothed_position=smoothed_position,
        smoothed_rotation=smoothed_rotation,
        smoothed_scale=smoothed_scale,
        committed_position=position,
        committed_rotation=rotation,
        committed_scale=scale,
        visible=True,
        missed_frames=0,
    )

    transform = OverlayTransform(
        position=clamped_position,
        rotation_deg=rotation,
        scale_px=scale,
        visible=True,
        viewport_clamped=clamped,
        posture=estimate_posture(landmarks, raw.rotation_deg),
    )
    return transform, next_state
