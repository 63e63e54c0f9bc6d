"""
Landmark and viewport types.

This module handles:
- Normalized hand landmarks and the viewport they are normalized against
- Conversion from plain dictionaries (JSON frames) and detector objects
"""

import math
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from .geometry_constants import NUM_HAND_LANDMARKS


@dataclass(frozen=True)
class Landmark:
    """One normalized keypoint; x and y in [0, 1], z optional depth."""
    x: float
    y: float
    z: Optional[float] = None


@dataclass(frozen=True)
class Viewport:
    """Pixel size of the frame the landmarks are normalized against."""
    width: float
    height: float


def has_full_hand(landmarks: Optional[Sequence[Any]]) -> bool:
    """
    Check that a landmark sequence is a complete, finite hand skeleton.

    Accepts any objects exposing ``x`` and ``y`` attributes, so detector
    results can be passed without conversion.
    """
    if landmarks is None or len(landmarks) < NUM_HAND_LANDMARKS:
        return False
    for lm in landmarks[:NUM_HAND_LANDMARKS]:
        if lm is None:
            return False
        if not (math.isfinite(lm.x) and math.isfinite(lm.y)):
            return False
    return True


def landmark_from_dict(data: Dict[str, Any]) -> Landmark:
    """Build a Landmark from ``{"x": .., "y": .., "z": ..}``."""
    try:
        x = float(data["x"])
        y = float(data["y"])
        z = data.get("z")
        z = float(z) if z is not None else None
    except (KeyError, TypeError, ValueError) as e:
        raise ValueError(f"Invalid landmark: {data!r}") from e
    return Landmark(x, y, z)


def landmarks_from_dicts(items: Optional[Sequence[Dict[str, Any]]]) -> Optional[List[Landmark]]:
    """Convert a JSON landmark list; ``None`` (a detector miss) stays ``None``."""
    if items is None:
        return None
    if not isinstance(items, list):
        raise ValueError(f"Landmarks must be a list, got {type(items).__name__}")
    return [landmark_from_dict(item) for item in items]


def viewport_from_dict(data: Dict[str, Any]) -> Viewport:
    """Build a Viewport from ``{"width": .., "height": ..}``."""
    try:
        width = float(data["width"])
        height = float(data["height"])
    except (KeyError, TypeError, ValueError) as e:
        raise ValueError(f"Invalid viewport: {data!r}") from e
    if width <= 0 or height <= 0:
        raise ValueError(f"Viewport must be positive, got {width}x{height}")
    return Viewport(width, height)


@dataclass(frozen=True)
class FrameInput:
    """One detector delivery: landmarks (None on a miss) and the viewport."""
    landmarks: Optional[List[Landmark]]
    viewport: Viewport
    score: Optional[float] = None


def frames_from_json(data: Dict[str, Any]) -> List[FrameInput]:
    """
    Parse a landmark recording.

    Expected layout:
        {"viewport": {"width": W, "height": H},
         "frames": [{"landmarks": [{"x": .., "y": .., "z": ..}, ...] | null,
                     "viewport": {...}, "score": 0.9}, ...]}

    A per-frame viewport overrides the top-level one. Raises ValueError for
    malformed input.
    """
    if not isinstance(data, dict):
        raise ValueError("Landmark recording must be a JSON object")

    frames = data.get("frames")
    if not isinstance(frames, list):
        raise ValueError("Landmark recording needs a 'frames' list")

    default_viewport = viewport_from_dict(data["viewport"]) if data.get("viewport") else None

    parsed = []
    for i, frame in enumerate(frames):
        if not isinstance(frame, dict):
            raise ValueError(f"Frame {i} must be an object")
        if frame.get("viewport"):
            viewport = viewport_from_dict(frame["viewport"])
        elif default_viewport is not None:
            viewport = default_viewport
        else:
            raise ValueError(f"Frame {i} has no viewport")
        score = frame.get("score")
        if score is not None:
            try:
                score = float(score)
            except (TypeError, ValueError):
                raise ValueError(f"Frame {i} score must be a number, got {score!r}") from None
        parsed.append(FrameInput(
            landmarks=landmarks_from_dicts(frame.get("landmarks")),
            viewport=viewport,
            score=score,
        ))
    return parsed
