"""
Hand landmark detection (pose-detector collaborator).

This module handles:
- Hand detection using MediaPipe HandLandmarker
- Conversion of detector output to normalized Landmark lists

MediaPipe is imported on first use so the measurement core runs without it.
"""

import logging
import os
import urllib.request
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence

import cv2
import numpy as np

from .landmarks import Landmark, Viewport

logger = logging.getLogger(__name__)

# Model path
MODEL_PATH = os.path.join(os.path.dirname(__file__), "..", "model", "hand_landmarker.task")
MODEL_URL = "https://storage.googleapis.com/mediapipe-models/hand_landmarker/hand_landmarker/float16/1/hand_landmarker.task"

# Initialize MediaPipe HandLandmarker (lazy loading)
_hands_detector = None


@dataclass(frozen=True)
class HandDetection:
    landmarks: List[Landmark]
    viewport: Viewport
    handedness: str
    score: float


def _download_model():
    """Download the hand landmarker model if not present."""
    if not os.path.exists(MODEL_PATH):
        os.makedirs(os.path.dirname(MODEL_PATH), exist_ok=True)
        print("Downloading hand landmarker model...")
        urllib.request.urlretrieve(MODEL_URL, MODEL_PATH)
        print(f"Model downloaded to {MODEL_PATH}")


def _get_hands_detector(force_new: bool = False):
    """Get or initialize the MediaPipe HandLandmarker."""
    global _hands_detector
    if _hands_detector is None or force_new:
        from mediapipe.tasks import python
        from mediapipe.tasks.python import vision

        _download_model()
        base_options = python.BaseOptions(model_asset_path=MODEL_PATH)
        options = vision.HandLandmarkerOptions(
            base_options=base_options,
            num_hands=1,  # Single-hand tracking
            min_hand_detection_confidence=0.5,
            min_tracking_confidence=0.5,
        )
        _hands_detector = vision.HandLandmarker.create_from_options(options)
    return _hands_detector


def landmarks_from_mediapipe(points: Sequence[Any]) -> List[Landmark]:
    """Convert MediaPipe NormalizedLandmark objects to Landmarks."""
    return [
        Landmark(float(p.x), float(p.y), float(p.z) if getattr(p, "z", None) is not None else None)
        for p in points
    ]


def detect_hand(image: np.ndarray, max_dimension: int = 1280) -> Optional[HandDetection]:
    """
    Detect the most confident hand in a BGR frame.

    Args:
        image: Input BGR image
        max_dimension: Maximum dimension for processing (large images are resized)

    Returns:
        HandDetection with landmarks normalized to the original frame, or
        None if no hand was detected
    """
    import mediapipe as mp

    h, w = image.shape[:2]

    # Normalized coordinates are resolution independent, so detection can
    # run on a downscaled copy
    if max(h, w) > max_dimension:
        scale = max_dimension / max(h, w)
        resized = cv2.resize(image, (int(w * scale), int(h * scale)), interpolation=cv2.INTER_AREA)
    else:
        resized = image

    rgb = np.ascontiguousarray(cv2.cvtColor(resized, cv2.COLOR_BGR2RGB))
    mp_image = mp.Image(image_format=mp.ImageFormat.SRGB, data=rgb)
    results = _get_hands_detector().detect(mp_image)

    if not results.hand_landmarks:
        logger.debug("No hand detected in frame")
        return None

    # Select the best hand (highest confidence)
    best_hand_idx = 0
    best_conf = 0.0
    for i, handedness in enumerate(results.handedness):
        if handedness[0].score > best_conf:
            best_conf = handedness[0].score
            best_hand_idx = i

    handedness = results.handedness[best_hand_idx][0]
    return HandDetection(
        landmarks=landmarks_from_mediapipe(results.hand_landmarks[best_hand_idx]),
        viewport=Viewport(float(w), float(h)),
        handedness=handedness.category_name,
        score=float(handedness.score),
    )
