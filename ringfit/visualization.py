"""
Debug visualization utilities.

This module handles:
- Hand landmark and span overlay
- Overlay transform footprint
- Result annotation
"""

from typing import Any, Dict, Optional, Sequence

import cv2
import numpy as np

from .geometry import to_pixels
from .geometry_constants import PALM_INDEX, PALM_PINKY, RING_MCP, RING_PIP
from .landmarks import Viewport
from .viz_constants import (
    FONT_FACE,
    Color,
    FontScale,
    FontThickness,
    Layout,
    Size,
    get_scaled_font_size,
)


def get_scaled_params(image_height: int) -> Dict[str, float]:
    """Font and stroke parameters scaled to image height."""
    font_scale = get_scaled_font_size(FontScale.BODY, image_height)
    factor = font_scale / FontScale.BODY
    return {
        "font_scale": font_scale,
        "text_thickness": max(1, int(FontThickness.BODY * factor)),
        "line_thickness": max(1, int(Size.LINE_THICK * factor)),
        "point_radius": max(2, int(Size.POINT_RADIUS * factor)),
        "joint_radius": max(3, int(Size.JOINT_RADIUS * factor)),
        "line_height": int(Layout.RESULT_TEXT_LINE_HEIGHT * factor),
        "y_start": int(Layout.RESULT_TEXT_Y_START * factor),
        "x_offset": int(Layout.RESULT_TEXT_X_OFFSET * factor),
        "panel_width": int(Layout.RESULT_PANEL_WIDTH * factor),
    }


def _px(lm: Any, viewport: Viewport) -> tuple:
    x, y = to_pixels(lm, viewport)
    return int(round(x)), int(round(y))


def draw_landmarks(image: np.ndarray, landmarks: Sequence[Any]) -> np.ndarray:
    """Draw all hand points plus the palm and ring knuckle spans."""
    h, w = image.shape[:2]
    params = get_scaled_params(h)
    viewport = Viewport(w, h)

    for lm in landmarks:
        cv2.circle(image, _px(lm, viewport), params["point_radius"], Color.LANDMARK, -1)

    cv2.line(image, _px(landmarks[PALM_INDEX], viewport), _px(landmarks[PALM_PINKY], viewport),
             Color.PALM_SPAN, params["line_thickness"])
    cv2.line(image, _px(landmarks[RING_MCP], viewport), _px(landmarks[RING_PIP], viewport),
             Color.KNUCKLE_SPAN, params["line_thickness"])
    for idx in (RING_MCP, RING_PIP):
        cv2.circle(image, _px(landmarks[idx], viewport), params["joint_radius"], Color.KNUCKLE_SPAN, -1)

    return image


def draw_overlay_footprint(
    image: np.ndarray,
    transform: Any,
    mirrored: bool = True,
) -> np.ndarray:
    """
    Draw the overlay transform as a rotated square.

    The transform is in mirrored screen space; with mirrored=True it is
    flipped back onto the raw camera frame.
    """
    if transform.position is None:
        return image

    h, w = image.shape[:2]
    params = get_scaled_params(h)
    x, y = transform.position
    if mirrored:
        x = w - x

    color = Color.OVERLAY_CLAMPED if transform.viewport_clamped else Color.OVERLAY
    angle = -transform.rotation_deg if mirrored else transform.rotation_deg
    box = cv2.boxPoints(((float(x), float(y)), (transform.scale_px, transform.scale_px), angle))
    cv2.polylines(image, [box.astype(np.int32)], isClosed=True, color=color,
                  thickness=params["line_thickness"])
    cv2.circle(image, (int(x), int(y)), params["point_radius"], color, -1)
    return image


def add_result_text(
    image: np.ndarray,
    summary: Dict[str, Any],
) -> np.ndarray:
    """Add a result text block from a TrackingSession summary."""
    params = get_scaled_params(image.shape[0])

    diameter = summary.get("finger_diameter_mm")
    ring_size = summary.get("ring_size")
    level = summary.get("confidence_breakdown", {}).get("level", "low")
    level_color = {
        "high": Color.TEXT_SUCCESS,
        "medium": Color.TEXT_WARNING,
    }.get(level, Color.TEXT_ERROR)

    lines = [("=== RING MEASUREMENT ===", Color.TEXT_PRIMARY)]
    if diameter is not None:
        lines.append((f"Diameter: {diameter:.2f} mm", Color.TEXT_PRIMARY))
        lines.append((f"Circumference: {summary['finger_circumference_mm']:.2f} mm", Color.TEXT_PRIMARY))
    else:
        lines.append((f"No measurement ({summary.get('fail_reason')})", Color.TEXT_ERROR))
    if ring_size is not None:
        lines.append((f"Size: US {ring_size['us']} / UK {ring_size['uk']} / EU {ring_size['eu']}",
                      Color.TEXT_PRIMARY))
    lines.append((f"Calibration: {summary.get('calibration_method')}", Color.TEXT_PRIMARY))
    lines.append((f"Confidence: {summary.get('confidence', 0.0):.3f} ({level.upper()})", level_color))

    # Semi-transparent panel behind the text
    panel_h = params["y_start"] + len(lines) * params["line_height"]
    overlay = image.copy()
    cv2.rectangle(overlay, (10, 10), (params["panel_width"], panel_h), Color.BLACK, -1)
    cv2.addWeighted(overlay, 0.7, image, 0.3, 0, image)

    for i, (text, color) in enumerate(lines):
        cv2.putText(
            image,
            text,
            (params["x_offset"], params["y_start"] + i * params["line_height"]),
            FONT_FACE,
            params["font_scale"],
            color,
            params["text_thickness"],
            cv2.LINE_AA,
        )

    return image


def create_debug_visualization(
    image: np.ndarray,
    landmarks: Optional[Sequence[Any]] = None,
    transform: Optional[Any] = None,
    summary: Optional[Dict[str, Any]] = None,
    mirrored: bool = True,
) -> np.ndarray:
    """
    Create debug visualization overlay on a camera frame.

    Args:
        image: Original BGR frame
        landmarks: Hand landmarks for the frame
        transform: OverlayTransform for the frame
        summary: TrackingSession summary for the text block
        mirrored: Whether the transform is in mirrored screen space

    Returns:
        Annotated BGR image
    """
    vis = image.copy()

    if landmarks is not None:
        vis = draw_landmarks(vis, landmarks)

    if transform is not None:
        vis = draw_overlay_footprint(vis, transform, mirrored=mirrored)

    if summary is not None:
        vis = add_result_text(vis, summary)

    return vis


def blank_canvas(viewport: Viewport) -> np.ndarray:
    """Black frame of the viewport size, for landmark-only input."""
    return np.zeros((int(viewport.height), int(viewport.width), 3), dtype=np.uint8)
