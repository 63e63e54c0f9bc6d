#!/usr/bin/env python3
"""Simple web demo for ringfit.

Post a landmark recording, run a tracking session, and return the
measurement summary, ring size, and per-frame overlay transforms as JSON.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Dict, Optional

from flask import Flask, jsonify, request

ROOT_DIR = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT_DIR))

from ringfit.calibration import HandProfile, ReferenceScale
from ringfit.hand_size import Gender, HandSize
from ringfit.landmarks import frames_from_json
from ringfit.session import SESSION_TOLERANCE_PCT, SESSION_WINDOW, TrackingSession
from ringfit.sizing import (
    RING_SIZE_TABLE,
    adjust_size_for_band_width,
    band_width_recommendation,
    find_by_us_size,
    size_from_circumference,
    size_from_diameter,
)

app = Flask(__name__)


def _error(message: str, status: int = 400):
    return jsonify({"success": False, "error": message}), status


def _optional_float(payload: Dict[str, Any], key: str) -> Optional[float]:
    value = payload.get(key)
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValueError(f"'{key}' must be a number") from None


def _build_session(payload: Dict[str, Any]) -> TrackingSession:
    profile = None
    if payload.get("hand_size") and not payload.get("gender"):
        raise ValueError("'hand_size' requires 'gender'")
    if payload.get("gender"):
        hand_size = HandSize.parse(payload["hand_size"]) if payload.get("hand_size") else None
        profile = HandProfile(gender=Gender.parse(payload["gender"]), size=hand_size)

    reference = None
    ref = payload.get("reference")
    if ref:
        try:
            reference = ReferenceScale(known_mm=float(ref["knownMm"]), measured_px=float(ref["measuredPx"]))
        except (KeyError, TypeError, ValueError):
            raise ValueError("'reference' needs numeric 'knownMm' and 'measuredPx'") from None

    window = payload.get("window", SESSION_WINDOW)
    tolerance = _optional_float(payload, "tolerance")
    if not isinstance(window, int) or isinstance(window, bool):
        raise ValueError("'window' must be an integer")

    return TrackingSession(
        profile=profile,
        reference=reference,
        window=window,
        tolerance_pct=tolerance if tolerance is not None else SESSION_TOLERANCE_PCT,
        target_diameter_mm=_optional_float(payload, "target_diameter_mm"),
    )


@app.route("/api/measure", methods=["POST"])
def api_measure():
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        return _error("Expected a JSON object")

    try:
        frames = frames_from_json(payload)
        session = _build_session(payload)
    except ValueError as e:
        return _error(str(e))

    # Fresh session per request: frames are replayed in order
    results = [
        session.process_frame(frame.landmarks, frame.viewport, detection_score=frame.score)
        for frame in frames
    ]
    summary = session.summary()

    return jsonify({
        "success": summary["fail_reason"] is None,
        "result": summary,
        "frames": [result.to_dict() for result in results],
    })


@app.route("/api/size", methods=["POST"])
def api_size():
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        return _error("Expected a JSON object")

    try:
        diameter = _optional_float(payload, "diameter_mm")
        circumference = _optional_float(payload, "circumference_mm")
        band_width = _optional_float(payload, "band_width_mm")
    except ValueError as e:
        return _error(str(e))

    if diameter is not None:
        entry = size_from_diameter(diameter)
    elif circumference is not None:
        entry = size_from_circumference(circumference)
    else:
        return _error("Provide 'diameter_mm' or 'circumference_mm'")

    response: Dict[str, Any] = {
        "success": entry is not None,
        "size": entry.to_dict() if entry else None,
    }

    if band_width is not None:
        response["band_width_recommendation"] = band_width_recommendation(band_width)
        if entry is not None:
            adjusted_us = adjust_size_for_band_width(entry.us, band_width)
            adjusted = find_by_us_size(adjusted_us)
            response["adjusted_size"] = adjusted.to_dict() if adjusted else {"us": adjusted_us}

    return jsonify(response)


@app.route("/api/sizes")
def api_sizes():
    return jsonify({"sizes": [entry.to_dict() for entry in RING_SIZE_TABLE]})


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=8000, debug=True)
