#!/usr/bin/env python3
"""
Ring Finger Measurement Tool

Estimates the ring-finger diameter and the matching ring size from hand
landmarks, either detected in an image/video or read from a landmark
recording (JSON), and tracks the ring overlay transform frame by frame.

Usage:
    python measure_ring.py --input hand.mp4 --output result.json [--debug debug.png]
    python measure_ring.py --landmarks frames.json --output result.json --gender female
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

import cv2
import numpy as np

from ringfit.calibration import HandProfile, ReferenceScale
from ringfit.calibration_constants import CREDIT_CARD_WIDTH_MM
from ringfit.hand_size import Gender, HandSize
from ringfit.landmarks import FrameInput, Viewport, frames_from_json
from ringfit.session import SESSION_TOLERANCE_PCT, SESSION_WINDOW, FrameResult, TrackingSession
from ringfit.visualization import blank_canvas, create_debug_visualization

IMAGE_SUFFIXES = [".jpg", ".jpeg", ".png"]
VIDEO_SUFFIXES = [".mp4", ".mov", ".avi", ".mkv", ".webm"]


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Measure ring-finger diameter from hand landmarks.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python measure_ring.py --input photo.jpg --output result.json
    python measure_ring.py --input clip.mp4 --output result.json --debug overlay.png
    python measure_ring.py --landmarks frames.json --output result.json --known-mm 85.6 --measured-px 400
        """,
    )

    # Input source (exactly one)
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "--input",
        type=str,
        help="Path to input image (JPG/PNG) or video",
    )
    source.add_argument(
        "--landmarks",
        type=str,
        help="Path to a landmark recording (JSON)",
    )

    parser.add_argument(
        "--output",
        type=str,
        required=True,
        help="Path to output JSON file",
    )
    parser.add_argument(
        "--debug",
        type=str,
        default=None,
        help="Path to save debug visualization of the last frame (PNG)",
    )

    # Calibration options
    parser.add_argument(
        "--gender",
        type=str,
        choices=[g.value for g in Gender],
        default=None,
        help="Hand profile gender for anatomical calibration (default: average palm)",
    )
    parser.add_argument(
        "--hand-size",
        type=str,
        choices=[s.value for s in HandSize],
        default=None,
        help="Hand size bucket (default: classify from palm width)",
    )
    parser.add_argument(
        "--known-mm",
        type=float,
        default=None,
        help=f"Reference object length in mm (e.g. {CREDIT_CARD_WIDTH_MM} for a credit card)",
    )
    parser.add_argument(
        "--measured-px",
        type=float,
        default=None,
        help="Measured pixel span of the reference object",
    )

    # Tracking options
    parser.add_argument(
        "--window",
        type=int,
        default=SESSION_WINDOW,
        help=f"Stabilizer window in frames (default: {SESSION_WINDOW})",
    )
    parser.add_argument(
        "--tolerance",
        type=float,
        default=SESSION_TOLERANCE_PCT,
        help=f"Outlier tolerance as a fraction of the median (default: {SESSION_TOLERANCE_PCT})",
    )
    parser.add_argument(
        "--target-diameter",
        type=float,
        default=None,
        help="Diameter (mm) of the ring to preview; defaults to the live measurement",
    )
    parser.add_argument(
        "--max-frames",
        type=int,
        default=None,
        help="Stop after this many video frames",
    )
    parser.add_argument(
        "--include-frames",
        action="store_true",
        help="Include per-frame results in the output JSON",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    return parser.parse_args(argv)


def validate_args(args: argparse.Namespace) -> Optional[str]:
    """
    Validate argument combinations and input paths.

    Returns:
        Error message if validation fails, None if valid
    """
    if (args.known_mm is None) != (args.measured_px is None):
        return "--known-mm and --measured-px must be given together"

    if args.known_mm is not None and args.known_mm <= 0:
        return f"--known-mm must be positive, got {args.known_mm}"

    if args.hand_size is not None and args.gender is None:
        return "--hand-size requires --gender"

    if args.window < 1:
        return f"--window must be >= 1, got {args.window}"

    if args.tolerance < 0:
        return f"--tolerance must be non-negative, got {args.tolerance}"

    path = Path(args.input or args.landmarks)
    if not path.exists():
        return f"Input file not found: {path}"

    if not path.is_file():
        return f"Input path is not a file: {path}"

    if args.input is not None:
        suffix = path.suffix.lower()
        if suffix not in IMAGE_SUFFIXES + VIDEO_SUFFIXES:
            return f"Unsupported input format: {suffix}. Use an image or video."

    return None


def build_session(args: argparse.Namespace) -> TrackingSession:
    profile = None
    if args.gender is not None:
        profile = HandProfile(
            gender=Gender.parse(args.gender),
            size=HandSize.parse(args.hand_size) if args.hand_size else None,
        )

    reference = None
    if args.known_mm is not None:
        reference = ReferenceScale(known_mm=args.known_mm, measured_px=args.measured_px)

    return TrackingSession(
        profile=profile,
        reference=reference,
        window=args.window,
        tolerance_pct=args.tolerance,
        target_diameter_mm=args.target_diameter,
    )


def load_landmark_frames(path: str) -> List[FrameInput]:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    return frames_from_json(data)


def iter_video_frames(path: str, max_frames: Optional[int] = None) -> Iterator[np.ndarray]:
    """Yield BGR frames from an image or video file."""
    if Path(path).suffix.lower() in IMAGE_SUFFIXES:
        image = cv2.imread(path)
        if image is not None:
            yield image
        return

    capture = cv2.VideoCapture(path)
    try:
        count = 0
        while max_frames is None or count < max_frames:
            ok, frame = capture.read()
            if not ok:
                break
            count += 1
            yield frame
    finally:
        capture.release()


def create_output(
    summary: Dict[str, Any],
    frames: Optional[List[FrameResult]] = None,
) -> Dict[str, Any]:
    """Output dictionary from a session summary."""
    output = dict(summary)
    if frames is not None:
        output["frames"] = [frame.to_dict() for frame in frames]
    return output


def save_output(output: Dict[str, Any], output_path: str) -> None:
    """Save output dictionary to JSON file."""
    # Ensure output directory exists
    Path(output_path).parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, "w") as f:
        json.dump(output, f, indent=2)


def save_debug_image(
    debug_path: str,
    image: np.ndarray,
    frame: Optional[FrameInput],
    result: Optional[FrameResult],
    summary: Dict[str, Any],
) -> None:
    debug_image = create_debug_visualization(
        image=image,
        landmarks=frame.landmarks if frame is not None else None,
        transform=result.transform if result is not None else None,
        summary=summary,
    )
    Path(debug_path).parent.mkdir(parents=True, exist_ok=True)
    cv2.imwrite(debug_path, debug_image)
    print(f"Debug visualization saved to: {debug_path}")


def measure_ring(
    args: argparse.Namespace,
) -> Dict[str, Any]:
    """
    Main measurement pipeline.

    Feeds every frame, in order, through one TrackingSession.

    Args:
        args: Parsed command line arguments

    Returns:
        Output dictionary with measurement results
    """
    session = build_session(args)
    results: List[FrameResult] = []
    last_frame: Optional[FrameInput] = None
    last_result: Optional[FrameResult] = None
    last_image: Optional[np.ndarray] = None

    if args.landmarks is not None:
        frames = load_landmark_frames(args.landmarks)
        print(f"Loaded {len(frames)} landmark frames from {args.landmarks}")
        for frame in frames:
            result = session.process_frame(frame.landmarks, frame.viewport, detection_score=frame.score)
            results.append(result)
            last_frame, last_result = frame, result
        if last_frame is not None:
            last_image = blank_canvas(last_frame.viewport)
    else:
        from ringfit.hand_tracking import detect_hand

        for image in iter_video_frames(args.input, args.max_frames):
            h, w = image.shape[:2]
            detection = detect_hand(image)
            if detection is None:
                frame = FrameInput(None, Viewport(float(w), float(h)))
            else:
                frame = FrameInput(detection.landmarks, detection.viewport, detection.score)
            result = session.process_frame(frame.landmarks, frame.viewport, detection_score=frame.score)
            results.append(result)
            last_frame, last_result, last_image = frame, result, image

        if not results:
            print(f"Could not read any frames from {args.input}")

    summary = session.summary()
    print(f"Frames: {summary['frames_processed']} processed, {summary['frames_visible']} with a hand, "
          f"{summary['samples']} samples in window")

    if args.debug is not None and last_image is not None:
        save_debug_image(args.debug, last_image, last_frame, last_result, summary)

    return create_output(summary, results if args.include_frames else None)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    # Validate input
    error = validate_args(args)
    if error:
        print(f"Error: {error}", file=sys.stderr)
        return 1

    try:
        result = measure_ring(args)
    except ValueError as e:
        print(f"Error: Invalid landmark recording: {e}", file=sys.stderr)
        save_output({"fail_reason": "invalid_input", "error": str(e)}, args.output)
        return 1

    # Save output
    save_output(result, args.output)
    print(f"Results saved to: {args.output}")

    # Report result
    if result["fail_reason"]:
        print(f"Measurement failed: {result['fail_reason']}")
        return 1

    print(f"Finger diameter: {result['finger_diameter_mm']} mm")
    if result["ring_size"] is not None:
        size = result["ring_size"]
        print(f"Ring size: US {size['us']} / UK {size['uk']} / EU {size['eu']}")
    else:
        print("Ring size: no match (measurement inconclusive)")
    print(f"Confidence: {result['confidence']}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
