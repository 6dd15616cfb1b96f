from __future__ import annotations

import argparse
import os
import sys

import cv2

# Allow running without installing the package (repo-local usage).
REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
SRC_ROOT = os.path.join(REPO_ROOT, "src")
if SRC_ROOT not in sys.path:
    sys.path.insert(0, SRC_ROOT)

from signspell_hand.detector import HandLandmarkDetector  # noqa: E402
from signspell_hand.drawing import draw_frame_result  # noqa: E402
from signspell_hand.recognition import build_frame_result  # noqa: E402


def main() -> int:
    ap = argparse.ArgumentParser(description="Classify the hand signs in a single image.")
    ap.add_argument("--image", required=True, help="Path to input image")
    ap.add_argument("--out", required=True, help="Path to output image (annotated)")
    ap.add_argument("--max-hands", type=int, default=2, help="Maximum number of hands to detect")
    ap.add_argument("--no-validate", action="store_true", help="Skip the hand presence check")
    args = ap.parse_args()

    frame = cv2.imread(args.image)
    if frame is None:
        raise RuntimeError(f"Could not read image: {args.image}")

    with HandLandmarkDetector(static_image_mode=True, max_num_hands=args.max_hands) as detector:
        observation = detector.detect(frame)

    result = build_frame_result(observation.left, observation.right, validate_presence=not args.no_validate)
    out = draw_frame_result(frame, result)

    ok = cv2.imwrite(args.out, out)
    if not ok:
        raise RuntimeError(f"Could not write output image: {args.out}")

    print(f"hands: {result.detection_count}")
    for rec in result.recognitions:
        print(f"[{rec.id}] {rec.handedness} label={rec.label} score={rec.score:.2f}")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
