from __future__ import annotations

import argparse
import logging
import os
import sys

import cv2

# Allow running without installing the package (repo-local usage).
REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
SRC_ROOT = os.path.join(REPO_ROOT, "src")
if SRC_ROOT not in sys.path:
    sys.path.insert(0, SRC_ROOT)

from signspell_hand.detector import HandLandmarkDetector  # noqa: E402
from signspell_hand.drawing import draw_frame_result, draw_label  # noqa: E402
from signspell_hand.sequence import HolisticSequenceBuffer, SequenceBuffer  # noqa: E402
from signspell_hand.session import RecognitionSession  # noqa: E402
from signspell_hand.smoothing import LabelSmoother  # noqa: E402
from signspell_hand.sources import CameraLandmarkSource  # noqa: E402


def main() -> int:
    ap = argparse.ArgumentParser(description="Webcam ASL letter recognizer demo.")
    ap.add_argument("--camera", type=int, default=0, help="Camera index (default: 0)")
    ap.add_argument("--width", type=int, default=1280, help="Capture width (best effort)")
    ap.add_argument("--height", type=int, default=720, help="Capture height (best effort)")
    ap.add_argument("--max-hands", type=int, default=2, help="Maximum number of hands to detect")
    ap.add_argument("--window", type=int, default=4, help="Frames a label must hold before it is shown")
    ap.add_argument("--sequence-length", type=int, default=30, help="Frames per recorded sequence")
    ap.add_argument("--min-interval-ms", type=float, default=100, help="Minimum time between processed frames")
    ap.add_argument(
        "--no-validate",
        action="store_true",
        help="Classify every detected hand, even implausibly small ones",
    )
    ap.add_argument(
        "--no-mirror",
        action="store_true",
        help="Disable horizontal mirroring (default is mirrored/selfie mode)",
    )
    ap.add_argument(
        "--countdown", type=float, default=3.0, help="Seconds to wait after pressing r before buffering"
    )
    ap.add_argument(
        "--holistic",
        action="store_true",
        help="Buffer the 88-point holistic layout (hands only, face and pose zero-filled)",
    )
    ap.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = ap.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    buffer_cls = HolisticSequenceBuffer if args.holistic else SequenceBuffer
    with HandLandmarkDetector(max_num_hands=args.max_hands) as detector:
        source = CameraLandmarkSource(
            detector, camera=args.camera, width=args.width, height=args.height, mirror=not args.no_mirror
        )
        session = RecognitionSession(
            source=source,
            smoother=LabelSmoother(window=args.window),
            buffer=buffer_cls(capacity=args.sequence_length),
            validate_presence=not args.no_validate,
            min_interval_ms=args.min_interval_ms,
            countdown_s=args.countdown,
        )
        with session:
            run(session, source)

    cv2.destroyAllWindows()
    return 0


def run(session: RecognitionSession, source: CameraLandmarkSource) -> None:
    last = None
    while True:
        update = session.step()
        if session.exhausted:
            break
        if update is not None:
            last = update

        frame = source.last_frame
        if frame is None:
            continue
        if last is not None:
            draw_frame_result(frame, last.result, last.confirmed)
        draw_label(frame, status_line(session), (12, 28), scale=0.8)

        cv2.imshow("signspell - letter recognizer", frame)
        key = cv2.waitKey(1) & 0xFF
        if key in (ord("q"), 27):
            break
        if key == ord("r"):
            if session.recording:
                sequence = session.stop_recording()
                if sequence is not None:
                    print(f"sequence ready: {sequence.shape[0]} values")
            else:
                session.start_recording()


def status_line(session: RecognitionSession) -> str:
    if not session.recording:
        return "r: record | q: quit"
    remaining = session.countdown_remaining()
    if remaining > 0:
        return f"Get ready... {remaining:.0f}"
    return f"REC {session.progress:.0%}"


if __name__ == "__main__":
    raise SystemExit(main())
