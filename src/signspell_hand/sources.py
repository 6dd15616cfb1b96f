"""
Landmark sources.

Everything downstream of a source only sees `HandObservation`s, so the MediaPipe
camera path, raw model output and recorded sessions are interchangeable.
"""

from __future__ import annotations

import logging
import platform
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Protocol, Sequence, Tuple

import cv2

from .recognition import parse_from_flat_output
from .types import Landmark


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HandObservation:
    """Hands seen in one frame. Absent hands are None."""

    left: Optional[List[Landmark]] = None
    right: Optional[List[Landmark]] = None
    left_score: Optional[float] = None
    right_score: Optional[float] = None
    # Full 543-point holistic landmarks, when the source produces them.
    landmarks: Optional[List[Landmark]] = None

    @property
    def is_empty(self) -> bool:
        return self.left is None and self.right is None


class LandmarkSource(Protocol):
    def next_hands(self) -> Optional[HandObservation]:
        """Next observation, or None once the source is exhausted."""
        ...

    def close(self) -> None:
        ...


class HandDetector(Protocol):
    def detect(self, frame_bgr) -> HandObservation:
        ...

    def close(self) -> None:
        ...


class ReplayLandmarkSource:
    """Plays back pre-recorded observations."""

    def __init__(self, observations: Iterable[HandObservation]) -> None:
        self._it: Iterator[HandObservation] = iter(observations)

    def next_hands(self) -> Optional[HandObservation]:
        return next(self._it, None)

    def close(self) -> None:
        self._it = iter(())


FlatPair = Tuple[Optional[Sequence[float]], Optional[Sequence[float]]]


class FlatOutputLandmarkSource:
    """Decodes raw per-hand model output (63 floats each) into observations."""

    def __init__(self, outputs: Iterable[FlatPair]) -> None:
        self._it: Iterator[FlatPair] = iter(outputs)

    def next_hands(self) -> Optional[HandObservation]:
        pair = next(self._it, None)
        if pair is None:
            return None
        left_flat, right_flat = pair
        return HandObservation(
            left=parse_from_flat_output(left_flat) if left_flat is not None else None,
            right=parse_from_flat_output(right_flat) if right_flat is not None else None,
        )

    def close(self) -> None:
        self._it = iter(())


class CameraLandmarkSource:
    """
    Reads frames from an OpenCV camera and runs a hand detector on each.

    Frames are mirrored by default (selfie mode). The last frame read is kept in
    `last_frame` so callers can draw overlays on it.
    """

    def __init__(
        self,
        detector: HandDetector,
        camera: int = 0,
        width: int = 1280,
        height: int = 720,
        mirror: bool = True,
    ) -> None:
        if platform.system() == "Darwin":
            cap = cv2.VideoCapture(camera, cv2.CAP_AVFOUNDATION)
        else:
            cap = cv2.VideoCapture(camera)
        if not cap.isOpened():
            cap.release()
            raise RuntimeError(
                f"Could not open camera index {camera}. "
                "On macOS: System Settings -> Privacy & Security -> Camera -> allow your terminal."
            )
        cap.set(cv2.CAP_PROP_FRAME_WIDTH, width)
        cap.set(cv2.CAP_PROP_FRAME_HEIGHT, height)

        self._cap = cap
        self._detector = detector
        self._mirror = mirror
        self.last_frame = None

    def next_hands(self) -> Optional[HandObservation]:
        if self._cap is None:
            return None
        ok, frame = self._cap.read()
        if not ok:
            logger.warning("Camera read failed; stopping source")
            return None
        if self._mirror:
            frame = cv2.flip(frame, 1)
        self.last_frame = frame
        return self._detector.detect(frame)

    def close(self) -> None:
        if self._cap is not None:
            self._cap.release()
            self._cap = None
        self._detector.close()

    def __enter__(self) -> "CameraLandmarkSource":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
