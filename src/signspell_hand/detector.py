from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Tuple

import cv2

from .model_assets import ensure_hand_landmarker_task
from .sources import HandObservation
from .types import Landmark


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _SolutionsBackend:
    mp: object
    hands: object


@dataclass(frozen=True)
class _TasksBackend:
    mp: object
    landmarker: object


def _try_create_solutions_backend(
    static_image_mode: bool,
    max_num_hands: int,
    model_complexity: int,
    min_detection_confidence: float,
    min_tracking_confidence: float,
) -> Optional[_SolutionsBackend]:
    import mediapipe as mp  # type: ignore

    if not hasattr(mp, "solutions"):
        return None
    hands = mp.solutions.hands.Hands(
        static_image_mode=static_image_mode,
        max_num_hands=max_num_hands,
        model_complexity=model_complexity,
        min_detection_confidence=min_detection_confidence,
        min_tracking_confidence=min_tracking_confidence,
    )
    return _SolutionsBackend(mp=mp, hands=hands)


def _try_create_tasks_backend(
    model_path: str,
    max_num_hands: int,
    min_detection_confidence: float,
    min_tracking_confidence: float,
) -> _TasksBackend:
    """
    Fallback for MediaPipe builds without `mp.solutions`.

    Uses the Tasks HandLandmarker API, which needs a `.task` model asset on disk.
    """

    import mediapipe as mp  # type: ignore

    try:
        from mediapipe.tasks.python import BaseOptions  # type: ignore
        from mediapipe.tasks.python.vision import HandLandmarker, HandLandmarkerOptions, RunningMode  # type: ignore
    except ImportError:  # pragma: no cover
        from mediapipe.tasks import python as mp_python  # type: ignore

        BaseOptions = mp_python.BaseOptions
        HandLandmarker = mp_python.vision.HandLandmarker
        HandLandmarkerOptions = mp_python.vision.HandLandmarkerOptions
        RunningMode = mp_python.vision.RunningMode

    model_path = ensure_hand_landmarker_task(model_path)

    options = HandLandmarkerOptions(
        base_options=BaseOptions(model_asset_path=model_path),
        running_mode=RunningMode.VIDEO,
        num_hands=max_num_hands,
        min_hand_detection_confidence=min_detection_confidence,
        min_tracking_confidence=min_tracking_confidence,
    )
    return _TasksBackend(mp=mp, landmarker=HandLandmarker.create_from_options(options))


def _to_landmarks(points: Iterable[Any]) -> List[Landmark]:
    return [Landmark(x=float(p.x), y=float(p.y), z=float(getattr(p, "z", 0.0) or 0.0)) for p in points]


def assign_hands(hands: Iterable[Tuple[List[Landmark], Optional[str], Optional[float]]]) -> HandObservation:
    """
    Place detected hands into left/right slots by handedness label.

    The first hand per side takes that slot. Unlabeled hands, and hands whose
    labelled side is already taken (MediaPipe sometimes tags both hands the same),
    fill whichever slot is still free, left first.
    """
    slots = {"Left": None, "Right": None}
    scores = {"Left": None, "Right": None}
    overflow = []
    for landmarks, label, score in hands:
        side = (label or "").capitalize()
        if side in slots and slots[side] is None:
            slots[side] = landmarks
            scores[side] = score
        else:
            overflow.append((landmarks, score))
    for landmarks, score in overflow:
        for side in ("Left", "Right"):
            if slots[side] is None:
                slots[side] = landmarks
                scores[side] = score
                break
    return HandObservation(
        left=slots["Left"],
        right=slots["Right"],
        left_score=scores["Left"],
        right_score=scores["Right"],
    )


class HandLandmarkDetector:
    """
    Hand landmark detector using MediaPipe Hands.

    Input frames are expected as **BGR** images (OpenCV default).
    """

    def __init__(
        self,
        static_image_mode: bool = False,
        max_num_hands: int = 2,
        model_complexity: int = 1,
        min_detection_confidence: float = 0.5,
        min_tracking_confidence: float = 0.5,
        tasks_model_path: str = "models/hand_landmarker.task",
        frame_interval_ms: int = 33,
    ) -> None:
        self._solutions: Optional[_SolutionsBackend] = _try_create_solutions_backend(
            static_image_mode=static_image_mode,
            max_num_hands=max_num_hands,
            model_complexity=model_complexity,
            min_detection_confidence=min_detection_confidence,
            min_tracking_confidence=min_tracking_confidence,
        )
        self._tasks: Optional[_TasksBackend] = None
        self._tasks_timestamp_ms = 0
        self._frame_interval_ms = frame_interval_ms

        if self._solutions is not None:
            logger.info("Using MediaPipe solutions backend")
            return

        try:
            self._tasks = _try_create_tasks_backend(
                model_path=tasks_model_path,
                max_num_hands=max_num_hands,
                min_detection_confidence=min_detection_confidence,
                min_tracking_confidence=min_tracking_confidence,
            )
        except FileNotFoundError as e:
            raise RuntimeError(
                "MediaPipe does not provide `mp.solutions` in your environment, so the Tasks\n"
                "HandLandmarker fallback is used, which needs a model file on disk:\n"
                f"  {tasks_model_path}"
            ) from e
        except Exception as e:  # pragma: no cover
            raise RuntimeError(
                "Could not initialize MediaPipe Hands.\n"
                "Your installed `mediapipe` package does not expose `mp.solutions`, and the Tasks\n"
                "fallback could not be initialized."
            ) from e
        logger.info("Using MediaPipe Tasks backend (%s)", tasks_model_path)

    def close(self) -> None:
        if self._solutions is not None:
            self._solutions.hands.close()
            self._solutions = None
        if self._tasks is not None:
            self._tasks.landmarker.close()
            self._tasks = None

    def __enter__(self) -> "HandLandmarkDetector":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def detect(self, frame_bgr) -> HandObservation:
        frame_rgb = cv2.cvtColor(frame_bgr, cv2.COLOR_BGR2RGB)

        if self._solutions is not None:
            results = self._solutions.hands.process(frame_rgb)
            if not results.multi_hand_landmarks:
                return HandObservation()

            handedness_list = results.multi_handedness or []
            found = []
            for i, hand_landmarks in enumerate(results.multi_hand_landmarks):
                label: Optional[str] = None
                score: Optional[float] = None
                if i < len(handedness_list) and handedness_list[i].classification:
                    c = handedness_list[i].classification[0]
                    label = getattr(c, "label", None)
                    score = float(getattr(c, "score", 0.0))
                found.append((_to_landmarks(hand_landmarks.landmark), label, score))
            return assign_hands(found)

        if self._tasks is None:
            return HandObservation()

        mp = self._tasks.mp
        if not hasattr(mp, "Image") or not hasattr(mp, "ImageFormat"):
            raise RuntimeError("Your MediaPipe build does not expose `mp.Image` required for the Tasks API.")
        mp_image = mp.Image(image_format=mp.ImageFormat.SRGB, data=frame_rgb)

        # VIDEO mode requires monotonically increasing timestamps.
        self._tasks_timestamp_ms += self._frame_interval_ms
        result = self._tasks.landmarker.detect_for_video(mp_image, self._tasks_timestamp_ms)

        hand_landmarks_list = getattr(result, "hand_landmarks", None) or []
        handedness_list = getattr(result, "handedness", None) or []

        found = []
        for i, landmarks in enumerate(hand_landmarks_list):
            label = None
            score = None
            if i < len(handedness_list) and handedness_list[i]:
                cat0 = handedness_list[i][0]
                label = getattr(cat0, "category_name", None) or getattr(cat0, "display_name", None)
                score = float(getattr(cat0, "score", 0.0))
            found.append((_to_landmarks(landmarks), label, score))
        return assign_hands(found)
