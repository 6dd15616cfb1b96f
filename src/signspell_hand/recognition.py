from __future__ import annotations

from datetime import datetime
from typing import Iterable, List, Optional

import numpy as np

from .geometry import hand_span
from .gestures import classify_gesture
from .letters import classify_letter
from .types import (
    HAND_LANDMARK_COUNT,
    UNKNOWN_LABEL,
    FrameResult,
    GestureType,
    Hand,
    Landmark,
    Recognition,
)


# Upstream models emit plausible coordinates with no hand in view; a real hand
# spans at least this much from wrist to middle fingertip.
MIN_HAND_SPAN = 0.06

# Per-pose confidence is not estimated yet.
PLACEHOLDER_SCORE = 0.85
PLACEHOLDER_HANDEDNESS_SCORE = 0.9

FLAT_VALUES_PER_HAND = HAND_LANDMARK_COUNT * 3


def is_hand_present(hand: Optional[Hand], min_span: float = MIN_HAND_SPAN) -> bool:
    if hand is None or len(hand) != HAND_LANDMARK_COUNT:
        return False
    return hand_span(hand) >= min_span


def classify_hand(hand: Hand) -> str:
    """Letter first, then generic gesture, then "Unknown"."""
    letter = classify_letter(hand)
    if letter is not None:
        return letter
    gesture = classify_gesture(hand)
    if gesture is GestureType.UNKNOWN:
        return UNKNOWN_LABEL
    return gesture.value


def build_frame_result(
    left: Optional[Hand],
    right: Optional[Hand],
    processing_time: float = 0.0,
    fps: float = 0.0,
    timestamp: Optional[datetime] = None,
    *,
    validate_presence: bool = True,
    landmarks: Optional[List[Landmark]] = None,
) -> FrameResult:
    """
    Classify up to two hands into a FrameResult.

    Hands that fail the presence check stay in the positional output (for overlay)
    but get no Recognition. Ids are assigned in order, left before right.
    """
    recognitions: List[Recognition] = []
    for handedness, hand in (("Left", left), ("Right", right)):
        if hand is None or len(hand) != HAND_LANDMARK_COUNT:
            continue
        if validate_presence and not is_hand_present(hand):
            continue
        recognitions.append(
            Recognition(
                id=len(recognitions),
                label=classify_hand(hand),
                score=PLACEHOLDER_SCORE,
                handedness=handedness,
                handedness_score=PLACEHOLDER_HANDEDNESS_SCORE,
                landmarks=list(hand),
            )
        )

    return FrameResult(
        recognitions=recognitions,
        processing_time=processing_time,
        fps=fps,
        timestamp=timestamp if timestamp is not None else datetime.now(),
        left_hand_landmarks=list(left) if left is not None else None,
        right_hand_landmarks=list(right) if right is not None else None,
        landmarks=landmarks,
    )


def parse_from_flat_output(values: Iterable[float]) -> List[Landmark]:
    """
    Decode raw detector output (x, y, z repeated) into landmarks.

    At most 21 points are read; a trailing partial triple is padded with zeros.
    """
    if isinstance(values, np.ndarray):
        flat = values.astype(np.float64).ravel()
    else:
        flat = np.fromiter(values, dtype=np.float64)
    flat = flat[:FLAT_VALUES_PER_HAND]
    landmarks: List[Landmark] = []
    for i in range(0, flat.shape[0], 3):
        triple = flat[i : i + 3]
        x = float(triple[0])
        y = float(triple[1]) if triple.shape[0] > 1 else 0.0
        z = float(triple[2]) if triple.shape[0] > 2 else 0.0
        landmarks.append(Landmark(x=x, y=y, z=z))
    return landmarks


def flatten_landmarks(hand: Hand) -> np.ndarray:
    return np.array([(lm.x, lm.y, lm.z) for lm in hand], dtype=np.float32).reshape(-1)
