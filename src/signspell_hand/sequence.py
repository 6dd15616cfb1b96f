"""
Rolling landmark windows for the downstream sequence model.

`SequenceBuffer` stores both hands per frame (42 x 3, missing hands zero-filled).
`HolisticSequenceBuffer` stores the 88 model-relevant points picked out of a full
543-point holistic frame. Both evict the oldest frame once over capacity.
"""

from __future__ import annotations

from collections import deque
from typing import Deque, List, Optional, Sequence, Tuple

import numpy as np

from .types import HAND_LANDMARK_COUNT, Hand, Landmark


SEQUENCE_LENGTH = 30
HANDS_PER_FRAME = 2
LANDMARKS_PER_FRAME = HAND_LANDMARK_COUNT * HANDS_PER_FRAME  # 42

FACE_LANDMARK_COUNT = 468
POSE_LANDMARK_COUNT = 33
HOLISTIC_LANDMARK_COUNT = FACE_LANDMARK_COUNT + POSE_LANDMARK_COUNT + 2 * HAND_LANDMARK_COUNT  # 543

# Model input layout: 13 face points, then pose + both hands (468..542).
# Order is load-bearing for the trained model.
IMPORTANT_LANDMARKS: Tuple[int, ...] = (
    0, 9, 11, 13, 14, 17, 117, 118, 119, 199, 346, 347, 348,
) + tuple(range(FACE_LANDMARK_COUNT, HOLISTIC_LANDMARK_COUNT))


class InsufficientDataError(RuntimeError):
    """Raised when a sequence is requested before the buffer is full."""


def landmarks_to_array(landmarks: Sequence[Landmark]) -> np.ndarray:
    return np.array([(lm.x, lm.y, lm.z) for lm in landmarks], dtype=np.float32).reshape(-1, 3)


class _RollingWindow:
    """Fixed-capacity FIFO of equally shaped float32 frames."""

    frame_shape: Tuple[int, int] = (0, 3)

    def __init__(self, capacity: int = SEQUENCE_LENGTH) -> None:
        if capacity < 1:
            raise ValueError(f"Capacity must be >= 1, got {capacity}")
        self.capacity = capacity
        self._frames: Deque[np.ndarray] = deque(maxlen=capacity)

    def __len__(self) -> int:
        return len(self._frames)

    def _append(self, frame: np.ndarray) -> None:
        self._frames.append(frame)

    def size(self) -> int:
        return len(self._frames)

    def is_full(self) -> bool:
        return len(self._frames) >= self.capacity

    def progress(self) -> float:
        return len(self._frames) / self.capacity

    def remaining_frames(self) -> int:
        return max(0, self.capacity - len(self._frames))

    def clear(self) -> None:
        self._frames.clear()

    def get_sequence(self) -> np.ndarray:
        """
        Returns the window as (capacity, values per frame), oldest frame first.

        Raises InsufficientDataError until `capacity` frames have been added.
        """
        if not self.is_full():
            raise InsufficientDataError(
                f"Buffer not full yet ({len(self._frames)}/{self.capacity} frames)"
            )
        frames = list(self._frames)[-self.capacity :]
        return np.stack([f.reshape(-1) for f in frames], axis=0)

    def get_preprocessed_sequence(self) -> np.ndarray:
        """Contiguous float32 vector of capacity * values-per-frame floats."""
        return np.ascontiguousarray(self.get_sequence().reshape(-1), dtype=np.float32)


class SequenceBuffer(_RollingWindow):
    """
    Two-hand landmark window.

    Each frame is (42, 3): left hand then right hand. A slot without a well-formed
    21-point hand is filled with zeros so every frame has the same shape. Callers
    should pass at least one real hand; this is not enforced.
    """

    frame_shape = (LANDMARKS_PER_FRAME, 3)

    def add_frame(self, left: Optional[Hand] = None, right: Optional[Hand] = None) -> None:
        blocks = [self._hand_block(left), self._hand_block(right)]
        self._append(np.concatenate(blocks, axis=0))

    @staticmethod
    def _hand_block(hand: Optional[Hand]) -> np.ndarray:
        if hand is not None and len(hand) == HAND_LANDMARK_COUNT:
            return landmarks_to_array(hand)
        return np.zeros((HAND_LANDMARK_COUNT, 3), dtype=np.float32)


class HolisticSequenceBuffer(_RollingWindow):
    """Full-body variant: keeps only IMPORTANT_LANDMARKS from each 543-point frame."""

    frame_shape = (len(IMPORTANT_LANDMARKS), 3)

    def add_frame(self, landmarks: Optional[Sequence[Landmark]]) -> None:
        if landmarks is None or len(landmarks) != HOLISTIC_LANDMARK_COUNT:
            self._append(np.zeros(self.frame_shape, dtype=np.float32))
            return
        full = landmarks_to_array(landmarks)
        self._append(full[list(IMPORTANT_LANDMARKS)])


def assemble_holistic_landmarks(
    face: Optional[Sequence[Landmark]] = None,
    pose: Optional[Sequence[Landmark]] = None,
    left: Optional[Hand] = None,
    right: Optional[Hand] = None,
) -> List[Landmark]:
    """
    Concatenate face, pose, left and right hand into the 543-point layout.

    Missing or malformed parts are zero-filled so later indices never shift.
    """
    out: List[Landmark] = []
    for part, count in (
        (face, FACE_LANDMARK_COUNT),
        (pose, POSE_LANDMARK_COUNT),
        (left, HAND_LANDMARK_COUNT),
        (right, HAND_LANDMARK_COUNT),
    ):
        if part is not None and len(part) == count:
            out.extend(part)
        else:
            out.extend(Landmark(0.0, 0.0, 0.0) for _ in range(count))
    return out
