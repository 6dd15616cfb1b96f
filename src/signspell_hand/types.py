from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional, Sequence


HAND_LANDMARK_COUNT = 21
UNKNOWN_LABEL = "Unknown"

ASL_LETTERS = tuple("ABCDEFGHIJKLMNOPQRSTUVWXYZ")
# Letters covered by the rule-based classifier.
ASL_LETTERS_CLASSIFIED = ASL_LETTERS[:7]


@dataclass(frozen=True)
class Landmark:
    """A single normalized landmark (x, y in [0, 1], z relative to the wrist)."""

    x: float
    y: float
    z: float = 0.0


# Exactly 21 landmarks, ordered per HandLandmarkIndex.
Hand = Sequence[Landmark]


class HandLandmarkIndex:
    """MediaPipe hand landmark indices."""

    WRIST = 0
    THUMB_CMC = 1
    THUMB_MCP = 2
    THUMB_IP = 3
    THUMB_TIP = 4
    INDEX_FINGER_MCP = 5
    INDEX_FINGER_PIP = 6
    INDEX_FINGER_DIP = 7
    INDEX_FINGER_TIP = 8
    MIDDLE_FINGER_MCP = 9
    MIDDLE_FINGER_PIP = 10
    MIDDLE_FINGER_DIP = 11
    MIDDLE_FINGER_TIP = 12
    RING_FINGER_MCP = 13
    RING_FINGER_PIP = 14
    RING_FINGER_DIP = 15
    RING_FINGER_TIP = 16
    PINKY_MCP = 17
    PINKY_PIP = 18
    PINKY_DIP = 19
    PINKY_TIP = 20


class GestureType(Enum):
    """Generic gestures reported when no letter rule matches."""

    OPEN_PALM = "Open_Palm"
    CLOSED_FIST = "Closed_Fist"
    POINTING_UP = "Pointing_Up"
    VICTORY = "Victory"
    I_LOVE_YOU = "ILoveYou"
    THUMB_UP = "Thumb_Up"
    CUSTOM_GESTURE = "Custom_Gesture"
    UNKNOWN = UNKNOWN_LABEL


@dataclass(frozen=True)
class Recognition:
    """Classification output for one detected hand."""

    id: int
    label: str  # letter A-G, a GestureType value, or "Unknown"
    score: float
    handedness: str  # "Left" / "Right"
    handedness_score: float
    landmarks: List[Landmark]  # length 21


@dataclass(frozen=True)
class FrameResult:
    """Everything recognized in one processed frame."""

    recognitions: List[Recognition]
    processing_time: float  # milliseconds
    fps: float
    timestamp: datetime
    left_hand_landmarks: Optional[List[Landmark]] = None
    right_hand_landmarks: Optional[List[Landmark]] = None
    # Full holistic landmark list (543 points) when the source provides one.
    landmarks: Optional[List[Landmark]] = field(default=None, repr=False)

    @property
    def has_detections(self) -> bool:
        return len(self.recognitions) > 0

    @property
    def detection_count(self) -> int:
        return len(self.recognitions)

    @property
    def primary_label(self) -> Optional[str]:
        if not self.recognitions:
            return None
        return self.recognitions[0].label

    @property
    def average_confidence(self) -> float:
        if not self.recognitions:
            return 0.0
        return sum(r.score for r in self.recognitions) / len(self.recognitions)

    @property
    def max_confidence(self) -> float:
        if not self.recognitions:
            return 0.0
        return max(r.score for r in self.recognitions)

    def performance_rating(self) -> str:
        if self.fps >= 25:
            return "Excellent"
        if self.fps >= 20:
            return "Very Good"
        if self.fps >= 15:
            return "Good"
        if self.fps >= 10:
            return "Fair"
        return "Poor"

    def summary(self) -> str:
        return (
            f"Detections: {self.detection_count} | FPS: {self.fps:.1f} | "
            f"Processing: {self.processing_time:.0f}ms | Performance: {self.performance_rating()}"
        )
