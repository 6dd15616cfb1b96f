from __future__ import annotations

from typing import Optional

from .geometry import finger_flags
from .types import HAND_LANDMARK_COUNT, GestureType, Hand


def classify_gesture(hand: Optional[Hand]) -> GestureType:
    """Fallback classifier for hands that match no letter rule."""
    if hand is None or len(hand) != HAND_LANDMARK_COUNT:
        return GestureType.UNKNOWN

    # Strict comparison against the PIP, no tolerance.
    thumb, index, middle, ring, pinky = finger_flags(hand, tolerance=0.0)
    extended_count = sum((thumb, index, middle, ring, pinky))

    if extended_count == 5:
        return GestureType.OPEN_PALM
    if extended_count == 0:
        return GestureType.CLOSED_FIST
    if index and not middle and not ring and not pinky:
        return GestureType.POINTING_UP
    if index and middle and not ring and not pinky:
        return GestureType.VICTORY
    if thumb and index and pinky and not middle and not ring:
        return GestureType.I_LOVE_YOU
    if thumb and not index and not middle and not ring and not pinky:
        return GestureType.THUMB_UP
    return GestureType.CUSTOM_GESTURE
