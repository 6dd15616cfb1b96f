from __future__ import annotations

import math
from typing import Tuple

from .types import HandLandmarkIndex as L, Landmark, Hand


EXTENSION_TOLERANCE = 0.02
TOUCH_THRESHOLD = 0.10

# (tip, pip) pairs for the four non-thumb fingers.
FINGER_TIP_PIP: Tuple[Tuple[int, int], ...] = (
    (L.INDEX_FINGER_TIP, L.INDEX_FINGER_PIP),
    (L.MIDDLE_FINGER_TIP, L.MIDDLE_FINGER_PIP),
    (L.RING_FINGER_TIP, L.RING_FINGER_PIP),
    (L.PINKY_TIP, L.PINKY_PIP),
)


def clamp_int(v: int, lo: int, hi: int) -> int:
    return max(lo, min(hi, v))


def squared_distance(a: Landmark, b: Landmark) -> float:
    dx = a.x - b.x
    dy = a.y - b.y
    dz = a.z - b.z
    return dx * dx + dy * dy + dz * dz


def distance(a: Landmark, b: Landmark) -> float:
    return math.sqrt(squared_distance(a, b))


def is_extended(hand: Hand, tip_index: int, pip_index: int, tolerance: float = EXTENSION_TOLERANCE) -> bool:
    """
    A finger counts as extended when its tip sits above its PIP joint on screen.

    Screen y grows downwards, so "above" means a smaller y. This approximates a
    finger pointing up/away from the palm, not true 3D extension.
    """
    return hand[tip_index].y < hand[pip_index].y + tolerance


def is_thumb_extended(hand: Hand, tolerance: float = EXTENSION_TOLERANCE) -> bool:
    # Thumb extends along a different axis; compare the tip with the MCP (2).
    return hand[L.THUMB_TIP].y < hand[L.THUMB_MCP].y + tolerance


def is_touching(a: Landmark, b: Landmark, threshold: float = TOUCH_THRESHOLD) -> bool:
    return distance(a, b) < threshold


def hand_span(hand: Hand) -> float:
    """Wrist to middle fingertip distance."""
    return distance(hand[L.WRIST], hand[L.MIDDLE_FINGER_TIP])


def finger_flags(hand: Hand, tolerance: float = EXTENSION_TOLERANCE) -> Tuple[bool, bool, bool, bool, bool]:
    """Extension flags ordered thumb, index, middle, ring, pinky."""
    index, middle, ring, pinky = (is_extended(hand, tip, pip, tolerance) for tip, pip in FINGER_TIP_PIP)
    return (is_thumb_extended(hand, tolerance), index, middle, ring, pinky)
