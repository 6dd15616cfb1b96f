"""
Rule-based ASL letter classifier (A-G).

Features are extracted once per hand into a `HandFeatures` record; the cascade in
`classify_features` only reads that record, so it can be exercised without any
geometry. Rule order matters: loose shapes can satisfy several rules and the first
match wins.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .geometry import FINGER_TIP_PIP, distance, finger_flags, is_touching
from .types import HAND_LANDMARK_COUNT, Hand, HandLandmarkIndex as L


# D vs G: index tip horizontal displacement against scaled vertical displacement.
HORIZONTAL_RATIO = 0.7
# C: thumb tip must stay this far from the index and pinky tips.
MIN_C_OPENING = 0.05


@dataclass(frozen=True)
class HandFeatures:
    thumb: bool
    index: bool
    middle: bool
    ring: bool
    pinky: bool
    thumb_touches_index: bool
    thumb_to_index: float
    thumb_to_pinky: float
    index_dx: float  # |index tip x - wrist x|
    index_dy: float  # |index tip y - wrist y|
    tips_below_pips: bool  # every fingertip strictly below its PIP

    @property
    def extended_count(self) -> int:
        return sum((self.thumb, self.index, self.middle, self.ring, self.pinky))

    @property
    def all_four_extended(self) -> bool:
        return self.index and self.middle and self.ring and self.pinky

    @property
    def all_four_curled(self) -> bool:
        return not (self.index or self.middle or self.ring or self.pinky)


def extract_features(hand: Hand) -> HandFeatures:
    thumb, index, middle, ring, pinky = finger_flags(hand)
    thumb_tip = hand[L.THUMB_TIP]
    index_tip = hand[L.INDEX_FINGER_TIP]
    wrist = hand[L.WRIST]
    return HandFeatures(
        thumb=thumb,
        index=index,
        middle=middle,
        ring=ring,
        pinky=pinky,
        thumb_touches_index=is_touching(thumb_tip, index_tip),
        thumb_to_index=distance(thumb_tip, index_tip),
        thumb_to_pinky=distance(thumb_tip, hand[L.PINKY_TIP]),
        index_dx=abs(index_tip.x - wrist.x),
        index_dy=abs(index_tip.y - wrist.y),
        tips_below_pips=all(hand[tip].y > hand[pip].y for tip, pip in FINGER_TIP_PIP),
    )


def classify_features(f: HandFeatures) -> Optional[str]:
    # A: fist, thumb tucked
    if f.extended_count == 0:
        return "A"

    # B: flat hand, thumb ignored
    if f.all_four_extended:
        return "B"

    # F: OK sign
    if f.thumb_touches_index and f.middle and f.ring and f.pinky:
        return "F"

    # D / G: only the index finger is up
    if f.index and not f.middle and not f.ring and not f.pinky:
        if f.index_dx > f.index_dy * HORIZONTAL_RATIO:
            return "G"
        return "D"

    # C: partially open, not collapsed
    if (
        1 <= f.extended_count <= 3
        and f.thumb_to_pinky > MIN_C_OPENING
        and f.thumb_to_index > MIN_C_OPENING
        and not f.all_four_curled
        and not f.all_four_extended
    ):
        return "C"

    # E: claw, thumb across the curled fingers
    if f.all_four_curled and f.thumb and f.tips_below_pips:
        return "E"

    return None


def classify_letter(hand: Optional[Hand]) -> Optional[str]:
    """Return one of A-G, or None when no rule matches or the hand is malformed."""
    if hand is None or len(hand) != HAND_LANDMARK_COUNT:
        return None
    return classify_features(extract_features(hand))
