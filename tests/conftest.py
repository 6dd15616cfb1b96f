from __future__ import annotations

from typing import Dict, List, Tuple

import pytest

from signspell_hand.types import Landmark


WRIST = (0.5, 0.9, 0.0)
PIP_Y = 0.5
EXTENDED_TIP_Y = 0.3
CURLED_TIP_Y = 0.6

# finger name -> (x column, mcp, pip, dip, tip)
FINGERS = {
    "index": (0.4, 5, 6, 7, 8),
    "middle": (0.5, 9, 10, 11, 12),
    "ring": (0.6, 13, 14, 15, 16),
    "pinky": (0.7, 17, 18, 19, 20),
}


def make_hand(
    thumb: bool = False,
    index: bool = False,
    middle: bool = False,
    ring: bool = False,
    pinky: bool = False,
    overrides: Dict[int, Tuple[float, float, float]] = None,
) -> List[Landmark]:
    """
    Synthetic 21-point hand with the requested fingers pointing up.

    Extended tips sit well above their PIP joint and curled tips well below it, so
    the flags hold both with and without the extension tolerance.
    """
    pts = [(0.5, 0.5, 0.0)] * 21
    pts[0] = WRIST
    pts[1] = (0.35, 0.8, 0.0)
    pts[2] = (0.3, 0.6, 0.0)
    pts[3] = (0.3, 0.55, 0.0)
    pts[4] = (0.3, 0.4, 0.0) if thumb else (0.3, 0.7, 0.0)

    flags = {"index": index, "middle": middle, "ring": ring, "pinky": pinky}
    for name, (x, mcp, pip, dip, tip) in FINGERS.items():
        up = flags[name]
        pts[mcp] = (x, 0.65, 0.0)
        pts[pip] = (x, PIP_Y, 0.0)
        pts[dip] = (x, 0.4 if up else 0.58, 0.0)
        pts[tip] = (x, EXTENDED_TIP_Y if up else CURLED_TIP_Y, 0.0)

    for idx, value in (overrides or {}).items():
        pts[idx] = value
    return [Landmark(*p) for p in pts]


def constant_hand(value: float) -> List[Landmark]:
    return [Landmark(value, value, value) for _ in range(21)]


@pytest.fixture
def hand_factory():
    return make_hand


@pytest.fixture
def fist():
    return make_hand()


@pytest.fixture
def open_hand():
    return make_hand(True, True, True, True, True)


@pytest.fixture
def collapsed_hand():
    # Wrist and middle fingertip coincide: no real hand.
    return make_hand(overrides={12: WRIST})


class FakeClock:
    def __init__(self, start: float = 0.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()
