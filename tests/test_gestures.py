import pytest

from signspell_hand.gestures import classify_gesture
from signspell_hand.types import GestureType, Landmark

from conftest import make_hand


@pytest.mark.parametrize(
    "flags, expected",
    [
        ((True, True, True, True, True), GestureType.OPEN_PALM),
        ((False, False, False, False, False), GestureType.CLOSED_FIST),
        ((False, True, False, False, False), GestureType.POINTING_UP),
        ((True, True, False, False, False), GestureType.POINTING_UP),
        ((False, True, True, False, False), GestureType.VICTORY),
        ((True, True, False, False, True), GestureType.I_LOVE_YOU),
        ((True, False, False, False, False), GestureType.THUMB_UP),
        ((False, False, True, False, False), GestureType.CUSTOM_GESTURE),
        ((False, True, True, True, False), GestureType.CUSTOM_GESTURE),
    ],
)
def test_gesture_patterns(flags, expected):
    assert classify_gesture(make_hand(*flags)) is expected


def test_no_tolerance_on_pip_comparison():
    # Index tip level with its PIP: not extended for gestures.
    hand = make_hand(overrides={8: (0.4, 0.5, 0.0)})
    assert classify_gesture(hand) is GestureType.CLOSED_FIST


@pytest.mark.parametrize("n", [0, 5, 20, 63])
def test_wrong_length_is_unknown(n):
    assert classify_gesture([Landmark(0.1, 0.2)] * n) is GestureType.UNKNOWN


def test_none_is_unknown():
    assert classify_gesture(None) is GestureType.UNKNOWN


def test_gesture_values_match_display_labels():
    assert GestureType.OPEN_PALM.value == "Open_Palm"
    assert GestureType.I_LOVE_YOU.value == "ILoveYou"
    assert GestureType.UNKNOWN.value == "Unknown"
