import numpy as np

from signspell_hand.drawing import HAND_CONNECTIONS, draw_frame_result, draw_hand, landmark_to_pixel
from signspell_hand.recognition import build_frame_result
from signspell_hand.types import Landmark

from conftest import make_hand


def blank(w=320, h=240):
    return np.zeros((h, w, 3), dtype=np.uint8)


def test_landmark_to_pixel_scales_and_clamps():
    assert landmark_to_pixel(Landmark(0.5, 0.25), 200, 100) == (100, 25)
    assert landmark_to_pixel(Landmark(1.0, 1.0), 200, 100) == (199, 99)
    assert landmark_to_pixel(Landmark(-0.3, -2.0), 200, 100) == (0, 0)


def test_landmark_to_pixel_mirror():
    assert landmark_to_pixel(Landmark(0.25, 0.5), 100, 100, mirror=True) == (75, 50)


def test_connections_cover_every_landmark():
    points = {i for pair in HAND_CONNECTIONS for i in pair}
    assert points == set(range(21))
    assert len(HAND_CONNECTIONS) == 23


def test_draw_hand_marks_pixels():
    frame = blank()
    out = draw_hand(frame, make_hand(index=True))
    assert out is frame
    assert frame.any()


def test_draw_frame_result_draws_in_place():
    frame = blank()
    result = build_frame_result(make_hand(), make_hand(True, True, True, True, True))
    out = draw_frame_result(frame, result, confirmed=["A"])
    assert out is frame
    assert frame.any()


def test_draw_frame_result_without_hands():
    frame = blank()
    result = build_frame_result(None, None)
    draw_frame_result(frame, result)
    # Only the performance line along the bottom edge.
    assert frame[:200].sum() == 0
    assert frame[200:].any()
