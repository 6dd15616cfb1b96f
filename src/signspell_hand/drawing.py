from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

import cv2

from .geometry import clamp_int
from .types import FrameResult, Hand, HandLandmarkIndex as L, Landmark


HAND_CONNECTIONS: List[Tuple[int, int]] = [
    # thumb
    (0, 1),
    (1, 2),
    (2, 3),
    (3, 4),
    # index
    (0, 5),
    (5, 6),
    (6, 7),
    (7, 8),
    # middle
    (0, 9),
    (9, 10),
    (10, 11),
    (11, 12),
    # ring
    (0, 13),
    (13, 14),
    (14, 15),
    (15, 16),
    # pinky
    (0, 17),
    (17, 18),
    (18, 19),
    (19, 20),
    # palm
    (5, 9),
    (9, 13),
    (13, 17),
]

LEFT_COLOR = (255, 160, 40)
RIGHT_COLOR = (40, 200, 255)


def landmark_to_pixel(lm: Landmark, width: int, height: int, mirror: bool = False) -> Tuple[int, int]:
    x = 1.0 - lm.x if mirror else lm.x
    x_px = clamp_int(int(round(x * width)), 0, width - 1)
    y_px = clamp_int(int(round(lm.y * height)), 0, height - 1)
    return (x_px, y_px)


def draw_label(frame, text: str, org: Tuple[int, int], color=(255, 255, 255), scale=0.6, thickness=2):
    # Dark outline keeps the text readable on any background.
    cv2.putText(frame, text, org, cv2.FONT_HERSHEY_SIMPLEX, scale, (0, 0, 0), thickness + 2, cv2.LINE_AA)
    cv2.putText(frame, text, org, cv2.FONT_HERSHEY_SIMPLEX, scale, color, thickness, cv2.LINE_AA)
    return frame


def draw_hand(frame, hand: Hand, color=(0, 255, 255), mirror: bool = False):
    h, w = frame.shape[:2]
    pts = [landmark_to_pixel(lm, w, h, mirror) for lm in hand]
    for a, b in HAND_CONNECTIONS:
        if a < len(pts) and b < len(pts):
            cv2.line(frame, pts[a], pts[b], color, 2, cv2.LINE_AA)
    for pt in pts:
        cv2.circle(frame, pt, 3, (40, 255, 120), -1, lineType=cv2.LINE_AA)
    return frame


def draw_frame_result(frame, result: FrameResult, confirmed: Optional[Sequence[str]] = None, mirror: bool = False):
    """Skeletons, per-hand labels, the confirmed label and a performance line."""
    h, w = frame.shape[:2]

    for hand, color in ((result.left_hand_landmarks, LEFT_COLOR), (result.right_hand_landmarks, RIGHT_COLOR)):
        if hand:
            draw_hand(frame, hand, color, mirror)

    for rec in result.recognitions:
        x, y = landmark_to_pixel(rec.landmarks[L.WRIST], w, h, mirror)
        draw_label(frame, f"{rec.handedness}: {rec.label}", (x, clamp_int(y + 24, 0, h - 1)))

    if confirmed:
        draw_label(frame, confirmed[0], (w - 90, 70), color=(0, 255, 0), scale=2.0, thickness=4)

    draw_label(frame, result.summary(), (12, h - 14), scale=0.5, thickness=1)
    return frame

