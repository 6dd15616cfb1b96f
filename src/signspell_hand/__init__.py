from .gestures import classify_gesture
from .letters import classify_letter
from .recognition import build_frame_result, flatten_landmarks, parse_from_flat_output
from .sequence import HolisticSequenceBuffer, InsufficientDataError, SequenceBuffer
from .session import RecognitionSession
from .smoothing import LabelSmoother
from .sources import HandObservation, LandmarkSource
from .types import FrameResult, GestureType, Landmark, Recognition

__all__ = [
    "build_frame_result",
    "classify_gesture",
    "classify_letter",
    "flatten_landmarks",
    "parse_from_flat_output",
    "FrameResult",
    "GestureType",
    "HandObservation",
    "HolisticSequenceBuffer",
    "InsufficientDataError",
    "LabelSmoother",
    "Landmark",
    "LandmarkSource",
    "Recognition",
    "RecognitionSession",
    "SequenceBuffer",
]
