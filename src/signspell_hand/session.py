"""
Capture-session controller.

A `RecognitionSession` owns one landmark source, one label smoother and one
sequence buffer for its whole lifetime. It is the single writer for the smoother
and buffer; callers feeding frames from several threads must serialize calls.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, replace
from typing import Callable, List, Optional, Union

import numpy as np

from .recognition import build_frame_result, is_hand_present
from .sequence import HolisticSequenceBuffer, SequenceBuffer, assemble_holistic_landmarks
from .smoothing import LabelSmoother
from .sources import HandObservation, LandmarkSource
from .types import FrameResult, Hand


logger = logging.getLogger(__name__)

MIN_PROCESSING_INTERVAL_MS = 100
LOG_EVERY_N_FRAMES = 30

AnySequenceBuffer = Union[SequenceBuffer, HolisticSequenceBuffer]


class FpsMeter:
    """Frames per second, recomputed once per `window_s` of elapsed time."""

    def __init__(self, window_s: float = 1.0, clock: Callable[[], float] = time.monotonic) -> None:
        self.window_s = window_s
        self._clock = clock
        self._frames = 0
        self._window_start: Optional[float] = None
        self.fps = 0.0

    def tick(self, now: Optional[float] = None) -> float:
        now = self._clock() if now is None else now
        if self._window_start is None:
            self._window_start = now
        self._frames += 1
        elapsed = now - self._window_start
        if elapsed >= self.window_s:
            self.fps = self._frames / elapsed
            self._frames = 0
            self._window_start = now
        return self.fps


@dataclass(frozen=True)
class SessionUpdate:
    result: FrameResult
    confirmed: List[str]
    progress: float


class RecognitionSession:
    def __init__(
        self,
        source: Optional[LandmarkSource] = None,
        smoother: Optional[LabelSmoother] = None,
        buffer: Optional[AnySequenceBuffer] = None,
        validate_presence: bool = True,
        min_interval_ms: float = MIN_PROCESSING_INTERVAL_MS,
        clock: Callable[[], float] = time.monotonic,
        countdown_s: float = 0.0,
    ) -> None:
        if countdown_s < 0:
            raise ValueError(f"countdown_s must be >= 0, got {countdown_s}")
        self.source = source
        self.smoother = smoother if smoother is not None else LabelSmoother()
        self.buffer = buffer if buffer is not None else SequenceBuffer()
        self.validate_presence = validate_presence
        self.min_interval_ms = min_interval_ms
        self.countdown_s = countdown_s
        self._clock = clock
        self._fps = FpsMeter(clock=clock)
        self._last_processed: Optional[float] = None
        self._record_from: Optional[float] = None
        self._frame_count = 0
        self.recording = False
        self.exhausted = False

    @property
    def progress(self) -> float:
        return self.buffer.progress()

    def countdown_remaining(self, now: Optional[float] = None) -> float:
        """Seconds until frames start being buffered; 0 when not counting down."""
        if not self.recording or self._record_from is None:
            return 0.0
        now = self._clock() if now is None else now
        return max(0.0, self._record_from - now)

    def start_recording(self, now: Optional[float] = None) -> None:
        """Clear the buffer and start recording once `countdown_s` has elapsed."""
        now = self._clock() if now is None else now
        self.buffer.clear()
        self.recording = True
        self._record_from = now + self.countdown_s
        logger.info(
            "Recording starts in %.1fs (%d frames needed)", self.countdown_s, self.buffer.capacity
        )

    def stop_recording(self) -> Optional[np.ndarray]:
        """
        Stop recording and hand back the model input, if enough frames were captured.

        The buffer is cleared either way.
        """
        self.recording = False
        self._record_from = None
        sequence = None
        if self.buffer.is_full():
            sequence = self.buffer.get_preprocessed_sequence()
            logger.info("Sequence ready for model: %d values", sequence.shape[0])
        else:
            logger.warning(
                "Not enough data: recorded %d/%d frames", self.buffer.size(), self.buffer.capacity
            )
        self.buffer.clear()
        return sequence

    def process(self, observation: HandObservation, now: Optional[float] = None) -> Optional[SessionUpdate]:
        """Process one observation; returns None when throttled."""
        now = self._clock() if now is None else now
        if (
            self._last_processed is not None
            and (now - self._last_processed) * 1000.0 < self.min_interval_ms
        ):
            return None
        self._last_processed = now
        fps = self._fps.tick(now)

        started = time.perf_counter()
        result = build_frame_result(
            observation.left,
            observation.right,
            fps=fps,
            validate_presence=self.validate_presence,
            landmarks=observation.landmarks,
        )
        result = replace(result, processing_time=(time.perf_counter() - started) * 1000.0)

        confirmed = self.smoother.update(result)
        if self.recording and self.countdown_remaining(now) == 0.0:
            self._record(observation)

        self._frame_count += 1
        if self._frame_count % LOG_EVERY_N_FRAMES == 0:
            logger.debug("%s", result.summary())

        return SessionUpdate(result=result, confirmed=confirmed, progress=self.buffer.progress())

    def _usable(self, hand: Optional[Hand]) -> Optional[Hand]:
        if hand is None or (self.validate_presence and not is_hand_present(hand)):
            return None
        return hand

    def _record(self, observation: HandObservation) -> None:
        """Buffer one frame; hands failing the presence check count as absent."""
        left = self._usable(observation.left)
        right = self._usable(observation.right)
        if left is None and right is None:
            return
        if isinstance(self.buffer, HolisticSequenceBuffer):
            landmarks = observation.landmarks
            if landmarks is None:
                landmarks = assemble_holistic_landmarks(left=left, right=right)
            self.buffer.add_frame(landmarks)
        else:
            self.buffer.add_frame(left, right)

    def step(self) -> Optional[SessionUpdate]:
        """
        Pull the next observation from the source and process it.

        Returns None when the source is exhausted or the frame was throttled;
        `exhausted` tells the two apart.
        """
        if self.source is None:
            raise RuntimeError("RecognitionSession has no landmark source")
        observation = self.source.next_hands()
        if observation is None:
            self.exhausted = True
            return None
        return self.process(observation)

    def close(self) -> None:
        self.recording = False
        self.buffer.clear()
        self.smoother.reset()
        if self.source is not None:
            self.source.close()

    def __enter__(self) -> "RecognitionSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
