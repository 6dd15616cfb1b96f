from __future__ import annotations

from collections import deque
from typing import Deque, List, Optional, Tuple

from .types import UNKNOWN_LABEL, FrameResult


SMOOTHING_WINDOW = 4


class LabelSmoother:
    """
    Confirms a label once it has been seen on `window` consecutive frames.

    Any different label, a frame without hands, or an "Unknown" label restarts the
    run from scratch.
    """

    def __init__(self, window: int = SMOOTHING_WINDOW) -> None:
        if window < 1:
            raise ValueError(f"Smoothing window must be >= 1, got {window}")
        self.window = window
        self._history: Deque[str] = deque()
        self._confirmed: List[str] = []

    @property
    def history(self) -> Tuple[str, ...]:
        return tuple(self._history)

    @property
    def confirmed(self) -> List[str]:
        return list(self._confirmed)

    @property
    def confirmed_label(self) -> Optional[str]:
        return self._confirmed[0] if self._confirmed else None

    def reset(self) -> None:
        self._history.clear()
        self._confirmed = []

    def observe(self, label: Optional[str]) -> List[str]:
        if label is None or label == UNKNOWN_LABEL:
            self.reset()
            return []

        if self._history and self._history[-1] != label:
            self._history.clear()
        self._history.append(label)
        if len(self._history) > self.window:
            self._history.popleft()

        if len(self._history) == self.window and all(h == label for h in self._history):
            self._confirmed = [label]
        else:
            self._confirmed = []
        return self.confirmed

    def update(self, result: FrameResult) -> List[str]:
        return self.observe(result.primary_label)
