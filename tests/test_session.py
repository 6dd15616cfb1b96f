import logging

import numpy as np
import pytest

from signspell_hand.sequence import HolisticSequenceBuffer, SequenceBuffer
from signspell_hand.session import FpsMeter, RecognitionSession
from signspell_hand.smoothing import LabelSmoother
from signspell_hand.sources import HandObservation, ReplayLandmarkSource
from signspell_hand.types import Landmark

from conftest import make_hand


def observation(hand=None, right=None):
    return HandObservation(left=hand, right=right)


class ClosingSource(ReplayLandmarkSource):
    closed = False

    def close(self):
        self.closed = True
        super().close()


def test_throttles_frames_inside_min_interval(clock):
    session = RecognitionSession(clock=clock, min_interval_ms=100)
    fist = make_hand()
    assert session.process(observation(fist), now=0.0) is not None
    assert session.process(observation(fist), now=0.05) is None
    assert session.process(observation(fist), now=0.5) is not None


def test_confirms_after_four_processed_frames(clock):
    session = RecognitionSession(clock=clock, min_interval_ms=0)
    updates = []
    for _ in range(4):
        clock.advance(0.2)
        updates.append(session.process(observation(make_hand())))
    assert [u.confirmed for u in updates] == [[], [], [], ["A"]]
    assert updates[-1].result.primary_label == "A"
    assert updates[-1].result.processing_time >= 0.0


def test_no_hand_resets_confirmation(clock):
    session = RecognitionSession(clock=clock, min_interval_ms=0)
    for _ in range(4):
        session.process(observation(make_hand()))
    assert session.smoother.confirmed_label == "A"
    update = session.process(observation())
    assert update.confirmed == []
    assert update.result.recognitions == []


def test_collapsed_hand_does_not_confirm(clock, collapsed_hand):
    session = RecognitionSession(clock=clock, min_interval_ms=0)
    for _ in range(5):
        update = session.process(observation(collapsed_hand))
    assert update.confirmed == []


def test_recording_produces_model_input(clock):
    session = RecognitionSession(clock=clock, min_interval_ms=0, buffer=SequenceBuffer(capacity=5))
    session.process(observation(make_hand()))
    assert session.progress == 0.0  # not recording yet

    session.start_recording()
    for i in range(7):
        update = session.process(observation(make_hand(index=bool(i % 2))))
    assert update.progress == 1.0

    sequence = session.stop_recording()
    assert sequence.shape == (5 * 126,)
    assert not session.recording
    assert session.progress == 0.0


def test_stop_recording_without_enough_frames(clock, caplog):
    session = RecognitionSession(clock=clock, min_interval_ms=0)
    session.start_recording()
    for _ in range(3):
        session.process(observation(make_hand()))
    with caplog.at_level(logging.WARNING, logger="signspell_hand.session"):
        assert session.stop_recording() is None
    assert "Not enough data" in caplog.text
    assert session.progress == 0.0


def test_empty_frames_are_not_recorded(clock):
    session = RecognitionSession(clock=clock, min_interval_ms=0, buffer=SequenceBuffer(capacity=3))
    session.start_recording()
    session.process(observation())
    session.process(observation(None, make_hand()))
    assert session.buffer.size() == 1


def test_start_recording_clears_stale_frames(clock):
    buffer = SequenceBuffer(capacity=3)
    buffer.add_frame(make_hand())
    session = RecognitionSession(clock=clock, min_interval_ms=0, buffer=buffer)
    session.start_recording()
    assert len(buffer) == 0


def test_step_pulls_from_source(clock):
    source = ClosingSource([observation(make_hand(True, True, True, True, True))])
    with RecognitionSession(source=source, clock=clock, min_interval_ms=0) as session:
        update = session.step()
        assert update.result.primary_label == "B"
        assert not session.exhausted
        assert session.step() is None
        assert session.exhausted
    assert source.closed


def test_step_without_source():
    with pytest.raises(RuntimeError):
        RecognitionSession().step()


def test_validation_can_be_disabled(clock, collapsed_hand):
    session = RecognitionSession(clock=clock, min_interval_ms=0, validate_presence=False)
    update = session.process(observation(collapsed_hand))
    assert update.result.detection_count == 1


def test_custom_smoother_is_used(clock):
    session = RecognitionSession(clock=clock, min_interval_ms=0, smoother=LabelSmoother(window=1))
    assert session.process(observation(make_hand())).confirmed == ["A"]


def test_fps_meter():
    meter = FpsMeter(window_s=1.0)
    assert meter.tick(0.0) == 0.0
    assert meter.tick(0.5) == 0.0
    assert meter.tick(1.0) == pytest.approx(3.0)
    assert meter.tick(1.5) == pytest.approx(3.0)
    assert meter.tick(2.0) == pytest.approx(2.0)


def test_hands_failing_presence_check_are_not_recorded(clock, collapsed_hand):
    session = RecognitionSession(clock=clock, min_interval_ms=0, buffer=SequenceBuffer(capacity=3))
    session.start_recording()
    for _ in range(3):
        update = session.process(observation(collapsed_hand))
        assert update.result.recognitions == []
    assert session.buffer.size() == 0


def test_failed_slot_is_zeroed_when_other_hand_is_real(clock, collapsed_hand):
    session = RecognitionSession(clock=clock, min_interval_ms=0, buffer=SequenceBuffer(capacity=1))
    session.start_recording()
    session.process(observation(collapsed_hand, make_hand()))
    frame = session.buffer.get_sequence()[0].reshape(42, 3)
    assert not frame[:21].any()
    assert frame[21:].any()


def test_unvalidated_session_records_every_hand(clock, collapsed_hand):
    session = RecognitionSession(
        clock=clock, min_interval_ms=0, validate_presence=False, buffer=SequenceBuffer(capacity=3)
    )
    session.start_recording()
    session.process(observation(collapsed_hand))
    assert session.buffer.size() == 1


def test_countdown_holds_off_buffering(clock):
    session = RecognitionSession(clock=clock, min_interval_ms=0, countdown_s=3.0)
    session.start_recording()
    assert session.countdown_remaining() == pytest.approx(3.0)

    clock.advance(1.0)
    session.process(observation(make_hand()))
    assert session.buffer.size() == 0
    assert session.countdown_remaining() == pytest.approx(2.0)

    clock.advance(2.0)
    session.process(observation(make_hand()))
    assert session.buffer.size() == 1
    assert session.countdown_remaining() == 0.0

    session.stop_recording()
    assert session.countdown_remaining() == 0.0


def test_negative_countdown_rejected():
    with pytest.raises(ValueError):
        RecognitionSession(countdown_s=-1.0)


def test_holistic_buffer_places_hands_in_layout(clock):
    session = RecognitionSession(
        clock=clock, min_interval_ms=0, buffer=HolisticSequenceBuffer(capacity=1)
    )
    session.start_recording()
    session.process(observation(make_hand()))
    frame = session.buffer.get_sequence()[0].reshape(88, 3)
    # 13 face points, 33 pose points, then the left hand's wrist.
    assert not frame[:46].any()
    assert frame[46].tolist() == pytest.approx([0.5, 0.9, 0.0])
    assert not frame[67:].any()


def test_holistic_buffer_prefers_source_landmarks(clock):
    session = RecognitionSession(
        clock=clock, min_interval_ms=0, buffer=HolisticSequenceBuffer(capacity=1)
    )
    full = [Landmark(0.25, 0.25, 0.25)] * 543
    session.start_recording()
    update = session.process(HandObservation(left=make_hand(), landmarks=full))
    assert update.result.landmarks is full
    assert session.buffer.get_sequence() == pytest.approx(np.full((1, 264), 0.25))
