import threading

import pytest

from dry_eye_screen import DryEyeAnalyzer, GeometryError, InvalidLandmarkCount, RiskLevel
from dry_eye_screen.errors import SessionStateError
from dry_eye_screen.modules.blink_detection import BlinkEvent, EyeLandmarkSet, LEFT_EYE_INDICES

from conftest import make_eye, make_face

OPEN = make_eye(0.32)
CLOSED = make_eye(0.08)
DEGENERATE = EyeLandmarkSet([(0.5, 0.5), (0.5, 0.4), (0.5, 0.4),
                             (0.5, 0.5), (0.5, 0.6), (0.5, 0.6)])


def blink(analyzer, closed_frames=2):
    for _ in range(closed_frames):
        analyzer.process_frame(CLOSED, CLOSED)
    return analyzer.process_frame(OPEN, OPEN)


def test_full_session_with_fifteen_blinks():
    results = []
    analyzer = DryEyeAnalyzer(on_result=results.append)
    analyzer.start(60)
    for second in range(60):
        analyzer.process_frame(OPEN, OPEN)
        if second % 4 == 0:
            assert blink(analyzer) is BlinkEvent.COMPLETE
        outcome = analyzer.tick()

    assert outcome is not None
    assert outcome.blink_rate_per_minute == 15.0
    assert outcome.risk_level is RiskLevel.NORMAL
    assert outcome.health_score == 85
    assert results == [outcome]
    assert analyzer.result is outcome
    assert not analyzer.is_running


def test_no_face_frames_change_nothing():
    analyzer = DryEyeAnalyzer()
    analyzer.start(60)
    analyzer.process_frame(CLOSED, CLOSED)
    before = analyzer.get_session_summary()
    assert analyzer.process_landmarks(None) is None
    assert analyzer.get_session_summary() == before
    assert analyzer.debouncer.consecutive_low_frames == 1


def test_process_landmarks_mapping():
    analyzer = DryEyeAnalyzer()
    analyzer.start(60)
    analyzer.process_landmarks(make_face(0.1))
    analyzer.process_landmarks(make_face(0.1))
    assert analyzer.process_landmarks(make_face(0.3)) is BlinkEvent.COMPLETE
    assert analyzer.preview().blink_count == 1


def test_missing_landmarks_surface_to_caller():
    analyzer = DryEyeAnalyzer()
    analyzer.start(60)
    with pytest.raises(InvalidLandmarkCount):
        analyzer.process_landmarks({33: (0.1, 0.1)})


def test_degenerate_frame_is_skipped():
    analyzer = DryEyeAnalyzer()
    analyzer.start(60)
    analyzer.process_frame(CLOSED, CLOSED)
    assert analyzer.process_frame(DEGENERATE, OPEN) is None
    summary = analyzer.get_session_summary()
    assert summary['frames_skipped'] == 1
    assert summary['frames_processed'] == 1
    # the closing run continues across the skipped frame
    analyzer.process_frame(CLOSED, CLOSED)
    assert analyzer.process_frame(OPEN, OPEN) is BlinkEvent.COMPLETE


def test_geometry_error_is_not_raised_from_frames():
    analyzer = DryEyeAnalyzer()
    analyzer.start(60)
    try:
        analyzer.process_frame(DEGENERATE, DEGENERATE)
    except GeometryError:
        pytest.fail("degenerate frames must be skipped")


def test_incomplete_blinks_ignored_by_default():
    analyzer = DryEyeAnalyzer()
    analyzer.start(60)
    assert blink(analyzer, closed_frames=1) is BlinkEvent.INCOMPLETE
    assessment = analyzer.stop()
    assert assessment.incomplete_blinks == 0
    assert assessment.incomplete_percentage == 0


def test_incomplete_blinks_counted_when_enabled():
    analyzer = DryEyeAnalyzer({'blink': {'count_incomplete_blinks': True}})
    analyzer.start(60)
    for _ in range(3):
        blink(analyzer)
    blink(analyzer, closed_frames=1)
    assessment = analyzer.stop()
    assert assessment.complete_blinks == 3
    assert assessment.incomplete_blinks == 1
    assert assessment.incomplete_percentage == 25


def test_stop_then_tick_is_an_error():
    analyzer = DryEyeAnalyzer()
    analyzer.start(60)
    for _ in range(2):
        blink(analyzer)
    for _ in range(30):
        analyzer.tick()
    assessment = analyzer.stop()
    assert assessment.complete_blinks == 2
    assert assessment.elapsed_seconds == 30
    assert assessment.blink_rate_per_minute == 4.0
    assert assessment.risk_level is RiskLevel.HIGH_RISK
    with pytest.raises(SessionStateError):
        analyzer.tick()


def test_frames_after_stop_are_ignored():
    analyzer = DryEyeAnalyzer()
    analyzer.start(60)
    analyzer.stop()
    assert blink(analyzer) is None
    assert analyzer.result.complete_blinks == 0


def test_start_twice_is_an_error():
    analyzer = DryEyeAnalyzer()
    analyzer.start()
    with pytest.raises(SessionStateError):
        analyzer.start()


def test_new_session_resets_debouncer_and_result():
    analyzer = DryEyeAnalyzer({'session': {'duration_seconds': 5}})
    analyzer.start()
    analyzer.process_frame(CLOSED, CLOSED)
    analyzer.process_frame(CLOSED, CLOSED)
    analyzer.stop()
    assert analyzer.result is not None

    analyzer.start()
    assert analyzer.result is None
    assert analyzer.accumulator.duration_seconds == 5
    assert analyzer.process_frame(OPEN, OPEN) is None


def test_configured_threshold_is_used():
    analyzer = DryEyeAnalyzer({'blink': {'ear_threshold': 0.35, 'consecutive_frames': 1}})
    analyzer.start(60)
    analyzer.process_frame(OPEN, OPEN)
    assert analyzer.process_frame(make_eye(0.4), make_eye(0.4)) is BlinkEvent.COMPLETE


def test_preview_reads_do_not_mutate():
    analyzer = DryEyeAnalyzer()
    analyzer.start(60)
    blink(analyzer)
    analyzer.tick()
    assert analyzer.preview() == analyzer.preview()


def test_frames_and_ticks_from_separate_threads():
    analyzer = DryEyeAnalyzer()
    analyzer.start(10_000)
    blinks = 200

    def feed_frames():
        for _ in range(blinks):
            blink(analyzer)

    def feed_ticks():
        for _ in range(500):
            analyzer.tick()

    threads = [threading.Thread(target=feed_frames), threading.Thread(target=feed_ticks)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assessment = analyzer.stop()
    assert assessment.complete_blinks == blinks
    assert assessment.elapsed_seconds == 500


@pytest.mark.parametrize('blinks, seconds, level', [
    (83, 500, RiskLevel.HIGH_RISK),
    (76, 303, RiskLevel.UNCERTAIN),
    (15, 60, RiskLevel.NORMAL),
])
def test_final_level_matches_live_preview(blinks, seconds, level):
    analyzer = DryEyeAnalyzer()
    analyzer.start(1000)
    for _ in range(blinks):
        blink(analyzer)
    for _ in range(seconds):
        analyzer.tick()

    live = analyzer.preview()
    assessment = analyzer.stop()
    assert live.risk_level is level
    assert assessment.risk_level is live.risk_level
    assert assessment.blink_rate_per_minute == pytest.approx(live.blink_rate)


def test_nan_landmark_frame_is_skipped():
    face = make_face(0.3)
    face[LEFT_EYE_INDICES[0]] = (float('nan'), 0.4)
    analyzer = DryEyeAnalyzer()
    analyzer.start(60)
    assert analyzer.process_landmarks(face) is None
    summary = analyzer.get_session_summary()
    assert summary['frames_skipped'] == 1
    assert summary['frames_processed'] == 0
