"""
Main dry-eye analyzer that ties landmark geometry, blink debouncing,
session accumulation and risk scoring together.
"""

import logging
import threading
from typing import Any, Callable, Dict, Optional

from ..errors import GeometryError
from ..modules.blink_detection import (BlinkDebouncer, BlinkEvent, EyeLandmarkSet,
                                       calculate_eye_aspect_ratio, compute_frame_openness,
                                       extract_eyes, BLINK_THRESHOLD, MIN_CONSEC_FRAMES)
from ..modules.blink_detection.ear_calculator import DEFAULT_EPSILON
from .scoring import RiskAssessment, RiskClassifier, RiskThresholds, SessionSnapshot
from .session_accumulator import SESSION_DURATION_SECONDS, SessionAccumulator, SessionPreview

logger = logging.getLogger(__name__)


class DryEyeAnalyzer:
    """
    Single-session screening engine.

    Frames and one-second ticks usually come from different sources (the
    landmark detector and a timer). Every entry point takes the same lock,
    so the debouncer and accumulator only ever see one input at a time.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None,
                 on_result: Optional[Callable[[RiskAssessment], None]] = None):
        """
        Initialize dry-eye analyzer.

        Args:
            config: Configuration with optional 'blink', 'session' and 'risk' sections
            on_result: Called with the assessment each time a session finishes
        """
        self.config = config or {}
        blink_config = self.config.get('blink', {})
        session_config = self.config.get('session', {})

        self.geometry_epsilon = float(blink_config.get('geometry_epsilon', DEFAULT_EPSILON))
        self.count_incomplete_blinks = bool(blink_config.get('count_incomplete_blinks', False))
        self.default_duration = int(session_config.get('duration_seconds', SESSION_DURATION_SECONDS))

        thresholds = RiskThresholds.from_config(self.config.get('risk'))
        self.debouncer = BlinkDebouncer(
            ear_threshold=float(blink_config.get('ear_threshold', BLINK_THRESHOLD)),
            consecutive_frames=int(blink_config.get('consecutive_frames', MIN_CONSEC_FRAMES))
        )
        self.classifier = RiskClassifier(thresholds)
        self.accumulator = SessionAccumulator(thresholds, on_finalize=self._on_finalize)

        self.on_result = on_result
        self.result: Optional[RiskAssessment] = None
        self.frames_processed = 0
        self.frames_skipped = 0

        self._lock = threading.RLock()

    @property
    def is_running(self) -> bool:
        with self._lock:
            return self.accumulator.is_running

    def start(self, duration_seconds: Optional[int] = None) -> None:
        """Begin a new session; a previous result is discarded."""
        with self._lock:
            if duration_seconds is None:
                duration_seconds = self.default_duration
            self.accumulator.start(duration_seconds)
            self.debouncer.reset()
            self.result = None
            self.frames_processed = 0
            self.frames_skipped = 0

    def stop(self) -> RiskAssessment:
        """Finalize the running session with whatever has been counted."""
        with self._lock:
            self.accumulator.stop()
            return self.result

    def tick(self) -> Optional[RiskAssessment]:
        """
        Deliver one elapsed second.

        Returns:
            The assessment if this tick ended the session, else None
        """
        with self._lock:
            if self.accumulator.on_tick() is not None:
                return self.result
            return None

    def process_frame(self, left_eye: EyeLandmarkSet,
                      right_eye: EyeLandmarkSet) -> Optional[BlinkEvent]:
        """
        Process one frame's eye landmarks.

        Frames with degenerate eye geometry are skipped. Frames that arrive
        while no session is running are ignored.

        Returns:
            The blink event completed by this frame, or None
        """
        with self._lock:
            if not self.accumulator.is_running:
                return None
            try:
                left_ear = calculate_eye_aspect_ratio(left_eye, self.geometry_epsilon)
                right_ear = calculate_eye_aspect_ratio(right_eye, self.geometry_epsilon)
            except GeometryError as e:
                self.frames_skipped += 1
                logger.debug(f"Skipping frame: {e}")
                return None
            return self._process_openness(compute_frame_openness(left_ear, right_ear))

    def process_openness(self, openness: float) -> Optional[BlinkEvent]:
        """Process a precomputed openness sample (e.g. from a recording)."""
        with self._lock:
            if not self.accumulator.is_running:
                return None
            return self._process_openness(openness)

    def process_landmarks(self, landmarks: Optional[Any]) -> Optional[BlinkEvent]:
        """
        Process a full-face detector result.

        Args:
            landmarks: Face Mesh landmarks indexed by landmark number,
                or None when no face was found
        """
        if landmarks is None:
            return None
        left_eye, right_eye = extract_eyes(landmarks)
        return self.process_frame(left_eye, right_eye)

    def preview(self) -> SessionPreview:
        with self._lock:
            return self.accumulator.preview()

    def get_session_summary(self) -> Dict[str, Any]:
        """Counters and result of the current or last session."""
        with self._lock:
            preview = self.accumulator.preview()
            return {
                'state': self.accumulator.state.name.lower(),
                'elapsed_seconds': preview.elapsed_seconds,
                'duration_seconds': self.accumulator.duration_seconds,
                'complete_blinks': self.accumulator.complete_blink_count,
                'incomplete_blinks': self.accumulator.incomplete_blink_count,
                'frames_processed': self.frames_processed,
                'frames_skipped': self.frames_skipped,
                'result': self.result.to_dict() if self.result else None,
            }

    def _process_openness(self, openness: float) -> Optional[BlinkEvent]:
        self.frames_processed += 1
        event = self.debouncer.update(openness)
        if event is BlinkEvent.COMPLETE or (event is BlinkEvent.INCOMPLETE
                                            and self.count_incomplete_blinks):
            self.accumulator.on_blink_event(event)
        return event

    def _on_finalize(self, snapshot: SessionSnapshot) -> None:
        self.result = self.classifier.assess(snapshot)
        if self.on_result is not None:
            self.on_result(self.result)
