"""
Session accumulation of debounced blink events over a fixed time window.
"""

import logging
from enum import Enum
from typing import Callable, NamedTuple, Optional

from ..errors import SessionStateError
from ..modules.blink_detection import BlinkEvent
from .scoring import RiskLevel, RiskThresholds, SessionSnapshot, blink_rate_per_minute, classify

logger = logging.getLogger(__name__)

SESSION_DURATION_SECONDS = 60


class SessionState(Enum):
    """Session lifecycle."""
    IDLE = 0
    RUNNING = 1
    FINISHED = 2


class SessionPreview(NamedTuple):
    """Live values for display while a session runs."""
    elapsed_seconds: int
    blink_count: int
    blink_rate: float
    risk_level: RiskLevel


class SessionAccumulator:
    """
    Counts complete and incomplete blinks and elapsed seconds for one
    session at a time, driven by an external one-per-second tick.

    Finalization runs exactly once per session, on whichever comes first of
    the tick that reaches the duration or a manual stop().
    """

    def __init__(self, thresholds: Optional[RiskThresholds] = None,
                 on_finalize: Optional[Callable[[SessionSnapshot], None]] = None):
        """
        Initialize session accumulator.

        Args:
            thresholds: Risk bands used by the live preview
            on_finalize: Called with the snapshot when a session finishes
        """
        self.thresholds = thresholds or RiskThresholds()
        self.on_finalize = on_finalize

        self.state = SessionState.IDLE
        self.duration_seconds = SESSION_DURATION_SECONDS
        self.elapsed_seconds = 0
        self.complete_blink_count = 0
        self.incomplete_blink_count = 0
        self.last_snapshot: Optional[SessionSnapshot] = None

    @property
    def is_running(self) -> bool:
        return self.state is SessionState.RUNNING

    def start(self, duration_seconds: int = SESSION_DURATION_SECONDS) -> None:
        """Reset all counters and begin a new session."""
        if self.is_running:
            raise SessionStateError("Session already running")
        if isinstance(duration_seconds, bool) or not isinstance(duration_seconds, int) \
                or duration_seconds <= 0:
            raise ValueError(f"duration_seconds must be a positive integer, got {duration_seconds!r}")

        self.duration_seconds = duration_seconds
        self.elapsed_seconds = 0
        self.complete_blink_count = 0
        self.incomplete_blink_count = 0
        self.last_snapshot = None
        self.state = SessionState.RUNNING
        logger.info(f"Session started ({duration_seconds}s window)")

    def on_blink_event(self, kind: BlinkEvent) -> None:
        self._require_running('on_blink_event')
        if kind is BlinkEvent.COMPLETE:
            self.complete_blink_count += 1
        elif kind is BlinkEvent.INCOMPLETE:
            self.incomplete_blink_count += 1
        else:
            raise ValueError(f"Unknown blink event: {kind!r}")

    def on_tick(self) -> Optional[SessionSnapshot]:
        """
        Advance the session clock by one second.

        Returns:
            The finalized snapshot if this tick ended the session, else None
        """
        self._require_running('on_tick')
        self.elapsed_seconds += 1
        if self.elapsed_seconds >= self.duration_seconds:
            return self._finalize()
        return None

    def stop(self) -> SessionSnapshot:
        """Finalize early with the counters accumulated so far."""
        self._require_running('stop')
        logger.info(f"Session stopped manually at {self.elapsed_seconds}s")
        return self._finalize()

    def preview(self) -> SessionPreview:
        """Current (elapsed, blinks, rate, risk level). Does not mutate state."""
        rate = blink_rate_per_minute(self.complete_blink_count, self.elapsed_seconds)
        return SessionPreview(
            elapsed_seconds=self.elapsed_seconds,
            blink_count=self.complete_blink_count,
            blink_rate=rate,
            risk_level=classify(rate, self.thresholds),
        )

    def _finalize(self) -> SessionSnapshot:
        self.state = SessionState.FINISHED
        snapshot = SessionSnapshot(
            elapsed_seconds=self.elapsed_seconds,
            complete_blinks=self.complete_blink_count,
            incomplete_blinks=self.incomplete_blink_count,
            duration_seconds=self.duration_seconds,
        )
        self.last_snapshot = snapshot
        logger.info(f"Session finished: {snapshot.complete_blinks} blinks "
                    f"in {snapshot.elapsed_seconds}s")
        if self.on_finalize is not None:
            self.on_finalize(snapshot)
        return snapshot

    def _require_running(self, operation: str) -> None:
        if not self.is_running:
            raise SessionStateError(f"{operation}() requires a running session "
                                    f"(state: {self.state.name})")
