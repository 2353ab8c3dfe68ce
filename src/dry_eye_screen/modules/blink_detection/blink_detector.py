"""
Blink Detection System

Turns the per-frame eye openness signal into discrete, debounced blink
events. A blink only counts once the eye has stayed below the EAR threshold
for a minimum number of consecutive frames and then reopened; shorter dips
are reported as incomplete blinks. A sustained closure never emits an event
until the eye opens again.
"""

import logging
from enum import Enum
from typing import Iterable, List, Optional

logger = logging.getLogger(__name__)

BLINK_THRESHOLD = 0.27
MIN_CONSEC_FRAMES = 2


class BlinkEvent(Enum):
    """Outcome of a closed-eye run once the eye reopens."""
    COMPLETE = 'complete'
    INCOMPLETE = 'incomplete'


class BlinkDebouncer:
    """
    Open / Closing(count) state machine over openness samples.

    Not reentrant: samples must be fed one at a time in arrival order.
    """

    def __init__(self, ear_threshold: float = BLINK_THRESHOLD,
                 consecutive_frames: int = MIN_CONSEC_FRAMES):
        """
        Initialize blink debouncer.

        Args:
            ear_threshold: Openness below this value counts as a closed frame
            consecutive_frames: Closed frames needed for a complete blink
        """
        if consecutive_frames < 1:
            raise ValueError(f"consecutive_frames must be >= 1, got {consecutive_frames}")
        self.ear_threshold = ear_threshold
        self.consecutive_frames = consecutive_frames
        self._consecutive_low = 0

    @property
    def consecutive_low_frames(self) -> int:
        return self._consecutive_low

    @property
    def is_closing(self) -> bool:
        return self._consecutive_low > 0

    def update(self, openness: float) -> Optional[BlinkEvent]:
        """
        Feed one openness sample.

        Returns:
            The blink event completed by this frame, or None
        """
        if openness < self.ear_threshold:
            self._consecutive_low += 1
            return None

        if self._consecutive_low == 0:
            return None

        run_length = self._consecutive_low
        self._consecutive_low = 0
        if run_length >= self.consecutive_frames:
            logger.debug(f"Blink completed after {run_length} closed frames")
            return BlinkEvent.COMPLETE
        logger.debug(f"Incomplete blink ({run_length} closed frames)")
        return BlinkEvent.INCOMPLETE

    def reset(self) -> None:
        self._consecutive_low = 0


def detect_blink_events(openness_sequence: Iterable[float],
                        ear_threshold: float = BLINK_THRESHOLD,
                        consecutive_frames: int = MIN_CONSEC_FRAMES) -> List[BlinkEvent]:
    """
    Run a fresh debouncer over a recorded openness sequence.

    Args:
        openness_sequence: Openness samples in frame order
        ear_threshold: EAR threshold for a closed frame
        consecutive_frames: Minimum closed run for a complete blink

    Returns:
        Events in the order they were emitted
    """
    debouncer = BlinkDebouncer(ear_threshold, consecutive_frames)
    events = []
    for value in openness_sequence:
        event = debouncer.update(value)
        if event is not None:
            events.append(event)
    return events
