"""
Blink Detection Module

Measures eyelid openness from facial landmarks and converts the openness
signal into debounced blink events.
"""

from .blink_detector import (BlinkDebouncer, BlinkEvent, detect_blink_events,
                             BLINK_THRESHOLD, MIN_CONSEC_FRAMES)
from .ear_calculator import (EyeLandmarkSet, LandmarkPoint, calculate_eye_aspect_ratio,
                             compute_frame_openness, extract_eye_landmarks, extract_eyes,
                             LEFT_EYE_INDICES, RIGHT_EYE_INDICES)

__all__ = [
    'BlinkDebouncer',
    'BlinkEvent',
    'detect_blink_events',
    'BLINK_THRESHOLD',
    'MIN_CONSEC_FRAMES',
    'EyeLandmarkSet',
    'LandmarkPoint',
    'calculate_eye_aspect_ratio',
    'compute_frame_openness',
    'extract_eye_landmarks',
    'extract_eyes',
    'LEFT_EYE_INDICES',
    'RIGHT_EYE_INDICES'
]
