"""
Synthetic landmark builders shared by the screening tests.
"""

from dry_eye_screen.modules.blink_detection import (EyeLandmarkSet, LEFT_EYE_INDICES,
                                                    RIGHT_EYE_INDICES)


def make_eye(ear: float, center=(0.45, 0.5), width: float = 0.1) -> EyeLandmarkSet:
    """Synthetic eye whose EAR equals ``ear``."""
    cx, cy = center
    half_height = ear * width / 2.0
    return EyeLandmarkSet([
        (cx - width / 2, cy),
        (cx - width / 6, cy - half_height),
        (cx + width / 6, cy - half_height),
        (cx + width / 2, cy),
        (cx + width / 6, cy + half_height),
        (cx - width / 6, cy + half_height),
    ])


def make_face(ear: float) -> dict:
    """Face Mesh style landmark mapping holding both eyes."""
    landmarks = {}
    for indices, center in ((LEFT_EYE_INDICES, (0.35, 0.4)), (RIGHT_EYE_INDICES, (0.65, 0.4))):
        eye = make_eye(ear, center=center)
        for index, point in zip(indices, eye):
            landmarks[index] = (point.x, point.y)
    return landmarks
