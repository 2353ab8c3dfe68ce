"""
Eye Aspect Ratio (EAR) Calculator

Implements the Eye Aspect Ratio calculation used to measure eyelid openness.
Based on the paper "Real-Time Eye Blink Detection using Facial Landmarks"
by Soukupová and Čech.
"""

import numpy as np
from typing import Any, NamedTuple, Sequence, Tuple, Union

from ...errors import GeometryError, InvalidLandmarkCount

# MediaPipe Face Mesh indices, ordered p0..p5:
# p0, p3 horizontal corners; p1, p2 upper lid; p4, p5 lower lid
LEFT_EYE_INDICES = (33, 160, 158, 133, 153, 144)
RIGHT_EYE_INDICES = (362, 385, 387, 263, 373, 380)

EYE_LANDMARK_COUNT = 6
DEFAULT_EPSILON = 1e-6


class LandmarkPoint(NamedTuple):
    """Normalized (image-relative) 2-D landmark coordinate."""
    x: float
    y: float


class EyeLandmarkSet:
    """
    Ordered, read-only set of the six contour points of one eye.

    Order is significant: the EAR formula indexes points by position.
    """

    __slots__ = ('_points',)

    def __init__(self, points: Union[Sequence[Any], np.ndarray]):
        array = np.asarray([_to_xy(p) for p in points], dtype=np.float64)
        if array.shape != (EYE_LANDMARK_COUNT, 2):
            raise InvalidLandmarkCount(
                f"Expected {EYE_LANDMARK_COUNT} eye landmarks, got {len(array)}"
            )
        array.setflags(write=False)
        self._points = array

    @property
    def points(self) -> np.ndarray:
        return self._points

    def __len__(self) -> int:
        return EYE_LANDMARK_COUNT

    def __getitem__(self, index: int) -> LandmarkPoint:
        x, y = self._points[index]
        return LandmarkPoint(float(x), float(y))

    def __iter__(self):
        for i in range(EYE_LANDMARK_COUNT):
            yield self[i]

    def __eq__(self, other) -> bool:
        if not isinstance(other, EyeLandmarkSet):
            return NotImplemented
        return bool(np.array_equal(self._points, other._points))

    def __repr__(self) -> str:
        return f"EyeLandmarkSet({self._points.tolist()})"


def _to_xy(point: Any) -> Tuple[float, float]:
    """Accept (x, y) pairs or detector landmark objects with x/y attributes."""
    if hasattr(point, 'x') and hasattr(point, 'y'):
        return float(point.x), float(point.y)
    return float(point[0]), float(point[1])


def euclidean_distance(point1: np.ndarray, point2: np.ndarray) -> float:
    """Calculate euclidean distance between two points."""
    return float(np.linalg.norm(np.asarray(point1) - np.asarray(point2)))


def calculate_eye_aspect_ratio(eye_landmarks: Union[EyeLandmarkSet, Sequence[Any], np.ndarray],
                               epsilon: float = DEFAULT_EPSILON) -> float:
    """
    Calculate the Eye Aspect Ratio (EAR) for a given set of eye landmarks.

    The EAR is calculated as:
    EAR = (|p1-p5| + |p2-p4|) / (2 * |p0-p3|)

    Args:
        eye_landmarks: 6 eye landmark points in p0..p5 order
        epsilon: Minimum eye width accepted as non-degenerate

    Returns:
        Eye aspect ratio value (roughly 0.25-0.35 open, well below when closed)

    Raises:
        InvalidLandmarkCount: if the set does not hold exactly 6 points
        GeometryError: if a coordinate is not finite or the eye width is
            below ``epsilon``
    """
    if not isinstance(eye_landmarks, EyeLandmarkSet):
        eye_landmarks = EyeLandmarkSet(eye_landmarks)
    p = eye_landmarks.points
    if not np.all(np.isfinite(p)):
        raise GeometryError("Non-finite eye landmark coordinate")

    vertical_1 = euclidean_distance(p[1], p[5])
    vertical_2 = euclidean_distance(p[2], p[4])
    horizontal = euclidean_distance(p[0], p[3])

    if horizontal < epsilon:
        raise GeometryError(f"Degenerate eye width {horizontal:.3g}")

    return (vertical_1 + vertical_2) / (2.0 * horizontal)


def compute_frame_openness(left_ear: float, right_ear: float) -> float:
    """Average the two per-eye EAR values into one openness sample."""
    return (left_ear + right_ear) / 2.0


def extract_eye_landmarks(landmarks: Any,
                          indices: Sequence[int]) -> EyeLandmarkSet:
    """
    Pick one eye's six points out of a full-face landmark collection.

    Args:
        landmarks: Mapping ``{index: (x, y)}`` or a sequence indexed by
            landmark number (e.g. a Face Mesh landmark list)
        indices: Six landmark indices in p0..p5 order

    Returns:
        EyeLandmarkSet for the eye
    """
    try:
        points = [landmarks[i] for i in indices]
    except (KeyError, IndexError) as e:
        raise InvalidLandmarkCount(f"Eye landmark {e} missing from detector output") from e
    return EyeLandmarkSet(points)


def extract_eyes(landmarks: Any) -> Tuple[EyeLandmarkSet, EyeLandmarkSet]:
    """Return the (left, right) eye landmark sets from a Face Mesh result."""
    return (extract_eye_landmarks(landmarks, LEFT_EYE_INDICES),
            extract_eye_landmarks(landmarks, RIGHT_EYE_INDICES))
