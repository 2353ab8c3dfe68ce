"""
Facial landmark extraction using MediaPipe Face Mesh.
"""

import cv2
import numpy as np
import mediapipe as mp
from typing import Dict, Optional, Tuple
import logging

logger = logging.getLogger(__name__)


class FaceMeshLandmarker:
    """
    Single-face landmark detector.

    Returns normalized ``{index: (x, y)}`` landmarks for the first face in
    the frame, or None when no face is found.
    """

    def __init__(
        self,
        min_detection_confidence: float = 0.5,
        min_tracking_confidence: float = 0.5,
        refine_landmarks: bool = True
    ):
        """
        Initialize face mesh landmarker.

        Args:
            min_detection_confidence: Minimum confidence for face detection
            min_tracking_confidence: Minimum confidence for landmark tracking
            refine_landmarks: Refine eye and lip landmarks
        """
        try:
            self.mp_face_mesh = mp.solutions.face_mesh
            self.face_mesh = self.mp_face_mesh.FaceMesh(
                static_image_mode=False,
                max_num_faces=1,
                refine_landmarks=refine_landmarks,
                min_detection_confidence=min_detection_confidence,
                min_tracking_confidence=min_tracking_confidence
            )
        except Exception as e:
            logger.error(f"Failed to initialize MediaPipe face mesh: {e}")
            raise

        logger.info("FaceMeshLandmarker initialized")

    @classmethod
    def from_config(cls, config: Optional[dict]) -> 'FaceMeshLandmarker':
        config = config or {}
        return cls(
            min_detection_confidence=config.get('min_detection_confidence', 0.5),
            min_tracking_confidence=config.get('min_tracking_confidence', 0.5),
            refine_landmarks=config.get('refine_landmarks', True)
        )

    def detect(self, image: np.ndarray) -> Optional[Dict[int, Tuple[float, float]]]:
        """
        Detect facial landmarks.

        Args:
            image: Input image (BGR format)

        Returns:
            Landmark mapping for the face, or None if no face was found
        """
        rgb_image = cv2.cvtColor(image, cv2.COLOR_BGR2RGB)
        results = self.face_mesh.process(rgb_image)

        if not results.multi_face_landmarks:
            return None

        face_landmarks = results.multi_face_landmarks[0]
        return {i: (lm.x, lm.y) for i, lm in enumerate(face_landmarks.landmark)}

    def close(self) -> None:
        self.face_mesh.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
