"""
Webcam Interface for Real-time Dry-Eye Screening

Handles webcam capture, the one-second session clock, and the live display
for a screening session.
"""

import cv2
import numpy as np
import time
import threading
from typing import Optional, Dict, Any
import logging
from queue import Queue, Empty, Full

from ..errors import SessionStateError
from ..integration import DryEyeAnalyzer, RiskAssessment
from ..integration.scoring import RiskLevel
from ..modules.utils.face_detector import FaceMeshLandmarker

RISK_COLORS = {
    RiskLevel.HIGH_RISK: (0, 0, 255),
    RiskLevel.STRESS: (0, 255, 255),
    RiskLevel.NORMAL: (0, 255, 0),
    RiskLevel.UNCERTAIN: (255, 255, 255),
}


class WebcamInterface:
    """
    Threaded webcam capture feeding a bounded frame queue.
    """

    def __init__(self, camera_id: int = 0, resolution: tuple = (640, 480),
                 fps: int = 30, buffer_size: int = 10):
        """
        Initialize webcam interface.

        Args:
            camera_id: Camera device ID
            resolution: Camera resolution (width, height)
            fps: Target frames per second
            buffer_size: Frame buffer size
        """
        self.camera_id = camera_id
        self.resolution = tuple(resolution)
        self.target_fps = fps
        self.buffer_size = buffer_size

        self.cap = None
        self.is_running = False

        self.capture_thread = None
        self.frame_queue = Queue(maxsize=buffer_size)

        self.logger = logging.getLogger(__name__)

    def initialize_camera(self) -> bool:
        """
        Initialize camera capture.

        Returns:
            True if successful
        """
        self.cap = cv2.VideoCapture(self.camera_id)

        if not self.cap.isOpened():
            self.logger.error(f"Cannot open camera {self.camera_id}")
            return False

        self.cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.resolution[0])
        self.cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.resolution[1])
        self.cap.set(cv2.CAP_PROP_FPS, self.target_fps)

        actual_width = int(self.cap.get(cv2.CAP_PROP_FRAME_WIDTH))
        actual_height = int(self.cap.get(cv2.CAP_PROP_FRAME_HEIGHT))
        actual_fps = int(self.cap.get(cv2.CAP_PROP_FPS))

        self.logger.info(f"Camera initialized: {actual_width}x{actual_height} @ {actual_fps} FPS")
        return True

    def start_capture(self) -> bool:
        """
        Start video capture in separate thread.

        Returns:
            True if started successfully
        """
        if not self.initialize_camera():
            return False

        self.is_running = True

        self.capture_thread = threading.Thread(target=self._capture_loop, daemon=True)
        self.capture_thread.start()

        self.logger.info("Video capture started")
        return True

    def stop_capture(self):
        """Stop video capture."""
        self.is_running = False

        if self.capture_thread:
            self.capture_thread.join(timeout=1.0)

        if self.cap:
            self.cap.release()

        while not self.frame_queue.empty():
            try:
                self.frame_queue.get_nowait()
            except Empty:
                break

        self.logger.info("Video capture stopped")

    def _capture_loop(self):
        """Main capture loop running in separate thread."""
        while self.is_running:
            ret, frame = self.cap.read()

            if not ret:
                self.logger.warning("Failed to read frame from camera")
                time.sleep(0.01)
                continue

            try:
                self.frame_queue.put_nowait(frame)
            except Full:
                # Queue full, drop oldest frame
                try:
                    self.frame_queue.get_nowait()
                except Empty:
                    pass
                self.frame_queue.put_nowait(frame)

    def get_frame(self, timeout: float = 0.1) -> Optional[np.ndarray]:
        """Get the oldest buffered frame, or None after ``timeout`` seconds."""
        try:
            return self.frame_queue.get(timeout=timeout)
        except Empty:
            return None

    def __enter__(self):
        if not self.start_capture():
            raise RuntimeError(f"Could not open camera {self.camera_id}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop_capture()


class SessionTicker:
    """
    Delivers one tick per second to an analyzer from a background thread
    until the session ends.
    """

    def __init__(self, analyzer: DryEyeAnalyzer, interval: float = 1.0):
        self.analyzer = analyzer
        self.interval = interval
        self._stop_event = threading.Event()
        self._thread = None
        self.logger = logging.getLogger(__name__)

    def start(self):
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, daemon=True)
        self._thread.start()

    def stop(self):
        self._stop_event.set()
        if self._thread:
            self._thread.join(timeout=2 * self.interval)

    def _run(self):
        next_tick = time.monotonic() + self.interval
        while not self._stop_event.wait(max(0.0, next_tick - time.monotonic())):
            next_tick += self.interval
            try:
                if self.analyzer.tick() is not None:
                    break
            except SessionStateError:
                # Session was stopped between two ticks
                self.logger.debug("Ticker stopped: session no longer running")
                break


def draw_session_overlay(frame: np.ndarray, analyzer: DryEyeAnalyzer) -> np.ndarray:
    """Draw blinks, time, blink rate and risk level onto the frame."""
    preview = analyzer.preview()
    duration = analyzer.accumulator.duration_seconds
    lines = [
        (f"Blinks: {preview.blink_count}", (255, 255, 255)),
        (f"Time: {preview.elapsed_seconds}s / {duration}s", (255, 255, 255)),
        (f"Blink Rate: {preview.blink_rate:.1f} blinks/min", (255, 255, 255)),
        (f"Risk Level: {preview.risk_level.label}", RISK_COLORS[preview.risk_level]),
    ]
    for i, (text, color) in enumerate(lines):
        cv2.putText(frame, text, (10, 30 + 30 * i), cv2.FONT_HERSHEY_SIMPLEX,
                    0.7, color, 2, cv2.LINE_AA)
    return frame


def _stop_session(analyzer: DryEyeAnalyzer):
    try:
        analyzer.stop()
    except SessionStateError:
        # The ticker finished the window first
        pass


def run_webcam_session(analyzer: DryEyeAnalyzer, config: Dict[str, Any],
                       duration_seconds: Optional[int] = None) -> Optional[RiskAssessment]:
    """
    Run one live screening session from the webcam.

    The session ends when the window elapses or the user presses 'q'.

    Returns:
        The session's assessment, or None if the camera could not be opened
    """
    logger = logging.getLogger(__name__)
    camera_config = config.get('camera', {})
    display_config = config.get('display', {})
    show = display_config.get('show_visualization', True)
    window_name = display_config.get('window_name', 'Dry Eye Screening')

    webcam = WebcamInterface(
        camera_id=camera_config.get('camera_id', 0),
        resolution=camera_config.get('resolution', (640, 480)),
        fps=camera_config.get('fps', 30)
    )
    if not webcam.start_capture():
        return None

    ticker = SessionTicker(analyzer)
    try:
        with FaceMeshLandmarker.from_config(config.get('detector')) as landmarker:
            analyzer.start(duration_seconds)
            ticker.start()
            logger.info("Press 'q' to stop the analysis early")

            while analyzer.is_running:
                frame = webcam.get_frame()
                if frame is None:
                    continue

                analyzer.process_landmarks(landmarker.detect(frame))

                if show:
                    cv2.imshow(window_name, draw_session_overlay(frame, analyzer))
                    if cv2.waitKey(1) & 0xFF == ord('q'):
                        logger.info("Stop requested by user")
                        _stop_session(analyzer)
                        break
    except KeyboardInterrupt:
        logger.info("Analysis interrupted by user")
    finally:
        ticker.stop()
        if analyzer.is_running:
            _stop_session(analyzer)
        webcam.stop_capture()
        if show:
            cv2.destroyAllWindows()

    return analyzer.result
