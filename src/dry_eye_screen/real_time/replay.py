"""
Offline replay of recorded eye openness through a screening session.
"""

import logging
from pathlib import Path
from typing import Optional, Union

import numpy as np
import pandas as pd

from ..integration import DryEyeAnalyzer, RiskAssessment
from ..modules.blink_detection import compute_frame_openness

logger = logging.getLogger(__name__)


def load_openness_recording(path: Union[str, Path]) -> np.ndarray:
    """
    Read per-frame openness from a CSV recording.

    The file needs either an ``ear`` column or both ``left_ear`` and
    ``right_ear`` columns; rows with missing values (no face) are dropped.
    """
    data = pd.read_csv(path)
    if 'ear' in data.columns:
        openness = data['ear']
    elif {'left_ear', 'right_ear'}.issubset(data.columns):
        openness = compute_frame_openness(data['left_ear'], data['right_ear'])
    else:
        raise ValueError(f"{path}: expected an 'ear' column or 'left_ear'/'right_ear' columns, "
                         f"got {list(data.columns)}")

    dropped = int(openness.isna().sum())
    if dropped:
        logger.info(f"Dropping {dropped} frames without a face")
    return openness.dropna().to_numpy(dtype=np.float64)


def replay_recording(path: Union[str, Path], analyzer: DryEyeAnalyzer, fps: int = 30,
                     duration_seconds: Optional[int] = None) -> RiskAssessment:
    """
    Feed a recording through a fresh session, one tick per ``fps`` frames.

    If the recording ends before the session window, the session is
    stopped with what was counted.
    """
    if fps <= 0:
        raise ValueError(f"fps must be positive, got {fps}")

    openness = load_openness_recording(path)
    logger.info(f"Replaying {len(openness)} frames from {path} at {fps} FPS")

    analyzer.start(duration_seconds)
    for frame_index, value in enumerate(openness, start=1):
        analyzer.process_openness(float(value))
        if frame_index % fps == 0 and analyzer.tick() is not None:
            return analyzer.result

    return analyzer.stop()
