"""
Configuration loading for the screening system.
"""

import copy
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from .integration.scoring import HIGH_RISK_BELOW, NORMAL_MAX, NORMAL_MIN, STRESS_FROM
from .integration.session_accumulator import SESSION_DURATION_SECONDS
from .modules.blink_detection import BLINK_THRESHOLD, MIN_CONSEC_FRAMES
from .modules.blink_detection.ear_calculator import DEFAULT_EPSILON

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = 'configs/default_config.yaml'


def get_default_config() -> dict:
    """Get default configuration for the system."""
    return {
        'blink': {
            'ear_threshold': BLINK_THRESHOLD,
            'consecutive_frames': MIN_CONSEC_FRAMES,
            'geometry_epsilon': DEFAULT_EPSILON,
            'count_incomplete_blinks': False
        },
        'session': {
            'duration_seconds': SESSION_DURATION_SECONDS
        },
        'risk': {
            'high_risk_below': HIGH_RISK_BELOW,
            'normal_min': NORMAL_MIN,
            'normal_max': NORMAL_MAX,
            'stress_from': STRESS_FROM
        },
        'camera': {
            'camera_id': 0,
            'resolution': [640, 480],
            'fps': 30
        },
        'detector': {
            'min_detection_confidence': 0.5,
            'min_tracking_confidence': 0.5,
            'refine_landmarks': True
        },
        'display': {
            'show_visualization': True,
            'window_name': 'Dry Eye Screening'
        }
    }


def merge_config(base: Dict[str, Any], override: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Recursively merge ``override`` into a copy of ``base``."""
    merged = copy.deepcopy(base)
    for key, value in (override or {}).items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_config(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(config_path: Union[str, Path, None] = None) -> dict:
    """
    Load configuration from a YAML file on top of the defaults.

    A missing file falls back to the defaults with a warning. A file that
    is not valid YAML, or whose top level is not a mapping, raises.
    """
    defaults = get_default_config()
    if config_path is None:
        return defaults

    try:
        with open(config_path, 'r') as f:
            user_config = yaml.safe_load(f)
    except FileNotFoundError:
        logger.warning(f"Config file {config_path} not found, using default configuration")
        return defaults

    if user_config is None:
        return defaults
    if not isinstance(user_config, dict):
        raise ValueError(f"Config file {config_path} must contain a mapping, "
                         f"got {type(user_config).__name__}")

    logger.info(f"Loaded configuration from {config_path}")
    return merge_config(defaults, user_config)
