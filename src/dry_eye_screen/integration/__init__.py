"""
Session Integration System

This module integrates the blink screening components:
- Session accumulation over a fixed observation window
- Dry-eye risk classification and scoring

Provides the single-session analyzer used by the real-time interface.
"""

from .dry_eye_analyzer import DryEyeAnalyzer
from .scoring import (RiskAssessment, RiskClassifier, RiskLevel, RiskThresholds, SessionSnapshot,
                      classify, score_for, recommendations_for, incomplete_blink_percentage)
from .session_accumulator import SessionAccumulator, SessionPreview, SessionState

__all__ = [
    'DryEyeAnalyzer',
    'RiskAssessment',
    'RiskClassifier',
    'RiskLevel',
    'RiskThresholds',
    'SessionSnapshot',
    'classify',
    'score_for',
    'recommendations_for',
    'incomplete_blink_percentage',
    'SessionAccumulator',
    'SessionPreview',
    'SessionState'
]
