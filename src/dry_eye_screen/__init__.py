"""
Dry-eye risk screening from blink frequency.

Tracks eyelid closure from facial landmarks over a fixed observation
window and classifies the resulting blink rate into a risk category.
"""

from .errors import DryEyeScreenError, GeometryError, InvalidLandmarkCount, SessionStateError
from .integration import DryEyeAnalyzer, RiskAssessment, RiskLevel

__version__ = '1.0.0'

__all__ = [
    'DryEyeAnalyzer',
    'RiskAssessment',
    'RiskLevel',
    'DryEyeScreenError',
    'GeometryError',
    'InvalidLandmarkCount',
    'SessionStateError'
]
