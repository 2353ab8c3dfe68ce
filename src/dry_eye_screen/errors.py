"""
Exception hierarchy for the blink screening pipeline.
"""


class DryEyeScreenError(Exception):
    """Base class for all screening errors."""


class GeometryError(DryEyeScreenError):
    """Degenerate eye landmarks (near-zero eye width)."""


class InvalidLandmarkCount(DryEyeScreenError, ValueError):
    """An eye landmark set does not hold exactly six points."""


class SessionStateError(DryEyeScreenError, RuntimeError):
    """A session operation was invoked in the wrong lifecycle state."""
