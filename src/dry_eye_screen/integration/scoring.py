"""
Dry-Eye Risk Scoring System

Converts a finalized session's blink counts into a risk level, an overall
eye health score and a list of recommendations.
"""

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple

logger = logging.getLogger(__name__)

# Blinks per minute
HIGH_RISK_BELOW = 10.0
NORMAL_MIN = 12.0
NORMAL_MAX = 15.0
STRESS_FROM = 18.0

# Incomplete blink share (percent)
INCOMPLETE_NORMAL_MAX = 10
INCOMPLETE_ELEVATED_MAX = 15


class RiskLevel(Enum):
    """Blink rate risk bands."""
    HIGH_RISK = 'high-risk'
    NORMAL = 'normal'
    STRESS = 'stress'
    UNCERTAIN = 'uncertain'

    @property
    def label(self) -> str:
        return _LEVEL_DISPLAY[self][0]

    @property
    def description(self) -> str:
        return _LEVEL_DISPLAY[self][1]


_LEVEL_DISPLAY = {
    RiskLevel.HIGH_RISK: ('High Risk', 'Risk of Dry Eye'),
    RiskLevel.STRESS: ('Elevated', 'Possible Stress/Depression'),
    RiskLevel.NORMAL: ('Normal', 'Healthy Eye Function'),
    RiskLevel.UNCERTAIN: ('Borderline', 'Blink rate between reference bands'),
}


@dataclass(frozen=True)
class RiskThresholds:
    """Blink-rate band edges in blinks per minute."""
    high_risk_below: float = HIGH_RISK_BELOW
    normal_min: float = NORMAL_MIN
    normal_max: float = NORMAL_MAX
    stress_from: float = STRESS_FROM

    def __post_init__(self):
        if not (self.high_risk_below <= self.normal_min <= self.normal_max <= self.stress_from):
            raise ValueError(f"Risk thresholds must be ordered: {self}")

    @classmethod
    def from_config(cls, config: Optional[Dict[str, Any]]) -> 'RiskThresholds':
        config = config or {}
        return cls(
            high_risk_below=float(config.get('high_risk_below', HIGH_RISK_BELOW)),
            normal_min=float(config.get('normal_min', NORMAL_MIN)),
            normal_max=float(config.get('normal_max', NORMAL_MAX)),
            stress_from=float(config.get('stress_from', STRESS_FROM)),
        )


@dataclass(frozen=True)
class SessionSnapshot:
    """Counters of a session at the moment it was finalized."""
    elapsed_seconds: int
    complete_blinks: int
    incomplete_blinks: int
    duration_seconds: int

    @property
    def blink_rate(self) -> float:
        return blink_rate_per_minute(self.complete_blinks, self.elapsed_seconds)


@dataclass(frozen=True)
class RiskAssessment:
    """Container for the result of one screening session."""
    blink_rate_per_minute: float
    risk_level: RiskLevel
    health_score: int  # 0-100
    recommendations: Tuple[str, ...] = field(default_factory=tuple)
    complete_blinks: int = 0
    incomplete_blinks: int = 0
    incomplete_percentage: int = 0
    elapsed_seconds: int = 0

    @property
    def display_rate(self) -> float:
        """Blink rate rounded to one decimal for reports."""
        return round(self.blink_rate_per_minute, 1)

    @property
    def label(self) -> str:
        return self.risk_level.label

    @property
    def description(self) -> str:
        return self.risk_level.description

    def to_dict(self) -> Dict[str, Any]:
        return {
            'blink_rate': self.display_rate,
            'risk_level': self.risk_level.value,
            'health_score': self.health_score,
            'recommendations': list(self.recommendations),
            'complete_blinks': self.complete_blinks,
            'incomplete_blinks': self.incomplete_blinks,
            'incomplete_percentage': self.incomplete_percentage,
            'elapsed_seconds': self.elapsed_seconds,
        }


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def blink_rate_per_minute(complete_blinks: int, elapsed_seconds: int) -> float:
    """Blinks per minute; an elapsed time of zero counts as one second."""
    elapsed = elapsed_seconds if elapsed_seconds > 0 else 1
    return complete_blinks / (elapsed / 60.0)


def classify(blink_rate: float, thresholds: Optional[RiskThresholds] = None) -> RiskLevel:
    """Map a blink rate onto its risk band."""
    t = thresholds or RiskThresholds()
    if blink_rate < t.high_risk_below:
        return RiskLevel.HIGH_RISK
    if t.normal_min <= blink_rate <= t.normal_max:
        return RiskLevel.NORMAL
    if blink_rate >= t.stress_from:
        return RiskLevel.STRESS
    return RiskLevel.UNCERTAIN


def score_for(level: RiskLevel, blink_rate: float) -> int:
    """Overall eye health score (0-100) for a risk level and blink rate."""
    if level is RiskLevel.HIGH_RISK:
        score = max(30.0, 60.0 - blink_rate * 2)
    elif level is RiskLevel.STRESS:
        score = min(70.0, 40.0 + blink_rate)
    else:
        score = min(95.0, 70.0 + blink_rate)

    return _round_half_up(max(0.0, min(100.0, score)))


def _format_rate(blink_rate: float) -> str:
    return f"{blink_rate:g}"


def recommendations_for(level: RiskLevel, blink_rate: float) -> Tuple[str, ...]:
    """Ordered recommendations; the first line quotes the blink rate."""
    rate = _format_rate(blink_rate)
    if level is RiskLevel.HIGH_RISK:
        return (
            f"Your blink rate of {rate}/min is below normal (12-15/min)",
            "Consider using artificial tears or eye drops",
            "Take more frequent breaks from screen time (20-20-20 rule)",
            "Increase environmental humidity",
            "Consult an eye care professional if symptoms persist",
        )
    if level is RiskLevel.STRESS:
        return (
            f"Your blink rate of {rate}/min is elevated, possibly indicating stress",
            "Practice stress management techniques",
            "Consider meditation or relaxation exercises",
            "Ensure adequate sleep (7-8 hours nightly)",
            "Consult a healthcare provider if stress symptoms persist",
        )
    return (
        f"Your blink rate of {rate}/min is within normal range",
        "Continue current eye care habits",
        "Maintain good screen hygiene with regular breaks",
        "Keep your environment adequately humidified",
    )


def incomplete_blink_percentage(complete_blinks: int, incomplete_blinks: int) -> int:
    """Share of incomplete blinks among all detected blinks, in percent."""
    total = complete_blinks + incomplete_blinks
    if total == 0:
        return 0
    return _round_half_up(incomplete_blinks / total * 100)


def incomplete_blink_status(percentage: float) -> str:
    """'normal', 'elevated' or 'high' for an incomplete blink share."""
    if percentage > INCOMPLETE_ELEVATED_MAX:
        return 'high'
    if percentage > INCOMPLETE_NORMAL_MAX:
        return 'elevated'
    return 'normal'


class RiskClassifier:
    """
    Pure mapping from a finalized session snapshot to a RiskAssessment.
    """

    def __init__(self, thresholds: Optional[RiskThresholds] = None):
        self.thresholds = thresholds or RiskThresholds()

    def classify(self, blink_rate: float) -> RiskLevel:
        return classify(blink_rate, self.thresholds)

    def assess(self, snapshot: SessionSnapshot) -> RiskAssessment:
        """
        Build the assessment for a finalized session.

        Classification and scoring use the exact rate; the recommendation
        text quotes it with one decimal.
        """
        rate = snapshot.blink_rate
        level = self.classify(rate)
        assessment = RiskAssessment(
            blink_rate_per_minute=rate,
            risk_level=level,
            health_score=score_for(level, rate),
            recommendations=recommendations_for(level, round(rate, 1)),
            complete_blinks=snapshot.complete_blinks,
            incomplete_blinks=snapshot.incomplete_blinks,
            incomplete_percentage=incomplete_blink_percentage(
                snapshot.complete_blinks, snapshot.incomplete_blinks),
            elapsed_seconds=snapshot.elapsed_seconds,
        )
        logger.info(f"Assessment: {rate:.1f} blinks/min -> {level.value} "
                    f"(score {assessment.health_score})")
        return assessment
