"""
RiskScorer - turns one client's signal snapshot into a risk assessment.

Usage:
    from risk_engine import RiskScorer, ScoringConfig

    scorer = RiskScorer()
    assessment = scorer.score(snapshot, now)

    print(assessment.risk_score, assessment.risk_level)
    print(assessment.risk_factors)
    print(assessment.suggested_action)
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from .config import ScoringConfig, DEFAULT_CONFIG
from .components import (
    CommunicationFactor,
    HabitFactor,
    InactivityFactor,
    MissedSessionsFactor,
    ProgressFactor,
)
from .snapshot import SignalSnapshot


@dataclass(frozen=True)
class RiskAssessment:
    """
    Risk score for one client with its explanation.

    Attributes:
        client_id: Client identifier
        risk_score: Clamped sum of triggered factor weights (0-100)
        risk_level: "low", "medium" or "high"
        risk_factors: Labels of triggered factors, in evaluation order
        suggested_action: Coach-facing next step
        components: Points per factor name (0 when not triggered)
    """

    client_id: str
    risk_score: float
    risk_level: str
    risk_factors: tuple[str, ...]
    suggested_action: str
    components: dict[str, float] = field(default_factory=dict)

    @property
    def triggered(self) -> list[str]:
        """Names of the factors that fired."""
        return [name for name, points in self.components.items() if points > 0]


class RiskScorer:
    """
    Weighted multi-factor risk scoring.

    Factors are evaluated in a fixed order and each contributes at most
    one tier of its weight:
    - Inactivity (0-25): days since last session
    - Missed sessions (0-20): cancellations/no-shows in 14 days
    - Habits (0-20): 7-day completion ratio
    - Progress (0-15): progress entries in 14 days
    - Communication (0-20): days since last message
    """

    def __init__(self, config: Optional[ScoringConfig] = None):
        """
        Initialize scorer with configuration.

        Args:
            config: ScoringConfig instance. Uses DEFAULT_CONFIG if None.
        """
        self.config = config or DEFAULT_CONFIG
        self._init_components()

    def _init_components(self) -> None:
        """Initialize all factors in evaluation order."""
        self.components = {
            "inactivity": InactivityFactor(self.config),
            "missed_sessions": MissedSessionsFactor(self.config),
            "habits": HabitFactor(self.config),
            "progress": ProgressFactor(self.config),
            "communication": CommunicationFactor(self.config),
        }

    def score(self, snapshot: SignalSnapshot, now: datetime) -> RiskAssessment:
        """
        Score one client.

        Missing optional signals never raise; the matching factor
        simply does not apply.

        Args:
            snapshot: Validated client snapshot
            now: Reference time (never read from the system clock here)

        Returns:
            RiskAssessment with score, level, factors and action
        """
        total = 0.0
        labels = []
        components = {}

        for name, factor in self.components.items():
            hit = factor.evaluate(snapshot, now)
            if hit is None:
                components[name] = 0.0
                continue
            components[name] = hit.points
            total += hit.points
            labels.append(hit.label)

        risk_score = min(self.config.max_score, total)
        risk_level = self.config.get_risk_level(risk_score)

        return RiskAssessment(
            client_id=snapshot.client_id,
            risk_score=risk_score,
            risk_level=risk_level,
            risk_factors=tuple(labels),
            suggested_action=self.suggest_action(risk_level, components),
            components=components,
        )

    def suggest_action(self, risk_level: str, components: dict[str, float]) -> str:
        """
        Pick the first matching action rule.

        A rule matches when its level equals risk_level and its factor
        (if any) fired.
        """
        for level, factor_name, action in self.config.action_rules:
            if level != risk_level:
                continue
            if factor_name is None or components.get(factor_name, 0) > 0:
                return action
        return self.config.default_action
