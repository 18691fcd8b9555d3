"""Churn date projection from risk score and trajectory."""

import math
import numbers
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Optional

from .config import ScoringConfig, DEFAULT_CONFIG
from .errors import InvalidInputError
from .utils import round_half_up


@dataclass(frozen=True)
class ChurnForecast:
    """Projected churn date (None when no churn is forecast) and urgency bucket."""

    predicted_churn_date: Optional[date]
    days_until_churn: Optional[int]
    urgency: str


class ChurnForecaster:
    """
    Project when a client is likely to churn.

    Horizon by trajectory (critical 7d, declining 21d, stable 45d),
    shortened as the risk score rises:
        multiplier = max(0.5, 1 - (score - 35) / 130)

    Improving clients are never forecast to churn, whatever their score.
    """

    def __init__(self, config: Optional[ScoringConfig] = None):
        self.config = config or DEFAULT_CONFIG

    def forecast(self, risk_score: float, trajectory: str, today: date) -> ChurnForecast:
        """
        Build the churn forecast for one client.

        Args:
            risk_score: Score from RiskScorer (0-100)
            trajectory: Label from TrajectoryAnalyzer
            today: Date the projection is counted from

        Returns:
            ChurnForecast

        Raises:
            InvalidInputError: If risk_score is non-finite or outside [0, 100]
        """
        if (
            isinstance(risk_score, bool)
            or not isinstance(risk_score, numbers.Real)
            or not math.isfinite(risk_score)
            or not 0 <= risk_score <= 100
        ):
            raise InvalidInputError(f"risk_score must be within [0, 100], got {risk_score!r}")

        cfg = self.config
        risk_level = cfg.get_risk_level(risk_score)

        if risk_score < cfg.forecast_min_score:
            return ChurnForecast(None, None, self.urgency_from_level(risk_level))
        if trajectory == "improving":
            return ChurnForecast(None, None, "monitor")

        if trajectory not in cfg.base_horizon_days:
            raise InvalidInputError(f"Unknown trajectory: {trajectory!r}")
        base_days = cfg.base_horizon_days[trajectory]
        multiplier = max(
            cfg.multiplier_floor,
            1 - (risk_score - cfg.forecast_min_score) / cfg.multiplier_span,
        )
        days = round_half_up(base_days * multiplier)

        return ChurnForecast(
            predicted_churn_date=today + timedelta(days=days),
            days_until_churn=days,
            urgency=self.urgency_from_days(days, risk_level),
        )

    def urgency_from_days(self, days: int, risk_level: str) -> str:
        if days <= self.config.immediate_days:
            return "immediate"
        if days <= self.config.soon_days:
            return "soon"
        return self.urgency_from_level(risk_level)

    @staticmethod
    def urgency_from_level(risk_level: str) -> str:
        return "soon" if risk_level == "high" else "monitor"
