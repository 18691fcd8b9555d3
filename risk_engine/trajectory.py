"""
Engagement trajectory from a short weekly score history.

Fits an ordinary-least-squares line through (week index, score) and
classifies the slope. Slope units are score points per week: within
+/-2 is noise, beyond +/-5 is a structural trend.
"""

import math
from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

from .config import ScoringConfig, DEFAULT_CONFIG
from .errors import InvalidInputError
from .utils import round_half_up


@dataclass(frozen=True)
class TrajectoryForecast:
    """Trend classification with confidence (0-100) and the fitted slope."""

    trajectory: str
    confidence: int
    slope: float = 0.0


class TrajectoryAnalyzer:
    """Classify weekly engagement scores as improving, stable, declining or critical."""

    def __init__(self, config: Optional[ScoringConfig] = None):
        self.config = config or DEFAULT_CONFIG

    def analyze(self, weekly_scores: Sequence[float]) -> TrajectoryForecast:
        """
        Analyze a chronological (oldest first) score history.

        Fewer than 2 points always yields ("stable", 30) so sparse
        histories are never reported as trending.

        Raises:
            InvalidInputError: If any score is non-finite or outside [0, 100]
        """
        scores = self._validate(weekly_scores)
        cfg = self.config

        if len(scores) < cfg.min_history_points:
            return TrajectoryForecast("stable", cfg.sparse_confidence)

        slope = least_squares_slope(scores)

        # Population variance; a noisy history lowers confidence
        consistency = max(0.0, 100.0 - math.sqrt(float(np.var(scores))))
        sample_points = min(len(scores), cfg.max_history_weeks) / cfg.max_history_weeks
        confidence = min(
            100,
            round_half_up(sample_points * cfg.sample_confidence_points + consistency * cfg.consistency_weight),
        )

        return TrajectoryForecast(self.classify(slope), confidence, slope)

    def classify(self, slope: float) -> str:
        """Map a weekly slope to a trajectory label."""
        cfg = self.config
        if slope < cfg.critical_slope:
            return "critical"
        if slope < cfg.declining_slope:
            return "declining"
        if slope > cfg.improving_slope:
            return "improving"
        return "stable"

    @staticmethod
    def _validate(weekly_scores: Sequence[float]) -> np.ndarray:
        if isinstance(weekly_scores, (str, bytes)):
            raise InvalidInputError("weekly scores must be a sequence of numbers")
        try:
            scores = np.asarray(list(weekly_scores), dtype=float)
        except (TypeError, ValueError) as exc:
            raise InvalidInputError(f"weekly scores must be numeric: {exc}") from exc

        if scores.ndim != 1:
            raise InvalidInputError("weekly scores must be a flat sequence")
        if not np.all(np.isfinite(scores)) or np.any((scores < 0) | (scores > 100)):
            raise InvalidInputError(f"weekly scores must be within [0, 100], got {scores.tolist()}")
        return scores


def least_squares_slope(scores: np.ndarray) -> float:
    """OLS slope of scores against x = 0..n-1."""
    n = len(scores)
    x = np.arange(n, dtype=float)
    sum_x = x.sum()
    sum_y = scores.sum()
    sum_xy = (x * scores).sum()
    sum_x2 = (x * x).sum()
    return float((n * sum_xy - sum_x * sum_y) / (n * sum_x2 - sum_x ** 2))
