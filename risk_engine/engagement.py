"""
Weekly engagement score calculator.

Produces the 0-100 weekly scores that feed TrajectoryAnalyzer. The
calling layer runs this once per week per client and keeps the last
four results as the client's engagement history.

Weights (sum to 1.0):
- Session attendance: 0.25
- Habit completion: 0.25
- Message responsiveness: 0.15
- Progress logging: 0.20
- Plan adherence: 0.15
"""

from dataclasses import dataclass
from typing import Optional

import numpy as np
import pandas as pd

from .config import ScoringConfig, DEFAULT_CONFIG
from .utils import round_half_up


@dataclass(frozen=True)
class EngagementBreakdown:
    """Per-part scores, each 0-100."""

    attendance: int
    habits: int
    responsiveness: int
    progress: int
    plan: int


class EngagementCalculator:
    """Weighted five-part engagement score, for one client or a whole frame."""

    REQUIRED_COLUMNS = [
        "SESSIONS_COMPLETED",
        "SESSIONS_TOTAL",
        "HABITS_COMPLETED",
        "HABITS_TARGET",
        "AVG_RESPONSE_HOURS",
        "PROGRESS_ENTRIES_14D",
        "WORKOUTS_7D",
    ]

    def __init__(self, config: Optional[ScoringConfig] = None):
        self.config = config or DEFAULT_CONFIG

    # --- parts ---------------------------------------------------------

    def attendance_score(self, completed: int, total: int) -> int:
        """Completed share of sessions scheduled in the last 30 days; neutral if none."""
        if total <= 0:
            return self.config.neutral_points
        return round_half_up(completed / total * 100)

    def habit_score(self, completed: int, target: int) -> int:
        """Completed share of habit targets over 7 days, capped at 100; neutral if no logs."""
        if target <= 0:
            return self.config.neutral_points
        return min(100, round_half_up(completed / target * 100))

    def responsiveness_score(self, avg_response_hours: Optional[float]) -> int:
        """Tiered by average client reply time; neutral if no replies were measured."""
        if avg_response_hours is None:
            return self.config.neutral_points
        for ceiling, points in self.config.responsiveness_thresholds:
            if avg_response_hours < ceiling:
                return points
        return self.config.responsiveness_default

    def progress_score(self, entries: int) -> int:
        return min(100, round_half_up(entries / self.config.expected_progress_entries * 100))

    def plan_score(self, workouts: int) -> int:
        if workouts <= 0:
            return self.config.neutral_points
        return min(100, round_half_up(workouts / self.config.expected_workouts * 100))

    # --- totals --------------------------------------------------------

    def score(self, breakdown: EngagementBreakdown) -> int:
        """Weighted overall score (0-100)."""
        w = self.config.engagement_weights
        return round_half_up(
            breakdown.attendance * w["attendance"]
            + breakdown.habits * w["habits"]
            + breakdown.responsiveness * w["responsiveness"]
            + breakdown.progress * w["progress"]
            + breakdown.plan * w["plan"]
        )

    def trend(self, current: int, previous: Optional[int]) -> str:
        """Week-over-week direction: "up", "down" or "stable"."""
        if previous is None:
            return "stable"
        change = current - previous
        if change > self.config.trend_change_points:
            return "up"
        if change < -self.config.trend_change_points:
            return "down"
        return "stable"

    def score_frame(self, df: pd.DataFrame) -> pd.DataFrame:
        """
        Vectorized scoring over one row per client.

        Args:
            df: DataFrame with REQUIRED_COLUMNS (AVG_RESPONSE_HOURS may be null)

        Returns:
            Copy of df with one column per part plus ENGAGEMENT_SCORE
        """
        missing = set(self.REQUIRED_COLUMNS) - set(df.columns)
        if missing:
            raise ValueError(f"Missing required columns: {missing}")

        cfg = self.config
        result = df.copy()
        neutral = cfg.neutral_points

        def ratio_points(numerator, denominator, cap=True):
            denom = denominator.astype(float)
            raw = np.floor(numerator.astype(float) / denom.where(denom > 0) * 100 + 0.5)
            if cap:
                raw = raw.clip(upper=100)
            return raw.fillna(neutral).astype(int)

        result["attendance_score"] = ratio_points(
            result["SESSIONS_COMPLETED"], result["SESSIONS_TOTAL"], cap=False
        )
        result["habits_score"] = ratio_points(result["HABITS_COMPLETED"], result["HABITS_TARGET"])

        # Build conditions from thresholds (first match wins)
        hours = result["AVG_RESPONSE_HOURS"].astype(float)
        conditions = [hours.isna()]
        choices = [neutral]
        for ceiling, points in cfg.responsiveness_thresholds:
            conditions.append(hours < ceiling)
            choices.append(points)
        result["responsiveness_score"] = np.select(
            conditions, choices, default=cfg.responsiveness_default
        ).astype(int)

        progress = result["PROGRESS_ENTRIES_14D"].astype(float)
        result["progress_score"] = (
            np.floor(progress / cfg.expected_progress_entries * 100 + 0.5).clip(upper=100).astype(int)
        )

        workouts = result["WORKOUTS_7D"].astype(float)
        plan = np.floor(workouts / cfg.expected_workouts * 100 + 0.5).clip(upper=100)
        result["plan_score"] = plan.where(workouts > 0, neutral).astype(int)

        w = cfg.engagement_weights
        weighted = (
            result["attendance_score"] * w["attendance"]
            + result["habits_score"] * w["habits"]
            + result["responsiveness_score"] * w["responsiveness"]
            + result["progress_score"] * w["progress"]
            + result["plan_score"] * w["plan"]
        )
        result["ENGAGEMENT_SCORE"] = np.floor(weighted + 0.5).astype(int)
        return result
