"""Habit completion scoring component."""

from datetime import datetime
from typing import Optional

from .base import BaseFactor, FactorHit


class HabitFactor(BaseFactor):
    """
    Score based on the 7-day habit completion ratio.

    Points:
    - <30%: 20 (full)
    - <50%: 10 (partial)
    - otherwise or no habit logs: 0
    """

    name = "habits"

    def evaluate(self, snapshot, now: datetime) -> Optional[FactorHit]:
        ratio = snapshot.habit_completion_ratio_7d
        if ratio is None:
            return None

        # First match wins
        for ceiling, points in self.config.habit_thresholds:
            if ratio < ceiling:
                return self.hit(
                    f"Low habit completion ({ratio:.0%} this week)",
                    points,
                )
        return None
