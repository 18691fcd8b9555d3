"""Missed session scoring component."""

from datetime import datetime
from typing import Optional

from .base import BaseFactor, FactorHit


class MissedSessionsFactor(BaseFactor):
    """
    Score based on cancelled or no-show sessions in the trailing 14 days.

    Points:
    - >=2 missed: 20
    - otherwise: 0
    """

    name = "missed_sessions"

    def evaluate(self, snapshot, now: datetime) -> Optional[FactorHit]:
        missed = snapshot.recent_cancelled_or_no_show_count
        if missed >= self.config.missed_sessions_min_count:
            return self.hit(
                f"{missed} cancelled or missed sessions in 14 days",
                self.config.missed_sessions_points,
            )
        return None
