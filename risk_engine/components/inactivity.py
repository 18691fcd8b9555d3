"""Session inactivity scoring component."""

from datetime import datetime
from typing import Optional

from .base import BaseFactor, FactorHit, days_since


class InactivityFactor(BaseFactor):
    """
    Score based on time since the last scheduled session.

    A client who stops booking sessions is the earliest and strongest
    signal of disengagement.

    Points:
    - >14 days: 25 (full)
    - >7 days: 12.5 (partial)
    - otherwise or no session on record: 0
    """

    name = "inactivity"

    def evaluate(self, snapshot, now: datetime) -> Optional[FactorHit]:
        if snapshot.last_session_at is None:
            return None

        idle_days = days_since(snapshot.last_session_at, now)
        cfg = self.config

        if idle_days > cfg.inactivity_full_days:
            return self.hit(
                f"No session in over {cfg.inactivity_full_days} days",
                cfg.inactivity_full_points,
            )
        if idle_days > cfg.inactivity_partial_days:
            return self.hit(
                f"No session in over {cfg.inactivity_partial_days} days",
                cfg.inactivity_partial_points,
            )
        return None
