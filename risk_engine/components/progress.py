"""Progress logging scoring component."""

from datetime import datetime
from typing import Optional

from .base import BaseFactor, FactorHit


class ProgressFactor(BaseFactor):
    """
    Score based on progress entries in the trailing 14 days.

    Points:
    - no entries: 15
    - otherwise: 0
    """

    name = "progress"

    def evaluate(self, snapshot, now: datetime) -> Optional[FactorHit]:
        if snapshot.recent_progress_entry_count_14d < self.config.progress_min_entries:
            return self.hit("No progress logged in 14 days", self.config.progress_points)
        return None
