"""Communication recency scoring component."""

from datetime import datetime
from typing import Optional

from .base import BaseFactor, FactorHit, days_since


class CommunicationFactor(BaseFactor):
    """
    Score based on time since the last message in either direction.

    Points:
    - >7 days: 20
    - otherwise or no message on record: 0
    """

    name = "communication"

    def evaluate(self, snapshot, now: datetime) -> Optional[FactorHit]:
        if snapshot.last_message_at is None:
            return None

        days = self.config.communication_days
        if days_since(snapshot.last_message_at, now) > days:
            return self.hit(f"No messages in over {days} days", self.config.communication_points)
        return None
