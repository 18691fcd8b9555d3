"""Numeric and time helpers shared by the scoring stages."""

import math
from datetime import datetime, timezone


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives (2.5 -> 3)."""
    return int(math.floor(value + 0.5))


def as_utc(value: datetime) -> datetime:
    """Treat a naive datetime as UTC; aware datetimes pass through unchanged."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
