"""Base class for risk factor components."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Optional

from ..utils import as_utc

if TYPE_CHECKING:
    from ..config import ScoringConfig
    from ..snapshot import SignalSnapshot


@dataclass(frozen=True)
class FactorHit:
    """A triggered factor: which one, its human-readable label, and its weight."""

    name: str
    label: str
    points: float


class BaseFactor(ABC):
    """
    Abstract base class for risk factors.

    Each factor inspects one signal of a snapshot and fires at most one
    of its tiers. A missing (None) signal means the factor does not apply.
    """

    name: str = "base"

    def __init__(self, config: "ScoringConfig"):
        """
        Initialize factor with configuration.

        Args:
            config: ScoringConfig instance with thresholds and weights
        """
        self.config = config

    @abstractmethod
    def evaluate(self, snapshot: "SignalSnapshot", now: datetime) -> Optional[FactorHit]:
        """
        Evaluate the factor for one client.

        Args:
            snapshot: Validated client snapshot
            now: Reference time for all elapsed-time checks

        Returns:
            FactorHit if the factor fired, otherwise None
        """
        pass

    def hit(self, label: str, points: float) -> FactorHit:
        return FactorHit(name=self.name, label=label, points=points)


def days_since(then: datetime, now: datetime) -> float:
    """Elapsed days between two timestamps (fractional); naive values count as UTC."""
    return (as_utc(now) - as_utc(then)) / timedelta(days=1)
