"""Risk factor components, one per signal."""

from .base import BaseFactor, FactorHit
from .inactivity import InactivityFactor
from .sessions import MissedSessionsFactor
from .habits import HabitFactor
from .progress import ProgressFactor
from .communication import CommunicationFactor

__all__ = [
    "BaseFactor",
    "FactorHit",
    "InactivityFactor",
    "MissedSessionsFactor",
    "HabitFactor",
    "ProgressFactor",
    "CommunicationFactor",
]
