"""
Client Engagement Risk Package

Scores per-client activity signals, reads engagement trajectories,
and forecasts churn dates for a coach's active roster.
"""

from .config import ScoringConfig, DEFAULT_CONFIG
from .engagement import EngagementBreakdown, EngagementCalculator
from .errors import InvalidInputError, SnapshotFetchError
from .forecaster import ChurnForecast, ChurnForecaster
from .orchestrator import BatchOrchestrator, BatchResult, RankedResult
from .scorer import RiskAssessment, RiskScorer
from .snapshot import (
    DataFrameSnapshotProvider,
    SignalSnapshot,
    SnapshotProvider,
    generate_sample_snapshots,
)
from .trajectory import TrajectoryAnalyzer, TrajectoryForecast

__all__ = [
    "ScoringConfig",
    "DEFAULT_CONFIG",
    "EngagementBreakdown",
    "EngagementCalculator",
    "InvalidInputError",
    "SnapshotFetchError",
    "ChurnForecast",
    "ChurnForecaster",
    "BatchOrchestrator",
    "BatchResult",
    "RankedResult",
    "RiskAssessment",
    "RiskScorer",
    "DataFrameSnapshotProvider",
    "SignalSnapshot",
    "SnapshotProvider",
    "generate_sample_snapshots",
    "TrajectoryAnalyzer",
    "TrajectoryForecast",
]
__version__ = "1.0.0"
