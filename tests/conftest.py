"""
Pytest fixtures for risk engine tests.
"""

from datetime import date, datetime, timedelta, timezone

import pytest

# Add package to path
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from risk_engine.config import ScoringConfig
from risk_engine.forecaster import ChurnForecaster
from risk_engine.orchestrator import BatchOrchestrator
from risk_engine.scorer import RiskScorer
from risk_engine.snapshot import SignalSnapshot, generate_sample_snapshots
from risk_engine.trajectory import TrajectoryAnalyzer

NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)
TODAY = date(2025, 3, 1)

STABLE_HISTORY = [70, 72, 71, 73]
CRITICAL_HISTORY = [80, 60, 40, 20]


def days_ago(days: float) -> datetime:
    return NOW - timedelta(days=days)


def make_snapshot(client_id: str = "TEST_001", **overrides) -> SignalSnapshot:
    """Healthy client (score 0) unless overridden."""
    fields = {
        "last_session_at": days_ago(2),
        "recent_cancelled_or_no_show_count": 0,
        "habit_completion_ratio_7d": 0.9,
        "recent_progress_entry_count_14d": 3,
        "last_message_at": days_ago(1),
        "weekly_engagement_scores": STABLE_HISTORY,
    }
    fields.update(overrides)
    return SignalSnapshot(client_id=client_id, **fields)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def default_config():
    """Default scoring configuration."""
    return ScoringConfig()


@pytest.fixture
def scorer(default_config):
    """RiskScorer with default config."""
    return RiskScorer(default_config)


@pytest.fixture
def analyzer(default_config):
    return TrajectoryAnalyzer(default_config)


@pytest.fixture
def forecaster(default_config):
    return ChurnForecaster(default_config)


@pytest.fixture
def orchestrator(default_config):
    return BatchOrchestrator(default_config)


@pytest.fixture
def healthy():
    return make_snapshot()


@pytest.fixture
def sample_data():
    """100 sample clients with realistic distributions."""
    return generate_sample_snapshots(n_clients=100, seed=42, now=NOW)


@pytest.fixture
def ranking_snapshots():
    """
    Three clients whose (urgency, score) are:
    RANK_A (soon, 80), RANK_B (immediate, 40), RANK_C (soon, 90).
    """
    return {
        # inactivity 25 + missed 20 + progress 15 + communication 20, stable -> 29 days
        "RANK_A": make_snapshot(
            "RANK_A",
            last_session_at=days_ago(20),
            recent_cancelled_or_no_show_count=2,
            recent_progress_entry_count_14d=0,
            last_message_at=days_ago(10),
        ),
        # missed 20 + communication 20, critical -> 7 days
        "RANK_B": make_snapshot(
            "RANK_B",
            recent_cancelled_or_no_show_count=3,
            last_message_at=days_ago(9),
            weekly_engagement_scores=CRITICAL_HISTORY,
        ),
        # RANK_A plus partial habits 10, stable -> 26 days
        "RANK_C": make_snapshot(
            "RANK_C",
            last_session_at=days_ago(20),
            recent_cancelled_or_no_show_count=2,
            habit_completion_ratio_7d=0.4,
            recent_progress_entry_count_14d=0,
            last_message_at=days_ago(10),
        ),
    }


@pytest.fixture
def snapshot_factory():
    """Build snapshots from overrides of the healthy baseline."""
    return make_snapshot


@pytest.fixture
def ago():
    """Timestamp a number of days before NOW."""
    return days_ago
