"""
BatchOrchestrator - runs the full pipeline over a coach's roster.

Usage:
    from risk_engine import BatchOrchestrator, DataFrameSnapshotProvider

    provider = DataFrameSnapshotProvider(snapshot_df)
    orchestrator = BatchOrchestrator()
    result = orchestrator.run(provider.client_ids, provider, now)

    print(result.to_frame()[["CLIENT_ID", "URGENCY", "RISK_SCORE"]])
    print(result.summary())
    print(result.failures)
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Iterable, Optional, Union

import pandas as pd

from .config import ScoringConfig, DEFAULT_CONFIG, URGENCY_RANK
from .forecaster import ChurnForecast, ChurnForecaster
from .schemas import RANKED_OUTPUT_SCHEMA
from .scorer import RiskAssessment, RiskScorer
from .snapshot import SignalSnapshot, SnapshotProvider
from .trajectory import TrajectoryAnalyzer, TrajectoryForecast
from .utils import as_utc

logger = logging.getLogger(__name__)

SnapshotLookup = Union[SnapshotProvider, Callable[[str], SignalSnapshot]]


@dataclass(frozen=True)
class RankedResult:
    """Everything the engine knows about one client after a run."""

    client_id: str
    assessment: RiskAssessment
    trajectory: TrajectoryForecast
    churn: ChurnForecast
    client_name: Optional[str] = None

    @property
    def sort_key(self) -> tuple[int, float]:
        return (URGENCY_RANK[self.churn.urgency], -self.assessment.risk_score)

    def to_dict(self) -> dict:
        churn_date = self.churn.predicted_churn_date
        return {
            "CLIENT_ID": self.client_id,
            "CLIENT_NAME": self.client_name,
            "RISK_SCORE": self.assessment.risk_score,
            "RISK_LEVEL": self.assessment.risk_level,
            "RISK_FACTORS": list(self.assessment.risk_factors),
            "SUGGESTED_ACTION": self.assessment.suggested_action,
            "TRAJECTORY": self.trajectory.trajectory,
            "CONFIDENCE": self.trajectory.confidence,
            "PREDICTED_CHURN_DATE": churn_date.isoformat() if churn_date else None,
            "DAYS_UNTIL_CHURN": self.churn.days_until_churn,
            "URGENCY": self.churn.urgency,
        }


@dataclass
class BatchResult:
    """
    Container for one batch run.

    Attributes:
        results: Ranked results, most urgent first
        failures: Client id -> error text for excluded clients
    """

    results: list[RankedResult]
    failures: dict[str, str] = field(default_factory=dict)

    @property
    def client_ids(self) -> list[str]:
        return [r.client_id for r in self.results]

    def to_frame(self) -> pd.DataFrame:
        """One row per ranked client, validated against RANKED_OUTPUT_SCHEMA."""
        df = pd.DataFrame([r.to_dict() for r in self.results], columns=_OUTPUT_COLUMNS)
        df["RISK_FACTORS"] = df["RISK_FACTORS"].apply(lambda labels: "; ".join(labels))
        df["RISK_SCORE"] = df["RISK_SCORE"].astype(float)
        df["CONFIDENCE"] = df["CONFIDENCE"].astype(int)
        df["DAYS_UNTIL_CHURN"] = df["DAYS_UNTIL_CHURN"].astype("Int64")
        return RANKED_OUTPUT_SCHEMA.validate(df)

    def get_urgent(self, min_urgency: str = "soon") -> list[RankedResult]:
        """
        Get clients at or above an urgency bucket.

        Args:
            min_urgency: "immediate", "soon" or "monitor"
        """
        cutoff = URGENCY_RANK[min_urgency]
        return [r for r in self.results if URGENCY_RANK[r.churn.urgency] <= cutoff]

    def summary(self) -> pd.DataFrame:
        """Client counts and average risk score by urgency and risk level."""
        df = self.to_frame()
        if df.empty:
            return pd.DataFrame(columns=["count", "avg_score"])
        return (
            df.groupby(["URGENCY", "RISK_LEVEL"])
            .agg(
                count=("CLIENT_ID", "count"),
                avg_score=("RISK_SCORE", "mean"),
            )
            .round(1)
        )


_OUTPUT_COLUMNS = [
    "CLIENT_ID",
    "CLIENT_NAME",
    "RISK_SCORE",
    "RISK_LEVEL",
    "RISK_FACTORS",
    "SUGGESTED_ACTION",
    "TRAJECTORY",
    "CONFIDENCE",
    "PREDICTED_CHURN_DATE",
    "DAYS_UNTIL_CHURN",
    "URGENCY",
]


class BatchOrchestrator:
    """
    Fan the per-client pipeline out over a roster.

    snapshot -> RiskScorer        -> ChurnForecaster
             -> TrajectoryAnalyzer ->

    Each client is independent: a failure drops that client only, and
    results do not depend on execution order or parallelism.
    """

    def __init__(self, config: Optional[ScoringConfig] = None, max_workers: Optional[int] = None):
        """
        Initialize orchestrator.

        Args:
            config: ScoringConfig shared by all stages. Uses DEFAULT_CONFIG if None.
            max_workers: Cap on concurrent snapshot fetches (default: config.max_workers)
        """
        self.config = config or DEFAULT_CONFIG
        self.max_workers = max_workers or self.config.max_workers
        self.scorer = RiskScorer(self.config)
        self.analyzer = TrajectoryAnalyzer(self.config)
        self.forecaster = ChurnForecaster(self.config)

    def evaluate(self, snapshot: SignalSnapshot, now: datetime) -> RankedResult:
        """Run all stages for one snapshot."""
        assessment = self.scorer.score(snapshot, now)
        trajectory = self.analyzer.analyze(snapshot.weekly_engagement_scores)
        churn = self.forecaster.forecast(assessment.risk_score, trajectory.trajectory, now.date())

        logger.debug(
            "Scored %s: score=%.1f trajectory=%s urgency=%s",
            snapshot.client_id, assessment.risk_score, trajectory.trajectory, churn.urgency,
        )
        return RankedResult(
            client_id=snapshot.client_id,
            assessment=assessment,
            trajectory=trajectory,
            churn=churn,
            client_name=snapshot.client_name,
        )

    def run(self, client_ids: Iterable[str], lookup: SnapshotLookup, now: datetime) -> BatchResult:
        """
        Score every client and rank the survivors.

        Ordering: urgency (immediate, soon, monitor), then risk score
        descending; ties keep input order.

        Args:
            client_ids: Roster to score (duplicates are scored once)
            lookup: SnapshotProvider or callable returning a SignalSnapshot
            now: Reference time for every client in the batch (naive values are read as UTC)

        Returns:
            BatchResult with ranked results and per-client failures
        """
        now = as_utc(now)
        fetch = lookup.fetch if isinstance(lookup, SnapshotProvider) else lookup
        roster = list(dict.fromkeys(client_ids))

        def pipeline(client_id: str) -> RankedResult:
            snapshot = fetch(client_id)
            if snapshot.client_id != client_id:
                raise ValueError(f"Provider returned snapshot for {snapshot.client_id}")
            return self.evaluate(snapshot, now)

        results = []
        failures = {}
        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            futures = [pool.submit(pipeline, client_id) for client_id in roster]
            for client_id, future in zip(roster, futures):
                try:
                    results.append(future.result())
                except Exception as exc:
                    logger.warning("Excluding client %s from batch: %s", client_id, exc)
                    failures[client_id] = str(exc)

        ranked = sorted(results, key=lambda r: r.sort_key)
        logger.info("Batch complete: %d scored, %d failed", len(ranked), len(failures))
        return BatchResult(results=ranked, failures=failures)
