"""
Per-client signal snapshots and the providers that fetch them.

A SignalSnapshot is validated when it is constructed, so malformed input is
rejected at the provider boundary instead of reaching the scorer.
"""

import math
import numbers
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Optional, Sequence

import numpy as np
import pandas as pd
from pandera.errors import SchemaErrors

from .errors import InvalidInputError, SnapshotFetchError
from .utils import as_utc

MAX_HISTORY_WEEKS = 4


@dataclass(frozen=True)
class SignalSnapshot:
    """
    Facts about one client, assembled by the calling layer.

    Attributes:
        client_id: Client identifier
        last_session_at: Most recent scheduled session, None if never scheduled
        recent_cancelled_or_no_show_count: Cancelled/no-show sessions in the trailing 14 days
        habit_completion_ratio_7d: Completed/target over 7 days, None if no habit logs
        recent_progress_entry_count_14d: Progress entries in the trailing 14 days
        last_message_at: Most recent message in either direction, None if none
        weekly_engagement_scores: Up to 4 weekly scores (0-100), oldest first
        client_name: Display name, optional
    """

    client_id: str
    last_session_at: Optional[datetime] = None
    recent_cancelled_or_no_show_count: int = 0
    habit_completion_ratio_7d: Optional[float] = None
    recent_progress_entry_count_14d: int = 0
    last_message_at: Optional[datetime] = None
    weekly_engagement_scores: Sequence[float] = field(default_factory=tuple)
    client_name: Optional[str] = None

    def __post_init__(self):
        if not self.client_id:
            raise InvalidInputError("client_id must be a non-empty string")

        for name in ("last_session_at", "last_message_at"):
            value = getattr(self, name)
            if value is not None:
                object.__setattr__(self, name, as_utc(value))

        for name in ("recent_cancelled_or_no_show_count", "recent_progress_entry_count_14d"):
            value = getattr(self, name)
            if (
                isinstance(value, bool)
                or not isinstance(value, numbers.Real)
                or not float(value).is_integer()
            ):
                raise InvalidInputError(f"{name} must be an integer, got {value!r}")
            if value < 0:
                raise InvalidInputError(f"{name} cannot be negative, got {value}")
            object.__setattr__(self, name, int(value))

        ratio = self.habit_completion_ratio_7d
        if ratio is not None:
            if not isinstance(ratio, numbers.Real) or math.isnan(ratio) or not 0.0 <= ratio <= 1.0:
                raise InvalidInputError(
                    f"habit_completion_ratio_7d must be within [0, 1], got {ratio}"
                )
            object.__setattr__(self, "habit_completion_ratio_7d", float(ratio))

        scores = tuple(float(s) for s in self.weekly_engagement_scores)
        if len(scores) > MAX_HISTORY_WEEKS:
            raise InvalidInputError(
                f"weekly_engagement_scores holds at most {MAX_HISTORY_WEEKS} weeks, got {len(scores)}"
            )
        for s in scores:
            if not math.isfinite(s) or not 0.0 <= s <= 100.0:
                raise InvalidInputError(
                    f"weekly_engagement_scores values must be within [0, 100], got {s}"
                )
        object.__setattr__(self, "weekly_engagement_scores", scores)


class SnapshotProvider(ABC):
    """
    Source of signal snapshots, one client at a time.

    Implementations may block on I/O; the orchestrator calls fetch()
    from worker threads.
    """

    @abstractmethod
    def fetch(self, client_id: str) -> SignalSnapshot:
        """
        Build the snapshot for one client.

        Raises:
            SnapshotFetchError: If the snapshot cannot be produced
        """
        pass


class DataFrameSnapshotProvider(SnapshotProvider):
    """
    Serve snapshots from an in-memory DataFrame (one row per client).

    Rows are validated against SNAPSHOT_INPUT_SCHEMA on construction. A row
    that fails validation is kept out of the served snapshots and recorded
    in `rejected`, so fetch() raises SnapshotFetchError for that client
    only. Frame-level problems (a missing required column) still raise
    SchemaError here.

    WEEKLY_ENGAGEMENT_SCORES may hold lists or ";"-separated strings.
    """

    def __init__(self, df: pd.DataFrame):
        from .schemas import SNAPSHOT_INPUT_SCHEMA

        frame = df.reset_index(drop=True)
        problems: dict[int, list[str]] = {}

        for col in ("LAST_SESSION_AT", "LAST_MESSAGE_AT"):
            if col in frame.columns:
                parsed = pd.to_datetime(frame[col], utc=True, format="ISO8601", errors="coerce")
                for idx in frame.index[parsed.isna() & frame[col].notna()]:
                    problems.setdefault(int(idx), []).append(
                        f"{col} is not a timestamp ({frame.at[idx, col]!r})"
                    )
                frame[col] = parsed

        try:
            SNAPSHOT_INPUT_SCHEMA.validate(frame, lazy=True)
        except SchemaErrors as exc:
            cases = exc.failure_cases
            for case in cases[cases["index"].notna()].to_dict(orient="records"):
                problems.setdefault(int(case["index"]), []).append(
                    f"{case['column']} failed {case['check']} ({case['failure_case']!r})"
                )

        self.rejected: dict[str, str] = {}
        for idx in sorted(problems):
            self.rejected.setdefault(_row_label(frame, idx), "; ".join(problems[idx]))

        self.df = SNAPSHOT_INPUT_SCHEMA.validate(frame.drop(index=list(problems)))
        self._rows = {
            row["CLIENT_ID"]: row for row in self.df.to_dict(orient="records")
        }
        self._client_ids = list(dict.fromkeys(_row_label(frame, idx) for idx in frame.index))

    @property
    def client_ids(self) -> list[str]:
        """Every client in the frame, in frame order, including rejected rows."""
        return list(self._client_ids)

    def fetch(self, client_id: str) -> SignalSnapshot:
        if client_id in self.rejected:
            raise SnapshotFetchError(client_id, f"malformed snapshot: {self.rejected[client_id]}")

        row = self._rows.get(client_id)
        if row is None:
            raise SnapshotFetchError(client_id, "client not found")

        try:
            return SignalSnapshot(
                client_id=client_id,
                last_session_at=_to_datetime(row.get("LAST_SESSION_AT")),
                recent_cancelled_or_no_show_count=row["RECENT_MISSED_SESSIONS"],
                habit_completion_ratio_7d=_to_optional_float(row.get("HABIT_COMPLETION_7D")),
                recent_progress_entry_count_14d=row["PROGRESS_ENTRIES_14D"],
                last_message_at=_to_datetime(row.get("LAST_MESSAGE_AT")),
                weekly_engagement_scores=parse_history(row.get("WEEKLY_ENGAGEMENT_SCORES")),
                client_name=_to_optional_str(row.get("CLIENT_NAME")),
            )
        except (InvalidInputError, ValueError, TypeError) as exc:
            raise SnapshotFetchError(client_id, f"malformed snapshot: {exc}") from exc


def parse_history(value) -> tuple[float, ...]:
    """Parse a weekly score history cell: list, tuple, ';'-separated string or empty."""
    if value is None:
        return ()
    if isinstance(value, str):
        parts = [p.strip() for p in value.split(";")]
        return tuple(float(p) for p in parts if p)
    if isinstance(value, (list, tuple, np.ndarray)):
        return tuple(float(v) for v in value)
    if pd.isna(value):
        return ()
    # A single-week history read back from CSV arrives as a bare number
    if isinstance(value, (int, float, np.number)):
        return (float(value),)
    raise ValueError(f"Unrecognised engagement history: {value!r}")


def format_history(scores: Sequence[float]) -> str:
    """Inverse of parse_history for CSV output."""
    return ";".join(f"{s:g}" for s in scores)


def _row_label(frame: pd.DataFrame, idx: int) -> str:
    """Client id for a frame row, or a positional label when the id is unusable."""
    value = frame.at[idx, "CLIENT_ID"] if "CLIENT_ID" in frame.columns else None
    if value is None or pd.isna(value) or str(value) == "":
        return f"row {idx}"
    return str(value)


def _to_datetime(value) -> Optional[datetime]:
    if value is None or pd.isna(value):
        return None
    return pd.Timestamp(value).to_pydatetime()


def _to_optional_float(value) -> Optional[float]:
    if value is None or pd.isna(value):
        return None
    return float(value)


def _to_optional_str(value) -> Optional[str]:
    if value is None or pd.isna(value):
        return None
    return str(value)


def generate_sample_snapshots(
    n_clients: int = 100,
    seed: int = 42,
    now: Optional[datetime] = None,
) -> pd.DataFrame:
    """
    Generate a realistic snapshot frame for demos and tests.

    Distributions:
    - ~5% of clients never had a session or message
    - ~15% have no habit logs this week
    - History length skewed towards the full 4 weeks
    """
    now = pd.Timestamp(now if now is not None else "2025-03-01T12:00:00")
    if now.tzinfo is None:
        now = now.tz_localize("UTC")
    np.random.seed(seed)

    session_days = np.clip(np.random.exponential(scale=7, size=n_clients), 0, 45)
    no_session = np.random.random(n_clients) < 0.05
    message_days = np.clip(np.random.exponential(scale=5, size=n_clients), 0, 45)
    no_message = np.random.random(n_clients) < 0.05

    missed = np.random.poisson(lam=0.7, size=n_clients)
    habit_ratio = np.random.beta(a=4, b=2, size=n_clients).round(2)
    no_habits = np.random.random(n_clients) < 0.15
    progress = np.random.poisson(lam=1.5, size=n_clients)

    weeks = np.random.choice([0, 1, 2, 3, 4], size=n_clients, p=[0.05, 0.1, 0.15, 0.2, 0.5])
    start = np.random.normal(loc=65, scale=15, size=n_clients)
    slope = np.random.normal(loc=0, scale=6, size=n_clients)

    histories = []
    for i in range(n_clients):
        x = np.arange(weeks[i])
        noise = np.random.normal(loc=0, scale=4, size=weeks[i])
        series = np.clip(start[i] + slope[i] * x + noise, 0, 100).round(1)
        histories.append(format_history(series))

    def stamps(days, missing):
        return [
            None if gone else now - timedelta(days=float(d))
            for d, gone in zip(days, missing)
        ]

    return pd.DataFrame(
        {
            "CLIENT_ID": [f"CLIENT_{i:04d}" for i in range(n_clients)],
            "LAST_SESSION_AT": pd.to_datetime(stamps(session_days, no_session), utc=True),
            "RECENT_MISSED_SESSIONS": missed,
            "HABIT_COMPLETION_7D": np.where(no_habits, np.nan, habit_ratio),
            "PROGRESS_ENTRIES_14D": progress,
            "LAST_MESSAGE_AT": pd.to_datetime(stamps(message_days, no_message), utc=True),
            "WEEKLY_ENGAGEMENT_SCORES": histories,
        }
    )
