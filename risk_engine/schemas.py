"""
Data schema definitions for the risk engine.

Uses Pandera for runtime validation of snapshot frames before scoring
and of ranked output frames before they leave the engine.
"""

import pandas as pd
from pandera import Check, Column, DataFrameSchema


def _is_datetime(series: pd.Series) -> bool:
    return pd.api.types.is_datetime64_any_dtype(series) or series.isna().all()


# Schema for snapshot input frames
SNAPSHOT_INPUT_SCHEMA = DataFrameSchema(
    {
        "CLIENT_ID": Column(
            str,
            nullable=False,
            unique=True,
            description="Unique client identifier"
        ),
        "CLIENT_NAME": Column(
            nullable=True,
            required=False,
            description="Display name"
        ),
        "LAST_SESSION_AT": Column(
            nullable=True,
            checks=Check(_is_datetime, error="LAST_SESSION_AT must hold timestamps"),
            description="Most recent scheduled session (UTC), null if none"
        ),
        "RECENT_MISSED_SESSIONS": Column(
            int,
            nullable=False,
            checks=Check.greater_than_or_equal_to(0),
            description="Cancelled or no-show sessions in the trailing 14 days"
        ),
        "HABIT_COMPLETION_7D": Column(
            float,
            nullable=True,  # Null when no habit logs exist
            checks=Check.in_range(0.0, 1.0),
            description="Completed/target habit ratio over the trailing 7 days"
        ),
        "PROGRESS_ENTRIES_14D": Column(
            int,
            nullable=False,
            checks=Check.greater_than_or_equal_to(0),
            description="Progress entries recorded in the trailing 14 days"
        ),
        "LAST_MESSAGE_AT": Column(
            nullable=True,
            checks=Check(_is_datetime, error="LAST_MESSAGE_AT must hold timestamps"),
            description="Most recent message in either direction (UTC), null if none"
        ),
        "WEEKLY_ENGAGEMENT_SCORES": Column(
            nullable=True,
            required=False,
            description="Up to 4 weekly engagement scores, oldest first"
        ),
    },
    strict=False,  # Allow extra columns from the calling layer
    coerce=True,
    description="Schema for per-client signal snapshots"
)


# Schema for ranked output frames
RANKED_OUTPUT_SCHEMA = DataFrameSchema(
    {
        "CLIENT_ID": Column(str, nullable=False, unique=True),
        "RISK_SCORE": Column(
            float,
            nullable=False,
            checks=Check.in_range(0.0, 100.0),
        ),
        "RISK_LEVEL": Column(
            str,
            nullable=False,
            checks=Check.isin(["low", "medium", "high"])
        ),
        "TRAJECTORY": Column(
            str,
            nullable=False,
            checks=Check.isin(["improving", "stable", "declining", "critical"])
        ),
        "CONFIDENCE": Column(int, nullable=False, checks=Check.in_range(0, 100)),
        "DAYS_UNTIL_CHURN": Column(
            "Int64",
            nullable=True,
            checks=Check.greater_than_or_equal_to(0),
        ),
        "URGENCY": Column(
            str,
            nullable=False,
            checks=Check.isin(["immediate", "soon", "monitor"])
        ),
    },
    strict=False,  # Allow factor/action/date columns
    coerce=True,
    description="Schema for ranked engine output"
)
