"""
Scoring configuration for the engagement risk engine.

All weights, thresholds and horizons are defined here for easy tuning.
The partial-credit tiers (half weight at 7 days, full weight at 14 days)
are policy heuristics, so they live in config rather than in the factors.
"""

from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import yaml


RISK_LEVELS = ("low", "medium", "high")
TRAJECTORIES = ("improving", "stable", "declining", "critical")
URGENCY_RANK = {"immediate": 0, "soon": 1, "monitor": 2}


@dataclass
class ScoringConfig:
    """
    Configuration for every stage of the engine.

    Risk score max: 100 points (clamped)
    - Inactivity: 0 / 12.5 / 25
    - Missed sessions: 0 / 20
    - Low habit completion: 0 / 10 / 20
    - No recent progress: 0 / 15
    - No recent communication: 0 / 20
    """

    # === Inactivity (0-25 points) ===
    inactivity_full_days: int = 14
    inactivity_full_points: float = 25.0
    inactivity_partial_days: int = 7
    inactivity_partial_points: float = 12.5

    # === Missed sessions (0-20 points) ===
    # Cancelled or no-show within the trailing 14 days
    missed_sessions_min_count: int = 2
    missed_sessions_points: float = 20.0

    # === Habit completion (0-20 points) ===
    # (ratio ceiling, points), first match wins
    habit_thresholds: List[Tuple[float, float]] = field(default_factory=lambda: [
        (0.30, 20.0),  # <30%: barely engaging with habits
        (0.50, 10.0),  # <50%: slipping
    ])

    # === Progress logging (0-15 points) ===
    progress_min_entries: int = 1
    progress_points: float = 15.0

    # === Communication (0-20 points) ===
    communication_days: int = 7
    communication_points: float = 20.0

    # === Risk level categorization ===
    high_threshold: float = 60.0
    medium_threshold: float = 35.0
    max_score: float = 100.0

    # === Suggested actions ===
    # (risk level, factor name or None for any, action), first match wins
    action_rules: List[Tuple[str, Optional[str], str]] = field(default_factory=lambda: [
        ("high", "inactivity", "Send a personal check-in message to reconnect"),
        ("high", "missed_sessions", "Call to reschedule missed sessions and talk through barriers"),
        ("high", None, "Send a re-engagement message with one clear next step"),
        ("medium", "habits", "Simplify habit goals so small wins rebuild momentum"),
        ("medium", "communication", "Send a quick check-in message this week"),
        ("medium", "progress", "Ask for a progress update or check-in photo"),
        ("medium", None, "Schedule a check-in to review goals"),
        ("low", None, "Send encouragement and keep the current plan"),
    ])
    default_action: str = "Keep monitoring engagement"

    # === Trajectory ===
    min_history_points: int = 2
    sparse_confidence: int = 30
    max_history_weeks: int = 4
    sample_confidence_points: float = 25.0
    consistency_weight: float = 0.5
    critical_slope: float = -5.0
    declining_slope: float = -2.0
    improving_slope: float = 5.0

    # === Churn forecast ===
    forecast_min_score: float = 35.0
    base_horizon_days: Dict[str, int] = field(default_factory=lambda: {
        "critical": 7,
        "declining": 21,
        "stable": 45,
    })
    multiplier_floor: float = 0.5
    multiplier_span: float = 130.0
    immediate_days: int = 7
    soon_days: int = 21

    # === Batch ===
    max_workers: int = 8

    # === Weekly engagement score ===
    engagement_weights: Dict[str, float] = field(default_factory=lambda: {
        "attendance": 0.25,
        "habits": 0.25,
        "responsiveness": 0.15,
        "progress": 0.20,
        "plan": 0.15,
    })
    # (average response hours ceiling, points), first match wins
    responsiveness_thresholds: List[Tuple[float, int]] = field(default_factory=lambda: [
        (2, 100),
        (6, 80),
        (12, 60),
        (24, 40),
        (48, 20),
    ])
    responsiveness_default: int = 10
    neutral_points: int = 50
    expected_progress_entries: int = 2
    expected_workouts: int = 3
    trend_change_points: int = 5

    # === Metadata ===
    version: str = "1.0.0"

    def get_risk_level(self, score: float) -> str:
        """Map numeric score to risk level."""
        if score >= self.high_threshold:
            return "high"
        if score >= self.medium_threshold:
            return "medium"
        return "low"

    @classmethod
    def from_yaml(cls, path: Path | str) -> "ScoringConfig":
        """Load configuration from YAML file. Missing keys keep their defaults."""
        path = Path(path)
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        return cls(**data)

    def to_yaml(self, path: Path | str) -> None:
        """Save configuration to YAML file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)

    def to_dict(self) -> dict:
        """Convert to plain dict (tuples become lists so YAML stays portable)."""
        data = asdict(self)
        for key in ("habit_thresholds", "action_rules", "responsiveness_thresholds"):
            data[key] = [list(item) for item in data[key]]
        return data


# Default configuration instance
DEFAULT_CONFIG = ScoringConfig()
