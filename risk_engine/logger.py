"""
Run logging for batch scoring.

Writes one JSON log per batch run, including the clients that were
excluded and why.
"""

import json
import uuid
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING

import pandas as pd

if TYPE_CHECKING:
    from .config import ScoringConfig
    from .orchestrator import BatchResult


class RunLogger:
    """Structured JSON logging for batch runs."""

    def __init__(self, logs_dir: Path):
        """
        Initialize logger.

        Args:
            logs_dir: Directory to write log files
        """
        self.logs_dir = Path(logs_dir)
        self.logs_dir.mkdir(parents=True, exist_ok=True)

    def generate_run_id(self) -> str:
        """Generate unique run ID: run_YYYYMMDD_HHMMSS_XXXX"""
        stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        return f"run_{stamp}_{uuid.uuid4().hex[:4]}"

    def log_run(
        self,
        result: "BatchResult",
        config: "ScoringConfig",
        now: datetime,
        duration_seconds: float,
    ) -> Path:
        """
        Log a completed batch run to a JSON file.

        Args:
            result: BatchResult from the orchestrator
            config: ScoringConfig used for the run
            now: Reference time the run was scored at
            duration_seconds: Wall-clock duration

        Returns:
            Path to log file
        """
        run_id = self.generate_run_id()
        urgency_counts: dict[str, int] = {}
        for r in result.results:
            urgency_counts[r.churn.urgency] = urgency_counts.get(r.churn.urgency, 0) + 1

        log_entry = {
            "run_id": run_id,
            "timestamp": datetime.now().isoformat(),
            "scored_at": now.isoformat(),
            "duration_seconds": duration_seconds,
            "config_version": config.version,
            "counts": {
                "scored": len(result.results),
                "failed": len(result.failures),
            },
            "urgency": urgency_counts,
            "failures": result.failures,
            "status": "PARTIAL" if result.failures else "OK",
        }

        log_path = self.logs_dir / f"{run_id}.json"
        with open(log_path, "w") as f:
            json.dump(log_entry, f, indent=2, default=str)

        return log_path

    def get_all_logs(self) -> list[dict]:
        """
        Load all run logs.

        Returns:
            List of log dictionaries, sorted by file name (oldest first)
        """
        logs = []
        for log_file in sorted(self.logs_dir.glob("run_*.json")):
            with open(log_file) as f:
                logs.append(json.load(f))
        return logs

    def get_summary_dataframe(self) -> pd.DataFrame:
        """
        Get summary of all runs as DataFrame.

        Returns:
            DataFrame with one row per run, newest first
        """
        logs = self.get_all_logs()
        if not logs:
            return pd.DataFrame()

        summary = []
        for log in logs:
            entry = {
                "run_id": log["run_id"],
                "timestamp": log["timestamp"],
                "status": log["status"],
                "scored": log["counts"]["scored"],
                "failed": log["counts"]["failed"],
            }
            for bucket in ("immediate", "soon", "monitor"):
                entry[bucket] = log.get("urgency", {}).get(bucket, 0)
            summary.append(entry)

        df = pd.DataFrame(summary)
        return df.sort_values("timestamp", ascending=False)
