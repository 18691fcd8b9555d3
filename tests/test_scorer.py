"""
Integration tests for RiskScorer.
"""

import pytest

from risk_engine import ScoringConfig, RiskScorer
from risk_engine.snapshot import DataFrameSnapshotProvider


class TestRiskScorer:
    """Integration tests for the main scorer class."""

    def test_healthy_client_scores_zero(self, scorer, healthy, now):
        """No factor fired: score 0, low, no factors."""
        result = scorer.score(healthy, now)

        assert result.risk_score == 0
        assert result.risk_level == "low"
        assert result.risk_factors == ()
        assert result.suggested_action == "Send encouragement and keep the current plan"

    def test_risk_score_is_sum_of_components(self, scorer, snapshot_factory, ago, now):
        """Score equals the sum of fired factor weights."""
        snapshot = snapshot_factory(
            last_session_at=ago(10),
            habit_completion_ratio_7d=0.2,
            recent_progress_entry_count_14d=0,
        )
        result = scorer.score(snapshot, now)

        assert result.risk_score == 12.5 + 20 + 15
        assert result.risk_score == sum(result.components.values())
        assert result.triggered == ["inactivity", "habits", "progress"]

    def test_every_factor_fired(self, scorer, snapshot_factory, ago, now):
        """All full tiers add up to exactly 100."""
        snapshot = snapshot_factory(
            last_session_at=ago(30),
            recent_cancelled_or_no_show_count=4,
            habit_completion_ratio_7d=0.1,
            recent_progress_entry_count_14d=0,
            last_message_at=ago(12),
        )
        result = scorer.score(snapshot, now)

        assert result.risk_score == 100
        assert result.risk_level == "high"
        assert len(result.risk_factors) == 5

    def test_score_clamped_to_max(self, snapshot_factory, ago, now):
        """Heavier custom weights are still clamped to 100."""
        scorer = RiskScorer(ScoringConfig(inactivity_full_points=50, communication_points=40))
        snapshot = snapshot_factory(
            last_session_at=ago(30),
            recent_cancelled_or_no_show_count=2,
            last_message_at=ago(12),
        )
        result = scorer.score(snapshot, now)

        assert result.risk_score == 100

    def test_factor_order_is_evaluation_order(self, scorer, snapshot_factory, ago, now):
        """Labels follow inactivity -> missed -> habits -> progress -> communication, not weight."""
        snapshot = snapshot_factory(
            last_session_at=ago(9),          # 12.5
            habit_completion_ratio_7d=0.1,   # 20
            last_message_at=ago(8),          # 20
        )
        result = scorer.score(snapshot, now)

        assert len(result.risk_factors) == 3
        assert result.risk_factors[0].startswith("No session")
        assert result.risk_factors[1].startswith("Low habit completion")
        assert result.risk_factors[2].startswith("No messages")

    def test_missing_optional_signals_never_raise(self, scorer, snapshot_factory, now):
        """None signals simply do not apply."""
        snapshot = snapshot_factory(
            last_session_at=None,
            habit_completion_ratio_7d=None,
            last_message_at=None,
            recent_progress_entry_count_14d=0,
            weekly_engagement_scores=[],
        )
        result = scorer.score(snapshot, now)

        assert result.risk_score == 15
        assert result.triggered == ["progress"]

    def test_client_id_carried_through(self, scorer, snapshot_factory, now):
        result = scorer.score(snapshot_factory("CLIENT_XYZ"), now)
        assert result.client_id == "CLIENT_XYZ"


class TestRiskLevels:
    """Risk level is a pure function of the score."""

    @pytest.mark.parametrize("score,level", [
        (0, "low"),
        (34.9, "low"),
        (35, "medium"),
        (59, "medium"),
        (59.9, "medium"),
        (60, "high"),
        (100, "high"),
    ])
    def test_thresholds(self, default_config, score, level):
        assert default_config.get_risk_level(score) == level

    def test_sixty_points_is_high(self, scorer, snapshot_factory, ago, now):
        """inactivity 25 + missed 20 + progress 15 = 60 -> high."""
        snapshot = snapshot_factory(
            last_session_at=ago(15),
            recent_cancelled_or_no_show_count=2,
            recent_progress_entry_count_14d=0,
        )
        result = scorer.score(snapshot, now)

        assert result.risk_score == 60
        assert result.risk_level == "high"


class TestSuggestedAction:
    """First matching rule wins."""

    def test_high_with_inactivity(self, scorer, snapshot_factory, ago, now):
        snapshot = snapshot_factory(
            last_session_at=ago(15),
            recent_cancelled_or_no_show_count=2,
            recent_progress_entry_count_14d=0,
        )
        result = scorer.score(snapshot, now)
        assert result.suggested_action == "Send a personal check-in message to reconnect"

    def test_high_without_specific_factor_gets_generic(self, snapshot_factory, ago, now):
        """habits 20 + progress 15 + communication 20 = 55, high under a lower threshold."""
        scorer = RiskScorer(ScoringConfig(high_threshold=50))
        snapshot = snapshot_factory(
            habit_completion_ratio_7d=0.1,
            recent_progress_entry_count_14d=0,
            last_message_at=ago(10),
        )
        result = scorer.score(snapshot, now)

        assert result.risk_level == "high"
        assert result.suggested_action == "Send a re-engagement message with one clear next step"

    def test_medium_with_low_habits(self, scorer, snapshot_factory, ago, now):
        snapshot = snapshot_factory(
            last_session_at=ago(9),
            habit_completion_ratio_7d=0.1,
            last_message_at=ago(8),
        )
        result = scorer.score(snapshot, now)

        assert result.risk_level == "medium"
        assert result.suggested_action == "Simplify habit goals so small wins rebuild momentum"

    def test_medium_falls_through_to_progress_rule(self, scorer, snapshot_factory, now):
        """missed 20 + progress 15 = 35: no habit or communication factor."""
        snapshot = snapshot_factory(
            recent_cancelled_or_no_show_count=2,
            recent_progress_entry_count_14d=0,
        )
        result = scorer.score(snapshot, now)

        assert result.risk_level == "medium"
        assert result.suggested_action == "Ask for a progress update or check-in photo"

    def test_low_gets_encouragement(self, scorer, snapshot_factory, now):
        result = scorer.score(snapshot_factory(recent_progress_entry_count_14d=0), now)

        assert result.risk_level == "low"
        assert result.suggested_action == "Send encouragement and keep the current plan"

    def test_default_action_when_no_rule_matches(self, healthy, now):
        scorer = RiskScorer(ScoringConfig(action_rules=[]))
        result = scorer.score(healthy, now)
        assert result.suggested_action == ScoringConfig().default_action


class TestSampleInvariants:
    """Invariants across a realistic population."""

    def test_scores_bounded_and_levels_consistent(self, scorer, sample_data, now):
        provider = DataFrameSnapshotProvider(sample_data)

        for client_id in provider.client_ids:
            result = scorer.score(provider.fetch(client_id), now)

            assert 0 <= result.risk_score <= 100
            assert result.risk_level == scorer.config.get_risk_level(result.risk_score)
            assert (len(result.risk_factors) == 0) == (result.risk_score == 0)

    def test_deterministic(self, scorer, sample_data, now):
        """Same snapshot and now -> identical assessment."""
        provider = DataFrameSnapshotProvider(sample_data)
        snapshot = provider.fetch(provider.client_ids[0])

        assert scorer.score(snapshot, now) == scorer.score(snapshot, now)
