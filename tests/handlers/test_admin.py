"""Tests for the admin action handler."""

import pytest
from pydantic import ValidationError

from scoreline.config import ScoringRules, Settings
from scoreline.database import repository
from scoreline.handlers.admin import AdminHandler
from scoreline.shared.enums import MatchStatus


@pytest.fixture
def handler(dbm, settings):
    """Handler over the per-test database."""
    return AdminHandler(dbm, settings)


async def _total(dbm, user_id):
    return (await repository.get_user_aggregates(dbm, [user_id]))[user_id].total_points


class TestRules:
    """Rule edits are validated, merged and stored."""

    @pytest.mark.asyncio
    async def test_defaults_from_settings(self, handler):
        """With nothing stored, the configured default rules apply."""
        assert await handler.get_rules() == ScoringRules()

    @pytest.mark.asyncio
    async def test_update_merges_and_persists(self, handler, dbm):
        """Omitted values keep their current setting."""
        rules = await handler.update_rules(perfect_score=10, outcome_score=None)

        assert rules.perfect_score == 10
        assert rules.outcome_score == 1
        assert await repository.load_scoring_rules(dbm) == rules

    @pytest.mark.asyncio
    async def test_invalid_update_not_saved(self, handler, dbm):
        """A rejected value raises and leaves the stored rules alone."""
        with pytest.raises(ValidationError):
            await handler.update_rules(perfect_score=-3)

        assert await repository.load_scoring_rules(dbm) == ScoringRules()

    @pytest.mark.asyncio
    async def test_rule_change_does_not_rescore(self, handler, dbm, seed_db):
        """Existing points keep the rules they were scored under."""
        await seed_db(dbm, matches=["M1"], users=["alice"], predictions=[("M1", "alice", 1, 0, None)])
        await handler.record_result("M1", 1, 0)

        await handler.update_rules(perfect_score=10)

        assert await _total(dbm, "alice") == 5


class TestRecordResult:
    """Recording and correcting results through the handler."""

    @pytest.mark.asyncio
    async def test_success_message(self, handler, dbm, seed_db):
        """String goals from the console are accepted."""
        await seed_db(dbm, matches=["M1"], users=["alice"], predictions=[("M1", "alice", 2, 0, None)])

        action = await handler.record_result("M1", "1", "0")

        assert action.ok
        assert action.message == "Score updated & leaderboard adjusted"
        assert action.pass_result.predictions_scored == 1
        assert await _total(dbm, "alice") == 1

    @pytest.mark.asyncio
    async def test_uses_stored_rules(self, handler, dbm, seed_db):
        """Scoring uses the rules saved in the database."""
        await seed_db(dbm, matches=["M1"], users=["alice"], predictions=[("M1", "alice", 1, 0, None)])
        await handler.update_rules(perfect_score=8)

        await handler.record_result("M1", 1, 0)

        assert await _total(dbm, "alice") == 8

    @pytest.mark.asyncio
    async def test_unknown_match_reports_error(self, handler):
        """The failure reason is shown to the operator."""
        action = await handler.record_result("nope", 1, 0)

        assert not action.ok
        assert action.message == "Error updating score: match_not_found"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("home, away", [("2x", "1"), (str(10**20), "0")])
    async def test_invalid_goals_rejected(self, handler, dbm, seed_db, home, away):
        """A mistyped score is refused and the match stays open."""
        await seed_db(dbm, matches=["M1"], users=["alice"], predictions=[("M1", "alice", 2, 1, None)])

        action = await handler.record_result("M1", home, away)

        assert not action.ok
        assert action.message == "Error updating score: invalid_result"
        match = await repository.get_match(dbm, "M1")
        assert match.status is MatchStatus.UPCOMING
        assert await _total(dbm, "alice") == 0

    @pytest.mark.asyncio
    async def test_clear_result(self, handler, dbm, seed_db):
        """Clearing a scored match takes the points back."""
        await seed_db(dbm, matches=["M1"], users=["alice"], predictions=[("M1", "alice", 1, 0, None)])
        await handler.record_result("M1", 1, 0)

        action = await handler.clear_result("M1")

        assert action.ok
        assert await _total(dbm, "alice") == 0


class TestRecalculateAll:
    """Full rebuild behind an explicit confirmation."""

    @pytest.mark.asyncio
    async def test_requires_confirmation(self, handler, dbm, seed_db):
        """Nothing runs without confirm=True."""
        await seed_db(dbm, users=["alice"])

        action = await handler.recalculate_all()

        assert not action.ok
        assert "confirmation required" in action.message
        assert action.pass_result is None

    @pytest.mark.asyncio
    async def test_rebuilds_with_current_rules(self, handler, dbm, seed_db):
        """A confirmed rebuild applies a rule change retroactively."""
        await seed_db(dbm, matches=["M1"], users=["alice"], predictions=[("M1", "alice", 1, 0, None)])
        await handler.record_result("M1", 1, 0)
        await handler.update_rules(perfect_score=10)

        action = await handler.recalculate_all(confirm=True)

        assert action.ok
        assert action.message == "Leaderboard fully recalculated"
        assert await _total(dbm, "alice") == 10
        assert await handler.check_drift() == []

    @pytest.mark.asyncio
    async def test_batch_limit_reported(self, dbm, seed_db, tmp_path):
        """Two aggregates cannot fit a one-write batch."""
        tight = Settings(test_mode=True, data_dir=str(tmp_path), scoring={"max_batch_writes": 1})
        handler = AdminHandler(dbm, tight)
        await seed_db(dbm, matches=["M1"], users=["alice", "bob"], predictions=[("M1", "alice", 1, 0, None)])

        action = await handler.recalculate_all(confirm=True)

        assert not action.ok
        assert action.message.startswith("Error recalculating:")
        assert action.pass_result is not None
