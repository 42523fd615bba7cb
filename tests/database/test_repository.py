"""Repository reads and collaborator writes."""

import pytest
from sqlalchemy import func, select

from scoreline.config import ScoringRules
from scoreline.database import repository
from scoreline.database.schema import ScoringRulesRow
from scoreline.scoring.incremental import apply_result_change
from scoreline.scoring.types import MatchLockedError, MatchNotFoundError, ScoreLine
from scoreline.shared.enums import MatchStatus


class TestMatches:
    """Match rows and their snapshots."""

    @pytest.mark.asyncio
    async def test_new_match_is_upcoming_without_result(self, dbm):
        """A new match starts UPCOMING with no result."""
        created = await repository.add_match(dbm, match_id="M1", team_a="ARG", team_b="FRA", stage_id="final")

        fetched = await repository.get_match(dbm, "M1")

        assert created.status is MatchStatus.UPCOMING
        assert fetched.team_a == "ARG"
        assert fetched.stage_id == "final"
        assert fetched.result is None
        assert not fetched.is_completed

    @pytest.mark.asyncio
    async def test_unknown_match(self, dbm):
        """Unknown ids return None."""
        assert await repository.get_match(dbm, "missing") is None

    @pytest.mark.asyncio
    async def test_list_by_status(self, dbm, rules, seed_db):
        """Listing can filter on status."""
        await seed_db(dbm, matches=["M1", "M2"])
        await apply_result_change(dbm, "M2", ScoreLine(0, 0), rules)

        completed = await repository.list_matches(dbm, status=MatchStatus.COMPLETED)
        upcoming = await repository.list_matches(dbm, status=MatchStatus.UPCOMING)

        assert [m.match_id for m in completed] == ["M2"]
        assert completed[0].result == ScoreLine(0, 0, None)
        assert [m.match_id for m in upcoming] == ["M1"]
        assert len(await repository.list_matches(dbm)) == 2


class TestPredictions:
    """Predictions are stored raw and locked once the match completes."""

    @pytest.mark.asyncio
    async def test_submit_stores_raw_payload(self, dbm, seed_db):
        """Blank goals are absent; the rest is kept for the classifier."""
        await seed_db(dbm, matches=["M1"], users=["alice"])

        await repository.submit_prediction(
            dbm, match_id="M1", user_id="alice", prediction={"home": 2, "away": "", "penaltyWinner": "home"}
        )

        [pred] = await repository.list_predictions(dbm, user_id="alice")
        assert pred.prediction == ScoreLine("2", None, "home")
        assert pred.points is None
        assert pred.stored_classification is None

    @pytest.mark.asyncio
    async def test_resubmission_replaces_guess(self, dbm, seed_db):
        """Submitting again for the same match overwrites the guess."""
        await seed_db(dbm, matches=["M1"], users=["alice"], predictions=[("M1", "alice", 1, 0, None)])

        await repository.submit_prediction(dbm, match_id="M1", user_id="alice", prediction=ScoreLine(0, 3))

        [pred] = await repository.list_predictions(dbm, match_id="M1")
        assert pred.prediction == ScoreLine("0", "3", None)

    @pytest.mark.asyncio
    async def test_unknown_match_rejected(self, dbm):
        """Predictions need an existing match."""
        with pytest.raises(MatchNotFoundError):
            await repository.submit_prediction(dbm, match_id="nope", user_id="alice", prediction={"home": 1, "away": 1})

    @pytest.mark.asyncio
    async def test_completed_match_is_locked(self, dbm, rules, seed_db):
        """No new predictions once a result is in."""
        await seed_db(dbm, matches=["M1"], users=["alice"])
        await apply_result_change(dbm, "M1", ScoreLine(1, 1), rules)

        with pytest.raises(MatchLockedError):
            await repository.submit_prediction(dbm, match_id="M1", user_id="alice", prediction={"home": 1, "away": 1})


class TestAggregates:
    """User aggregate rows."""

    @pytest.mark.asyncio
    async def test_registered_user_starts_at_zero(self, dbm):
        """Unknown ids are left out of the lookup."""
        created = await repository.register_user(dbm, user_id="alice", display_name="Alice")

        assert created.total_points == 0
        assert created.stats() == {"perfect": 0, "aggregate": 0, "outcome": 0, "missed": 0}
        stored = await repository.get_user_aggregates(dbm, ["alice", "ghost"])
        assert list(stored) == ["alice"]
        assert stored["alice"].display_name == "Alice"

    @pytest.mark.asyncio
    async def test_empty_id_list(self, dbm, seed_db):
        """An empty id list selects nobody, not everybody."""
        await seed_db(dbm, users=["alice"])
        assert await repository.get_user_aggregates(dbm, []) == {}


class TestScoringRulesStorage:
    """The single-row rules table."""

    @pytest.mark.asyncio
    async def test_default_when_unset(self, dbm):
        """Without a stored row the given fallback is returned."""
        fallback = ScoringRules(perfect_score=4)
        assert await repository.load_scoring_rules(dbm, fallback) == fallback
        assert await repository.load_scoring_rules(dbm) == ScoringRules()

    @pytest.mark.asyncio
    async def test_save_and_overwrite(self, dbm):
        """Saving twice updates the one row instead of adding another."""
        await repository.save_scoring_rules(dbm, ScoringRules(perfect_score=6))
        await repository.save_scoring_rules(dbm, ScoringRules(perfect_score=7, penalty_bonus=0))

        loaded = await repository.load_scoring_rules(dbm)

        assert loaded == ScoringRules(perfect_score=7, penalty_bonus=0)
        async with dbm.session() as session:
            count = await session.scalar(select(func.count()).select_from(ScoringRulesRow))
        assert count == 1
