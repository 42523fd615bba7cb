"""Tests for the scoreline-admin console."""

import json

import pytest
from sqlalchemy import update

from scoreline.database import DBM, initialize
from scoreline.database.schema import UserAggregate
from scoreline.entrypoints.admin import build_parser, run


class TestParser:
    """Argument parsing only; nothing touches the database."""

    def test_set_result(self):
        """Positional score and optional penalty winner."""
        args = build_parser().parse_args(["set-result", "M1", "2", "1", "--penalty-winner", "home"])
        assert (args.command, args.match_id, args.home, args.away, args.penalty_winner) == (
            "set-result", "M1", "2", "1", "home",
        )

    def test_rejects_bad_penalty_winner(self):
        """argparse refuses anything but home or away."""
        with pytest.raises(SystemExit):
            build_parser().parse_args(["set-result", "M1", "2", "1", "--penalty-winner", "draw"])

    def test_recalculate_defaults_unconfirmed(self):
        """Without --yes the rebuild is not confirmed."""
        assert build_parser().parse_args(["recalculate"]).yes is False

    def test_rules_set(self):
        """Unset flags stay None so stored values are kept."""
        args = build_parser().parse_args(["rules", "set", "--perfect", "9", "--penalty-bonus", "0"])
        assert args.perfect_score == 9
        assert args.penalty_bonus == 0
        assert args.aggregate_score is None


async def _run(settings, *argv):
    return await run(build_parser().parse_args(list(argv)), settings)


class TestRun:
    """Commands run end to end against a fresh sqlite file."""

    @pytest.mark.asyncio
    async def test_full_flow(self, settings, seed_db, capsys):
        """init-db, set-result, recalculate and check in sequence."""
        assert await _run(settings, "init-db") == 0
        dbm = DBM(settings)
        try:
            await seed_db(dbm, matches=["M1"], users=["alice"], predictions=[("M1", "alice", 2, 1, None)])
        finally:
            await dbm.dispose()

        assert await _run(settings, "set-result", "M1", "2", "1") == 0
        assert "leaderboard adjusted" in capsys.readouterr().out

        assert await _run(settings, "recalculate") == 1
        assert await _run(settings, "recalculate", "--yes") == 0
        assert await _run(settings, "check") == 0
        assert "aggregates consistent" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_rules_show_and_set(self, settings, capsys):
        """A rule edit is visible in rules show."""
        initialize(settings)

        assert await _run(settings, "rules", "set", "--perfect", "9") == 0
        capsys.readouterr()
        assert await _run(settings, "rules", "show") == 0

        shown = json.loads(capsys.readouterr().out)
        assert shown["perfect_score"] == 9
        assert shown["aggregate_score"] == 3

    @pytest.mark.asyncio
    async def test_rules_set_rejects_negative(self, settings, capsys):
        """A refused rule edit exits 1 and leaves the stored rules alone."""
        initialize(settings)

        assert await _run(settings, "rules", "set", "--perfect", "-3") == 1
        out = capsys.readouterr().out
        assert "Invalid scoring rules" in out
        assert "perfect_score" in out

        assert await _run(settings, "rules", "show") == 0
        assert json.loads(capsys.readouterr().out)["perfect_score"] == 5

    @pytest.mark.asyncio
    async def test_unknown_match_exit_code(self, settings, capsys):
        """A failed action prints its reason and exits 1."""
        initialize(settings)

        assert await _run(settings, "clear-result", "missing") == 1
        assert "match_not_found" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_check_reports_drift(self, settings, seed_db, capsys):
        """Tampered totals are listed with a non-zero exit."""
        initialize(settings)
        dbm = DBM(settings)
        try:
            await seed_db(dbm, users=["alice"])
            async with dbm.session() as session:
                async with session.begin():
                    await session.execute(
                        update(UserAggregate).where(UserAggregate.user_id == "alice").values(total_points=4)
                    )
        finally:
            await dbm.dispose()

        assert await _run(settings, "check") == 1
        out = capsys.readouterr().out
        assert "alice: stored 4" in out
        assert "1 aggregate(s) drifted" in out
