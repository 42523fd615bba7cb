"""Tests for audit hashing and the scoring audit logger."""

import logging

import pytest

from scoreline.config import ScoringRules
from scoreline.scoring.audit.hashing import compute_aggregates_hash, compute_hash, compute_rules_hash
from scoreline.scoring.audit.logging import ScoringAuditLogger, get_audit_logger, set_audit_logger
from scoreline.scoring.incremental import apply_result_change
from scoreline.scoring.types import AggregateTotals, ScoreLine
from scoreline.shared.enums import Category


class TestHashing:
    """Stable hashes for rules and aggregate sets."""

    def test_key_order_does_not_matter(self):
        """Hashes use canonical key order."""
        assert compute_hash({"a": 1, "b": [1, 2]}) == compute_hash({"b": [1, 2], "a": 1})

    def test_enums_serialized_by_value(self):
        """Enum members hash like their values."""
        assert compute_hash({"c": Category.PERFECT}) == compute_hash({"c": "Perfect"})

    def test_rules_hash_changes_with_values(self):
        """Different rule values hash differently."""
        assert compute_rules_hash(ScoringRules()) != compute_rules_hash(ScoringRules(perfect_score=6))

    def test_aggregates_hash_order_independent(self):
        """The aggregate hash is a sha256 hex digest, independent of order."""
        a = AggregateTotals(user_id="a", total_points=5, perfect=1)
        b = AggregateTotals(user_id="b", total_points=1, outcome=1)
        assert compute_aggregates_hash([a, b]) == compute_aggregates_hash([b, a])
        assert len(compute_aggregates_hash([a])) == 64


@pytest.fixture
def audit_records():
    """Install a capturing audit logger and yield the records it receives."""
    captured = []

    class _Capture(logging.Handler):
        def emit(self, record):
            captured.append(record)

    audit_logger = logging.getLogger("test.audit")
    audit_logger.setLevel(logging.DEBUG)
    handler = _Capture()
    audit_logger.addHandler(handler)
    set_audit_logger(ScoringAuditLogger(audit_logger))
    yield captured
    set_audit_logger(None)
    audit_logger.removeHandler(handler)


class TestScoringAuditLogger:
    """Audit events emitted around each scoring pass."""

    def test_default_instance_is_shared(self):
        """Without an installed logger, one default instance is reused."""
        set_audit_logger(None)
        assert get_audit_logger() is get_audit_logger()

    def test_failures_logged_at_warning(self, audit_records):
        """Failures are never quieter than WARNING, whatever the configured level."""
        get_audit_logger().log_pass_failed("recalculate_all", "boom")

        [record] = audit_records
        assert record.levelno == logging.WARNING
        assert record.msg["reason"] == "boom"

    @pytest.mark.asyncio
    async def test_pass_writes_start_and_commit(self, dbm, rules, seed_db, audit_records):
        """A committed pass logs a start and a commit event."""
        await seed_db(dbm, matches=["M1"], users=["alice"], predictions=[("M1", "alice", 1, 0, None)])

        await apply_result_change(dbm, "M1", ScoreLine(1, 0), rules)

        events = [r.msg["event"] for r in audit_records]
        assert events == ["pass_start", "pass_committed"]
        start, committed = (r.msg for r in audit_records)
        assert start["match_id"] == "M1"
        assert start["rules"] == rules.model_dump()
        assert committed["n_aggregates"] == 1
        assert committed["aggregates_hash"] == compute_aggregates_hash(
            [AggregateTotals(user_id="alice", total_points=5, perfect=1)]
        )
