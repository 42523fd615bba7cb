"""Incremental aggregate update for a single match result change.

Flow:
1. Snapshot the match (was it already completed?)
2. Load the match's predictions and the aggregates of their users
3. Classify every prediction against the new result; move each user's
   aggregate by (new contribution - previous contribution)
4. Stage the match result and commit everything as one unit

Callers must serialize calls that touch the same match, and must never run
this concurrently with a full recalculation.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Union

from scoreline.config.scoring_rules import ScoringRules
from scoreline.database import repository
from scoreline.database.dbm import DBM
from scoreline.database.repository import MatchSnapshot, PredictionSnapshot

from .audit.logging import get_audit_logger
from .batch import DEFAULT_MAX_WRITES, ScoringBatch
from .classifier import classify, parse_goals
from .types import AggregateTotals, Classification, CommitError, InvalidResultError, PassResult, ScoreLine

logger = logging.getLogger(__name__)

ResultInput = Union[ScoreLine, Mapping[str, Any], None]

# Upper bound for an official goal count; also keeps values inside an INTEGER column
MAX_GOALS = 99


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def normalize_result(result: ResultInput) -> ScoreLine:
    """Coerce operator input into the stored result shape.

    Goals become ints in [0, MAX_GOALS] or None; the penalty winner becomes
    "home", "away" or None. Blank fields are absent, and an all-absent result
    is a cleared result.

    Raises:
        InvalidResultError: a non-blank field that cannot be stored as given
    """
    if result is None:
        return ScoreLine()
    if not isinstance(result, ScoreLine):
        result = ScoreLine.from_mapping(result) or ScoreLine()

    def _goals(field_name: str, value: Any) -> Optional[int]:
        if _is_blank(value):
            return None
        goals = parse_goals(value)
        if goals is None or not 0 <= goals <= MAX_GOALS:
            raise InvalidResultError(field_name, value)
        return goals

    winner = None
    if not _is_blank(result.penalty_winner):
        winner = result.normalized_penalty_winner()
        if winner is None:
            raise InvalidResultError("penalty_winner", result.penalty_winner)

    return ScoreLine(
        home=_goals("home", result.home),
        away=_goals("away", result.away),
        penalty_winner=winner.value if winner is not None else None,
    )


def previous_contribution(match: MatchSnapshot, prediction: PredictionSnapshot) -> Optional[Classification]:
    """What this prediction currently adds to its user's aggregate.

    Only predictions of an already completed match that carry a stored
    classification are counted; anything else has never been aggregated.
    """
    if not match.is_completed:
        return None
    return prediction.stored_classification


def _totals_from_snapshot(snapshot: repository.AggregateSnapshot) -> AggregateTotals:
    return AggregateTotals(
        user_id=snapshot.user_id,
        total_points=snapshot.total_points,
        perfect=snapshot.perfect,
        aggregate=snapshot.aggregate,
        outcome=snapshot.outcome,
        missed=snapshot.missed,
    )


async def apply_result_change(
    dbm: DBM,
    match_id: str,
    new_result: ResultInput,
    rules: ScoringRules,
    *,
    max_writes: int = DEFAULT_MAX_WRITES,
) -> PassResult:
    """Set or correct a match result and move every affected aggregate.

    Re-running with the same result after a successful commit computes a zero
    delta for every user.

    Args:
        dbm: Database manager
        match_id: Target match
        new_result: Official result; all-absent clears it to Miss/0 for everyone,
            a field that cannot be stored fails the pass with "invalid_result"
        rules: Scoring rules in force for this invocation

    Returns:
        PassResult with status "committed" or "failed" (reason set)
    """
    audit = get_audit_logger()
    try:
        result = normalize_result(new_result)
    except InvalidResultError as e:
        logger.warning({"event": "apply_result_change_rejected", "match_id": match_id, "error": str(e)})
        audit.log_pass_failed("apply_result_change", "invalid_result", match_id=match_id, error=str(e))
        return PassResult.failed("invalid_result")
    audit.log_pass_start("apply_result_change", rules, match_id=match_id)

    match = await repository.get_match(dbm, match_id)
    if match is None:
        logger.warning({"event": "apply_result_change_skipped", "match_id": match_id, "reason": "match_not_found"})
        audit.log_pass_failed("apply_result_change", "match_not_found", match_id=match_id)
        return PassResult.failed("match_not_found")

    predictions = await repository.list_predictions(dbm, match_id=match_id)
    snapshots = await repository.get_user_aggregates(dbm, {p.user_id for p in predictions})
    totals = {user_id: _totals_from_snapshot(snap) for user_id, snap in snapshots.items()}

    batch = ScoringBatch(max_writes=max_writes)
    skipped: set[str] = set()

    for prediction in predictions:
        old = previous_contribution(match, prediction)
        new = classify(prediction.prediction, result, rules)
        batch.stage_prediction(prediction.match_id, prediction.user_id, new)

        user_totals = totals.get(prediction.user_id)
        if user_totals is None:
            skipped.add(prediction.user_id)
            continue
        if old is not None:
            user_totals.remove(old)
        user_totals.add(new)

    for user_totals in totals.values():
        batch.stage_aggregate(user_totals)
    batch.stage_match_result(match_id, result)

    if skipped:
        logger.warning({
            "event": "aggregates_missing",
            "match_id": match_id,
            "user_ids": sorted(skipped),
        })

    try:
        await batch.commit(dbm)
    except CommitError as e:
        audit.log_pass_failed("apply_result_change", str(e), match_id=match_id)
        return PassResult.failed(str(e))

    audit.log_pass_committed("apply_result_change", totals.values(), match_id=match_id)
    logger.info({
        "event": "result_applied",
        "match_id": match_id,
        "correction": match.is_completed,
        "cleared": result.is_empty,
        "predictions_scored": len(batch.predictions),
        "aggregates_written": len(batch.aggregates),
    })
    return PassResult(
        status="committed",
        predictions_scored=len(batch.predictions),
        aggregates_written=len(batch.aggregates),
        skipped_users=tuple(sorted(skipped)),
    )


__all__ = ["apply_result_change", "normalize_result", "previous_contribution", "MAX_GOALS"]
