"""Full reconciliation: rebuild every user aggregate from source data.

Used after a retroactive rule change or when aggregates are suspected to have
drifted. Stored aggregate values are discarded; the result depends only on
completed matches, their predictions and the rules passed in.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Dict, Optional

from scoreline.config.scoring_rules import ScoringRules
from scoreline.database import repository
from scoreline.database.dbm import DBM
from scoreline.shared.enums import MatchStatus

from .audit.logging import get_audit_logger
from .batch import DEFAULT_MAX_WRITES, ScoringBatch
from .classifier import classify
from .types import AggregateTotals, CommitError, PassResult

logger = logging.getLogger(__name__)


async def recalculate_all(
    dbm: DBM,
    rules: ScoringRules,
    *,
    max_writes: int = DEFAULT_MAX_WRITES,
) -> PassResult:
    """Reset every aggregate to zero and replay all completed matches.

    Predictions of matches that are not completed (or do not exist) are left
    exactly as stored and count towards nothing.

    Returns:
        PassResult with status "committed" or "failed" (reason set)
    """
    audit = get_audit_logger()
    audit.log_pass_start("recalculate_all", rules)

    snapshots = await repository.get_user_aggregates(dbm)
    totals: Dict[str, AggregateTotals] = {
        user_id: AggregateTotals(user_id=user_id) for user_id in snapshots
    }

    completed = {
        m.match_id: m for m in await repository.list_matches(dbm, status=MatchStatus.COMPLETED)
    }
    predictions = await repository.list_predictions(dbm)

    batch = ScoringBatch(max_writes=max_writes)
    skipped: set[str] = set()
    ignored = 0

    for prediction in predictions:
        match = completed.get(prediction.match_id)
        if match is None:
            ignored += 1
            continue

        classification = classify(prediction.prediction, match.result, rules)
        batch.stage_prediction(prediction.match_id, prediction.user_id, classification)

        user_totals = totals.get(prediction.user_id)
        if user_totals is None:
            skipped.add(prediction.user_id)
            continue
        user_totals.add(classification)

    for user_totals in totals.values():
        batch.stage_aggregate(user_totals)

    if skipped:
        logger.warning({"event": "aggregates_missing", "user_ids": sorted(skipped)})

    try:
        await batch.commit(dbm)
    except CommitError as e:
        audit.log_pass_failed("recalculate_all", str(e))
        return PassResult.failed(str(e))

    audit.log_pass_committed("recalculate_all", totals.values())
    logger.info({
        "event": "aggregates_rebuilt",
        "completed_matches": len(completed),
        "predictions_scored": len(batch.predictions),
        "predictions_ignored": ignored,
        "aggregates_written": len(batch.aggregates),
    })
    return PassResult(
        status="committed",
        predictions_scored=len(batch.predictions),
        aggregates_written=len(batch.aggregates),
        skipped_users=tuple(sorted(skipped)),
    )


class ReconcileJob:
    """Operator-triggered wrapper around recalculate_all with timing and logging."""

    JOB_ID = "recalculate_all_v1"

    def __init__(
        self,
        db: DBM,
        rules: ScoringRules,
        logger: Optional[logging.Logger] = None,
        *,
        max_writes: int = DEFAULT_MAX_WRITES,
    ):
        self.db = db
        self.rules = rules
        self.logger = logger or logging.getLogger(__name__)
        self.max_writes = max_writes
        self.result: Optional[PassResult] = None
        self._started_at: Optional[datetime] = None

    async def run(self) -> PassResult:
        self._started_at = datetime.now(timezone.utc)
        self.logger.info(f"Starting job {self.JOB_ID}")

        try:
            self.result = await recalculate_all(self.db, self.rules, max_writes=self.max_writes)
        except Exception as e:
            self.logger.error(f"Job {self.JOB_ID} failed: {e}", exc_info=True)
            raise

        elapsed = (datetime.now(timezone.utc) - self._started_at).total_seconds()
        if self.result.committed:
            self.logger.info(
                f"Job {self.JOB_ID} completed: "
                f"scored {self.result.predictions_scored} predictions, "
                f"rebuilt {self.result.aggregates_written} aggregates in {elapsed:.2f}s"
            )
        else:
            self.logger.warning(f"Job {self.JOB_ID} failed after {elapsed:.2f}s: {self.result.reason}")
        return self.result


__all__ = ["recalculate_all", "ReconcileJob"]
