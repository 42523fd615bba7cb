"""Atomic commit unit for one scoring pass.

A pass stages every write in memory first: the match result, each prediction's
new classification and each affected user's full aggregate. commit() then
applies all of them inside a single transaction, so readers observe either
the complete pass or none of it.
"""

from __future__ import annotations

import datetime as dt
import logging
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError

from scoreline.database.dbm import DBM
from scoreline.database.schema import Match, Prediction, UserAggregate
from scoreline.shared.enums import MatchStatus

from .types import AggregateTotals, Classification, CommitError, ScoreLine

logger = logging.getLogger(__name__)

DEFAULT_MAX_WRITES = 5000


@dataclass
class ScoringBatch:
    """Staged writes belonging to one scoring pass."""

    max_writes: int = DEFAULT_MAX_WRITES
    match_result: Optional[Tuple[str, ScoreLine]] = None
    predictions: Dict[Tuple[str, str], Classification] = field(default_factory=dict)
    aggregates: Dict[str, AggregateTotals] = field(default_factory=dict)

    def stage_match_result(self, match_id: str, result: ScoreLine) -> None:
        self.match_result = (match_id, result)

    def stage_prediction(self, match_id: str, user_id: str, classification: Classification) -> None:
        self.predictions[(match_id, user_id)] = classification

    def stage_aggregate(self, totals: AggregateTotals) -> None:
        self.aggregates[totals.user_id] = totals

    @property
    def write_count(self) -> int:
        return (1 if self.match_result else 0) + len(self.predictions) + len(self.aggregates)

    async def commit(self, dbm: DBM) -> None:
        """Apply every staged write in one transaction.

        Raises:
            CommitError: the batch was rejected; nothing was applied.
        """
        if self.write_count > self.max_writes:
            raise CommitError(
                f"batch of {self.write_count} writes exceeds limit of {self.max_writes}"
            )
        if self.write_count == 0:
            return

        now = dt.datetime.now(dt.timezone.utc)
        try:
            async with dbm.session() as session:
                async with session.begin():
                    if self.match_result is not None:
                        match_id, result = self.match_result
                        updated = await session.execute(
                            update(Match)
                            .where(Match.match_id == match_id)
                            .values(
                                status=MatchStatus.COMPLETED,
                                result_home=result.home,
                                result_away=result.away,
                                result_penalty_winner=result.penalty_winner,
                                updated_at=now,
                            )
                        )
                        if updated.rowcount != 1:
                            raise CommitError(f"match {match_id!r} disappeared before commit")

                    for (match_id, user_id), classification in sorted(self.predictions.items()):
                        await session.execute(
                            update(Prediction)
                            .where(Prediction.match_id == match_id)
                            .where(Prediction.user_id == user_id)
                            .values(
                                points=classification.points,
                                category=classification.category,
                                bonus_applied=classification.bonus_applied,
                                scored_at=now,
                            )
                        )

                    for user_id, totals in sorted(self.aggregates.items()):
                        await session.execute(
                            update(UserAggregate)
                            .where(UserAggregate.user_id == user_id)
                            .values(
                                total_points=totals.total_points,
                                stat_perfect=totals.perfect,
                                stat_aggregate=totals.aggregate,
                                stat_outcome=totals.outcome,
                                stat_missed=totals.missed,
                                updated_at=now,
                            )
                        )
        except (SQLAlchemyError, OverflowError) as e:
            logger.error({"event": "batch_commit_failed", "writes": self.write_count, "error": str(e)})
            raise CommitError(f"backend rejected batch: {e}") from e

        logger.debug({
            "event": "batch_committed",
            "match": self.match_result[0] if self.match_result else None,
            "predictions": len(self.predictions),
            "aggregates": len(self.aggregates),
        })


__all__ = ["ScoringBatch", "DEFAULT_MAX_WRITES"]
