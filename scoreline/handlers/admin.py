"""Operator actions exposed to the admin console.

Scoring actions return an ActionResult instead of raising, so the console can
display the failure; rule edits raise the validation error of the rules model.
Mutating actions share one lock; a handler instance is the single writer for
the database it wraps.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from scoreline.config import Settings
from scoreline.config.scoring_rules import ScoringRules
from scoreline.database import repository
from scoreline.database.dbm import DBM
from scoreline.scoring.incremental import apply_result_change
from scoreline.scoring.invariants import DriftReport, find_drift
from scoreline.scoring.reconcile import ReconcileJob
from scoreline.scoring.types import PassResult, ScoreLine

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ActionResult:
    ok: bool
    message: str
    pass_result: Optional[PassResult] = None


class AdminHandler:
    """Entry points for "record/correct result", "recalculate all" and rule edits."""

    def __init__(self, database: DBM, settings: Settings):
        self.database = database
        self.settings = settings
        self._lock = asyncio.Lock()

    @property
    def max_writes(self) -> int:
        return self.settings.scoring.max_batch_writes

    async def get_rules(self) -> ScoringRules:
        return await repository.load_scoring_rules(self.database, self.settings.scoring.default_rules)

    async def update_rules(self, **values: Any) -> ScoringRules:
        """Validate and persist new rule values. Nothing is rescored.

        Raises:
            pydantic.ValidationError: a value is rejected; nothing is saved
        """
        async with self._lock:
            current = await self.get_rules()
            rules = current.with_updates(**values)
            await repository.save_scoring_rules(self.database, rules)
            logger.info({"event": "rules_updated", "rules": rules.model_dump()})
            return rules

    async def record_result(
        self,
        match_id: str,
        home: Any,
        away: Any,
        penalty_winner: Optional[str] = None,
    ) -> ActionResult:
        """Set or correct a match result and adjust the leaderboard."""
        result = ScoreLine(home=home, away=away, penalty_winner=penalty_winner)
        async with self._lock:
            try:
                rules = await self.get_rules()
                outcome = await apply_result_change(
                    self.database,
                    match_id,
                    result,
                    rules,
                    max_writes=self.max_writes,
                )
            except SQLAlchemyError as e:
                logger.error({"event": "record_result_error", "match_id": match_id, "error": str(e)})
                return ActionResult(ok=False, message=f"Error updating score: {e}")

        if not outcome.committed:
            return ActionResult(ok=False, message=f"Error updating score: {outcome.reason}", pass_result=outcome)
        return ActionResult(ok=True, message="Score updated & leaderboard adjusted", pass_result=outcome)

    async def clear_result(self, match_id: str) -> ActionResult:
        """Record an empty result: every prediction for the match scores Miss/0."""
        return await self.record_result(match_id, None, None, None)

    async def recalculate_all(self, *, confirm: bool = False) -> ActionResult:
        """Reset every aggregate and rescore all completed matches."""
        if not confirm:
            return ActionResult(
                ok=False,
                message="Recalculation resets every score to 0 and rebuilds it; confirmation required",
            )
        async with self._lock:
            try:
                rules = await self.get_rules()
                job = ReconcileJob(self.database, rules, max_writes=self.max_writes)
                outcome = await job.run()
            except SQLAlchemyError as e:
                logger.error({"event": "recalculate_all_error", "error": str(e)})
                return ActionResult(ok=False, message=f"Error recalculating: {e}")

        if not outcome.committed:
            return ActionResult(ok=False, message=f"Error recalculating: {outcome.reason}", pass_result=outcome)
        return ActionResult(ok=True, message="Leaderboard fully recalculated", pass_result=outcome)

    async def check_drift(self) -> List[DriftReport]:
        async with self._lock:
            return await find_drift(self.database)


__all__ = ["ActionResult", "AdminHandler"]
