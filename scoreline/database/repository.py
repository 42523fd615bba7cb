"""Read access to matches, predictions and aggregates, plus collaborator writes.

Reads return point-in-time snapshots detached from any session. Scoring fields
(prediction points/category and aggregate totals/stats) are never written here;
they change only through ScoringBatch.commit.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Optional

from sqlalchemy import select
from sqlalchemy.dialects.sqlite import insert as sqlite_upsert

from scoreline.config.scoring_rules import ScoringRules
from scoreline.scoring.types import (
    Classification,
    MatchLockedError,
    MatchNotFoundError,
    ScoreLine,
)
from scoreline.shared.enums import Category, MatchStatus

from .dbm import DBM
from .schema import SCORING_RULES_ROW_ID, Match, Prediction, ScoringRulesRow, UserAggregate


@dataclass(frozen=True)
class MatchSnapshot:
    match_id: str
    team_a: str
    team_b: str
    status: MatchStatus
    result: Optional[ScoreLine]
    stage_id: Optional[str] = None
    kickoff_date: Optional[str] = None
    kickoff_time: Optional[str] = None

    @property
    def is_completed(self) -> bool:
        return self.status is MatchStatus.COMPLETED


@dataclass(frozen=True)
class PredictionSnapshot:
    match_id: str
    user_id: str
    prediction: ScoreLine
    points: Optional[int]
    category: Optional[Category]
    bonus_applied: bool = False

    @property
    def stored_classification(self) -> Optional[Classification]:
        """The last classification written by the engine, if any."""
        if self.category is None:
            return None
        return Classification(
            points=self.points or 0,
            category=self.category,
            bonus_applied=self.bonus_applied,
        )


@dataclass(frozen=True)
class AggregateSnapshot:
    user_id: str
    display_name: Optional[str]
    total_points: int
    perfect: int
    aggregate: int
    outcome: int
    missed: int

    def stats(self) -> dict[str, int]:
        return {
            "perfect": self.perfect,
            "aggregate": self.aggregate,
            "outcome": self.outcome,
            "missed": self.missed,
        }


def _match_snapshot(row: Match) -> MatchSnapshot:
    result = None
    if row.status is MatchStatus.COMPLETED:
        result = ScoreLine(
            home=row.result_home,
            away=row.result_away,
            penalty_winner=row.result_penalty_winner,
        )
    return MatchSnapshot(
        match_id=row.match_id,
        team_a=row.team_a,
        team_b=row.team_b,
        status=row.status,
        result=result,
        stage_id=row.stage_id,
        kickoff_date=row.kickoff_date,
        kickoff_time=row.kickoff_time,
    )


def _prediction_snapshot(row: Prediction) -> PredictionSnapshot:
    return PredictionSnapshot(
        match_id=row.match_id,
        user_id=row.user_id,
        prediction=ScoreLine(
            home=row.pred_home,
            away=row.pred_away,
            penalty_winner=row.pred_penalty_winner,
        ),
        points=row.points,
        category=row.category,
        bonus_applied=bool(row.bonus_applied),
    )


def _aggregate_snapshot(row: UserAggregate) -> AggregateSnapshot:
    return AggregateSnapshot(
        user_id=row.user_id,
        display_name=row.display_name,
        total_points=row.total_points or 0,
        perfect=row.stat_perfect or 0,
        aggregate=row.stat_aggregate or 0,
        outcome=row.stat_outcome or 0,
        missed=row.stat_missed or 0,
    )


# ─────────────────────────────────────────────────────────────────────────────
# Reads
# ─────────────────────────────────────────────────────────────────────────────


async def get_match(dbm: DBM, match_id: str) -> Optional[MatchSnapshot]:
    async with dbm.session() as session:
        row = await session.get(Match, match_id)
        return _match_snapshot(row) if row is not None else None


async def list_matches(dbm: DBM, status: MatchStatus | None = None) -> List[MatchSnapshot]:
    stmt = select(Match).order_by(Match.match_id)
    if status is not None:
        stmt = stmt.where(Match.status == status)
    async with dbm.session() as session:
        rows = await session.execute(stmt)
        return [_match_snapshot(row) for row in rows.scalars().all()]


async def list_predictions(
    dbm: DBM,
    *,
    match_id: str | None = None,
    user_id: str | None = None,
) -> List[PredictionSnapshot]:
    stmt = select(Prediction).order_by(Prediction.match_id, Prediction.user_id)
    if match_id is not None:
        stmt = stmt.where(Prediction.match_id == match_id)
    if user_id is not None:
        stmt = stmt.where(Prediction.user_id == user_id)
    async with dbm.session() as session:
        rows = await session.execute(stmt)
        return [_prediction_snapshot(row) for row in rows.scalars().all()]


async def get_user_aggregates(
    dbm: DBM,
    user_ids: Iterable[str] | None = None,
) -> dict[str, AggregateSnapshot]:
    """Aggregates keyed by user_id; unknown ids are simply absent."""
    stmt = select(UserAggregate).order_by(UserAggregate.user_id)
    if user_ids is not None:
        wanted = sorted(set(user_ids))
        if not wanted:
            return {}
        stmt = stmt.where(UserAggregate.user_id.in_(wanted))
    async with dbm.session() as session:
        rows = await session.execute(stmt)
        return {row.user_id: _aggregate_snapshot(row) for row in rows.scalars().all()}


async def load_scoring_rules(dbm: DBM, default: ScoringRules | None = None) -> ScoringRules:
    async with dbm.session() as session:
        row = await session.get(ScoringRulesRow, SCORING_RULES_ROW_ID)
        if row is None:
            return default or ScoringRules()
        return ScoringRules(
            perfect_score=row.perfect_score,
            aggregate_score=row.aggregate_score,
            outcome_score=row.outcome_score,
            penalty_bonus=row.penalty_bonus,
        )


# ─────────────────────────────────────────────────────────────────────────────
# Collaborator writes (settings, fixtures, registration, submission)
# ─────────────────────────────────────────────────────────────────────────────


async def save_scoring_rules(dbm: DBM, rules: ScoringRules) -> None:
    """Persist the rule set. Stored scores are not touched."""
    now = dt.datetime.now(dt.timezone.utc)
    values = rules.model_dump()
    stmt = sqlite_upsert(ScoringRulesRow).values(id=SCORING_RULES_ROW_ID, updated_at=now, **values)
    stmt = stmt.on_conflict_do_update(
        index_elements=[ScoringRulesRow.id],  # type: ignore[arg-type]
        set_={**values, "updated_at": now},
    )
    async with dbm.session() as session:
        async with session.begin():
            await session.execute(stmt)


async def add_match(
    dbm: DBM,
    *,
    match_id: str,
    team_a: str,
    team_b: str,
    stage_id: str | None = None,
    kickoff_date: str | None = None,
    kickoff_time: str | None = None,
) -> MatchSnapshot:
    """Schedule a new fixture (UPCOMING, no result)."""
    row = Match(
        match_id=match_id,
        team_a=team_a,
        team_b=team_b,
        stage_id=stage_id,
        kickoff_date=kickoff_date,
        kickoff_time=kickoff_time,
        status=MatchStatus.UPCOMING,
    )
    async with dbm.session() as session:
        async with session.begin():
            session.add(row)
    return _match_snapshot(row)


async def register_user(dbm: DBM, *, user_id: str, display_name: str | None = None) -> AggregateSnapshot:
    """Create a zeroed aggregate row for a newly registered user."""
    row = UserAggregate(
        user_id=user_id,
        display_name=display_name,
        total_points=0,
        stat_perfect=0,
        stat_aggregate=0,
        stat_outcome=0,
        stat_missed=0,
    )
    async with dbm.session() as session:
        async with session.begin():
            session.add(row)
    return _aggregate_snapshot(row)


def _payload_value(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value).strip() or None


async def submit_prediction(
    dbm: DBM,
    *,
    match_id: str,
    user_id: str,
    prediction: ScoreLine | Mapping[str, Any],
) -> PredictionSnapshot:
    """Create or replace a user's guess while the match is still open.

    Raises:
        MatchNotFoundError: unknown match
        MatchLockedError: the match already has a result
    """
    if not isinstance(prediction, ScoreLine):
        prediction = ScoreLine.from_mapping(prediction) or ScoreLine()
    now = dt.datetime.now(dt.timezone.utc)
    payload = {
        "pred_home": _payload_value(prediction.home),
        "pred_away": _payload_value(prediction.away),
        "pred_penalty_winner": _payload_value(prediction.penalty_winner),
    }

    async with dbm.session() as session:
        async with session.begin():
            match = await session.get(Match, match_id)
            if match is None:
                raise MatchNotFoundError(match_id)
            if match.status is MatchStatus.COMPLETED:
                raise MatchLockedError(match_id)

            stmt = sqlite_upsert(Prediction).values(
                match_id=match_id,
                user_id=user_id,
                submitted_at=now,
                bonus_applied=False,
                **payload,
            )
            stmt = stmt.on_conflict_do_update(
                index_elements=[Prediction.match_id, Prediction.user_id],  # type: ignore[arg-type]
                set_={**payload, "submitted_at": now},
            )
            await session.execute(stmt)

    return PredictionSnapshot(
        match_id=match_id,
        user_id=user_id,
        prediction=ScoreLine(
            home=payload["pred_home"],
            away=payload["pred_away"],
            penalty_winner=payload["pred_penalty_winner"],
        ),
        points=None,
        category=None,
    )


__all__ = [
    "MatchSnapshot",
    "PredictionSnapshot",
    "AggregateSnapshot",
    "get_match",
    "list_matches",
    "list_predictions",
    "get_user_aggregates",
    "load_scoring_rules",
    "save_scoring_rules",
    "add_match",
    "register_user",
    "submit_prediction",
]
