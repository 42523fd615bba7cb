"""Consistency checks between stored aggregates and stored prediction scores.

After every committed pass, each user's total equals the sum of stored points
over their predictions of completed matches, and the four counters sum to the
number of such predictions. find_drift reports users for which that no longer
holds; recalculate_all is the repair.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping

from scoreline.database import repository
from scoreline.database.dbm import DBM
from scoreline.database.repository import AggregateSnapshot, MatchSnapshot, PredictionSnapshot

from .types import AggregateTotals

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DriftReport:
    user_id: str
    stored_total: int
    expected_total: int
    stored_stats: Mapping[str, int]
    expected_stats: Mapping[str, int]


def expected_aggregates(
    matches: Iterable[MatchSnapshot],
    predictions: Iterable[PredictionSnapshot],
    user_ids: Iterable[str],
) -> Dict[str, AggregateTotals]:
    """Sum stored classifications of completed matches per user."""
    completed = {m.match_id for m in matches if m.is_completed}
    totals = {user_id: AggregateTotals(user_id=user_id) for user_id in user_ids}
    for prediction in predictions:
        if prediction.match_id not in completed:
            continue
        user_totals = totals.get(prediction.user_id)
        stored = prediction.stored_classification
        if user_totals is None or stored is None:
            continue
        user_totals.add(stored)
    return totals


def compare(
    stored: Mapping[str, AggregateSnapshot],
    expected: Mapping[str, AggregateTotals],
) -> List[DriftReport]:
    reports: List[DriftReport] = []
    for user_id in sorted(stored):
        snap = stored[user_id]
        want = expected.get(user_id) or AggregateTotals(user_id=user_id)
        if snap.total_points != want.total_points or snap.stats() != want.stats():
            reports.append(
                DriftReport(
                    user_id=user_id,
                    stored_total=snap.total_points,
                    expected_total=want.total_points,
                    stored_stats=snap.stats(),
                    expected_stats=want.stats(),
                )
            )
    return reports


async def find_drift(dbm: DBM) -> List[DriftReport]:
    """Compare every stored aggregate with the value its predictions imply."""
    stored = await repository.get_user_aggregates(dbm)
    matches = await repository.list_matches(dbm)
    predictions = await repository.list_predictions(dbm)
    reports = compare(stored, expected_aggregates(matches, predictions, stored))
    if reports:
        logger.warning({"event": "aggregate_drift", "users": [r.user_id for r in reports]})
    return reports


__all__ = ["DriftReport", "expected_aggregates", "compare", "find_drift"]
