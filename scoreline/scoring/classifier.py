"""Pure scoring of one prediction against one result.

Main score and penalty bonus are evaluated independently:

    Perfect   - exact score
    Aggregate - same outcome and same goal difference
    Outcome   - same outcome only
    Miss      - anything else, or goals that do not parse

A correct penalty-shootout winner adds the bonus on top of any of these.
"""

from __future__ import annotations

import re
from typing import Any, Mapping, Optional, Union

from scoreline.config.scoring_rules import ScoringRules
from scoreline.shared.enums import Category, Outcome

from .types import MISS, Classification, ScoreLine

ScoreInput = Union[ScoreLine, Mapping[str, Any], None]

_INT_RE = re.compile(r"^[+-]?\d+$")


def parse_goals(value: Any) -> Optional[int]:
    """Parse a goal count, returning None for anything that is not an integer."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    text = str(value).strip()
    if not _INT_RE.match(text):
        return None
    return int(text)


def outcome_of(diff: int) -> Outcome:
    if diff > 0:
        return Outcome.HOME
    if diff < 0:
        return Outcome.AWAY
    return Outcome.DRAW


def _as_score_line(value: ScoreInput) -> Optional[ScoreLine]:
    if value is None or isinstance(value, ScoreLine):
        return value
    return ScoreLine.from_mapping(value)


def _main_category(prediction: ScoreLine, result: ScoreLine) -> Category:
    p_home = parse_goals(prediction.home)
    p_away = parse_goals(prediction.away)
    r_home = parse_goals(result.home)
    r_away = parse_goals(result.away)
    if p_home is None or p_away is None or r_home is None or r_away is None:
        return Category.MISS

    p_diff = p_home - p_away
    r_diff = r_home - r_away

    if p_home == r_home and p_away == r_away:
        return Category.PERFECT
    if outcome_of(p_diff) is outcome_of(r_diff):
        if p_diff == r_diff:
            return Category.AGGREGATE
        return Category.OUTCOME
    return Category.MISS


_POINTS_FIELD = {
    Category.PERFECT: "perfect_score",
    Category.AGGREGATE: "aggregate_score",
    Category.OUTCOME: "outcome_score",
}


def classify(prediction: ScoreInput, result: ScoreInput, rules: ScoringRules) -> Classification:
    """Score a prediction against a result under the given rules.

    Never raises; malformed goal values degrade the main score to Miss without
    affecting the penalty bonus.
    """
    prediction = _as_score_line(prediction)
    result = _as_score_line(result)
    if prediction is None or result is None:
        return MISS

    category = _main_category(prediction, result)
    points = getattr(rules, _POINTS_FIELD[category]) if category in _POINTS_FIELD else 0

    bonus_applied = False
    actual_winner = result.normalized_penalty_winner()
    if actual_winner is not None and prediction.normalized_penalty_winner() is actual_winner:
        points += rules.penalty_bonus
        bonus_applied = True

    return Classification(points=points, category=category, bonus_applied=bonus_applied)


__all__ = ["classify", "parse_goals", "outcome_of", "ScoreInput"]
