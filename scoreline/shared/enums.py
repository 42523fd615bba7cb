from __future__ import annotations

from enum import Enum


class MatchStatus(str, Enum):
    UPCOMING = "UPCOMING"
    COMPLETED = "COMPLETED"


class Side(str, Enum):
    HOME = "home"
    AWAY = "away"


class Outcome(str, Enum):
    HOME = "HOME"
    AWAY = "AWAY"
    DRAW = "DRAW"


class Category(str, Enum):
    """Primary classification of a prediction; the bonus flag is tracked separately."""

    PERFECT = "Perfect"
    AGGREGATE = "Aggregate"
    OUTCOME = "Outcome"
    MISS = "Miss"


# Aggregate stat counter fed by each primary category
STAT_FIELD_BY_CATEGORY = {
    Category.PERFECT: "perfect",
    Category.AGGREGATE: "aggregate",
    Category.OUTCOME: "outcome",
    Category.MISS: "missed",
}


__all__ = ["MatchStatus", "Side", "Outcome", "Category", "STAT_FIELD_BY_CATEGORY"]
