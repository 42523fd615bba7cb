"""Type definitions and errors for the scoring engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Literal, Mapping, Optional

from scoreline.shared.enums import STAT_FIELD_BY_CATEGORY, Category, Side


class ScoringError(Exception):
    """Raised when a scoring pass cannot complete."""

    pass


class MatchNotFoundError(ScoringError):
    """Raised when a referenced match does not exist."""

    def __init__(self, match_id: str):
        super().__init__(f"match {match_id!r} not found")
        self.match_id = match_id


class MatchLockedError(ScoringError):
    """Raised when a prediction is submitted for a completed match."""

    def __init__(self, match_id: str):
        super().__init__(f"match {match_id!r} is completed; predictions are locked")
        self.match_id = match_id


class InvalidResultError(ScoringError):
    """Raised when an operator-entered result field cannot be stored."""

    def __init__(self, field_name: str, value: Any):
        super().__init__(f"invalid {field_name}: {value!r}")
        self.field_name = field_name
        self.value = value


class CommitError(ScoringError):
    """Raised when the backend rejects an atomic write batch.

    Nothing from the batch is applied; the whole pass may be retried.
    """

    pass


# ─────────────────────────────────────────────────────────────────────────────
# Score lines and classifications
# ─────────────────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class ScoreLine:
    """A guessed or official score.

    Goals are kept as received; the classifier decides whether they parse.
    """

    home: Any = None
    away: Any = None
    penalty_winner: Optional[str] = None

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> Optional["ScoreLine"]:
        if data is None:
            return None
        winner = data.get("penalty_winner", data.get("penaltyWinner"))
        return cls(home=data.get("home"), away=data.get("away"), penalty_winner=winner)

    @property
    def is_empty(self) -> bool:
        return self.home is None and self.away is None and self.penalty_winner is None

    def normalized_penalty_winner(self) -> Optional[Side]:
        if self.penalty_winner is None:
            return None
        value = self.penalty_winner.value if isinstance(self.penalty_winner, Side) else self.penalty_winner
        try:
            return Side(str(value).strip().lower())
        except ValueError:
            return None


@dataclass(frozen=True)
class Classification:
    """Tagged result of scoring one prediction."""

    points: int
    category: Category
    bonus_applied: bool = False

    @property
    def label(self) -> str:
        if not self.bonus_applied:
            return self.category.value
        if self.category is Category.MISS:
            return "BonusOnly"
        return f"{self.category.value}+Bonus"

    @property
    def stat_field(self) -> str:
        return STAT_FIELD_BY_CATEGORY[self.category]


MISS = Classification(points=0, category=Category.MISS)


@dataclass
class AggregateTotals:
    """Mutable in-memory copy of one user's aggregate."""

    user_id: str
    total_points: int = 0
    perfect: int = 0
    aggregate: int = 0
    outcome: int = 0
    missed: int = 0

    def add(self, classification: Classification) -> None:
        self.total_points += classification.points
        field_name = classification.stat_field
        setattr(self, field_name, getattr(self, field_name) + 1)

    def remove(self, classification: Classification) -> None:
        self.total_points -= classification.points
        field_name = classification.stat_field
        setattr(self, field_name, max(0, getattr(self, field_name) - 1))

    def stats(self) -> Dict[str, int]:
        return {
            "perfect": self.perfect,
            "aggregate": self.aggregate,
            "outcome": self.outcome,
            "missed": self.missed,
        }

    @property
    def scored_count(self) -> int:
        return self.perfect + self.aggregate + self.outcome + self.missed


# ─────────────────────────────────────────────────────────────────────────────
# Pass results
# ─────────────────────────────────────────────────────────────────────────────

PassStatus = Literal["committed", "failed"]


@dataclass(frozen=True)
class PassResult:
    """Outcome of one incremental or full scoring pass."""

    status: PassStatus
    reason: Optional[str] = None
    predictions_scored: int = 0
    aggregates_written: int = 0
    skipped_users: tuple[str, ...] = field(default_factory=tuple)

    @property
    def committed(self) -> bool:
        return self.status == "committed"

    @classmethod
    def failed(cls, reason: str) -> "PassResult":
        return cls(status="failed", reason=reason)


__all__ = [
    "ScoringError",
    "MatchNotFoundError",
    "MatchLockedError",
    "InvalidResultError",
    "CommitError",
    "ScoreLine",
    "Classification",
    "MISS",
    "AggregateTotals",
    "PassStatus",
    "PassResult",
]
