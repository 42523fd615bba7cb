"""Scoring engine: classification, incremental updates and full reconciliation.

Modules that touch storage (batch, incremental, reconcile, invariants) are
imported directly by callers; only the pure pieces are re-exported here.
"""

from .classifier import classify, outcome_of, parse_goals
from .types import (
    AggregateTotals,
    Classification,
    CommitError,
    MatchLockedError,
    MatchNotFoundError,
    PassResult,
    ScoreLine,
    ScoringError,
)

__all__ = [
    "classify",
    "outcome_of",
    "parse_goals",
    "AggregateTotals",
    "Classification",
    "CommitError",
    "MatchLockedError",
    "MatchNotFoundError",
    "PassResult",
    "ScoreLine",
    "ScoringError",
]
