from .base import Base, metadata
from .matches import Match
from .predictions import Prediction
from .users import UserAggregate
from .settings import SCORING_RULES_ROW_ID, ScoringRulesRow

__all__ = [
    "Base",
    "metadata",
    "Match",
    "Prediction",
    "UserAggregate",
    "ScoringRulesRow",
    "SCORING_RULES_ROW_ID",
]
