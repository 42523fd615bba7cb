"""Scoring rule configuration.

The rule set is a singleton owned by the settings surface. Both scoring paths
read it at invocation time; changing it never rescores stored predictions until
the next result change or full recalculation.
"""

from __future__ import annotations

from typing import Any, Dict

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class ScoringRules(BaseModel):
    """Points awarded per classification outcome."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    perfect_score: int = Field(
        default=5,
        ge=0,
        validation_alias=AliasChoices("perfect_score", "perfectScore", "perfect"),
        description="Points for predicting the exact score.",
    )
    aggregate_score: int = Field(
        default=3,
        ge=0,
        validation_alias=AliasChoices("aggregate_score", "aggregateScore", "aggregate"),
        description="Points for the correct outcome and goal difference.",
    )
    outcome_score: int = Field(
        default=1,
        ge=0,
        validation_alias=AliasChoices("outcome_score", "outcomeScore", "outcome"),
        description="Points for the correct win/draw/lose outcome only.",
    )
    penalty_bonus: int = Field(
        default=2,
        ge=0,
        validation_alias=AliasChoices("penalty_bonus", "penaltyBonus"),
        description="Extra points for naming the penalty-shootout winner.",
    )

    def with_updates(self, **values: Any) -> "ScoringRules":
        """Return a validated copy with the given non-None fields replaced."""
        merged: Dict[str, Any] = self.model_dump()
        merged.update({k: v for k, v in values.items() if v is not None})
        return ScoringRules.model_validate(merged)


# Default instance for easy import
DEFAULT_SCORING_RULES = ScoringRules()


__all__ = ["ScoringRules", "DEFAULT_SCORING_RULES"]
