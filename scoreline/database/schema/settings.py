"""Persisted scoring rule set (single row)."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, Integer, func
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base

SCORING_RULES_ROW_ID = 1


class ScoringRulesRow(Base):
    __tablename__ = "scoring_rules"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, default=SCORING_RULES_ROW_ID)
    perfect_score: Mapped[int] = mapped_column(Integer, nullable=False)
    aggregate_score: Mapped[int] = mapped_column(Integer, nullable=False)
    outcome_score: Mapped[int] = mapped_column(Integer, nullable=False)
    penalty_bonus: Mapped[int] = mapped_column(Integer, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    __table_args__ = (
        CheckConstraint("id = 1", name="singleton"),
    )
