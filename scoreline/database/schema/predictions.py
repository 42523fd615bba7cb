"""User predictions and their last computed score."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from scoreline.shared.enums import Category

from .base import Base, category_enum


class Prediction(Base):
    """One user's guess for one match.

    points/category/bonus_applied belong to the scoring engine; the submission
    path only writes the pred_* payload.
    """

    __tablename__ = "prediction"

    match_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("match.match_id"),
        primary_key=True,
    )
    user_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    pred_home: Mapped[str | None] = mapped_column(String(16), comment="Goals as submitted")
    pred_away: Mapped[str | None] = mapped_column(String(16), comment="Goals as submitted")
    pred_penalty_winner: Mapped[str | None] = mapped_column(String(8))
    points: Mapped[int | None] = mapped_column(Integer)
    category: Mapped[Category | None] = mapped_column(category_enum)
    bonus_applied: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    submitted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    scored_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    __table_args__ = (
        Index("ix_prediction_user_id", "user_id"),
    )
