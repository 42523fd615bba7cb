"""Denormalized per-user totals (a materialized view over scored predictions)."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class UserAggregate(Base):
    __tablename__ = "user_aggregate"

    user_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    display_name: Mapped[str | None] = mapped_column(String(128))
    total_points: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    stat_perfect: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    stat_aggregate: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    stat_outcome: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    stat_missed: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
