"""Scheduled matches and their official results."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Index, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from scoreline.shared.enums import MatchStatus

from .base import Base, match_status_enum


class Match(Base):
    """A fixture. Status and result are only ever written together."""

    __tablename__ = "match"

    match_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    team_a: Mapped[str] = mapped_column(String(128), nullable=False)
    team_b: Mapped[str] = mapped_column(String(128), nullable=False)
    kickoff_date: Mapped[str | None] = mapped_column(String(32), comment="Scheduled date as entered")
    kickoff_time: Mapped[str | None] = mapped_column(String(16), comment="Scheduled time as entered")
    stage_id: Mapped[str | None] = mapped_column(String(32))
    status: Mapped[MatchStatus] = mapped_column(
        match_status_enum,
        nullable=False,
        default=MatchStatus.UPCOMING,
    )
    result_home: Mapped[int | None] = mapped_column(Integer)
    result_away: Mapped[int | None] = mapped_column(Integer)
    result_penalty_winner: Mapped[str | None] = mapped_column(String(8), comment="home | away")
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

    __table_args__ = (
        Index("ix_match_status", "status"),
        Index("ix_match_stage_id", "stage_id"),
    )
