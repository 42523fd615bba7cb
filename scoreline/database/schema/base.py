"""Shared SQLAlchemy base definitions and enums."""

from __future__ import annotations

from sqlalchemy import Enum as SAEnum, MetaData
from sqlalchemy.orm import DeclarativeBase

from scoreline.shared.enums import Category, MatchStatus


# Shared metadata constant so Alembic sees every table
naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}
metadata = MetaData(naming_convention=naming_convention)


class Base(DeclarativeBase):
    metadata = metadata


# SQLAlchemy Enum instances bound to shared metadata; values (not names) are stored
match_status_enum = SAEnum(
    MatchStatus,
    name="match_status",
    metadata=metadata,
    values_callable=lambda enum: [member.value for member in enum],
)
category_enum = SAEnum(
    Category,
    name="prediction_category",
    metadata=metadata,
    values_callable=lambda enum: [member.value for member in enum],
)


__all__ = [
    "Base",
    "metadata",
    "match_status_enum",
    "category_enum",
]
