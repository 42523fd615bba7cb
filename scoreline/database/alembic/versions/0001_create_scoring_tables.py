"""Create match, prediction, user_aggregate and scoring_rules tables

Revision ID: 0001_create_scoring_tables
Revises:
Create Date: 2026-05-04 18:00:00
"""
from __future__ import annotations

import sqlalchemy as sa
from alembic import op


revision = "0001_create_scoring_tables"
down_revision = None
branch_labels = None
depends_on = None


_match_status = sa.Enum("UPCOMING", "COMPLETED", name="match_status")
_category = sa.Enum("Perfect", "Aggregate", "Outcome", "Miss", name="prediction_category")


def upgrade() -> None:
    op.create_table(
        "match",
        sa.Column("match_id", sa.String(length=64), nullable=False),
        sa.Column("team_a", sa.String(length=128), nullable=False),
        sa.Column("team_b", sa.String(length=128), nullable=False),
        sa.Column("kickoff_date", sa.String(length=32), nullable=True),
        sa.Column("kickoff_time", sa.String(length=16), nullable=True),
        sa.Column("stage_id", sa.String(length=32), nullable=True),
        sa.Column("status", _match_status, nullable=False),
        sa.Column("result_home", sa.Integer(), nullable=True),
        sa.Column("result_away", sa.Integer(), nullable=True),
        sa.Column("result_penalty_winner", sa.String(length=8), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("match_id", name="pk_match"),
    )
    op.create_index("ix_match_status", "match", ["status"])
    op.create_index("ix_match_stage_id", "match", ["stage_id"])

    op.create_table(
        "prediction",
        sa.Column("match_id", sa.String(length=64), nullable=False),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("pred_home", sa.String(length=16), nullable=True),
        sa.Column("pred_away", sa.String(length=16), nullable=True),
        sa.Column("pred_penalty_winner", sa.String(length=8), nullable=True),
        sa.Column("points", sa.Integer(), nullable=True),
        sa.Column("category", _category, nullable=True),
        sa.Column("bonus_applied", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("submitted_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("scored_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["match_id"], ["match.match_id"], name="fk_prediction_match_id_match"),
        sa.PrimaryKeyConstraint("match_id", "user_id", name="pk_prediction"),
    )
    op.create_index("ix_prediction_user_id", "prediction", ["user_id"])

    op.create_table(
        "user_aggregate",
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("display_name", sa.String(length=128), nullable=True),
        sa.Column("total_points", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("stat_perfect", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("stat_aggregate", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("stat_outcome", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("stat_missed", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("user_id", name="pk_user_aggregate"),
    )

    op.create_table(
        "scoring_rules",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("perfect_score", sa.Integer(), nullable=False),
        sa.Column("aggregate_score", sa.Integer(), nullable=False),
        sa.Column("outcome_score", sa.Integer(), nullable=False),
        sa.Column("penalty_bonus", sa.Integer(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint("id = 1", name="ck_scoring_rules_singleton"),
        sa.PrimaryKeyConstraint("id", name="pk_scoring_rules"),
    )


def downgrade() -> None:
    op.drop_table("scoring_rules")
    op.drop_table("user_aggregate")
    op.drop_index("ix_prediction_user_id", table_name="prediction")
    op.drop_table("prediction")
    op.drop_index("ix_match_stage_id", table_name="match")
    op.drop_index("ix_match_status", table_name="match")
    op.drop_table("match")
