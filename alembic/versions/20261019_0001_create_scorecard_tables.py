"""create scorecard tables

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19 09:00:00
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None

UNIT_TYPE = postgresql.ENUM(
    "NUMBER",
    "PERCENTAGE",
    "CURRENCY",
    "DURATION_SECONDS",
    "TEXT",
    name="unit_type",
    create_type=False,
)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    UNIT_TYPE.create(op.get_bind(), checkfirst=True)

    op.create_table(
        "cvj_stages",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("display_order", sa.Integer(), nullable=False),
        sa.Column("color_code", sa.String(length=50), nullable=False,
                  comment="Display colour token for the stage"),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )
    op.create_index("ix_cvj_stages_display_order", "cvj_stages", ["display_order"], unique=False)

    op.create_table(
        "sub_categories",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("display_order", sa.Integer(), nullable=False),
        sa.Column("cvj_stage_id", postgresql.UUID(as_uuid=True), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["cvj_stage_id"], ["cvj_stages.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name", "cvj_stage_id", name="uq_sub_categories_name_stage"),
    )
    op.create_index(
        "ix_sub_categories_cvj_stage_id", "sub_categories", ["cvj_stage_id"], unique=False
    )

    op.create_table(
        "kpis",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("unit_type", UNIT_TYPE, nullable=False),
        sa.Column("default_monthly_target_value", sa.Float(), nullable=True,
                  comment="Fallback target when no monthly override exists"),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("sub_category_id", postgresql.UUID(as_uuid=True), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["sub_category_id"], ["sub_categories.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_kpis_sub_category_id", "kpis", ["sub_category_id"], unique=False)
    op.create_index("ix_kpis_is_active", "kpis", ["is_active"], unique=False)

    op.create_table(
        "weeks",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("week_number", sa.Integer(), nullable=False),
        sa.Column("month", sa.Integer(), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("year", "week_number", name="uq_weeks_year_week_number"),
    )
    op.create_index("ix_weeks_year_month", "weeks", ["year", "month"], unique=False)

    op.create_table(
        "weekly_data_entries",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("week_id", sa.String(length=64), nullable=False),
        sa.Column("kpi_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("actual_value", sa.Float(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["kpi_id"], ["kpis.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["week_id"], ["weeks.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("week_id", "kpi_id", name="uq_weekly_data_entries_week_kpi"),
    )
    op.create_index(
        "ix_weekly_data_entries_kpi_id", "weekly_data_entries", ["kpi_id"], unique=False
    )

    op.create_table(
        "monthly_kpi_targets",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("kpi_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("month_id", sa.String(length=7), nullable=False, comment="YYYY-MM"),
        sa.Column("target_value", sa.Float(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["kpi_id"], ["kpis.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("kpi_id", "month_id", name="uq_monthly_kpi_targets_kpi_month"),
    )
    op.create_index(
        "ix_monthly_kpi_targets_month_id", "monthly_kpi_targets", ["month_id"], unique=False
    )


def downgrade() -> None:
    op.drop_index("ix_monthly_kpi_targets_month_id", table_name="monthly_kpi_targets")
    op.drop_table("monthly_kpi_targets")
    op.drop_index("ix_weekly_data_entries_kpi_id", table_name="weekly_data_entries")
    op.drop_table("weekly_data_entries")
    op.drop_index("ix_weeks_year_month", table_name="weeks")
    op.drop_table("weeks")
    op.drop_index("ix_kpis_is_active", table_name="kpis")
    op.drop_index("ix_kpis_sub_category_id", table_name="kpis")
    op.drop_table("kpis")
    op.drop_index("ix_sub_categories_cvj_stage_id", table_name="sub_categories")
    op.drop_table("sub_categories")
    op.drop_index("ix_cvj_stages_display_order", table_name="cvj_stages")
    op.drop_table("cvj_stages")
    UNIT_TYPE.drop(op.get_bind(), checkfirst=True)
