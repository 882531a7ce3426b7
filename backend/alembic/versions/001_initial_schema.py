"""Initial schema: users, administrators, events, sheets, reservations.

Seeds the fixed 1000-sheet layout.

Revision ID: 001
Revises: None
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

from torb.services.sheets import iter_sheets

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("nickname", sa.String(128), nullable=False),
        sa.Column("login_name", sa.String(128), nullable=False),
        sa.Column("pass_hash", sa.String(128), nullable=False),
        sa.UniqueConstraint("login_name", name="uq_users_login_name"),
    )

    op.create_table(
        "administrators",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("nickname", sa.String(128), nullable=False),
        sa.Column("login_name", sa.String(128), nullable=False),
        sa.Column("pass_hash", sa.String(128), nullable=False),
        sa.UniqueConstraint("login_name", name="uq_administrators_login_name"),
    )

    op.create_table(
        "events",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(128), nullable=False),
        sa.Column("public_fg", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("closed_fg", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("price", sa.Integer(), nullable=False),
    )

    sheets = op.create_table(
        "sheets",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=False),
        sa.Column("rank", sa.String(128), nullable=False),
        sa.Column("num", sa.Integer(), nullable=False),
        sa.Column("price", sa.Integer(), nullable=False),
        sa.UniqueConstraint("rank", "num", name="uq_sheet_rank_num"),
    )

    op.create_table(
        "reservations",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("event_id", sa.Integer(), sa.ForeignKey("events.id"), nullable=False),
        sa.Column("sheet_id", sa.Integer(), sa.ForeignKey("sheets.id"), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("reserved_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("canceled_at", sa.DateTime(timezone=True), nullable=True),
    )
    # Availability: active reservations of one event, per sheet
    op.create_index("ix_reservations_event_sheet", "reservations", ["event_id", "sheet_id"])
    # User page: a user's history ordered by last update
    op.create_index("ix_reservations_user_id", "reservations", ["user_id"])

    op.bulk_insert(
        sheets,
        [
            {"id": sheet.id, "rank": sheet.rank, "num": sheet.num, "price": sheet.price}
            for sheet in iter_sheets()
        ],
    )


def downgrade() -> None:
    op.drop_table("reservations")
    op.drop_table("sheets")
    op.drop_table("events")
    op.drop_table("administrators")
    op.drop_table("users")
