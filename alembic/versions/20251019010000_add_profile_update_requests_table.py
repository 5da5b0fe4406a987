"""Add profile_update_requests table with one-pending-per-user unique index.

Revision ID: 20251019010000
Revises: 20251019000000
Create Date: 2025-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "20251019010000"
down_revision: Union[str, None] = "20251019000000"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "profile_update_requests",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("changes", sa.JSON(), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False, server_default="pending"),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column("resolved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("resolved_by", sa.Integer(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["resolved_by"], ["users.id"]),
        sa.CheckConstraint(
            "status IN ('pending', 'approved', 'declined')",
            name="ck_profile_update_requests_status",
        ),
    )
    op.create_index(
        op.f("ix_profile_update_requests_user_id"),
        "profile_update_requests",
        ["user_id"],
    )
    op.create_index(
        "ix_profile_update_requests_status_created",
        "profile_update_requests",
        ["status", "created_at"],
    )
    # Enforces at most one pending request per user at the store level.
    op.create_index(
        "uq_profile_update_requests_user_pending",
        "profile_update_requests",
        ["user_id"],
        unique=True,
        postgresql_where=sa.text("status = 'pending'"),
        sqlite_where=sa.text("status = 'pending'"),
    )


def downgrade() -> None:
    op.drop_index("uq_profile_update_requests_user_pending", table_name="profile_update_requests")
    op.drop_index("ix_profile_update_requests_status_created", table_name="profile_update_requests")
    op.drop_index(op.f("ix_profile_update_requests_user_id"), table_name="profile_update_requests")
    op.drop_table("profile_update_requests")
