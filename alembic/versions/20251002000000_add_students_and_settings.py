"""Add students (membership reminders) and key/value settings.

Revision ID: 20251002000000
Revises: 20251001000000
Create Date: 2025-10-02

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "20251002000000"
down_revision: Union[str, None] = "20251001000000"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "students",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("phone", sa.String(length=32), nullable=True),
        sa.Column("branch_id", sa.Integer(), nullable=True),
        sa.Column("membership_end", sa.Date(), nullable=True),
        sa.Column("profile_image_url", sa.String(length=1024), nullable=True),
        sa.ForeignKeyConstraint(
            ["branch_id"],
            ["branches.id"],
            name="fk_students_branch_id_branches",
            ondelete="SET NULL",
        ),
        sa.PrimaryKeyConstraint("id", name="students_pkey"),
    )
    op.create_index("ix_students_branch_id", "students", ["branch_id"], unique=False)
    op.create_index("ix_students_membership_end", "students", ["membership_end"], unique=False)

    op.create_table(
        "settings",
        sa.Column("key", sa.String(length=255), nullable=False),
        sa.Column("value", sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint("key", name="settings_pkey"),
    )


def downgrade() -> None:
    op.drop_table("settings")
    op.drop_index("ix_students_membership_end", table_name="students")
    op.drop_index("ix_students_branch_id", table_name="students")
    op.drop_table("students")
