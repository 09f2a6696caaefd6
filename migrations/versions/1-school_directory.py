"""1-school_directory

Create Date: 2026-10-19 10:12:31.418237
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "a3c1f0d2b8e4"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "school_directory",
        sa.Column("ordering_number", sa.Integer(), nullable=False),
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("address", sa.String(), nullable=False),
        sa.Column("city", sa.String(), nullable=False),
        sa.Column("state", sa.String(), nullable=False),
        sa.Column("contact", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("image", sa.String(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_school_directory_ordering_number"),
        "school_directory",
        ["ordering_number"],
        unique=True,
    )


def downgrade() -> None:
    op.drop_index(
        op.f("ix_school_directory_ordering_number"),
        table_name="school_directory",
    )
    op.drop_table("school_directory")
