"""Initial migration: create rankingrecord table

Revision ID: 001_initial
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision = "001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Whole ranking state lives in the JSON payload
    op.create_table(
        "rankingrecord",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("format_kind", sa.String(), nullable=False),
        sa.Column("payload", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_rankingrecord_format_kind", "rankingrecord", ["format_kind"])


def downgrade() -> None:
    op.drop_index("ix_rankingrecord_format_kind", table_name="rankingrecord")
    op.drop_table("rankingrecord")
