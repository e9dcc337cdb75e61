"""Create the work_items table.

``work_items`` holds one row per article URL awaiting text extraction,
together with its retry accounting.  The composite index backs the pending
pool query (``needs_extraction``, ``last_status``, newest ``published_at``
first).

Revision ID: 001
Revises:
Create Date: 2026-10-19
"""

from __future__ import annotations

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create work_items and its pending-pool index."""
    op.create_table(
        "work_items",
        sa.Column("id", sa.String(255), primary_key=True),
        sa.Column("source_url", sa.Text(), nullable=False),
        sa.Column("title", sa.Text(), nullable=True),
        sa.Column("published_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("extracted_content", sa.Text(), nullable=True),
        sa.Column(
            "attempt_count",
            sa.Integer(),
            nullable=False,
            server_default=sa.text("0"),
        ),
        sa.Column(
            "last_status",
            sa.String(20),
            nullable=False,
            server_default=sa.text("'pending'"),
        ),
        sa.Column("last_error", sa.Text(), nullable=True),
        sa.Column(
            "needs_extraction",
            sa.Boolean(),
            nullable=False,
            server_default=sa.true(),
        ),
        sa.Column("processed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )
    op.create_index(
        "idx_work_items_pending",
        "work_items",
        ["needs_extraction", "last_status", "published_at"],
    )


def downgrade() -> None:
    """Drop work_items and its index."""
    op.drop_index("idx_work_items_pending", table_name="work_items")
    op.drop_table("work_items")
