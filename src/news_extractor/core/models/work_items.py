"""SQLAlchemy ORM model for extraction work items.

The ``work_items`` table is the queue the extraction pipeline drains.  Rows
are inserted by an external producer (one per news article URL) and mutated
only by the pipeline's retry ledger and result writer.  Nothing here deletes
rows; trimming old items is the producer side's responsibility.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from news_extractor.core.models.base import Base


class WorkItemRecord(Base):
    """One URL-extraction job tracked through its lifecycle.

    Attributes:
        id: Opaque stable identifier assigned by the producer.
        source_url: Article URL to render and extract.
        title: Article title, informational only.
        published_at: Publication timestamp; recency ordering key.
        extracted_content: Bounded plain text, written at most once.
        attempt_count: Extraction attempts started, persisted before each
            attempt runs.
        last_status: ``"pending"``, ``"attempting"``, ``"extracted"``,
            ``"failed"`` or ``"given_up"``.
        last_error: Attempt-tagged diagnostic, e.g. ``"fetch_failed (2/3)"``.
        needs_extraction: ``False`` once the item has left the pending pool
            (extracted or given up).
        processed_at: Timestamp of the most recent state-changing write.
        created_at: Row creation timestamp.
    """

    __tablename__ = "work_items"

    id: Mapped[str] = mapped_column(sa.String(255), primary_key=True)
    source_url: Mapped[str] = mapped_column(sa.Text, nullable=False)
    title: Mapped[Optional[str]] = mapped_column(sa.Text, nullable=True)
    published_at: Mapped[Optional[datetime]] = mapped_column(
        sa.DateTime(timezone=True),
        nullable=True,
    )

    # Extraction result
    extracted_content: Mapped[Optional[str]] = mapped_column(sa.Text, nullable=True)

    # Retry accounting
    attempt_count: Mapped[int] = mapped_column(
        sa.Integer,
        nullable=False,
        server_default=sa.text("0"),
    )
    last_status: Mapped[str] = mapped_column(
        sa.String(20),
        nullable=False,
        server_default=sa.text("'pending'"),
    )
    last_error: Mapped[Optional[str]] = mapped_column(sa.Text, nullable=True)
    needs_extraction: Mapped[bool] = mapped_column(
        sa.Boolean,
        nullable=False,
        server_default=sa.true(),
    )

    # Timing
    processed_at: Mapped[Optional[datetime]] = mapped_column(
        sa.DateTime(timezone=True),
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        nullable=False,
        server_default=sa.func.now(),
    )

    __table_args__ = (
        sa.Index("idx_work_items_pending", "needs_extraction", "last_status", "published_at"),
    )
