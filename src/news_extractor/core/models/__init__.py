"""SQLAlchemy ORM models for News Extractor.

All models are imported here so that Alembic autogenerate can discover them
via ``Base.metadata``.
"""

from __future__ import annotations

from news_extractor.core.models.base import Base
from news_extractor.core.models.work_items import WorkItemRecord

__all__ = [
    "Base",
    "WorkItemRecord",
]
