"""SQLAlchemy declarative base shared by all ORM models.

Column types are kept dialect-neutral: the same metadata backs PostgreSQL in
production and SQLite in tests.
"""

from __future__ import annotations

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Shared declarative base for all News Extractor models."""
