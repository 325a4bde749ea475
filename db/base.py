"""
db/base.py

Declarative base, constraint naming and shared column mixins for the
academic KPI schema.
"""

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import DateTime, MetaData, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

# Mirrors PostgreSQL's own default names so that constraints created by
# hand-written migrations and ORM metadata agree.
NAMING_CONVENTION: dict[str, str] = {
    "pk": "%(table_name)s_pkey",
    "fk": "%(table_name)s_%(column_0_name)s_fkey",
    "uq": "%(table_name)s_%(column_0_name)s_key",
    "ck": "%(table_name)s_%(constraint_name)s_check",
}


def utcnow() -> datetime:
    """Timezone-aware current time; all stored timestamps are UTC."""
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """
    Declarative base for publishers, journals, submissions, review
    assignments, analytics events and KPI snapshots.
    """

    metadata = MetaData(naming_convention=NAMING_CONVENTION)
    type_annotation_map: dict[type, Any] = {
        datetime: DateTime(timezone=True),
    }


class TimestampMixin:
    """
    Row bookkeeping for editable reference data (publishers, journals).

    Event-like tables (submissions, analytics events, snapshots) carry
    their own domain timestamps instead.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=utcnow,
    )
