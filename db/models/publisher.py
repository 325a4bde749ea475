"""
db/models/publisher.py

Publisher model: root tenant entity.
Every journal, submission and analytics event is scoped to a publisher.
"""

from typing import TYPE_CHECKING

from sqlalchemy import Boolean, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base, TimestampMixin

if TYPE_CHECKING:
    from db.models.journal import Journal


class Publisher(Base, TimestampMixin):
    """
    A publishing house operating one or more journals.
    """

    __tablename__ = "publishers"

    id: Mapped[str] = mapped_column(
        String(64),
        primary_key=True,
    )

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        comment="Inactive publishers are skipped by scheduled KPI jobs",
    )

    # ── Relationships ──────────────────────────────────────────────────────────

    journals: Mapped[list["Journal"]] = relationship(
        "Journal",
        back_populates="publisher",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    # ── Indexes ────────────────────────────────────────────────────────────────

    __table_args__ = (
        Index("ix_publishers_is_active", "is_active"),
    )

    def __repr__(self) -> str:
        return f"<Publisher id={self.id!r} name={self.name!r}>"
