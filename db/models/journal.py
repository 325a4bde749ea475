"""
db/models/journal.py

Journal model: owned by a publisher, owns its submissions.
"""

from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base, TimestampMixin

if TYPE_CHECKING:
    from db.models.publisher import Publisher


class Journal(Base, TimestampMixin):
    __tablename__ = "journals"

    id: Mapped[str] = mapped_column(
        String(64),
        primary_key=True,
    )

    publisher_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("publishers.id", ondelete="CASCADE"),
        nullable=False,
    )

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    publisher: Mapped["Publisher"] = relationship(
        "Publisher",
        back_populates="journals",
    )

    __table_args__ = (
        Index("ix_journals_publisher_id", "publisher_id"),
    )

    def __repr__(self) -> str:
        return f"<Journal id={self.id!r} publisher_id={self.publisher_id!r}>"
