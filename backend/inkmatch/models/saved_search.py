"""Saved search model: an owner's named, immutable snapshot of a filter state."""

from datetime import datetime, timezone
from typing import Any, Dict

from sqlalchemy import JSON, TIMESTAMP, Index, String, func
from sqlalchemy.orm import Mapped, mapped_column
import ulid

from ..database import Base


class SavedSearch(Base):
    """
    Filters are stored as the serialized (flat string map) advanced filter state,
    the same representation the search endpoint accepts.
    """

    __tablename__ = "saved_searches"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    owner_id: Mapped[str] = mapped_column(String(64), nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    filters: Mapped[Dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        server_default=func.now(),
        nullable=False,
    )

    __table_args__ = (Index("ix_saved_searches_owner_created", "owner_id", "created_at"),)

    def __repr__(self) -> str:
        return f"<SavedSearch(id={self.id}, owner={self.owner_id}, name={self.name!r})>"
