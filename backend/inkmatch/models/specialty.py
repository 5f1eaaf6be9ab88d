"""Specialty catalog model (tattoo styles such as 'Geometric' or 'Blackwork')."""

from datetime import datetime
from typing import Optional

from sqlalchemy import TIMESTAMP, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column
import ulid

from ..database import Base


class Specialty(Base):
    """Catalog entry that profiles link to through ProfileSpecialty."""

    __tablename__ = "specialties"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    category: Mapped[Optional[str]] = mapped_column(String(50), nullable=True, index=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), nullable=False
    )

    def __repr__(self) -> str:
        return f"<Specialty(id={self.id}, name={self.name!r})>"
