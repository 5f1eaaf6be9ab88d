# backend/inkmatch/models/profile.py
"""
Professional profile model for the inkmatch platform.

A profile is the searchable listing of a tattoo artist or a studio. The
multi-valued facets (specialties, services, amenities, working hours) live in
narrow child tables so every search predicate can be expressed in portable SQL.
"""

from datetime import datetime, timezone
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import (
    TIMESTAMP,
    Boolean,
    CheckConstraint,
    Float,
    ForeignKey,
    Index,
    Integer,
    SmallInteger,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
import ulid

from ..database import Base

if TYPE_CHECKING:
    from .portfolio import PortfolioImage
    from .specialty import Specialty


class Profile(Base):
    """
    Searchable artist or studio listing.

    Attributes:
        profile_type: 'artist' or 'studio'
        latitude/longitude: Optional coordinate used for distance filtering and sorting
        hourly_rate: Optional; artists usually set it, studios may not
        years_experience: Optional years in the trade
        is_available: Precomputed "currently taking bookings" flag
        accepts_new_clients: Whether the profile takes first-time clients
    """

    __tablename__ = "profiles"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    profile_type: Mapped[str] = mapped_column(String(10), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    bio: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    location: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    latitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    longitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    rating: Mapped[float] = mapped_column(Float, nullable=False, default=0.0, server_default="0")
    total_reviews: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    hourly_rate: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    years_experience: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)
    is_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_available: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    accepts_new_clients: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        server_default=func.now(),
        nullable=False,
    )

    specialties: Mapped[List["ProfileSpecialty"]] = relationship(
        "ProfileSpecialty", back_populates="profile", cascade="all, delete-orphan"
    )
    services: Mapped[List["ProfileService"]] = relationship(
        "ProfileService", back_populates="profile", cascade="all, delete-orphan"
    )
    amenities: Mapped[List["ProfileAmenity"]] = relationship(
        "ProfileAmenity", back_populates="profile", cascade="all, delete-orphan"
    )
    working_hours: Mapped[List["ProfileWorkingHours"]] = relationship(
        "ProfileWorkingHours", back_populates="profile", cascade="all, delete-orphan"
    )
    portfolio_images: Mapped[List["PortfolioImage"]] = relationship(
        "PortfolioImage", back_populates="profile", cascade="all, delete-orphan"
    )

    __table_args__ = (
        CheckConstraint("profile_type IN ('artist', 'studio')", name="ck_profiles_type"),
        CheckConstraint("rating >= 0 AND rating <= 5", name="ck_profiles_rating_range"),
        Index("ix_profiles_created_at_id", "created_at", "id"),
        Index("ix_profiles_rating_id", "rating", "id"),
    )

    @property
    def service_names(self) -> List[str]:
        return [s.name for s in self.services]

    @property
    def amenity_names(self) -> List[str]:
        return [a.name for a in self.amenities]

    @property
    def has_portfolio(self) -> bool:
        return bool(self.portfolio_images)

    def __repr__(self) -> str:
        return f"<Profile(id={self.id}, type={self.profile_type}, name={self.name!r})>"


class ProfileSpecialty(Base):
    """Junction table linking profiles to catalog specialties."""

    __tablename__ = "profile_specialties"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    profile_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    specialty_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("specialties.id", ondelete="CASCADE"), nullable=False, index=True
    )
    proficiency_level: Mapped[str] = mapped_column(String(20), nullable=False, default="intermediate")

    profile: Mapped["Profile"] = relationship("Profile", back_populates="specialties")
    specialty: Mapped["Specialty"] = relationship("Specialty")

    __table_args__ = (
        UniqueConstraint("profile_id", "specialty_id", name="unique_profile_specialty"),
    )


class ProfileService(Base):
    """A service offering (e.g. 'Cover-ups') advertised by a profile."""

    __tablename__ = "profile_services"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    profile_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False, index=True)

    profile: Mapped["Profile"] = relationship("Profile", back_populates="services")

    __table_args__ = (UniqueConstraint("profile_id", "name", name="unique_profile_service"),)


class ProfileAmenity(Base):
    """A studio amenity (e.g. 'WiFi', 'Parking')."""

    __tablename__ = "profile_amenities"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    profile_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False, index=True)

    profile: Mapped["Profile"] = relationship("Profile", back_populates="amenities")

    __table_args__ = (UniqueConstraint("profile_id", "name", name="unique_profile_amenity"),)


class ProfileWorkingHours(Base):
    """
    One opening window on one weekday.

    Times are stored as minutes since midnight so window/band overlap is a
    plain integer comparison on every backend.
    """

    __tablename__ = "profile_working_hours"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    profile_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    weekday: Mapped[str] = mapped_column(String(10), nullable=False)
    opens_minute: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    closes_minute: Mapped[int] = mapped_column(SmallInteger, nullable=False)

    profile: Mapped["Profile"] = relationship("Profile", back_populates="working_hours")

    __table_args__ = (
        CheckConstraint(
            "opens_minute >= 0 AND closes_minute <= 1440 AND opens_minute < closes_minute",
            name="ck_working_hours_window",
        ),
        Index("ix_working_hours_profile_weekday", "profile_id", "weekday"),
    )
