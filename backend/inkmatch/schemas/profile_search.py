"""
Schemas for the profile search endpoint.

Field names follow the JSON contract consumed by the web client (camelCase
aliases); Python code uses the snake_case attributes.
"""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import Field

from ..services.search.executor import ProfileHit, ResultEnvelope
from ..services.search.filter_state import FilterChip
from ._strict_base import StrictModel


class SpecialtySummary(StrictModel):
    id: str
    name: str
    category: Optional[str] = None
    proficiency_level: Optional[str] = Field(default=None, alias="proficiencyLevel")


class ProfileResult(StrictModel):
    id: str
    profile_type: str = Field(alias="profileType")
    name: str
    bio: Optional[str] = None
    location: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    rating: float
    total_reviews: int = Field(alias="totalReviews")
    hourly_rate: Optional[float] = Field(default=None, alias="hourlyRate")
    years_experience: Optional[int] = Field(default=None, alias="yearsExperience")
    specialties: List[SpecialtySummary] = Field(default_factory=list)
    services: List[str] = Field(default_factory=list)
    amenities: List[str] = Field(default_factory=list)
    is_active: bool = Field(alias="isActive")
    is_verified: bool = Field(alias="isVerified")
    is_available: bool = Field(alias="isAvailable")
    accepts_new_clients: bool = Field(alias="acceptsNewClients")
    has_portfolio: bool = Field(alias="hasPortfolio")
    created_at: datetime = Field(alias="createdAt")
    distance: Optional[float] = Field(default=None, description="Distance from the reference point")

    @classmethod
    def from_hit(cls, hit: ProfileHit) -> "ProfileResult":
        profile = hit.profile
        return cls(
            id=profile.id,
            profile_type=profile.profile_type,
            name=profile.name,
            bio=profile.bio,
            location=profile.location,
            latitude=profile.latitude,
            longitude=profile.longitude,
            rating=profile.rating,
            total_reviews=profile.total_reviews,
            hourly_rate=profile.hourly_rate,
            years_experience=profile.years_experience,
            specialties=[
                SpecialtySummary(
                    id=link.specialty_id,
                    name=link.specialty.name,
                    category=link.specialty.category,
                    proficiency_level=link.proficiency_level,
                )
                for link in sorted(profile.specialties, key=lambda s: s.specialty.name)
            ],
            services=sorted(profile.service_names),
            amenities=sorted(profile.amenity_names),
            is_active=profile.is_active,
            is_verified=profile.is_verified,
            is_available=profile.is_available,
            accepts_new_clients=profile.accepts_new_clients,
            has_portfolio=profile.has_portfolio,
            created_at=profile.created_at,
            distance=None if hit.distance is None else round(hit.distance, 2),
        )


class PaginationMeta(StrictModel):
    page: int = Field(ge=1)
    limit: int = Field(ge=1)
    total: int = Field(ge=0)
    total_pages: int = Field(alias="totalPages", ge=0)
    has_next: bool = Field(alias="hasNext")
    has_prev: bool = Field(alias="hasPrev")


class ActiveFilter(StrictModel):
    key: str
    label: str

    @classmethod
    def from_chip(cls, chip: FilterChip) -> "ActiveFilter":
        return cls(key=chip.key, label=chip.label)


class ProfileSearchResponse(StrictModel):
    """``{data, pagination, success}`` plus the normalized filters that were applied."""

    data: List[ProfileResult]
    pagination: PaginationMeta
    filters: Dict[str, str] = Field(
        default_factory=dict, description="Applied filters as search parameters"
    )
    active_filters: List[ActiveFilter] = Field(default_factory=list, alias="activeFilters")
    success: bool = True

    @classmethod
    def from_envelope(
        cls,
        envelope: ResultEnvelope,
        filters: Optional[Dict[str, str]] = None,
        chips: Optional[List[FilterChip]] = None,
    ) -> "ProfileSearchResponse":
        return cls(
            data=[ProfileResult.from_hit(hit) for hit in envelope.items],
            pagination=PaginationMeta(
                page=envelope.page,
                limit=envelope.page_size,
                total=envelope.total,
                total_pages=envelope.total_pages,
                has_next=envelope.has_next,
                has_prev=envelope.has_prev,
            ),
            filters=filters or {},
            active_filters=[ActiveFilter.from_chip(chip) for chip in chips or []],
        )
