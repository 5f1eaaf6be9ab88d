# backend/inkmatch/services/search/filter_state.py
"""
Canonical filter state for profile discovery.

Two frozen dataclasses form a tagged union on ``mode``:

- ``BasicFilterState``: the reduced field set shown in the simple filter panel.
- ``AdvancedFilterState``: the full field set with per-facet AND/OR operators,
  service offerings, custom availability and boolean options.

States are immutable values. Every change produces a new object via
``dataclasses.replace`` so downstream consumers can compare by equality.

This module also owns the per-field defaults and domains, normalization
(clamping out-of-domain values) and the "active filter" chips used for badge
counts and reset detection.
"""
from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from enum import Enum
import logging
from typing import Dict, FrozenSet, Iterable, List, Literal, Tuple, Union

from inkmatch.core.config import settings

logger = logging.getLogger(__name__)


class ProfileTypeFilter(str, Enum):
    ALL = "all"
    ARTIST = "artist"
    STUDIO = "studio"


class FacetOperator(str, Enum):
    AND = "AND"
    OR = "OR"


class AvailabilityFilter(str, Enum):
    ALL = "all"
    AVAILABLE = "available"
    BUSY = "busy"
    CUSTOM = "custom"


class TimeOfDay(str, Enum):
    ANY = "any"
    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"


class Weekday(str, Enum):
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"


class SortBy(str, Enum):
    RELEVANCE = "relevance"
    RATING = "rating"
    DISTANCE = "distance"
    PRICE = "price"
    EXPERIENCE = "experience"
    NEWEST = "newest"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


FilterMode = Literal["basic", "advanced"]


@dataclass(frozen=True)
class NumericRange:
    """Inclusive numeric bounds."""

    low: float
    high: float


@dataclass(frozen=True)
class Domain:
    """Valid closed interval for a numeric field."""

    minimum: float
    maximum: float

    def clamp(self, value: float) -> float:
        return min(max(value, self.minimum), self.maximum)


RATING_DOMAIN = Domain(0.0, 5.0)
DISTANCE_DOMAIN = Domain(1.0, 50.0)
PRICE_DOMAIN = Domain(0.0, 500.0)
EXPERIENCE_DOMAIN = Domain(0.0, 20.0)

DEFAULT_MIN_RATING = 0.0
DEFAULT_MAX_DISTANCE = DISTANCE_DOMAIN.maximum
DEFAULT_PRICE_RANGE = NumericRange(PRICE_DOMAIN.minimum, PRICE_DOMAIN.maximum)
DEFAULT_EXPERIENCE_RANGE = NumericRange(EXPERIENCE_DOMAIN.minimum, EXPERIENCE_DOMAIN.maximum)

MIN_PAGE_SIZE = 1
# Deepest page a client may request; keeps OFFSET within what every store binds.
MAX_PAGE = 10_000

# Time-of-day bands in minutes since midnight, [start, end).
TIME_BANDS: Dict[TimeOfDay, Tuple[int, int]] = {
    TimeOfDay.MORNING: (9 * 60, 12 * 60),
    TimeOfDay.AFTERNOON: (12 * 60, 18 * 60),
    TimeOfDay.EVENING: (18 * 60, 22 * 60),
}

BASIC_AVAILABILITY: FrozenSet[AvailabilityFilter] = frozenset(
    {AvailabilityFilter.ALL, AvailabilityFilter.AVAILABLE, AvailabilityFilter.BUSY}
)


def default_page_size() -> int:
    return settings.search_default_page_size


def max_page_size() -> int:
    return settings.search_max_page_size


@dataclass(frozen=True)
class BasicFilterState:
    """Reduced filter set; facets always combine with OR."""

    query: str = ""
    profile_type: ProfileTypeFilter = ProfileTypeFilter.ALL
    location: str = ""
    specialties: FrozenSet[str] = frozenset()
    min_rating: float = DEFAULT_MIN_RATING
    max_distance: float = DEFAULT_MAX_DISTANCE
    price_range: NumericRange = DEFAULT_PRICE_RANGE
    experience_range: NumericRange = DEFAULT_EXPERIENCE_RANGE
    availability: AvailabilityFilter = AvailabilityFilter.ALL
    amenities: FrozenSet[str] = frozenset()
    sort_by: SortBy = SortBy.RELEVANCE
    sort_order: SortOrder = SortOrder.DESC
    page: int = 1
    page_size: int = field(default_factory=default_page_size)

    mode: Literal["basic"] = field(default="basic", init=False)


@dataclass(frozen=True)
class AdvancedFilterState:
    """Full filter set with explicit per-facet operators."""

    query: str = ""
    profile_type: ProfileTypeFilter = ProfileTypeFilter.ALL
    location: str = ""
    specialties: FrozenSet[str] = frozenset()
    specialty_operator: FacetOperator = FacetOperator.OR
    min_rating: float = DEFAULT_MIN_RATING
    max_distance: float = DEFAULT_MAX_DISTANCE
    price_range: NumericRange = DEFAULT_PRICE_RANGE
    experience_range: NumericRange = DEFAULT_EXPERIENCE_RANGE
    availability: AvailabilityFilter = AvailabilityFilter.ALL
    availability_days: FrozenSet[Weekday] = frozenset()
    availability_time: TimeOfDay = TimeOfDay.ANY
    services: FrozenSet[str] = frozenset()
    services_operator: FacetOperator = FacetOperator.OR
    amenities: FrozenSet[str] = frozenset()
    amenities_operator: FacetOperator = FacetOperator.OR
    sort_by: SortBy = SortBy.RELEVANCE
    sort_order: SortOrder = SortOrder.DESC
    include_inactive: bool = False
    verified_only: bool = False
    has_portfolio: bool = False
    accepts_new_clients: bool = False
    page: int = 1
    page_size: int = field(default_factory=default_page_size)

    mode: Literal["advanced"] = field(default="advanced", init=False)


FilterState = Union[BasicFilterState, AdvancedFilterState]

PAGINATION_FIELDS = frozenset({"page", "page_size"})


def create_default(mode: FilterMode = "basic") -> FilterState:
    """Return the zero-state filter for the given mode."""
    if mode == "basic":
        return BasicFilterState()
    if mode == "advanced":
        return AdvancedFilterState()
    raise ValueError(f"Unknown filter mode: {mode!r}")


def state_fields(state: FilterState) -> List[str]:
    """Names of the user-settable fields of a state (excludes the mode tag)."""
    return [f.name for f in fields(state) if f.init]


# ---------------------------------------------------------------------------
# Normalization
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class NormalizedFilters:
    """A normalized state plus the names of fields that had to be adjusted."""

    state: FilterState
    adjusted: Tuple[str, ...] = ()


def _normalize_range(value: NumericRange, domain: Domain) -> NumericRange:
    low = domain.clamp(float(value.low))
    high = domain.clamp(float(value.high))
    if low > high:
        low, high = high, low
    return NumericRange(low, high)


def _clean_tokens(values: Iterable[str]) -> FrozenSet[str]:
    return frozenset(v.strip() for v in values if v and v.strip())


def normalize(state: FilterState) -> NormalizedFilters:
    """
    Clamp every out-of-domain value to its nearest valid value.

    Never raises. The returned ``adjusted`` tuple names each field that changed,
    so callers can log a normalization warning for diagnostics.
    """
    changes: Dict[str, object] = {}

    query = state.query.strip()
    if query != state.query:
        changes["query"] = query
    location = state.location.strip()
    if location != state.location:
        changes["location"] = location

    specialties = _clean_tokens(state.specialties)
    if specialties != state.specialties:
        changes["specialties"] = specialties
    amenities = _clean_tokens(state.amenities)
    if amenities != state.amenities:
        changes["amenities"] = amenities

    min_rating = RATING_DOMAIN.clamp(float(state.min_rating))
    if min_rating != state.min_rating:
        changes["min_rating"] = min_rating
    max_distance = DISTANCE_DOMAIN.clamp(float(state.max_distance))
    if max_distance != state.max_distance:
        changes["max_distance"] = max_distance

    price_range = _normalize_range(state.price_range, PRICE_DOMAIN)
    if price_range != state.price_range:
        changes["price_range"] = price_range
    experience_range = _normalize_range(state.experience_range, EXPERIENCE_DOMAIN)
    if experience_range != state.experience_range:
        changes["experience_range"] = experience_range

    page = min(max(1, int(state.page)), MAX_PAGE)
    if page != state.page:
        changes["page"] = page
    page_size = min(max(MIN_PAGE_SIZE, int(state.page_size)), max_page_size())
    if page_size != state.page_size:
        changes["page_size"] = page_size

    if isinstance(state, BasicFilterState):
        if state.availability not in BASIC_AVAILABILITY:
            changes["availability"] = AvailabilityFilter.ALL
    else:
        services = _clean_tokens(state.services)
        if services != state.services:
            changes["services"] = services

    if not changes:
        return NormalizedFilters(state=state)

    adjusted = tuple(sorted(changes))
    logger.info(
        "Normalized out-of-domain filter values: %s",
        ", ".join(adjusted),
        extra={"adjusted_fields": adjusted},
    )
    return NormalizedFilters(state=replace(state, **changes), adjusted=adjusted)


# ---------------------------------------------------------------------------
# Active filters
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FilterChip:
    """A removable badge describing one active filter field."""

    key: str
    label: str


def _format_amount(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else f"{value:g}"


def _range_is_default(value: NumericRange, default: NumericRange) -> bool:
    return value.low == default.low and value.high == default.high


def _range_label(prefix: str, value: NumericRange, domain: Domain, unit: str = "") -> str:
    high = _format_amount(value.high)
    if value.high >= domain.maximum:
        high = f"{high}+"
    return f"{prefix}: {unit}{_format_amount(value.low)}-{unit}{high}"


def _joined(values: Iterable[str]) -> str:
    return ", ".join(sorted(str(v) for v in values))


def active_filter_chips(state: FilterState) -> List[FilterChip]:
    """
    One chip per field that deviates from its default.

    Sorting, facet operators and pagination qualify a search but are not
    filters in their own right, so they never produce a chip.
    """
    chips: List[FilterChip] = []
    if state.query:
        chips.append(FilterChip("query", f'Search: "{state.query}"'))
    if state.profile_type != ProfileTypeFilter.ALL:
        chips.append(FilterChip("profile_type", f"Type: {state.profile_type.value}"))
    if state.location:
        chips.append(FilterChip("location", f"Location: {state.location}"))
    if state.specialties:
        chips.append(FilterChip("specialties", f"Specialties: {_joined(state.specialties)}"))
    if state.min_rating > DEFAULT_MIN_RATING:
        chips.append(FilterChip("min_rating", f"Rating: {_format_amount(state.min_rating)}+"))
    if state.max_distance < DEFAULT_MAX_DISTANCE:
        unit = settings.search_distance_unit
        chips.append(
            FilterChip("max_distance", f"Within {_format_amount(state.max_distance)} {unit}")
        )
    if not _range_is_default(state.price_range, DEFAULT_PRICE_RANGE):
        chips.append(
            FilterChip("price_range", _range_label("Price", state.price_range, PRICE_DOMAIN, "$"))
        )
    if not _range_is_default(state.experience_range, DEFAULT_EXPERIENCE_RANGE):
        chips.append(
            FilterChip(
                "experience_range",
                _range_label("Experience", state.experience_range, EXPERIENCE_DOMAIN) + " yrs",
            )
        )
    if state.availability != AvailabilityFilter.ALL:
        chips.append(FilterChip("availability", f"Availability: {state.availability.value}"))

    if isinstance(state, AdvancedFilterState):
        if state.services:
            chips.append(FilterChip("services", f"Services: {_joined(state.services)}"))

    if state.amenities:
        chips.append(FilterChip("amenities", f"Amenities: {_joined(state.amenities)}"))

    if isinstance(state, AdvancedFilterState):
        if state.include_inactive:
            chips.append(FilterChip("include_inactive", "Including inactive"))
        if state.verified_only:
            chips.append(FilterChip("verified_only", "Verified only"))
        if state.has_portfolio:
            chips.append(FilterChip("has_portfolio", "Has portfolio"))
        if state.accepts_new_clients:
            chips.append(FilterChip("accepts_new_clients", "Accepts new clients"))

    return chips


def count_active(state: FilterState) -> int:
    """Number of active filters; always equals the number of rendered chips."""
    return len(active_filter_chips(state))


def has_active_filters(state: FilterState) -> bool:
    return count_active(state) > 0


# Fields reset together with a chip; availability owns its advanced sub-fields.
_CHIP_RESET_FIELDS: Dict[str, Tuple[str, ...]] = {
    "availability": ("availability", "availability_days", "availability_time"),
}


def clear_filter(state: FilterState, key: str) -> FilterState:
    """Reset the field behind one chip to its default and return to page 1."""
    settable = set(state_fields(state)) - PAGINATION_FIELDS
    if key not in settable:
        raise KeyError(f"Unknown filter field for {state.mode} mode: {key}")
    default = create_default(state.mode)
    names = [name for name in _CHIP_RESET_FIELDS.get(key, (key,)) if name in settable]
    changes = {name: getattr(default, name) for name in names}
    changes["page"] = 1
    return replace(state, **changes)


def reset_filters(state: FilterState, *, keep_page_size: bool = True) -> FilterState:
    """Return the default state of the same mode."""
    default = create_default(state.mode)
    if keep_page_size and state.page_size != default.page_size:
        return replace(default, page_size=state.page_size)
    return default
