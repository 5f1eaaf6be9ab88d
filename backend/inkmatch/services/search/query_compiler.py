# backend/inkmatch/services/search/query_compiler.py
"""
Translate a filter state into SQLAlchemy statements against the profile store.

Every active facet contributes one predicate and all predicates are AND-ed.
Only inside a multi-valued facet (specialties, services, amenities) does the
configured AND/OR operator apply:

- OR: the profile has at least one of the selected values.
- AND: the profile has every selected value (GROUP BY ... HAVING COUNT DISTINCT).

The page query and the count query are generated from the same predicate
tuple, so ``total`` always agrees with the pages a client can actually reach.

The compiler is total over its input: out-of-domain values are normalized
before any predicate is built and nothing here raises for unusual filters.
"""
from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Any, FrozenSet, List, Optional, Tuple

from sqlalchemy import ColumnElement, Float, Select, and_, case, distinct, exists, func, null, or_, select

from inkmatch.core.config import settings
from inkmatch.models.portfolio import PortfolioImage
from inkmatch.models.profile import (
    Profile,
    ProfileAmenity,
    ProfileService,
    ProfileSpecialty,
    ProfileWorkingHours,
)
from inkmatch.models.specialty import Specialty
from inkmatch.services.search.filter_state import (
    DISTANCE_DOMAIN,
    EXPERIENCE_DOMAIN,
    PRICE_DOMAIN,
    TIME_BANDS,
    AdvancedFilterState,
    AvailabilityFilter,
    Domain,
    FacetOperator,
    FilterState,
    NumericRange,
    ProfileTypeFilter,
    SortBy,
    SortOrder,
    TimeOfDay,
    normalize,
)
from inkmatch.services.search.geo import (
    DEGREES_TO_RADIANS,
    DistanceUnit,
    GeoPoint,
    earth_radius,
    latitude_delta,
)

logger = logging.getLogger(__name__)

LIKE_ESCAPE = "\\"


def like_pattern(text: str) -> str:
    """Case-insensitive substring pattern with LIKE wildcards escaped."""
    escaped = (
        text.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )
    return f"%{escaped}%"


@dataclass(frozen=True)
class CompiledQuery:
    """A fully built search plan: shared predicates, ordering and page window."""

    state: FilterState
    predicates: Tuple[ColumnElement[bool], ...]
    order_by: Tuple[ColumnElement[Any], ...]
    sort_by: SortBy
    sort_order: SortOrder
    page: int
    page_size: int
    distance: Optional[ColumnElement[float]] = None
    reference: Optional[GeoPoint] = None
    facets: Tuple[str, ...] = ()
    adjusted: Tuple[str, ...] = field(default=())

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size

    @property
    def limit(self) -> int:
        return self.page_size

    def page_statement(self) -> Select:
        """Rows for the requested page, as ``(Profile, distance-or-None)``."""
        distance_column = (
            self.distance.label("distance")
            if self.distance is not None
            else null().label("distance")
        )
        return (
            select(Profile, distance_column)
            .where(*self.predicates)
            .order_by(*self.order_by)
            .offset(self.offset)
            .limit(self.limit)
        )

    def count_statement(self) -> Select:
        """Total matching rows under the identical predicate set."""
        return select(func.count(Profile.id)).where(*self.predicates)


class QueryCompiler:
    """
    Builds ``CompiledQuery`` plans from filter states.

    Stateless apart from the distance unit, so one instance can serve every request.
    """

    def __init__(self, distance_unit: Optional[DistanceUnit] = None) -> None:
        self.distance_unit: DistanceUnit = distance_unit or settings.search_distance_unit

    def compile(self, state: FilterState, reference: Optional[GeoPoint] = None) -> CompiledQuery:
        normalized = normalize(state)
        state = normalized.state

        predicates: List[ColumnElement[bool]] = []
        facets: List[str] = []

        def add(name: str, predicate: Optional[ColumnElement[bool]]) -> None:
            if predicate is not None:
                predicates.append(predicate)
                facets.append(name)

        add("query", self._text_predicate(state.query))
        if state.profile_type != ProfileTypeFilter.ALL:
            add("profile_type", Profile.profile_type == state.profile_type.value)
        if state.location:
            add("location", Profile.location.ilike(like_pattern(state.location), escape=LIKE_ESCAPE))

        advanced = state if isinstance(state, AdvancedFilterState) else None

        add(
            "specialties",
            self._facet_predicate(
                state.specialties,
                advanced.specialty_operator if advanced else FacetOperator.OR,
                ProfileSpecialty.profile_id,
                ProfileSpecialty.specialty_id,
            ),
        )
        if advanced is not None:
            add(
                "services",
                self._facet_predicate(
                    advanced.services,
                    advanced.services_operator,
                    ProfileService.profile_id,
                    ProfileService.name,
                ),
            )
        add(
            "amenities",
            self._facet_predicate(
                state.amenities,
                advanced.amenities_operator if advanced else FacetOperator.OR,
                ProfileAmenity.profile_id,
                ProfileAmenity.name,
            ),
        )

        if state.min_rating > 0:
            add("min_rating", Profile.rating >= state.min_rating)
        add("price_range", self._range_predicate(Profile.hourly_rate, state.price_range, PRICE_DOMAIN))
        add(
            "experience_range",
            self._range_predicate(Profile.years_experience, state.experience_range, EXPERIENCE_DOMAIN),
        )

        distance = self._distance_expression(reference) if reference is not None else None
        if distance is not None and state.max_distance < DISTANCE_DOMAIN.maximum:
            add("max_distance", self._distance_predicate(distance, reference, state.max_distance))

        add("availability", self._availability_predicate(state))

        include_inactive = advanced.include_inactive if advanced else False
        if not include_inactive:
            predicates.append(Profile.is_active.is_(True))
        if advanced is not None:
            if advanced.verified_only:
                add("verified_only", Profile.is_verified.is_(True))
            if advanced.has_portfolio:
                add("has_portfolio", exists().where(PortfolioImage.profile_id == Profile.id))
            if advanced.accepts_new_clients:
                add("accepts_new_clients", Profile.accepts_new_clients.is_(True))

        sort_by, sort_order = self._effective_sort(state, reference)
        if sort_by == SortBy.DISTANCE and "max_distance" not in facets:
            # Profiles without a coordinate cannot be ranked by distance.
            predicates.append(and_(Profile.latitude.isnot(None), Profile.longitude.isnot(None)))
        order_by = self._order_by(state, sort_by, sort_order, distance)

        compiled = CompiledQuery(
            state=state,
            predicates=tuple(predicates),
            order_by=tuple(order_by),
            sort_by=sort_by,
            sort_order=sort_order,
            page=state.page,
            page_size=state.page_size,
            distance=distance,
            reference=reference,
            facets=tuple(facets),
            adjusted=normalized.adjusted,
        )
        logger.debug(
            "Compiled profile search: facets=%s sort=%s %s page=%d size=%d",
            ",".join(compiled.facets) or "-",
            sort_by.value,
            sort_order.value,
            compiled.page,
            compiled.page_size,
        )
        return compiled

    # ------------------------------------------------------------------
    # Predicates
    # ------------------------------------------------------------------

    @staticmethod
    def _text_predicate(query: str) -> Optional[ColumnElement[bool]]:
        if not query:
            return None
        pattern = like_pattern(query)
        specialty_match = (
            exists()
            .where(ProfileSpecialty.profile_id == Profile.id)
            .where(ProfileSpecialty.specialty_id == Specialty.id)
            .where(Specialty.name.ilike(pattern, escape=LIKE_ESCAPE))
        )
        service_match = (
            exists()
            .where(ProfileService.profile_id == Profile.id)
            .where(ProfileService.name.ilike(pattern, escape=LIKE_ESCAPE))
        )
        return or_(
            Profile.name.ilike(pattern, escape=LIKE_ESCAPE),
            Profile.bio.ilike(pattern, escape=LIKE_ESCAPE),
            Profile.location.ilike(pattern, escape=LIKE_ESCAPE),
            specialty_match,
            service_match,
        )

    @staticmethod
    def _facet_predicate(
        values: FrozenSet[str],
        operator: FacetOperator,
        owner_column: Any,
        value_column: Any,
    ) -> Optional[ColumnElement[bool]]:
        if not values:
            return None
        selected = sorted(values)
        matching = select(owner_column).where(value_column.in_(selected))
        if operator == FacetOperator.AND and len(selected) > 1:
            matching = matching.group_by(owner_column).having(
                func.count(distinct(value_column)) == len(selected)
            )
        return Profile.id.in_(matching)

    @staticmethod
    def _range_predicate(
        column: Any, value: NumericRange, domain: Domain
    ) -> Optional[ColumnElement[bool]]:
        """
        Inclusive bounds; a bound at the domain edge does not filter.

        A missing value only fails the range when the lower bound is above the
        domain minimum.
        """
        conditions: List[ColumnElement[bool]] = []
        if value.low > domain.minimum:
            conditions.append(column >= value.low)
        if value.high < domain.maximum:
            upper = column <= value.high
            conditions.append(upper if conditions else or_(column.is_(None), upper))
        if not conditions:
            return None
        return and_(*conditions)

    def _distance_expression(self, reference: GeoPoint) -> ColumnElement[float]:
        """Haversine distance from ``reference`` to each profile, in the configured unit."""
        ref_lat = reference.latitude * DEGREES_TO_RADIANS
        lat = Profile.latitude * DEGREES_TO_RADIANS
        half_dlat = (Profile.latitude - reference.latitude) * (DEGREES_TO_RADIANS / 2.0)
        half_dlng = (Profile.longitude - reference.longitude) * (DEGREES_TO_RADIANS / 2.0)
        sin_dlat = func.sin(half_dlat, type_=Float)
        sin_dlng = func.sin(half_dlng, type_=Float)
        cos_product = func.cos(ref_lat, type_=Float) * func.cos(lat, type_=Float)
        h = sin_dlat * sin_dlat + cos_product * sin_dlng * sin_dlng
        radius = earth_radius(self.distance_unit)
        central_angle = func.asin(
            func.sqrt(func.least(1.0, h, type_=Float), type_=Float), type_=Float
        )
        haversine = 2.0 * radius * central_angle
        return case(
            (and_(Profile.latitude.isnot(None), Profile.longitude.isnot(None)), haversine),
            else_=None,
        )

    def _distance_predicate(
        self, distance: ColumnElement[float], reference: GeoPoint, max_distance: float
    ) -> ColumnElement[bool]:
        delta = latitude_delta(max_distance, self.distance_unit)
        return and_(
            Profile.latitude.isnot(None),
            Profile.longitude.isnot(None),
            Profile.latitude.between(reference.latitude - delta, reference.latitude + delta),
            distance <= max_distance,
        )

    @staticmethod
    def _availability_predicate(state: FilterState) -> Optional[ColumnElement[bool]]:
        if state.availability == AvailabilityFilter.AVAILABLE:
            return Profile.is_available.is_(True)
        if state.availability == AvailabilityFilter.BUSY:
            return Profile.is_available.is_(False)
        if state.availability != AvailabilityFilter.CUSTOM or not isinstance(state, AdvancedFilterState):
            return None

        days = sorted(day.value for day in state.availability_days)
        if not days and state.availability_time == TimeOfDay.ANY:
            return None

        schedule = exists().where(ProfileWorkingHours.profile_id == Profile.id)
        if days:
            schedule = schedule.where(ProfileWorkingHours.weekday.in_(days))
        if state.availability_time != TimeOfDay.ANY:
            band_start, band_end = TIME_BANDS[state.availability_time]
            schedule = schedule.where(
                ProfileWorkingHours.opens_minute < band_end,
                ProfileWorkingHours.closes_minute > band_start,
            )
        return schedule

    # ------------------------------------------------------------------
    # Ordering
    # ------------------------------------------------------------------

    @staticmethod
    def _effective_sort(
        state: FilterState, reference: Optional[GeoPoint]
    ) -> Tuple[SortBy, SortOrder]:
        sort_by, sort_order = state.sort_by, state.sort_order
        if sort_by == SortBy.DISTANCE and reference is None:
            logger.debug("Distance sort requested without a reference coordinate; using relevance")
            sort_by = SortBy.RELEVANCE
        if sort_by == SortBy.RELEVANCE and not state.query:
            return SortBy.NEWEST, SortOrder.DESC
        return sort_by, sort_order

    @staticmethod
    def _order_by(
        state: FilterState,
        sort_by: SortBy,
        sort_order: SortOrder,
        distance: Optional[ColumnElement[float]],
    ) -> List[ColumnElement[Any]]:
        descending = sort_order == SortOrder.DESC

        def directed(column: Any) -> ColumnElement[Any]:
            return column.desc() if descending else column.asc()

        if sort_by == SortBy.RELEVANCE:
            # Name matches first, then higher rating, then most recent.
            name_match = case(
                (Profile.name.ilike(like_pattern(state.query), escape=LIKE_ESCAPE), 0),
                else_=1,
            )
            order: List[ColumnElement[Any]] = [
                name_match.asc(),
                Profile.rating.desc(),
                Profile.created_at.desc(),
            ]
        elif sort_by == SortBy.RATING:
            order = [directed(Profile.rating)]
        elif sort_by == SortBy.PRICE:
            order = [Profile.hourly_rate.is_(None).asc(), directed(Profile.hourly_rate)]
        elif sort_by == SortBy.EXPERIENCE:
            order = [Profile.years_experience.is_(None).asc(), directed(Profile.years_experience)]
        elif sort_by == SortBy.DISTANCE and distance is not None:
            order = [directed(distance)]
        else:
            order = [directed(Profile.created_at)]

        order.append(Profile.id.asc())
        return order
