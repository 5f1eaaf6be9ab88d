# backend/tests/unit/test_query_compiler.py
"""Plan-level tests for the query compiler; row-level behavior lives in integration tests."""

import pytest

pytestmark = pytest.mark.unit

from inkmatch.services.search.filter_state import (
    AdvancedFilterState,
    AvailabilityFilter,
    BasicFilterState,
    NumericRange,
    SortBy,
    SortOrder,
    TimeOfDay,
)
from inkmatch.services.search.geo import GeoPoint
from inkmatch.services.search.query_compiler import QueryCompiler, like_pattern

REFERENCE = GeoPoint(30.2672, -97.7431)


@pytest.fixture
def compiler():
    return QueryCompiler(distance_unit="mi")


class TestLikePattern:
    def test_wraps_in_wildcards(self):
        assert like_pattern("koi") == "%koi%"

    def test_escapes_wildcards(self):
        assert like_pattern("100%_off") == "%100\\%\\_off%"
        assert like_pattern("a\\b") == "%a\\\\b%"


class TestCompile:
    def test_default_state_has_only_the_active_profile_predicate(self, compiler):
        compiled = compiler.compile(BasicFilterState())
        assert compiled.facets == ()
        assert len(compiled.predicates) == 1

    def test_include_inactive_drops_the_active_predicate(self, compiler):
        compiled = compiler.compile(AdvancedFilterState(include_inactive=True))
        assert compiled.predicates == ()

    def test_each_active_facet_contributes_a_predicate(self, compiler):
        state = AdvancedFilterState(
            query="koi",
            location="Austin",
            specialties=frozenset({"s1"}),
            services=frozenset({"Cover-ups"}),
            amenities=frozenset({"WiFi"}),
            min_rating=4,
            price_range=NumericRange(50, 200),
            availability=AvailabilityFilter.AVAILABLE,
            verified_only=True,
        )
        compiled = compiler.compile(state)
        assert compiled.facets == (
            "query",
            "location",
            "specialties",
            "services",
            "amenities",
            "min_rating",
            "price_range",
            "availability",
            "verified_only",
        )

    def test_domain_edge_bounds_do_not_filter(self, compiler):
        compiled = compiler.compile(BasicFilterState(price_range=NumericRange(0, 500)))
        assert "price_range" not in compiled.facets

    def test_custom_availability_without_schedule_is_a_no_op(self, compiler):
        compiled = compiler.compile(AdvancedFilterState(availability=AvailabilityFilter.CUSTOM))
        assert "availability" not in compiled.facets
        compiled = compiler.compile(
            AdvancedFilterState(availability=AvailabilityFilter.CUSTOM, availability_time=TimeOfDay.MORNING)
        )
        assert "availability" in compiled.facets

    def test_distance_filter_needs_a_reference(self, compiler):
        without = compiler.compile(BasicFilterState(max_distance=10))
        assert "max_distance" not in without.facets
        assert without.distance is None
        with_ref = compiler.compile(BasicFilterState(max_distance=10), REFERENCE)
        assert "max_distance" in with_ref.facets
        assert with_ref.distance is not None

    def test_input_is_normalized_first(self, compiler):
        compiled = compiler.compile(BasicFilterState(min_rating=9, page=0))
        assert compiled.state.min_rating == 5
        assert compiled.page == 1
        assert set(compiled.adjusted) == {"min_rating", "page"}

    def test_page_window(self, compiler):
        compiled = compiler.compile(BasicFilterState(page=3, page_size=12))
        assert compiled.offset == 24
        assert compiled.limit == 12


class TestEffectiveSort:
    def test_relevance_without_query_is_newest_first(self, compiler):
        compiled = compiler.compile(BasicFilterState(sort_order=SortOrder.ASC))
        assert (compiled.sort_by, compiled.sort_order) == (SortBy.NEWEST, SortOrder.DESC)

    def test_relevance_with_query_is_kept(self, compiler):
        compiled = compiler.compile(BasicFilterState(query="koi"))
        assert compiled.sort_by == SortBy.RELEVANCE

    def test_distance_without_reference_falls_back(self, compiler):
        compiled = compiler.compile(BasicFilterState(query="koi", sort_by=SortBy.DISTANCE))
        assert compiled.sort_by == SortBy.RELEVANCE

    def test_distance_with_reference_is_kept(self, compiler):
        compiled = compiler.compile(
            BasicFilterState(sort_by=SortBy.DISTANCE, sort_order=SortOrder.ASC), REFERENCE
        )
        assert (compiled.sort_by, compiled.sort_order) == (SortBy.DISTANCE, SortOrder.ASC)

    def test_id_is_always_the_final_tie_break(self, compiler):
        for sort_by in SortBy:
            compiled = compiler.compile(BasicFilterState(query="x", sort_by=sort_by), REFERENCE)
            assert "profiles.id" in str(compiled.order_by[-1])


class TestStatements:
    def test_page_and_count_share_predicates(self, compiler):
        compiled = compiler.compile(BasicFilterState(query="koi", min_rating=4))
        page_sql = str(compiled.page_statement())
        count_sql = str(compiled.count_statement())
        assert "profiles.rating >=" in page_sql
        assert "profiles.rating >=" in count_sql
        assert "count(profiles.id)" in count_sql
        assert "LIMIT" in page_sql
        assert "LIMIT" not in count_sql
