# backend/tests/unit/test_filter_sync.py
"""Unit tests for encoding and decoding filter state as query parameters."""

import pytest

pytestmark = pytest.mark.unit

from inkmatch.core.exceptions import ValidationException
from inkmatch.services.search.filter_state import (
    AdvancedFilterState,
    AvailabilityFilter,
    BasicFilterState,
    FacetOperator,
    NumericRange,
    ProfileTypeFilter,
    SortBy,
    SortOrder,
    TimeOfDay,
    Weekday,
    create_default,
)
from inkmatch.services.search.filter_sync import (
    apply_changes,
    decode_params,
    format_number,
    from_params,
    from_query_string,
    parse_pagination,
    to_params,
    to_query_string,
    wants_advanced,
)


class TestEncoding:
    def test_default_states_encode_to_minimal_maps(self):
        assert to_params(create_default("basic")) == {}
        assert to_params(create_default("advanced")) == {"advanced": "true"}

    def test_api_style_keys(self):
        state = BasicFilterState(
            query="koi fish",
            profile_type=ProfileTypeFilter.ARTIST,
            specialties=frozenset({"b", "a"}),
            min_rating=4.5,
            max_distance=25,
            price_range=NumericRange(50, 200),
            sort_by=SortBy.RATING,
            sort_order=SortOrder.ASC,
            page=2,
        )
        assert to_params(state, "api") == {
            "q": "koi fish",
            "type": "artist",
            "specialties": "a,b",
            "minRating": "4.5",
            "maxDistance": "25",
            "minPrice": "50",
            "maxPrice": "200",
            "sortBy": "rating",
            "sortOrder": "asc",
            "page": "2",
        }

    def test_url_style_uses_aliases_and_combined_ranges(self):
        state = BasicFilterState(
            min_rating=4,
            max_distance=10,
            experience_range=NumericRange(2, 20),
            sort_by=SortBy.NEWEST,
        )
        assert to_params(state, "url") == {
            "rating": "4",
            "distance": "10",
            "experience": "2-20",
            "sort": "newest",
        }

    def test_single_moved_bound_only_emits_that_bound_in_api_style(self):
        params = to_params(BasicFilterState(price_range=NumericRange(0, 150)), "api")
        assert params == {"maxPrice": "150"}

    def test_advanced_fields_are_encoded(self):
        state = AdvancedFilterState(
            specialties=frozenset({"s1", "s2"}),
            specialty_operator=FacetOperator.AND,
            services=frozenset({"Touch-ups"}),
            availability=AvailabilityFilter.CUSTOM,
            availability_days=frozenset({Weekday.SATURDAY, Weekday.FRIDAY}),
            availability_time=TimeOfDay.EVENING,
            verified_only=True,
        )
        params = to_params(state)
        assert params["advanced"] == "true"
        assert params["specialty_op"] == "AND"
        assert params["services"] == "Touch-ups"
        assert params["availability"] == "custom"
        assert params["availability_days"] == "friday,saturday"
        assert params["availability_time"] == "evening"
        assert params["verified_only"] == "true"
        assert "services_op" not in params
        assert "has_portfolio" not in params

    def test_limit_only_when_not_default(self):
        assert "limit" not in to_params(BasicFilterState(page_size=12))
        assert to_params(BasicFilterState(page_size=24))["limit"] == "24"

    def test_unknown_style_raises(self):
        with pytest.raises(ValueError):
            to_params(BasicFilterState(), "xml")  # type: ignore[arg-type]

    def test_format_number(self):
        assert format_number(3.0) == "3"
        assert format_number(3.5) == "3.5"


class TestRoundTrip:
    @pytest.mark.parametrize("style", ["api", "url"])
    def test_advanced_state_survives_round_trip(self, style):
        state = AdvancedFilterState(
            query="fine line",
            profile_type=ProfileTypeFilter.STUDIO,
            location="Portland",
            specialties=frozenset({"01HX", "01HY"}),
            specialty_operator=FacetOperator.AND,
            min_rating=3.5,
            max_distance=15,
            price_range=NumericRange(100, 400),
            experience_range=NumericRange(5, 20),
            availability=AvailabilityFilter.CUSTOM,
            availability_days=frozenset({Weekday.MONDAY, Weekday.TUESDAY}),
            availability_time=TimeOfDay.MORNING,
            services=frozenset({"Cover-ups", "Custom designs"}),
            services_operator=FacetOperator.AND,
            amenities=frozenset({"WiFi"}),
            amenities_operator=FacetOperator.AND,
            sort_by=SortBy.PRICE,
            sort_order=SortOrder.ASC,
            has_portfolio=True,
            accepts_new_clients=True,
            page=3,
            page_size=24,
        )
        assert from_params(to_params(state, style)) == state

    @pytest.mark.parametrize("style", ["api", "url"])
    def test_comma_inside_a_value_survives_round_trip(self, style):
        state = AdvancedFilterState(
            services=frozenset({"Cover-ups, touch-ups", "Walk-ins"}),
            amenities=frozenset({"A,B", "C\\D"}),
        )
        params = to_params(state, style)
        assert params["services"] == "Cover-ups\\, touch-ups,Walk-ins"
        assert from_params(params) == state
        assert from_query_string(to_query_string(state, style)) == state

    def test_basic_state_survives_query_string(self):
        state = BasicFilterState(query="a&b=c", amenities=frozenset({"Parking"}), page=2)
        assert from_query_string(to_query_string(state)) == state
        assert from_query_string("?" + to_query_string(state)) == state


class TestDecoding:
    def test_empty_params_give_basic_default(self):
        assert from_params({}) == create_default("basic")

    def test_both_range_forms_are_accepted(self):
        combined = from_params({"price": "50-200"})
        split = from_params({"minPrice": "50", "maxPrice": "200"})
        assert combined.price_range == split.price_range == NumericRange(50, 200)

    def test_separate_bound_overrides_combined(self):
        state = from_params({"price": "50-200", "maxPrice": "300"})
        assert state.price_range == NumericRange(50, 300)

    def test_malformed_values_fall_back_to_defaults(self):
        state = from_params(
            {
                "minRating": "abc",
                "maxDistance": "nan",
                "price": "cheap",
                "type": "wizard",
                "sortBy": "popularity",
                "availability": "sometimes",
            }
        )
        assert state == create_default("basic")

    def test_out_of_domain_values_are_clamped_and_reported(self):
        result = decode_params({"minRating": "9", "maxPrice": "1000", "minPrice": "700"})
        assert result.state.min_rating == 5
        assert result.state.price_range == NumericRange(500, 500)
        assert set(result.adjusted) == {"min_rating", "price_range"}

    def test_unknown_keys_are_ignored(self):
        assert from_params({"utm_source": "newsletter"}) == create_default("basic")

    def test_repeated_keys_are_folded(self):
        state = from_params({"specialties": ["a", "b"], "q": ["koi"]})
        assert state.specialties == frozenset({"a", "b"})
        assert state.query == "koi"

    def test_enum_values_are_case_insensitive(self):
        state = from_params({"sortBy": "RATING", "specialty_op": "and"})
        assert state.sort_by == SortBy.RATING
        assert state.specialty_operator == FacetOperator.AND

    def test_unknown_weekdays_are_dropped(self):
        state = from_params({"availability_days": "monday,funday"})
        assert state.availability_days == frozenset({Weekday.MONDAY})


class TestModeDetection:
    @pytest.mark.parametrize(
        "params",
        [
            {"advanced": "true"},
            {"advanced": "1"},
            {"verified_only": "false"},
            {"services": "Cover-ups"},
            {"availability": "custom"},
        ],
    )
    def test_advanced_is_inferred(self, params):
        assert wants_advanced(params)
        assert from_params(params).mode == "advanced"

    def test_basic_params_stay_basic(self):
        assert not wants_advanced({"q": "koi", "availability": "available", "advanced": "false"})


class TestPagination:
    def test_defaults(self):
        assert parse_pagination({}) == (1, 12)

    @pytest.mark.parametrize(
        "params",
        [
            {"page": "0"},
            {"page": "-1"},
            {"page": "two"},
            {"page": "10001"},
            {"page": "99999999999999999999"},
            {"limit": "0"},
            {"limit": "51"},
            {"limit": "1.5"},
        ],
    )
    def test_malformed_pagination_is_refused(self, params):
        with pytest.raises(ValidationException) as exc_info:
            decode_params(params)
        assert exc_info.value.status_code == 400
        assert exc_info.value.code == "VALIDATION_ERROR"

    def test_non_integer_keeps_parse_error_as_cause(self):
        with pytest.raises(ValidationException) as exc_info:
            parse_pagination({"page": "two"})
        assert isinstance(exc_info.value.__cause__, ValueError)

    def test_limit_bounds_are_inclusive(self):
        assert parse_pagination({"limit": "1"}) == (1, 1)
        assert parse_pagination({"limit": "50", "page": "7"}) == (7, 50)
        assert parse_pagination({"page": "10000"}) == (10000, 12)


class TestApplyChanges:
    def test_filter_change_resets_page(self):
        state = BasicFilterState(page=5)
        updated = apply_changes(state, min_rating=4)
        assert updated.min_rating == 4
        assert updated.page == 1

    def test_page_change_alone_keeps_page(self):
        updated = apply_changes(BasicFilterState(page=2), page=3)
        assert updated.page == 3

    def test_unchanged_value_keeps_page(self):
        state = BasicFilterState(query="koi", page=4)
        assert apply_changes(state, query="koi") == state

    def test_filter_and_page_together_still_resets(self):
        updated = apply_changes(BasicFilterState(page=2), query="rose", page=6)
        assert updated.page == 1

    def test_no_changes_returns_same_object(self):
        state = BasicFilterState()
        assert apply_changes(state) is state
