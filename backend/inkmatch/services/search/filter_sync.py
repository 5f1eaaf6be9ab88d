# backend/inkmatch/services/search/filter_sync.py
"""
Bidirectional mapping between filter state and flat string parameters.

The same parameter map serves two audiences:

- ``style="api"``: the query string sent to ``GET /api/profiles``
  (``minRating``, ``minPrice``/``maxPrice``, ``sortBy`` ...).
- ``style="url"``: the browser-visible URL, using shorter aliases
  (``rating``, ``price=50-200``, ``sort`` ...).

Encoding omits every field at its default so links stay short. Decoding accepts
both styles and both range forms, ignores unknown keys, and falls back to the
field default for malformed values. Only malformed pagination is refused.
"""
from __future__ import annotations

from dataclasses import replace
from enum import Enum
import logging
import math
import re
from typing import Any, Dict, Iterable, List, Literal, Mapping, Optional, Sequence, Tuple, Type, TypeVar, Union
from urllib.parse import parse_qs, urlencode

from inkmatch.core.exceptions import ValidationException
from inkmatch.services.search.filter_state import (
    DEFAULT_EXPERIENCE_RANGE,
    DEFAULT_MAX_DISTANCE,
    DEFAULT_MIN_RATING,
    DEFAULT_PRICE_RANGE,
    MAX_PAGE,
    MIN_PAGE_SIZE,
    PAGINATION_FIELDS,
    AdvancedFilterState,
    AvailabilityFilter,
    BasicFilterState,
    FacetOperator,
    FilterState,
    NormalizedFilters,
    NumericRange,
    ProfileTypeFilter,
    SortBy,
    SortOrder,
    TimeOfDay,
    Weekday,
    default_page_size,
    max_page_size,
    normalize,
)

logger = logging.getLogger(__name__)

ParamStyle = Literal["api", "url"]
ParamValue = Union[str, Sequence[str]]

E = TypeVar("E", bound=Enum)

ADVANCED_FLAG = "advanced"

# Keys that only exist in the advanced field set; any of them forces advanced mode.
ADVANCED_ONLY_KEYS = frozenset(
    {
        "specialty_op",
        "services",
        "services_op",
        "amenities_op",
        "availability_days",
        "availability_time",
        "include_inactive",
        "verified_only",
        "has_portfolio",
        "accepts_new_clients",
    }
)

_STYLE_KEYS: Dict[str, Dict[str, str]] = {
    "api": {
        "min_rating": "minRating",
        "max_distance": "maxDistance",
        "sort_by": "sortBy",
        "sort_order": "sortOrder",
    },
    "url": {
        "min_rating": "rating",
        "max_distance": "distance",
        "sort_by": "sort",
        "sort_order": "order",
    },
}

# Decoding accepts every alias either style produces, preferred spelling first.
_DECODE_ALIASES: Dict[str, Tuple[str, ...]] = {
    "query": ("q", "query"),
    "min_rating": ("minRating", "rating"),
    "max_distance": ("maxDistance", "distance"),
    "sort_by": ("sortBy", "sort"),
    "sort_order": ("sortOrder", "order"),
}

_RANGE_KEYS: Dict[str, Tuple[str, str, str]] = {
    # field -> (combined key, low key, high key)
    "price_range": ("price", "minPrice", "maxPrice"),
    "experience_range": ("experience", "minExperience", "maxExperience"),
}

_RANGE_TOKEN = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*-\s*(\d+(?:\.\d+)?)\s*$")

_TRUE_VALUES = frozenset({"true", "1", "yes", "on"})
_FALSE_VALUES = frozenset({"false", "0", "no", "off"})


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------


def format_number(value: float) -> str:
    """Render integral floats without a trailing '.0'."""
    number = float(value)
    if number.is_integer():
        return str(int(number))
    return repr(number)


def _escape_token(token: str) -> str:
    return token.replace("\\", "\\\\").replace(",", "\\,")


def _join(values: Iterable[Any]) -> str:
    """Comma-join list values; a comma inside a value is written as ``\\,``."""
    tokens = sorted(v.value if isinstance(v, Enum) else str(v) for v in values)
    return ",".join(_escape_token(token) for token in tokens)


def _encode_range(
    params: Dict[str, str],
    field_name: str,
    value: NumericRange,
    default: NumericRange,
    style: ParamStyle,
) -> None:
    if value.low == default.low and value.high == default.high:
        return
    combined, low_key, high_key = _RANGE_KEYS[field_name]
    if style == "url":
        params[combined] = f"{format_number(value.low)}-{format_number(value.high)}"
        return
    if value.low != default.low:
        params[low_key] = format_number(value.low)
    if value.high != default.high:
        params[high_key] = format_number(value.high)


def to_params(state: FilterState, style: ParamStyle = "api") -> Dict[str, str]:
    """Serialize ``state`` to a minimal flat parameter map."""
    if style not in _STYLE_KEYS:
        raise ValueError(f"Unknown parameter style: {style!r}")
    keys = _STYLE_KEYS[style]
    params: Dict[str, str] = {}

    if isinstance(state, AdvancedFilterState):
        params[ADVANCED_FLAG] = "true"

    if state.query:
        params["q"] = state.query
    if state.profile_type != ProfileTypeFilter.ALL:
        params["type"] = state.profile_type.value
    if state.location:
        params["location"] = state.location
    if state.specialties:
        params["specialties"] = _join(state.specialties)
    if state.min_rating != DEFAULT_MIN_RATING:
        params[keys["min_rating"]] = format_number(state.min_rating)
    if state.max_distance != DEFAULT_MAX_DISTANCE:
        params[keys["max_distance"]] = format_number(state.max_distance)
    _encode_range(params, "price_range", state.price_range, DEFAULT_PRICE_RANGE, style)
    _encode_range(params, "experience_range", state.experience_range, DEFAULT_EXPERIENCE_RANGE, style)
    if state.availability != AvailabilityFilter.ALL:
        params["availability"] = state.availability.value
    if state.amenities:
        params["amenities"] = _join(state.amenities)

    if isinstance(state, AdvancedFilterState):
        if state.specialty_operator != FacetOperator.OR:
            params["specialty_op"] = state.specialty_operator.value
        if state.services:
            params["services"] = _join(state.services)
        if state.services_operator != FacetOperator.OR:
            params["services_op"] = state.services_operator.value
        if state.amenities_operator != FacetOperator.OR:
            params["amenities_op"] = state.amenities_operator.value
        if state.availability_days:
            params["availability_days"] = _join(state.availability_days)
        if state.availability_time != TimeOfDay.ANY:
            params["availability_time"] = state.availability_time.value
        for flag in ("include_inactive", "verified_only", "has_portfolio", "accepts_new_clients"):
            if getattr(state, flag):
                params[flag] = "true"

    if state.sort_by != SortBy.RELEVANCE:
        params[keys["sort_by"]] = state.sort_by.value
    if state.sort_order != SortOrder.DESC:
        params[keys["sort_order"]] = state.sort_order.value
    if state.page != 1:
        params["page"] = str(state.page)
    if state.page_size != default_page_size():
        params["limit"] = str(state.page_size)
    return params


def to_query_string(state: FilterState, style: ParamStyle = "url") -> str:
    """URL-encoded query string (without the leading '?')."""
    return urlencode(to_params(state, style=style))


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------


def _scalar(value: ParamValue) -> str:
    if isinstance(value, str):
        return value
    # Repeated keys (?specialties=a&specialties=b) are folded into one list.
    return ",".join(v for v in value if v is not None)


def _flatten(params: Mapping[str, ParamValue]) -> Dict[str, str]:
    flat: Dict[str, str] = {}
    for key in params.keys():
        if hasattr(params, "getlist"):
            values: ParamValue = params.getlist(key)  # type: ignore[attr-defined]
        else:
            values = params[key]
        flat[key] = _scalar(values)
    return flat


def _lookup(params: Mapping[str, str], field_name: str) -> Optional[str]:
    for alias in _DECODE_ALIASES.get(field_name, (field_name,)):
        raw = params.get(alias)
        if raw is not None:
            return raw
    return None


def _parse_enum(raw: Optional[str], enum_type: Type[E], default: E, key: str) -> E:
    if raw is None or raw == "":
        return default
    candidate = raw.strip()
    for member in enum_type:
        if member.value == candidate or member.value.lower() == candidate.lower():
            return member
    logger.info("Ignoring unknown %s value %r; using default %s", key, raw, default.value)
    return default


def _parse_number(raw: Optional[str], default: float, key: str) -> float:
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.info("Ignoring malformed %s value %r; using default", key, raw)
        return default
    if math.isnan(value) or math.isinf(value):
        logger.info("Ignoring non-finite %s value %r; using default", key, raw)
        return default
    return value


def _parse_bool(raw: Optional[str], key: str) -> bool:
    if raw is None:
        return False
    lowered = raw.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered not in _FALSE_VALUES and lowered:
        logger.info("Ignoring malformed %s flag %r", key, raw)
    return False


def _split_tokens(raw: str) -> List[str]:
    tokens: List[str] = []
    current: List[str] = []
    escaped = False
    for char in raw:
        if escaped:
            current.append(char)
            escaped = False
        elif char == "\\":
            escaped = True
        elif char == ",":
            tokens.append("".join(current))
            current = []
        else:
            current.append(char)
    if escaped:
        current.append("\\")
    tokens.append("".join(current))
    return tokens


def _parse_set(raw: Optional[str]) -> frozenset:
    if not raw:
        return frozenset()
    return frozenset(token.strip() for token in _split_tokens(raw) if token.strip())


def _parse_enum_set(raw: Optional[str], enum_type: Type[E], key: str) -> frozenset:
    members = set()
    for token in _parse_set(raw):
        lowered = token.lower()
        match = next((m for m in enum_type if m.value.lower() == lowered), None)
        if match is None:
            logger.info("Ignoring unknown %s entry %r", key, token)
            continue
        members.add(match)
    return frozenset(members)


def _parse_range(params: Mapping[str, str], field_name: str, default: NumericRange) -> NumericRange:
    combined, low_key, high_key = _RANGE_KEYS[field_name]
    low, high = default.low, default.high

    token = params.get(combined)
    if token:
        match = _RANGE_TOKEN.match(token)
        if match:
            low, high = float(match.group(1)), float(match.group(2))
        else:
            logger.info("Ignoring malformed %s range %r; using default", combined, token)

    low = _parse_number(params.get(low_key), low, low_key)
    high = _parse_number(params.get(high_key), high, high_key)
    return NumericRange(low, high)


def _parse_int(raw: str, key: str) -> int:
    try:
        value = int(raw.strip())
    except ValueError as exc:
        raise ValidationException(
            f"'{key}' must be an integer",
            details={"field": key, "value": raw},
        ) from exc
    return value


def parse_pagination(params: Mapping[str, str]) -> Tuple[int, int]:
    """
    Validate ``page`` and ``limit``.

    Unlike every other field these are refused rather than repaired: a bad page
    number means a client bug, not user input drift.
    """
    page = 1
    page_size = default_page_size()

    raw_page = params.get("page")
    if raw_page is not None and raw_page != "":
        page = _parse_int(raw_page, "page")
        if page < 1 or page > MAX_PAGE:
            raise ValidationException(
                f"'page' must be between 1 and {MAX_PAGE}",
                details={"field": "page", "value": raw_page},
            )

    raw_limit = params.get("limit")
    if raw_limit is not None and raw_limit != "":
        page_size = _parse_int(raw_limit, "limit")
        upper = max_page_size()
        if page_size < MIN_PAGE_SIZE or page_size > upper:
            raise ValidationException(
                f"'limit' must be between {MIN_PAGE_SIZE} and {upper}",
                details={"field": "limit", "value": raw_limit},
            )
    return page, page_size


def wants_advanced(params: Mapping[str, str]) -> bool:
    if _parse_bool(params.get(ADVANCED_FLAG), ADVANCED_FLAG):
        return True
    if any(key in params for key in ADVANCED_ONLY_KEYS):
        return True
    return (params.get("availability") or "").strip().lower() == AvailabilityFilter.CUSTOM.value


def decode_params(params: Mapping[str, ParamValue]) -> NormalizedFilters:
    """
    Rebuild a filter state from a parameter map of either style.

    Out-of-domain values are clamped; the result names every adjusted field.

    Raises:
        ValidationException: if ``page`` or ``limit`` is malformed
    """
    flat = _flatten(params)
    page, page_size = parse_pagination(flat)

    shared: Dict[str, Any] = {
        "query": (_lookup(flat, "query") or "").strip(),
        "profile_type": _parse_enum(flat.get("type"), ProfileTypeFilter, ProfileTypeFilter.ALL, "type"),
        "location": (flat.get("location") or "").strip(),
        "specialties": _parse_set(flat.get("specialties")),
        "min_rating": _parse_number(_lookup(flat, "min_rating"), DEFAULT_MIN_RATING, "minRating"),
        "max_distance": _parse_number(_lookup(flat, "max_distance"), DEFAULT_MAX_DISTANCE, "maxDistance"),
        "price_range": _parse_range(flat, "price_range", DEFAULT_PRICE_RANGE),
        "experience_range": _parse_range(flat, "experience_range", DEFAULT_EXPERIENCE_RANGE),
        "availability": _parse_enum(
            flat.get("availability"), AvailabilityFilter, AvailabilityFilter.ALL, "availability"
        ),
        "amenities": _parse_set(flat.get("amenities")),
        "sort_by": _parse_enum(_lookup(flat, "sort_by"), SortBy, SortBy.RELEVANCE, "sortBy"),
        "sort_order": _parse_enum(_lookup(flat, "sort_order"), SortOrder, SortOrder.DESC, "sortOrder"),
        "page": page,
        "page_size": page_size,
    }

    state: FilterState
    if wants_advanced(flat):
        state = AdvancedFilterState(
            **shared,
            specialty_operator=_parse_enum(
                flat.get("specialty_op"), FacetOperator, FacetOperator.OR, "specialty_op"
            ),
            services=_parse_set(flat.get("services")),
            services_operator=_parse_enum(
                flat.get("services_op"), FacetOperator, FacetOperator.OR, "services_op"
            ),
            amenities_operator=_parse_enum(
                flat.get("amenities_op"), FacetOperator, FacetOperator.OR, "amenities_op"
            ),
            availability_days=_parse_enum_set(flat.get("availability_days"), Weekday, "availability_days"),
            availability_time=_parse_enum(
                flat.get("availability_time"), TimeOfDay, TimeOfDay.ANY, "availability_time"
            ),
            include_inactive=_parse_bool(flat.get("include_inactive"), "include_inactive"),
            verified_only=_parse_bool(flat.get("verified_only"), "verified_only"),
            has_portfolio=_parse_bool(flat.get("has_portfolio"), "has_portfolio"),
            accepts_new_clients=_parse_bool(flat.get("accepts_new_clients"), "accepts_new_clients"),
        )
    else:
        state = BasicFilterState(**shared)

    return normalize(state)


def from_params(params: Mapping[str, ParamValue]) -> FilterState:
    return decode_params(params).state


def from_query_string(query_string: str) -> FilterState:
    parsed: Dict[str, List[str]] = parse_qs(query_string.lstrip("?"), keep_blank_values=True)
    return from_params(parsed)


# ---------------------------------------------------------------------------
# Updates
# ---------------------------------------------------------------------------


def apply_changes(state: FilterState, **changes: Any) -> FilterState:
    """
    Replace fields on ``state``, returning a new state.

    Any change to a non-pagination field sends the user back to page 1.
    """
    if not changes:
        return state
    filter_changed = any(
        name not in PAGINATION_FIELDS and getattr(state, name) != value
        for name, value in changes.items()
    )
    updated = replace(state, **changes)
    if filter_changed and updated.page != 1:
        updated = replace(updated, page=1)
    return updated

