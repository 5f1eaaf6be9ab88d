# backend/inkmatch/services/search/mode_adapter.py
"""
Conversion between the basic and advanced filter representations.

Basic to advanced is lossless. Advanced to basic drops the advanced-only
fields, and ``availability='custom'`` (no basic equivalent) collapses to
``'all'``.
"""
from __future__ import annotations

from dataclasses import fields
import logging
from typing import Any, Dict, Tuple

from inkmatch.services.search.filter_state import (
    AdvancedFilterState,
    AvailabilityFilter,
    BasicFilterState,
    FilterMode,
    FilterState,
)

logger = logging.getLogger(__name__)


def _init_field_names(cls: type) -> Tuple[str, ...]:
    return tuple(f.name for f in fields(cls) if f.init)


SHARED_FIELDS: Tuple[str, ...] = tuple(
    name
    for name in _init_field_names(BasicFilterState)
    if name in set(_init_field_names(AdvancedFilterState))
)
ADVANCED_ONLY_FIELDS: Tuple[str, ...] = tuple(
    name for name in _init_field_names(AdvancedFilterState) if name not in SHARED_FIELDS
)


def _shared_values(state: FilterState) -> Dict[str, Any]:
    return {name: getattr(state, name) for name in SHARED_FIELDS}


def to_advanced(state: FilterState) -> AdvancedFilterState:
    """Promote to the advanced field set; advanced-only fields take their defaults."""
    if isinstance(state, AdvancedFilterState):
        return state
    if isinstance(state, BasicFilterState):
        return AdvancedFilterState(**_shared_values(state))
    raise TypeError(f"Unsupported filter state: {type(state).__name__}")


def to_basic(state: FilterState) -> BasicFilterState:
    """Project onto the basic field set, discarding advanced-only selections."""
    if isinstance(state, BasicFilterState):
        return state
    if isinstance(state, AdvancedFilterState):
        values = _shared_values(state)
        if state.availability == AvailabilityFilter.CUSTOM:
            values["availability"] = AvailabilityFilter.ALL
        dropped = [
            name
            for name in ADVANCED_ONLY_FIELDS
            if getattr(state, name) != getattr(AdvancedFilterState(), name)
        ]
        if dropped:
            logger.debug("Dropping advanced-only filters on switch to basic: %s", ", ".join(dropped))
        return BasicFilterState(**values)
    raise TypeError(f"Unsupported filter state: {type(state).__name__}")


def switch_mode(state: FilterState, mode: FilterMode) -> FilterState:
    """Convert ``state`` into ``mode``, keeping every compatible selection."""
    if mode == "advanced":
        return to_advanced(state)
    if mode == "basic":
        return to_basic(state)
    raise ValueError(f"Unknown filter mode: {mode!r}")
