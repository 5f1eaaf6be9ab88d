# backend/inkmatch/routes/profiles.py
"""
Profile discovery routes.

Endpoints:
    GET /api/profiles   → Faceted profile search (filters, sort, pagination)

Every parameter except ``lat``/``lng`` is decoded leniently from the raw query
string: unknown keys are ignored and malformed values fall back to their
defaults. Only bad pagination (``page < 1``, ``limit`` outside 1..50) and a
half-supplied coordinate are rejected with 400.
"""

import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from ..api.dependencies import get_profile_search_service
from ..schemas.profile_search import ProfileSearchResponse
from ..services.profile_search_service import ProfileSearchService
from ..services.search.filter_state import active_filter_chips
from ..services.search.filter_sync import to_params

logger = logging.getLogger(__name__)

router = APIRouter(tags=["profiles"])


@router.get("", response_model=ProfileSearchResponse)
async def search_profiles(
    request: Request,
    lat: Optional[float] = Query(None, description="Reference latitude for distance filtering/sorting"),
    lng: Optional[float] = Query(None, description="Reference longitude for distance filtering/sorting"),
    service: ProfileSearchService = Depends(get_profile_search_service),
) -> ProfileSearchResponse:
    """
    Search artist and studio profiles.

    Recognized parameters: q, type, location, specialties, specialty_op, services,
    services_op, amenities, amenities_op, minRating, maxDistance, minPrice, maxPrice,
    minExperience, maxExperience, availability, availability_days, availability_time,
    sortBy, sortOrder, page, limit, verified_only, has_portfolio, accepts_new_clients,
    include_inactive, lat, lng.
    """
    envelope = await asyncio.to_thread(
        service.search_from_params, request.query_params, lat, lng
    )
    state = envelope.state
    return ProfileSearchResponse.from_envelope(
        envelope,
        filters=to_params(state, style="api") if state is not None else {},
        chips=active_filter_chips(state) if state is not None else [],
    )
