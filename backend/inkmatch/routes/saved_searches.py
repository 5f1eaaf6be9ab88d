# backend/inkmatch/routes/saved_searches.py
"""
Saved search routes. All endpoints are scoped to the ``X-User-Id`` owner.

Endpoints:
    GET    /api/saved-searches          → List the owner's saved searches, newest first
    POST   /api/saved-searches          → Save a named snapshot of the current filters
    GET    /api/saved-searches/{id}     → Fetch one saved search
    DELETE /api/saved-searches/{id}     → Delete one saved search
"""

import asyncio
import logging

from fastapi import APIRouter, Depends, Response, status

from ..api.dependencies import get_current_user_id, get_saved_search_service
from ..schemas.saved_search import (
    SavedSearchCreate,
    SavedSearchListResponse,
    SavedSearchResponse,
)
from ..services.saved_search_service import SavedSearchService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["saved-searches"])


@router.get("", response_model=SavedSearchListResponse)
async def list_saved_searches(
    owner_id: str = Depends(get_current_user_id),
    service: SavedSearchService = Depends(get_saved_search_service),
) -> SavedSearchListResponse:
    saved = await asyncio.to_thread(service.list_saved_searches, owner_id)
    return SavedSearchListResponse(data=[SavedSearchResponse.from_model(s) for s in saved])


@router.post("", response_model=SavedSearchResponse, status_code=status.HTTP_201_CREATED)
async def create_saved_search(
    payload: SavedSearchCreate,
    owner_id: str = Depends(get_current_user_id),
    service: SavedSearchService = Depends(get_saved_search_service),
) -> SavedSearchResponse:
    saved = await asyncio.to_thread(
        service.create_saved_search, owner_id, payload.name, payload.filters
    )
    return SavedSearchResponse.from_model(saved)


@router.get("/{search_id}", response_model=SavedSearchResponse)
async def get_saved_search(
    search_id: str,
    owner_id: str = Depends(get_current_user_id),
    service: SavedSearchService = Depends(get_saved_search_service),
) -> SavedSearchResponse:
    saved = await asyncio.to_thread(service.get_saved_search, owner_id, search_id)
    return SavedSearchResponse.from_model(saved)


@router.delete("/{search_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_saved_search(
    search_id: str,
    owner_id: str = Depends(get_current_user_id),
    service: SavedSearchService = Depends(get_saved_search_service),
) -> Response:
    await asyncio.to_thread(service.delete_saved_search, owner_id, search_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
