# backend/inkmatch/routes/specialties.py
"""
Specialty catalog routes.

Endpoints:
    GET /api/specialties   → Alphabetical specialty list for the specialty facet
"""

import asyncio
from typing import Optional

from fastapi import APIRouter, Depends, Query

from ..api.dependencies import get_specialty_service
from ..schemas.specialty import SpecialtyListResponse, SpecialtyResponse
from ..services.specialty_service import SpecialtyService

router = APIRouter(tags=["specialties"])


@router.get("", response_model=SpecialtyListResponse)
async def list_specialties(
    search: Optional[str] = Query(None, max_length=100, description="Substring of name or description"),
    category: Optional[str] = Query(None, max_length=50),
    service: SpecialtyService = Depends(get_specialty_service),
) -> SpecialtyListResponse:
    specialties = await asyncio.to_thread(service.list_specialties, search, category)
    return SpecialtyListResponse(
        data=[SpecialtyResponse.model_validate(item) for item in specialties]
    )
