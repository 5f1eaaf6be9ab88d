"""Saved search request/response schemas."""

from datetime import datetime
from typing import Dict, List

from pydantic import Field

from ..models.saved_search import SavedSearch
from ._strict_base import StrictModel, StrictRequestModel


class SavedSearchCreate(StrictRequestModel):
    """
    ``filters`` is the same flat parameter map the search endpoint accepts,
    e.g. ``{"q": "geometric", "specialties": "id1,id2", "specialty_op": "AND"}``.
    """

    name: str = Field(min_length=1, max_length=100)
    filters: Dict[str, str] = Field(default_factory=dict)


class SavedSearchResponse(StrictModel):
    id: str
    name: str
    filters: Dict[str, str]
    created_at: datetime = Field(alias="createdAt")

    @classmethod
    def from_model(cls, saved: SavedSearch) -> "SavedSearchResponse":
        return cls(
            id=saved.id,
            name=saved.name,
            filters={str(k): str(v) for k, v in (saved.filters or {}).items()},
            created_at=saved.created_at,
        )


class SavedSearchListResponse(StrictModel):
    data: List[SavedSearchResponse]
    success: bool = True
