"""Specialty catalog schemas."""

from typing import List, Optional

from pydantic import ConfigDict

from ._strict_base import StrictModel


class SpecialtyResponse(StrictModel):
    model_config = ConfigDict(extra="forbid", from_attributes=True)

    id: str
    name: str
    category: Optional[str] = None
    description: Optional[str] = None


class SpecialtyListResponse(StrictModel):
    data: List[SpecialtyResponse]
    success: bool = True
