# backend/inkmatch/services/specialty_service.py
"""Specialty catalog used to populate the specialty facet."""

from typing import List, Optional

from sqlalchemy.orm import Session

from ..models.specialty import Specialty
from ..repositories.specialty_repository import SpecialtyRepository
from .base import BaseService


class SpecialtyService(BaseService):
    def __init__(self, db: Session):
        super().__init__(db)
        self.repository = SpecialtyRepository(db)

    @BaseService.measure_operation("list_specialties")
    def list_specialties(
        self, search: Optional[str] = None, category: Optional[str] = None
    ) -> List[Specialty]:
        return self.repository.list_specialties(search=search, category=category)
