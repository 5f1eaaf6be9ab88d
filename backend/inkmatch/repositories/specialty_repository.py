# backend/inkmatch/repositories/specialty_repository.py
"""Specialty catalog repository."""

from typing import List, Optional

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from ..models.specialty import Specialty
from ..services.search.query_compiler import LIKE_ESCAPE, like_pattern
from .base_repository import BaseRepository


class SpecialtyRepository(BaseRepository[Specialty]):
    def __init__(self, db: Session):
        super().__init__(db, Specialty)

    def list_specialties(
        self, search: Optional[str] = None, category: Optional[str] = None
    ) -> List[Specialty]:
        """Alphabetical catalog, optionally narrowed by text and category."""
        stmt = select(Specialty)
        if search:
            pattern = like_pattern(search.strip())
            stmt = stmt.where(
                or_(
                    Specialty.name.ilike(pattern, escape=LIKE_ESCAPE),
                    Specialty.description.ilike(pattern, escape=LIKE_ESCAPE),
                )
            )
        if category:
            stmt = stmt.where(Specialty.category == category)
        return self._execute_all(stmt.order_by(Specialty.name.asc()))
