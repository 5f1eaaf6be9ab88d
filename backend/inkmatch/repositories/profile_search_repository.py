# backend/inkmatch/repositories/profile_search_repository.py
"""
Profile search repository.

Runs compiled search plans against the profile store. The page and count
statements come from the same ``CompiledQuery`` so their predicates never drift.
"""

import logging
from typing import List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload
from sqlalchemy.sql import Select

from ..core.exceptions import RepositoryException
from ..models.profile import Profile, ProfileSpecialty
from ..services.search.query_compiler import CompiledQuery
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)

ProfileRow = Tuple[Profile, Optional[float]]


class ProfileSearchRepository(BaseRepository[Profile]):
    """Read-only access to profiles for the discovery search."""

    def __init__(self, db: Session):
        super().__init__(db, Profile)

    def _apply_eager_loading(self, stmt: Select) -> Select:
        return stmt.options(
            selectinload(Profile.specialties).selectinload(ProfileSpecialty.specialty),
            selectinload(Profile.services),
            selectinload(Profile.amenities),
            selectinload(Profile.working_hours),
            selectinload(Profile.portfolio_images),
        )

    def fetch_page(self, compiled: CompiledQuery) -> List[ProfileRow]:
        """Return ``(profile, distance)`` rows for the requested page window."""
        stmt = self._apply_eager_loading(compiled.page_statement())
        try:
            rows = self.db.execute(stmt).all()
        except SQLAlchemyError as e:
            self.logger.error("Profile page query failed: %s", e)
            raise RepositoryException("Failed to fetch profile page") from e
        return [(row[0], row[1]) for row in rows]

    def count(self, compiled: CompiledQuery) -> Optional[int]:
        """Total rows matching the plan; ``None`` if the store returned nothing."""
        try:
            return self.db.execute(compiled.count_statement()).scalar()
        except SQLAlchemyError as e:
            self.logger.error("Profile count query failed: %s", e)
            raise RepositoryException("Failed to count profiles") from e

    def count_active_profiles(self) -> int:
        return self.count_by(is_active=True)
