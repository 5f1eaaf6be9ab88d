# backend/inkmatch/repositories/saved_search_repository.py
"""Saved search repository. Every query is scoped to an owner."""

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..models.saved_search import SavedSearch
from .base_repository import BaseRepository


class SavedSearchRepository(BaseRepository[SavedSearch]):
    def __init__(self, db: Session):
        super().__init__(db, SavedSearch)

    def list_for_owner(self, owner_id: str) -> List[SavedSearch]:
        stmt = (
            select(SavedSearch)
            .where(SavedSearch.owner_id == owner_id)
            .order_by(SavedSearch.created_at.desc(), SavedSearch.id.desc())
        )
        return self._execute_all(stmt)

    def get_for_owner(self, search_id: str, owner_id: str) -> Optional[SavedSearch]:
        stmt = select(SavedSearch).where(
            SavedSearch.id == search_id, SavedSearch.owner_id == owner_id
        )
        results = self._execute_all(stmt)
        return results[0] if results else None

    def count_for_owner(self, owner_id: str) -> int:
        return self.count_by(owner_id=owner_id)
