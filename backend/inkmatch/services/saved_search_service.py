# backend/inkmatch/services/saved_search_service.py
"""
Saved searches: named, immutable snapshots of a filter state.

Snapshots are always stored in advanced form (basic states are promoted) as
the same flat parameter map the search endpoint accepts, with pagination
dropped. A snapshot is never edited; users delete and save again.
"""

from dataclasses import replace
import logging
from typing import List, Mapping, Union

from sqlalchemy.orm import Session
import ulid

from ..core.config import settings
from ..core.exceptions import BusinessRuleException, NotFoundException, ValidationException
from ..models.saved_search import SavedSearch
from ..repositories.saved_search_repository import SavedSearchRepository
from .base import BaseService
from .search.filter_state import AdvancedFilterState, FilterState, default_page_size
from .search.filter_sync import ParamValue, from_params, to_params
from .search.mode_adapter import to_advanced

logger = logging.getLogger(__name__)

MAX_NAME_LENGTH = 100


def _is_search_id(value: str) -> bool:
    try:
        ulid.ULID.from_str(value)
    except ValueError:
        return False
    return True


def snapshot_filters(filters: Union[FilterState, Mapping[str, ParamValue]]) -> AdvancedFilterState:
    state = from_params(filters) if isinstance(filters, Mapping) else filters
    return replace(to_advanced(state), page=1, page_size=default_page_size())


class SavedSearchService(BaseService):
    def __init__(self, db: Session):
        super().__init__(db)
        self.repository = SavedSearchRepository(db)

    @BaseService.measure_operation("create_saved_search")
    def create_saved_search(
        self,
        owner_id: str,
        name: str,
        filters: Union[FilterState, Mapping[str, ParamValue]],
    ) -> SavedSearch:
        """
        Raises:
            ValidationException: blank or over-long name
            BusinessRuleException: owner already at the saved-search cap
        """
        clean_name = (name or "").strip()
        if not clean_name or len(clean_name) > MAX_NAME_LENGTH:
            raise ValidationException(
                f"Name must be between 1 and {MAX_NAME_LENGTH} characters",
                details={"field": "name"},
            )

        limit = settings.saved_search_limit
        snapshot = to_params(snapshot_filters(filters), style="api")
        with self.transaction():
            saved = self.repository.create(owner_id=owner_id, name=clean_name, filters=snapshot)
            # Counted after the flush so a row that landed since this request began
            # rolls the insert back. Two uncommitted inserts on PostgreSQL under
            # READ COMMITTED can still both pass.
            if self.repository.count_for_owner(owner_id) > limit:
                raise BusinessRuleException(
                    f"You can keep at most {limit} saved searches",
                    code="SAVED_SEARCH_LIMIT",
                    details={"limit": limit},
                )
        self.db.refresh(saved)
        self.logger.info("Saved search %s created for owner %s", saved.id, owner_id)
        return saved

    def list_saved_searches(self, owner_id: str) -> List[SavedSearch]:
        return self.repository.list_for_owner(owner_id)

    def get_saved_search(self, owner_id: str, search_id: str) -> SavedSearch:
        saved = (
            self.repository.get_for_owner(search_id, owner_id) if _is_search_id(search_id) else None
        )
        if saved is None:
            raise NotFoundException("Saved search not found", details={"id": search_id})
        return saved

    @BaseService.measure_operation("delete_saved_search")
    def delete_saved_search(self, owner_id: str, search_id: str) -> None:
        saved = self.get_saved_search(owner_id, search_id)
        with self.transaction():
            self.repository.delete_entity(saved)
        self.logger.info("Saved search %s deleted for owner %s", search_id, owner_id)

    def restore_filters(self, saved: SavedSearch) -> AdvancedFilterState:
        """The advanced filter state a saved search was taken from."""
        return to_advanced(from_params(saved.filters))
