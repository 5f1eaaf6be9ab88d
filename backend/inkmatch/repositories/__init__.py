"""
Repository layer for inkmatch.

Repositories hold all SQL; services own transactions.
"""

from .base_repository import BaseRepository
from .profile_search_repository import ProfileSearchRepository
from .saved_search_repository import SavedSearchRepository
from .specialty_repository import SpecialtyRepository

__all__ = [
    "BaseRepository",
    "ProfileSearchRepository",
    "SavedSearchRepository",
    "SpecialtyRepository",
]
