"""
Database models for the inkmatch platform.

The models are organized by functionality:
- Profiles and their searchable facets
- Specialty catalog
- Portfolio images
- Saved searches
"""

from .portfolio import PortfolioImage
from .profile import (
    Profile,
    ProfileAmenity,
    ProfileService,
    ProfileSpecialty,
    ProfileWorkingHours,
)
from .saved_search import SavedSearch
from .specialty import Specialty

__all__ = [
    "PortfolioImage",
    "Profile",
    "ProfileAmenity",
    "ProfileService",
    "ProfileSpecialty",
    "ProfileWorkingHours",
    "SavedSearch",
    "Specialty",
]
