"""
FastAPI dependencies: request-scoped services and the opaque current user.

Authentication is handled upstream; this service only trusts the owner id
forwarded in the ``X-User-Id`` header.
"""

from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from ..core.constants import USER_ID_HEADER
from ..core.exceptions import UnauthorizedException
from ..database import get_db
from ..services.profile_search_service import ProfileSearchService
from ..services.saved_search_service import SavedSearchService
from ..services.specialty_service import SpecialtyService

MAX_USER_ID_LENGTH = 64


def get_current_user_id(
    user_id: Optional[str] = Header(default=None, alias=USER_ID_HEADER),
) -> str:
    owner = (user_id or "").strip()
    if not owner or len(owner) > MAX_USER_ID_LENGTH:
        raise UnauthorizedException()
    return owner


def get_profile_search_service(db: Session = Depends(get_db)) -> ProfileSearchService:
    return ProfileSearchService(db)


def get_saved_search_service(db: Session = Depends(get_db)) -> SavedSearchService:
    return SavedSearchService(db)


def get_specialty_service(db: Session = Depends(get_db)) -> SpecialtyService:
    return SpecialtyService(db)
