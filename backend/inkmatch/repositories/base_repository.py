# backend/inkmatch/repositories/base_repository.py
"""
Base repository for inkmatch data access.

Repositories own SQL and nothing else: they never commit (services manage the
transaction) and they convert raw ``SQLAlchemyError`` into
``RepositoryException`` so the service layer sees one failure type.
"""

import logging
from typing import Any, Generic, List, Type, TypeVar

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.sql import Select

from ..core.exceptions import RepositoryException

T = TypeVar("T")

logger = logging.getLogger(__name__)


class BaseRepository(Generic[T]):
    """
    Common data access operations for one model.

    Attributes:
        db: SQLAlchemy session (owned by the calling service)
        model: SQLAlchemy model class
    """

    def __init__(self, db: Session, model: Type[T]):
        self.db = db
        self.model = model
        self.logger = logging.getLogger(f"{__name__}.{model.__name__}")

    def create(self, **kwargs: Any) -> T:
        """Add a new entity and flush to assign its id. Does NOT commit."""
        try:
            entity = self.model(**kwargs)
            self.db.add(entity)
            self.db.flush()
            return entity
        except IntegrityError as exc:
            self.logger.error(
                "Integrity error creating %s: %s", self.model.__name__, exc, exc_info=True
            )
            self.db.rollback()
            raise RepositoryException(f"Integrity constraint violated: {exc.orig}") from exc
        except SQLAlchemyError as e:
            self.logger.error("Error creating %s: %s", self.model.__name__, e)
            self.db.rollback()
            raise RepositoryException(f"Failed to create {self.model.__name__}") from e

    def delete_entity(self, entity: T) -> None:
        try:
            self.db.delete(entity)
            self.db.flush()
        except SQLAlchemyError as e:
            self.logger.error("Error deleting %s: %s", self.model.__name__, e)
            self.db.rollback()
            raise RepositoryException(f"Failed to delete {self.model.__name__}") from e

    def count_by(self, **criteria: Any) -> int:
        try:
            stmt = select(func.count()).select_from(self.model).filter_by(**criteria)
            return int(self.db.execute(stmt).scalar_one())
        except SQLAlchemyError as e:
            self.logger.error("Error counting %s: %s", self.model.__name__, e)
            raise RepositoryException(f"Failed to count {self.model.__name__}") from e

    def _execute_all(self, stmt: Select) -> List[T]:
        try:
            return list(self.db.execute(stmt).scalars().all())
        except SQLAlchemyError as e:
            self.logger.error("Query execution error: %s", e)
            raise RepositoryException("Query failed") from e

    def _apply_eager_loading(self, stmt: Select) -> Select:
        """Override in subclasses to add selectinload options."""
        return stmt
