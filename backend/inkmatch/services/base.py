# backend/inkmatch/services/base.py
"""
Base service for inkmatch.

Provides common functionality for all service classes:
- Transaction management (repositories never commit)
- Per-service logger
- Operation timing exported to Prometheus
"""

import asyncio
from contextlib import contextmanager
from functools import wraps
import logging
import time
from typing import Any, Callable, Iterator, Optional, TypeVar, cast

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import ServiceException
from ..monitoring.prometheus_metrics import prometheus_metrics

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

SLOW_OPERATION_SECONDS = 1.0


class BaseService:
    def __init__(self, db: Session):
        self.db = db
        self.logger = logging.getLogger(self.__class__.__name__)

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """
        Commit on success, roll back on failure.

        Usage:
            with self.transaction():
                self.repository.create(...)
        """
        try:
            yield self.db
            self.db.commit()
            self.logger.debug("Transaction committed successfully")
        except SQLAlchemyError as e:
            self.logger.error("Transaction failed: %s", e)
            self.db.rollback()
            raise ServiceException("Database operation failed") from e
        except Exception as e:
            self.logger.error("Unexpected error in transaction: %s", e)
            self.db.rollback()
            raise

    @staticmethod
    def measure_operation(operation_name: str) -> Callable[[F], F]:
        """
        Decorator timing a service method (sync or async).

        Usage:
            @BaseService.measure_operation("search_profiles")
            def search_profiles(self, ...):
                ...
        """

        def record(self: Any, started: float, error_type: Optional[str]) -> None:
            elapsed = time.perf_counter() - started
            if elapsed > SLOW_OPERATION_SECONDS:
                self.logger.warning(
                    "Slow operation detected: %s took %.2fs", operation_name, elapsed
                )
            prometheus_metrics.record_service_operation(
                service=self.__class__.__name__,
                operation=operation_name,
                duration=elapsed,
                status="error" if error_type else "success",
                error_type=error_type,
            )

        def decorator(func: F) -> F:
            if asyncio.iscoroutinefunction(func):

                @wraps(func)
                async def async_wrapper(self: Any, *args: Any, **kwargs: Any) -> Any:
                    started = time.perf_counter()
                    error_type: Optional[str] = None
                    try:
                        return await func(self, *args, **kwargs)
                    except Exception as e:
                        error_type = type(e).__name__
                        raise
                    finally:
                        record(self, started, error_type)

                return cast(F, async_wrapper)

            @wraps(func)
            def wrapper(self: Any, *args: Any, **kwargs: Any) -> Any:
                started = time.perf_counter()
                error_type: Optional[str] = None
                try:
                    return func(self, *args, **kwargs)
                except Exception as e:
                    error_type = type(e).__name__
                    raise
                finally:
                    record(self, started, error_type)

            return cast(F, wrapper)

        return decorator
