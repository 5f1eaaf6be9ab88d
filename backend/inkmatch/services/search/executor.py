# backend/inkmatch/services/search/executor.py
"""
Search executor: runs a compiled plan and shapes the paginated envelope.

The page fetch and the total count are issued on the same session, one after
the other, and both must finish before an envelope exists. Any store failure
is logged here and converted to ``SearchExecutionError``; callers never see a
raw driver exception or a half-built envelope. There are no retries at this
layer.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
import logging
import math
import time
from typing import Dict, List, Optional

from inkmatch.core.exceptions import SearchExecutionError
from inkmatch.models.profile import Profile
from inkmatch.repositories.profile_search_repository import ProfileSearchRepository
from inkmatch.services.search.filter_state import FilterState
from inkmatch.services.search.metrics import record_search_failure
from inkmatch.services.search.query_compiler import CompiledQuery

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProfileHit:
    """One search result; ``distance`` is set when a reference coordinate was given."""

    profile: Profile
    distance: Optional[float] = None


@dataclass(frozen=True)
class ResultEnvelope:
    items: List[ProfileHit]
    total: int
    page: int
    page_size: int
    stage_latencies_ms: Dict[str, float] = field(default_factory=dict, compare=False)
    state: Optional[FilterState] = field(default=None, compare=False)

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.page_size) if self.total else 0

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_prev(self) -> bool:
        return self.page > 1


class SearchExecutor:
    def __init__(self, repository: ProfileSearchRepository) -> None:
        self.repository = repository

    def execute(self, compiled: CompiledQuery) -> ResultEnvelope:
        """
        Fetch one page and the total under the same predicates.

        Raises:
            SearchExecutionError: store unavailable, timed out or returned a malformed answer
        """
        stage = "fetch"
        latencies: Dict[str, float] = {}
        try:
            started = time.perf_counter()
            rows = self.repository.fetch_page(compiled)
            latencies["fetch"] = (time.perf_counter() - started) * 1000

            stage = "count"
            started = time.perf_counter()
            total = self.repository.count(compiled)
            latencies["count"] = (time.perf_counter() - started) * 1000
        except SearchExecutionError:
            raise
        except Exception as exc:
            # Includes RepositoryException and driver errors raised outside SQLAlchemy.
            logger.error("Profile search failed during %s: %s", stage, exc, exc_info=True)
            record_search_failure(stage)
            raise SearchExecutionError(reason=str(exc)) from exc

        if total is None or total < 0:
            logger.error("Profile store returned an unusable count: %r", total)
            record_search_failure("count")
            raise SearchExecutionError(reason=f"invalid count {total!r}")
        if rows and total < compiled.offset + len(rows):
            logger.error(
                "Profile store count %d is inconsistent with page rows (offset=%d, rows=%d)",
                total,
                compiled.offset,
                len(rows),
            )
            record_search_failure("count")
            raise SearchExecutionError(reason="count smaller than fetched rows")

        try:
            items = [
                ProfileHit(profile=profile, distance=None if distance is None else float(distance))
                for profile, distance in rows
            ]
        except (TypeError, ValueError) as exc:
            logger.error("Profile store returned malformed rows: %s", exc, exc_info=True)
            record_search_failure("fetch")
            raise SearchExecutionError(reason="malformed result rows") from exc
        return ResultEnvelope(
            items=items,
            total=int(total),
            page=compiled.page,
            page_size=compiled.page_size,
            stage_latencies_ms=latencies,
            state=compiled.state,
        )

    async def execute_async(self, compiled: CompiledQuery) -> ResultEnvelope:
        """Run ``execute`` off the event loop; the session stays on one worker thread."""
        return await asyncio.to_thread(self.execute, compiled)
