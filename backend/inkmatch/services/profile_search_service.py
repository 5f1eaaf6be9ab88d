# backend/inkmatch/services/profile_search_service.py
"""
Profile discovery search.

Glue between the HTTP layer and the search pipeline:
parameters -> filter state -> compiled query -> executor -> envelope.
"""

import logging
import time
from typing import Mapping, Optional

from sqlalchemy.orm import Session

from .base import BaseService
from .search.executor import ResultEnvelope, SearchExecutor
from .search.filter_state import FilterState, has_active_filters
from .search.filter_sync import ParamValue, decode_params
from .search.geo import GeoPoint, reference_point
from .search.metrics import record_normalizations, record_search_metrics
from .search.query_compiler import QueryCompiler
from ..repositories.profile_search_repository import ProfileSearchRepository

logger = logging.getLogger(__name__)


class ProfileSearchService(BaseService):
    def __init__(self, db: Session, compiler: Optional[QueryCompiler] = None):
        super().__init__(db)
        self.repository = ProfileSearchRepository(db)
        self.compiler = compiler or QueryCompiler()
        self.executor = SearchExecutor(self.repository)

    @BaseService.measure_operation("search_profiles")
    def search_profiles(
        self, state: FilterState, reference: Optional[GeoPoint] = None
    ) -> ResultEnvelope:
        """
        Run one search.

        Raises:
            SearchExecutionError: if the profile store fails
        """
        started = time.perf_counter()
        compiled = self.compiler.compile(state, reference)
        compile_ms = (time.perf_counter() - started) * 1000
        if compiled.adjusted:
            record_normalizations(compiled.adjusted)

        envelope = self.executor.execute(compiled)

        total_ms = (time.perf_counter() - started) * 1000
        record_search_metrics(
            total_latency_ms=total_ms,
            stage_latencies={"compile": compile_ms, **envelope.stage_latencies_ms},
            mode=compiled.state.mode,
            total_results=envelope.total,
            has_filters=has_active_filters(compiled.state),
        )
        self.logger.info(
            "Profile search mode=%s facets=%s sort=%s total=%d page=%d/%d in %.1fms",
            compiled.state.mode,
            ",".join(compiled.facets) or "-",
            compiled.sort_by.value,
            envelope.total,
            envelope.page,
            envelope.total_pages,
            total_ms,
        )
        return envelope

    def search_from_params(
        self,
        params: Mapping[str, ParamValue],
        lat: Optional[float] = None,
        lng: Optional[float] = None,
    ) -> ResultEnvelope:
        """
        Decode request parameters and search.

        Raises:
            ValidationException: malformed pagination, or only one of lat/lng
            SearchExecutionError: if the profile store fails
        """
        reference = reference_point(lat, lng)
        decoded = decode_params(params)
        if decoded.adjusted:
            record_normalizations(decoded.adjusted)
        return self.search_profiles(decoded.state, reference)
