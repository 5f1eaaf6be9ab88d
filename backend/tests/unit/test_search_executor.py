# backend/tests/unit/test_search_executor.py
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

pytestmark = pytest.mark.unit

from inkmatch.core.exceptions import RepositoryException, SearchExecutionError
from inkmatch.services.search.executor import ResultEnvelope, SearchExecutor
from inkmatch.services.search.filter_state import BasicFilterState
from inkmatch.services.search.query_compiler import QueryCompiler


@pytest.fixture
def compiled():
    return QueryCompiler(distance_unit="mi").compile(BasicFilterState(page=2, page_size=5))


@pytest.fixture
def repository():
    return MagicMock()


class TestSearchExecutor:
    def test_builds_envelope(self, repository, compiled):
        profiles = [MagicMock(name=f"profile-{i}") for i in range(5)]
        repository.fetch_page.return_value = [(p, None) for p in profiles[:4]] + [(profiles[4], 3)]
        repository.count.return_value = 12

        envelope = SearchExecutor(repository).execute(compiled)

        assert envelope.total == 12
        assert envelope.page == 2
        assert envelope.page_size == 5
        assert [hit.profile for hit in envelope.items] == profiles
        assert envelope.items[0].distance is None
        assert envelope.items[4].distance == 3.0
        assert set(envelope.stage_latencies_ms) == {"fetch", "count"}
        repository.fetch_page.assert_called_once_with(compiled)
        repository.count.assert_called_once_with(compiled)

    @pytest.mark.parametrize("failing", ["fetch_page", "count"])
    def test_repository_failure_becomes_search_error(self, repository, compiled, failing):
        repository.fetch_page.return_value = []
        repository.count.return_value = 0
        getattr(repository, failing).side_effect = RepositoryException("connection refused")

        with pytest.raises(SearchExecutionError) as exc_info:
            SearchExecutor(repository).execute(compiled)

        assert exc_info.value.message == "Failed to load results"
        assert "connection refused" in exc_info.value.reason

    def test_driver_error_becomes_search_error(self, repository, compiled):
        repository.fetch_page.side_effect = OperationalError("SELECT 1", {}, Exception("timeout"))
        with pytest.raises(SearchExecutionError):
            SearchExecutor(repository).execute(compiled)

    def test_error_outside_sqlalchemy_becomes_search_error(self, repository, compiled):
        repository.fetch_page.side_effect = OverflowError("Python int too large to convert to SQLite INTEGER")
        with pytest.raises(SearchExecutionError) as exc_info:
            SearchExecutor(repository).execute(compiled)
        assert isinstance(exc_info.value.__cause__, OverflowError)

    def test_malformed_rows_are_rejected(self, repository, compiled):
        repository.fetch_page.return_value = [(MagicMock(),)]
        repository.count.return_value = 6
        with pytest.raises(SearchExecutionError) as exc_info:
            SearchExecutor(repository).execute(compiled)
        assert exc_info.value.reason == "malformed result rows"

    @pytest.mark.parametrize("total", [None, -1])
    def test_unusable_count_is_rejected(self, repository, compiled, total):
        repository.fetch_page.return_value = []
        repository.count.return_value = total
        with pytest.raises(SearchExecutionError):
            SearchExecutor(repository).execute(compiled)

    def test_count_smaller_than_rows_is_rejected(self, repository, compiled):
        repository.fetch_page.return_value = [(MagicMock(), None)] * 3
        repository.count.return_value = 6
        with pytest.raises(SearchExecutionError):
            SearchExecutor(repository).execute(compiled)

    @pytest.mark.asyncio
    async def test_execute_async(self, repository, compiled):
        repository.fetch_page.return_value = []
        repository.count.return_value = 0
        envelope = await SearchExecutor(repository).execute_async(compiled)
        assert envelope.total == 0
        assert envelope.items == []


class TestResultEnvelope:
    @pytest.mark.parametrize(
        "total,page,expected_pages,has_next,has_prev",
        [
            (0, 1, 0, False, False),
            (12, 1, 1, False, False),
            (15, 1, 2, True, False),
            (15, 2, 2, False, True),
            (25, 2, 3, True, True),
        ],
    )
    def test_pagination_math(self, total, page, expected_pages, has_next, has_prev):
        envelope = ResultEnvelope(items=[], total=total, page=page, page_size=12)
        assert envelope.total_pages == expected_pages
        assert envelope.has_next is has_next
        assert envelope.has_prev is has_prev
