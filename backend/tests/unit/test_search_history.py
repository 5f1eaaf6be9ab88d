# backend/tests/unit/test_search_history.py
from datetime import datetime, timedelta, timezone

import pytest

pytestmark = pytest.mark.unit

from inkmatch.services.search.search_history import SearchHistory


@pytest.fixture
def clock():
    ticks = {"now": datetime(2026, 3, 1, tzinfo=timezone.utc)}

    def _now():
        ticks["now"] += timedelta(seconds=1)
        return ticks["now"]

    return _now


class TestSearchHistory:
    def test_most_recent_first(self, clock):
        history = SearchHistory(clock=clock)
        history.record("koi")
        history.record("rose")
        assert [e.query for e in history.entries] == ["rose", "koi"]
        assert history.entries[0].timestamp > history.entries[1].timestamp

    def test_duplicate_moves_to_front_case_insensitively(self, clock):
        history = SearchHistory(clock=clock)
        history.record("Koi Fish")
        history.record("rose")
        history.record("  koi fish ")
        assert [e.query for e in history.entries] == ["koi fish", "rose"]
        assert len(history) == 2

    def test_blank_queries_are_ignored(self):
        history = SearchHistory()
        history.record("   ")
        assert len(history) == 0

    def test_capped_at_limit(self):
        history = SearchHistory(limit=3)
        for query in ["a1", "b2", "c3", "d4"]:
            history.record(query)
        assert [e.query for e in history.entries] == ["d4", "c3", "b2"]

    def test_default_limit_is_ten(self):
        history = SearchHistory()
        for i in range(15):
            history.record(f"query {i}")
        assert len(history) == 10

    def test_suggestions_need_three_characters(self):
        history = SearchHistory()
        history.record("dragon sleeve")
        assert history.suggestions("dr") == []
        assert history.suggestions("dra") == ["dragon sleeve"]

    def test_suggestions_match_substrings_and_are_capped(self):
        history = SearchHistory()
        for i in range(8):
            history.record(f"line work {i}")
        history.record("dotwork")
        suggestions = history.suggestions("WORK")
        assert len(suggestions) == 5
        assert suggestions[0] == "dotwork"
        assert history.suggestions("work", limit=2) == ["dotwork", "line work 7"]

    def test_clear(self):
        history = SearchHistory()
        history.record("koi")
        history.clear()
        assert history.entries == ()
