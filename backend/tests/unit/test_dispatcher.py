# backend/tests/unit/test_dispatcher.py
"""Tests for debounced, last-write-wins search dispatch."""

import asyncio
from typing import Dict, List

import pytest

pytestmark = pytest.mark.unit

from inkmatch.services.search.dispatcher import SearchDispatcher
from inkmatch.services.search.filter_state import BasicFilterState


class GatedFetch:
    """Fetch stub whose calls block until the test releases them by query."""

    def __init__(self) -> None:
        self.calls: List[str] = []
        self.gates: Dict[str, asyncio.Event] = {}
        self.failures: Dict[str, Exception] = {}

    def gate(self, query: str) -> asyncio.Event:
        return self.gates.setdefault(query, asyncio.Event())

    async def __call__(self, state: BasicFilterState) -> str:
        self.calls.append(state.query)
        await self.gate(state.query).wait()
        if state.query in self.failures:
            raise self.failures[state.query]
        return f"results for {state.query}"


async def settle() -> None:
    for _ in range(5):
        await asyncio.sleep(0)


class TestSearchDispatcher:
    @pytest.mark.asyncio
    async def test_rapid_submissions_dispatch_once(self):
        fetch = GatedFetch()
        for query in ("k", "ko", "koi"):
            fetch.gate(query).set()
        dispatcher = SearchDispatcher(fetch, debounce_ms=20)

        dispatcher.submit(BasicFilterState(query="k"))
        dispatcher.submit(BasicFilterState(query="ko"))
        seq = dispatcher.submit(BasicFilterState(query="koi"))
        await dispatcher.drain()

        assert fetch.calls == ["koi"]
        assert dispatcher.dispatched == 1
        assert dispatcher.is_current(seq)
        assert dispatcher.latest_result == "results for koi"

    @pytest.mark.asyncio
    async def test_immediate_submission_skips_debounce(self):
        fetch = GatedFetch()
        fetch.gate("rose").set()
        dispatcher = SearchDispatcher(fetch, debounce_ms=10_000)

        dispatcher.submit(BasicFilterState(query="rose"), immediate=True)
        await asyncio.wait_for(dispatcher.drain(), timeout=1)

        assert fetch.calls == ["rose"]

    @pytest.mark.asyncio
    async def test_stale_response_is_discarded(self):
        fetch = GatedFetch()
        delivered: List[str] = []
        dispatcher = SearchDispatcher(fetch, on_result=delivered.append, debounce_ms=0)

        dispatcher.submit(BasicFilterState(query="old"), immediate=True)
        await settle()
        dispatcher.submit(BasicFilterState(query="new"), immediate=True)
        await settle()
        assert fetch.calls == ["old", "new"]

        # The newer request answers first, then the superseded one arrives late.
        fetch.gate("new").set()
        await settle()
        fetch.gate("old").set()
        await dispatcher.drain()

        assert delivered == ["results for new"]
        assert dispatcher.latest_result == "results for new"
        assert dispatcher.dispatched == 2
        assert dispatcher.discarded == 1

    @pytest.mark.asyncio
    async def test_current_error_is_reported(self):
        fetch = GatedFetch()
        fetch.failures["koi"] = RuntimeError("store down")
        fetch.gate("koi").set()
        errors: List[Exception] = []
        dispatcher = SearchDispatcher(fetch, on_error=errors.append, debounce_ms=0)

        dispatcher.submit(BasicFilterState(query="koi"), immediate=True)
        await dispatcher.drain()

        assert len(errors) == 1
        assert isinstance(dispatcher.latest_error, RuntimeError)
        assert dispatcher.latest_result is None

    @pytest.mark.asyncio
    async def test_stale_error_is_dropped(self):
        fetch = GatedFetch()
        fetch.failures["old"] = RuntimeError("timeout")
        errors: List[Exception] = []
        dispatcher = SearchDispatcher(fetch, on_error=errors.append, debounce_ms=0)

        dispatcher.submit(BasicFilterState(query="old"), immediate=True)
        await settle()
        dispatcher.submit(BasicFilterState(query="new"), immediate=True)
        fetch.gate("old").set()
        fetch.gate("new").set()
        await dispatcher.drain()

        assert errors == []
        assert dispatcher.latest_error is None
        assert dispatcher.latest_result == "results for new"
        assert dispatcher.discarded == 1

    def test_default_debounce_window(self):
        dispatcher = SearchDispatcher(GatedFetch())
        assert dispatcher.debounce_seconds == pytest.approx(0.3)
