# backend/inkmatch/services/search/dispatcher.py
"""
Debounced, last-write-wins search dispatch for interactive clients.

Every submission gets a sequence number. A submission only dispatches if no
newer one arrived during its debounce window, and a response is only delivered
if no newer submission arrived while it was in flight. Superseded fetches are
not cancelled; their results are dropped.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Generic, Optional, Set, TypeVar

from inkmatch.core.config import settings
from inkmatch.services.search.filter_state import FilterState

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SearchDispatcher(Generic[T]):
    def __init__(
        self,
        fetch: Callable[[FilterState], Awaitable[T]],
        on_result: Optional[Callable[[T], None]] = None,
        on_error: Optional[Callable[[Exception], None]] = None,
        debounce_ms: Optional[int] = None,
    ) -> None:
        self._fetch = fetch
        self._on_result = on_result
        self._on_error = on_error
        window = settings.search_debounce_ms if debounce_ms is None else debounce_ms
        self.debounce_seconds = window / 1000.0

        self._sequence = 0
        self._timer: Optional[asyncio.Task[None]] = None
        self._tasks: Set[asyncio.Task[None]] = set()

        self.latest_result: Optional[T] = None
        self.latest_error: Optional[Exception] = None
        self.dispatched = 0
        self.discarded = 0

    @property
    def sequence(self) -> int:
        return self._sequence

    def submit(self, state: FilterState, *, immediate: bool = False) -> int:
        """
        Queue ``state`` for dispatch and return its sequence number.

        Text edits go through the debounce window; discrete filter changes pass
        ``immediate=True`` and dispatch on the next loop iteration.
        """
        self._sequence += 1
        seq = self._sequence
        if self._timer is not None and not self._timer.done():
            # Only the timer is cancelled, never a fetch already in flight.
            self._timer.cancel()
        delay = 0.0 if immediate else self.debounce_seconds
        self._timer = self._spawn(self._fire(seq, state, delay))
        return seq

    def is_current(self, seq: int) -> bool:
        return seq == self._sequence

    async def drain(self) -> None:
        """Wait until no timer or fetch is outstanding."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def _spawn(self, coro: Awaitable[None]) -> "asyncio.Task[None]":
        task = asyncio.get_running_loop().create_task(coro)  # type: ignore[arg-type]
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _fire(self, seq: int, state: FilterState, delay: float) -> None:
        if delay > 0:
            await asyncio.sleep(delay)
        if not self.is_current(seq):
            return
        self._spawn(self._run(seq, state))

    async def _run(self, seq: int, state: FilterState) -> None:
        self.dispatched += 1
        try:
            result = await self._fetch(state)
        except Exception as exc:
            if not self.is_current(seq):
                self.discarded += 1
                logger.debug("Dropping error from superseded search #%d: %s", seq, exc)
                return
            logger.warning("Search #%d failed: %s", seq, exc)
            self.latest_error = exc
            if self._on_error is not None:
                self._on_error(exc)
            return

        if not self.is_current(seq):
            self.discarded += 1
            logger.debug("Discarding stale result for search #%d (current #%d)", seq, self._sequence)
            return
        self.latest_result = result
        self.latest_error = None
        if self._on_result is not None:
            self._on_result(result)
