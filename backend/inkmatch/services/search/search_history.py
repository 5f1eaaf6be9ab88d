# backend/inkmatch/services/search/search_history.py
"""
Recent free-text searches used for autocomplete suggestions.

Session-local only; nothing here touches the database.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, List, Optional, Tuple

from inkmatch.core.config import settings

MIN_SUGGESTION_CHARS = 3


def _normalized(query: str) -> str:
    return query.strip().lower()


@dataclass(frozen=True)
class SearchHistoryEntry:
    query: str
    timestamp: datetime


class SearchHistory:
    """
    Most-recent-first log of distinct queries.

    Re-running a query moves it to the front instead of adding a duplicate.
    """

    def __init__(
        self,
        limit: Optional[int] = None,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self.limit = limit or settings.search_history_limit
        self._clock = clock
        self._entries: List[SearchHistoryEntry] = []

    @property
    def entries(self) -> Tuple[SearchHistoryEntry, ...]:
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def record(self, query: str) -> None:
        text = query.strip()
        if not text:
            return
        key = _normalized(text)
        self._entries = [e for e in self._entries if _normalized(e.query) != key]
        self._entries.insert(0, SearchHistoryEntry(query=text, timestamp=self._clock()))
        del self._entries[self.limit :]

    def suggestions(self, text: str, limit: Optional[int] = None) -> List[str]:
        """Prior queries containing ``text``, once more than two characters are typed."""
        needle = _normalized(text)
        if len(needle) < MIN_SUGGESTION_CHARS:
            return []
        cap = limit or settings.search_suggestion_limit
        matches = [e.query for e in self._entries if needle in _normalized(e.query)]
        return matches[:cap]

    def clear(self) -> None:
        self._entries = []
