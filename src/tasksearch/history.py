#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Recent-query history kept by a search session."""

from __future__ import annotations

import logging
from typing import Iterator

from tasksearch.constants import DEFAULT_HISTORY_LIMIT

logger = logging.getLogger(__name__)


class SearchHistory:
    """Most-recent-first list of distinct, non-empty queries.

    A query already present is neither moved nor duplicated. The presence
    check runs against the current list before the oldest entries are
    dropped to make room.
    """

    def __init__(self, limit: int = DEFAULT_HISTORY_LIMIT) -> None:
        """Create an empty history holding at most ``limit`` queries."""
        if limit <= 0:
            raise ValueError("History limit must be positive")
        self.limit = limit
        self._entries: list[str] = []

    def add(self, query: str) -> bool:
        """Prepend ``query``; return ``False`` when it was empty or already present."""
        if not query or query in self._entries:
            return False
        self._entries = [query, *self._entries[: self.limit - 1]]
        logger.debug("Added %r to search history (%d entries)", query, len(self._entries))
        return True

    def clear(self) -> None:
        """Forget every stored query."""
        self._entries = []

    @property
    def entries(self) -> list[str]:
        """Return a copy of the stored queries, most recent first."""
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._entries))

    def __contains__(self, query: object) -> bool:
        return query in self._entries
