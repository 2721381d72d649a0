#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Shared data structures for the search subsystem."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, MutableMapping, Sequence

logger = logging.getLogger(__name__)

Record = Mapping[str, Any]


class MatchType(Enum):
    """Enumerate the supported token matching strategies."""

    EXACT = "exact"
    SUBSTRING = "substring"
    WORD = "word"
    FUZZY = "fuzzy"
    PREFIX = "prefix"

    @classmethod
    def resolve(cls, value: MatchType | str | None) -> MatchType:
        """Map a configured name onto a strategy, defaulting to ``SUBSTRING``."""
        if isinstance(value, MatchType):
            return value
        try:
            return cls(value)
        except ValueError:
            if value is not None:
                logger.warning("Unknown match type %r; falling back to substring matching", value)
            return cls.SUBSTRING


class SortBy(Enum):
    """Enumerate the final result orderings."""

    RELEVANCE = "relevance"
    RECENT = "recent"
    NAME = "name"

    @classmethod
    def resolve(cls, value: SortBy | str | None) -> SortBy:
        """Map a configured name onto an ordering, defaulting to ``RELEVANCE``."""
        if isinstance(value, SortBy):
            return value
        try:
            return cls(value)
        except ValueError:
            if value is not None:
                logger.warning("Unknown sort order %r; keeping relevance order", value)
            return cls.RELEVANCE


class FilterType(Enum):
    """Secondary filters applied after text search."""

    STATUS = "status"
    PRIORITY = "priority"
    DUE_DATE = "dueDate"


class SessionState(Enum):
    """Lifecycle of a session between two query changes."""

    IDLE = "idle"
    DEBOUNCING = "debouncing"
    EVALUATING = "evaluating"
    SETTLED = "settled"


@dataclass(frozen=True)
class SearchFilter:
    """A tagged secondary filter such as ``status=True`` or ``priority="high"``."""

    type: FilterType
    value: Any = None

    def __post_init__(self) -> None:
        """Accept plain string tags (``"status"``, ``"dueDate"``...)."""
        if not isinstance(self.type, FilterType):
            object.__setattr__(self, "type", FilterType(self.type))

    @classmethod
    def status(cls, completed: bool) -> SearchFilter:
        """Keep records whose ``completed`` flag equals ``completed``."""
        return cls(FilterType.STATUS, completed)

    @classmethod
    def priority(cls, level: str) -> SearchFilter:
        """Keep records with the given priority."""
        return cls(FilterType.PRIORITY, level)

    @classmethod
    def due_date(cls, value: Any) -> SearchFilter:
        """Keep records due on the same calendar date as ``value``."""
        return cls(FilterType.DUE_DATE, value)

    def to_dict(self) -> MutableMapping[str, Any]:
        """Return a mutable copy suitable for JSON serialization."""
        value = self.value.isoformat() if hasattr(self.value, "isoformat") else self.value
        return {"type": self.type.value, "value": value}


@dataclass(frozen=True)
class FieldMatch:
    """The first field of a record that satisfied a token."""

    field: str
    score: float | None = None


@dataclass(frozen=True)
class RankedRecord:
    """A caller-owned record paired with its relevance score."""

    record: Record
    score: int


@dataclass(frozen=True)
class SearchStatistics:
    """Metadata describing how a result set was produced."""

    searched: bool
    terms_count: int = 0
    tokens_used: tuple[str, ...] = ()

    def to_dict(self) -> MutableMapping[str, Any]:
        """Return the camel-cased mapping consumed by UI layers."""
        payload: MutableMapping[str, Any] = {"searched": self.searched, "termsCount": self.terms_count}
        if self.searched:
            payload["tokensUsed"] = list(self.tokens_used)
        return payload


def _record_to_dict(record: Any) -> dict[str, Any]:
    """Copy a mapping record, or the instance attributes of an object record."""
    if isinstance(record, Mapping):
        return dict(record)
    if hasattr(record, "__dict__"):
        return dict(vars(record))
    slots = getattr(type(record), "__slots__", ())
    if isinstance(slots, str):
        slots = (slots,)
    return {name: getattr(record, name) for name in slots if hasattr(record, name)}


@dataclass(frozen=True)
class SearchResultSet:
    """Outcome of one pipeline evaluation.

    ``results`` holds the caller's own record objects in final order.
    ``ranked`` holds the same records paired with their relevance scores
    when ranking ran, and is empty otherwise.
    """

    results: Sequence[Record]
    search_time_ms: float
    statistics: SearchStatistics
    ranked: Sequence[RankedRecord] = field(default_factory=tuple)

    @property
    def result_count(self) -> int:
        """Return number of records in the result list."""
        return len(self.results)

    @property
    def searched(self) -> bool:
        """Distinguish "no matches" from "not yet searched"."""
        return self.statistics.searched

    def to_dict(self) -> MutableMapping[str, Any]:
        """Return a mutable copy suitable for JSON serialization."""
        return {
            "results": [_record_to_dict(record) for record in self.results],
            "resultCount": self.result_count,
            "searchTimeMs": self.search_time_ms,
            "statistics": self.statistics.to_dict(),
        }


@dataclass(frozen=True)
class HighlightSegment:
    """A run of text, flagged when it matched the highlighted term."""

    text: str
    highlighted: bool = False


@dataclass(frozen=True)
class TaskCounts:
    """Facet counts over an unfiltered task collection."""

    all: int = 0
    completed: int = 0
    pending: int = 0
    high: int = 0
    medium: int = 0
    low: int = 0

    def to_dict(self) -> MutableMapping[str, int]:
        """Return a mutable copy suitable for JSON serialization."""
        return {
            "all": self.all,
            "completed": self.completed,
            "pending": self.pending,
            "high": self.high,
            "medium": self.medium,
            "low": self.low,
        }
