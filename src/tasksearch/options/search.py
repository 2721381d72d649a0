#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Configuration options for the search pipeline and session."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional

from tasksearch.constants import (
    DEFAULT_CASE_INSENSITIVE,
    DEFAULT_DEBOUNCE_DELAY_MS,
    DEFAULT_FUZZY_THRESHOLD,
    DEFAULT_HISTORY_LIMIT,
    DEFAULT_MATCH_TYPE,
    DEFAULT_MAX_SUGGESTIONS,
    DEFAULT_MIN_SUGGESTION_LENGTH,
    DEFAULT_RANK_RESULTS,
    DEFAULT_SEARCH_FIELDS,
    DEFAULT_SORT_BY,
)
from tasksearch.exceptions import ValidationError
from tasksearch.options.base import CloneFrozenMixin


@dataclass(frozen=True)
class SearchOptions(CloneFrozenMixin):
    """Search configuration toggles used by the session, pipeline and CLI.

    ``match_type`` and ``sort_by`` are kept as plain strings. Unrecognized
    values are accepted here and fall back to ``substring`` matching and
    relevance ordering when a search runs.
    """

    search_fields: tuple[str, ...] = field(
        default=DEFAULT_SEARCH_FIELDS,
        metadata={
            "help": "Record fields searched for every token, in priority order",
            "importance": "core",
        },
    )
    match_type: str = field(
        default=DEFAULT_MATCH_TYPE,
        metadata={
            "help": "Matching strategy applied to each token",
            "choices": ["exact", "substring", "word", "fuzzy", "prefix"],
            "importance": "core",
        },
    )
    case_insensitive: bool = field(
        default=DEFAULT_CASE_INSENSITIVE,
        metadata={
            "help": "Compare field values and tokens without regard to case",
            "importance": "core",
        },
    )
    rank_results: bool = field(
        default=DEFAULT_RANK_RESULTS,
        metadata={
            "help": "Score surviving records against the full query and sort by relevance",
            "importance": "core",
        },
    )
    max_results: Optional[int] = field(
        default=None,
        metadata={
            "help": "Truncate the result list to this many records. Use None for no limit",
            "type": int,
            "importance": "core",
        },
    )
    debounce_delay_ms: int = field(
        default=DEFAULT_DEBOUNCE_DELAY_MS,
        metadata={
            "help": "Milliseconds the query must stay unchanged before a search runs",
            "type": int,
            "importance": "core",
        },
    )
    sort_by: str = field(
        default=DEFAULT_SORT_BY,
        metadata={
            "help": "Final ordering of results",
            "choices": ["relevance", "recent", "name"],
            "importance": "core",
        },
    )
    history_limit: int = field(
        default=DEFAULT_HISTORY_LIMIT,
        metadata={
            "help": "Number of recent queries kept in the search history",
            "type": int,
            "importance": "advanced",
        },
    )
    max_suggestions: int = field(
        default=DEFAULT_MAX_SUGGESTIONS,
        metadata={
            "help": "Maximum number of autocomplete suggestions",
            "type": int,
            "importance": "advanced",
        },
    )
    min_suggestion_length: int = field(
        default=DEFAULT_MIN_SUGGESTION_LENGTH,
        metadata={
            "help": "Minimum raw query length before suggestions are produced",
            "type": int,
            "importance": "advanced",
        },
    )
    fuzzy_threshold: float = field(
        default=DEFAULT_FUZZY_THRESHOLD,
        metadata={
            "help": "Fuzzy scores must exceed this value for a field to match",
            "type": float,
            "importance": "advanced",
        },
    )

    def __post_init__(self) -> None:
        """Normalize enum and string inputs, then validate numeric ranges."""
        if isinstance(self.search_fields, str):
            object.__setattr__(self, "search_fields", (self.search_fields,))
        elif not isinstance(self.search_fields, tuple):
            if not isinstance(self.search_fields, Iterable):
                raise ValidationError(
                    f"search_fields must be a sequence of field names, got {type(self.search_fields).__name__}",
                    parameter_name="search_fields",
                    parameter_value=self.search_fields,
                )
            object.__setattr__(self, "search_fields", tuple(self.search_fields))
        if isinstance(self.match_type, Enum):
            object.__setattr__(self, "match_type", str(self.match_type.value))
        if isinstance(self.sort_by, Enum):
            object.__setattr__(self, "sort_by", str(self.sort_by.value))

        if self.max_results is not None and self.max_results < 0:
            raise ValidationError(
                f"max_results cannot be negative, got {self.max_results}",
                parameter_name="max_results",
                parameter_value=self.max_results,
            )
        if self.debounce_delay_ms < 0:
            raise ValueError(f"debounce_delay_ms cannot be negative, got {self.debounce_delay_ms}")
        if self.history_limit <= 0:
            raise ValueError("history_limit must be positive")
        if self.max_suggestions < 0:
            raise ValueError("max_suggestions cannot be negative")
        if self.min_suggestion_length < 0:
            raise ValueError("min_suggestion_length cannot be negative")
        if not (0 <= self.fuzzy_threshold <= 1):
            raise ValueError("fuzzy_threshold must be between 0 and 1")


__all__ = ["SearchOptions"]
