#  Copyright (c) 2025 Tom Villani, Ph.D.
"""tasksearch - In-memory search, filtering and ranking for task lists.

tasksearch evaluates a free-text query against a caller-owned collection of
task records. Queries are tokenized (quoted phrases stay together), every
token must match one of the configured fields under the selected matching
strategy, and the survivors are scored against the full query, narrowed by
secondary filters, ordered and truncated.

Key Features
------------
- Five matching strategies: exact, substring, word, fuzzy and prefix
- Tiered relevance scoring (exact, prefix, contains, whole word)
- Status, priority and due-date filters plus filter-bar presets
- Debounced, thread-safe search sessions with history and suggestions
- Configuration from TOML, YAML, JSON or ``pyproject.toml``

Requirements
------------
- Python 3.10+

Examples
--------
One-shot search:

    >>> from tasksearch import search_records
    >>> tasks = [{"title": "Buy milk"}, {"title": "Fix bug"}]
    >>> search_records(tasks, "bug").results
    [{'title': 'Fix bug'}]

Interactive session with debouncing:

    >>> from tasksearch import SearchOptions, SearchSession
    >>> with SearchSession(tasks, SearchOptions(debounce_delay_ms=300)) as session:
    ...     session.set_query("fix")
    ...     session.flush()
    ...     session.result_count
    True
    1

"""

from __future__ import annotations

__version__ = "1.0.0"

from typing import Iterable, Sequence

from tasksearch.debounce import Debouncer, Scheduler, ThreadingScheduler
from tasksearch.exceptions import ConfigurationError, TaskSearchError, ValidationError
from tasksearch.filters import apply_filters, matches_filter, preset_filters, task_counts
from tasksearch.highlight import highlight_term, render_highlighted
from tasksearch.history import SearchHistory
from tasksearch.matching import fuzzy_match, match_field, match_record
from tasksearch.options import SearchOptions
from tasksearch.pipeline import evaluate
from tasksearch.scoring import rank_records, score_record
from tasksearch.session import SearchSession
from tasksearch.suggestions import suggest
from tasksearch.tokenizer import parse_query
from tasksearch.types import (
    FieldMatch,
    FilterType,
    HighlightSegment,
    MatchType,
    RankedRecord,
    Record,
    SearchFilter,
    SearchResultSet,
    SearchStatistics,
    SessionState,
    SortBy,
    TaskCounts,
)


def search_records(
    records: Sequence[Record],
    query: str,
    *,
    options: SearchOptions | None = None,
    filters: Iterable[SearchFilter] = (),
    sort_by: SortBy | str | None = None,
) -> SearchResultSet:
    """Tokenize ``query`` and evaluate it once, without debouncing.

    Parameters
    ----------
    records : sequence of Record
        Task records to search. They are returned as-is, never copied.
    query : str
        Raw query text; quoted phrases form a single token.
    options : SearchOptions, optional
        Search configuration. Defaults to ``SearchOptions()``.
    filters : iterable of SearchFilter
        Secondary filters, all of which must hold.
    sort_by : SortBy or str, optional
        Overrides ``options.sort_by``.

    Returns
    -------
    SearchResultSet
        Results, timing and statistics for the query.

    Raises
    ------
    ValidationError
        If ``records`` is not a sequence of records.

    """
    return evaluate(
        records,
        query,
        tokens=parse_query(query),
        filters=list(filters),
        options=options,
        sort_by=sort_by,
    )


__all__ = [
    "__version__",
    "search_records",
    "evaluate",
    "parse_query",
    "match_field",
    "match_record",
    "fuzzy_match",
    "score_record",
    "rank_records",
    "suggest",
    "apply_filters",
    "matches_filter",
    "preset_filters",
    "task_counts",
    "highlight_term",
    "render_highlighted",
    "SearchSession",
    "SearchHistory",
    "Debouncer",
    "Scheduler",
    "ThreadingScheduler",
    "SearchOptions",
    "FieldMatch",
    "FilterType",
    "HighlightSegment",
    "MatchType",
    "RankedRecord",
    "Record",
    "SearchFilter",
    "SearchResultSet",
    "SearchStatistics",
    "SessionState",
    "SortBy",
    "TaskCounts",
    "TaskSearchError",
    "ValidationError",
    "ConfigurationError",
]
