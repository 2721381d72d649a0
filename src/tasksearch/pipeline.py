#  Copyright (c) 2025 Tom Villani, Ph.D.
"""One-shot evaluation of a query against an in-memory record collection.

The pipeline runs tokenize, filter, rank, secondary filters, sort and
truncate, in that order. It is synchronous and keeps no state between
calls; debouncing and history live in :mod:`tasksearch.session`.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping, Sequence
from typing import Any, Iterable

from tasksearch.exceptions import ValidationError
from tasksearch.filters import apply_filters, parse_datetime
from tasksearch.matching import field_value, matches_all_tokens
from tasksearch.options.search import SearchOptions
from tasksearch.scoring import rank_records
from tasksearch.tokenizer import parse_query
from tasksearch.types import MatchType, RankedRecord, Record, SearchFilter, SearchResultSet, SearchStatistics, SortBy

logger = logging.getLogger(__name__)


def validate_records(records: Any) -> Sequence[Record]:
    """Reject anything that is not a sequence of records.

    Strings, bytes and single mappings are sequences or iterables in Python
    but never a record collection, so they are refused too.
    """
    if isinstance(records, (str, bytes, bytearray, Mapping)) or not isinstance(records, Sequence):
        raise ValidationError(
            f"records must be a sequence of records, got {type(records).__name__}",
            parameter_name="records",
            parameter_value=records,
        )
    return records


def unsearched_result(records: Sequence[Record]) -> SearchResultSet:
    """Result set for a session that has neither a query nor filters."""
    return SearchResultSet(
        results=list(records),
        search_time_ms=0.0,
        statistics=SearchStatistics(searched=False, terms_count=0),
    )


def _title_key(entry: RankedRecord) -> tuple[bool, str, str]:
    title = field_value(entry.record, "title")
    if not isinstance(title, str):
        return (True, "", "")
    return (False, title.casefold(), title)


def _recent_key(entry: RankedRecord) -> tuple[bool, float]:
    created = parse_datetime(field_value(entry.record, "createdAt"))
    if created is None:
        return (True, 0.0)
    return (False, -created.timestamp())


def sort_entries(entries: list[RankedRecord], sort_by: SortBy, fields: Sequence[str]) -> list[RankedRecord]:
    """Apply the final ordering; records lacking the sort key go last."""
    if sort_by is SortBy.NAME and "title" in fields:
        return sorted(entries, key=_title_key)
    if sort_by is SortBy.RECENT:
        return sorted(entries, key=_recent_key)
    return entries


def evaluate(
    records: Sequence[Record],
    term: str,
    *,
    tokens: Iterable[str] | None = None,
    filters: Sequence[SearchFilter] = (),
    options: SearchOptions | None = None,
    sort_by: SortBy | str | None = None,
) -> SearchResultSet:
    """Filter, rank and order ``records`` for an already debounced ``term``.

    Parameters
    ----------
    records : sequence of Record
        Caller-owned records. They are never mutated; results reference the
        same objects.
    term : str
        The debounced query text. Ranking compares it untokenized.
    tokens : iterable of str, optional
        Precomputed tokenizer output for ``term``. Parsed here when omitted.
    filters : sequence of SearchFilter
        Secondary filters applied as a conjunction after text search.
    options : SearchOptions, optional
        Fields, match type, ranking and result cap.
    sort_by : SortBy or str, optional
        Overrides ``options.sort_by``.

    Returns
    -------
    SearchResultSet
        Final results, timing and statistics. With neither a term nor
        filters every record is returned unranked and ``searched`` is false.

    Raises
    ------
    ValidationError
        If ``records`` is not a sequence.

    """
    records = validate_records(records)
    opts = options or SearchOptions()
    fields = opts.search_fields
    filters = list(filters)

    if not term and not filters:
        return unsearched_result(records)

    start = time.perf_counter()
    token_list = list(tokens) if tokens is not None else parse_query(term)
    match_type = MatchType.resolve(opts.match_type)

    candidates: list[Any] = list(records)
    entries: list[RankedRecord] = []
    ranked = False
    if term and fields:
        candidates = [
            record
            for record in candidates
            if matches_all_tokens(
                record,
                token_list,
                fields,
                match_type,
                case_insensitive=opts.case_insensitive,
                fuzzy_threshold=opts.fuzzy_threshold,
            )
        ]
        if opts.rank_results:
            entries = rank_records(candidates, term, fields)
            ranked = True
    if not ranked:
        entries = [RankedRecord(record=record, score=0) for record in candidates]

    if filters:
        entries = apply_filters(entries, filters, key=lambda entry: entry.record)

    resolved_sort = SortBy.resolve(sort_by if sort_by is not None else opts.sort_by)
    entries = sort_entries(entries, resolved_sort, fields)

    if opts.max_results is not None and len(entries) > opts.max_results:
        entries = entries[: opts.max_results]

    elapsed_ms = (time.perf_counter() - start) * 1000.0
    logger.debug(
        "Search %r: %d tokens, %d of %d records kept in %.2fms",
        term,
        len(token_list),
        len(entries),
        len(records),
        elapsed_ms,
    )

    return SearchResultSet(
        results=[entry.record for entry in entries],
        search_time_ms=elapsed_ms,
        statistics=SearchStatistics(searched=True, terms_count=len(token_list), tokens_used=tuple(token_list)),
        ranked=tuple(entries) if ranked else (),
    )
