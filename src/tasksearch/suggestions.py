#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Autocomplete suggestions drawn from raw field values."""

from __future__ import annotations

from typing import Any, Sequence

from tasksearch.constants import DEFAULT_MAX_SUGGESTIONS, DEFAULT_MIN_SUGGESTION_LENGTH
from tasksearch.matching import searchable_text


def suggest(
    records: Sequence[Any],
    raw_term: str,
    fields: Sequence[str],
    max_suggestions: int = DEFAULT_MAX_SUGGESTIONS,
    *,
    min_length: int = DEFAULT_MIN_SUGGESTION_LENGTH,
    case_insensitive: bool = True,
) -> list[str]:
    """Return up to ``max_suggestions`` distinct field values containing ``raw_term``.

    Fields are visited in order and, within each field, records in order;
    values are returned in order of first encounter. Terms shorter than
    ``min_length`` produce no suggestions. Match type and scoring do not
    apply here.
    """
    if not raw_term or len(raw_term) < min_length or max_suggestions <= 0:
        return []

    needle = raw_term.lower() if case_insensitive else raw_term
    found: dict[str, None] = {}
    for name in fields:
        for record in records:
            value = searchable_text(record, name)
            if value is None:
                continue
            haystack = value.lower() if case_insensitive else value
            if needle in haystack:
                found.setdefault(value, None)
                if len(found) >= max_suggestions:
                    return list(found)
    return list(found)
