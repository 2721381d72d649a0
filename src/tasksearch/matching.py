#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Field matching strategies.

Each strategy compares one field value against one token. ``match_record``
applies the configured strategy across a record's searchable fields and
reports the first field that matched.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from functools import lru_cache
from typing import Any, Sequence

from tasksearch.constants import (
    DEFAULT_FUZZY_THRESHOLD,
    FUZZY_EXACT_SCORE,
    FUZZY_SUBSTRING_SCORE,
    FUZZY_WORD_SCORE,
)
from tasksearch.types import FieldMatch, MatchType


def field_value(record: Any, name: str) -> Any:
    """Return ``record[name]`` for mappings, or the attribute for other objects."""
    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name, None)


def searchable_text(record: Any, name: str) -> str | None:
    """Return the field value when it is a non-empty string, else ``None``."""
    value = field_value(record, name)
    if isinstance(value, str) and value:
        return value
    return None


def _fold(text: str, case_insensitive: bool) -> str:
    return text.lower() if case_insensitive else text


@lru_cache(maxsize=256)
def _word_pattern(term: str) -> re.Pattern[str]:
    return re.compile(rf"\b{re.escape(term)}\b")


def exact_match(text: str, term: str, *, case_insensitive: bool = True) -> bool:
    """Whole value equals the term."""
    return _fold(text, case_insensitive) == _fold(term, case_insensitive)


def substring_match(text: str, term: str, *, case_insensitive: bool = True) -> bool:
    """Term appears anywhere in the value."""
    return _fold(term, case_insensitive) in _fold(text, case_insensitive)


def word_match(text: str, term: str) -> bool:
    """Term appears as a whole word.

    Always case-insensitive: both sides are lowered before the boundary
    search. The term is matched literally, so characters such as ``+`` or
    ``(`` in user input never form a pattern.
    """
    return _word_pattern(term.lower()).search(text.lower()) is not None


def prefix_match(text: str, term: str, *, case_insensitive: bool = True) -> bool:
    """Value starts with the term."""
    return _fold(text, case_insensitive).startswith(_fold(term, case_insensitive))


def fuzzy_match(text: str, term: str, *, case_insensitive: bool = True) -> float:
    """Score in ``[0, 1]`` for how well ``term`` fits ``text``.

    Exact, substring and whole-word matches score 1.0, 0.9 and 0.8. Otherwise
    the term's characters are scanned greedily, in order, through the text;
    if every character is found the score is ``len(term) / len(text)``,
    rewarding short values, and 0 when any character is missing.
    """
    folded_text = _fold(text, case_insensitive)
    folded_term = _fold(term, case_insensitive)

    if folded_text == folded_term:
        return FUZZY_EXACT_SCORE
    if folded_term in folded_text:
        return FUZZY_SUBSTRING_SCORE
    if _word_pattern(folded_term).search(folded_text) is not None:
        return FUZZY_WORD_SCORE

    term_index = 0
    for char in folded_text:
        if term_index == len(folded_term):
            break
        if char == folded_term[term_index]:
            term_index += 1

    if term_index == len(folded_term):
        return term_index / len(folded_text)
    return 0.0


def match_field(
    text: str,
    term: str,
    strategy: MatchType | str,
    *,
    case_insensitive: bool = True,
) -> bool | float:
    """Evaluate one (text, term) pair; fuzzy returns a score, others a bool."""
    resolved = MatchType.resolve(strategy)
    if resolved is MatchType.EXACT:
        return exact_match(text, term, case_insensitive=case_insensitive)
    if resolved is MatchType.WORD:
        return word_match(text, term)
    if resolved is MatchType.PREFIX:
        return prefix_match(text, term, case_insensitive=case_insensitive)
    if resolved is MatchType.FUZZY:
        return fuzzy_match(text, term, case_insensitive=case_insensitive)
    return substring_match(text, term, case_insensitive=case_insensitive)


def match_record(
    record: Any,
    term: str,
    fields: Sequence[str],
    match_type: MatchType | str = MatchType.SUBSTRING,
    *,
    case_insensitive: bool = True,
    fuzzy_threshold: float = DEFAULT_FUZZY_THRESHOLD,
) -> FieldMatch | None:
    """Return the first field of ``record`` that satisfies ``term``.

    Fields are tried in the given order and only non-empty string values are
    considered. Fuzzy matches must score above ``fuzzy_threshold``. An empty
    term or an empty field list never matches.
    """
    if not term or not fields:
        return None

    strategy = MatchType.resolve(match_type)
    for name in fields:
        text = searchable_text(record, name)
        if text is None:
            continue
        if strategy is MatchType.FUZZY:
            score = fuzzy_match(text, term, case_insensitive=case_insensitive)
            if score > fuzzy_threshold:
                return FieldMatch(field=name, score=score)
        elif match_field(text, term, strategy, case_insensitive=case_insensitive):
            return FieldMatch(field=name)
    return None


def matches_all_tokens(
    record: Any,
    tokens: Sequence[str],
    fields: Sequence[str],
    match_type: MatchType | str = MatchType.SUBSTRING,
    *,
    case_insensitive: bool = True,
    fuzzy_threshold: float = DEFAULT_FUZZY_THRESHOLD,
) -> bool:
    """AND semantics: every token must match some field of the record."""
    return all(
        match_record(
            record,
            token,
            fields,
            match_type,
            case_insensitive=case_insensitive,
            fuzzy_threshold=fuzzy_threshold,
        )
        is not None
        for token in tokens
    )
