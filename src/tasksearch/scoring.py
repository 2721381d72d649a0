#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Relevance scoring for records that survived token filtering."""

from __future__ import annotations

from typing import Any, Iterable, Sequence

from tasksearch.constants import SCORE_EXACT, SCORE_PREFIX, SCORE_SUBSTRING, SCORE_WORD
from tasksearch.matching import searchable_text, word_match
from tasksearch.types import RankedRecord


def score_field(value: str, query: str) -> int:
    """Points for one field: exact 100, prefix 75, contains 50, whole word 25."""
    folded_value = value.lower()
    folded_query = query.lower()
    if folded_value == folded_query:
        return SCORE_EXACT
    if folded_value.startswith(folded_query):
        return SCORE_PREFIX
    if folded_query in folded_value:
        return SCORE_SUBSTRING
    if word_match(folded_value, folded_query):
        return SCORE_WORD
    return 0


def score_record(record: Any, query: str, fields: Sequence[str]) -> int:
    """Sum the per-field tiers of ``record`` against the untokenized ``query``.

    Only the highest applicable tier counts for each field; tiers add up
    across fields. An empty query scores 0.
    """
    if not query:
        return 0
    total = 0
    for name in fields:
        value = searchable_text(record, name)
        if value is not None:
            total += score_field(value, query)
    return total


def rank_records(records: Iterable[Any], query: str, fields: Sequence[str]) -> list[RankedRecord]:
    """Pair each record with its score and sort descending.

    The sort is stable, so equally scored records keep their input order.
    """
    ranked = [RankedRecord(record=record, score=score_record(record, query, fields)) for record in records]
    ranked.sort(key=lambda item: item.score, reverse=True)
    return ranked
