#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Secondary filters applied after text search.

Filters are conjunctive: a record is kept only when it satisfies every
applied filter, so the order in which filters were added does not affect
the outcome.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any, Callable, Iterable, Optional, Sequence

from tasksearch.constants import FILTER_PRESETS
from tasksearch.exceptions import ValidationError
from tasksearch.matching import field_value
from tasksearch.types import FilterType, SearchFilter, TaskCounts


def parse_datetime(value: Any) -> datetime | None:
    """Interpret ``value`` as a point in time.

    Accepts ``datetime``/``date`` objects, ISO 8601 strings (a trailing
    ``Z`` is allowed) and epoch timestamps in milliseconds, as produced by
    browser clients. Naive values are taken to be UTC. Anything else,
    including unparseable strings, yields ``None``.
    """
    parsed: datetime | None = None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            parsed = datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None

    if parsed is not None and parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_calendar_date(value: Any) -> date | None:
    """Reduce ``value`` to a calendar date, ignoring time of day.

    Strings keep the calendar date they were written with; no timezone
    conversion is applied.
    """
    if isinstance(value, date) and not isinstance(value, datetime):
        return value
    parsed = parse_datetime(value)
    return parsed.date() if parsed is not None else None


def _same_value(actual: Any, expected: Any) -> bool:
    # True == 1 in Python; a status filter must not accept integer flags
    return actual == expected and isinstance(actual, bool) == isinstance(expected, bool)


def matches_filter(record: Any, search_filter: SearchFilter) -> bool:
    """Return whether ``record`` satisfies one secondary filter.

    A status filter without a value, and priority or due-date filters with
    an empty value, accept every record.
    """
    if search_filter.type is FilterType.STATUS:
        if search_filter.value is None:
            return True
        return _same_value(field_value(record, "completed"), search_filter.value)

    if search_filter.type is FilterType.PRIORITY:
        if not search_filter.value:
            return True
        return field_value(record, "priority") == search_filter.value

    if not search_filter.value:
        return True
    wanted = parse_calendar_date(search_filter.value)
    actual = parse_calendar_date(field_value(record, "dueDate"))
    return wanted is not None and actual == wanted


def apply_filters(
    records: Iterable[Any],
    filters: Sequence[SearchFilter],
    *,
    key: Optional[Callable[[Any], Any]] = None,
) -> list[Any]:
    """Keep the items that satisfy every filter, preserving order.

    ``key`` extracts the record from each item, for callers filtering
    wrapped records such as :class:`RankedRecord` pairs.
    """
    items = list(records)
    if not filters:
        return items
    get_record = key or (lambda item: item)
    return [item for item in items if all(matches_filter(get_record(item), f) for f in filters)]


def preset_filters(name: str) -> list[SearchFilter]:
    """Translate a filter bar preset (``all``, ``completed``, ``high``...) into filters."""
    try:
        preset = FILTER_PRESETS[name]
    except KeyError as exc:
        raise ValidationError(
            f"Unknown filter preset '{name}'. Expected one of: {', '.join(FILTER_PRESETS)}",
            parameter_name="preset",
            parameter_value=name,
            original_error=exc,
        ) from exc
    if preset is None:
        return []
    filter_type, value = preset
    return [SearchFilter(FilterType(filter_type), value)]


def task_counts(records: Iterable[Any]) -> TaskCounts:
    """Count records per status and priority over the unfiltered collection."""
    total = completed = high = medium = low = 0
    for record in records:
        total += 1
        if field_value(record, "completed"):
            completed += 1
        priority = field_value(record, "priority")
        if priority == "high":
            high += 1
        elif priority == "medium":
            medium += 1
        elif priority == "low":
            low += 1
    return TaskCounts(
        all=total,
        completed=completed,
        pending=total - completed,
        high=high,
        medium=medium,
        low=low,
    )
