#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Command-line interface for searching a JSON task file.

The query is evaluated once, without debouncing, using the same pipeline a
:class:`~tasksearch.session.SearchSession` runs.

Environment Variable Support
----------------------------
``TASKSEARCH_CONFIG`` names a configuration file used when ``--config`` is
not given. Otherwise ``.tasksearch.toml`` (or ``.yaml``/``.yml``/``.json``,
or ``[tool.tasksearch]`` in ``pyproject.toml``) is discovered from the
working directory upwards.

Examples
--------
Basic search::

    $ tasksearch bug tasks.json

Quoted phrase, whole-word matching, only pending high-priority tasks::

    $ tasksearch '"fix bug" login' tasks.json --match-type word --status pending --priority high

Machine-readable output::

    $ tasksearch report tasks.json --sort-by recent --max-results 5 --json

"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from tasksearch import __version__
from tasksearch.config import load_config_with_priority, options_from_config
from tasksearch.constants import CONFIG_ENV_VAR, FILTER_PRESETS, PRIORITY_VALUES
from tasksearch.exceptions import ConfigurationError, TaskSearchError, ValidationError
from tasksearch.filters import preset_filters, task_counts
from tasksearch.highlight import highlight_term, render_highlighted
from tasksearch.logging_utils import configure_logging
from tasksearch.matching import field_value
from tasksearch.options.search import SearchOptions
from tasksearch.pipeline import evaluate
from tasksearch.suggestions import suggest
from tasksearch.tokenizer import parse_query
from tasksearch.types import MatchType, Record, SearchFilter, SearchResultSet, SortBy

logger = logging.getLogger(__name__)

EXIT_SUCCESS = 0
EXIT_ERROR = 1
EXIT_VALIDATION_ERROR = 3
EXIT_FILE_ERROR = 4


class TaskFileError(TaskSearchError):
    """Raised when the task file cannot be read or decoded."""


def create_parser() -> argparse.ArgumentParser:
    """Build the ``tasksearch`` argument parser."""
    parser = argparse.ArgumentParser(
        prog="tasksearch",
        description="Search, filter and rank the tasks stored in a JSON file.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("query", help="Search query; quote phrases to keep them together")
    parser.add_argument(
        "tasks_file",
        help="JSON file holding an array of tasks, or an object with a 'tasks' array",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--config", help="Configuration file overriding discovered defaults")

    search_group = parser.add_argument_group("search options")
    search_group.add_argument(
        "--fields",
        dest="search_fields",
        help="Comma-separated record fields to search, in priority order",
    )
    search_group.add_argument(
        "--match-type",
        dest="match_type",
        choices=[m.value for m in MatchType],
        help="Matching strategy applied to each token",
    )
    search_group.add_argument(
        "--rank",
        dest="rank_results",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Sort matches by relevance score",
    )
    search_group.add_argument("--max-results", dest="max_results", type=int, help="Maximum number of results")
    search_group.add_argument(
        "--sort-by",
        dest="sort_by",
        choices=[s.value for s in SortBy],
        help="Final ordering of results",
    )

    filter_group = parser.add_argument_group("filters")
    filter_group.add_argument("--status", choices=["completed", "pending"], help="Keep tasks with this status")
    filter_group.add_argument("--priority", choices=list(PRIORITY_VALUES), help="Keep tasks with this priority")
    filter_group.add_argument("--due-date", dest="due_date", help="Keep tasks due on this date (YYYY-MM-DD)")
    filter_group.add_argument("--preset", choices=list(FILTER_PRESETS), help="Apply a filter-bar preset")

    output_group = parser.add_argument_group("output")
    mode = output_group.add_mutually_exclusive_group()
    mode.add_argument("--suggest", action="store_true", help="Print autocomplete suggestions instead of results")
    mode.add_argument("--counts", action="store_true", help="Print task counts per status and priority")
    output_group.add_argument("--json", action="store_true", help="Emit output as JSON")
    output_group.add_argument("--rich", action="store_true", help="Enable rich-style output formatting")

    log_group = parser.add_argument_group("logging")
    log_group.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        type=str.upper,
        help="Logging verbosity",
    )
    log_group.add_argument("--log-file", help="Also write log messages to this file")
    log_group.add_argument("--trace", action="store_true", help="Include timestamps and logger names in log output")
    return parser


def load_tasks(path: str | Path) -> List[Record]:
    """Read task records from a JSON file.

    Raises
    ------
    TaskFileError
        If the file cannot be read or is not valid JSON.
    ValidationError
        If the JSON document holds no task array, or an entry is not an object.

    """
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise TaskFileError(f"Invalid JSON in task file {path}: {e}", e) from e
    except OSError as e:
        raise TaskFileError(f"Error reading task file {path}: {e}", e) from e

    if isinstance(data, dict):
        data = data.get("tasks")
    if not isinstance(data, list):
        raise ValidationError(
            f"Task file {path} must contain an array of tasks or an object with a 'tasks' array",
            parameter_name="tasks_file",
            parameter_value=str(path),
        )
    for index, task in enumerate(data):
        if not isinstance(task, dict):
            raise ValidationError(
                f"Task #{index} in {path} is a {type(task).__name__}, expected an object",
                parameter_name="tasks_file",
                parameter_value=str(path),
            )
    return data


def _collect_search_overrides(parsed: argparse.Namespace) -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    if parsed.search_fields is not None:
        overrides["search_fields"] = tuple(name.strip() for name in parsed.search_fields.split(",") if name.strip())
    for name in ("match_type", "rank_results", "max_results", "sort_by"):
        value = getattr(parsed, name)
        if value is not None:
            overrides[name] = value
    return overrides


def _collect_filters(parsed: argparse.Namespace) -> List[SearchFilter]:
    filters: List[SearchFilter] = []
    if parsed.preset:
        filters.extend(preset_filters(parsed.preset))
    if parsed.status:
        filters.append(SearchFilter.status(parsed.status == "completed"))
    if parsed.priority:
        filters.append(SearchFilter.priority(parsed.priority))
    if parsed.due_date:
        filters.append(SearchFilter.due_date(parsed.due_date))
    return filters


def _task_details(record: Record) -> str:
    details = []
    priority = field_value(record, "priority")
    if priority:
        details.append(f"priority={priority}")
    details.append("completed" if field_value(record, "completed") else "pending")
    due = field_value(record, "dueDate")
    if due:
        details.append(f"due={due}")
    return ", ".join(details)


def _render_results(result: SearchResultSet, query: str, *, use_rich: bool) -> None:
    if not result.results:
        print("No results found.")
        return

    scores = [entry.score for entry in result.ranked] if result.ranked else None
    console = None
    if use_rich:
        from rich.console import Console

        console = Console()

    for rank, record in enumerate(result.results, start=1):
        title = str(field_value(record, "title") or "(untitled)")
        segments = highlight_term(title, query)

        if console is not None:
            from rich.text import Text

            line = Text(f"{rank:>2}. ", style="bold cyan")
            if scores is not None:
                line.append(f"score={scores[rank - 1]} ", style="green")
            for segment in segments:
                line.append(segment.text, style="bold yellow" if segment.highlighted else None)
            console.print(line)
            console.print(Text(f"    {_task_details(record)}", style="dim"))
            continue

        line_text = f"{rank:>2}."
        if scores is not None:
            line_text += f" score={scores[rank - 1]}"
        line_text += f" {render_highlighted(segments)}"
        print(line_text)
        print(f"    {_task_details(record)}")

    summary = f"{result.result_count} result(s) in {result.search_time_ms:.2f}ms"
    if console is not None:
        console.print(summary, style="dim")
    else:
        print(summary)


def main(args: Optional[List[str]] = None) -> int:
    """Run the ``tasksearch`` command and return a process exit code."""
    parser = create_parser()
    try:
        parsed = parser.parse_args(args)
    except SystemExit as exc:
        return exc.code if isinstance(exc.code, int) else 0

    configure_logging(parsed.log_level, log_file=parsed.log_file, trace_mode=parsed.trace)

    env_config_path = os.environ.get(CONFIG_ENV_VAR)
    try:
        config_data = load_config_with_priority(explicit_path=parsed.config, env_var_path=env_config_path)
        options = options_from_config(config_data, SearchOptions(debounce_delay_ms=0))
    except ConfigurationError as exc:
        print(f"Error loading configuration: {exc}", file=sys.stderr)
        return EXIT_VALIDATION_ERROR

    overrides = _collect_search_overrides(parsed)
    try:
        if overrides:
            options = options.create_updated(**overrides)
        filters = _collect_filters(parsed)
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_VALIDATION_ERROR

    try:
        tasks = load_tasks(parsed.tasks_file)
    except TaskFileError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_FILE_ERROR
    except ValidationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_VALIDATION_ERROR
    logger.info("Loaded %d tasks from %s", len(tasks), parsed.tasks_file)

    if parsed.counts:
        counts = task_counts(tasks).to_dict()
        if parsed.json:
            print(json.dumps(counts, indent=2))
        else:
            for name, count in counts.items():
                print(f"{name:<10}{count:>6}")
        return EXIT_SUCCESS

    if parsed.suggest:
        suggestions = suggest(
            tasks,
            parsed.query,
            options.search_fields,
            options.max_suggestions,
            min_length=options.min_suggestion_length,
            case_insensitive=options.case_insensitive,
        )
        if parsed.json:
            print(json.dumps(suggestions, indent=2, ensure_ascii=False))
        else:
            for suggestion in suggestions:
                print(suggestion)
        return EXIT_SUCCESS

    try:
        result = evaluate(tasks, parsed.query, tokens=parse_query(parsed.query), filters=filters, options=options)
    except TaskSearchError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_VALIDATION_ERROR
    except Exception as exc:
        logger.debug("Search failed", exc_info=True)
        print(f"Error executing search: {exc}", file=sys.stderr)
        return EXIT_ERROR

    if parsed.json:
        payload = result.to_dict()
        payload["appliedFilters"] = [search_filter.to_dict() for search_filter in filters]
        print(json.dumps(payload, indent=2, ensure_ascii=False, default=str))
    else:
        _render_results(result, parsed.query, use_rich=parsed.rich)
    return EXIT_SUCCESS


__all__ = ["main", "create_parser", "load_tasks", "TaskFileError"]
