#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Stateful search session: debounced query, filters, sorting and history.

A session corresponds to one mounted search box. The caller supplies the
record collection and feeds it keystrokes; the session debounces the query,
runs the pipeline and publishes each settled :class:`SearchResultSet` to
its listeners.

Examples
--------
    >>> with SearchSession(tasks, SearchOptions(debounce_delay_ms=0)) as session:
    ...     session.set_query("bug")
    ...     [task["title"] for task in session.results]
    ['Fix bug']

"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Optional, Sequence

from tasksearch.debounce import Debouncer, Scheduler
from tasksearch.exceptions import ValidationError
from tasksearch.history import SearchHistory
from tasksearch.options.search import SearchOptions
from tasksearch.pipeline import evaluate, unsearched_result, validate_records
from tasksearch.suggestions import suggest
from tasksearch.tokenizer import parse_query
from tasksearch.types import (
    Record,
    SearchFilter,
    SearchResultSet,
    SearchStatistics,
    SessionState,
    SortBy,
)

logger = logging.getLogger(__name__)

ResultsListener = Callable[[SearchResultSet], None]


class SearchSession:
    """Service object coordinating debounced query evaluation.

    Parameters
    ----------
    records : sequence of Record
        Caller-owned records; replace them with :meth:`set_records`.
    options : SearchOptions, optional
        Search configuration. ``sort_by`` seeds the initial ordering.
    scheduler : Scheduler, optional
        Timer source for debouncing. Defaults to threading timers.
    on_results : callable, optional
        Listener called with every published result set.

    Notes
    -----
    Only query text is debounced. Changing records, filters or the sort
    order re-evaluates immediately against the last debounced query.

    """

    def __init__(
        self,
        records: Sequence[Record] = (),
        options: SearchOptions | None = None,
        *,
        scheduler: Optional[Scheduler] = None,
        on_results: Optional[ResultsListener] = None,
    ) -> None:
        """Create an idle session over ``records``."""
        self.options = options or SearchOptions()
        self._lock = threading.RLock()
        self._records: Sequence[Record] = validate_records(records)
        self._query = ""
        self._debounced_query = ""
        self._filters: list[SearchFilter] = []
        self._sort_by = SortBy.resolve(self.options.sort_by)
        self._history = SearchHistory(self.options.history_limit)
        self._listeners: list[ResultsListener] = [on_results] if on_results else []
        self._publish_lock = threading.RLock()
        self._evaluation_seq = 0
        self._published_seq = 0
        self._state = SessionState.IDLE
        self._result = unsearched_result(self._records)
        self._debouncer: Debouncer[str] = Debouncer(
            self.options.debounce_delay_ms, self._on_debounced, scheduler=scheduler
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Release the pending debounce timer. No callback fires afterwards."""
        with self._lock:
            self._debouncer.close()
            logger.debug("Search session closed")
            if self._state is SessionState.DEBOUNCING:
                self._state = SessionState.SETTLED if self._result.searched else SessionState.IDLE

    @property
    def closed(self) -> bool:
        """Whether :meth:`close` has been called."""
        return self._debouncer.closed

    def __enter__(self) -> SearchSession:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    def add_listener(self, listener: ResultsListener) -> None:
        """Register ``listener`` for published result sets."""
        with self._lock:
            self._listeners.append(listener)

    def remove_listener(self, listener: ResultsListener) -> None:
        """Unregister a listener; unknown listeners are ignored."""
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    # ------------------------------------------------------------------
    # Inputs
    # ------------------------------------------------------------------

    def set_records(self, records: Sequence[Record]) -> SearchResultSet:
        """Replace the record collection and re-evaluate immediately."""
        validated = validate_records(records)
        with self._lock:
            self._ensure_open()
            self._records = validated
            logger.debug("Replaced records (%d)", len(validated))
        return self.refresh()

    def set_query(self, text: str) -> None:
        """Record a keystroke; evaluation waits for the debounce delay."""
        with self._lock:
            self._ensure_open()
            if text == self._query:
                return
            self._query = text
            if self.options.debounce_delay_ms > 0:
                self._state = SessionState.DEBOUNCING
                self._debouncer.trigger(text)
                return
        # Zero delay calls back synchronously, outside the session lock.
        self._debouncer.trigger(text)

    def clear_query(self) -> None:
        """Empty the query box. The cleared query is debounced like any other."""
        self.set_query("")

    def add_filter(self, search_filter: SearchFilter) -> SearchResultSet:
        """Append a secondary filter and re-evaluate."""
        with self._lock:
            self._ensure_open()
            self._filters.append(search_filter)
        return self.refresh()

    def remove_filter(self, index: int) -> SearchResultSet:
        """Remove the filter at ``index`` and re-evaluate.

        Raises
        ------
        ValidationError
            If ``index`` does not address an applied filter.

        """
        with self._lock:
            self._ensure_open()
            if not 0 <= index < len(self._filters):
                raise ValidationError(
                    f"Filter index {index} out of range for {len(self._filters)} applied filters",
                    parameter_name="index",
                    parameter_value=index,
                )
            del self._filters[index]
        return self.refresh()

    def clear_filters(self) -> SearchResultSet:
        """Drop every secondary filter and re-evaluate."""
        with self._lock:
            self._ensure_open()
            self._filters = []
        return self.refresh()

    def set_sort_by(self, sort_by: SortBy | str) -> SearchResultSet:
        """Change the final ordering and re-evaluate."""
        with self._lock:
            self._ensure_open()
            self._sort_by = SortBy.resolve(sort_by)
        return self.refresh()

    def add_current_query_to_history(self) -> bool:
        """Store the debounced query in the history; see :class:`SearchHistory`."""
        with self._lock:
            return self._history.add(self._debounced_query)

    def clear_history(self) -> None:
        """Forget every stored query."""
        with self._lock:
            self._history.clear()

    def flush(self) -> bool:
        """Evaluate a pending query now instead of waiting for the timer."""
        return self._debouncer.flush()

    def refresh(self) -> SearchResultSet:
        """Re-run the pipeline against the last debounced query and publish."""
        return self._evaluate_and_publish()

    # ------------------------------------------------------------------
    # Outputs
    # ------------------------------------------------------------------

    @property
    def query(self) -> str:
        """The raw, not yet debounced query text."""
        return self._query

    @property
    def debounced_query(self) -> str:
        """The query text the current results were computed for."""
        return self._debounced_query

    @property
    def state(self) -> SessionState:
        """Where the session is between input and published results."""
        return self._state

    @property
    def result(self) -> SearchResultSet:
        """The last published result set."""
        return self._result

    @property
    def results(self) -> list[Record]:
        """Records of the last published result set."""
        return list(self._result.results)

    @property
    def result_count(self) -> int:
        """Number of records in the last published result set."""
        return self._result.result_count

    @property
    def search_time_ms(self) -> float:
        """Evaluation time of the last published result set."""
        return self._result.search_time_ms

    @property
    def statistics(self) -> SearchStatistics:
        """Statistics of the last published result set."""
        return self._result.statistics

    @property
    def suggestions(self) -> list[str]:
        """Autocomplete candidates for the raw query; not debounced."""
        with self._lock:
            return suggest(
                self._records,
                self._query,
                self.options.search_fields,
                self.options.max_suggestions,
                min_length=self.options.min_suggestion_length,
                case_insensitive=self.options.case_insensitive,
            )

    @property
    def search_history(self) -> list[str]:
        """Recent debounced queries, most recent first."""
        return self._history.entries

    @property
    def applied_filters(self) -> list[SearchFilter]:
        """Secondary filters in the order they were added."""
        return list(self._filters)

    @property
    def sort_by(self) -> SortBy:
        """Current final ordering."""
        return self._sort_by

    @property
    def is_searching(self) -> bool:
        """Whether the raw query box holds any text."""
        return len(self._query) > 0

    @property
    def has_filters(self) -> bool:
        """Whether any secondary filter is applied."""
        return len(self._filters) > 0

    @property
    def has_results(self) -> bool:
        """Whether the last published result set is non-empty."""
        return self._result.result_count > 0

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _ensure_open(self) -> None:
        if self._debouncer.closed:
            raise RuntimeError("Search session is closed")

    def _on_debounced(self, value: str) -> None:
        self._evaluate_and_publish(debounced_query=value)

    def _evaluate_and_publish(self, debounced_query: Optional[str] = None) -> SearchResultSet:
        """Run the pipeline and notify listeners.

        Evaluations are numbered under the session lock. Listeners are
        called one publish at a time, and a result older than the last one
        delivered is never sent, so listeners see results in evaluation order.
        """
        with self._lock:
            if debounced_query is not None:
                if self._debouncer.closed:
                    return self._result
                self._debounced_query = debounced_query
            self._state = SessionState.EVALUATING
            result = evaluate(
                self._records,
                self._debounced_query,
                tokens=parse_query(self._debounced_query),
                filters=self._filters,
                options=self.options,
                sort_by=self._sort_by,
            )
            self._result = result
            self._state = SessionState.DEBOUNCING if self._debouncer.pending else SessionState.SETTLED
            self._evaluation_seq += 1
            seq = self._evaluation_seq
            listeners = list(self._listeners)

        with self._publish_lock:
            if seq <= self._published_seq:
                logger.debug("Dropped stale result set %d (last published %d)", seq, self._published_seq)
                return result
            if debounced_query is not None and self._debouncer.closed:
                return result
            self._published_seq = seq
            for listener in listeners:
                if seq < self._published_seq:
                    # A listener re-entered the session and published a newer result.
                    break
                listener(result)
        return result
