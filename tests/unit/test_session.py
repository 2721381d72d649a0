"""Unit tests for the stateful search session."""

import threading

import pytest

from tasksearch import session as session_module
from tasksearch.exceptions import ValidationError
from tasksearch.options import SearchOptions
from tasksearch.session import SearchSession
from tasksearch.types import SearchFilter, SessionState, SortBy


class _Handle:
    def __init__(self, callback):
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class ThreadedScheduler:
    """Scheduler that fires the latest timer on a fresh thread on demand."""

    def __init__(self):
        self.handles = []

    def call_later(self, delay, callback):
        handle = _Handle(callback)
        self.handles.append(handle)
        return handle

    def fire_on_thread(self) -> threading.Thread:
        thread = threading.Thread(target=self.handles[-1].callback)
        thread.start()
        return thread


@pytest.fixture
def session(sample_tasks, scheduler):
    """Provide a session with a 300ms debounce on the fake clock."""
    with SearchSession(sample_tasks, SearchOptions(), scheduler=scheduler) as search_session:
        yield search_session


@pytest.mark.unit
class TestInitialState:
    """Test a freshly created session."""

    def test_unsearched_result_holds_all_records(self, session, sample_tasks):
        """Test a new session publishes nothing and exposes every record."""
        assert session.state is SessionState.IDLE
        assert session.results == sample_tasks
        assert session.result.searched is False
        assert not session.is_searching
        assert not session.has_filters
        assert session.has_results
        assert session.sort_by is SortBy.RELEVANCE

    def test_sort_by_seeded_from_options(self, sample_tasks, scheduler):
        """Test the initial ordering comes from the options."""
        session = SearchSession(sample_tasks, SearchOptions(sort_by="name"), scheduler=scheduler)
        assert session.sort_by is SortBy.NAME

    def test_rejects_non_sequence_records(self, scheduler):
        """Test a string is refused as a record collection."""
        with pytest.raises(ValidationError):
            SearchSession("not records", scheduler=scheduler)


@pytest.mark.unit
class TestDebouncedQuery:
    """Test query debouncing."""

    def test_burst_evaluates_once_with_last_value(self, session, scheduler):
        """Test a burst of keystrokes publishes once with the final text."""
        published = []
        session.add_listener(published.append)
        for text in ("r", "re", "rep", "report"):
            session.set_query(text)
            scheduler.advance_ms(50)
        assert session.state is SessionState.DEBOUNCING
        assert published == []
        assert session.query == "report"
        assert session.debounced_query == ""

        scheduler.advance_ms(300)
        assert len(published) == 1
        assert session.debounced_query == "report"
        assert session.state is SessionState.SETTLED
        assert published[0] is session.result
        assert published[0].statistics.tokens_used == ("report",)

    def test_same_query_is_a_no_op(self, session, scheduler):
        """Test repeating the current query schedules nothing."""
        session.set_query("bug")
        scheduler.advance_ms(300)
        session.set_query("bug")
        assert session.state is SessionState.SETTLED
        assert scheduler.live_timers == []

    def test_flush_evaluates_immediately(self, session):
        """Test flush delivers the pending query without waiting."""
        session.set_query("milk")
        assert session.flush() is True
        assert [task["id"] for task in session.results] == [3]
        assert session.result_count == 1
        assert session.search_time_ms >= 0

    def test_clear_query_is_debounced(self, session, scheduler):
        """Test clearing the query waits for the quiet period too."""
        session.set_query("milk")
        scheduler.advance_ms(300)
        session.clear_query()
        assert session.result_count == 1
        scheduler.advance_ms(300)
        assert session.result.searched is False
        assert session.result_count == 5

    def test_zero_delay_evaluates_synchronously(self, sample_tasks, scheduler):
        """Test a zero delay settles inside set_query."""
        session = SearchSession(sample_tasks, SearchOptions(debounce_delay_ms=0), scheduler=scheduler)
        session.set_query("milk")
        assert session.state is SessionState.SETTLED
        assert session.result_count == 1

    def test_zero_delay_listeners_run_outside_session_lock(self, sample_tasks, scheduler):
        """Test another thread can take the session lock while a listener runs."""
        acquired = []
        session = None

        def try_lock():
            got = session._lock.acquire(timeout=2)
            if got:
                session._lock.release()
            acquired.append(got)

        def listener(result):
            worker = threading.Thread(target=try_lock)
            worker.start()
            worker.join()

        session = SearchSession(
            sample_tasks, SearchOptions(debounce_delay_ms=0), scheduler=scheduler, on_results=listener
        )
        session.set_query("milk")
        assert acquired == [True]

    def test_on_results_listener(self, sample_tasks, scheduler):
        """Test a removed listener stops receiving results."""
        published = []
        session = SearchSession(
            sample_tasks, SearchOptions(debounce_delay_ms=0), scheduler=scheduler, on_results=published.append
        )
        session.set_query("bug")
        session.remove_listener(published.append)
        session.set_query("milk")
        assert len(published) == 1
        assert published[0].statistics.tokens_used == ("bug",)


@pytest.mark.unit
class TestPublishOrder:
    """Test that listeners never see an older result after a newer one."""

    def test_slow_timer_listener_does_not_deliver_stale_result_last(self, sample_tasks):
        """Test a sort change racing a timer-thread publish ends on the newest result."""
        scheduler = ThreadedScheduler()
        session = SearchSession(sample_tasks, SearchOptions(), scheduler=scheduler)
        main_thread = threading.current_thread()
        observed = []
        timer_entered = threading.Event()
        release = threading.Event()

        def listener(result):
            if threading.current_thread() is not main_thread and not timer_entered.is_set():
                timer_entered.set()
                release.wait(timeout=5)
            observed.append(result)

        session.add_listener(listener)
        session.set_query("report")
        timer_thread = scheduler.fire_on_thread()
        assert timer_entered.wait(timeout=5)

        sorter = threading.Thread(target=session.set_sort_by, args=("name",))
        sorter.start()
        sorter.join(timeout=0.2)
        release.set()
        timer_thread.join(timeout=5)
        sorter.join(timeout=5)

        assert observed[-1] is session.result
        assert [task["title"] for task in observed[-1].results] == ["report", "Review bug reports", "Write report"]
        session.close()

    def test_stale_sequence_is_not_published(self, sample_tasks, scheduler):
        """Test a result numbered below the last published one is dropped."""
        published = []
        session = SearchSession(
            sample_tasks, SearchOptions(debounce_delay_ms=0), scheduler=scheduler, on_results=published.append
        )
        session.set_query("bug")
        session._published_seq += 5
        session.set_sort_by("name")
        assert len(published) == 1
        assert session.result.statistics.tokens_used == ("bug",)


@pytest.mark.unit
class TestImmediateUpdates:
    """Test that filters, sorting and records re-evaluate without debouncing."""

    def test_add_and_remove_filters(self, session):
        """Test adding, removing and clearing filters re-evaluates each time."""
        result = session.add_filter(SearchFilter.priority("high"))
        assert [task["id"] for task in result.results] == [1, 4]
        assert session.has_filters

        session.add_filter(SearchFilter.status(True))
        assert [task["id"] for task in session.results] == [4]

        session.remove_filter(0)
        assert session.applied_filters == [SearchFilter.status(True)]
        assert [task["id"] for task in session.results] == [2, 4]

        session.clear_filters()
        assert session.applied_filters == []
        assert session.result.searched is False

    @pytest.mark.parametrize("index", [-1, 0, 3])
    def test_remove_filter_out_of_range(self, session, index):
        """Test a bad filter index raises a ValidationError naming the index."""
        with pytest.raises(ValidationError) as exc_info:
            session.remove_filter(index)
        assert exc_info.value.parameter_name == "index"

    def test_filters_use_debounced_query(self, session, scheduler):
        """Test a filter change applies to the settled query, not the pending one."""
        session.set_query("report")
        scheduler.advance_ms(300)
        session.set_query("report milk")
        session.add_filter(SearchFilter.status(False))
        # The pending query has not settled yet
        assert [task["id"] for task in session.results] == [5]
        assert session.state is SessionState.DEBOUNCING

    def test_set_sort_by(self, session, scheduler):
        """Test switching to name order re-sorts the current results."""
        session.set_query("report")
        scheduler.advance_ms(300)
        session.set_sort_by("name")
        assert session.sort_by is SortBy.NAME
        assert [task["title"] for task in session.results] == ["report", "Review bug reports", "Write report"]

    def test_unknown_sort_by_keeps_relevance(self, session):
        """Test an unknown ordering falls back to relevance."""
        session.set_sort_by("random")
        assert session.sort_by is SortBy.RELEVANCE

    def test_set_records(self, session, scheduler):
        """Test replacing the records re-runs the settled query."""
        session.set_query("milk")
        scheduler.advance_ms(300)
        result = session.set_records([{"title": "Oat milk"}, {"title": "Bread"}])
        assert result.results == [{"title": "Oat milk"}]


@pytest.mark.unit
class TestSuggestionsAndHistory:
    """Test suggestions and the query history."""

    def test_suggestions_follow_raw_query(self, session):
        """Test suggestions use the raw query before it settles."""
        session.set_query("repo")
        assert session.suggestions[:3] == ["Write report", "Review bug reports", "report"]
        assert len(session.suggestions) == 5

    def test_short_query_has_no_suggestions(self, session):
        """Test a one-character query yields no suggestions."""
        session.set_query("r")
        assert session.suggestions == []

    def test_history_records_debounced_query(self, session, scheduler):
        """Test only the settled query is stored, once."""
        session.set_query("bug")
        assert session.add_current_query_to_history() is False
        scheduler.advance_ms(300)
        assert session.add_current_query_to_history() is True
        assert session.add_current_query_to_history() is False
        assert session.search_history == ["bug"]
        session.clear_history()
        assert session.search_history == []

    def test_history_limit_from_options(self, sample_tasks):
        """Test the history keeps only the configured number of queries."""
        session = SearchSession(sample_tasks, SearchOptions(debounce_delay_ms=0, history_limit=2))
        for query in ("a", "b", "c"):
            session.set_query(query)
            session.add_current_query_to_history()
        assert session.search_history == ["c", "b"]


@pytest.mark.unit
class TestClose:
    """Test teardown."""

    def test_close_cancels_pending_evaluation(self, sample_tasks, scheduler):
        """Test closing drops a pending query."""
        published = []
        session = SearchSession(sample_tasks, scheduler=scheduler, on_results=published.append)
        session.set_query("bug")
        session.close()
        scheduler.advance_ms(1000)
        assert published == []
        assert session.closed
        assert session.state is SessionState.IDLE

    def test_close_during_debounced_evaluation_publishes_nothing(self, sample_tasks, scheduler, monkeypatch):
        """Test a close that lands while the timer callback evaluates suppresses the publish."""
        published = []
        session = SearchSession(sample_tasks, scheduler=scheduler, on_results=published.append)
        real_evaluate = session_module.evaluate

        def closing_evaluate(*args, **kwargs):
            session.close()
            return real_evaluate(*args, **kwargs)

        monkeypatch.setattr(session_module, "evaluate", closing_evaluate)
        session.set_query("bug")
        scheduler.advance_ms(300)
        assert published == []

    def test_debounced_value_after_close_is_ignored(self, sample_tasks, scheduler):
        """Test a late timer callback after close neither evaluates nor publishes."""
        published = []
        session = SearchSession(sample_tasks, scheduler=scheduler, on_results=published.append)
        session.close()
        session._on_debounced("bug")
        assert published == []
        assert session.debounced_query == ""
        assert session.result.searched is False

    def test_operations_after_close_raise(self, session):
        """Test inputs are refused once closed."""
        session.close()
        with pytest.raises(RuntimeError):
            session.set_query("bug")
        with pytest.raises(RuntimeError):
            session.add_filter(SearchFilter.priority("high"))

    def test_context_manager_closes(self, sample_tasks, scheduler):
        """Test leaving the with-block closes the session and its timer."""
        with SearchSession(sample_tasks, scheduler=scheduler) as session:
            session.set_query("bug")
        assert session.closed
        assert scheduler.live_timers == []
