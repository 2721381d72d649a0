"""Pytest configuration and shared fixtures for the tasksearch test suite.

This module provides the shared task fixtures and a manually driven
scheduler that lets debounce tests advance time deterministically.
"""

import logging
import os
from typing import Callable, Iterator, List

import pytest
from hypothesis import Phase, Verbosity, settings

# Register custom Hypothesis profiles
settings.register_profile("ci", max_examples=100, verbosity=Verbosity.verbose)
settings.register_profile("dev", max_examples=20)
settings.register_profile(
    "debug", max_examples=10, verbosity=Verbosity.verbose, phases=[Phase.explicit, Phase.reuse, Phase.generate]
)

# Load profile from environment or use default
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "dev"))


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests - fast, isolated component tests")
    config.addinivalue_line("markers", "integration: Integration tests - component interaction tests")
    config.addinivalue_line("markers", "slow: Slow tests that may take several seconds")
    config.addinivalue_line("markers", "cli: Tests related to command-line interface")


class ManualTimer:
    """Timer handle owned by :class:`ManualScheduler`."""

    def __init__(self, due: float, callback: Callable[[], None]) -> None:
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Scheduler with a fake clock; timers fire only from :meth:`advance`."""

    def __init__(self) -> None:
        self.now = 0.0
        self.timers: List[ManualTimer] = []

    def call_later(self, delay: float, callback: Callable[[], None]) -> ManualTimer:
        timer = ManualTimer(self.now + delay, callback)
        self.timers.append(timer)
        return timer

    @property
    def live_timers(self) -> List[ManualTimer]:
        return [timer for timer in self.timers if not timer.cancelled]

    def advance(self, seconds: float) -> None:
        """Move the clock forward, firing every live timer that comes due."""
        self.now += seconds
        due = sorted(
            (timer for timer in self.timers if not timer.cancelled and timer.due <= self.now + 1e-9),
            key=lambda timer: timer.due,
        )
        self.timers = [timer for timer in self.timers if timer not in due]
        for timer in due:
            timer.callback()

    def advance_ms(self, milliseconds: float) -> None:
        self.advance(milliseconds / 1000.0)


@pytest.fixture(autouse=True)
def reset_package_logger() -> Iterator[None]:
    """Undo handler changes made by ``configure_logging`` during a test."""
    package_logger = logging.getLogger("tasksearch")
    saved = (package_logger.level, package_logger.propagate, list(package_logger.handlers))
    yield
    for handler in list(package_logger.handlers):
        if handler not in saved[2]:
            package_logger.removeHandler(handler)
            handler.close()
    package_logger.setLevel(saved[0])
    package_logger.propagate = saved[1]


@pytest.fixture
def scheduler() -> ManualScheduler:
    """Provide a fresh fake-clock scheduler."""
    return ManualScheduler()


@pytest.fixture
def sample_tasks() -> list[dict]:
    """Provide a small, varied task list.

    Returns
    -------
    list of dict
        Tasks shaped like the browser client's records.

    """
    return [
        {
            "id": 1,
            "title": "Fix login bug",
            "description": "Users cannot log in with uppercase emails",
            "priority": "high",
            "completed": False,
            "dueDate": "2024-03-10",
            "createdAt": "2024-03-01T09:00:00Z",
        },
        {
            "id": 2,
            "title": "Write report",
            "description": "Quarterly report for the finance team",
            "priority": "medium",
            "completed": True,
            "dueDate": "2024-03-15",
            "createdAt": "2024-03-03T12:30:00Z",
        },
        {
            "id": 3,
            "title": "Buy milk",
            "description": "",
            "priority": "low",
            "completed": False,
            "createdAt": "2024-02-27T18:00:00Z",
        },
        {
            "id": 4,
            "title": "Review bug reports",
            "description": "Triage the open reports from QA",
            "priority": "high",
            "completed": True,
            "dueDate": "2024-03-10T17:00:00Z",
            "createdAt": "2024-03-05T08:15:00Z",
        },
        {
            "id": 5,
            "title": "report",
            "priority": "medium",
            "completed": False,
        },
    ]
