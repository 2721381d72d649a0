#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Trailing-edge debouncing on top of a pluggable scheduler.

A :class:`Debouncer` owns at most one live timer handle. Every trigger
cancels the live handle before scheduling a new one, so a burst of
triggers results in a single callback carrying the last value.

Schedulers only need ``call_later(delay_seconds, callback)`` returning an
object with ``cancel()``. :class:`ThreadingScheduler` is the default; a
running ``asyncio`` event loop satisfies the protocol as-is::

    loop = asyncio.get_running_loop()
    debouncer = Debouncer(300, on_value, scheduler=loop)
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Generic, Optional, Protocol, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class TimerHandle(Protocol):
    """Handle returned by a scheduler for one deferred call."""

    def cancel(self) -> Any:
        """Prevent the deferred call from running if it has not started."""
        ...


class Scheduler(Protocol):
    """Anything that can run a callback after a delay."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        """Run ``callback`` once after ``delay`` seconds."""
        ...


class ThreadingScheduler:
    """Scheduler backed by daemon :class:`threading.Timer` threads."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        """Start a daemon timer that runs ``callback`` after ``delay`` seconds."""
        timer = threading.Timer(delay, callback)
        timer.daemon = True
        timer.start()
        return timer


class Debouncer(Generic[T]):
    """Deliver only the last of a rapid series of values.

    Parameters
    ----------
    delay_ms : int
        Quiet period required before ``callback`` runs. Zero delivers every
        value synchronously from :meth:`trigger`.
    callback : callable
        Receives the settled value. It runs on whatever thread the
        scheduler fires on and never while the debouncer's lock is held.
    scheduler : Scheduler, optional
        Defaults to a :class:`ThreadingScheduler`.

    """

    def __init__(
        self,
        delay_ms: int,
        callback: Callable[[T], None],
        scheduler: Optional[Scheduler] = None,
    ) -> None:
        """Create an idle debouncer."""
        if delay_ms < 0:
            raise ValueError(f"delay_ms cannot be negative, got {delay_ms}")
        self.delay_ms = delay_ms
        self._callback = callback
        self._scheduler: Scheduler = scheduler or ThreadingScheduler()
        self._lock = threading.RLock()
        self._handle: Optional[TimerHandle] = None
        self._generation = 0
        self._pending: Optional[tuple[T]] = None
        self._closed = False

    @property
    def pending(self) -> bool:
        """Whether a value is waiting for its quiet period to elapse."""
        with self._lock:
            return self._pending is not None

    @property
    def closed(self) -> bool:
        """Whether :meth:`close` has been called."""
        return self._closed

    def trigger(self, value: T) -> None:
        """Restart the quiet period with ``value`` as the value to deliver.

        Raises
        ------
        RuntimeError
            If the debouncer has been closed.

        """
        with self._lock:
            if self._closed:
                raise RuntimeError("Debouncer is closed")
            self._cancel_handle()
            self._generation += 1
            if self.delay_ms == 0:
                self._pending = None
            else:
                self._pending = (value,)
                generation = self._generation
                self._handle = self._scheduler.call_later(
                    self.delay_ms / 1000.0, lambda: self._fire(generation)
                )
                logger.debug("Debounce scheduled (generation %d, %dms)", generation, self.delay_ms)
                return
        self._callback(value)

    def flush(self) -> bool:
        """Deliver a pending value now; return ``False`` when nothing was pending."""
        with self._lock:
            if self._pending is None:
                return False
            (value,) = self._pending
            self._pending = None
            self._cancel_handle()
            self._generation += 1
        self._callback(value)
        return True

    def cancel(self) -> None:
        """Drop a pending value without delivering it."""
        with self._lock:
            if self._pending is not None:
                logger.debug("Debounce cancelled (generation %d)", self._generation)
            self._pending = None
            self._cancel_handle()
            self._generation += 1

    def close(self) -> None:
        """Cancel any pending value and refuse further triggers. Idempotent."""
        with self._lock:
            self.cancel()
            self._closed = True

    def _cancel_handle(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self, generation: int) -> None:
        with self._lock:
            # A cancelled timer may still run if it had already started
            if self._closed or generation != self._generation or self._pending is None:
                return
            (value,) = self._pending
            self._pending = None
            self._handle = None
        self._callback(value)
