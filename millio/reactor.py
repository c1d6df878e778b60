"""The reactor: polls for readiness and hands events to worker threads."""

from __future__ import annotations

import threading
from collections import Counter

from .handler import Event
from .poll import PollHandle
from .thread_pool import ThreadPool

POLL_TIMEOUT = 0.150
"""Seconds a single poll of the run loop waits before checking for shutdown."""


class Reactor:
    """Polls registered sources and dispatches their events to a thread pool."""

    def __init__(self, pool_size: int) -> None:
        self.poll_handle = PollHandle()
        try:
            self._pool = ThreadPool(pool_size)
        except Exception:
            self.poll_handle.close()
            raise
        self._running = threading.Event()
        self._in_flight: Counter[int] = Counter()
        self._flight_lock = threading.Lock()

    @property
    def running(self) -> bool:
        return self._running.is_set()

    def run(self) -> None:
        """Poll and dispatch until a shutdown handle stops the loop."""
        self._running.set()
        while self._running.is_set():
            try:
                self.poll_once(POLL_TIMEOUT)
            except RuntimeError:
                if self._running.is_set():
                    raise
                break

    def poll_once(self, timeout: float | None = None) -> int:
        """Poll once and dispatch what became ready; return the number of events.

        Events for a token whose handler is still running are not dispatched
        again until it has finished.
        """
        events = self.poll_handle.poll(timeout)
        for event in events:
            with self._flight_lock:
                busy = self._in_flight[event.token] > 0
            if not busy:
                self.dispatch_event(event)
        return len(events)

    def _settle(self, token: int) -> None:
        with self._flight_lock:
            self._in_flight[token] -= 1
            if self._in_flight[token] <= 0:
                del self._in_flight[token]

    def dispatch_event(self, event: Event) -> None:
        """Queue the handler registered for ``event.token`` on the thread pool.

        The handler runs only if the event matches its registered interest.
        """
        token = event.token
        with self._flight_lock:
            self._in_flight[token] += 1

        def task() -> None:
            try:
                entry = self.poll_handle.entry_for(token)
                if entry is not None and entry.accepts(event):
                    entry.handler.handle_event(event)
            finally:
                self._settle(token)

        try:
            self._pool.exec(task)
        except Exception:
            self._settle(token)
            raise

    def shutdown_handle(self) -> ShutdownHandle:
        return ShutdownHandle(self)

    def close(self) -> None:
        """Stop the loop, finish queued handlers and release the poller."""
        self._running.clear()
        self._pool.shutdown()
        self.poll_handle.close()

    def __enter__(self) -> Reactor:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class ShutdownHandle:
    """Stops a running reactor from any thread."""

    def __init__(self, reactor: Reactor) -> None:
        self._reactor = reactor

    def shutdown(self) -> None:
        """Ask the run loop to stop and wake it from its current poll."""
        self._reactor._running.clear()
        self._reactor.poll_handle.wake()