"""Readiness polling over registered sources, with a cross-thread waker."""

from __future__ import annotations

import selectors
import socket
import threading

from .handler import Event, EventHandler, HandlerEntry, Interest

WAKER_TOKEN = 0
"""Token reserved for the internal waker; sources cannot be registered with it."""

MAX_EVENTS = 1024
"""Most events a single poll reports."""


def _selector_mask(interest: Interest) -> int:
    mask = 0
    if interest.is_readable:
        mask |= selectors.EVENT_READ
    if interest.is_writable:
        mask |= selectors.EVENT_WRITE
    return mask


class PollHandle:
    """Watches sources for readiness and maps their tokens to handlers.

    A source is anything a selector accepts: a file descriptor or an object
    with a ``fileno()`` method. Readiness is level-triggered.
    """

    def __init__(self) -> None:
        self._selector = selectors.DefaultSelector()
        self._wake_reader, self._wake_writer = socket.socketpair()
        self._wake_reader.setblocking(False)
        self._wake_writer.setblocking(False)
        self._selector.register(self._wake_reader, selectors.EVENT_READ, WAKER_TOKEN)
        self._entries: dict[int, HandlerEntry] = {}
        self._sources: dict[int, object] = {}
        self._lock = threading.RLock()
        self._poll_lock = threading.Lock()
        self._closed = False

    def _check_open(self) -> None:
        if self._closed:
            raise RuntimeError("poll handle is closed")

    def register(
        self, source, token: int, interest: Interest, handler: EventHandler
    ) -> None:
        """Watch ``source`` for ``interest`` and route its events to ``handler``.

        Registering a token again replaces its source, interest and handler.
        """
        if token == WAKER_TOKEN:
            raise ValueError(f"token {WAKER_TOKEN} is reserved for the waker")
        entry = HandlerEntry(handler, interest)
        mask = _selector_mask(interest)
        with self._lock:
            self._check_open()
            previous = self._sources.get(token)
            if previous is not None and previous is source:
                self._selector.modify(source, mask, token)
            else:
                if previous is not None:
                    self._forget_source(previous)
                    del self._sources[token]
                    del self._entries[token]
                self._selector.register(source, mask, token)
            self._sources[token] = source
            self._entries[token] = entry

    def _forget_source(self, source) -> None:
        try:
            self._selector.unregister(source)
        except (KeyError, ValueError, OSError):
            pass

    def unregister(self, token: int) -> None:
        """Stop watching the source registered under ``token``, if any."""
        with self._lock:
            self._entries.pop(token, None)
            source = self._sources.pop(token, None)
            if source is not None and not self._closed:
                self._forget_source(source)

    def poll(self, timeout: float | None = None) -> list[Event]:
        """Wait up to ``timeout`` seconds (forever if None) for readiness events.

        A call to :meth:`wake` ends the wait early; the wake-up itself is not
        reported as an event.
        """
        with self._poll_lock:
            self._check_open()
            ready = self._selector.select(timeout)
            events = []
            for key, mask in ready:
                if key.data == WAKER_TOKEN:
                    self._drain_waker()
                    continue
                events.append(
                    Event(
                        key.data,
                        readable=bool(mask & selectors.EVENT_READ),
                        writable=bool(mask & selectors.EVENT_WRITE),
                    )
                )
        return events[:MAX_EVENTS]

    def _drain_waker(self) -> None:
        while True:
            try:
                if not self._wake_reader.recv(4096):
                    return
            except (BlockingIOError, InterruptedError):
                return

    def _signal_waker(self) -> None:
        try:
            self._wake_writer.send(b"\0")
        except BlockingIOError:
            pass  # the waker is already pending

    def wake(self) -> None:
        """Make a blocked or upcoming :meth:`poll` return promptly."""
        with self._lock:
            self._check_open()
            self._signal_waker()

    def entry_for(self, token: int) -> HandlerEntry | None:
        """The handler entry registered under ``token``, or None."""
        with self._lock:
            return self._entries.get(token)

    def close(self) -> None:
        """Release the selector and the waker. Closing twice does nothing."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._signal_waker()
        with self._poll_lock:
            self._selector.close()
            self._wake_reader.close()
            self._wake_writer.close()
        with self._lock:
            self._entries.clear()
            self._sources.clear()

    def __contains__(self, token: object) -> bool:
        with self._lock:
            return token in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __enter__(self) -> PollHandle:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()