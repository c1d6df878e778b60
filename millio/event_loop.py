"""A small event loop built on the reactor."""

from __future__ import annotations

from .handler import EventHandler, Interest
from .reactor import Reactor


class EventLoop:
    """Registers sources with handlers and runs the reactor that serves them."""

    def __init__(self, workers: int) -> None:
        self._reactor = Reactor(workers)

    def register(
        self, source, token: int, interests: Interest, handler: EventHandler
    ) -> None:
        """Route readiness events of ``source`` to ``handler``."""
        self._reactor.poll_handle.register(source, token, interests, handler)

    def run(self) -> None:
        """Run until :meth:`stop` is called."""
        self._reactor.run()

    def stop(self) -> None:
        """Stop a running loop; safe to call from another thread."""
        self._reactor.shutdown_handle().shutdown()

    def close(self) -> None:
        """Finish queued handlers and release all resources."""
        self._reactor.close()

    def __enter__(self) -> EventLoop:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()