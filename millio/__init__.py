"""A generic event loop: readiness polling, handler dispatch, worker and object pools."""

__version__ = "0.0.1a0"

__all__ = ["event_loop", "handler", "object_pool", "poll", "reactor", "thread_pool"]