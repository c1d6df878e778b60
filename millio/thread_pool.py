"""A fixed-size pool of worker threads executing submitted tasks."""

from __future__ import annotations

import logging
import queue
import threading
from typing import Callable

_log = logging.getLogger(__name__)

_TERMINATE = object()


class ThreadPool:
    """Runs tasks on a fixed number of worker threads in submission order."""

    def __init__(self, capacity: int) -> None:
        if capacity < 0:
            raise ValueError("capacity must not be negative")
        self._tasks: queue.SimpleQueue = queue.SimpleQueue()
        self._lock = threading.Lock()
        self._closed = False
        self._workers = [
            threading.Thread(
                target=self._work, name=f"millio-worker-{worker_id}", daemon=True
            )
            for worker_id in range(capacity)
        ]
        for worker in self._workers:
            worker.start()

    def _work(self) -> None:
        while True:
            task = self._tasks.get()
            if task is _TERMINATE:
                return
            try:
                task()
            except Exception:
                _log.exception("task raised in %s", threading.current_thread().name)

    def exec(self, task: Callable[[], object]) -> None:
        """Queue ``task`` for a worker.

        Raises RuntimeError if the pool has no workers or has been shut down.
        """
        with self._lock:
            if self._closed or not self._workers:
                raise RuntimeError("thread pool is not accepting tasks")
            self._tasks.put(task)

    def shutdown(self) -> None:
        """Finish queued tasks, stop every worker and wait for them."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            for _ in self._workers:
                self._tasks.put(_TERMINATE)
        current = threading.current_thread()
        for worker in self._workers:
            if worker is not current:
                worker.join()

    def __len__(self) -> int:
        return len(self._workers)

    def __enter__(self) -> ThreadPool:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()