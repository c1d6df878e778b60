"""A thread-safe pool of reusable objects."""

from __future__ import annotations

import queue
from typing import Callable, Generic, TypeVar

IO_BUFFER_SIZE = 8192

T = TypeVar("T")


class ObjectPool(Generic[T]):
    """Hands out pooled objects, creating new ones when the pool is empty."""

    def __init__(self, initial_size: int, create_fn: Callable[[], T]) -> None:
        if initial_size < 0:
            raise ValueError("initial_size must not be negative")
        self._create_fn = create_fn
        self._idle: queue.SimpleQueue[T] = queue.SimpleQueue()
        for _ in range(initial_size):
            self._idle.put(create_fn())

    def acquire(self) -> PooledObject[T]:
        """Take an object from the pool, or create one if none is idle.

        Byte buffers are cleared and sized to ``IO_BUFFER_SIZE`` zero bytes.
        """
        try:
            obj = self._idle.get_nowait()
        except queue.Empty:
            obj = self._create_fn()
        if isinstance(obj, bytearray):
            obj.clear()
            obj.extend(bytes(IO_BUFFER_SIZE))
        return PooledObject(obj, self)

    def _give_back(self, obj: T) -> None:
        self._idle.put(obj)

    def __len__(self) -> int:
        """Number of idle objects waiting in the pool."""
        return self._idle.qsize()


class PooledObject(Generic[T]):
    """An object borrowed from a pool; it goes back when released."""

    def __init__(self, obj: T, pool: ObjectPool[T]) -> None:
        self._object = obj
        self._pool: ObjectPool[T] | None = pool

    @property
    def value(self) -> T:
        if self._pool is None:
            raise RuntimeError("pooled object has already been released")
        return self._object

    @property
    def released(self) -> bool:
        return self._pool is None

    def release(self) -> None:
        """Return the object to its pool. Releasing twice does nothing."""
        pool, self._pool = self._pool, None
        if pool is not None:
            pool._give_back(self._object)

    def __enter__(self) -> T:
        return self.value

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()

    def __del__(self) -> None:
        try:
            self.release()
        except Exception:
            pass