import threading
import time

import pytest

from millio.thread_pool import ThreadPool


class AtomicCounter:
    def __init__(self):
        self._lock = threading.Lock()
        self.value = 0

    def add(self):
        with self._lock:
            self.value += 1


def _run_tasks(workers, tasks):
    """Run tasks in a pool that is shut down on leaving; return the pool."""
    with ThreadPool(workers) as pool:
        assert len(pool) == workers
        for task in tasks:
            pool.exec(task)
    return pool


def _slow(counter):
    def task():
        time.sleep(0.05)
        counter.add()

    return task


def _boom():
    raise ValueError("boom")


def test_thread_pool_creation():
    with ThreadPool(4) as pool:
        assert len(pool) == 4


def test_task_execution_waits_for_completion():
    counter = AtomicCounter()
    done = threading.Event()

    def task():
        counter.add()
        done.set()

    with ThreadPool(2) as pool:
        assert len(pool) == 2
        pool.exec(task)
        assert done.wait(1.0)
    assert counter.value == 1


@pytest.mark.parametrize(
    "workers, make_tasks, expected",
    [
        (2, lambda c: [c.add], 1),
        (4, lambda c: [c.add] * 10, 10),
        (2, lambda c: [_slow(c)], 1),
        (1, lambda c: [_boom, c.add], 1),
    ],
    ids=["single", "multiple", "cleanup-waits", "failing-task"],
)
def test_tasks_finish_before_shutdown(workers, make_tasks, expected):
    counter = AtomicCounter()
    _run_tasks(workers, make_tasks(counter))
    assert counter.value == expected


def _shut_down_pool():
    pool = ThreadPool(1)
    pool.shutdown()
    return pool


@pytest.mark.parametrize(
    "make_pool",
    [lambda: _run_tasks(2, []), _shut_down_pool, lambda: ThreadPool(0)],
    ids=["after-context", "after-shutdown", "no-workers"],
)
def test_pool_refuses_tasks(make_pool):
    with pytest.raises(RuntimeError):
        make_pool().exec(lambda: None)


def test_negative_capacity_rejected():
    with pytest.raises(ValueError):
        ThreadPool(-1)


def test_shutdown_twice_is_harmless():
    counter = AtomicCounter()
    pool = ThreadPool(2)
    pool.exec(counter.add)
    pool.shutdown()
    pool.shutdown()
    assert counter.value == 1