import contextlib
import socket
import threading
import time

import pytest

from millio.event_loop import EventLoop
from millio.handler import Event, EventHandler, Interest


class Collector(EventHandler):
    """Keeps every event it is given and the bytes its socket had."""

    def __init__(self, sock):
        self.sock = sock
        self.events = []
        self.received = bytearray()
        self.lock = threading.Lock()
        self.called = threading.Event()

    def handle_event(self, event):
        chunk = b""
        with contextlib.suppress(BlockingIOError):
            chunk = self.sock.recv(4096)
        with self.lock:
            self.events.append(event)
            self.received.extend(chunk)
        self.called.set()


@pytest.fixture
def sockets():
    ends = socket.socketpair()
    ends[0].setblocking(False)
    yield ends
    for end in ends:
        end.close()


@contextlib.contextmanager
def _looping(loop):
    """Keep ``loop.run`` going in a thread until the block ends."""
    runner = threading.Thread(target=loop.run)
    runner.start()
    yield
    loop.stop()
    runner.join(2)
    assert not runner.is_alive()


@pytest.mark.parametrize(
    "workers, token, interest, payload, expected",
    [
        (2, 1, Interest.READABLE, b"hello", Event(1, readable=True)),
        (1, 2, Interest.WRITABLE, b"", Event(2, writable=True)),
    ],
    ids=["readable", "writable"],
)
def test_run_delivers_events(sockets, workers, token, interest, payload, expected):
    local, remote = sockets
    with EventLoop(workers) as loop:
        handler = Collector(local)
        loop.register(local, token, interest, handler)
        with _looping(loop):
            if payload:
                remote.sendall(payload)
            assert handler.called.wait(2.0)
    assert handler.events[0] == expected
    assert bytes(handler.received) == payload


def test_stop_ends_run():
    loop = EventLoop(2)
    with _looping(loop):
        time.sleep(0.1)
    loop.close()


def test_register_rejects_reserved_token(sockets):
    with EventLoop(1) as loop:
        with pytest.raises(ValueError):
            loop.register(sockets[0], 0, Interest.READABLE, Collector(sockets[0]))


def test_closed_loop_refuses_work(sockets):
    local = sockets[0]
    with EventLoop(1) as loop:
        pass
    for attempt in (
        lambda: loop.register(local, 1, Interest.READABLE, Collector(local)),
        loop.stop,
    ):
        with pytest.raises(RuntimeError):
            attempt()