# millio

A small, generic event loop for Python. It watches I/O sources for
readiness with the standard `selectors` module, looks up the handler
registered for each source's token and runs that handler on a pool of worker
threads.

The package is made of a few pieces that can also be used on their own:

- `millio.event_loop.EventLoop` – the front door: register sources, run the
  loop, stop it, close it.
- `millio.reactor.Reactor` – polls for readiness and dispatches events to the
  worker pool. `Reactor.shutdown_handle()` returns a `ShutdownHandle` whose
  `shutdown()` stops a running reactor from another thread.
- `millio.poll.PollHandle` – the poller plus the token → handler registry,
  with a waker that interrupts a blocking poll.
- `millio.handler` – `Interest` (a flag of `READABLE` and `WRITABLE`),
  `Event` (a token with `readable` / `writable` flags), the `EventHandler`
  base class and `HandlerEntry`, whose `accepts(event)` decides whether an
  event matches a registration.
- `millio.thread_pool.ThreadPool` – a fixed set of worker threads fed from a
  shared queue.
- `millio.object_pool.ObjectPool` – a pool of reusable objects handed out as
  `PooledObject` handles that go back to the pool when released.

## Installation

```
pip install millio
```

Python 3.10 or later is required; there are no third-party dependencies.

## Handling events

Subclass `EventHandler` and implement `handle_event`. Handlers run on worker
threads, so keep any shared state behind a lock.

```python
import socket
import threading

from millio.event_loop import EventLoop
from millio.handler import EventHandler, Interest


class Echo(EventHandler):
    def __init__(self, sock):
        self.sock = sock

    def handle_event(self, event):
        data = self.sock.recv(4096)
        if data:
            self.sock.sendall(data)


left, right = socket.socketpair()
left.setblocking(False)

loop = EventLoop(4)                      # four worker threads
loop.register(left, 1, Interest.READABLE, Echo(left))

runner = threading.Thread(target=loop.run)
runner.start()

right.sendall(b"hello")
print(right.recv(4096))                  # b'hello'

loop.stop()                              # wakes the poller and ends run()
runner.join()
loop.close()                             # finishes queued handlers, frees the poller
```

`EventLoop`, `Reactor`, `PollHandle` and `ThreadPool` are also context
managers that close themselves on exit.

Some rules the loop follows:

- A source is anything a selector accepts: a file descriptor or an object
  with a `fileno()` method. Readiness is level-triggered.
- A handler is called only when the event matches the interest it was
  registered with: a source registered as readable is not handed write-only
  events.
- While a token's handler is still running, further events for that token
  are not dispatched; the next poll reports the source again if it is still
  ready.
- Token `0` is reserved for the internal waker; registering it raises
  `ValueError`. Registering a token again replaces its source, interest and
  handler; `PollHandle.unregister(token)` removes it.
- `run()` polls in slices of 150 ms so that `stop()` takes effect promptly
  even when no I/O arrives. A single `PollHandle.poll()` reports at most
  1024 events.

To drive the loop by hand instead of calling `run()`, use
`Reactor.poll_once(timeout)`, which polls once, dispatches what became ready
and returns the number of events.

## The worker pool

```python
from millio.thread_pool import ThreadPool

with ThreadPool(2) as pool:
    pool.exec(lambda: print("ran on a worker"))
    print(len(pool))                     # 2
# leaving the block runs the queued tasks, then joins the workers
```

Tasks run in submission order. An exception raised by a task is logged
through the `millio.thread_pool` logger and the worker carries on.
`exec()` raises `RuntimeError` once the pool has been shut down, or if it was
created with no workers.

## Reusing objects

```python
from millio.object_pool import ObjectPool

pool = ObjectPool(4, bytearray)          # four objects created up front

with pool.acquire() as buffer:
    ...                                  # use the buffer
# the object is back in the pool here
print(len(pool))                         # idle objects: 4
```

When the pool is empty, `acquire()` builds a fresh object with the factory
instead of blocking. A `bytearray` handed out by the pool is reset to 8192
zero bytes each time it is acquired. Outside a `with` block, read the object
through `PooledObject.value` and give it back with `release()`; releasing
twice does nothing, and a handle that is garbage-collected releases itself.

## What the package does not do

millio is a library only: it has no command-line program. It does not open
sockets, accept connections or speak any protocol; it only watches sources
you create and register yourself. There is no edge-triggered mode and no
`async`/`await` integration.

## Running the tests

```
pip install -e ".[test]"
pytest
```