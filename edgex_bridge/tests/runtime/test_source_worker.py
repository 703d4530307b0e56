from __future__ import annotations

import logging
import queue
import threading

from edgex_bridge.interfaces.stream_context import SourceContext
from edgex_bridge.runtime.source_worker import SourceWorker


class FakeSource:
    def __init__(self, *, raise_on_open=None):
        self.raise_on_open = raise_on_open
        self.opened = threading.Event()
        self.closed = threading.Event()

    def configure(self, props) -> None: ...

    def open(self, ctx, consumer, errors) -> None:
        self.opened.set()
        if self.raise_on_open is not None:
            raise self.raise_on_open
        consumer.put("tuple")
        self.closed.wait(timeout=1.0)

    def close(self) -> None:
        self.closed.set()


def _worker(src):
    ctx = SourceContext(logger=logging.getLogger("test"))
    return SourceWorker(src, ctx, queue.Queue(), queue.Queue())


def test_source_worker_runs_open_until_closed():
    src = FakeSource()
    w = _worker(src)

    w.start()
    assert src.opened.wait(timeout=0.5)
    assert w.consumer.get(timeout=0.5) == "tuple"
    assert w.is_alive()

    src.close()
    w.join(timeout=0.5)

    assert not w.is_alive()
    assert w.errors.empty()
    assert w.daemon is True


def test_source_worker_reports_crash():
    boom = RuntimeError("boom")
    w = _worker(FakeSource(raise_on_open=boom))

    w.start()
    w.join(timeout=0.5)

    assert not w.is_alive()
    assert w.errors.get_nowait() is boom
