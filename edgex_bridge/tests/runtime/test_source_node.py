from __future__ import annotations

import json
import logging
import threading
from typing import List

import pytest

from edgex_bridge.app.source_registry import SourceRegistry
from edgex_bridge.core.errors import BusCloseError, BusConnectError, ConnectorConfigError
from edgex_bridge.model.source_tuple import SourceTuple
from edgex_bridge.runtime.source_node import SourceNode
from edgex_bridge.source.edgex import EdgexSource
from edgex_bridge.transport.base import BusClient
from edgex_bridge.transport.errors import BusClosedError, BusDialError


class ScriptedClient(BusClient):
    """Replays messages, then blocks until closed."""
    def __init__(self, messages=(), *, dial_error=None):
        self.messages = list(messages)
        self.dial_error = dial_error
        self.closed = threading.Event()

    def dial(self, uri: str) -> None:
        if self.dial_error is not None:
            raise self.dial_error

    def set_subscription_filter(self, topic: str) -> None: ...

    def receive(self) -> List[bytes]:
        if self.messages:
            return self.messages.pop(0)
        self.closed.wait(timeout=2.0)
        raise BusClosedError("closed")

    def close(self) -> None:
        self.closed.set()


def _node(client, **options) -> SourceNode:
    registry = SourceRegistry({"edgex": lambda: EdgexSource(client_factory=lambda: client, emit_poll_s=0.01)})
    return SourceNode(options=options, registry=registry, logger=logging.getLogger("test.node"))


def _frame(name: str, value: str) -> bytes:
    return json.dumps({"id": "e", "device": "d", "readings": [{"name": name, "value": value}]}).encode()


def test_node_delivers_tuples_and_stops_cleanly():
    client = ScriptedClient([[_frame("a", "1")], [_frame("b", "x")]])
    node = _node(client)

    with node:
        assert node.is_running
        first = node.poll(timeout=1.0)
        second = node.poll(timeout=1.0)

    assert isinstance(first, SourceTuple)
    assert first.values == {"a": 1}
    assert second.values == {"b": "x"}
    assert not node.is_started
    assert node.context.done.is_set()
    assert node.errors() == []


def test_node_poll_returns_none_when_idle():
    node = _node(ScriptedClient())
    with node:
        assert node.poll(timeout=0.01) is None


def test_config_error_raises_from_start_without_worker():
    node = _node(ScriptedClient(), port="not-a-port")

    with pytest.raises(ConnectorConfigError):
        node.start()

    assert not node.is_started


def test_setup_error_is_reported_through_errors():
    node = _node(ScriptedClient(dial_error=BusDialError("unreachable")))

    node.start()
    try:
        node._worker.join(timeout=1.0)
        errs = node.errors()
    finally:
        node.stop()

    assert len(errs) == 1
    assert isinstance(errs[0], BusConnectError)
    assert node.errors() == []


def test_start_twice_is_noop():
    node = _node(ScriptedClient())
    node.start()
    worker = node._worker
    node.start()
    assert node._worker is worker
    node.stop()


def test_stop_not_started_is_noop():
    node = _node(ScriptedClient())
    node.stop()
    assert not node.is_started


def test_close_error_propagates_but_worker_is_still_cancelled():
    class FailingClose(ScriptedClient):
        def close(self) -> None:
            super().close()
            raise BusClosedError("close failed")

    node = _node(FailingClose())
    node.start()

    with pytest.raises(BusCloseError):
        node.stop()

    assert node.context.done.is_set()
    assert not node.is_started
