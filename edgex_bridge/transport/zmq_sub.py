# edgex_bridge/transport/zmq_sub.py
from __future__ import annotations

import threading
from typing import List, Optional

import zmq

from .base import BusClient
from .errors import BusClosedError, BusDialError, BusError, BusReceiveError


class ZmqSubscriber(BusClient):
    """
    ZeroMQ SUB socket implemented via pyzmq.

    receive() waits in slices of poll_interval_ms so that a close() issued from
    another thread unblocks it within one slice. The socket itself is only ever
    touched while holding the internal lock (pyzmq sockets are not thread-safe).
    """

    def __init__(self, *, poll_interval_ms: int = 100, context: Optional[zmq.Context] = None):
        self.poll_interval_ms = int(poll_interval_ms)
        self._context = context
        self.sock: Optional[zmq.Socket] = None

        self._lock = threading.Lock()
        self._closing = threading.Event()

    def dial(self, uri: str) -> None:
        with self._lock:
            if self.sock is not None:
                raise BusDialError(f"already connected, refusing to dial {uri}")

            ctx = self._context or zmq.Context.instance()
            sock = ctx.socket(zmq.SUB)
            try:
                sock.connect(uri)
            except zmq.ZMQError as e:
                sock.close(linger=0)
                raise BusDialError(f"ZMQ connect to {uri} failed: {e}") from None
            self.sock = sock

    def set_subscription_filter(self, topic: str) -> None:
        with self._lock:
            if self.sock is None:
                raise BusError("subscribe while not connected")

            try:
                self.sock.setsockopt_string(zmq.SUBSCRIBE, topic)
            except zmq.ZMQError as e:
                raise BusError(f"ZMQ subscribe to topic '{topic}' failed: {e}") from None

    def is_open(self) -> bool:
        return self.sock is not None and not self._closing.is_set()

    def receive(self) -> List[bytes]:
        while True:
            if self._closing.is_set():
                raise BusClosedError("receive on closed subscriber")

            with self._lock:
                if self.sock is None:
                    raise BusReceiveError("receive while not connected")

                try:
                    if not self.sock.poll(self.poll_interval_ms, zmq.POLLIN):
                        continue
                    return self.sock.recv_multipart(zmq.NOBLOCK)
                except zmq.Again:
                    continue
                except zmq.ZMQError as e:
                    raise BusReceiveError(f"ZMQ receive failed: {e}") from None

    def close(self) -> None:
        self._closing.set()
        with self._lock:
            if self.sock is None:
                return
            try:
                self.sock.close(linger=0)
            except zmq.ZMQError as e:
                raise BusError(f"ZMQ close failed: {e}") from None
            finally:
                self.sock = None
