# edgex_bridge/source/edgex.py
from __future__ import annotations

import logging
import queue
import threading
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional

from edgex_bridge.app.config import SourceConfig, resolve_options
from edgex_bridge.core.errors import (
    BusCloseError,
    BusConnectError,
    BusSubscribeError,
    EventDecodeError,
)
from edgex_bridge.interfaces.source import TupleQueue
from edgex_bridge.interfaces.stream_context import CancelSignal, StreamContext, StreamLogger
from edgex_bridge.model.event import Event, Reading
from edgex_bridge.model.source_tuple import SourceTuple
from edgex_bridge.model.values import ScalarValue, classify_value
from edgex_bridge.transport.base import BusClient
from edgex_bridge.transport.errors import BusError
from edgex_bridge.transport.zmq_sub import ZmqSubscriber

#: Max bytes of a malformed payload echoed into the log.
PAYLOAD_LOG_LIMIT = 200


class SubscriptionState(Enum):
    UNCONNECTED = "unconnected"
    SUBSCRIBED = "subscribed"
    CLOSED = "closed"


def emit_tuple(consumer: TupleQueue, tup: SourceTuple, done: CancelSignal, *, poll_s: float = 0.1) -> bool:
    """
    Hand one tuple downstream, giving up as soon as `done` is set.

    Returns True if the tuple was accepted, False if it was abandoned.
    """
    while not done.is_set():
        try:
            consumer.put(tup, timeout=poll_s)
            return True
        except queue.Full:
            continue
    return False


class EdgexSource:
    """
    Source that subscribes to the EdgeX message bus and turns every event
    envelope into one SourceTuple.

    Lifecycle: configure(props) -> open(ctx, consumer, errors) -> close()
      - open() blocks for the whole subscription and must run on its own thread.
      - close() may be called from any thread; it unblocks the pending receive.
      - setup failures are reported through `errors`, never raised from open().
    """

    def __init__(
        self,
        *,
        client_factory: Optional[Callable[[], BusClient]] = None,
        emit_poll_s: float = 0.1,
        logger: Optional[logging.Logger] = None,
    ):
        self._client_factory = client_factory or _default_client
        self.emit_poll_s = float(emit_poll_s)
        self._log = logger or logging.getLogger(__name__)

        self.config: Optional[SourceConfig] = None
        self._client: Optional[BusClient] = None
        self._stream_log: Optional[StreamLogger] = None

        self._state = SubscriptionState.UNCONNECTED
        self._state_lock = threading.Lock()

    # ---------------- State ----------------
    @property
    def state(self) -> SubscriptionState:
        with self._state_lock:
            return self._state

    @property
    def subscribed(self) -> bool:
        return self.state is SubscriptionState.SUBSCRIBED

    # ---------------- Lifecycle ----------------
    def configure(self, props: Optional[Mapping[str, Any]] = None) -> None:
        self.config = resolve_options(props)
        self._client = self._client_factory()
        self._log.debug("EDGEX_CONFIGURED uri=%s topic=%r", self.config.uri, self.config.topic)

    def open(self, ctx: StreamContext, consumer: TupleQueue, errors: TupleQueue) -> None:
        if self.config is None or self._client is None:
            raise RuntimeError("EdgexSource.open() called before configure()")

        log = ctx.logger
        cfg = self.config
        client = self._client
        self._stream_log = log

        if self.state is SubscriptionState.CLOSED:
            log.info("EDGEX_OPEN_SKIPPED reason=closed")
            return

        try:
            client.dial(cfg.uri)
        except BusError as e:
            if self._closed_meanwhile(log):
                return
            log.error("EDGEX_CONNECT_FAILED uri=%s err=%s", cfg.uri, e)
            errors.put(
                BusConnectError(
                    "Failed to connect to edgex message bus.",
                    hint=str(e),
                    details={"uri": cfg.uri},
                )
            )
            return

        log.info("EDGEX_CONNECTED uri=%s", cfg.uri)

        try:
            client.set_subscription_filter(cfg.topic)
        except BusError as e:
            if self._closed_meanwhile(log):
                return
            log.error("EDGEX_SUBSCRIBE_FAILED topic=%r err=%s", cfg.topic, e)
            errors.put(
                BusSubscribeError(
                    f"Failed to subscribe to edgex message bus topic '{cfg.topic}'.",
                    hint=str(e),
                    details={"uri": cfg.uri, "topic": cfg.topic},
                )
            )
            return

        with self._state_lock:
            if self._state is SubscriptionState.CLOSED:
                log.info("EDGEX_SUBSCRIPTION_CLOSED")
                return
            self._state = SubscriptionState.SUBSCRIBED

        log.info("EDGEX_SUBSCRIBED topic=%r", cfg.topic)
        self._receive_loop(ctx, client, consumer)

    def close(self) -> None:
        """
        Stop the subscription. Safe to call repeatedly and from another thread.

        The state flips to CLOSED before the client is closed, so the receive
        error caused by closing is recognized as a shutdown, not a fault.
        """
        with self._state_lock:
            if self._state is SubscriptionState.CLOSED:
                return
            self._state = SubscriptionState.CLOSED

        if self._client is None:
            return

        try:
            self._client.close()
        except BusError as e:
            raise BusCloseError(
                "Failed to close edgex message bus client.",
                hint=str(e),
                details={"uri": self.config.uri if self.config else None},
            ) from None
        # the stream logger once open() has run, the module logger before that
        (self._stream_log or self._log).info("EDGEX_CLOSED")

    def _closed_meanwhile(self, log: StreamLogger) -> bool:
        if self.state is SubscriptionState.CLOSED:
            log.info("EDGEX_SUBSCRIPTION_CLOSED")
            return True
        return False

    # ---------------- Receive loop ----------------
    def _receive_loop(self, ctx: StreamContext, client: BusClient, consumer: TupleQueue) -> None:
        log = ctx.logger

        while True:
            try:
                frames = client.receive()
            except (BusError, OSError) as e:
                if not self.subscribed:
                    log.info("EDGEX_SUBSCRIPTION_CLOSED")
                    return
                # no backoff: transient errors are logged and the loop carries on
                log.warning("EDGEX_RECEIVE_ERROR err=%s", e)
                continue

            for raw in frames:
                tup = self.decode_frame(raw, log)
                if tup is None:
                    continue

                if not emit_tuple(consumer, tup, ctx.done, poll_s=self.emit_poll_s):
                    log.info("EDGEX_EMIT_CANCELLED")
                    return
                log.debug("EDGEX_TUPLE_SENT values=%d", len(tup.values))

    # ---------------- Decode ----------------
    def decode_frame(self, raw: bytes, log: StreamLogger) -> Optional[SourceTuple]:
        """
        Turn one frame into a SourceTuple.

        Returns None when the frame is malformed or has no named reading.
        """
        try:
            event = Event.from_json(raw)
        except EventDecodeError as e:
            log.warning("EDGEX_PAYLOAD_DECODE_FAILED payload=%s err=%s", payload_preview(raw), e)
            return None

        log.debug("EDGEX_EVENT_RECEIVED id=%s device=%s readings=%d", event.id, event.device, len(event.readings))

        values: Dict[str, ScalarValue] = {}
        meta: Dict[str, Any] = {}

        for r in event.readings:
            if not r.name:
                log.warning("EDGEX_READING_UNNAMED event=%s", event.id)
                continue

            try:
                values[r.name] = self.get_value(r, log)
            except ValueError as e:
                log.warning("EDGEX_VALUE_FAILED name=%s err=%s", r.name, e)
            meta[r.name] = r.meta()

        if not values:
            log.warning("EDGEX_EVENT_IGNORED id=%s reason=no_readings", event.id)
            return None

        # event-level keys share the namespace with reading names
        meta.update(event.meta())
        return SourceTuple(values=values, metadata=meta)

    @staticmethod
    def get_value(r: Reading, log: StreamLogger) -> ScalarValue:
        value, kind = classify_value(r.value)
        log.debug("EDGEX_VALUE name=%s type=%s value=%r", r.name, kind, value)
        return value


def payload_preview(raw: bytes | str) -> str:
    if isinstance(raw, str):
        raw = raw.encode("utf-8", errors="replace")
    return raw[:PAYLOAD_LOG_LIMIT].decode("utf-8", errors="replace")


def _default_client() -> BusClient:
    return ZmqSubscriber()
