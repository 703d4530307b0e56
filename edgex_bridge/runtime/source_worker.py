# edgex_bridge/runtime/source_worker.py
from __future__ import annotations

import logging
import threading
from typing import Optional

from edgex_bridge.interfaces.source import Source, TupleQueue
from edgex_bridge.interfaces.stream_context import StreamContext


class SourceWorker(threading.Thread):
    """Thread that runs one source subscription (source.open blocks until it ends)."""

    def __init__(
        self,
        source: Source,
        ctx: StreamContext,
        consumer: TupleQueue,
        errors: TupleQueue,
        *,
        logger: Optional[logging.Logger] = None,
    ):
        super().__init__(daemon=True, name=f"source-{type(source).__name__}")
        self.source = source
        self.ctx = ctx
        self.consumer = consumer
        self.errors = errors
        self._log = logger or logging.getLogger(__name__)

    def run(self) -> None:
        try:
            self.source.open(self.ctx, self.consumer, self.errors)
        except Exception as e:
            self._log.exception("SOURCE_WORKER_EXCEPTION source=%s", type(self.source).__name__)
            self.errors.put(e)
