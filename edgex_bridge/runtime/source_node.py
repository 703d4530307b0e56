# edgex_bridge/runtime/source_node.py
from __future__ import annotations

import logging
import queue
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from edgex_bridge.app.source_registry import SourceRegistry
from edgex_bridge.interfaces.stream_context import SourceContext
from edgex_bridge.model.source_tuple import SourceTuple
from edgex_bridge.runtime.source_worker import SourceWorker


@dataclass
class SourceNode:
    """
    Runs one source on a dedicated worker thread.

    Responsibilities:
      - build the source from the registry and configure it
      - own the stream context, output queue and error queue
      - start/stop the worker; close() the source before cancelling the context
    """

    source_type: str = "edgex"
    options: Dict[str, Any] = field(default_factory=dict)
    registry: Optional[SourceRegistry] = None
    buffer_size: int = 1024
    logger: Optional[logging.Logger] = None

    def __post_init__(self) -> None:
        self._log = self.logger or logging.getLogger(__name__)
        registry = self.registry or SourceRegistry.default()

        self.source = registry.create(self.source_type)
        self.context = SourceContext(logger=self._log)
        self.output: "queue.Queue[SourceTuple]" = queue.Queue(maxsize=self.buffer_size)
        self._errors: "queue.Queue[BaseException]" = queue.Queue()
        self._worker: Optional[SourceWorker] = None

    @property
    def is_started(self) -> bool:
        return self._worker is not None

    @property
    def is_running(self) -> bool:
        return self._worker is not None and self._worker.is_alive()

    def start(self) -> None:
        if self.is_started:
            return

        # config errors raise here, before any thread exists
        self.source.configure(dict(self.options))

        self._worker = SourceWorker(self.source, self.context, self.output, self._errors, logger=self._log)
        self._worker.start()
        self._log.info("SOURCE_NODE_STARTED type=%s", self.source_type)

    def stop(self, timeout: Optional[float] = 5.0) -> None:
        if self._worker is None:
            return

        try:
            self.source.close()
        finally:
            self.context.cancel()
            self._worker.join(timeout)
            if self._worker.is_alive():
                self._log.warning("SOURCE_WORKER_STILL_RUNNING type=%s", self.source_type)
            self._worker = None
            self._log.info("SOURCE_NODE_STOPPED type=%s", self.source_type)

    def poll(self, timeout: float = 0.1) -> Optional[SourceTuple]:
        try:
            return self.output.get(timeout=timeout)
        except queue.Empty:
            return None

    def errors(self) -> List[BaseException]:
        """Drain errors reported by the source since the last call."""
        out: List[BaseException] = []
        while True:
            try:
                out.append(self._errors.get_nowait())
            except queue.Empty:
                return out

    def __enter__(self) -> "SourceNode":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()
