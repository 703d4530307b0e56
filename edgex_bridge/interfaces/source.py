# edgex_bridge/interfaces/source.py
from __future__ import annotations

from typing import Any, Mapping, Optional, Protocol

from .stream_context import StreamContext


class TupleQueue(Protocol):
    """queue.Queue-like channel towards the downstream pipeline."""
    def put(self, item: Any, block: bool = True, timeout: Optional[float] = None) -> None: ...


class Source(Protocol):
    """
    Lifecycle a pipeline drives a source through:
      configure(props) once, open(...) on a dedicated thread (blocks), close() from anywhere.
    """
    def configure(self, props: Optional[Mapping[str, Any]]) -> None: ...
    def open(self, ctx: StreamContext, consumer: TupleQueue, errors: TupleQueue) -> None: ...
    def close(self) -> None: ...
