# edgex_bridge/interfaces/stream_context.py
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Protocol


class CancelSignal(Protocol):
    def is_set(self) -> bool: ...
    def wait(self, timeout: float | None = None) -> bool: ...


class StreamLogger(Protocol):
    def debug(self, msg: str, *args: Any) -> None: ...
    def info(self, msg: str, *args: Any) -> None: ...
    def warning(self, msg: str, *args: Any) -> None: ...
    def error(self, msg: str, *args: Any) -> None: ...


class StreamContext(Protocol):
    """What a source needs from the pipeline: a logger and a cancellation signal."""
    @property
    def logger(self) -> StreamLogger: ...
    @property
    def done(self) -> CancelSignal: ...


@dataclass
class SourceContext:
    logger: logging.Logger = field(default_factory=lambda: logging.getLogger("edgex_bridge.source"))
    done: threading.Event = field(default_factory=threading.Event)

    def cancel(self) -> None:
        self.done.set()
