# edgex_bridge/interfaces/tuple_sink.py
from typing import Protocol
from edgex_bridge.model.source_tuple import SourceTuple


class TupleSink(Protocol):
    def on_tuple(self, tup: SourceTuple) -> None: ...
    def close(self) -> None: ...
