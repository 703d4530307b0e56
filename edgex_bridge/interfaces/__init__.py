from .stream_context import SourceContext, StreamContext
from .source import Source
from .tuple_sink import TupleSink

__all__ = ["SourceContext",
           "StreamContext",
           "Source",
           "TupleSink"]
