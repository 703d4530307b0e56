from .event import Event, Reading
from .source_tuple import SourceTuple
from .values import classify_value, infer_value

__all__ = ["Event",
           "Reading",
           "SourceTuple",
           "classify_value",
           "infer_value"]
