# edgex_bridge/model/source_tuple.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict

from .values import ScalarValue


@dataclass(frozen=True)
class SourceTuple:
    """
    One record handed to the downstream pipeline.

    values:   reading name -> typed scalar
    metadata: reading name -> provenance dict, plus the event-level keys
              (id, pushed, device, created, modified, origin)
    """
    values: Dict[str, ScalarValue]
    metadata: Dict[str, Any]

    def as_dict(self) -> dict:
        return {"values": dict(self.values), "metadata": dict(self.metadata)}
