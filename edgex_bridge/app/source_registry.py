# edgex_bridge/app/source_registry.py
from __future__ import annotations

from typing import Callable, Dict, List

from edgex_bridge.core.errors import SourceNotFoundError
from edgex_bridge.interfaces.source import Source
from edgex_bridge.source.edgex import EdgexSource

SourceFactory = Callable[[], Source]


class SourceRegistry:
    """
    Maps source type names (as used in stream definitions) -> source factories.
    """

    def __init__(self, factories: Dict[str, SourceFactory]):
        # normalize keys to be case-insensitive
        self._factories: Dict[str, SourceFactory] = {k.lower(): v for k, v in factories.items()}

    @classmethod
    def default(cls) -> "SourceRegistry":
        return cls(
            factories={
                "edgex": EdgexSource,
            }
        )

    def names(self) -> List[str]:
        return sorted(self._factories.keys())

    def has(self, name: str) -> bool:
        return name.lower() in self._factories

    def create(self, name: str) -> Source:
        """
        Build a new, unconfigured source instance.
        """
        key = name.lower()
        if key not in self._factories:
            raise SourceNotFoundError(
                f"Source type '{name}' is not registered.",
                hint=f"Available sources: {self.names()}",
                details={"source_type": name},
            )
        return self._factories[key]()
