from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List


class BusClient(ABC):
    """
    Abstract subscriber-side message bus client.

    Contract:
      - dial(uri) connects to the bus endpoint.
      - set_subscription_filter(topic) subscribes to a topic prefix ("" = everything).
      - receive() blocks until one message arrives and returns its frames.
        It raises BusClosedError once close() has been requested.
      - close() releases the underlying socket. It may be called from another thread.
    """

    @abstractmethod
    def dial(self, uri: str) -> None: ...

    @abstractmethod
    def set_subscription_filter(self, topic: str) -> None: ...

    @abstractmethod
    def receive(self) -> List[bytes]: ...

    @abstractmethod
    def close(self) -> None: ...
