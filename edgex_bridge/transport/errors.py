# edgex_bridge/transport/errors.py
from __future__ import annotations

class BusError(Exception):
    """Base class for message-bus client failures (also raised directly for a failed subscribe or close)."""

class BusDialError(BusError):
    """The SUB socket could not be created or connected to the endpoint URI."""

class BusReceiveError(BusError):
    """Polling or reading a multipart message from the SUB socket failed."""

class BusClosedError(BusReceiveError):
    """Receive was attempted on, or interrupted by, a closed client."""
