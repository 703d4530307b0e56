# edgex_bridge/core/errors.py
from __future__ import annotations


class ConnectorError(Exception):
    """
    Base class for all expected operational errors of the connector.
    """

    #: Stable machine-readable identifier (for CLI exit mapping, pipeline APIs, etc.)
    code: str = "unknown"

    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.hint = hint
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Configuration / setup errors (no network access yet)
# ---------------------------------------------------------------------------

class ConnectorConfigError(ConnectorError):
    """
    Source options are invalid.

    Examples:
      - `port` given as a string
      - `server` given as a number
      - config file missing or without a `default` section
    """
    code = "connector_config_error"


class SourceNotFoundError(ConnectorError):
    """
    No source type is registered under the requested name.
    """
    code = "source_not_found"


# ---------------------------------------------------------------------------
# Message bus lifecycle errors
# ---------------------------------------------------------------------------

class BusConnectError(ConnectorError):
    """
    The message bus could not be dialed.

    Examples:
      - malformed endpoint
      - unsupported transport scheme
    """
    code = "bus_connect_error"


class BusSubscribeError(ConnectorError):
    """
    The subscription filter was rejected by the bus client.
    """
    code = "bus_subscribe_error"


class BusCloseError(ConnectorError):
    """
    The underlying bus client failed to close.
    """
    code = "bus_close_error"


# ---------------------------------------------------------------------------
# Payload errors
# ---------------------------------------------------------------------------

class EventDecodeError(ValueError):
    """
    A received frame is not a valid event envelope.

    Raised per frame; the receive loop logs it and moves on.
    """
