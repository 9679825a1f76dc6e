from __future__ import annotations


class NetCmdError(Exception):
    """Base class for every failure surfaced by the transport controller."""


class DecodeError(NetCmdError, ValueError):
    """Hex text could not be turned into a payload."""


class InvalidEndpoint(NetCmdError, ValueError):
    """Destination address/port pair is unusable."""


class SendError(NetCmdError):
    """A send request failed; the sender has already reported it."""


class InvalidPayload(SendError):
    """Malformed hex text; nothing was handed to the socket."""


class TransportFailure(SendError):
    """OS/network level failure on a socket."""

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class BindError(NetCmdError):
    """Listener could not bind the requested port."""

    def __init__(self, port: int, detail: str) -> None:
        super().__init__(f"port {port}: {detail}")
        self.port = port
        self.detail = detail


class AlreadyRunning(NetCmdError):
    """Listener start requested while a socket is already held."""

    def __init__(self, port: int | None) -> None:
        super().__init__(f"listener already running on port {port}")
        self.port = port


class NotRunning(NetCmdError):
    """Listener stop requested while nothing is bound."""


class ListenerBusy(NetCmdError):
    """Listener is between states (bind or close still pending)."""


class CommandStoreError(NetCmdError, ValueError):
    """Invalid command entry or import blob."""


class DispatchError(NetCmdError):
    """Batch/repeat dispatch misuse (bad interval, double start)."""
