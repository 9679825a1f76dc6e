from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from nicegui import binding

from netcmd.common.errors import InvalidEndpoint, NetCmdError

PORT_MIN = 1
PORT_MAX = 65535


def valid_port(port: object) -> bool:
    return isinstance(port, int) and not isinstance(port, bool) and PORT_MIN <= port <= PORT_MAX


@dataclass(frozen=True)
class Endpoint:
    address: str
    port: int

    def __post_init__(self) -> None:
        if not self.address or not isinstance(self.address, str):
            raise InvalidEndpoint("Endpoint.address must be a non-empty string")
        if not valid_port(self.port):
            raise InvalidEndpoint(
                f"Endpoint.port must be in {PORT_MIN}..{PORT_MAX}, got {self.port!r}"
            )

    def __str__(self) -> str:
        return f"{self.address}:{self.port}"


@dataclass(frozen=True)
class SendRequest:
    destination: Endpoint
    payload: str  # hex text, decoded by the sender


@dataclass(frozen=True)
class InboundDatagram:
    payload: bytes
    source_address: str
    source_port: int


class LogKind(str, Enum):
    INFO = "info"
    SENT = "sent"
    RECV = "recv"
    ERROR = "error"


@dataclass(frozen=True)
class LogEvent:
    message: str
    kind: LogKind = LogKind.INFO
    error: NetCmdError | None = None  # set on ERROR events
    datagram: InboundDatagram | None = None  # set on RECV events


@dataclass(frozen=True)
class ListenerStatus:
    running: bool
    port: int | None = None


class ListenerPhase(str, Enum):
    STOPPED = "stopped"
    STARTING = "starting"
    BOUND = "bound"
    STOPPING = "stopping"


# Bindable view of the listener for the UI (written by the status observer)
@binding.bindable_dataclass
class ListenerView:
    running: bool = False
    port: int | None = None
    status_text: str = "stopped"


@binding.bindable_dataclass
class DestinationForm:
    host: str = ""
    port: int | None = None
    local_port: int | None = None
    repeat_interval_s: float = 1.0
    selected: list[str] = field(default_factory=list)  # command names ticked for batch/repeat


# Module-level singletons
listener_view = ListenerView()
destination_form = DestinationForm()
