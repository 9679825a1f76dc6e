from __future__ import annotations

import logging
from typing import Protocol

from netcmd.common.errors import NetCmdError
from netcmd.state import InboundDatagram, ListenerStatus, LogEvent, LogKind

_KIND_LEVELS = {
    LogKind.INFO: logging.INFO,
    LogKind.SENT: logging.INFO,
    LogKind.RECV: logging.INFO,
    LogKind.ERROR: logging.ERROR,
}


class Observer(Protocol):
    """Sink for transport activity. Called synchronously on the event loop thread."""

    def on_log(self, event: LogEvent) -> None: ...

    def on_status(self, status: ListenerStatus) -> None: ...


class EventChannel:
    """
    Fan-out of log/status events to subscribed observers.

    Delivery is fire-and-forget and in emission order. A failing observer is
    reported through ``logging`` and never breaks delivery to the others.
    """

    def __init__(self) -> None:
        self._observers: list[Observer] = []

    def subscribe(self, observer: Observer) -> None:
        if observer not in self._observers:
            self._observers.append(observer)

    def unsubscribe(self, observer: Observer) -> None:
        if observer in self._observers:
            self._observers.remove(observer)

    @property
    def observers(self) -> tuple[Observer, ...]:
        return tuple(self._observers)

    def emit(self, event: LogEvent) -> None:
        for obs in list(self._observers):
            try:
                obs.on_log(event)
            except Exception:
                logging.exception("Observer %r failed on log event", obs)

    def log(self, message: str, kind: LogKind = LogKind.INFO) -> None:
        self.emit(LogEvent(message=message, kind=kind))

    def error(self, message: str, error: NetCmdError) -> None:
        self.emit(LogEvent(message=message, kind=LogKind.ERROR, error=error))

    def recv(self, message: str, datagram: InboundDatagram) -> None:
        self.emit(LogEvent(message=message, kind=LogKind.RECV, datagram=datagram))

    def status(self, running: bool, port: int | None = None) -> None:
        st = ListenerStatus(running=running, port=port if running else None)
        for obs in list(self._observers):
            try:
                obs.on_status(st)
            except Exception:
                logging.exception("Observer %r failed on status event", obs)


class LoggingObserver:
    """Mirror transport events into the logging tree (console + UI log handlers)."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self.logger = logger or logging.getLogger("netcmd.events")

    def on_log(self, event: LogEvent) -> None:
        self.logger.log(
            _KIND_LEVELS.get(event.kind, logging.INFO),
            "%s",
            event.message,
            extra={"kind": event.kind.value},
        )

    def on_status(self, status: ListenerStatus) -> None:
        self.logger.debug("listener status running=%s port=%s", status.running, status.port)
