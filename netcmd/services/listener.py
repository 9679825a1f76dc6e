from __future__ import annotations

import asyncio
import logging
import socket

from netcmd.common import codec
from netcmd.common.errors import (
    AlreadyRunning,
    BindError,
    ListenerBusy,
    NotRunning,
    TransportFailure,
)
from netcmd.services.events import EventChannel
from netcmd.state import PORT_MAX, PORT_MIN, InboundDatagram, ListenerPhase, valid_port


class _ListenerProtocol(asyncio.DatagramProtocol):
    """Forwards transport callbacks to the owning Listener."""

    def __init__(self, owner: Listener) -> None:
        self.owner = owner

    def connection_made(self, transport: asyncio.BaseTransport) -> None:
        self.owner._on_connection_made(transport)  # type: ignore[arg-type]

    def datagram_received(self, data: bytes, addr) -> None:
        self.owner._on_datagram(data, addr)

    def error_received(self, exc: Exception) -> None:
        self.owner._on_transport_error(exc)

    def connection_lost(self, exc: Exception | None) -> None:
        self.owner._on_closed(exc)


class Listener:
    """
    Receive-side UDP socket with an explicit lifecycle.

    Phases: stopped -> starting -> bound -> stopping -> stopped. A bind error
    goes starting -> stopped, a socket error while bound goes through the
    regular stop path. ``_transition`` is the only place the phase changes.

    Callers see ``running`` (bound or still closing) and ``port``; ``stop()``
    only requests the close, the "closed" event and ``{running: False}``
    status are emitted from the transport's close completion.
    """

    def __init__(self, channel: EventChannel, host: str = "0.0.0.0") -> None:
        self.channel = channel
        self.host = host
        self._phase = ListenerPhase.STOPPED
        self._port: int | None = None
        self._transport: asyncio.DatagramTransport | None = None
        self._stopped = asyncio.Event()
        self._stopped.set()

    # ---- Introspection ----

    @property
    def phase(self) -> ListenerPhase:
        return self._phase

    @property
    def running(self) -> bool:
        return self._phase in (ListenerPhase.BOUND, ListenerPhase.STOPPING)

    @property
    def port(self) -> int | None:
        return self._port if self.running else None

    def _transition(self, phase: ListenerPhase, port: int | None = None) -> None:
        logging.debug("Listener %s -> %s (port=%s)", self._phase.value, phase.value, port)
        self._phase = phase
        self._port = port
        if phase is ListenerPhase.STOPPED:
            self._stopped.set()
        else:
            self._stopped.clear()

    # ---- Commands ----

    async def start(self, port: int) -> None:
        """Bind ``port`` on ``self.host``. Never raises for lifecycle errors."""
        if self._phase is not ListenerPhase.STOPPED:
            self.channel.error(
                f"UDP listener already running on port {self._port}",
                AlreadyRunning(self._port),
            )
            return

        self._transition(ListenerPhase.STARTING, port)
        if not valid_port(port):
            self._bind_failed(port, f"port must be in {PORT_MIN}..{PORT_MAX}")
            return

        loop = asyncio.get_running_loop()
        try:
            await loop.create_datagram_endpoint(
                lambda: _ListenerProtocol(self),
                local_addr=(self.host, port),
                family=socket.AF_INET,
            )
        except OSError as e:
            self._bind_failed(port, str(e))
            return

        if self._phase is not ListenerPhase.STARTING or self._transport is None:
            # Socket failed between bind and now; the close path owns the cleanup
            return
        address, bound_port = self._transport.get_extra_info("sockname")[:2]
        self._transition(ListenerPhase.BOUND, bound_port)
        self.channel.log(f"UDP listener started on {address}:{bound_port}")
        self.channel.status(True, bound_port)

    def stop(self) -> None:
        """Request the socket close; completion is reported asynchronously."""
        if self._phase is ListenerPhase.STOPPED:
            self.channel.error("UDP listener is not running", NotRunning())
            return
        if self._phase is not ListenerPhase.BOUND:
            self.channel.error(
                f"UDP listener is {self._phase.value}, try again shortly",
                ListenerBusy(self._phase.value),
            )
            return
        self._close()

    async def wait_closed(self, timeout: float | None = None) -> None:
        """Wait until the listener reaches ``stopped``."""
        await asyncio.wait_for(self._stopped.wait(), timeout)

    # ---- Internal paths ----

    def _close(self) -> None:
        transport = self._transport
        self._transition(ListenerPhase.STOPPING, self._port)
        if transport is None:
            self._finish_close()
        else:
            transport.close()

    def _finish_close(self) -> None:
        self._transport = None
        self._transition(ListenerPhase.STOPPED)
        self.channel.log("UDP listener closed")
        self.channel.status(False)

    def _bind_failed(self, port: int, detail: str) -> None:
        self.channel.error(f"Failed to bind port {port}: {detail}", BindError(port, detail))
        self._close()

    def _on_connection_made(self, transport: asyncio.DatagramTransport) -> None:
        self._transport = transport

    def _on_datagram(self, data: bytes, addr) -> None:
        host, port = addr[0], addr[1]
        dgram = InboundDatagram(payload=bytes(data), source_address=host, source_port=port)
        self.channel.recv(f"Received from {host}:{port}: {codec.decode(data)}", dgram)

    def _on_transport_error(self, exc: Exception) -> None:
        if self._phase is ListenerPhase.STARTING:
            self._bind_failed(self._port or 0, str(exc))
        elif self._phase is ListenerPhase.BOUND:
            self.channel.error(f"UDP listener error: {exc}", TransportFailure(str(exc)))
            self._close()
        else:
            logging.debug("Listener error while %s ignored: %s", self._phase.value, exc)

    def _on_closed(self, exc: Exception | None) -> None:
        if self._phase is ListenerPhase.STOPPED:
            return
        if exc is not None and self._phase is not ListenerPhase.STOPPING:
            self.channel.error(f"UDP listener error: {exc}", TransportFailure(str(exc)))
        self._finish_close()
