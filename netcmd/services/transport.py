from __future__ import annotations

import asyncio
import logging

from netcmd.constants import CLOSE_TIMEOUT_S, LISTEN_HOST
from netcmd.services.events import EventChannel
from netcmd.services.listener import Listener
from netcmd.services.sender import Sender
from netcmd.state import Endpoint, SendRequest


class TransportController:
    """
    Owns the process' UDP sockets: one persistent client (Sender) and at most
    one bound receive socket (Listener), plus the event channel both report on.

    All methods must be called from the event loop thread.
    """

    def __init__(
        self,
        events: EventChannel | None = None,
        listen_host: str = LISTEN_HOST,
        client_host: str = "0.0.0.0",
    ) -> None:
        self.events = events or EventChannel()
        self.sender = Sender(self.events, bind_host=client_host)
        self.listener = Listener(self.events, host=listen_host)

    @property
    def is_open(self) -> bool:
        return self.sender.is_open

    @property
    def listener_running(self) -> bool:
        return self.listener.running

    @property
    def listener_port(self) -> int | None:
        return self.listener.port

    async def open(self) -> None:
        """Create the client socket. Idempotent; the socket itself is created once."""
        if self.sender.is_open:
            return
        self.sender.open()
        logging.info("UDP client ready on local port %s", self.sender.local_port)

    async def send(self, destination: Endpoint, payload: str) -> None:
        await self.sender.send(SendRequest(destination=destination, payload=payload))

    async def start_listener(self, port: int) -> None:
        await self.listener.start(port)

    def stop_listener(self) -> None:
        self.listener.stop()

    async def close(self, timeout: float = CLOSE_TIMEOUT_S) -> None:
        """Release both sockets (process shutdown)."""
        if self.listener.running:
            self.listener.stop()
        try:
            await self.listener.wait_closed(timeout)
        except asyncio.TimeoutError:
            logging.warning("UDP listener did not close within %.1fs", timeout)
        self.sender.close()


# Module-level singleton instance
controller = TransportController()
