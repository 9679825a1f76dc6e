from __future__ import annotations

import asyncio
import contextlib
import logging
import socket

from netcmd.common import codec
from netcmd.common.errors import DecodeError, InvalidPayload, TransportFailure
from netcmd.services.events import EventChannel
from netcmd.state import LogKind, SendRequest

_RECV_BUFSIZE = 65535


class Sender:
    """
    Owns the single long-lived client socket used for every outbound command.

    The socket is created once by ``open()`` (process startup) and is never
    recreated; ``close()`` is for process shutdown only. Errors the OS reports
    asynchronously on the socket are picked up by a standing reader and
    surfaced as error events without disabling the sender.
    """

    def __init__(self, channel: EventChannel, bind_host: str = "0.0.0.0") -> None:
        self.channel = channel
        self.bind_host = bind_host
        self._sock: socket.socket | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._opened = False

    @property
    def is_open(self) -> bool:
        return self._sock is not None

    @property
    def local_port(self) -> int | None:
        return self._sock.getsockname()[1] if self._sock else None

    def open(self) -> None:
        """Create and bind the client socket. Must run inside the event loop."""
        if self._opened:
            raise RuntimeError("Sender socket already created; it is never recreated")
        loop = asyncio.get_running_loop()
        sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        try:
            sock.setblocking(False)
            sock.bind((self.bind_host, 0))
        except OSError:
            sock.close()
            raise
        try:
            loop.add_reader(sock.fileno(), self._drain)
        except NotImplementedError:
            # Proactor loops (Windows) have no readers; send errors still surface per request
            logging.warning("Event loop has no add_reader; client socket errors reported on send only")
        self._sock = sock
        self._loop = loop
        self._opened = True
        logging.debug("UDP client socket bound to %s:%s", *sock.getsockname()[:2])

    def close(self) -> None:
        sock, self._sock = self._sock, None
        if sock is None:
            return
        if self._loop is not None and not self._loop.is_closed():
            with contextlib.suppress(ValueError, OSError, NotImplementedError):
                self._loop.remove_reader(sock.fileno())
        sock.close()
        logging.debug("UDP client socket closed")

    async def send(self, request: SendRequest) -> None:
        """
        Encode ``request.payload`` and transmit it as one datagram.

        Raises:
            InvalidPayload: hex text is malformed (nothing reached the socket)
            TransportFailure: socket missing, name resolution or sendto failed
        """
        dest = request.destination
        try:
            data = codec.encode(request.payload)
        except DecodeError as e:
            err = InvalidPayload(str(e))
            self.channel.error(f"Invalid payload for {dest}: {e}", err)
            raise err from e

        if self._sock is None:
            err = TransportFailure("client socket not initialized")
            self.channel.error(f"UDP client not initialized, cannot send to {dest}", err)
            raise err

        try:
            loop = asyncio.get_running_loop()
            infos = await loop.getaddrinfo(
                dest.address, dest.port, family=socket.AF_INET, type=socket.SOCK_DGRAM
            )
            if not infos:
                raise OSError(f"no IPv4 address for {dest.address!r}")
            if self._sock is None:
                raise OSError("client socket closed")
            self._sock.sendto(data, infos[0][4])
        except (OSError, ValueError) as e:
            # ValueError covers UnicodeError from IDNA on malformed host names
            err = TransportFailure(str(e))
            self.channel.error(f"Failed to send UDP command to {dest}: {e}", err)
            raise err from e

        self.channel.log(
            f"Sent {len(data)} bytes to {dest}: {codec.decode(data)}", LogKind.SENT
        )

    def _drain(self) -> None:
        """Standing reader: empties the socket and reports asynchronous errors."""
        sock = self._sock
        if sock is None:
            return
        while True:
            try:
                data, addr = sock.recvfrom(_RECV_BUFSIZE)
            except (BlockingIOError, InterruptedError):
                return
            except OSError as e:
                self.channel.error(f"UDP client error: {e}", TransportFailure(str(e)))
                return
            logging.debug("Ignoring %d bytes from %s on client socket", len(data), addr)
