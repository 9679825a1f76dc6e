from __future__ import annotations

import contextlib
import socket


def free_udp_port(host: str = "127.0.0.1") -> int:
    """Return a UDP port that was free a moment ago on host."""
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as s:
        s.bind((host, 0))
        return s.getsockname()[1]


def send_udp_bytes(host: str, port: int, data: bytes) -> int:
    """Send one datagram from a throwaway socket; returns the source port used."""
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as s:
        s.bind(("127.0.0.1", 0))
        s.sendto(data, (host, port))
        return s.getsockname()[1]


class UdpPeer:
    """Plain blocking UDP socket on loopback standing in for the remote device."""

    def __init__(self, host: str = "127.0.0.1") -> None:
        self.sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        self.sock.bind((host, 0))
        self.host = host
        self.port: int = self.sock.getsockname()[1]

    def recv(self, timeout: float = 1.0) -> tuple[bytes, tuple[str, int]] | None:
        """Return (data, addr) of the next datagram, or None on timeout."""
        self.sock.settimeout(timeout)
        try:
            return self.sock.recvfrom(65535)
        except (TimeoutError, socket.timeout):
            return None

    def close(self) -> None:
        with contextlib.suppress(OSError):
            self.sock.close()
