from __future__ import annotations

import logging
import os

# Default destination for outbound commands
DEST_HOST: str = os.getenv("NETCMD_DEST_HOST", "127.0.0.1")
DEST_PORT: int = int(os.getenv("NETCMD_DEST_PORT", "9000"))
# Local receive socket (Listener)
LOCAL_PORT: int = int(os.getenv("NETCMD_LOCAL_PORT", "9001"))
LISTEN_HOST: str = os.getenv("NETCMD_LISTEN_HOST", "0.0.0.0")
# Scheduled resend period and shutdown grace for the listener close
REPEAT_INTERVAL_S: float = float(os.getenv("NETCMD_REPEAT_INTERVAL_S", "1.0"))
CLOSE_TIMEOUT_S: float = float(os.getenv("NETCMD_CLOSE_TIMEOUT_S", "2.0"))
# Webserver bind (NiceGUI host/port)
SERVER_HOST: str = os.getenv("NETCMD_SERVER_IP", "127.0.0.1")
SERVER_PORT: int = int(os.getenv("NETCMD_SERVER_PORT", "8080"))

LOG_MAX_LINES: int = 500


def _resolve_log_level() -> int:
    s = os.getenv("NETCMD_LOG_LEVEL")
    if s:
        name = s.strip().upper()
        mapping = {
            "DEBUG": logging.DEBUG,
            "INFO": logging.INFO,
            "WARNING": logging.WARNING,
            "ERROR": logging.ERROR,
            "CRITICAL": logging.CRITICAL,
        }
        return mapping.get(name, logging.WARNING)
    else:
        return logging.WARNING


LOG_LEVEL: int = _resolve_log_level()
