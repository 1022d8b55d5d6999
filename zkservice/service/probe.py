"""
zkservice Health Probe

Checks a ZooKeeper server with its ``ruok`` four-letter command:

1. Connect over TCP with a short timeout. No connection -> NOT_RUNNING.
2. Send ``ruok`` and switch the socket to non-blocking mode.
3. Poll up to ``attempts`` times, reading at most 4 bytes per attempt and
   sleeping ``interval`` seconds between attempts, until 4 bytes arrived.
4. Exactly ``imok`` -> RUNNING, anything else -> BROKEN.

The reply is 4 bytes but may arrive split across reads, hence the loop.
Network failures never escape ``probe``; they are folded into a status.
"""

from __future__ import annotations

import socket
import time
from typing import Callable, Optional, Tuple

import structlog

from zkservice.core.errors import ProbeError
from zkservice.service.models import ServiceStatus

logger = structlog.get_logger(__name__)

RUOK = b"ruok"
IMOK = b"imok"
RESPONSE_SIZE = 4

_DEFAULT_CONNECT_TIMEOUT = 1.0
_DEFAULT_ATTEMPTS = 10
_DEFAULT_INTERVAL = 0.1  # seconds

Connector = Callable[[Tuple[str, int], float], socket.socket]


class HealthProbe:
    """Single-shot ``ruok``/``imok`` health check."""

    def __init__(
        self,
        connect_timeout: float = _DEFAULT_CONNECT_TIMEOUT,
        attempts: int = _DEFAULT_ATTEMPTS,
        interval: float = _DEFAULT_INTERVAL,
        sleep: Callable[[float], None] = time.sleep,
        connect: Optional[Connector] = None,
    ):
        if attempts < 1:
            raise ValueError("attempts must be at least 1")
        self.connect_timeout = connect_timeout
        self.attempts = attempts
        self.interval = interval
        self._sleep = sleep
        self._connect = connect or socket.create_connection

    def probe(self, host: str, port: int) -> ServiceStatus:
        """Return RUNNING, NOT_RUNNING or BROKEN for ``host:port``."""
        try:
            sock = self._connect((host, port), self.connect_timeout)
        except OSError as e:
            logger.debug("Health probe connect failed", host=host, port=port, error=str(e))
            return ServiceStatus.NOT_RUNNING

        with sock:
            response, attempts = self._exchange(sock)

        status = ServiceStatus.RUNNING if response == IMOK else ServiceStatus.BROKEN
        logger.debug(
            "Health probe finished",
            host=host,
            port=port,
            attempts=attempts,
            response=response,
            status=status.value,
        )
        return status

    def _exchange(self, sock: socket.socket) -> Tuple[bytes, int]:
        response = b""
        attempt = 0
        try:
            sock.setblocking(False)
            sock.sendall(RUOK)
            for attempt in range(1, self.attempts + 1):
                response += self._read(sock)
                if len(response) >= RESPONSE_SIZE:
                    break
                self._sleep(self.interval)
        except ProbeError as e:
            logger.debug("Health probe exchange failed", error=str(e), received=response)
        except OSError as e:
            logger.debug("Health probe send failed", error=str(e))
        return response, attempt

    @staticmethod
    def _read(sock: socket.socket) -> bytes:
        try:
            return sock.recv(RESPONSE_SIZE)
        except BlockingIOError:
            return b""
        except OSError as e:
            raise ProbeError(f"read failed: {e}") from e


def probe(host: str, port: int, **kwargs) -> ServiceStatus:
    """Probe ``host:port`` with a default ``HealthProbe``."""
    return HealthProbe(**kwargs).probe(host, port)
