"""
zkservice Daemon Supervisor Contract

The service wrapper never forks, detaches or signals processes itself.
Those jobs belong to a daemon supervisor that tracks the process through
its pidfile. Any object with the three methods of ``DaemonSupervisor`` can
be plugged into ``LifecycleController``.

``PidfileInspector`` is a read-only supervisor: it can tell whether the
process recorded in a pidfile is alive, which is enough for ``status``
against a ZooKeeper launched by something else.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any, List, Optional, Protocol, runtime_checkable

import psutil
import structlog

from zkservice.core.errors import SupervisorError
from zkservice.service.models import LogRedirects

logger = structlog.get_logger(__name__)

_PID = re.compile(r"\b([0-9]+)\b")


@runtime_checkable
class DaemonSupervisor(Protocol):
    """Launches, terminates and checks daemons by pidfile."""

    def launch(
        self,
        command: List[str],
        pidfile: str,
        term_timeout: float,
        log_redirects: LogRedirects,
    ) -> Any:
        """Start ``command`` as a daemon tracked by ``pidfile``."""
        ...

    def terminate(self, pidfile: str, timeout: float) -> Any:
        """Stop the daemon in ``pidfile``, escalating after ``timeout`` seconds."""
        ...

    def is_alive(self, pidfile: str) -> bool:
        """Whether the daemon in ``pidfile`` is running."""
        ...


def read_pid(pidfile: str) -> Optional[int]:
    """Return the first integer found in ``pidfile``, or None."""
    try:
        content = Path(pidfile).read_text(encoding="utf-8", errors="replace")
    except FileNotFoundError:
        return None
    except OSError as e:
        logger.warning("Cannot read pidfile", pidfile=pidfile, error=str(e))
        return None
    match = _PID.search(content)
    if match is None:
        return None
    return int(match.group(1))


class PidfileInspector:
    """Read-only supervisor answering ``is_alive`` from a pidfile."""

    def is_alive(self, pidfile: str) -> bool:
        pid = read_pid(pidfile)
        if pid is None:
            return False
        try:
            process = psutil.Process(pid)
            return process.is_running() and process.status() != psutil.STATUS_ZOMBIE
        except (psutil.NoSuchProcess, psutil.AccessDenied) as e:
            logger.debug("Pidfile process not alive", pidfile=pidfile, pid=pid, error=str(e))
            return False

    def launch(
        self,
        command: List[str],
        pidfile: str,
        term_timeout: float,
        log_redirects: LogRedirects,
    ) -> Any:
        raise SupervisorError("PidfileInspector cannot launch daemons")

    def terminate(self, pidfile: str, timeout: float) -> Any:
        raise SupervisorError("PidfileInspector cannot terminate daemons")
