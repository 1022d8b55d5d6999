"""
zkservice Lifecycle Controller

Start, stop and status for one ZooKeeper server:

- start:  write config, write myid, build the command, hand it to the
          daemon supervisor. Does not wait for ZooKeeper to become healthy;
          the caller polls ``status`` using ``timeout_options()``.
- stop:   ask the supervisor to terminate the pidfile process.
- status: NOT_RUNNING if the pidfile process is gone (no network round
          trip), otherwise the health probe result against localhost.
"""

from __future__ import annotations

from typing import Any, Callable, Optional

import structlog

from zkservice.core.config import ServiceSettings, get_config
from zkservice.core.errors import ProbeError
from zkservice.service.command import build_command
from zkservice.service.materialize import write_config, write_myid
from zkservice.service.models import LogRedirects, ServiceStatus, TimeoutOptions, TrialOptions
from zkservice.service.params import ParameterSet
from zkservice.service.probe import HealthProbe
from zkservice.service.supervisor import DaemonSupervisor

logger = structlog.get_logger(__name__)


class LifecycleController:
    """
    Drives a ZooKeeper server through a daemon supervisor.

    The parameter set is read-only; every ``start`` regenerates the config
    and myid files from it, so repeated calls produce identical files.
    """

    def __init__(
        self,
        params: ParameterSet,
        supervisor: DaemonSupervisor,
        probe: Optional[HealthProbe] = None,
        settings: Optional[ServiceSettings] = None,
        default_user: Optional[Callable[[], Optional[str]]] = None,
    ):
        self.params = params
        self.supervisor = supervisor
        self.settings = settings or get_config()
        self.probe = probe or HealthProbe(
            connect_timeout=self.settings.probe_connect_timeout,
            attempts=self.settings.probe_attempts,
            interval=self.settings.probe_interval,
        )
        self._default_user = default_user

    @property
    def user(self) -> Optional[str]:
        """User the daemon should run as."""
        return self.params.resolve_user(self._default_user)

    @property
    def port(self) -> int:
        return self.params.effective_port

    @property
    def pidfile(self) -> str:
        return self.params.pidfile

    def log_redirects(self) -> LogRedirects:
        return LogRedirects(
            service_log=self.params.service_log,
            stdout=self.params.stdout,
            stderr=self.params.stderr,
        )

    def command(self) -> list[str]:
        return build_command(self.params, java=self.settings.java_executable)

    def start(self) -> Any:
        """Regenerate files and launch ZooKeeper."""
        write_config(self.params)
        write_myid(self.params)

        command = self.command()
        redirects = self.log_redirects()
        logger.info(
            "Launching ZooKeeper",
            command=command,
            pidfile=self.pidfile,
            user=self.user,
            **redirects.to_dict(),
        )
        return self.supervisor.launch(
            command,
            self.pidfile,
            self.settings.start_term_timeout,
            redirects,
        )

    def stop(self) -> Any:
        """Terminate ZooKeeper; returns the supervisor's result unchanged."""
        logger.info("Stopping ZooKeeper", pidfile=self.pidfile)
        return self.supervisor.terminate(self.pidfile, self.settings.stop_timeout)

    def status(self) -> ServiceStatus:
        """Report RUNNING, NOT_RUNNING or BROKEN."""
        if not self.supervisor.is_alive(self.pidfile):
            return ServiceStatus.NOT_RUNNING

        if self.params.liveness_check is not None:
            return self._custom_status()

        return self.probe.probe(self.settings.probe_host, self.port)

    def _custom_status(self) -> ServiceStatus:
        try:
            result = self.params.liveness_check()
        except (OSError, ProbeError) as e:
            logger.warning("Liveness check failed", error=str(e))
            return ServiceStatus.BROKEN

        if isinstance(result, ServiceStatus):
            return result
        if isinstance(result, str):
            try:
                return ServiceStatus(result)
            except ValueError:
                logger.warning("Liveness check returned unknown status", result=result)
                return ServiceStatus.BROKEN
        return ServiceStatus.RUNNING if result else ServiceStatus.BROKEN

    def timeout_options(self) -> TimeoutOptions:
        """Polling budget for confirming start and stop."""
        return TimeoutOptions(
            start=TrialOptions(trials=self.settings.start_trials, step=self.settings.start_step),
            stop=TrialOptions(trials=self.settings.stop_trials, step=self.settings.stop_step),
        )
