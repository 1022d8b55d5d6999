"""Shared fixtures for the zkservice test suite."""

from typing import Any, List, Optional

import pytest

from zkservice.core.config import reset_config
from zkservice.service.models import LogRedirects


class FakeSupervisor:
    """In-memory daemon supervisor that records every call."""

    def __init__(self, alive: bool = False, launch_result: Any = "started", stop_result: Any = "stopped"):
        self.alive = alive
        self.launch_result = launch_result
        self.stop_result = stop_result
        self.launches: List[dict] = []
        self.terminations: List[tuple] = []
        self.alive_checks: List[str] = []
        self.launch_error: Optional[Exception] = None

    def launch(self, command: List[str], pidfile: str, term_timeout: float, log_redirects: LogRedirects) -> Any:
        if self.launch_error is not None:
            raise self.launch_error
        self.launches.append({
            "command": command,
            "pidfile": pidfile,
            "term_timeout": term_timeout,
            "log_redirects": log_redirects,
        })
        self.alive = True
        return self.launch_result

    def terminate(self, pidfile: str, timeout: float) -> Any:
        self.terminations.append((pidfile, timeout))
        self.alive = False
        return self.stop_result

    def is_alive(self, pidfile: str) -> bool:
        self.alive_checks.append(pidfile)
        return self.alive


@pytest.fixture(autouse=True)
def _fresh_settings(monkeypatch):
    """Every test starts from default settings."""
    for name in ("ZKSERVICE_LOG_LEVEL", "ZKSERVICE_LOG_FORMAT", "ZKSERVICE_PROBE_HOST"):
        monkeypatch.delenv(name, raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def supervisor():
    return FakeSupervisor()


@pytest.fixture
def base_params(tmp_path):
    """Minimal valid parameters writing into a temporary directory."""
    data_dir = tmp_path / "data"
    data_dir.mkdir()
    return {
        "clientPort": 2181,
        "dataDir": str(data_dir),
        "tickTime": 2000,
        "gen_cfg": str(tmp_path / "zoo.cfg"),
        "pidfile": str(tmp_path / "zookeeper.pid"),
    }
