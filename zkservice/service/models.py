"""
zkservice Service Models

Value types shared by the controller, the probe and the daemon supervisor
contract.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class ServiceStatus(Enum):
    """
    Reported service states.

    NOT_RUNNING -> (start) -> RUNNING <-> BROKEN
         ^                      |           |
         +------- (stop) -------+-----------+
    """
    RUNNING = "running"
    NOT_RUNNING = "not running"
    BROKEN = "broken"

    def is_running(self) -> bool:
        return self is ServiceStatus.RUNNING

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class TrialOptions:
    """Polling budget for one lifecycle transition."""
    trials: int = 15
    step: float = 0.1  # seconds between trials

    def to_dict(self) -> dict[str, Any]:
        return {"trials": self.trials, "step": self.step}


@dataclass(frozen=True)
class TimeoutOptions:
    """Polling budgets the external harness uses to confirm start and stop."""
    start: TrialOptions = field(default_factory=TrialOptions)
    stop: TrialOptions = field(default_factory=TrialOptions)

    def to_dict(self) -> dict[str, Any]:
        return {"start": self.start.to_dict(), "stop": self.stop.to_dict()}


@dataclass(frozen=True)
class LogRedirects:
    """Optional log destinations for a launched daemon."""
    service_log: Optional[str] = None
    stdout: Optional[str] = None
    stderr: Optional[str] = None

    def to_dict(self) -> Dict[str, str]:
        """Return only the redirects that were supplied."""
        data = {
            "service_log": self.service_log,
            "stdout": self.stdout,
            "stderr": self.stderr,
        }
        return {k: v for k, v in data.items() if v is not None}

    def __bool__(self) -> bool:
        return bool(self.to_dict())
