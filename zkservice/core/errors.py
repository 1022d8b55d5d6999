"""
Error taxonomy for the ZooKeeper service wrapper.

- ParameterError: malformed parameter input, raised before any file I/O
- MaterializeError: config/myid file could not be written and renamed
- ProbeError: transient health probe failure, never escapes a status call
- SupervisorError: the daemon supervisor could not launch or terminate
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional


class ServiceError(Exception):
    """Base class for all zkservice errors."""


class ParameterError(ServiceError, ValueError):
    """Raised when a parameter set fails validation."""

    def __init__(self, message: str, errors: Optional[List[Dict[str, Any]]] = None):
        super().__init__(message)
        self.errors = errors or []

    @property
    def keys(self) -> List[str]:
        """Offending parameter keys, in the order they were reported."""
        return [e["key"] for e in self.errors if e.get("key")]


class MaterializeError(ServiceError):
    """Raised when a generated file cannot be written atomically."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class ProbeError(ServiceError):
    """Raised inside the health probe for send/receive failures."""


class SupervisorError(ServiceError):
    """Raised by a daemon supervisor that cannot carry out a request."""
