"""Settings and error types shared across zkservice."""

from zkservice.core.config import LogLevel, ServiceSettings, get_config, reset_config, set_config
from zkservice.core.errors import (
    MaterializeError,
    ParameterError,
    ProbeError,
    ServiceError,
    SupervisorError,
)

__all__ = [
    "LogLevel",
    "ServiceSettings",
    "get_config",
    "set_config",
    "reset_config",
    "ServiceError",
    "ParameterError",
    "MaterializeError",
    "ProbeError",
    "SupervisorError",
]
