"""
zkservice Configuration

Runtime settings for the service wrapper itself (not the managed process):
- Logging level and output format
- Health probe timing
- Launch and termination grace periods
- Polling budget advertised to the external harness

Values load from environment variables prefixed with ZKSERVICE_
(e.g. ZKSERVICE_LOG_LEVEL=DEBUG, ZKSERVICE_PROBE_ATTEMPTS=20).
"""

from __future__ import annotations

import json
from enum import Enum
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class LogLevel(str, Enum):
    """Logging levels for zkservice."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class ServiceSettings(BaseSettings):
    """Settings shared by the controller, the probe and the CLI."""

    log_level: LogLevel = LogLevel.INFO
    log_format: Literal["json", "text"] = "json"

    # Launch command
    java_executable: str = "java"

    # Health probe
    probe_host: str = "localhost"
    probe_connect_timeout: float = Field(default=1.0, gt=0)
    probe_attempts: int = Field(default=10, ge=1)
    probe_interval: float = Field(default=0.1, ge=0)

    # Grace periods handed to the daemon supervisor (seconds)
    start_term_timeout: float = Field(default=5.0, ge=0)
    stop_timeout: float = Field(default=7.0, ge=0)

    # Polling budget for the external harness
    start_trials: int = Field(default=15, ge=1)
    start_step: float = Field(default=0.1, ge=0)
    stop_trials: int = Field(default=15, ge=1)
    stop_step: float = Field(default=0.1, ge=0)

    model_config = {
        "env_prefix": "ZKSERVICE_",
        "case_sensitive": False,
    }

    @classmethod
    def from_file(cls, config_path: Path) -> "ServiceSettings":
        """Load settings from a JSON file."""
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_path) as f:
            config_data = json.load(f)

        return cls(**config_data)


# Global settings instance (lazy loaded)
_config: Optional[ServiceSettings] = None


def get_config() -> ServiceSettings:
    """Get the global settings instance."""
    global _config
    if _config is None:
        _config = ServiceSettings()
    return _config


def set_config(config: ServiceSettings) -> None:
    """Set the global settings instance."""
    global _config
    _config = config


def reset_config() -> None:
    """Reset the global settings to default."""
    global _config
    _config = None
