"""
zkservice Parameter Set

Validated, immutable record of everything needed to run one ZooKeeper
server: the ZooKeeper configuration keys (kept under their native names,
e.g. ``clientPort`` or ``jute.maxbuffer``) plus the operational keys used
only by the service wrapper (pidfile, log redirects, launch options).

Validation happens once, eagerly, before any file is written.
"""

from __future__ import annotations

import json
import re
import shlex
from pathlib import Path
from types import MappingProxyType
from typing import Annotated, Any, Callable, Dict, List, Mapping, Optional, Tuple

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    PositiveInt,
    field_validator,
    model_validator,
)
from pydantic import ValidationError as PydanticValidationError

import structlog

from zkservice.core.errors import ParameterError

logger = structlog.get_logger(__name__)

DEFAULT_CLIENT_PORT = 2181
DEFAULT_DATA_DIR = "/var/lib/zookeeper"
DEFAULT_TICK_TIME = 2000
DEFAULT_MYID = 1

PIDFILE_TEMPLATE = "/tmp/zookeeper.{port}.pid"
GEN_CFG_TEMPLATE = "/tmp/zoo.{port}.cfg"

_DIGITS = re.compile(r"^[0-9]+\Z")


def _as_digits(value: Any) -> int:
    """Accept non-negative ints or all-digit strings; nothing else."""
    if isinstance(value, bool):
        raise ValueError("expected digits only, got a boolean")
    if isinstance(value, int):
        if value < 0:
            raise ValueError("expected digits only, got a negative number")
        return value
    if isinstance(value, str) and _DIGITS.match(value):
        return int(value)
    raise ValueError(f"expected digits only, got {value!r}")


Digits = Annotated[int, BeforeValidator(_as_digits)]

# Keys never written to the generated config file.
_OPERATIONAL_FIELDS = frozenset({
    "myid",
    "servers",
    "liveness_check",
    "user",
    "service_log",
    "stdout",
    "stderr",
    "pidfile",
    "port",
    "gen_cfg",
    "java_cmd_opt",
})


class ServerEntry(BaseModel):
    """One cluster member: ``server.N`` and the optional ``weight.N``."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    # Checked at render time, not here.
    server: Optional[Any] = None
    weight: Optional[Any] = None


class ParameterSet(BaseModel):
    """
    ZooKeeper and service-wrapper parameters.

    Construct with ``ParameterSet.from_mapping(...)`` to get a
    ``ParameterError`` on bad input instead of a pydantic error.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        populate_by_name=True,
        coerce_numbers_to_str=True,
    )

    # Minimum zookeeper config
    client_port: Digits = Field(default=DEFAULT_CLIENT_PORT, alias="clientPort")
    data_dir: str = Field(default=DEFAULT_DATA_DIR, alias="dataDir")
    tick_time: Digits = Field(default=DEFAULT_TICK_TIME, alias="tickTime")

    # Advanced zookeeper config
    data_log_dir: Optional[str] = Field(default=None, alias="dataLogDir")
    global_outstanding_limit: Optional[Digits] = Field(default=None, alias="globalOutstandingLimit")
    pre_alloc_size: Optional[Digits] = Field(default=None, alias="preAllocSize")
    snap_count: Optional[Digits] = Field(default=None, alias="snapCount")
    trace_file: Optional[str] = Field(default=None, alias="traceFile")
    max_client_cnxns: Optional[Digits] = Field(default=None, alias="maxClientCnxns")
    client_port_address: Optional[str] = Field(default=None, alias="clientPortAddress")
    min_session_timeout: Optional[Digits] = Field(default=None, alias="minSessionTimeout")
    max_session_timeout: Optional[Digits] = Field(default=None, alias="maxSessionTimeout")

    # Cluster options
    election_alg: Optional[Digits] = Field(default=None, alias="electionAlg")
    init_limit: Optional[Digits] = Field(default=None, alias="initLimit")
    leader_serves: Optional[str] = Field(default=None, alias="leaderServes")
    servers: Optional[Mapping[PositiveInt, ServerEntry]] = None
    sync_limit: Optional[Digits] = Field(default=None, alias="syncLimit")
    cnx_timeout: Optional[Digits] = Field(default=None, alias="cnxTimeout")

    # Unsafe options
    force_sync: Optional[str] = Field(default=None, alias="forceSync")
    jute_maxbuffer: Optional[Digits] = Field(default=None, alias="jute.maxbuffer")
    skip_acl: Optional[str] = Field(default=None, alias="skipACL")

    # Identity of this node inside ``servers``
    myid: Annotated[PositiveInt, BeforeValidator(_as_digits)] = DEFAULT_MYID

    # Operational options
    liveness_check: Optional[Callable[[], Any]] = Field(default=None, alias="status")
    user: Optional[str] = None
    service_log: Optional[str] = Field(default=None, alias="ubic_log")
    stdout: Optional[str] = None
    stderr: Optional[str] = None
    pidfile: Optional[str] = None
    port: Optional[Digits] = None
    gen_cfg: Optional[str] = None
    java_cmd_opt: str = ""

    @model_validator(mode="before")
    @classmethod
    def _default_paths(cls, data: Any) -> Any:
        """Derive pidfile and generated config paths from the client port."""
        if not isinstance(data, Mapping):
            return data

        data = dict(data)
        raw_port = data.get("clientPort", data.get("client_port", DEFAULT_CLIENT_PORT))
        try:
            port = _as_digits(raw_port)
        except ValueError:
            # Reported by field validation.
            return data

        if not data.get("pidfile"):
            data["pidfile"] = PIDFILE_TEMPLATE.format(port=port)
        if not data.get("gen_cfg"):
            data["gen_cfg"] = GEN_CFG_TEMPLATE.format(port=port)
        return data

    @field_validator("servers")
    @classmethod
    def _freeze_servers(cls, v: Optional[Mapping[int, ServerEntry]]) -> Optional[Mapping[int, ServerEntry]]:
        if v is None:
            return None
        return MappingProxyType(dict(v))

    @field_validator("java_cmd_opt")
    @classmethod
    def _check_quoting(cls, v: str) -> str:
        try:
            shlex.split(v)
        except ValueError as e:
            raise ValueError(f"cannot split launch options: {e}") from e
        return v

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ParameterSet":
        """Validate ``data`` and build a parameter set."""
        if not isinstance(data, Mapping):
            raise ParameterError(
                f"Parameters must be a mapping, got {type(data).__name__}",
                errors=[{"key": None, "message": "expected a mapping"}],
            )

        try:
            return cls.model_validate(data)
        except PydanticValidationError as exc:
            errors = [_describe_error(err) for err in exc.errors()]
            message = "; ".join(
                f"{e['key']}: {e['message']}" if e["key"] else e["message"]
                for e in errors
            )
            logger.warning("Invalid service parameters", errors=errors)
            raise ParameterError(f"Invalid parameters: {message}", errors=errors) from exc

    @classmethod
    def from_file(cls, params_path: Path) -> "ParameterSet":
        """Load parameters from a JSON file."""
        params_path = Path(params_path)
        if not params_path.exists():
            raise FileNotFoundError(f"Parameter file not found: {params_path}")

        with open(params_path) as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as exc:
                raise ParameterError(f"Parameter file is not valid JSON: {exc}") from exc

        return cls.from_mapping(data)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def effective_port(self) -> int:
        """Port the health probe talks to."""
        if self.port is not None:
            return self.port
        return self.client_port

    @property
    def myid_path(self) -> Path:
        return Path(self.data_dir) / "myid"

    @property
    def config_path(self) -> Path:
        return Path(self.gen_cfg)

    def resolve_user(self, default: Optional[Callable[[], Optional[str]]] = None) -> Optional[str]:
        """Return the configured user, or ask ``default`` for one."""
        if self.user is not None:
            return self.user
        if default is not None:
            return default()
        return None

    def config_items(self) -> List[Tuple[str, str]]:
        """Scalar ``(key, value)`` pairs for the config file, sorted by key."""
        items = []
        for name, info in type(self).model_fields.items():
            if name in _OPERATIONAL_FIELDS:
                continue
            value = getattr(self, name)
            if value is None:
                continue
            items.append((info.alias or name, str(value)))
        return sorted(items)

    def server_entries(self) -> List[Tuple[int, ServerEntry]]:
        """Cluster members in ascending server id order."""
        if not self.servers:
            return []
        return sorted(self.servers.items(), key=lambda item: item[0])


def _describe_error(err: Mapping[str, Any]) -> Dict[str, Any]:
    loc = err.get("loc") or ()
    key = ".".join(str(part) for part in loc) if loc else None
    if err.get("type") == "extra_forbidden":
        message = "unknown parameter"
    else:
        message = err.get("msg", "invalid value")
    return {"key": key, "message": message}
