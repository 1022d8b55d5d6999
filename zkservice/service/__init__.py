"""
zkservice Service Layer

Lifecycle management for a single ZooKeeper server:
- ParameterSet: validated, immutable parameters
- write_config / write_myid: atomic config and identity files
- build_command: launch argv
- HealthProbe: ``ruok``/``imok`` liveness check
- LifecycleController: start / stop / status over a daemon supervisor

Example usage:
    ```python
    from zkservice.service import LifecycleController, ParameterSet

    params = ParameterSet.from_mapping({
        "clientPort": 2181,
        "dataDir": "/var/lib/zookeeper",
        "servers": {1: {"server": "host1:2888:3888"}},
        "java_cmd_opt": "-cp /usr/share/java/zookeeper.jar",
    })
    controller = LifecycleController(params, supervisor=my_supervisor)
    controller.start()
    controller.status()
    ```
"""

from zkservice.service.command import build_command
from zkservice.service.controller import LifecycleController
from zkservice.service.materialize import (
    atomic_open,
    atomic_write,
    render_config,
    render_myid,
    write_config,
    write_myid,
)
from zkservice.service.models import LogRedirects, ServiceStatus, TimeoutOptions, TrialOptions
from zkservice.service.params import ParameterSet
from zkservice.service.probe import HealthProbe, probe
from zkservice.service.supervisor import DaemonSupervisor, PidfileInspector, read_pid

__all__ = [
    "ParameterSet",
    "LifecycleController",
    "HealthProbe",
    "probe",
    "build_command",
    "atomic_open",
    "atomic_write",
    "render_config",
    "render_myid",
    "write_config",
    "write_myid",
    "ServiceStatus",
    "LogRedirects",
    "TrialOptions",
    "TimeoutOptions",
    "DaemonSupervisor",
    "PidfileInspector",
    "read_pid",
]
