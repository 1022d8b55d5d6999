"""
zkservice - ZooKeeper service wrapper

Generates ZooKeeper config and myid files from validated parameters,
launches ZooKeeper through a pluggable daemon supervisor, and reports
its health using the ``ruok`` four-letter command.
"""

__version__ = "1.0.0"

from zkservice.core.config import ServiceSettings
from zkservice.service.controller import LifecycleController
from zkservice.service.models import ServiceStatus
from zkservice.service.params import ParameterSet

__all__ = ["LifecycleController", "ParameterSet", "ServiceSettings", "ServiceStatus", "__version__"]
