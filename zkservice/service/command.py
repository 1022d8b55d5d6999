"""
zkservice Command Builder

Builds the argv used to launch ZooKeeper. ``java_cmd_opt`` is caller
controlled (classpath, ``-D`` properties, JVM flags) and is only split
into tokens, never inspected.
"""

from __future__ import annotations

import shlex
from typing import List

from zkservice.service.params import ParameterSet


def build_command(params: ParameterSet, java: str = "java") -> List[str]:
    """Return ``[java, *java_cmd_opt tokens, gen_cfg]``."""
    return [java, *shlex.split(params.java_cmd_opt), str(params.config_path)]
