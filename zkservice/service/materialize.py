"""
zkservice Config Materializer

Renders a ParameterSet into the files ZooKeeper reads at startup:
- the generated ``.cfg`` file (sorted ``key=value`` lines, a blank line,
  then ``server.N``/``weight.N`` lines in ascending server id order)
- the ``myid`` file inside ``dataDir``

Both files are written to a ``<target>.tmp`` sibling and renamed into
place, so a reader never sees a partially written file.
"""

from __future__ import annotations

import os
from contextlib import contextmanager
from pathlib import Path
from typing import IO, Iterator, List, Union

import structlog

from zkservice.core.errors import MaterializeError, ParameterError
from zkservice.service.params import ParameterSet

logger = structlog.get_logger(__name__)

PathLike = Union[str, Path]


def _discard(tmp_path: Path) -> None:
    try:
        tmp_path.unlink()
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning("Failed to remove temp file", path=str(tmp_path), error=str(e))


@contextmanager
def atomic_open(target: PathLike) -> Iterator[IO[str]]:
    """
    Open ``<target>.tmp`` for writing and rename it over ``target`` on exit.

    If the body raises, or the write, close or rename fails, the temp file
    is removed and ``target`` is left exactly as it was.
    """
    target = Path(target)
    tmp_path = target.with_name(target.name + ".tmp")

    try:
        tmp_fh = open(tmp_path, "w", encoding="utf-8")
    except OSError as e:
        raise MaterializeError(f"Can't open file [{tmp_path}]: {e}", path=str(tmp_path)) from e

    try:
        with tmp_fh:
            yield tmp_fh
            tmp_fh.flush()
            os.fsync(tmp_fh.fileno())
    except OSError as e:
        _discard(tmp_path)
        raise MaterializeError(f"Can't write file [{tmp_path}]: {e}", path=str(tmp_path)) from e
    except BaseException:
        _discard(tmp_path)
        raise

    try:
        os.replace(tmp_path, target)
    except OSError as e:
        _discard(tmp_path)
        raise MaterializeError(
            f"Can't move file [{tmp_path}] to [{target}]: {e}", path=str(target)
        ) from e


def atomic_write(target: PathLike, text: str) -> Path:
    """Atomically replace ``target`` with ``text``."""
    with atomic_open(target) as f:
        f.write(text)
    return Path(target)


# ---------------------------------------------------------------------------
# Config file
# ---------------------------------------------------------------------------

def render_config(params: ParameterSet) -> str:
    """Render the config file body. Identical params give identical output."""
    lines: List[str] = [f"{key}={value}" for key, value in params.config_items()]
    lines.append("")

    for server_id, entry in params.server_entries():
        server = entry.server
        if server is None:
            raise ParameterError(
                f"servers.{server_id}: missing 'server' value",
                errors=[{"key": f"servers.{server_id}", "message": "missing 'server' value"}],
            )
        lines.append(f"server.{server_id}={server}")

        weight = entry.weight
        if weight is not None:
            lines.append(f"weight.{server_id}={weight}")

    return "\n".join(lines) + "\n"


def write_config(params: ParameterSet) -> Path:
    """Write the generated config file to ``params.gen_cfg``."""
    body = render_config(params)
    path = atomic_write(params.config_path, body)
    logger.info(
        "Generated config file",
        path=str(path),
        servers=len(params.servers or {}),
    )
    return path


# ---------------------------------------------------------------------------
# myid file
# ---------------------------------------------------------------------------

def render_myid(params: ParameterSet) -> str:
    return f"{params.myid}\n"


def write_myid(params: ParameterSet) -> Path:
    """Write ``<dataDir>/myid`` with this node's id."""
    path = atomic_write(params.myid_path, render_myid(params))
    logger.info("Generated myid file", path=str(path), myid=params.myid)
    return path
