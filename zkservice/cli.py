"""
zkservice Command Line Interface

Offline helpers around a ZooKeeper parameter file (JSON):
- render:  write the generated config and myid files
- command: print the launch command line
- probe:   run the ``ruok`` health probe against host:port
- status:  pidfile check followed by the health probe
"""

from __future__ import annotations

import argparse
import logging
import shlex
import sys
from pathlib import Path
from typing import List, Optional

import structlog

from zkservice.core.config import ServiceSettings, get_config
from zkservice.core.errors import MaterializeError, ParameterError
from zkservice.service.command import build_command
from zkservice.service.controller import LifecycleController
from zkservice.service.materialize import write_config, write_myid
from zkservice.service.models import ServiceStatus
from zkservice.service.params import ParameterSet
from zkservice.service.probe import HealthProbe
from zkservice.service.supervisor import PidfileInspector

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_BAD_PARAMS = 2


def setup_logging(log_level: str = "INFO", log_format: str = "json") -> None:
    """Configure structured logging."""
    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=log_level.upper())

    renderer = (
        structlog.processors.JSONRenderer()
        if log_format == "json"
        else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="zkservice",
        description="ZooKeeper service wrapper CLI",
    )
    parser.add_argument("--log-level", default=None, help="Override ZKSERVICE_LOG_LEVEL")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    render_parser = subparsers.add_parser("render", help="Write config and myid files")
    render_parser.add_argument("params", type=Path, help="Parameter file (JSON)")

    command_parser = subparsers.add_parser("command", help="Print the launch command")
    command_parser.add_argument("params", type=Path, help="Parameter file (JSON)")

    probe_parser = subparsers.add_parser("probe", help="Send ruok to a ZooKeeper server")
    probe_parser.add_argument("--host", default=None, help="Host (default: settings probe_host)")
    probe_parser.add_argument("--port", type=int, default=2181, help="Port")

    status_parser = subparsers.add_parser("status", help="Pidfile check plus health probe")
    status_parser.add_argument("params", type=Path, help="Parameter file (JSON)")

    args = parser.parse_args(argv)

    settings = get_config()
    setup_logging(args.log_level or settings.log_level.value, settings.log_format)

    if args.command is None:
        parser.print_help()
        return EXIT_OK

    try:
        if args.command == "render":
            return cmd_render(args.params)
        elif args.command == "command":
            return cmd_command(args.params, settings)
        elif args.command == "probe":
            return cmd_probe(args.host or settings.probe_host, args.port, settings)
        elif args.command == "status":
            return cmd_status(args.params, settings)
    except (ParameterError, FileNotFoundError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_BAD_PARAMS
    except MaterializeError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FAILURE

    parser.print_help()
    return EXIT_FAILURE


def cmd_render(params_path: Path) -> int:
    """Write the generated config and myid files."""
    params = ParameterSet.from_file(params_path)
    print(write_config(params))
    print(write_myid(params))
    return EXIT_OK


def cmd_command(params_path: Path, settings: ServiceSettings) -> int:
    """Print the launch command."""
    params = ParameterSet.from_file(params_path)
    print(shlex.join(build_command(params, java=settings.java_executable)))
    return EXIT_OK


def _probe_from_settings(settings: ServiceSettings) -> HealthProbe:
    return HealthProbe(
        connect_timeout=settings.probe_connect_timeout,
        attempts=settings.probe_attempts,
        interval=settings.probe_interval,
    )


def cmd_probe(host: str, port: int, settings: ServiceSettings) -> int:
    """Probe host:port and print the status."""
    status = _probe_from_settings(settings).probe(host, port)
    print(status)
    return EXIT_OK if status is ServiceStatus.RUNNING else EXIT_FAILURE


def cmd_status(params_path: Path, settings: ServiceSettings) -> int:
    """Print the service status."""
    params = ParameterSet.from_file(params_path)
    controller = LifecycleController(
        params,
        supervisor=PidfileInspector(),
        probe=_probe_from_settings(settings),
        settings=settings,
    )
    status = controller.status()
    print(status)
    return EXIT_OK if status is ServiceStatus.RUNNING else EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
