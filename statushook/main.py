"""
Main entry point — invoked by the monitoring system's event handler.

Nagios command definition example:

    define command {
        command_name  cachet_event
        command_line  statushook $ARG1$ $ARG2$ $ARG3$ $SERVICEDESC$ \\
                      $SERVICESTATE$ $SERVICESTATETYPE$ $SERVICEOUTPUT$
    }

Usage:
    statushook CONFIG COMPONENT IMPACT DESCRIPTION STATE STATE_TYPE OUTPUT
    python -m statushook ...
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from typing import List, Optional

import aiohttp

from statushook import notifier
from statushook.client import CachetClient
from statushook.config import load_config
from statushook.errors import ArgumentError, StatusHookError
from statushook.models import MonitoringEvent
from statushook.reconciler import Reconciler, ReconcileResult

# (argument, message when missing), in command line order
_ARGUMENTS = [
    ("config", "Cachet config path is a required argument."),
    ("component", "Cachet component name is a required argument."),
    ("impact", "Cachet component impact is a required argument."),
    ("description", "Service description is a required argument."),
    ("state", "Service state is a required argument."),
    ("state_type", "Service state type is a required argument."),
    ("output", "Service output is a required argument."),
]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="statushook",
        description="Open, update or resolve Cachet incidents from a monitoring event.",
    )
    parser.add_argument("config", nargs="?", help="path to the YAML config file")
    parser.add_argument("component", nargs="?", help="Cachet component name")
    parser.add_argument(
        "impact", nargs="?", help="component impact: performance, partial or major"
    )
    parser.add_argument("description", nargs="?", help="service description")
    parser.add_argument("state", nargs="?", help="OK, WARNING, UNKNOWN or CRITICAL")
    parser.add_argument("state_type", nargs="?", help="HARD or SOFT")
    parser.add_argument("output", nargs="?", help="first line of the check output")
    return parser


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse the positional arguments, raising ArgumentError on the first missing one."""
    args = build_parser().parse_args(argv)
    for name, message in _ARGUMENTS:
        if getattr(args, name) is None:
            raise ArgumentError(message)
    return args


async def async_main(argv: Optional[List[str]] = None) -> ReconcileResult:
    """Async entry point."""
    args = parse_args(argv)
    event = MonitoringEvent.parse(
        component_name=args.component,
        impact=args.impact,
        description=args.description,
        state=args.state,
        state_type=args.state_type,
        output=args.output,
    )
    client_config, settings = load_config(args.config)
    client_config.check()

    async with aiohttp.ClientSession() as session:
        client = CachetClient(client_config, session, timeout=settings.timeout)
        return await Reconciler(client, settings).handle(event)


def main(argv: Optional[List[str]] = None) -> None:
    """Sync entry point."""
    try:
        asyncio.run(async_main(argv))
    except StatusHookError as exc:
        notifier.print_error(str(exc))
        sys.exit(1)


if __name__ == "__main__":
    main()
