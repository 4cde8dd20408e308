# -*- coding: utf-8 -*-
"""``bte-geotools`` entry point.

Sub-commands are named after the sink format and registered in the
``bte_geotools.actions`` entry-point group.
"""

from __future__ import annotations

import argparse
import logging
from importlib.metadata import entry_points

import bte_geotools

ACTIONS_GROUP = "bte_geotools.actions"


def main() -> int:
    registered_commands = entry_points(group=ACTIONS_GROUP)

    parser = argparse.ArgumentParser(
        prog="bte-geotools",
        description="Convert KML and GeoJSON documents for BuildTheEarth servers",
    )
    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"%(prog)s version: {bte_geotools.__version__}",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log conversion progress",
    )
    parser.add_argument(
        "command",
        choices=sorted(registered_commands.names),
        help="Output format",
    )
    parser.add_argument(
        "args",
        help=argparse.SUPPRESS,
        nargs=argparse.REMAINDER,
    )

    args = argparse.Namespace()
    parser.parse_args(namespace=args)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(message)s",
    )

    command_fn = registered_commands[args.command].load()
    return command_fn(args.args)
