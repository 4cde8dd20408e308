# -*- coding: utf-8 -*-
"""Arguments and error handling shared by the conversion commands."""

from __future__ import annotations

import argparse
import logging
from collections.abc import Callable
from pathlib import Path

from pydantic import ValidationError

from bte_geotools.converter import ConverterBuilder
from bte_geotools.enums import ConversionFormat
from bte_geotools.errors import GeoToolsError

logger = logging.getLogger(__name__)

SOURCE_CHOICES = [ConversionFormat.GEOJSON.value, ConversionFormat.KML.value]


def conversion_parser(prog: str, description: str, epilog: str) -> argparse.ArgumentParser:
    """Parser with the input, output and elevation arguments of every command."""
    parser = argparse.ArgumentParser(
        prog=prog,
        description=description,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=epilog,
    )

    parser.add_argument(
        "-f",
        "--file",
        type=Path,
        required=True,
        help="Input KML or GeoJSON file path",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        required=True,
        help="Output file path",
    )
    parser.add_argument(
        "--from",
        choices=SOURCE_CHOICES,
        default=None,
        dest="source",
        help="Input format (detected from the file extension if not specified)",
    )

    elevation = parser.add_mutually_exclusive_group()
    elevation.add_argument(
        "-n",
        "--normalize",
        type=float,
        default=None,
        metavar="Z",
        help="Set every elevation to Z",
    )
    elevation.add_argument(
        "-z",
        "--z-offset",
        type=float,
        default=None,
        metavar="DZ",
        help="Add DZ to every elevation",
    )
    elevation.add_argument(
        "-d",
        "--drop-z",
        action="store_true",
        help="Remove every elevation (2D output)",
    )

    return parser


def conversion_builder(
    parsed_args: argparse.Namespace, target: ConversionFormat
) -> ConverterBuilder:
    """Builder configured with the shared arguments."""
    source = ConversionFormat(parsed_args.source) if parsed_args.source else None
    builder = ConverterBuilder(parsed_args.file, target, source)

    if parsed_args.normalize is not None:
        builder.normalize_z(parsed_args.normalize)
    elif parsed_args.z_offset is not None:
        builder.offset_z(parsed_args.z_offset)
    elif parsed_args.drop_z:
        builder.drop_z()

    return builder


def run_conversion(
    parsed_args: argparse.Namespace,
    target: ConversionFormat,
    configure: Callable[[ConverterBuilder], None],
) -> int:
    """Configure, build and run one conversion; return the exit code."""
    if not parsed_args.file.exists():
        logger.error("Error: Input file not found: %s", parsed_args.file)
        return 1

    try:
        builder = conversion_builder(parsed_args, target)
        configure(builder)
        result = builder.build().convert(parsed_args.output)

    except GeoToolsError as exc:
        logger.error("Error: %s", exc)  # noqa: TRY400
        return 1

    except ValidationError as exc:
        errors = "; ".join(error["msg"] for error in exc.errors())
        logger.error("Error: Invalid option: %s", errors)  # noqa: TRY400
        return 1

    except Exception as exc:
        logger.error("Error: %s: %s", type(exc).__name__, exc)  # noqa: TRY400
        return 1

    logger.info(
        "Converted %s -> %s (%d features)",
        parsed_args.file,
        parsed_args.output,
        result.features,
    )
    return 0
