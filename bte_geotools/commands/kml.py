# -*- coding: utf-8 -*-
"""KML export command.

Converts a GeoJSON (or KML) document into a KML document with one
``<Placemark>`` per feature.
"""

from __future__ import annotations

from bte_geotools.commands.common import conversion_parser
from bte_geotools.commands.common import run_conversion
from bte_geotools.constants import DEFAULT_INDENT
from bte_geotools.enums import ConversionFormat
from bte_geotools.enums import KMLVersion


def kml(args: list[str]) -> int:
    """Entry point for the kml command."""
    parser = conversion_parser(
        prog="bte-geotools kml",
        description="Convert a GeoJSON document to KML",
        epilog="""
Examples:
  bte-geotools kml -f roads.geojson -o roads.kml                   # KML 2.2
  bte-geotools kml -f roads.geojson -o roads.kml --kml-version 2.1
  bte-geotools kml -f roads.geojson -o roads.kml -i 4              # 4-space indent
  bte-geotools kml -f roads.geojson -o roads.kml -n 0              # Flatten to z=0

Notes:
  - KML coordinates are always written at full precision
""",
    )

    parser.add_argument(
        "-c",
        "--compact",
        action="store_true",
        help="Disable pretty-printing",
    )
    parser.add_argument(
        "-i",
        "--indenting",
        type=int,
        default=DEFAULT_INDENT,
        help=f"Indentation width of pretty-printed output (default: {DEFAULT_INDENT})",
    )
    parser.add_argument(
        "--kml-version",
        choices=[version.value for version in KMLVersion],
        default=KMLVersion.V22.value,
        help="KML schema version (default: 2.2)",
    )

    parsed_args = parser.parse_args(args)

    def configure(builder):
        if parsed_args.compact:
            builder.compact()
        builder.indent(parsed_args.indenting)
        builder.kml_version(KMLVersion(parsed_args.kml_version))

    return run_conversion(parsed_args, ConversionFormat.KML, configure)
