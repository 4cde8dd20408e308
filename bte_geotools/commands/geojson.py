# -*- coding: utf-8 -*-
"""GeoJSON export command.

Converts a KML (or GeoJSON) document into a GeoJSON FeatureCollection.
"""

from __future__ import annotations

from bte_geotools.commands.common import conversion_parser
from bte_geotools.commands.common import run_conversion
from bte_geotools.constants import DEFAULT_INDENT
from bte_geotools.enums import ConversionFormat


def geojson(args: list[str]) -> int:
    """Entry point for the geojson command."""
    parser = conversion_parser(
        prog="bte-geotools geojson",
        description="Convert a KML document to GeoJSON",
        epilog="""
Examples:
  bte-geotools geojson -f roads.kml -o roads.geojson        # Pretty-printed
  bte-geotools geojson -f roads.kml -o roads.geojson -c     # Compact output
  bte-geotools geojson -f roads.kml -o roads.geojson -p 7   # Round to 7 decimals
  bte-geotools geojson -f roads.kml -o roads.geojson -d     # Drop elevations

Notes:
  - Coordinates are written at full precision unless -p is given
  - Placemarks without geometry are skipped
""",
    )

    parser.add_argument(
        "-c",
        "--compact",
        action="store_true",
        help="Disable pretty-printing",
    )
    parser.add_argument(
        "-p",
        "--precision",
        type=int,
        default=None,
        help="Maximum number of decimal places of coordinates",
    )
    parser.add_argument(
        "--indent",
        type=int,
        default=DEFAULT_INDENT,
        help=f"Indentation width of pretty-printed output (default: {DEFAULT_INDENT})",
    )

    parsed_args = parser.parse_args(args)

    def configure(builder):
        if parsed_args.compact:
            builder.compact()
        if parsed_args.precision is not None:
            builder.precision(parsed_args.precision)
        builder.indent(parsed_args.indent)

    return run_conversion(parsed_args, ConversionFormat.GEOJSON, configure)
