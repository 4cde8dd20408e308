# -*- coding: utf-8 -*-
"""BlueMap export command.

Converts a KML or GeoJSON document into a BlueMap marker-set JSON file,
projected onto the BuildTheEarth Minecraft grid.
"""

from __future__ import annotations

from bte_geotools.commands.common import conversion_parser
from bte_geotools.commands.common import run_conversion
from bte_geotools.enums import ConversionFormat
from bte_geotools.enums import ElevationMode
from bte_geotools.models import MarkerOptions
from bte_geotools.projection.minecraft import asean_bte
from bte_geotools.projection.minecraft import bte

PROJECTIONS = {
    "bte": bte,
    "asean": asean_bte,
}


def bluemap(args: list[str]) -> int:
    """Entry point for the bluemap command."""
    parser = conversion_parser(
        prog="bte-geotools bluemap",
        description="Convert a KML or GeoJSON document to a BlueMap marker set",
        epilog="""
Examples:
  bte-geotools bluemap -f roads.kml -o roads.json                    # Global BTE grid
  bte-geotools bluemap -f roads.kml -o roads.json --projection asean
  bte-geotools bluemap -f roads.kml -o roads.json -n 64 --extrude 10
  bte-geotools bluemap -f roads.kml -o roads.json --offset 100 -200

Output:
  A marker-set document {"<set key>": {"label": ..., "markers": {...}}}:
  - poi markers for points
  - line markers for line strings
  - shape (or extrude) markers for rings and polygons

Notes:
  - The set key is the output file name (a slug with --normalize-naming)
  - The set label defaults to the output file name without extension
""",
    )

    parser.add_argument(
        "-c",
        "--compact",
        action="store_true",
        help="Disable pretty-printing",
    )
    parser.add_argument(
        "--label",
        type=str,
        default=None,
        help="Marker-set label",
    )
    parser.add_argument(
        "--normalize-naming",
        action="store_true",
        help="Rewrite marker and set keys as lowercase hyphen slugs",
    )
    parser.add_argument(
        "--average",
        action="store_true",
        help="Use the average elevation of each line instead of per-vertex elevations",
    )
    parser.add_argument(
        "--extrude",
        type=float,
        default=None,
        metavar="HEIGHT",
        help="Render rings and polygons as extrude markers HEIGHT blocks tall",
    )
    parser.add_argument(
        "--projection",
        choices=sorted(PROJECTIONS),
        default="bte",
        help="Projection preset (default: bte)",
    )
    parser.add_argument(
        "--offset",
        type=float,
        nargs=2,
        default=None,
        metavar=("DX", "DY"),
        help="Translate the projected coordinates by (DX, DY) blocks",
    )

    parsed_args = parser.parse_args(args)

    def configure(builder):
        if parsed_args.compact:
            builder.compact()

        projection = PROJECTIONS[parsed_args.projection]()
        if parsed_args.offset is not None:
            projection = projection.offset(*parsed_args.offset)
        builder.projection(projection)

        builder.marker_options(
            MarkerOptions(
                label=parsed_args.label,
                normalize_naming=parsed_args.normalize_naming,
                elevation=(
                    ElevationMode.AVERAGE if parsed_args.average else ElevationMode.AUTO
                ),
                extrude=parsed_args.extrude,
            )
        )

    return run_conversion(parsed_args, ConversionFormat.BLUEMAP, configure)
