# -*- coding: utf-8 -*-
"""File I/O helpers.

Thin wrappers around :mod:`bte_geotools.converter` for the common cases:

    from bte_geotools.io import convert_file, read_features

    for feature in read_features(Path("roads.kml")):
        print(feature.name)

    convert_file(Path("roads.kml"), Path("roads.geojson"), ConversionFormat.GEOJSON)

For full control over the pipeline, use
:class:`~bte_geotools.converter.ConverterBuilder` directly.
"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

from bte_geotools.constants import DEFAULT_PARSING_ELEMENT
from bte_geotools.converter import ConversionResult
from bte_geotools.converter import GeoToolsConverter
from bte_geotools.converter import open_reader
from bte_geotools.enums import ConversionFormat
from bte_geotools.errors import UnsupportedConversionError
from bte_geotools.geometry import Feature
from bte_geotools.models import ConversionOptions

__all__ = [
    "ConversionResult",
    "convert_file",
    "read_features",
]


def _detect(path: Path, source: ConversionFormat | None) -> ConversionFormat:
    if source is not None:
        return ConversionFormat(source)
    try:
        return ConversionFormat.from_path(path)
    except ValueError as exc:
        raise UnsupportedConversionError(
            f"Cannot detect the format of `{path.name}`", exc
        ) from exc


def read_features(
    path: str | Path,
    source: ConversionFormat | None = None,
    *,
    parsing_element: str = DEFAULT_PARSING_ELEMENT,
) -> Iterator[Feature]:
    """Stream the features of a KML or GeoJSON document.

    The document is closed once the iterator is exhausted or closed.

    Args:
        path: Source document
        source: Source format (detected from the file extension by default)
        parsing_element: KML element read as one feature

    Yields:
        Source features, unedited and unprojected
    """
    path = Path(path)
    options = ConversionOptions(parsing_element=parsing_element)
    with open_reader(path, _detect(path, source), options) as reader:
        yield from reader


def convert_file(
    input_path: str | Path,
    output_path: str | Path,
    target: ConversionFormat,
    options: ConversionOptions | None = None,
    *,
    source: ConversionFormat | None = None,
) -> ConversionResult:
    """Convert one document into another format.

    Args:
        input_path: Source document
        output_path: Output document (replaced only on success)
        target: Sink format (a document sink, not WORLDEDIT)
        options: Conversion options
        source: Source format (detected from the file extension by default)

    Returns:
        The conversion summary
    """
    input_path = Path(input_path)
    converter = GeoToolsConverter(
        input_path, _detect(input_path, source), target, options
    )
    return converter.convert(output_path)
