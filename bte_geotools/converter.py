# -*- coding: utf-8 -*-
"""Conversion orchestrator.

A :class:`GeoToolsConverter` streams the features of one source document
through the fixed pipeline::

    reader → elevation edit → projection → writer / dispatcher

Configuration is collected by a :class:`ConverterBuilder` and frozen into a
:class:`~bte_geotools.models.ConversionOptions` before any I/O begins; an
unsupported format pair or option combination fails at construction time.

Usage:
    converter = (
        ConverterBuilder(Path("roads.kml"), ConversionFormat.BLUEMAP)
        .normalize_z(64)
        .marker_options(MarkerOptions(label="Roads"))
        .build()
    )
    converter.convert(Path("roads.json"))
"""

from __future__ import annotations

import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from bte_geotools.bluemap import BlueMapMarkerWriter
from bte_geotools.coordinates import edit_geometry
from bte_geotools.enums import ConversionFormat
from bte_geotools.enums import KMLVersion
from bte_geotools.errors import ResourceIOError
from bte_geotools.errors import UnsupportedConversionError
from bte_geotools.geojson import GeoJSONFeatureReader
from bte_geotools.geojson import GeoJSONFeatureWriter
from bte_geotools.kml import KMLFeatureReader
from bte_geotools.kml import KMLFeatureWriter
from bte_geotools.models import BlockOptions
from bte_geotools.models import ConversionOptions
from bte_geotools.models import ElevationEdit
from bte_geotools.models import MarkerOptions
from bte_geotools.models import WriterOptions
from bte_geotools.projection.minecraft import bte
from bte_geotools.worldedit import BlockPattern
from bte_geotools.worldedit import WorldEditGeometryWriter

if TYPE_CHECKING:
    from typing import BinaryIO

    from bte_geotools.geometry import Feature
    from bte_geotools.projection.minecraft import MinecraftProjection
    from bte_geotools.streaming import FeatureReader
    from bte_geotools.streaming import FeatureWriter
    from bte_geotools.worldedit import EditSession

logger = logging.getLogger(__name__)

_SOURCES = (ConversionFormat.GEOJSON, ConversionFormat.KML)

#: Every supported (source, sink) pair
SUPPORTED_CONVERSIONS: frozenset[tuple[ConversionFormat, ConversionFormat]] = frozenset(
    (source, sink) for source in _SOURCES for sink in ConversionFormat
)


@dataclass(frozen=True)
class ConversionResult:
    """Summary of one conversion.

    Attributes:
        features: Number of source features streamed
        emitted: Number of written features, markers or block edits
    """

    features: int
    emitted: int


def open_reader(
    path: Path,
    source: ConversionFormat,
    options: ConversionOptions | None = None,
) -> FeatureReader:
    """Open the streaming reader of a source document.

    Raises:
        UnsupportedConversionError: If ``source`` cannot be read
        ResourceIOError: If the document cannot be opened
    """
    options = options if options is not None else ConversionOptions()
    match source:
        case ConversionFormat.GEOJSON:
            return GeoJSONFeatureReader(path)
        case ConversionFormat.KML:
            return KMLFeatureReader(path, options.parsing_element)
        case _:
            raise UnsupportedConversionError(f"`{source.value}` is not a source format")


class GeoToolsConverter:
    """One configured conversion of a source document.

    Args:
        source_path: Source document
        source: Source format
        target: Sink format
        options: Frozen conversion options
        session: Edit session of the WORLDEDIT sink

    Raises:
        UnsupportedConversionError: If the pair or an option is not supported
    """

    def __init__(
        self,
        source_path: str | Path,
        source: ConversionFormat,
        target: ConversionFormat,
        options: ConversionOptions | None = None,
        session: EditSession | None = None,
    ):
        self.source_path = Path(source_path)
        self.source = ConversionFormat(source)
        self.target = ConversionFormat(target)
        self.options = options if options is not None else ConversionOptions()
        self.session = session
        self._validate()

        self._policy = self.options.elevation.resolve()
        self.projection: MinecraftProjection | None = self.options.projection
        if self.projection is None and not self.target.is_document:
            self.projection = bte()

    def _validate(self) -> None:  # noqa: C901
        if (self.source, self.target) not in SUPPORTED_CONVERSIONS:
            raise UnsupportedConversionError(
                f"Unsupported conversion: {self.source.value} => {self.target.value}"
            )

        options = self.options
        if self.target == ConversionFormat.WORLDEDIT:
            if self.session is None:
                raise UnsupportedConversionError(
                    "A WorldEdit conversion requires an edit session"
                )
        elif self.session is not None:
            raise UnsupportedConversionError(
                f"An edit session is not supported by the {self.target.value} sink"
            )

        if options.markers is not None and self.target != ConversionFormat.BLUEMAP:
            raise UnsupportedConversionError(
                f"Marker options are not supported by the {self.target.value} sink"
            )

        if options.blocks is not None and self.target != ConversionFormat.WORLDEDIT:
            raise UnsupportedConversionError(
                f"Block options are not supported by the {self.target.value} sink"
            )

        if self.target == ConversionFormat.KML and options.writer.precision is not None:
            raise UnsupportedConversionError(
                "KML output always uses full coordinate precision, "
                "a fixed precision is not supported"
            )

        if (
            self.target in (ConversionFormat.BLUEMAP, ConversionFormat.WORLDEDIT)
            and options.writer.precision is not None
        ):
            raise UnsupportedConversionError(
                f"Use the sink options to set a precision of the {self.target.value} sink"
            )

    # -------------------------------------------------------------------------
    # Pipeline
    # -------------------------------------------------------------------------

    def prepare(self, feature: Feature) -> Feature:
        """Apply the elevation edit then the projection to one feature."""
        geometry = feature.geometry
        if self._policy is not None:
            geometry = edit_geometry(geometry, self._policy)
        if self.projection is not None:
            geometry = self.projection.project(geometry)
        return feature.with_geometry(geometry)

    def _document_writer(self, stream: BinaryIO) -> FeatureWriter:
        options = self.options
        if self.target == ConversionFormat.KML:
            return KMLFeatureWriter(
                stream,
                options.writer,
                options.kml_version,
                drop_namespace=options.drop_namespace,
                document_id=options.document_id,
            )
        return GeoJSONFeatureWriter(stream, options.writer)

    def _marker_writer(self) -> BlueMapMarkerWriter:
        markers = self.options.markers if self.options.markers is not None else MarkerOptions()
        if self.options.strict and not markers.strict:
            markers = markers.model_copy(update={"strict": True})
        return BlueMapMarkerWriter(markers, self.options.writer)

    def _block_writer(self) -> WorldEditGeometryWriter:
        blocks = self.options.blocks if self.options.blocks is not None else BlockOptions()
        styles = (
            {kind: BlockPattern(block) for kind, block in blocks.styles.items()}
            if blocks.styles
            else None
        )
        return WorldEditGeometryWriter(
            self.session,
            projection=None,
            styles=styles,
            fallback=BlockPattern(blocks.fallback),
            writing_size=blocks.writing_size,
            fill_stroke=blocks.fill_stroke,
            fill_geometry=blocks.fill_geometry,
            strict=self.options.strict,
        )

    def _stream_to_document(self, stream: BinaryIO) -> ConversionResult:
        features = 0
        with (
            open_reader(self.source_path, self.source, self.options) as reader,
            self._document_writer(stream) as writer,
        ):
            for feature in reader:
                writer.write_feature(self.prepare(feature))
                features += 1
        return ConversionResult(features=features, emitted=writer.count)

    def _stream_to_markers(self, stream: BinaryIO, set_name: str) -> ConversionResult:
        sink = self._marker_writer()
        features = 0
        emitted = 0
        with open_reader(self.source_path, self.source, self.options) as reader:
            for feature in reader:
                emitted += sink.write_feature(self.prepare(feature))
                features += 1
        sink.export(stream, set_name)
        return ConversionResult(features=features, emitted=emitted)

    def convert(self, output: str | Path) -> ConversionResult:
        """Convert the source document into ``output``.

        The result is streamed into a temporary sibling file which replaces
        ``output`` only once the conversion succeeded.

        Raises:
            UnsupportedConversionError: For the WORLDEDIT sink (see
                :meth:`convert_to_session`)
            GeoToolsError: If any feature fails to convert
        """
        if self.target == ConversionFormat.WORLDEDIT:
            raise UnsupportedConversionError(
                "The WorldEdit sink writes to an edit session, use `convert_to_session()`"
            )

        output = Path(output)
        try:
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{output.name}.", suffix=".tmp", dir=output.parent
            )
        except OSError as exc:
            raise ResourceIOError("Unable to create output document", output, exc) from exc

        tmp_path = Path(tmp_name)
        try:
            with os.fdopen(fd, "wb") as stream:
                if self.target == ConversionFormat.BLUEMAP:
                    result = self._stream_to_markers(stream, output.name)
                else:
                    result = self._stream_to_document(stream)

            try:
                tmp_path.replace(output)
            except OSError as exc:
                raise ResourceIOError("Unable to write output document", output, exc) from exc

        except BaseException:
            tmp_path.unlink(missing_ok=True)
            raise

        logger.info(
            "Converted %d features (%d emitted): %s => %s",
            result.features,
            result.emitted,
            self.source_path,
            output,
        )
        return result

    def convert_to_session(self) -> ConversionResult:
        """Draw the source features into the configured edit session.

        Raises:
            UnsupportedConversionError: For any sink other than WORLDEDIT
        """
        if self.target != ConversionFormat.WORLDEDIT:
            raise UnsupportedConversionError(
                f"The {self.target.value} sink writes a document, use `convert()`"
            )

        sink = self._block_writer()
        features = 0
        emitted = 0
        with open_reader(self.source_path, self.source, self.options) as reader:
            for feature in reader:
                emitted += sink.write_feature(self.prepare(feature))
                features += 1

        logger.info(
            "Drew %d features from `%s` (%d block edits)", features, self.source_path, emitted
        )
        return ConversionResult(features=features, emitted=emitted)


class ConverterBuilder:
    """Chainable configuration of a :class:`GeoToolsConverter`.

    Args:
        source_path: Source document
        target: Sink format
        source: Source format (detected from the file extension by default)
    """

    def __init__(
        self,
        source_path: str | Path,
        target: ConversionFormat,
        source: ConversionFormat | None = None,
    ):
        self.source_path = Path(source_path)
        self.target = ConversionFormat(target)
        if source is not None:
            self.source = ConversionFormat(source)
        else:
            try:
                self.source = ConversionFormat.from_path(self.source_path)
            except ValueError as exc:
                raise UnsupportedConversionError(
                    f"Cannot detect the format of `{self.source_path.name}`", exc
                ) from exc

        self._normalize: float | None = None
        self._offset: float | None = None
        self._drop = False
        self._pretty = True
        self._indent: int | None = None
        self._precision: int | None = None
        self._projection: MinecraftProjection | None = None
        self._markers: MarkerOptions | None = None
        self._blocks: BlockOptions | None = None
        self._strict = False
        self._session: EditSession | None = None
        self._parsing_element: str | None = None
        self._kml_version = KMLVersion.V22
        self._drop_namespace = False
        self._document_id: str | None = None

    def normalize_z(self, value: float) -> ConverterBuilder:
        self._normalize = value
        return self

    def offset_z(self, value: float) -> ConverterBuilder:
        self._offset = value
        return self

    def drop_z(self) -> ConverterBuilder:
        self._drop = True
        return self

    def compact(self) -> ConverterBuilder:
        """Disable pretty-printing."""
        self._pretty = False
        return self

    def indent(self, width: int) -> ConverterBuilder:
        self._indent = width
        return self

    def precision(self, decimals: int) -> ConverterBuilder:
        self._precision = decimals
        return self

    def projection(self, projection: MinecraftProjection) -> ConverterBuilder:
        self._projection = projection
        return self

    def marker_options(self, options: MarkerOptions) -> ConverterBuilder:
        self._markers = options
        return self

    def block_options(self, options: BlockOptions) -> ConverterBuilder:
        self._blocks = options
        return self

    def strict(self, enabled: bool = True) -> ConverterBuilder:
        self._strict = enabled
        return self

    def session(self, session: EditSession) -> ConverterBuilder:
        self._session = session
        return self

    def parsing_element(self, name: str) -> ConverterBuilder:
        self._parsing_element = name
        return self

    def kml_version(self, version: KMLVersion) -> ConverterBuilder:
        self._kml_version = KMLVersion(version)
        return self

    def drop_namespace(self) -> ConverterBuilder:
        self._drop_namespace = True
        return self

    def document_id(self, document_id: str) -> ConverterBuilder:
        self._document_id = document_id
        return self

    def options(self) -> ConversionOptions:
        """Freeze the current configuration."""
        writer = {"pretty": self._pretty, "precision": self._precision}
        if self._indent is not None:
            writer["indent"] = self._indent

        extra = {}
        if self._parsing_element is not None:
            extra["parsing_element"] = self._parsing_element

        return ConversionOptions(
            elevation=ElevationEdit(
                normalize=self._normalize, offset=self._offset, drop=self._drop
            ),
            writer=WriterOptions(**writer),
            markers=self._markers,
            blocks=self._blocks,
            projection=self._projection,
            strict=self._strict,
            kml_version=self._kml_version,
            drop_namespace=self._drop_namespace,
            document_id=self._document_id,
            **extra,
        )

    def build(self) -> GeoToolsConverter:
        """Build the converter.

        Raises:
            UnsupportedConversionError: If the pair or an option is not supported
        """
        return GeoToolsConverter(
            self.source_path,
            self.source,
            self.target,
            self.options(),
            session=self._session,
        )
