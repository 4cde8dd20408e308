# -*- coding: utf-8 -*-
"""Streaming feature channel: one feature in, one feature out.

Readers pull one element at a time from their decoder and never hold the
whole document in memory. Writers serialise each feature as soon as it is
written and emit the document framing (header on the first write, footer
on :meth:`FeatureWriter.export`).

Both own their underlying file handle and release it on every exit path:
exhaustion, decode errors, :meth:`close` and the ``with`` statement.
"""

from __future__ import annotations

import logging
from abc import ABC
from abc import abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING
from typing import BinaryIO

from bte_geotools.errors import NoMoreElementsError
from bte_geotools.errors import ResourceIOError
from bte_geotools.errors import UnsupportedConversionError
from bte_geotools.models import WriterOptions

if TYPE_CHECKING:
    from types import TracebackType

    from bte_geotools.geometry import Feature

logger = logging.getLogger(__name__)


class FeatureReader(ABC):
    """Forward-only cursor over the features of a document.

    The resource is opened by the constructor; iterating again requires a
    new reader.

    Args:
        path: Source document

    Raises:
        ResourceIOError: If the document cannot be opened
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)
        try:
            self._stream: BinaryIO | None = self.path.open("rb")
        except OSError as exc:
            raise ResourceIOError("Unable to open source document", self.path, exc) from exc

        self._lookahead: Feature | None = None
        self._exhausted = False
        self.count = 0

    @abstractmethod
    def _read_next(self, stream: BinaryIO) -> Feature | None:
        """Decode the next feature, ``None`` at the end of the document."""

    def has_next(self) -> bool:
        """Whether another feature is available (decodes it ahead if needed)."""
        if self._lookahead is not None:
            return True
        if self._exhausted or self._stream is None:
            return False

        try:
            self._lookahead = self._read_next(self._stream)
        except BaseException:
            self.close()
            raise

        if self._lookahead is None:
            logger.debug("Reached the end of `%s` after %d features", self.path, self.count)
            self.close()
            return False
        return True

    def next(self) -> Feature:
        """Return the next feature.

        Raises:
            NoMoreElementsError: If the reader is exhausted or closed
        """
        if not self.has_next():
            raise NoMoreElementsError(f"No more features in `{self.path}`")

        feature, self._lookahead = self._lookahead, None
        self.count += 1
        return feature

    def __iter__(self) -> FeatureReader:
        return self

    def __next__(self) -> Feature:
        if not self.has_next():
            raise StopIteration
        return self.next()

    def close(self) -> None:
        """Release the underlying resource. Safe to call more than once."""
        self._exhausted = True
        self._lookahead = None
        stream, self._stream = self._stream, None
        if stream is not None:
            try:
                stream.close()
            except OSError as exc:
                raise ResourceIOError(
                    "Unable to close source document", self.path, exc
                ) from exc

    def __enter__(self) -> FeatureReader:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()


class FeatureWriter(ABC):
    """Incremental document writer.

    Args:
        target: Binary stream to write to, or a path to create (the writer
            then owns and closes the file)
        options: Serialization options

    Raises:
        ResourceIOError: If ``target`` is a path that cannot be created
        UnsupportedConversionError: If an option is not supported
    """

    def __init__(self, target: BinaryIO | str | Path, options: WriterOptions | None = None):
        self.options = options if options is not None else WriterOptions()
        self._validate_options(self.options)

        if isinstance(target, (str, Path)):
            self.path: Path | None = Path(target)
            try:
                self._stream: BinaryIO = self.path.open("wb")
            except OSError as exc:
                raise ResourceIOError("Unable to create output document", self.path, exc) from exc
            self._owns_stream = True
        else:
            self.path = None
            self._stream = target
            self._owns_stream = False

        self.count = 0
        self._ids: set[str] = set()
        self._started = False
        self._exported = False
        self._closed = False

    def _validate_options(self, options: WriterOptions) -> None:  # noqa: B027
        """Reject unsupported options at configuration time."""

    @abstractmethod
    def _header(self) -> bytes:
        """Document framing written before the first feature."""

    @abstractmethod
    def _footer(self) -> bytes:
        """Document framing written by :meth:`export`."""

    @abstractmethod
    def _encode_feature(self, feature: Feature, feature_id: str, index: int) -> bytes:
        """Serialise one feature (``index`` is its zero-based position)."""

    def _write(self, data: bytes) -> None:
        try:
            self._stream.write(data)
        except OSError as exc:
            raise ResourceIOError("Unable to write output document", self.path, exc) from exc

    def _start(self) -> None:
        if not self._started:
            self._started = True
            self._write(self._header())

    def _unique_id(self, feature_id: str) -> str:
        unique = feature_id
        suffix = 0
        while unique in self._ids:
            suffix += 1
            unique = f"{feature_id}-{suffix}"

        if suffix:
            logger.warning("Duplicate feature id `%s` written as `%s`", feature_id, unique)
        self._ids.add(unique)
        return unique

    def write_feature(self, feature: Feature) -> None:
        """Serialise one feature.

        Features without an identifier get their zero-based position. An
        identifier already written in this document gets a ``-<n>`` suffix.

        Raises:
            UnsupportedConversionError: If the document was already exported
        """
        if self._exported:
            raise UnsupportedConversionError("Cannot write to an exported document")

        self._start()
        feature_id = self._unique_id(
            feature.id if feature.id is not None else str(self.count)
        )
        self._write(self._encode_feature(feature, feature_id, self.count))
        self.count += 1

    def export(self) -> None:
        """Write the closing document framing. Only the first call writes."""
        if self._exported:
            return

        self._start()
        self._write(self._footer())
        self._exported = True

        try:
            self._stream.flush()
        except OSError as exc:
            raise ResourceIOError("Unable to flush output document", self.path, exc) from exc

        logger.debug("Exported %d features", self.count)

    def close(self) -> None:
        """Export the document if needed and release owned resources."""
        if self._closed:
            return
        self._closed = True

        try:
            self.export()
        finally:
            if self._owns_stream:
                try:
                    self._stream.close()
                except OSError as exc:
                    raise ResourceIOError(
                        "Unable to close output document", self.path, exc
                    ) from exc

    def __enter__(self) -> FeatureWriter:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()
