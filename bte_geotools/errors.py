# -*- coding: utf-8 -*-
"""Error taxonomy of the conversion pipeline.

Every error raised by the library derives from :class:`GeoToolsError` and
keeps the low-level exception that caused it in ``cause`` (and in
``__cause__`` when raised with ``raise ... from``).
"""

from __future__ import annotations

from pathlib import Path


class GeoToolsError(Exception):
    """Base class of all conversion errors.

    Attributes:
        message: Human-readable error message
        cause: The low-level exception that triggered this error (optional)
    """

    def __init__(self, message: str, cause: BaseException | None = None):
        self.message = message
        self.cause = cause
        super().__init__(str(self))

    def __str__(self) -> str:
        """Format as a single human-readable line."""
        if self.cause is not None and str(self.cause):
            return f"{self.message}: {self.cause}"
        return self.message


class MalformedSourceError(GeoToolsError):
    """Raised when a source document cannot be decoded."""


class OutOfProjectionDomainError(GeoToolsError):
    """Raised when a coordinate lies outside the projection's valid range.

    Attributes:
        point: The offending input coordinate
    """

    def __init__(
        self,
        message: str,
        point: tuple[float, float],
        cause: BaseException | None = None,
    ):
        self.point = point
        super().__init__(message, cause)

    def __str__(self) -> str:
        return f"{super().__str__()} (input: {self.point[0]!r}, {self.point[1]!r})"


class UnsupportedConversionError(GeoToolsError):
    """Raised for unsupported format pairs or option combinations."""


class ResourceIOError(GeoToolsError):
    """Raised when a file cannot be opened, read or written.

    Attributes:
        path: The file involved (optional)
    """

    def __init__(
        self,
        message: str,
        path: Path | None = None,
        cause: BaseException | None = None,
    ):
        self.path = path
        super().__init__(message, cause)


class IncompleteFeatureError(GeoToolsError):
    """Raised when a geometry is present but structurally invalid."""


class NoMoreElementsError(LookupError):  # noqa: N818
    """Raised by a feature reader when ``next()`` is called after exhaustion."""
