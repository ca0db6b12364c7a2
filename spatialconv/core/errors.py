from __future__ import annotations
from typing import Optional


class SpatialError(Exception):
    """Base class for every error raised by spatialconv."""


class InvalidArgument(SpatialError, ValueError):
    """Malformed construction input (bad counts, lengths, ranges)."""


class ComputationFailure(SpatialError, RuntimeError):
    """A conversion could not be completed; batches abort as a whole."""

    def __init__(self, message: str, index: Optional[int] = None) -> None:
        super().__init__(message)
        self.index = index


class ConversionError(SpatialError):
    """Codec / file level failure."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ParseError(ConversionError):
    def __init__(self, message: str, line: Optional[int] = None) -> None:
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)
        self.line = line


class ValidationError(ConversionError):
    def __init__(self, message: str, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.field = field


class UnsupportedFormat(ConversionError):
    def __init__(self, format: str) -> None:
        super().__init__(f"Unsupported format: {format}")
        self.format = format


class IoError(ConversionError):
    pass
