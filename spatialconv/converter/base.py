from __future__ import annotations
from typing import FrozenSet, Generic, Protocol, TypeVar

I = TypeVar("I")
O = TypeVar("O")
T = TypeVar("T")


class Converter(Protocol[I, O]):
    """Stateless, reusable conversion. Failures raise ``SpatialError`` subclasses."""

    def convert(self, input: I) -> O: ...


class FormatReader(Generic[T]):
    """Parses full file text into a core aggregate."""
    supported_extensions: FrozenSet[str] = frozenset()

    def read(self, content: str) -> T:  # pragma: no cover - abstract
        raise NotImplementedError

    def can_read(self, extension: str) -> bool:
        return extension.lower().lstrip(".") in self.supported_extensions


class FormatWriter(Generic[T]):
    """Serialises a core aggregate to file text."""
    supported_extensions: FrozenSet[str] = frozenset()

    def write(self, data: T) -> str:  # pragma: no cover - abstract
        raise NotImplementedError

    def can_write(self, extension: str) -> bool:
        return extension.lower().lstrip(".") in self.supported_extensions
