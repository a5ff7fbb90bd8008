"""Compression methods, host compatibility values and decompressors."""

from __future__ import annotations

import bz2
import lzma
import zlib
from dataclasses import dataclass
from enum import IntEnum
from typing import Callable, ClassVar, Protocol

import zstandard

from .errors import AttributeCompatibilityNotSupportedError, CompressionNotSupportedError


class Compression(IntEnum):
    """A compression method, valued by its code in the ZIP format."""

    STORED = 0
    DEFLATE = 8
    BZ = 12
    LZMA = 14
    ZSTD = 93
    XZ = 95

    @classmethod
    def from_code(cls, value: int) -> Compression:
        """Return the method for a stored code, or raise if it is unsupported."""
        try:
            return cls(value)
        except ValueError:
            raise CompressionNotSupportedError(value) from None


class AttributeCompatibility(IntEnum):
    """A host attribute compatibility, valued by its code in the ZIP format."""

    UNIX = 3

    @classmethod
    def from_code(cls, value: int) -> AttributeCompatibility:
        """Return the compatibility for a stored code, or raise if it is unsupported."""
        try:
            return cls(value)
        except ValueError:
            raise AttributeCompatibilityNotSupportedError(value) from None


_DEFLATE_OPTION_NAMES = frozenset({"normal", "maximum", "fast", "super", "other"})


@dataclass(frozen=True)
class DeflateOption:
    """The level of compression deflate data should be written with."""

    name: str = "normal"
    level: int | None = None

    NORMAL: ClassVar[DeflateOption]
    MAXIMUM: ClassVar[DeflateOption]
    FAST: ClassVar[DeflateOption]
    SUPER: ClassVar[DeflateOption]

    def __post_init__(self) -> None:
        if self.name not in _DEFLATE_OPTION_NAMES:
            raise ValueError(f"unknown deflate option {self.name!r}")
        if self.name == "other" and self.level is None:
            raise ValueError("an 'other' deflate option needs a level")
        if self.name != "other" and self.level is not None:
            raise ValueError(f"the {self.name!r} deflate option takes no level")

    @classmethod
    def other(cls, level: int) -> DeflateOption:
        """An implementation-defined compression level."""
        return cls("other", level)

    def compression_level(self) -> int | None:
        """The explicit level to compress with, or None for the codec default."""
        return self.level if self.name == "other" else None


DeflateOption.NORMAL = DeflateOption("normal")
DeflateOption.MAXIMUM = DeflateOption("maximum")
DeflateOption.FAST = DeflateOption("fast")
DeflateOption.SUPER = DeflateOption("super")


class _Decompressor(Protocol):
    @property
    def eof(self) -> bool: ...

    @property
    def unused_data(self) -> bytes: ...

    def decompress(self, data: bytes) -> bytes: ...


class _StoredDecompressor:
    """Passes data through unchanged; it never reaches an end of its own."""

    eof = False
    unused_data = b""

    def decompress(self, data: bytes) -> bytes:
        return bytes(data)


_FACTORIES: dict[Compression, Callable[[], _Decompressor]] = {
    Compression.STORED: _StoredDecompressor,
    Compression.DEFLATE: lambda: zlib.decompressobj(-zlib.MAX_WBITS),
    Compression.BZ: bz2.BZ2Decompressor,
    Compression.LZMA: lambda: lzma.LZMADecompressor(format=lzma.FORMAT_ALONE),
    Compression.XZ: lambda: lzma.LZMADecompressor(format=lzma.FORMAT_XZ),
    Compression.ZSTD: lambda: zstandard.ZstdDecompressor().decompressobj(),
}


def decompressor_for(compression: Compression | int) -> _Decompressor:
    """Return a fresh incremental decompressor for the given method.

    The returned object offers ``decompress(data)``, ``eof`` and ``unused_data``.
    """
    method = Compression.from_code(int(compression))
    return _FACTORIES[method]()