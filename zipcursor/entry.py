"""Entries, strings and archive information produced when reading a ZIP file."""

from __future__ import annotations

import io
import struct
from dataclasses import dataclass, field
from enum import Enum
from typing import BinaryIO

from .compression import AttributeCompatibility, Compression
from .consts import LFH_SIGNATURE, SIGNATURE_LENGTH, SPEC_VERSION_MADE_BY
from .errors import UnexpectedHeaderError, ZipError
from .extra_fields import ExtraField
from .headers import LocalFileHeader


class StringEncoding(Enum):
    """How the bytes of a stored string are to be interpreted."""

    UTF8 = "utf-8"
    RAW = "raw"


@dataclass(frozen=True)
class ZipString:
    """A file name or comment as stored in an archive.

    ``raw`` holds the bytes; ``alternative`` holds the original bytes when the
    text came from an Info-ZIP unicode extra field instead.
    """

    raw: bytes
    encoding: StringEncoding = StringEncoding.UTF8
    alternative: bytes | None = None

    @classmethod
    def from_str(cls, text: str) -> ZipString:
        """A UTF-8 string with no alternative."""
        return cls(text.encode("utf-8"), StringEncoding.UTF8)

    @classmethod
    def with_alternative(cls, text: str, alternative: bytes) -> ZipString:
        """A UTF-8 string that replaces the given original bytes."""
        return cls(text.encode("utf-8"), StringEncoding.UTF8, bytes(alternative))

    def as_str(self) -> str:
        """Return the text, raising ZipError if it is not stored as UTF-8."""
        if self.encoding is not StringEncoding.UTF8:
            raise ZipError("string is not stored as UTF-8")
        try:
            return self.raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ZipError("string is not valid UTF-8") from exc

    def as_bytes(self) -> bytes:
        """Return the stored bytes."""
        return self.raw


@dataclass(frozen=True)
class ZipDateTime:
    """A last-modification stamp in MS-DOS date and time form."""

    date: int = 0
    time: int = 0


def _empty_string() -> ZipString:
    return ZipString.from_str("")


@dataclass
class ZipEntry:
    """The information held about a single archive entry."""

    filename: ZipString
    compression: Compression = Compression.STORED
    attribute_compatibility: AttributeCompatibility = AttributeCompatibility.UNIX
    crc32: int = 0
    uncompressed_size: int = 0
    compressed_size: int = 0
    last_modification_date: ZipDateTime = field(default_factory=ZipDateTime)
    internal_file_attribute: int = 0
    external_file_attribute: int = 0
    extra_fields: list[ExtraField] = field(default_factory=list)
    comment: ZipString = field(default_factory=_empty_string)
    data_descriptor: bool = False

    def is_dir(self) -> bool:
        """True if the file name ends with '/'; raises ZipError if it is not UTF-8."""
        return self.filename.as_str().endswith("/")


@dataclass
class StoredZipEntry:
    """An entry together with where its local file header sits in the archive."""

    entry: ZipEntry
    file_offset: int
    header_size: int

    def seek_to_data_offset(self, stream: BinaryIO) -> None:
        """Position the stream at the first byte of the entry's data."""
        stream.seek(self.file_offset)
        raw = stream.read(SIGNATURE_LENGTH)
        if len(raw) < SIGNATURE_LENGTH:
            raise EOFError("the stream ended before the local file header signature")
        (signature,) = struct.unpack("<I", raw)
        if signature != LFH_SIGNATURE:
            raise UnexpectedHeaderError(signature, LFH_SIGNATURE)
        header = LocalFileHeader.read(stream)
        stream.seek(header.file_name_length + header.extra_field_length, io.SEEK_CUR)


@dataclass
class ZipFile:
    """The entries and comment of an archive."""

    entries: list[StoredZipEntry]
    comment: ZipString
    zip64: bool = False


_VERSION_BY_COMPRESSION = {
    Compression.DEFLATE: 20,
    Compression.BZ: 46,
    Compression.LZMA: 63,
}


def as_needed_to_extract(entry: ZipEntry) -> int:
    """The 'version needed to extract' value for an entry."""
    version = _VERSION_BY_COMPRESSION.get(entry.compression, 10)
    try:
        is_dir = entry.is_dir()
    except ZipError:
        is_dir = False
    if is_dir:
        version = max(version, 20)
    return version


def as_made_by() -> int:
    """The 'version made by' value, using the Unix attribute mapping."""
    return int(AttributeCompatibility.UNIX) << 8 | SPEC_VERSION_MADE_BY