"""Extra fields carried by local file headers and central directory records."""

from __future__ import annotations

import dataclasses
import struct
from dataclasses import dataclass, field
from typing import ClassVar, Iterable, Union

from .consts import NON_ZIP64_MAX_SIZE
from .errors import (
    InfoZipUnicodeCommentFieldIncompleteError,
    InfoZipUnicodePathFieldIncompleteError,
    ZipError,
    Zip64ExtendedFieldIncompleteError,
)


@dataclass(frozen=True)
class HeaderId:
    """A two-byte extra field header id."""

    value: int

    ZIP64_EXTENDED_INFORMATION_EXTRA_FIELD: ClassVar[HeaderId]
    INFO_ZIP_UNICODE_COMMENT_EXTRA_FIELD: ClassVar[HeaderId]
    INFO_ZIP_UNICODE_PATH_EXTRA_FIELD: ClassVar[HeaderId]

    def __post_init__(self) -> None:
        if not 0 <= self.value <= 0xFFFF:
            raise ValueError(f"header id {self.value} does not fit in two bytes")

    def __int__(self) -> int:
        return self.value


HeaderId.ZIP64_EXTENDED_INFORMATION_EXTRA_FIELD = HeaderId(0x0001)
HeaderId.INFO_ZIP_UNICODE_COMMENT_EXTRA_FIELD = HeaderId(0x6375)
HeaderId.INFO_ZIP_UNICODE_PATH_EXTRA_FIELD = HeaderId(0x7075)


def _pack_u16(value: int) -> bytes:
    if not 0 <= value <= 0xFFFF:
        raise ValueError(f"extra field data of {value} bytes does not fit in two bytes")
    return struct.pack("<H", value)


@dataclass
class Zip64ExtendedInformationExtraField:
    """Zip64 extended information, used by local and central headers alike."""

    header_id: HeaderId = field(default=HeaderId.ZIP64_EXTENDED_INFORMATION_EXTRA_FIELD)
    uncompressed_size: int | None = None
    compressed_size: int | None = None
    # Often left out in practice.
    relative_header_offset: int | None = None
    disk_start_number: int | None = None

    def content_size(self) -> int:
        """Size of the field's content, as announced in its header."""
        present = (
            self.uncompressed_size,
            self.compressed_size,
            self.relative_header_offset,
            self.disk_start_number,
        )
        return sum(8 for value in present if value is not None)

    def to_bytes(self) -> bytes:
        """Serialise the field, header included."""
        parts = [struct.pack("<H", self.header_id.value), _pack_u16(self.content_size())]
        for value in (self.uncompressed_size, self.compressed_size, self.relative_header_offset):
            if value is not None:
                parts.append(struct.pack("<Q", value))
        if self.disk_start_number is not None:
            parts.append(struct.pack("<I", self.disk_start_number))
        return b"".join(parts)

    def byte_count(self) -> int:
        """Size of the field, header included."""
        return 4 + self.content_size()


@dataclass(frozen=True)
class _InfoZipUnicodeExtraField:
    """Shared form of the Info-ZIP unicode path and comment fields.

    Version 1 carries the CRC32 of the plain value and its UTF-8 bytes in ``data``;
    any other version keeps its payload uninterpreted in ``data``.
    """

    header_id: ClassVar[HeaderId]
    _incomplete: ClassVar[type[ZipError]]

    data: bytes
    crc32: int | None = None
    version: int = 1

    def __post_init__(self) -> None:
        if not 0 <= self.version <= 0xFF:
            raise ValueError(f"version {self.version} does not fit in one byte")
        if self.version == 1 and self.crc32 is None:
            raise ValueError("a version 1 field needs a crc32")
        if self.version != 1 and self.crc32 is not None:
            raise ValueError("only version 1 fields carry a crc32")

    @property
    def unicode(self) -> bytes | None:
        """The UTF-8 bytes of a version 1 field, otherwise None."""
        return self.data if self.version == 1 else None

    @classmethod
    def _from_bytes(cls, data_size: int, data: bytes):
        if not data:
            raise cls._incomplete()
        version = data[0]
        if version == 1:
            if len(data) < 5:
                raise cls._incomplete()
            (crc32,) = struct.unpack_from("<I", data, 1)
            return cls(data=bytes(data[5:data_size]), crc32=crc32)
        return cls(data=bytes(data[1:data_size]), version=version)

    def _body(self) -> bytes:
        if self.version == 1:
            return b"\x01" + struct.pack("<I", self.crc32) + self.data
        return bytes([self.version]) + self.data

    def to_bytes(self) -> bytes:
        """Serialise the field, header included."""
        body = self._body()
        return struct.pack("<H", self.header_id.value) + _pack_u16(len(body)) + body

    def byte_count(self) -> int:
        """Size of the field, header included."""
        return 4 + len(self._body())


@dataclass(frozen=True)
class InfoZipUnicodeCommentExtraField(_InfoZipUnicodeExtraField):
    """The UTF-8 version of an entry's comment."""

    header_id = HeaderId.INFO_ZIP_UNICODE_COMMENT_EXTRA_FIELD
    _incomplete = InfoZipUnicodeCommentFieldIncompleteError

    def to_bytes(self) -> bytes:
        return super().to_bytes()

    def byte_count(self) -> int:
        return super().byte_count()


@dataclass(frozen=True)
class InfoZipUnicodePathExtraField(_InfoZipUnicodeExtraField):
    """The UTF-8 version of an entry's file name."""

    header_id = HeaderId.INFO_ZIP_UNICODE_PATH_EXTRA_FIELD
    _incomplete = InfoZipUnicodePathFieldIncompleteError

    def to_bytes(self) -> bytes:
        return super().to_bytes()

    def byte_count(self) -> int:
        return super().byte_count()


@dataclass(frozen=True)
class UnknownExtraField:
    """An extra field this package does not interpret."""

    header_id: HeaderId
    data_size: int
    content: bytes

    def to_bytes(self) -> bytes:
        """Serialise the field, header included."""
        return struct.pack("<HH", self.header_id.value, self.data_size) + self.content

    def byte_count(self) -> int:
        """Size of the field, header included."""
        return 4 + len(self.content)


ExtraField = Union[
    Zip64ExtendedInformationExtraField,
    InfoZipUnicodeCommentExtraField,
    InfoZipUnicodePathExtraField,
    UnknownExtraField,
]


def _zip64_from_bytes(
    header_id: HeaderId, data: bytes, uncompressed_size: int, compressed_size: int
) -> Zip64ExtendedInformationExtraField:
    offset = 0

    def take(width: int, fmt: str) -> int | None:
        nonlocal offset
        if len(data) < offset + width:
            return None
        (value,) = struct.unpack_from(fmt, data, offset)
        offset += width
        return value

    uncompressed = take(8, "<Q") if uncompressed_size == NON_ZIP64_MAX_SIZE else None
    compressed = take(8, "<Q") if compressed_size == NON_ZIP64_MAX_SIZE else None
    relative_header_offset = take(8, "<Q")
    disk_start_number = take(4, "<I")
    return Zip64ExtendedInformationExtraField(
        header_id=header_id,
        uncompressed_size=uncompressed,
        compressed_size=compressed,
        relative_header_offset=relative_header_offset,
        disk_start_number=disk_start_number,
    )


def extra_field_from_bytes(
    header_id: HeaderId | int,
    data_size: int,
    data: bytes,
    uncompressed_size: int,
    compressed_size: int,
) -> ExtraField:
    """Parse one extra field from its content (header excluded).

    The sizes are the 32-bit values from the owning header; a Zip64 field only
    carries a size where that header value is at its maximum.
    """
    if not isinstance(header_id, HeaderId):
        header_id = HeaderId(header_id)
    data = bytes(data)
    if header_id == HeaderId.ZIP64_EXTENDED_INFORMATION_EXTRA_FIELD:
        return _zip64_from_bytes(header_id, data, uncompressed_size, compressed_size)
    if header_id == HeaderId.INFO_ZIP_UNICODE_COMMENT_EXTRA_FIELD:
        return InfoZipUnicodeCommentExtraField._from_bytes(data_size, data)
    if header_id == HeaderId.INFO_ZIP_UNICODE_PATH_EXTRA_FIELD:
        return InfoZipUnicodePathExtraField._from_bytes(data_size, data)
    return UnknownExtraField(header_id=header_id, data_size=data_size, content=data)


def extra_fields_to_bytes(fields: Iterable[ExtraField]) -> bytes:
    """Serialise a sequence of extra fields back to back."""
    return b"".join(extra_field.to_bytes() for extra_field in fields)


def extra_fields_byte_count(fields: Iterable[ExtraField]) -> int:
    """Total serialised size of a sequence of extra fields."""
    return sum(extra_field.byte_count() for extra_field in fields)


class Zip64ExtendedInformationExtraFieldBuilder:
    """Builds a Zip64 extended information field step by step."""

    def __init__(self) -> None:
        self._field = Zip64ExtendedInformationExtraField()

    def sizes(self, compressed_size: int, uncompressed_size: int) -> Zip64ExtendedInformationExtraFieldBuilder:
        self._field.compressed_size = compressed_size
        self._field.uncompressed_size = uncompressed_size
        return self

    def relative_header_offset(self, relative_header_offset: int) -> Zip64ExtendedInformationExtraFieldBuilder:
        self._field.relative_header_offset = relative_header_offset
        return self

    def disk_start_number(self, disk_start_number: int) -> Zip64ExtendedInformationExtraFieldBuilder:
        self._field.disk_start_number = disk_start_number
        return self

    def eof_only(self) -> bool:
        """True when only the offset or disk number, and no sizes, are set."""
        field_ = self._field
        no_sizes = field_.uncompressed_size is None and field_.compressed_size is None
        has_location = field_.relative_header_offset is not None or field_.disk_start_number is not None
        return no_sizes and has_location

    def build(self) -> Zip64ExtendedInformationExtraField:
        """Return the field, raising if it would carry no values."""
        if self._field.content_size() == 0:
            raise Zip64ExtendedFieldIncompleteError()
        return dataclasses.replace(self._field)