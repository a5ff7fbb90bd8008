"""Fixed-size ZIP records and the parsing of extra field blocks."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import BinaryIO

from .consts import (
    CDH_LENGTH,
    EOCDR_LENGTH,
    LFH_LENGTH,
    SIGNATURE_LENGTH,
    ZIP64_EOCDL_SIGNATURE,
    ZIP64_EOCDR_LENGTH,
)
from .errors import InvalidExtraFieldHeaderError
from .extra_fields import ExtraField, HeaderId, extra_field_from_bytes

_LFH_FORMAT = struct.Struct("<HHHHHIIIHH")
_CDR_FORMAT = struct.Struct("<HHHHHHIIIHHHHHII")
_EOCDR_FORMAT = struct.Struct("<HHHHIIH")
_ZIP64_EOCDR_FORMAT = struct.Struct("<QHHIIQQQQ")
_ZIP64_EOCDL_FORMAT = struct.Struct("<IQI")
_ZIP64_EOCDL_BODY_LENGTH = 16

_FLAG_ENCRYPTED = 0x1
_FLAG_DATA_DESCRIPTOR = 0x8
_FLAG_FILENAME_UNICODE = 0x800


def _read_exact(stream: BinaryIO, length: int) -> bytes:
    """Read exactly ``length`` bytes, raising EOFError if the stream ends first."""
    chunks = []
    remaining = length
    while remaining > 0:
        chunk = stream.read(remaining)
        if not chunk:
            raise EOFError(f"expected {length} bytes but the stream ended after {length - remaining}")
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)


def _check_length(data: bytes, expected: int, name: str) -> bytes:
    data = bytes(data)
    if len(data) != expected:
        raise ValueError(f"{name} needs exactly {expected} bytes, got {len(data)}")
    return data


@dataclass(frozen=True)
class GeneralPurposeFlag:
    """The general purpose bit flags this package interprets."""

    encrypted: bool = False
    data_descriptor: bool = False
    filename_unicode: bool = False

    @classmethod
    def from_int(cls, value: int) -> GeneralPurposeFlag:
        """Decode the flags from their stored 16-bit value."""
        return cls(
            encrypted=bool(value & _FLAG_ENCRYPTED),
            data_descriptor=bool(value & _FLAG_DATA_DESCRIPTOR),
            filename_unicode=bool(value & _FLAG_FILENAME_UNICODE),
        )

    def __int__(self) -> int:
        return (
            (_FLAG_ENCRYPTED if self.encrypted else 0)
            | (_FLAG_DATA_DESCRIPTOR if self.data_descriptor else 0)
            | (_FLAG_FILENAME_UNICODE if self.filename_unicode else 0)
        )

    def to_bytes(self) -> bytes:
        """Encode the flags as two little-endian bytes."""
        return struct.pack("<H", int(self))


@dataclass
class LocalFileHeader:
    """A local file header, excluding its signature."""

    version: int
    flags: GeneralPurposeFlag
    compression: int
    mod_time: int
    mod_date: int
    crc: int
    compressed_size: int
    uncompressed_size: int
    file_name_length: int
    extra_field_length: int

    @classmethod
    def from_bytes(cls, data: bytes) -> LocalFileHeader:
        data = _check_length(data, LFH_LENGTH, "a local file header")
        (version, flags, *rest) = _LFH_FORMAT.unpack(data)
        return cls(version, GeneralPurposeFlag.from_int(flags), *rest)

    def to_bytes(self) -> bytes:
        return _LFH_FORMAT.pack(
            self.version,
            int(self.flags),
            self.compression,
            self.mod_time,
            self.mod_date,
            self.crc,
            self.compressed_size,
            self.uncompressed_size,
            self.file_name_length,
            self.extra_field_length,
        )

    @classmethod
    def read(cls, stream: BinaryIO) -> LocalFileHeader:
        """Read a header body from the stream's current position."""
        return cls.from_bytes(_read_exact(stream, LFH_LENGTH))


@dataclass
class CentralDirectoryRecord:
    """A central directory file header, excluding its signature."""

    v_made_by: int
    v_needed: int
    flags: GeneralPurposeFlag
    compression: int
    mod_time: int
    mod_date: int
    crc: int
    compressed_size: int
    uncompressed_size: int
    file_name_length: int
    extra_field_length: int
    file_comment_length: int
    disk_start: int
    inter_attr: int
    exter_attr: int
    lh_offset: int

    @classmethod
    def from_bytes(cls, data: bytes) -> CentralDirectoryRecord:
        data = _check_length(data, CDH_LENGTH, "a central directory record")
        (v_made_by, v_needed, flags, *rest) = _CDR_FORMAT.unpack(data)
        return cls(v_made_by, v_needed, GeneralPurposeFlag.from_int(flags), *rest)

    def to_bytes(self) -> bytes:
        return _CDR_FORMAT.pack(
            self.v_made_by,
            self.v_needed,
            int(self.flags),
            self.compression,
            self.mod_time,
            self.mod_date,
            self.crc,
            self.compressed_size,
            self.uncompressed_size,
            self.file_name_length,
            self.extra_field_length,
            self.file_comment_length,
            self.disk_start,
            self.inter_attr,
            self.exter_attr,
            self.lh_offset,
        )

    @classmethod
    def read(cls, stream: BinaryIO) -> CentralDirectoryRecord:
        """Read a record body from the stream's current position."""
        return cls.from_bytes(_read_exact(stream, CDH_LENGTH))


@dataclass
class EndOfCentralDirectoryHeader:
    """The end of central directory record, excluding signature and comment."""

    disk_num: int
    start_cent_dir_disk: int
    num_of_entries_disk: int
    num_of_entries: int
    size_cent_dir: int
    cent_dir_offset: int
    file_comm_length: int

    @classmethod
    def from_bytes(cls, data: bytes) -> EndOfCentralDirectoryHeader:
        data = _check_length(data, EOCDR_LENGTH, "an end of central directory record")
        return cls(*_EOCDR_FORMAT.unpack(data))

    def to_bytes(self) -> bytes:
        return _EOCDR_FORMAT.pack(
            self.disk_num,
            self.start_cent_dir_disk,
            self.num_of_entries_disk,
            self.num_of_entries,
            self.size_cent_dir,
            self.cent_dir_offset,
            self.file_comm_length,
        )

    @classmethod
    def read(cls, stream: BinaryIO) -> EndOfCentralDirectoryHeader:
        """Read a record body from the stream's current position."""
        return cls.from_bytes(_read_exact(stream, EOCDR_LENGTH))


@dataclass
class Zip64EndOfCentralDirectoryRecord:
    """The Zip64 end of central directory record, excluding its signature.

    The variable-length extensible data sector that may follow is ignored.
    """

    size_of_zip64_end_of_cd_record: int
    version_made_by: int
    version_needed_to_extract: int
    disk_number: int
    disk_number_start_of_cd: int
    num_entries_in_directory_on_disk: int
    num_entries_in_directory: int
    directory_size: int
    offset_of_start_of_directory: int

    @classmethod
    def from_bytes(cls, data: bytes) -> Zip64EndOfCentralDirectoryRecord:
        data = _check_length(data, ZIP64_EOCDR_LENGTH, "a Zip64 end of central directory record")
        return cls(*_ZIP64_EOCDR_FORMAT.unpack(data))

    def to_bytes(self) -> bytes:
        return _ZIP64_EOCDR_FORMAT.pack(
            self.size_of_zip64_end_of_cd_record,
            self.version_made_by,
            self.version_needed_to_extract,
            self.disk_number,
            self.disk_number_start_of_cd,
            self.num_entries_in_directory_on_disk,
            self.num_entries_in_directory,
            self.directory_size,
            self.offset_of_start_of_directory,
        )

    @classmethod
    def read(cls, stream: BinaryIO) -> Zip64EndOfCentralDirectoryRecord:
        """Read a record body from the stream's current position."""
        return cls.from_bytes(_read_exact(stream, ZIP64_EOCDR_LENGTH))


@dataclass
class Zip64EndOfCentralDirectoryLocator:
    """The Zip64 end of central directory locator, excluding its signature."""

    number_of_disk_with_start_of_zip64_end_of_central_directory: int
    relative_offset: int
    total_number_of_disks: int

    @classmethod
    def from_bytes(cls, data: bytes) -> Zip64EndOfCentralDirectoryLocator:
        data = _check_length(data, _ZIP64_EOCDL_BODY_LENGTH, "a Zip64 end of central directory locator")
        return cls(*_ZIP64_EOCDL_FORMAT.unpack(data))

    def to_bytes(self) -> bytes:
        return _ZIP64_EOCDL_FORMAT.pack(
            self.number_of_disk_with_start_of_zip64_end_of_central_directory,
            self.relative_offset,
            self.total_number_of_disks,
        )

    @classmethod
    def try_read(cls, stream: BinaryIO) -> Zip64EndOfCentralDirectoryLocator | None:
        """Read a signature and, if it is the locator's, the locator; otherwise None."""
        (signature,) = struct.unpack("<I", _read_exact(stream, SIGNATURE_LENGTH))
        if signature != ZIP64_EOCDL_SIGNATURE:
            return None
        return cls.from_bytes(_read_exact(stream, _ZIP64_EOCDL_BODY_LENGTH))


def parse_extra_fields(data: bytes, uncompressed_size: int, compressed_size: int) -> list[ExtraField]:
    """Split an extra field block into its fields.

    The sizes are the 32-bit values of the owning header, needed to read Zip64 fields.
    """
    data = bytes(data)
    fields: list[ExtraField] = []
    cursor = 0
    while cursor + 4 < len(data):
        header_id, field_size = struct.unpack_from("<HH", data, cursor)
        start = cursor + 4
        end = start + field_size
        if end > len(data):
            raise InvalidExtraFieldHeaderError(field_size, len(data) - start)
        fields.append(
            extra_field_from_bytes(HeaderId(header_id), field_size, data[start:end], uncompressed_size, compressed_size)
        )
        cursor = end
    return fields