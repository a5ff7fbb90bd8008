"""Parsing the central directory and local file headers of a ZIP archive."""

from __future__ import annotations

import io
import struct
import zlib
from typing import BinaryIO, Iterable

from .compression import AttributeCompatibility, Compression
from .consts import (
    CDH_SIGNATURE,
    LFH_LENGTH,
    LFH_SIGNATURE,
    NON_ZIP64_MAX_SIZE,
    SIGNATURE_LENGTH,
    ZIP64_EOCDL_LENGTH,
)
from .entry import StoredZipEntry, StringEncoding, ZipDateTime, ZipEntry, ZipFile, ZipString
from .errors import FeatureNotSupportedError, UnexpectedHeaderError
from .extra_fields import (
    ExtraField,
    InfoZipUnicodeCommentExtraField,
    InfoZipUnicodePathExtraField,
    Zip64ExtendedInformationExtraField,
)
from .headers import (
    CentralDirectoryRecord,
    EndOfCentralDirectoryHeader,
    LocalFileHeader,
    Zip64EndOfCentralDirectoryLocator,
    Zip64EndOfCentralDirectoryRecord,
    parse_extra_fields,
)
from .locator import locate_eocdr
from .records import CombinedCentralDirectoryRecord
from .streams import read_bytes


def _read_signature(stream: BinaryIO) -> int:
    raw = read_bytes(stream, SIGNATURE_LENGTH)
    if len(raw) < SIGNATURE_LENGTH:
        raise EOFError("the stream ended before a record signature")
    (signature,) = struct.unpack("<I", raw)
    return signature


def read_zip_file(stream: BinaryIO) -> ZipFile:
    """Read the archive comment and central directory of a seekable stream."""
    eocdr_offset = locate_eocdr(stream)
    stream.seek(eocdr_offset)
    eocdr = EndOfCentralDirectoryHeader.read(stream)
    comment = ZipString(read_bytes(stream, eocdr.file_comm_length), StringEncoding.UTF8)

    # The Zip64 locator, if any, sits right before the EOCDR signature.
    locator_offset = eocdr_offset - (ZIP64_EOCDL_LENGTH + SIGNATURE_LENGTH)
    combined = CombinedCentralDirectoryRecord.from_eocdr(eocdr)
    zip64 = False
    if locator_offset >= 0:
        stream.seek(locator_offset)
        locator = Zip64EndOfCentralDirectoryLocator.try_read(stream)
        if locator is not None:
            stream.seek(locator.relative_offset + SIGNATURE_LENGTH)
            zip64_eocdr = Zip64EndOfCentralDirectoryRecord.read(stream)
            combined = CombinedCentralDirectoryRecord.combine(eocdr, zip64_eocdr)
            zip64 = True

    if (
        combined.disk_number != combined.disk_number_start_of_cd
        or combined.num_entries_in_directory != combined.num_entries_in_directory_on_disk
    ):
        raise FeatureNotSupportedError("Spanned/split files")

    stream.seek(combined.offset_of_start_of_directory)
    entries = read_central_directory(stream, combined.num_entries_in_directory, zip64)
    return ZipFile(entries=entries, comment=comment, zip64=zip64)


def read_central_directory(stream: BinaryIO, num_of_entries: int, zip64: bool) -> list[StoredZipEntry]:
    """Read ``num_of_entries`` central directory records from the current position."""
    return [read_cd_record(stream, zip64) for _ in range(num_of_entries)]


def get_zip64_extra_field(extra_fields: Iterable[ExtraField]) -> Zip64ExtendedInformationExtraField | None:
    """Return the first Zip64 extended information field, if there is one."""
    return next(
        (field for field in extra_fields if isinstance(field, Zip64ExtendedInformationExtraField)),
        None,
    )


def _combined_sizes(
    uncompressed_size: int, compressed_size: int, zip64_field: Zip64ExtendedInformationExtraField | None
) -> tuple[int, int]:
    if zip64_field is not None:
        if zip64_field.uncompressed_size is not None:
            uncompressed_size = zip64_field.uncompressed_size
        if zip64_field.compressed_size is not None:
            compressed_size = zip64_field.compressed_size
    return uncompressed_size, compressed_size


def read_cd_record(stream: BinaryIO, zip64: bool) -> StoredZipEntry:
    """Read one central directory record, signature included."""
    signature = _read_signature(stream)
    if signature != CDH_SIGNATURE:
        raise UnexpectedHeaderError(signature, CDH_SIGNATURE)

    header = CentralDirectoryRecord.read(stream)
    header_size = SIGNATURE_LENGTH + LFH_LENGTH
    trailing_size = header.file_name_length + header.extra_field_length
    filename_basic = read_bytes(stream, header.file_name_length)
    compression = Compression.from_code(header.compression)
    extra_field = read_bytes(stream, header.extra_field_length)
    extra_fields = parse_extra_fields(extra_field, header.uncompressed_size, header.compressed_size)
    comment_basic = read_bytes(stream, header.file_comment_length)

    zip64_field = get_zip64_extra_field(extra_fields)
    uncompressed_size, compressed_size = _combined_sizes(
        header.uncompressed_size, header.compressed_size, zip64_field
    )

    file_offset = header.lh_offset
    if (
        zip64_field is not None
        and file_offset == NON_ZIP64_MAX_SIZE
        and zip64_field.relative_header_offset is not None
    ):
        file_offset = zip64_field.relative_header_offset

    entry = ZipEntry(
        filename=detect_filename(filename_basic, header.flags.filename_unicode, extra_fields),
        compression=compression,
        attribute_compatibility=AttributeCompatibility.UNIX,
        crc32=header.crc,
        uncompressed_size=uncompressed_size,
        compressed_size=compressed_size,
        last_modification_date=ZipDateTime(date=header.mod_date, time=header.mod_time),
        internal_file_attribute=header.inter_attr,
        external_file_attribute=header.exter_attr,
        extra_fields=extra_fields,
        comment=detect_comment(comment_basic, header.flags.filename_unicode, extra_fields),
        data_descriptor=header.flags.data_descriptor,
    )
    return StoredZipEntry(entry=entry, file_offset=file_offset, header_size=header_size + trailing_size)


def read_local_file_header(stream: BinaryIO) -> ZipEntry | None:
    """Read a local file header, or return None once the central directory begins.

    The stream is left at the first byte of the entry's data.
    """
    signature = _read_signature(stream)
    if signature == CDH_SIGNATURE:
        return None
    if signature != LFH_SIGNATURE:
        raise UnexpectedHeaderError(signature, LFH_SIGNATURE)

    header = LocalFileHeader.read(stream)
    filename_basic = read_bytes(stream, header.file_name_length)
    compression = Compression.from_code(header.compression)
    extra_field = read_bytes(stream, header.extra_field_length)
    extra_fields = parse_extra_fields(extra_field, header.uncompressed_size, header.compressed_size)

    uncompressed_size, compressed_size = _combined_sizes(
        header.uncompressed_size, header.compressed_size, get_zip64_extra_field(extra_fields)
    )

    if header.flags.data_descriptor and compression is Compression.STORED:
        raise FeatureNotSupportedError(
            "stream reading entries with data descriptors & Stored compression mode"
        )
    if header.flags.encrypted:
        raise FeatureNotSupportedError("encryption")

    return ZipEntry(
        filename=detect_filename(filename_basic, header.flags.filename_unicode, extra_fields),
        compression=compression,
        attribute_compatibility=AttributeCompatibility.UNIX,
        crc32=header.crc,
        uncompressed_size=uncompressed_size,
        compressed_size=compressed_size,
        last_modification_date=ZipDateTime(date=header.mod_date, time=header.mod_time),
        internal_file_attribute=0,
        external_file_attribute=0,
        extra_fields=extra_fields,
        comment=ZipString.from_str(""),
        data_descriptor=header.flags.data_descriptor,
    )


def _detect_string(
    basic: bytes,
    basic_is_utf8: bool,
    extra_fields: Iterable[ExtraField],
    field_type: type,
) -> ZipString:
    basic = bytes(basic)
    if basic_is_utf8:
        return ZipString(basic, StringEncoding.UTF8)

    checksum = zlib.crc32(basic)
    unicode_field = next(
        (
            field
            for field in extra_fields
            if isinstance(field, field_type) and field.version == 1 and field.crc32 == checksum
        ),
        None,
    )
    if unicode_field is not None:
        try:
            text = unicode_field.data.decode("utf-8")
        except UnicodeDecodeError:
            pass
        else:
            return ZipString.with_alternative(text, basic)

    # Without the UTF-8 flag, non-ASCII bytes may be in some other code page
    # even where they happen to form valid UTF-8.
    if basic.isascii():
        return ZipString(basic, StringEncoding.UTF8)
    return ZipString(basic, StringEncoding.RAW)


def detect_filename(basic: bytes, basic_is_utf8: bool, extra_fields: Iterable[ExtraField]) -> ZipString:
    """Work out an entry's file name from its bytes, flag and unicode path field."""
    return _detect_string(basic, basic_is_utf8, extra_fields, InfoZipUnicodePathExtraField)


def detect_comment(basic: bytes, basic_is_utf8: bool, extra_fields: Iterable[ExtraField]) -> ZipString:
    """Work out an entry's comment from its bytes, flag and unicode comment field."""
    return _detect_string(basic, basic_is_utf8, extra_fields, InfoZipUnicodeCommentExtraField)


__all__ = [
    "read_zip_file",
    "read_central_directory",
    "read_cd_record",
    "read_local_file_header",
    "get_zip64_extra_field",
    "detect_filename",
    "detect_comment",
]

# Keep the seek-origin constant reachable for callers positioning streams.
_SEEK_SET = io.SEEK_SET