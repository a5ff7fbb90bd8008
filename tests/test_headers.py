import io
import struct

import pytest

from zipcursor.errors import InvalidExtraFieldHeaderError
from zipcursor.extra_fields import (
    HeaderId,
    InfoZipUnicodePathExtraField,
    UnknownExtraField,
    Zip64ExtendedInformationExtraField,
)
from zipcursor.headers import (
    CentralDirectoryRecord,
    EndOfCentralDirectoryHeader,
    GeneralPurposeFlag,
    LocalFileHeader,
    Zip64EndOfCentralDirectoryLocator,
    Zip64EndOfCentralDirectoryRecord,
    parse_extra_fields,
)


def test_parse_zip64_eocdr():
    eocdr = bytes([
        0x50, 0x4B, 0x06, 0x06, 0x2C, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00, 0x1E, 0x03, 0x2D, 0x00, 0x00, 0x00,
        0x00, 0x00, 0x00, 0x00, 0x00, 0x00, 0x01, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00, 0x01, 0x00, 0x00, 0x00,
        0x00, 0x00, 0x00, 0x00, 0x2F, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00, 0x40, 0x00, 0x00, 0x00, 0x00, 0x00,
        0x00, 0x00,
    ])
    record = Zip64EndOfCentralDirectoryRecord.from_bytes(eocdr[4:56])
    assert record == Zip64EndOfCentralDirectoryRecord(
        size_of_zip64_end_of_cd_record=44,
        version_made_by=798,
        version_needed_to_extract=45,
        disk_number=0,
        disk_number_start_of_cd=0,
        num_entries_in_directory_on_disk=1,
        num_entries_in_directory=1,
        directory_size=47,
        offset_of_start_of_directory=64,
    )
    assert record.to_bytes() == eocdr[4:56]


def test_parse_zip64_eocdl():
    eocdl = bytes([
        0x50, 0x4B, 0x06, 0x07, 0x00, 0x00, 0x00, 0x00, 0x6F, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00, 0x01, 0x00,
        0x00, 0x00,
    ])
    locator = Zip64EndOfCentralDirectoryLocator.try_read(io.BytesIO(eocdl))
    assert locator == Zip64EndOfCentralDirectoryLocator(
        number_of_disk_with_start_of_zip64_end_of_central_directory=0,
        relative_offset=111,
        total_number_of_disks=1,
    )
    assert locator.to_bytes() == eocdl[4:]


def test_locator_wrong_signature_returns_none():
    data = b"PK\x05\x06" + bytes(16)
    assert Zip64EndOfCentralDirectoryLocator.try_read(io.BytesIO(data)) is None


def test_locator_truncated_raises():
    with pytest.raises(EOFError):
        Zip64EndOfCentralDirectoryLocator.try_read(io.BytesIO(b"PK\x06\x07\x00"))


def test_flags_decode_all_bits():
    flags = GeneralPurposeFlag.from_int(0x809)
    assert flags == GeneralPurposeFlag(encrypted=True, data_descriptor=True, filename_unicode=True)
    assert flags.to_bytes() == b"\x09\x08"


def test_flags_ignore_unknown_bits():
    flags = GeneralPurposeFlag.from_int(0x0006)
    assert flags == GeneralPurposeFlag()
    assert flags.to_bytes() == b"\x00\x00"


@pytest.mark.parametrize("value", [0x0, 0x1, 0x8, 0x800, 0x808, 0x9])
def test_flags_round_trip(value):
    assert int.from_bytes(GeneralPurposeFlag.from_int(value).to_bytes(), "little") == value


def test_local_file_header_round_trip():
    header = LocalFileHeader(
        version=20,
        flags=GeneralPurposeFlag(data_descriptor=True),
        compression=8,
        mod_time=0x6D2F,
        mod_date=0x5A21,
        crc=0xDEADBEEF,
        compressed_size=123,
        uncompressed_size=456,
        file_name_length=5,
        extra_field_length=0,
    )
    raw = header.to_bytes()
    assert len(raw) == 26
    assert raw[:4] == b"\x14\x00\x08\x00"
    assert LocalFileHeader.from_bytes(raw) == header
    assert LocalFileHeader.read(io.BytesIO(raw + b"tail")) == header


def test_local_file_header_wrong_length():
    with pytest.raises(ValueError):
        LocalFileHeader.from_bytes(bytes(25))


def test_local_file_header_read_truncated():
    with pytest.raises(EOFError):
        LocalFileHeader.read(io.BytesIO(bytes(10)))


def test_central_directory_record_round_trip():
    record = CentralDirectoryRecord(
        v_made_by=0x033F,
        v_needed=20,
        flags=GeneralPurposeFlag(filename_unicode=True),
        compression=0,
        mod_time=1,
        mod_date=2,
        crc=3,
        compressed_size=4,
        uncompressed_size=4,
        file_name_length=8,
        extra_field_length=0,
        file_comment_length=0,
        disk_start=0,
        inter_attr=0,
        exter_attr=0o100644 << 16,
        lh_offset=0xFFFFFFFF,
    )
    raw = record.to_bytes()
    assert len(raw) == 42
    assert raw[4:6] == b"\x00\x08"
    assert raw[-4:] == b"\xff\xff\xff\xff"
    assert CentralDirectoryRecord.from_bytes(raw) == record
    assert CentralDirectoryRecord.read(io.BytesIO(raw)) == record


def test_eocdr_round_trip():
    header = EndOfCentralDirectoryHeader(
        disk_num=0,
        start_cent_dir_disk=0,
        num_of_entries_disk=1,
        num_of_entries=1,
        size_cent_dir=47,
        cent_dir_offset=64,
        file_comm_length=0,
    )
    raw = header.to_bytes()
    assert len(raw) == 18
    assert EndOfCentralDirectoryHeader.from_bytes(raw) == header
    assert EndOfCentralDirectoryHeader.read(io.BytesIO(raw)) == header


def test_zip64_eocdr_read_from_stream():
    record = Zip64EndOfCentralDirectoryRecord(44, 798, 45, 0, 0, 1, 1, 47, 64)
    assert Zip64EndOfCentralDirectoryRecord.read(io.BytesIO(record.to_bytes())) == record


def test_parse_extra_fields_unknown():
    data = struct.pack("<HH", 0x1234, 2) + b"ab"
    fields = parse_extra_fields(data, 0, 0)
    assert fields == [UnknownExtraField(header_id=HeaderId(0x1234), data_size=2, content=b"ab")]


def test_parse_extra_fields_empty_trailing_field_is_ignored():
    assert parse_extra_fields(struct.pack("<HH", 0x1234, 0), 0, 0) == []
    assert parse_extra_fields(b"", 0, 0) == []


def test_parse_extra_fields_multiple():
    zip64 = Zip64ExtendedInformationExtraField(uncompressed_size=1 << 33, compressed_size=1 << 32)
    path = InfoZipUnicodePathExtraField(data="é".encode(), crc32=0x12345678)
    data = zip64.to_bytes() + path.to_bytes()
    fields = parse_extra_fields(data, 0xFFFFFFFF, 0xFFFFFFFF)
    assert len(fields) == 2
    assert fields[0].uncompressed_size == 1 << 33
    assert fields[0].compressed_size == 1 << 32
    assert fields[1] == path


def test_parse_extra_fields_overlong_raises():
    data = struct.pack("<HH", 0x1234, 10) + b"abc"
    with pytest.raises(InvalidExtraFieldHeaderError) as info:
        parse_extra_fields(data, 0, 0)
    assert info.value.field_size == 10