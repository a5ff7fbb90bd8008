import io
import zipfile

import pytest

from zipcursor.compression import Compression
from zipcursor.consts import SPEC_VERSION_MADE_BY
from zipcursor.entry import (
    StoredZipEntry,
    StringEncoding,
    ZipEntry,
    ZipString,
    as_made_by,
    as_needed_to_extract,
)
from zipcursor.errors import UnexpectedHeaderError, ZipError


def _archive(name: str, content: bytes) -> tuple[bytes, int]:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_STORED) as archive:
        archive.writestr("first.bin", b"xyz")
        archive.writestr(name, content)
    data = buffer.getvalue()
    with zipfile.ZipFile(io.BytesIO(data)) as archive:
        offset = archive.getinfo(name).header_offset
    return data, offset


def test_zip_string_round_trip():
    text = "héllo wörld"
    value = ZipString.from_str(text)
    assert value.as_str() == text
    assert value.as_bytes() == text.encode("utf-8")
    assert value.encoding is StringEncoding.UTF8
    assert value.alternative is None


def test_raw_string_is_not_text():
    value = ZipString(b"\xff\xfe", StringEncoding.RAW)
    assert value.as_bytes() == b"\xff\xfe"
    with pytest.raises(ZipError):
        value.as_str()


def test_invalid_utf8_raises():
    with pytest.raises(ZipError):
        ZipString(b"\xff", StringEncoding.UTF8).as_str()


def test_string_with_alternative():
    value = ZipString.with_alternative("naïve", b"na\x8bve")
    assert value.as_str() == "naïve"
    assert value.as_bytes() == "naïve".encode("utf-8")
    assert value.alternative == b"na\x8bve"


def test_entry_defaults():
    entry = ZipEntry(filename=ZipString.from_str("a.txt"))
    assert entry.comment.as_str() == ""
    assert entry.extra_fields == []
    assert entry.compression is Compression.STORED


def test_is_dir():
    assert ZipEntry(filename=ZipString.from_str("folder/")).is_dir() is True
    assert ZipEntry(filename=ZipString.from_str("folder/file")).is_dir() is False


def test_is_dir_raw_name_raises():
    entry = ZipEntry(filename=ZipString(b"\x80/", StringEncoding.RAW))
    with pytest.raises(ZipError):
        entry.is_dir()


@pytest.mark.parametrize(
    "compression, expected",
    [
        (Compression.STORED, 10),
        (Compression.DEFLATE, 20),
        (Compression.BZ, 46),
        (Compression.LZMA, 63),
        (Compression.ZSTD, 10),
    ],
)
def test_as_needed_to_extract(compression, expected):
    entry = ZipEntry(filename=ZipString.from_str("file"), compression=compression)
    assert as_needed_to_extract(entry) == expected


def test_directory_needs_at_least_20():
    stored = ZipEntry(filename=ZipString.from_str("dir/"))
    lzma_dir = ZipEntry(filename=ZipString.from_str("dir/"), compression=Compression.LZMA)
    assert as_needed_to_extract(stored) == 20
    assert as_needed_to_extract(lzma_dir) == 63


def test_raw_name_is_not_treated_as_directory():
    entry = ZipEntry(filename=ZipString(b"\x80/", StringEncoding.RAW))
    assert as_needed_to_extract(entry) == 10


def test_as_made_by():
    value = as_made_by()
    assert value >> 8 == 3
    assert value & 0xFF == SPEC_VERSION_MADE_BY


def test_seek_to_data_offset():
    content = b"payload bytes"
    data, offset = _archive("second.txt", content)
    stored = StoredZipEntry(
        entry=ZipEntry(filename=ZipString.from_str("second.txt")), file_offset=offset, header_size=0
    )
    stream = io.BytesIO(data)
    stored.seek_to_data_offset(stream)
    assert stream.read(len(content)) == content


def test_seek_to_data_offset_wrong_signature():
    data, offset = _archive("second.txt", b"abc")
    stored = StoredZipEntry(
        entry=ZipEntry(filename=ZipString.from_str("second.txt")), file_offset=offset + 1, header_size=0
    )
    with pytest.raises(UnexpectedHeaderError):
        stored.seek_to_data_offset(io.BytesIO(data))