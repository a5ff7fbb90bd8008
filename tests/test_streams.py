import bz2
import io
import lzma
import zlib

import pytest

from zipcursor.compression import Compression
from zipcursor.entry import ZipEntry, ZipString
from zipcursor.errors import CRC32CheckError
from zipcursor.streams import ZipEntryReader, read_bytes

PLAIN = b"The quick brown fox jumps over the lazy dog. " * 200


class OneWayStream:
    def __init__(self, data: bytes) -> None:
        self._inner = io.BytesIO(data)

    def read(self, size=-1):
        return self._inner.read(size)

    def seekable(self):
        return False


def _deflate(data: bytes) -> bytes:
    compressor = zlib.compressobj(wbits=-zlib.MAX_WBITS)
    return compressor.compress(data) + compressor.flush()


def _entry(crc: int) -> ZipEntry:
    return ZipEntry(filename=ZipString.from_str("file.txt"), crc32=crc)


@pytest.mark.parametrize(
    "compression, compress",
    [
        (Compression.STORED, lambda data: data),
        (Compression.DEFLATE, _deflate),
        (Compression.BZ, bz2.compress),
        (Compression.XZ, lambda data: lzma.compress(data, format=lzma.FORMAT_XZ)),
    ],
)
def test_round_trip(compression, compress):
    packed = compress(PLAIN)
    reader = ZipEntryReader(io.BytesIO(packed), compression, len(packed))
    assert reader.read() == PLAIN
    assert reader.compute_hash() == zlib.crc32(PLAIN)


def test_stored_is_bounded_by_size():
    reader = ZipEntryReader(io.BytesIO(b"hello world"), Compression.STORED, 5)
    assert reader.read() == b"hello"
    assert reader.read() == b""


def test_small_reads_join_to_whole():
    packed = _deflate(PLAIN)
    reader = ZipEntryReader(io.BytesIO(packed), Compression.DEFLATE, len(packed))
    parts = []
    while chunk := reader.read(7):
        assert len(chunk) <= 7
        parts.append(chunk)
    assert b"".join(parts) == PLAIN
    assert reader.compute_hash() == zlib.crc32(PLAIN)


def test_compute_hash_resets():
    reader = ZipEntryReader(io.BytesIO(b"abc"), Compression.STORED, 3)
    reader.read()
    first = reader.compute_hash()
    assert first == zlib.crc32(b"abc")
    assert reader.compute_hash() == 0


def test_unbounded_deflate_gives_back_trailing_bytes_seekable():
    stream = io.BytesIO(_deflate(PLAIN) + b"TRAILER")
    reader = ZipEntryReader(stream, Compression.DEFLATE, None)
    assert reader.read() == PLAIN
    assert reader.into_inner().read() == b"TRAILER"


def test_unbounded_deflate_gives_back_trailing_bytes_one_way():
    stream = OneWayStream(_deflate(PLAIN) + b"TRAILER")
    reader = ZipEntryReader(stream, Compression.DEFLATE, None)
    assert reader.read() == PLAIN
    rest = reader.into_inner()
    assert rest.read(3) == b"TRA"
    assert rest.read() == b"ILER"


def test_bounded_stored_leaves_rest_in_stream():
    stream = io.BytesIO(b"abcdefgh")
    reader = ZipEntryReader(stream, Compression.STORED, 4)
    assert reader.read() == b"abcd"
    assert reader.into_inner().read() == b"efgh"


def test_truncated_deflate_raises():
    packed = _deflate(PLAIN)
    reader = ZipEntryReader(io.BytesIO(packed[: len(packed) // 2]), Compression.DEFLATE, None)
    with pytest.raises(EOFError):
        reader.read()


def test_read_to_end_checked():
    packed = _deflate(PLAIN)
    reader = ZipEntryReader(io.BytesIO(packed), Compression.DEFLATE, len(packed), _entry(zlib.crc32(PLAIN)))
    assert reader.read_to_end_checked() == PLAIN
    assert reader.entry.filename.as_str() == "file.txt"


def test_read_to_end_checked_mismatch():
    reader = ZipEntryReader(io.BytesIO(b"data"), Compression.STORED, 4, _entry(zlib.crc32(b"other")))
    with pytest.raises(CRC32CheckError):
        reader.read_to_end_checked()


def test_read_to_string_checked():
    text = "grüße"
    raw = text.encode("utf-8")
    reader = ZipEntryReader(io.BytesIO(raw), Compression.STORED, len(raw), _entry(zlib.crc32(raw)))
    assert reader.read_to_string_checked() == text


def test_read_to_string_checked_mismatch():
    reader = ZipEntryReader(io.BytesIO(b"text"), Compression.STORED, 4, _entry(zlib.crc32(b"else")))
    with pytest.raises(CRC32CheckError):
        reader.read_to_string_checked()


def test_checked_read_without_entry():
    reader = ZipEntryReader(io.BytesIO(b"data"), Compression.STORED, 4)
    with pytest.raises(ValueError):
        reader.read_to_end_checked()


def test_read_bytes_exact_and_short():
    stream = io.BytesIO(b"0123456789")
    assert read_bytes(stream, 4) == b"0123"
    assert read_bytes(stream, 100) == b"456789"
    assert read_bytes(stream, 5) == b""


def test_read_bytes_gathers_short_reads():
    class Trickle:
        def __init__(self, data):
            self._inner = io.BytesIO(data)

        def read(self, size=-1):
            return self._inner.read(min(size, 2))

    assert read_bytes(Trickle(b"abcdefg"), 5) == b"abcde"