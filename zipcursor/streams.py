"""Reading an entry's data: bounded, decompressed and hashed."""

from __future__ import annotations

import io
import zlib
from typing import BinaryIO

from .compression import Compression, decompressor_for
from .entry import ZipEntry
from .errors import CRC32CheckError

_CHUNK_SIZE = 8192


def _is_seekable(stream: BinaryIO) -> bool:
    try:
        return bool(stream.seekable())
    except AttributeError:
        return False


class _PrefixedStream:
    """A read-only stream that yields some bytes before those of another stream."""

    def __init__(self, prefix: bytes, stream: BinaryIO) -> None:
        self._prefix = prefix
        self._stream = stream

    def readable(self) -> bool:
        return True

    def seekable(self) -> bool:
        return False

    def read(self, size: int | None = -1) -> bytes:
        if size is None or size < 0:
            data = self._prefix + self._stream.read()
            self._prefix = b""
            return data
        if self._prefix:
            data, self._prefix = self._prefix[:size], self._prefix[size:]
            return data
        return self._stream.read(size)


def read_bytes(stream: BinaryIO, length: int) -> bytes:
    """Read up to ``length`` bytes, fewer only if the stream ends first."""
    chunks = []
    remaining = length
    while remaining > 0:
        chunk = stream.read(remaining)
        if not chunk:
            break
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)


class ZipEntryReader:
    """Reads at most ``size`` compressed bytes from a stream and decompresses them.

    The CRC32 of everything returned is tracked. ``size`` may be None for data
    whose length is not known in advance.
    """

    def __init__(
        self,
        stream: BinaryIO,
        compression: Compression,
        size: int | None,
        entry: ZipEntry | None = None,
    ) -> None:
        self._stream = stream
        self._compression = Compression.from_code(int(compression))
        self._decompressor = decompressor_for(self._compression)
        self._remaining = size
        self._entry = entry
        self._pending = b""
        self._unused = b""
        self._finished = False
        self._crc = 0

    @property
    def entry(self) -> ZipEntry | None:
        """The entry this reader was opened for, if one was given."""
        return self._entry

    def _take(self, size: int) -> bytes:
        if self._remaining is not None:
            size = min(size, self._remaining)
            if size <= 0:
                return b""
        data = self._stream.read(size)
        if self._remaining is not None:
            self._remaining -= len(data)
        return data

    def _fill(self) -> bool:
        while not self._pending and not self._finished:
            if self._decompressor.eof:
                self._unused = bytes(self._decompressor.unused_data)
                self._finished = True
                break
            chunk = self._take(_CHUNK_SIZE)
            if not chunk:
                if self._compression is not Compression.STORED:
                    raise EOFError("compressed data ended before the end of its stream")
                self._finished = True
                break
            self._pending = self._decompressor.decompress(chunk)
        return bool(self._pending)

    def read(self, size: int | None = -1) -> bytes:
        """Read up to ``size`` decompressed bytes, or all that remain."""
        if size is None or size < 0:
            parts = []
            while self._fill():
                parts.append(self._pending)
                self._pending = b""
            data = b"".join(parts)
        elif size == 0:
            return b""
        elif self._fill():
            data, self._pending = self._pending[:size], self._pending[size:]
        else:
            data = b""
        self._crc = zlib.crc32(data, self._crc)
        return data

    def compute_hash(self) -> int:
        """Return the CRC32 of the bytes read so far and start a fresh hash.

        Call this once the end of the data has been reached.
        """
        value, self._crc = self._crc, 0
        return value

    def _require_entry(self) -> ZipEntry:
        if self._entry is None:
            raise ValueError("this reader has no entry to check against")
        return self._entry

    def read_to_end_checked(self) -> bytes:
        """Read all remaining bytes and verify the CRC32 against the entry's."""
        entry = self._require_entry()
        data = self.read()
        if self.compute_hash() != entry.crc32:
            raise CRC32CheckError()
        return data

    def read_to_string_checked(self) -> str:
        """Read all remaining bytes as UTF-8 text and verify the CRC32."""
        entry = self._require_entry()
        text = self.read().decode("utf-8")
        if self.compute_hash() != entry.crc32:
            raise CRC32CheckError()
        return text

    def into_inner(self) -> BinaryIO:
        """Return the underlying stream, positioned just past the data consumed.

        Bytes read ahead but not part of the entry are given back, by seeking
        where the stream allows it and by prefixing them otherwise.
        """
        leftover, self._unused = self._unused, b""
        if not leftover:
            return self._stream
        if _is_seekable(self._stream):
            self._stream.seek(-len(leftover), io.SEEK_CUR)
            return self._stream
        return _PrefixedStream(leftover, self._stream)