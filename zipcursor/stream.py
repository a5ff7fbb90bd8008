"""A ZIP reader over a non-seekable source.

Entries are read in the order their local file headers appear, and each entry's
data must be consumed before the next entry can be opened. Opening an entry
hands the source over to the entry reader; finishing it with ``done`` or
``skip`` gives back a reader ready for the next entry.

Only the local file headers are available, so entry comments are empty,
file attributes are zero, and for entries written with a data descriptor the
CRC and sizes are zero. Stored entries with a data descriptor cannot be read.
"""

from __future__ import annotations

from typing import BinaryIO, Iterator

from .consts import DATA_DESCRIPTOR_LENGTH, DATA_DESCRIPTOR_SIGNATURE, SIGNATURE_LENGTH
from .entry import ZipEntry
from .errors import EOFNotReachedError
from .parsing import read_local_file_header
from .streams import ZipEntryReader, read_bytes

_SKIP_CHUNK_SIZE = 2048
_DATA_DESCRIPTOR_SIGNATURE_BYTES = DATA_DESCRIPTOR_SIGNATURE.to_bytes(SIGNATURE_LENGTH, "little")


def consume_data_descriptor(stream: BinaryIO) -> None:
    """Read past a data descriptor, with or without its optional signature."""
    descriptor = read_bytes(stream, DATA_DESCRIPTOR_LENGTH)
    if len(descriptor) < DATA_DESCRIPTOR_LENGTH:
        raise EOFError("the stream ended inside a data descriptor")
    if descriptor[:SIGNATURE_LENGTH] == _DATA_DESCRIPTOR_SIGNATURE_BYTES:
        tail = read_bytes(stream, SIGNATURE_LENGTH)
        if len(tail) < SIGNATURE_LENGTH:
            raise EOFError("the stream ended inside a data descriptor")


class ZipFileReader:
    """Reads entries one after another from a non-seekable binary stream."""

    def __init__(self, stream: BinaryIO) -> None:
        self._stream: BinaryIO | None = stream

    @property
    def stream(self) -> BinaryIO:
        """The underlying stream."""
        if self._stream is None:
            raise ValueError("this reader has handed its stream to an entry and can no longer be used")
        return self._stream

    def into_inner(self) -> BinaryIO:
        """Hand over the underlying stream; the reader can no longer be used."""
        stream = self.stream
        self._stream = None
        return stream

    def _next(self, with_entry: bool) -> StreamEntryReader | None:
        entry = read_local_file_header(self.stream)
        if entry is None:
            return None
        stream = self.into_inner()
        size = None if entry.data_descriptor else entry.compressed_size
        reader = ZipEntryReader(stream, entry.compression, size, entry if with_entry else None)
        return StreamEntryReader(reader, entry.data_descriptor)

    def next_without_entry(self) -> StreamEntryReader | None:
        """Open the next entry, or return None once the central directory is reached."""
        return self._next(with_entry=False)

    def next_with_entry(self) -> StreamEntryReader | None:
        """Like ``next_without_entry``, with the entry information attached."""
        return self._next(with_entry=True)

    def __iter__(self) -> Iterator[StreamEntryReader]:
        """Yield each entry in turn; whatever is left unread of one is skipped."""
        reader: ZipFileReader = self
        while True:
            entry_reader = reader.next_with_entry()
            if entry_reader is None:
                return
            yield entry_reader
            reader = entry_reader._ready or entry_reader.skip()


class StreamEntryReader:
    """The data of one entry read from a non-seekable stream."""

    def __init__(self, reader: ZipEntryReader, data_descriptor: bool) -> None:
        self._reader = reader
        self._data_descriptor = data_descriptor
        self._ready: ZipFileReader | None = None

    def _check_open(self) -> None:
        if self._ready is not None:
            raise ValueError("this entry has already been finished")

    @property
    def reader(self) -> ZipEntryReader:
        """The underlying entry reader."""
        self._check_open()
        return self._reader

    @property
    def entry(self) -> ZipEntry | None:
        """The entry information, if the entry was opened with it."""
        return self._reader.entry

    def read(self, size: int | None = -1) -> bytes:
        """Read up to ``size`` decompressed bytes, or all that remain."""
        self._check_open()
        return self._reader.read(size)

    def _finish(self) -> ZipFileReader:
        stream = self._reader.into_inner()
        if self._data_descriptor:
            consume_data_descriptor(stream)
        self._ready = ZipFileReader(stream)
        return self._ready

    def done(self) -> ZipFileReader:
        """Return a reader for the next entry, raising if data is left unread."""
        self._check_open()
        if self._reader.read(1):
            raise EOFNotReachedError()
        return self._finish()

    def skip(self) -> ZipFileReader:
        """Discard whatever data is left and return a reader for the next entry."""
        self._check_open()
        while self._reader.read(_SKIP_CHUNK_SIZE):
            pass
        return self._finish()