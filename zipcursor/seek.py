"""A ZIP reader over a seekable source."""

from __future__ import annotations

from typing import BinaryIO

from .entry import StoredZipEntry, ZipFile
from .errors import EntryIndexOutOfBoundsError
from .parsing import read_zip_file
from .streams import ZipEntryReader


class ZipFileReader:
    """Reads entries from a seekable binary stream.

    If ``file`` is not given, the archive information is read from the stream.
    A ``file`` that was not derived from this stream may lead to wrong results.
    """

    def __init__(self, stream: BinaryIO, file: ZipFile | None = None) -> None:
        self._stream: BinaryIO | None = stream
        self.file = read_zip_file(stream) if file is None else file

    @property
    def stream(self) -> BinaryIO:
        """The underlying stream."""
        if self._stream is None:
            raise ValueError("this reader has handed its stream over and can no longer be used")
        return self._stream

    def into_inner(self) -> BinaryIO:
        """Hand over the underlying stream; the reader can no longer be used."""
        stream = self.stream
        self._stream = None
        return stream

    def _stored_entry(self, index: int) -> StoredZipEntry:
        entries = self.file.entries
        if not 0 <= index < len(entries):
            raise EntryIndexOutOfBoundsError()
        return entries[index]

    def _open(self, index: int, with_entry: bool) -> ZipEntryReader:
        stream = self.stream
        stored = self._stored_entry(index)
        stored.seek_to_data_offset(stream)
        return ZipEntryReader(
            stream,
            stored.entry.compression,
            stored.entry.compressed_size,
            stored.entry if with_entry else None,
        )

    def reader_without_entry(self, index: int) -> ZipEntryReader:
        """Open the entry at ``index`` for reading."""
        return self._open(index, with_entry=False)

    def reader_with_entry(self, index: int) -> ZipEntryReader:
        """Open the entry at ``index`` for reading, carrying its entry information."""
        return self._open(index, with_entry=True)

    def into_entry(self, index: int) -> ZipEntryReader:
        """Open the entry at ``index`` and hand the stream over to the entry reader."""
        reader = self._open(index, with_entry=False)
        self._stream = None
        return reader