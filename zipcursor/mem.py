"""A ZIP reader over bytes held in memory.

Every entry reader gets its own cursor over the shared bytes, so any number of
entries can be read at the same time, interleaved or from different threads.
"""

from __future__ import annotations

import io

from .entry import StoredZipEntry, ZipFile
from .errors import EntryIndexOutOfBoundsError
from .parsing import read_zip_file
from .streams import ZipEntryReader


class ZipFileReader:
    """Reads entries from an archive held entirely in memory.

    If ``file`` is not given, the archive information is parsed from ``data``.
    A ``file`` that was not derived from these bytes may lead to wrong results.
    """

    def __init__(self, data: bytes, file: ZipFile | None = None) -> None:
        self._data = bytes(data)
        self._file = read_zip_file(io.BytesIO(self._data)) if file is None else file

    @property
    def file(self) -> ZipFile:
        """The archive's information."""
        return self._file

    @property
    def data(self) -> bytes:
        """The raw bytes the reader was built from."""
        return self._data

    def _stored_entry(self, index: int) -> StoredZipEntry:
        entries = self._file.entries
        if not 0 <= index < len(entries):
            raise EntryIndexOutOfBoundsError()
        return entries[index]

    def _open(self, index: int, with_entry: bool) -> ZipEntryReader:
        stored = self._stored_entry(index)
        cursor = io.BytesIO(self._data)
        stored.seek_to_data_offset(cursor)
        return ZipEntryReader(
            cursor,
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