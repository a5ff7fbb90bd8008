# zipcursor

`zipcursor` reads ZIP archives in three ways:

- **`zipcursor.seek.ZipFileReader`** works over any seekable binary file object. It reads the
  central directory once, then opens entries by index.
- **`zipcursor.mem.ZipFileReader`** works over a `bytes` object held in memory. Every entry reader
  gets its own cursor over the shared bytes, so several entries can be read side by side.
- **`zipcursor.stream.ZipFileReader`** works over a stream that cannot seek, such as a pipe or a
  socket. It walks the local file headers in order.

All three understand ZIP64 archives and Info-ZIP Unicode path and comment fields, and entry readers
can check each entry's CRC32. The supported compression methods are Stored, Deflate, bzip2, LZMA,
XZ and Zstandard.

## Installation

```
pip install zipcursor
```

## Reading from a file

```python
from zipcursor.seek import ZipFileReader

with open("archive.zip", "rb") as fh:
    reader = ZipFileReader(fh)
    for index, stored in enumerate(reader.file.entries):
        print(stored.entry.filename.as_str())
        entry_reader = reader.reader_with_entry(index)
        data = entry_reader.read_to_end_checked()  # raises CRC32CheckError on mismatch
```

`reader_without_entry(index)` opens an entry without its information attached, and
`into_entry(index)` hands the underlying stream over to the entry reader.

## Reading from memory

```python
from zipcursor.mem import ZipFileReader

reader = ZipFileReader(payload_bytes)
first = reader.reader_without_entry(0).read(-1)
second = reader.reader_without_entry(1).read(-1)
```

## Reading a one-way stream

Each entry's data must be read or skipped in full before the next entry can be opened. Iterating
over the reader yields one `StreamEntryReader` per entry and skips whatever was left unread.

```python
import sys
from zipcursor.stream import ZipFileReader

zip_stream = ZipFileReader(sys.stdin.buffer)
for entry_reader in zip_stream:
    print(entry_reader.entry.filename.as_str())
    entry_reader.skip()
```

Without iterating, call `next_with_entry()` or `next_without_entry()` to open an entry; both
return `None` once the central directory is reached. Finish the entry with `done()`, which raises
`EOFNotReachedError` if data is left, or `skip()`; each returns a reader for the next entry.

Headers read from a stream may be incomplete. Comments are empty, attributes are zero, and entries
written with a data descriptor report a CRC and sizes of zero. Entries that combine a data
descriptor with Stored compression cannot be read from a stream.

## Errors

Problems with the archive's contents raise subclasses of `zipcursor.errors.ZipError`, for example
`UnableToLocateEOCDRError`, `UnexpectedHeaderError`, `CompressionNotSupportedError`,
`EntryIndexOutOfBoundsError`, `CRC32CheckError` and `FeatureNotSupportedError`. Data that ends
too early raises `EOFError`.

## Extracting an archive safely

`zipcursor.extract.unzip_file(archive, out_dir)` extracts every entry below `out_dir` and returns
the paths it created. `archive` may be a path or a seekable binary stream. Each name is first
cleaned with `sanitize_file_path`, which drops `..`, `.`, reserved names, unsafe characters and
empty parts. A file that already exists is never overwritten; `FileExistsError` is raised instead.

The same extraction is available from the command line. Both arguments are optional: the archive
defaults to `example.zip` and the output directory to the current one.

```
zipcursor-extract archive.zip output-directory
```

## What it does not do

`zipcursor` only reads. It cannot create or modify archives. Encrypted entries and split or
spanned archives are not supported.