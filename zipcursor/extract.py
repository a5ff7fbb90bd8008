"""Safely extracting every entry of a ZIP archive into a directory.

Entry names are sanitised component by component so that no entry can be
written outside the output directory.
"""

from __future__ import annotations

import argparse
import os
import re
import shutil
from pathlib import Path
from typing import BinaryIO, Sequence, Union

from .seek import ZipFileReader

_ILLEGAL = re.compile(r'[/?<>\\:*|"]')
_CONTROL = re.compile(r"[\x00-\x1f\x80-\x9f]")
_RESERVED = re.compile(r"^\.+$")
_WINDOWS_RESERVED = re.compile(r"^(con|prn|aux|nul|com[0-9]|lpt[0-9])(\..*)?$", re.IGNORECASE)
_WINDOWS_TRAILING = re.compile(r"[. ]+$")
_MAX_COMPONENT_BYTES = 255


def _truncate(component: str) -> str:
    while len(component.encode("utf-8")) > _MAX_COMPONENT_BYTES:
        component = component[:-1]
    return component


def _sanitize_component(component: str) -> str:
    component = _ILLEGAL.sub("", component)
    component = _CONTROL.sub("", component)
    component = _RESERVED.sub("", component)
    component = _truncate(component)
    component = _WINDOWS_RESERVED.sub("", component)
    component = _WINDOWS_TRAILING.sub("", component)
    return component


def sanitize_file_path(path: str) -> Path:
    """Return a relative path without reserved names, empty parts, '.' or '..'."""
    components = (_sanitize_component(part) for part in path.replace("\\", "/").split("/"))
    return Path(*[part for part in components if part])


ArchiveSource = Union[str, "os.PathLike[str]", BinaryIO]


def _extract_from(stream: BinaryIO, out_dir: Path) -> list[Path]:
    reader = ZipFileReader(stream)
    extracted = []
    for index, stored in enumerate(reader.file.entries):
        entry = stored.entry
        path = out_dir / sanitize_file_path(entry.filename.as_str())
        # Names ending in '/' are directories.
        entry_is_dir = entry.is_dir()
        entry_reader = reader.reader_without_entry(index)

        if entry_is_dir:
            # It may already exist if entries come out of order.
            path.mkdir(parents=True, exist_ok=True)
        else:
            # Parents may be missing if entries come out of order or have no directory entries.
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "xb") as target:
                shutil.copyfileobj(entry_reader, target)
        extracted.append(path)
    return extracted


def unzip_file(archive: ArchiveSource, out_dir: str | os.PathLike[str]) -> list[Path]:
    """Extract everything from ``archive`` into ``out_dir``.

    ``archive`` is a path or a seekable binary stream. Existing files are never
    overwritten. Returns the paths created, in archive order.
    """
    out_path = Path(out_dir)
    if isinstance(archive, (str, os.PathLike)):
        with open(archive, "rb") as stream:
            return _extract_from(stream, out_path)
    return _extract_from(archive, out_path)


def main(argv: Sequence[str] | None = None) -> int:
    """Extract an archive into a directory, the current one by default."""
    parser = argparse.ArgumentParser(description="Safely extract a ZIP archive.")
    parser.add_argument("archive", nargs="?", default="example.zip", help="ZIP file to extract")
    parser.add_argument("out_dir", nargs="?", default=None, help="directory to extract into")
    args = parser.parse_args(argv)
    out_dir = Path(args.out_dir) if args.out_dir is not None else Path.cwd()
    unzip_file(args.archive, out_dir)
    return 0