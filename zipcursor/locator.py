"""Locating the end of central directory record.

The record ends with a comment of up to 65535 bytes, so its start must be
searched for. The data is read backwards in fixed-size buffers, each searched
from its end; consecutive buffers overlap by the signature length so that a
signature spanning a boundary is still found.
"""

from __future__ import annotations

import io
import struct
from typing import BinaryIO

from .consts import (
    EOCDR_LENGTH,
    EOCDR_LOWER_BOUND,
    EOCDR_SEARCH_BUFFER_SIZE,
    EOCDR_SIGNATURE,
    SIGNATURE_LENGTH,
)
from .errors import UnableToLocateEOCDRError

_EOCDR_SIGNATURE_BYTES = struct.pack("<I", EOCDR_SIGNATURE)


def reverse_search_buffer(buffer: bytes, signature: bytes) -> int | None:
    """Return the index of the last byte of the last match of ``signature``, or None."""
    if not buffer:
        return None
    start = bytes(buffer).rfind(bytes(signature))
    if start < 0:
        return None
    return start + len(signature) - 1


def locate_eocdr(stream: BinaryIO) -> int:
    """Return the offset just past the end of central directory record signature."""
    length = stream.seek(0, io.SEEK_END)
    position = max(length - (EOCDR_LENGTH + EOCDR_SEARCH_BUFFER_SIZE), 0)
    lower_limit = max(length - EOCDR_LOWER_BOUND, 0)

    while True:
        stream.seek(position)
        buffer = stream.read(EOCDR_SEARCH_BUFFER_SIZE)
        match_index = reverse_search_buffer(buffer, _EOCDR_SIGNATURE_BYTES)
        if match_index is not None:
            return position + match_index + 1
        if position == 0 or position <= lower_limit:
            raise UnableToLocateEOCDRError()
        position = max(position - (EOCDR_SEARCH_BUFFER_SIZE - SIGNATURE_LENGTH), 0)