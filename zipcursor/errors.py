"""Exceptions raised while reading ZIP archives."""

from __future__ import annotations


class ZipError(Exception):
    """Base class for every error raised while reading a ZIP archive."""

    default_message = "an error occurred while processing a ZIP archive"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message if message is not None else self.default_message)


class UnexpectedHeaderError(ZipError):
    """A record signature did not match the one expected at this position."""

    def __init__(self, actual: int, expected: int) -> None:
        self.actual = actual
        self.expected = expected
        super().__init__(
            f"encountered an unexpected header (actual: {actual:#x}, expected: {expected:#x})"
        )


class CompressionNotSupportedError(ZipError):
    """The entry uses a compression method this package cannot handle."""

    def __init__(self, value: int) -> None:
        self.value = value
        super().__init__(f"compression method {value} is not supported")


class AttributeCompatibilityNotSupportedError(ZipError):
    """The host attribute compatibility value is not supported."""

    def __init__(self, value: int) -> None:
        self.value = value
        super().__init__(f"attribute compatibility {value} is not supported")


class FeatureNotSupportedError(ZipError):
    """The archive relies on a ZIP feature that is not supported."""

    def __init__(self, feature: str) -> None:
        self.feature = feature
        super().__init__(f"feature not currently supported: {feature}")


class EntryIndexOutOfBoundsError(ZipError):
    """An entry index beyond the number of entries was requested."""

    default_message = "entry index was out of bounds"


class UnableToLocateEOCDRError(ZipError):
    """No end of central directory record could be found."""

    default_message = "unable to locate the end of central directory record"


class CRC32CheckError(ZipError):
    """The CRC32 of the data read did not match the stored value."""

    default_message = "computed CRC32 value did not match the expected value"


class EOFNotReachedError(ZipError):
    """An entry was closed before all of its data had been read."""

    default_message = "entry reader was not fully consumed before being closed"


class InvalidExtraFieldHeaderError(ZipError):
    """An extra field header claims more data than is available."""

    def __init__(self, field_size: int, remaining: int) -> None:
        self.field_size = field_size
        self.remaining = remaining
        super().__init__(
            f"extra field size was indicated to be {field_size} but only {remaining} bytes remain"
        )


class InfoZipUnicodeCommentFieldIncompleteError(ZipError):
    """An Info-ZIP unicode comment extra field is truncated."""

    default_message = "Info-ZIP unicode comment extra field was incomplete"


class InfoZipUnicodePathFieldIncompleteError(ZipError):
    """An Info-ZIP unicode path extra field is truncated."""

    default_message = "Info-ZIP unicode path extra field was incomplete"


class Zip64ExtendedFieldIncompleteError(ZipError):
    """A Zip64 extended information field carries no values."""

    default_message = "Zip64 extended information field was incomplete"


class TargetZip64NotSupportedError(ZipError):
    """A Zip64 value cannot be represented on this target."""

    default_message = "Zip64 values are not supported on this target"