"""The end of central directory record merged with its Zip64 counterpart."""

from __future__ import annotations

from dataclasses import dataclass

from .headers import EndOfCentralDirectoryHeader, Zip64EndOfCentralDirectoryRecord

_U16_MAX = 0xFFFF
_U32_MAX = 0xFFFFFFFF


@dataclass
class CombinedCentralDirectoryRecord:
    """All fields of the EOCDR and, where present, the Zip64 EOCDR."""

    version_made_by: int | None
    version_needed_to_extract: int | None
    disk_number: int
    disk_number_start_of_cd: int
    num_entries_in_directory_on_disk: int
    num_entries_in_directory: int
    directory_size: int
    offset_of_start_of_directory: int
    file_comment_length: int

    @classmethod
    def from_eocdr(cls, eocdr: EndOfCentralDirectoryHeader) -> CombinedCentralDirectoryRecord:
        """Build the record for an archive with no Zip64 EOCDR."""
        return cls(
            version_made_by=None,
            version_needed_to_extract=None,
            disk_number=eocdr.disk_num,
            disk_number_start_of_cd=eocdr.start_cent_dir_disk,
            num_entries_in_directory_on_disk=eocdr.num_of_entries_disk,
            num_entries_in_directory=eocdr.num_of_entries,
            directory_size=eocdr.size_cent_dir,
            offset_of_start_of_directory=eocdr.cent_dir_offset,
            file_comment_length=eocdr.file_comm_length,
        )

    @classmethod
    def combine(
        cls, eocdr: EndOfCentralDirectoryHeader, zip64eocdr: Zip64EndOfCentralDirectoryRecord
    ) -> CombinedCentralDirectoryRecord:
        """Merge an EOCDR with a Zip64 EOCDR.

        Fields at their maximum value in the EOCDR take the Zip64 value instead.
        """
        combined = cls.from_eocdr(eocdr)
        if eocdr.disk_num == _U16_MAX:
            combined.disk_number = zip64eocdr.disk_number
        if eocdr.start_cent_dir_disk == _U16_MAX:
            combined.disk_number_start_of_cd = zip64eocdr.disk_number_start_of_cd
        if eocdr.num_of_entries_disk == _U16_MAX:
            combined.num_entries_in_directory_on_disk = zip64eocdr.num_entries_in_directory_on_disk
        if eocdr.num_of_entries == _U16_MAX:
            combined.num_entries_in_directory = zip64eocdr.num_entries_in_directory
        if eocdr.size_cent_dir == _U32_MAX:
            combined.directory_size = zip64eocdr.directory_size
        if eocdr.cent_dir_offset == _U32_MAX:
            combined.offset_of_start_of_directory = zip64eocdr.offset_of_start_of_directory
        combined.version_made_by = zip64eocdr.version_made_by
        combined.version_needed_to_extract = zip64eocdr.version_needed_to_extract
        return combined