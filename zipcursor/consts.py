"""Signatures, record lengths and limits defined by the ZIP format."""

SIGNATURE_LENGTH = 4

LFH_SIGNATURE = 0x04034B50
LFH_LENGTH = 26

CDH_SIGNATURE = 0x02014B50
CDH_LENGTH = 42

EOCDR_SIGNATURE = 0x06054B50
EOCDR_LENGTH = 18

ZIP64_EOCDR_SIGNATURE = 0x06064B50
ZIP64_EOCDR_LENGTH = 52
ZIP64_EOCDL_SIGNATURE = 0x07064B50
# Includes the signature, unlike the other lengths.
ZIP64_EOCDL_LENGTH = 20

NON_ZIP64_MAX_SIZE = 0xFFFFFFFF
NON_ZIP64_MAX_NUM_FILES = 0xFFFF

DATA_DESCRIPTOR_SIGNATURE = 0x08074B50
DATA_DESCRIPTOR_LENGTH = 12

EOCDR_SEARCH_BUFFER_SIZE = 2048
EOCDR_UPPER_BOUND = EOCDR_LENGTH
EOCDR_LOWER_BOUND = EOCDR_UPPER_BOUND + SIGNATURE_LENGTH + 0xFFFF

SPEC_VERSION_MADE_BY = 63