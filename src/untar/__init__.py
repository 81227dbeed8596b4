"""
untar - a minimal ustar extractor.

Reads an uncompressed ustar stream block by block and recreates its
directories and regular files. Links, devices and FIFOs are reported and
skipped.
"""

__version__ = "1.0.0"

from untar.extractor import untar, untar_path
from untar.utarfile import (
    TarFile, TarInfo, StreamDesyncError, ShortReadError, ChecksumError,
    parse_octal, verify_checksum,
)

__all__ = [
    'untar',
    'untar_path',
    'TarFile',
    'TarInfo',
    'StreamDesyncError',
    'ShortReadError',
    'ChecksumError',
    'parse_octal',
    'verify_checksum',
]
