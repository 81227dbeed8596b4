"""
Stream-level extraction of ustar archives.

Reads one archive stream header by header, creates directories and files
for the entries it understands, logs and skips links, devices and FIFOs,
and always consumes each entry's payload blocks so the next header is
found where it should be.
"""
import os
import sys
from typing import BinaryIO, Optional

from untar import logger
from untar import utarfile
from untar.filesystem import create_directory, create_file

IGNORED_TYPES = {
    utarfile.LNKTYPE: "hardlink",
    utarfile.SYMTYPE: "symlink",
    utarfile.CHRTYPE: "character device",
    utarfile.BLKTYPE: "block device",
    utarfile.FIFOTYPE: "FIFO",
}


class ExtractionStats:
    """Per-archive counters for the end-of-archive summary."""

    def __init__(self):
        self.processed = 0
        self.errors = 0

    def add(self, processed, had_error):
        if processed:
            self.processed += 1
        if had_error:
            self.errors += 1


def is_unsafe_path(name: str) -> bool:
    return name.startswith('/') or '..' in name.split('/')


def _target_path(name: str, extract_to_dir) -> str:
    if extract_to_dir:
        return f"{os.fspath(extract_to_dir).rstrip('/')}/{name}"
    return name


def _close_output(out: BinaryIO, target_path: str, report: bool = True) -> bool:
    try:
        out.close()
        return True
    except OSError as e:
        if report:
            logger.error(f"Failed write on {target_path}: {e}")
        else:
            logger.trace(f"close {target_path} after failed write: {e}")
        return False


def _stream_payload(section, out: Optional[BinaryIO], target_path: str) -> bool:
    """Copy the payload blocks of one entry into out; returns True if a write failed.

    Every block is consumed even when out is None or a write fails, and out is
    closed on every way out of the loop, including a ShortReadError.
    """
    write_failed = False
    try:
        for chunk in section:
            if out is None:
                continue
            try:
                written = out.write(chunk)
            except OSError as e:
                logger.error(f"Failed write on {target_path}: {e}")
                written = -1
            if written != len(chunk):
                if written >= 0:
                    logger.error(f"Failed write on {target_path}: wrote {written} of {len(chunk)} bytes")
                write_failed = True
                # Already reported; a failing flush on close is the same failure
                _close_output(out, target_path, report=False)
                out = None
    finally:
        if out is not None and not _close_output(out, target_path):
            write_failed = True
    return write_failed


def _process_tar_entry(tar, entry, extract_to_dir=None, safe_paths=False):
    """Process a single tar entry. Returns (processed, had_error)."""
    file_name = entry.name
    section = tar.extractfile(entry)

    if safe_paths and is_unsafe_path(file_name):
        logger.warning(f"Skipping unsafe path {file_name}")
        section.skip()
        return False, False

    target_path = _target_path(file_name, extract_to_dir)

    if entry.type == utarfile.DIRTYPE:
        logger.info(f" Extracting dir {file_name}")
        created = create_directory(target_path, entry.mode)
        return created, not created

    if entry.type in IGNORED_TYPES:
        logger.info(f" Ignoring {IGNORED_TYPES[entry.type]} {file_name}")
        # Nominally empty, but the declared size still has to be honoured
        section.skip()
        return False, False

    logger.info(f" Extracting file {file_name}")
    logger.debug(f"{file_name}: {entry.size} bytes in {entry.blocks()} blocks, mode {entry.mode:o}")
    out = create_file(target_path, entry.mode)
    write_failed = _stream_payload(section, out, target_path)
    if out is None:
        return False, True
    return not write_failed, write_failed


def untar(fileobj, path, extract_to_dir=None, safe_paths=False):
    """Extract one archive stream.

    fileobj is an open binary stream positioned at the start of the archive
    and path is only used in diagnostics. Returns True when the end-of-archive
    block was reached and False when the stream was abandoned after a short
    read or checksum failure. Failures of individual entries are reported but
    do not stop the extraction.
    """
    logger.info(f"Extracting from {path}")
    stats = ExtractionStats()
    tar = utarfile.TarFile(fileobj=fileobj)

    try:
        for entry in tar:
            stats.add(*_process_tar_entry(tar, entry, extract_to_dir, safe_paths))
    except utarfile.ShortReadError as e:
        reason = f" ({e.cause})" if e.cause else ""
        logger.error(f"Short read on {path}: expected {e.expected}, got {e.got}{reason}")
        return False
    except utarfile.ChecksumError as e:
        logger.error(f"Checksum failure on {path}: {e}")
        return False

    logger.info(f"End of {path}")
    logger.debug(f"Entries extracted: {stats.processed}, Errors: {stats.errors}")
    return True


def untar_path(archive_path, extract_to_dir=None, safe_paths=False):
    """Open archive_path, extract it, and close it again. '-' means stdin."""
    if archive_path == '-':
        return untar(sys.stdin.buffer, archive_path, extract_to_dir, safe_paths)
    try:
        fileobj = open(archive_path, 'rb')
    except OSError as e:
        logger.error(f"Unable to open {archive_path}: {e}")
        return False
    with fileobj:
        return untar(fileobj, archive_path, extract_to_dir, safe_paths)

