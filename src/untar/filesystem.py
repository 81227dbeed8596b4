import os
from typing import BinaryIO, Optional

from untar import logger

PARENT_DIR_MODE = 0o755


def _parent(path: str) -> str:
    return path.rpartition('/')[0]


def _mkdir(path: str, mode: int) -> bool:
    try:
        os.mkdir(path, mode)
        return True
    except FileExistsError:
        return os.path.isdir(path)
    except OSError as e:
        logger.trace(f"mkdir {path} failed: {e}")
        return False


def create_directory(path: str, mode: int) -> bool:
    """Create a directory, creating missing parents with PARENT_DIR_MODE first.

    Failure is reported and returned, never raised.
    """
    path = path.rstrip('/')
    if not path:
        return True

    created = _mkdir(path, mode)
    if not created:
        parent = _parent(path)
        if parent:
            create_directory(parent, PARENT_DIR_MODE)
            created = _mkdir(path, mode)

    if not created:
        logger.error(f"Could not create directory {path}")
    return created


def create_file(path: str, mode: int) -> Optional[BinaryIO]:
    """Open a file for writing, creating its parent directory on first failure.

    Returns None if the file cannot be created. The mode is accepted for
    symmetry with create_directory; file permissions are left to the umask.
    """
    try:
        return open(path, 'wb')
    except OSError as e:
        logger.trace(f"open {path} failed: {e}")

    parent = _parent(path)
    if parent:
        create_directory(parent, PARENT_DIR_MODE)
        try:
            return open(path, 'wb')
        except OSError as e:
            logger.error(f"Could not create file {path}: {e}")
            return None

    logger.error(f"Could not create file {path}")
    return None
