"""
Filesystem accessor backed by the operating system.

This is the accessor a FileQuery uses when the caller does not supply one.
"""

import os
from datetime import datetime
from typing import List, Optional, Tuple
import logging

from .base import FileSystem


logger = logging.getLogger(__name__)


class OSFileSystem(FileSystem):
    """
    Read-only accessor over the real filesystem.

    Directory entries are returned sorted by name so that traversal order is
    stable across platforms. Symlinks are followed when classifying entries.
    Errors raised by the OS (permission denied, I/O errors, vanished paths)
    are not caught here.

    A traversal lists a directory's files and then its subdirectories, so
    the scan made by enumerate_files is kept and reused by the next
    enumerate_directories call for the same path. Both lists then come from
    one consistent read of the directory.
    """

    def __init__(self):
        self._last_scan: Optional[Tuple[str, List[Tuple[str, bool]]]] = None

    def directory_exists(self, path: str) -> bool:
        return os.path.isdir(path)

    def enumerate_files(self, path: str) -> List[str]:
        entries = self._scan(path)
        self._last_scan = (path, entries)
        return [os.path.join(path, name) for name, is_dir in entries if not is_dir]

    def enumerate_directories(self, path: str) -> List[str]:
        last_scan, self._last_scan = self._last_scan, None
        if last_scan is not None and last_scan[0] == path:
            entries = last_scan[1]
        else:
            entries = self._scan(path)
        return [os.path.join(path, name) for name, is_dir in entries if is_dir]

    def _scan(self, path: str) -> List[Tuple[str, bool]]:
        """
        Read a directory's entries.

        Args:
            path: Directory to scan

        Returns:
            Sorted list of (name, is_dir) tuples, skipping entries that are
            neither regular files nor directories
        """
        entries = []
        with os.scandir(path) as it:
            for entry in it:
                if entry.is_dir():
                    entries.append((entry.name, True))
                elif entry.is_file():
                    entries.append((entry.name, False))
                else:
                    logger.debug(f"Skipping special entry: {entry.path}")
        entries.sort()
        return entries

    def get_last_write_time(self, path: str) -> datetime:
        return datetime.fromtimestamp(os.stat(path).st_mtime)

    def get_last_access_time(self, path: str) -> datetime:
        return datetime.fromtimestamp(os.stat(path).st_atime)

    def get_creation_time(self, path: str) -> datetime:
        stat_result = os.stat(path)
        if hasattr(stat_result, 'st_birthtime'):
            # macOS, BSD and recent Windows
            return datetime.fromtimestamp(stat_result.st_birthtime)
        # ctime is metadata change time on Linux, the closest available value
        return datetime.fromtimestamp(stat_result.st_ctime)

    def get_file_length(self, path: str) -> int:
        return os.stat(path).st_size
