"""
In-memory filesystem accessor.

Provides a FileSystem implementation populated from a mapping of file paths to
file data. It is used by the test-suite and is handy for dry runs of a query
against a described tree. Paths use POSIX separators.
"""

import posixpath
from datetime import datetime
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, Field, field_validator

from .base import FileSystem


class FileEntry(BaseModel):
    """
    Contents and timestamps of a single in-memory file.

    Attributes:
        contents: Raw file contents; the file length is derived from it
        last_write_time: Last modification timestamp
        last_access_time: Last access timestamp
        creation_time: Creation timestamp
    """

    contents: bytes = Field(b"", description="Raw file contents")
    last_write_time: datetime = Field(default_factory=datetime.now, description="Last modification timestamp")
    last_access_time: datetime = Field(default_factory=datetime.now, description="Last access timestamp")
    creation_time: datetime = Field(default_factory=datetime.now, description="Creation timestamp")

    @field_validator('contents', mode='before')
    @classmethod
    def validate_contents(cls, v) -> bytes:
        """Accept text contents and store them UTF-8 encoded."""
        if isinstance(v, str):
            return v.encode('utf-8')
        return v

    @property
    def length(self) -> int:
        return len(self.contents)

    def with_last_write_time(self, value: datetime) -> 'FileEntry':
        return self.model_copy(update={'last_write_time': value})

    def with_last_access_time(self, value: datetime) -> 'FileEntry':
        return self.model_copy(update={'last_access_time': value})

    def with_creation_time(self, value: datetime) -> 'FileEntry':
        return self.model_copy(update={'creation_time': value})


def _normalize(path: str) -> str:
    """Strip trailing separators, keeping the filesystem root intact."""
    if not path:
        return path
    stripped = path.rstrip('/')
    return stripped or '/'


class InMemoryFileSystem(FileSystem):
    """
    FileSystem backed by dictionaries.

    Files are registered with the exact path string they are given, and that
    string is what enumeration returns. Every ancestor directory of a file
    exists implicitly. Enumeration follows registration order.
    """

    def __init__(self, files: Optional[Dict[str, Union[FileEntry, str, bytes, None]]] = None):
        """
        Initialize the filesystem.

        Args:
            files: Mapping of file path to FileEntry, raw contents, or None
                for an empty file
        """
        self._files: Dict[str, FileEntry] = {}
        self._file_keys: Dict[str, str] = {}
        self._directories: Dict[str, None] = {}

        for path, data in (files or {}).items():
            self.add_file(path, data)

    def add_file(self, path: str, data: Union[FileEntry, str, bytes, None] = None) -> 'InMemoryFileSystem':
        """Register a file, creating its parent directories."""
        if data is None:
            data = FileEntry()
        elif not isinstance(data, FileEntry):
            data = FileEntry(contents=data)

        key = _normalize(path)
        if key in self._directories:
            raise IsADirectoryError(f"Path is a directory: {path}")

        self._files[path] = data
        self._file_keys[key] = path
        self.add_directory(posixpath.dirname(key))
        return self

    def add_directory(self, path: str) -> 'InMemoryFileSystem':
        """Register a directory and all of its ancestors."""
        key = _normalize(path)
        if key in self._file_keys:
            raise NotADirectoryError(f"Path is a file: {path}")

        chain = []
        # The empty path is never a directory, as with os.path.isdir
        while key and key not in self._directories:
            chain.append(key)
            parent = posixpath.dirname(key)
            if parent == key:
                break
            key = parent

        for directory in reversed(chain):
            self._directories[directory] = None
        return self

    @property
    def all_files(self) -> List[str]:
        """All registered file paths in registration order."""
        return list(self._files)

    def directory_exists(self, path: str) -> bool:
        return _normalize(path) in self._directories

    def enumerate_files(self, path: str) -> List[str]:
        directory = self._require_directory(path)
        return [
            original for key, original in self._file_keys.items()
            if posixpath.dirname(key) == directory
        ]

    def enumerate_directories(self, path: str) -> List[str]:
        directory = self._require_directory(path)
        return [
            key for key in self._directories
            if key != directory and posixpath.dirname(key) == directory
        ]

    def get_last_write_time(self, path: str) -> datetime:
        return self._entry(path).last_write_time

    def get_last_access_time(self, path: str) -> datetime:
        return self._entry(path).last_access_time

    def get_creation_time(self, path: str) -> datetime:
        return self._entry(path).creation_time

    def get_file_length(self, path: str) -> int:
        return self._entry(path).length

    def get_file_name(self, path: str) -> str:
        return posixpath.basename(path)

    def get_extension(self, path: str) -> str:
        return posixpath.splitext(posixpath.basename(path))[1]

    def _require_directory(self, path: str) -> str:
        directory = _normalize(path)
        if directory not in self._directories:
            raise FileNotFoundError(f"No such directory: {path}")
        return directory

    def _entry(self, path: str) -> FileEntry:
        original = self._file_keys.get(_normalize(path))
        if original is None:
            raise FileNotFoundError(f"No such file: {path}")
        return self._files[original]
