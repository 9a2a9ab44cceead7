"""
Filesystem accessor interface.

Defines the read-only operations the query engine needs from a filesystem.
"""

import os
from abc import ABC, abstractmethod
from datetime import datetime
from typing import List


class FileSystem(ABC):
    """
    Abstract read-only view of a filesystem.

    Implementations must never modify the tree they expose. Enumeration
    methods return immediate children only, as full paths.
    """

    @abstractmethod
    def directory_exists(self, path: str) -> bool:
        """Check if a directory exists at path."""
        pass

    @abstractmethod
    def enumerate_files(self, path: str) -> List[str]:
        """List the files directly inside a directory."""
        pass

    @abstractmethod
    def enumerate_directories(self, path: str) -> List[str]:
        """List the subdirectories directly inside a directory."""
        pass

    @abstractmethod
    def get_last_write_time(self, path: str) -> datetime:
        pass

    @abstractmethod
    def get_last_access_time(self, path: str) -> datetime:
        pass

    @abstractmethod
    def get_creation_time(self, path: str) -> datetime:
        pass

    @abstractmethod
    def get_file_length(self, path: str) -> int:
        """Get the size of a file in bytes."""
        pass

    def get_file_name(self, path: str) -> str:
        """Get the base name of a path, extension included."""
        return os.path.basename(path)

    def get_extension(self, path: str) -> str:
        """Get the extension of a path with its leading dot, or '' if none."""
        return os.path.splitext(self.get_file_name(path))[1]
