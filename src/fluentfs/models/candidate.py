"""
Candidate file view used during filter evaluation.
"""

from datetime import datetime
from functools import cached_property

from ..filesystem.base import FileSystem


class Candidate:
    """
    A file path under consideration during a traversal.

    Metadata is read from the filesystem on first access and then cached, so
    a candidate only pays for the lookups its filters actually perform.
    """

    def __init__(self, path: str, file_system: FileSystem):
        self.path = path
        self._file_system = file_system

    @cached_property
    def name(self) -> str:
        return self._file_system.get_file_name(self.path)

    @cached_property
    def extension(self) -> str:
        return self._file_system.get_extension(self.path)

    @cached_property
    def last_write_time(self) -> datetime:
        return self._file_system.get_last_write_time(self.path)

    @cached_property
    def last_access_time(self) -> datetime:
        return self._file_system.get_last_access_time(self.path)

    @cached_property
    def creation_time(self) -> datetime:
        return self._file_system.get_creation_time(self.path)

    @cached_property
    def length(self) -> int:
        return self._file_system.get_file_length(self.path)

    def __repr__(self) -> str:
        return f"Candidate({self.path!r})"
