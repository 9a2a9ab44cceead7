"""
Filesystem accessors for fluentfs.

A query borrows one accessor for its lifetime and only ever reads through it.
"""

from .base import FileSystem
from .memory import FileEntry, InMemoryFileSystem
from .os_filesystem import OSFileSystem

__all__ = ['FileSystem', 'OSFileSystem', 'InMemoryFileSystem', 'FileEntry']
