"""
Error types raised by fluentfs.
"""


class FileQueryError(Exception):
    """Base class for errors raised while building or running a file query."""
    pass


class DirectoryNotFoundError(FileQueryError, FileNotFoundError):
    """Raised when a search root does not exist at traversal time."""

    def __init__(self, path: str):
        super().__init__(f"Directory not found: {path}")
        self.path = path
