"""
fluentfs - Core Package

A fluent query builder for locating files in a directory tree by composing
extension, name, timestamp and size filters with a traversal depth limit.
"""

from .errors import DirectoryNotFoundError, FileQueryError
from .query import FileQuery

__version__ = "0.1.0"
__author__ = "fluentfs Team"

__all__ = ['FileQuery', 'FileQueryError', 'DirectoryNotFoundError']
