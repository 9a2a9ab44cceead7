"""
Fluent file query builder for fluentfs.

This module provides the FileQuery builder: callers accumulate search roots,
filters, negation and a depth limit, then call find() to walk every root
depth-first and collect the file paths that pass.
"""

import re
from datetime import datetime
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Union
import logging

from .errors import DirectoryNotFoundError
from .filesystem.base import FileSystem
from .filesystem.os_filesystem import OSFileSystem
from .models.candidate import Candidate
from .models.filters import FileFilter, QueryPlan


logger = logging.getLogger(__name__)


class FileQuery:
    """
    Fluent builder and executor for file searches.

    Every builder method returns the query itself so calls can be chained::

        files = (FileQuery()
                 .add_root("/var/log")
                 .with_extension("log")
                 .where_size(lambda size: size > 1024)
                 .with_max_depth(2)
                 .find())

    A query is meant for single-threaded use. It may be modified or run again
    after find(); each run walks the filesystem afresh.
    """

    def __init__(self, file_system: Optional[FileSystem] = None):
        """
        Initialize the query.

        Args:
            file_system: Accessor used for every filesystem read. Defaults to
                the operating system filesystem.
        """
        self.file_system = file_system if file_system is not None else OSFileSystem()
        self._roots: List[str] = []
        self._filters: List[FileFilter] = []
        self._negate = False
        self._max_depth: Optional[int] = None
        self._stats = self._empty_stats()

    def add_roots(self, paths: Union[str, Iterable[str]]) -> 'FileQuery':
        """
        Add directories to search in.

        Repeats within paths are dropped; paths already added by an earlier
        call are not. Roots that are already present are re-checked and
        reported if missing, while the new ones are only checked by find().

        Args:
            paths: Directory paths to search
        """
        if isinstance(paths, str):
            paths = [paths]

        for root in self._roots:
            if not self.file_system.directory_exists(root):
                logger.warning(f"Search root does not exist: {root}")

        self._roots.extend(dict.fromkeys(paths))
        return self

    def add_root(self, path: str) -> 'FileQuery':
        """Add a single directory to search in."""
        return self.add_roots([path])

    def with_extension(self, extensions: Union[str, Iterable[str]]) -> 'FileQuery':
        """
        Only match files whose extension is one of the given ones.

        Extensions may be given with or without the leading dot, so ".txt"
        and "txt" are equivalent. Comparison ignores case.
        """
        self._filters.append(FileFilter.extension(extensions))
        return self

    def matching(self, pattern: Union[str, re.Pattern]) -> 'FileQuery':
        """
        Only match files whose name matches a regular expression.

        The pattern is searched for in the full file name, extension
        included, without the directory part.
        """
        self._filters.append(FileFilter.name_pattern(pattern))
        return self

    def negate(self) -> 'FileQuery':
        """
        Invert every filter.

        Filters are evaluated when find() runs, so this applies to filters
        added before and after the call. Calling it again keeps negation on.
        """
        self._negate = True
        return self

    def where_last_write_time(self, test: Callable[[datetime], bool]) -> 'FileQuery':
        self._filters.append(FileFilter.last_write_time(test))
        return self

    def where_last_accessed_time(self, test: Callable[[datetime], bool]) -> 'FileQuery':
        self._filters.append(FileFilter.last_access_time(test))
        return self

    def where_creation_time(self, test: Callable[[datetime], bool]) -> 'FileQuery':
        self._filters.append(FileFilter.creation_time(test))
        return self

    def where_size(self, test: Callable[[int], bool]) -> 'FileQuery':
        """Only match files whose length in bytes satisfies test."""
        self._filters.append(FileFilter.size(test))
        return self

    def with_max_depth(self, depth_limit: Optional[int]) -> 'FileQuery':
        """
        Limit how many subdirectory levels are searched below each root.

        Args:
            depth_limit: 0 searches only the root directories themselves;
                None removes the limit
        """
        if depth_limit is not None:
            if isinstance(depth_limit, bool) or not isinstance(depth_limit, int):
                raise TypeError(f"Depth limit must be an integer, got {type(depth_limit).__name__}")
            if depth_limit < 0:
                raise ValueError(f"Depth limit cannot be negative: {depth_limit}")
        self._max_depth = depth_limit
        return self

    def build_plan(self) -> QueryPlan:
        """Snapshot the current state of the builder."""
        return QueryPlan(
            roots=tuple(self._roots),
            filters=tuple(self._filters),
            negate=self._negate,
            max_depth=self._max_depth,
        )

    def find(self) -> List[str]:
        """
        Find all files under the roots that pass the filters.

        Returns:
            Matching file paths, grouped by root in the order roots were
            added. Within a root, files of a directory come before the
            contents of its subdirectories.

        Raises:
            DirectoryNotFoundError: If any root does not exist. No results
                are returned in that case.
            OSError: If a directory or file cannot be read.
        """
        plan = self.build_plan()
        self.reset_stats()

        for root in plan.distinct_roots():
            if not self.file_system.directory_exists(root):
                logger.error(f"Search root does not exist: {root}")
                raise DirectoryNotFoundError(root)

        logger.debug(f"Running file query: {plan}")

        matches = []
        for root in plan.roots:
            logger.info(f"Walking directory tree: {root}")
            self._stats['roots_searched'] += 1
            matches.extend(self._walk_directory(root, plan))

        logger.info(f"Query matched {len(matches)} of {self._stats['files_scanned']} files")
        return matches

    def _walk_directory(self, root: str, plan: QueryPlan) -> Iterator[str]:
        """
        Walk a single root depth-first, pre-order.

        Uses an explicit stack rather than recursion so deep trees cannot
        exhaust the interpreter stack. Subdirectories are pushed in reverse
        so they are popped in enumeration order.

        Args:
            root: Directory to walk
            plan: Plan supplying filters and the depth limit

        Yields:
            Paths of matching files
        """
        stack = [(root, 0)]

        while stack:
            current_dir, depth = stack.pop()
            self._stats['directories_traversed'] += 1
            logger.debug(f"Scanning directory: {current_dir} (depth {depth})")

            for file_path in self.file_system.enumerate_files(current_dir):
                self._stats['files_scanned'] += 1
                if plan.accepts(Candidate(file_path, self.file_system)):
                    self._stats['files_matched'] += 1
                    yield file_path

            if plan.can_descend(depth):
                subdirs = self.file_system.enumerate_directories(current_dir)
                stack.extend((subdir, depth + 1) for subdir in reversed(subdirs))

    @staticmethod
    def _empty_stats() -> Dict[str, int]:
        return {
            'roots_searched': 0,
            'directories_traversed': 0,
            'files_scanned': 0,
            'files_matched': 0,
        }

    def get_stats(self) -> Dict[str, int]:
        """
        Get statistics about the last find() run.

        Returns:
            Dictionary containing traversal counters
        """
        return self._stats.copy()

    def reset_stats(self) -> None:
        """Reset the statistics counters."""
        self._stats = self._empty_stats()

    def __repr__(self) -> str:
        return f"FileQuery({self.build_plan()})"
