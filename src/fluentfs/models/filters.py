"""
Filter and query plan models for fluentfs.

This module defines the tagged filter predicates a query accumulates and the
immutable plan a traversal evaluates candidates against.
"""

import re
from datetime import datetime
from enum import Enum
from typing import Callable, Iterable, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

from .candidate import Candidate


class FilterKind(Enum):
    """What part of a candidate a filter inspects."""
    EXTENSION = "extension"
    NAME_PATTERN = "name_pattern"
    LAST_WRITE_TIME = "last_write_time"
    LAST_ACCESS_TIME = "last_access_time"
    CREATION_TIME = "creation_time"
    SIZE = "size"


def normalize_extensions(extensions: Union[str, Iterable[str]]) -> List[str]:
    """
    Normalize extensions for comparison.

    Args:
        extensions: A single extension or an iterable of them, with or
            without a leading dot

    Returns:
        Lower-cased extensions, each starting with '.'
    """
    if isinstance(extensions, str):
        extensions = [extensions]

    normalized = []
    for ext in extensions:
        if not ext.startswith('.'):
            ext = '.' + ext
        normalized.append(ext.lower())
    return normalized


class FileFilter(BaseModel):
    """
    A predicate over a candidate file, tagged with the kind of data it reads.

    Attributes:
        kind: The candidate attribute the predicate inspects
        predicate: Callable returning True when the candidate matches
        description: Human readable summary used in logs and reprs
    """

    model_config = ConfigDict(frozen=True)

    kind: FilterKind = Field(..., description="Candidate attribute inspected")
    predicate: Callable[[Candidate], bool] = Field(..., description="Match predicate")
    description: str = Field("", description="Human readable summary")

    def __call__(self, candidate: Candidate) -> bool:
        return bool(self.predicate(candidate))

    @classmethod
    def extension(cls, extensions: Union[str, Iterable[str]]) -> 'FileFilter':
        """Match candidates whose extension is one of the given ones, ignoring case."""
        wanted = normalize_extensions(extensions)
        return cls(
            kind=FilterKind.EXTENSION,
            predicate=lambda c: c.extension.lower() in wanted,
            description=f"extension in {wanted}",
        )

    @classmethod
    def name_pattern(cls, pattern: Union[str, re.Pattern]) -> 'FileFilter':
        """Match candidates whose base file name contains a regex match."""
        compiled = re.compile(pattern) if isinstance(pattern, str) else pattern
        return cls(
            kind=FilterKind.NAME_PATTERN,
            predicate=lambda c: compiled.search(c.name) is not None,
            description=f"name matches {compiled.pattern!r}",
        )

    @classmethod
    def last_write_time(cls, test: Callable[[datetime], bool]) -> 'FileFilter':
        return cls(
            kind=FilterKind.LAST_WRITE_TIME,
            predicate=lambda c: test(c.last_write_time),
            description="last write time predicate",
        )

    @classmethod
    def last_access_time(cls, test: Callable[[datetime], bool]) -> 'FileFilter':
        return cls(
            kind=FilterKind.LAST_ACCESS_TIME,
            predicate=lambda c: test(c.last_access_time),
            description="last access time predicate",
        )

    @classmethod
    def creation_time(cls, test: Callable[[datetime], bool]) -> 'FileFilter':
        return cls(
            kind=FilterKind.CREATION_TIME,
            predicate=lambda c: test(c.creation_time),
            description="creation time predicate",
        )

    @classmethod
    def size(cls, test: Callable[[int], bool]) -> 'FileFilter':
        return cls(
            kind=FilterKind.SIZE,
            predicate=lambda c: test(c.length),
            description="size predicate",
        )


class QueryPlan(BaseModel):
    """
    Immutable snapshot of a query, taken when a traversal starts.

    Attributes:
        roots: Search roots in the order they were added
        filters: Filters in the order they were added
        negate: Whether each filter result is inverted before aggregation
        max_depth: Subdirectory levels to descend below each root, None for unbounded
    """

    model_config = ConfigDict(frozen=True)

    roots: Tuple[str, ...] = Field(default_factory=tuple, description="Search roots")
    filters: Tuple[FileFilter, ...] = Field(default_factory=tuple, description="Filters")
    negate: bool = Field(False, description="Invert each filter before aggregation")
    max_depth: Optional[int] = Field(None, ge=0, description="Maximum descent depth")

    def accepts(self, candidate: Candidate) -> bool:
        """
        Check if a candidate passes the filters.

        Without negation every filter must match. With negation every filter
        must fail to match, i.e. each result is inverted before the AND. An
        empty filter set accepts everything either way.
        """
        if self.negate:
            return all(not f(candidate) for f in self.filters)
        return all(f(candidate) for f in self.filters)

    def can_descend(self, depth: int) -> bool:
        """Check if the walk may enter subdirectories of a directory at depth."""
        return self.max_depth is None or depth < self.max_depth

    def distinct_roots(self) -> List[str]:
        """Roots without repeats, first occurrence order."""
        return list(dict.fromkeys(self.roots))

    def __str__(self) -> str:
        parts = [f"Roots: {len(self.roots)}"]
        parts.append(f"Filters: {len(self.filters)}")
        if self.negate:
            parts.append("Negated")
        parts.append(f"Max depth: {'unbounded' if self.max_depth is None else self.max_depth}")
        return " | ".join(parts)
