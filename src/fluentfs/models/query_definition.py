"""
Declarative query definition for fluentfs.

This module defines the pydantic model behind query files: the roots,
extension and name filters, size and date bounds, negation and depth limit
of a search, validated and normalized so they can be turned into a FileQuery.
"""

import re
from datetime import date, datetime, time, timedelta
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field, field_validator, model_validator

from .filters import normalize_extensions

if TYPE_CHECKING:
    from ..filesystem.base import FileSystem
    from ..query import FileQuery


RELATIVE_DATE_PATTERNS = [
    (r'(\d+)\s*days?', lambda n: timedelta(days=n)),
    (r'(\d+)\s*weeks?', lambda n: timedelta(weeks=n)),
    (r'(\d+)\s*months?', lambda n: timedelta(days=n * 30)),
    (r'(\d+)\s*years?', lambda n: timedelta(days=n * 365)),
]

DATE_FORMATS = [
    '%Y-%m-%d',
    '%Y-%m-%d %H:%M:%S',
    '%Y/%m/%d',
    '%Y-%m-%dT%H:%M:%S',
    '%Y-%m-%dT%H:%M:%S%z',
]


def _to_local_naive(value: datetime) -> datetime:
    """Convert an aware datetime to naive local time, as filesystem timestamps are."""
    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


def parse_date(value: Union[str, date, datetime, int, float], now: Optional[datetime] = None) -> datetime:
    """
    Parse a date bound into a datetime.

    Args:
        value: A datetime, a Unix timestamp, a relative string such as
            "7 days" (meaning that long before now) or an absolute date string
        now: Reference time for relative strings, defaults to the current time

    Returns:
        Parsed datetime

    Raises:
        ValueError: If the value cannot be interpreted as a date
    """
    if isinstance(value, datetime):
        return _to_local_naive(value)

    # YAML loads bare ISO dates as date objects
    if isinstance(value, date):
        return datetime.combine(value, time())

    if isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            return datetime.fromtimestamp(value)
        except (ValueError, OSError, OverflowError) as e:
            raise ValueError(f"Invalid timestamp: {value}") from e

    if isinstance(value, str):
        text = value.lower().strip()

        for pattern, to_delta in RELATIVE_DATE_PATTERNS:
            match = re.fullmatch(pattern, text)
            if match:
                return (now or datetime.now()) - to_delta(int(match.group(1)))

        for fmt in DATE_FORMATS:
            try:
                return _to_local_naive(datetime.strptime(value.strip(), fmt))
            except ValueError:
                continue

    raise ValueError(f"Unrecognized date value: {value!r}")


class SizeBounds(BaseModel):
    """Inclusive file size bounds in bytes."""

    min: Optional[int] = Field(None, ge=0, description="Minimum size in bytes")
    max: Optional[int] = Field(None, ge=0, description="Maximum size in bytes")

    @model_validator(mode='after')
    def validate_range(self):
        if self.min is not None and self.max is not None and self.max < self.min:
            raise ValueError("Size max must be >= size min")
        return self

    def contains(self, size: int) -> bool:
        if self.min is not None and size < self.min:
            return False
        if self.max is not None and size > self.max:
            return False
        return True


class DateBounds(BaseModel):
    """Inclusive timestamp bounds."""

    after: Optional[datetime] = Field(None, description="Earliest accepted time")
    before: Optional[datetime] = Field(None, description="Latest accepted time")

    @field_validator('after', 'before', mode='before')
    @classmethod
    def validate_date(cls, v):
        if v is None:
            return v
        return parse_date(v)

    @model_validator(mode='after')
    def validate_range(self):
        if self.after is not None and self.before is not None and self.before < self.after:
            raise ValueError("Date 'before' must not be earlier than 'after'")
        return self

    def contains(self, value: datetime) -> bool:
        if self.after is not None and value < self.after:
            return False
        if self.before is not None and value > self.before:
            return False
        return True


class QueryDefinition(BaseModel):
    """
    A file query described as data.

    Attributes:
        roots: Directories to search, in order
        extensions: Accepted extensions, normalized to lower case with a leading dot
        patterns: Regular expressions the file name must match, one filter each
        negate: Whether every filter is inverted
        max_depth: Subdirectory levels to descend, None for unbounded
        size: Size bounds in bytes
        modified: Last write time bounds
        accessed: Last access time bounds
        created: Creation time bounds
    """

    roots: List[str] = Field(..., min_length=1, description="Directories to search")
    extensions: List[str] = Field(default_factory=list, description="Accepted extensions")
    patterns: List[str] = Field(default_factory=list, description="File name regular expressions")
    negate: bool = Field(False, description="Invert every filter")
    max_depth: Optional[int] = Field(None, ge=0, description="Maximum descent depth")
    size: Optional[SizeBounds] = Field(None, description="Size bounds")
    modified: Optional[DateBounds] = Field(None, description="Last write time bounds")
    accessed: Optional[DateBounds] = Field(None, description="Last access time bounds")
    created: Optional[DateBounds] = Field(None, description="Creation time bounds")

    @field_validator('roots')
    @classmethod
    def validate_roots(cls, v: List[str]) -> List[str]:
        """Drop blank roots and expand user directories."""
        normalized_roots = []
        for root in v:
            if not root or not root.strip():
                continue
            normalized_roots.append(str(Path(root.strip()).expanduser()))

        if not normalized_roots:
            raise ValueError("No valid root directories provided")

        return normalized_roots

    @field_validator('extensions', mode='before')
    @classmethod
    def validate_extensions(cls, v) -> List[str]:
        if v is None:
            return []
        if isinstance(v, str):
            v = [v]
        return normalize_extensions(str(ext).strip() for ext in v if str(ext).strip())

    @field_validator('patterns', mode='before')
    @classmethod
    def validate_patterns(cls, v) -> List[str]:
        if v is None:
            return []
        if isinstance(v, str):
            v = [v]
        for pattern in v:
            try:
                re.compile(pattern)
            except re.error as e:
                raise ValueError(f"Invalid regex pattern '{pattern}': {e}") from e
        return list(v)

    @field_validator('size', mode='before')
    @classmethod
    def validate_size(cls, v):
        """A bare number is treated as a maximum size."""
        if isinstance(v, int) and not isinstance(v, bool):
            return {'max': v}
        return v

    @field_validator('modified', 'accessed', 'created', mode='before')
    @classmethod
    def validate_date_bounds(cls, v):
        """A bare value is treated as an 'after' bound."""
        if v is None or isinstance(v, (dict, DateBounds)):
            return v
        return {'after': v}

    def has_filters(self) -> bool:
        """Check if this definition adds any filter to the query."""
        return bool(
            self.extensions or self.patterns or self.size
            or self.modified or self.accessed or self.created
        )

    def build(self, file_system: Optional['FileSystem'] = None) -> 'FileQuery':
        """
        Create a FileQuery configured from this definition.

        Args:
            file_system: Accessor for the query, defaults to the OS filesystem

        Returns:
            A FileQuery ready for find()
        """
        from ..query import FileQuery

        query = FileQuery(file_system).add_roots(self.roots)

        if self.extensions:
            query.with_extension(self.extensions)
        for pattern in self.patterns:
            query.matching(pattern)
        if self.size is not None:
            query.where_size(self.size.contains)
        if self.modified is not None:
            query.where_last_write_time(self.modified.contains)
        if self.accessed is not None:
            query.where_last_accessed_time(self.accessed.contains)
        if self.created is not None:
            query.where_creation_time(self.created.contains)
        if self.max_depth is not None:
            query.with_max_depth(self.max_depth)
        if self.negate:
            query.negate()

        return query

    def to_dict(self) -> Dict[str, Any]:
        """Convert the definition to a dictionary representation."""
        return self.model_dump(exclude_none=True)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'QueryDefinition':
        """Create a QueryDefinition from a dictionary."""
        return cls.model_validate(data)

    def __str__(self) -> str:
        parts = [f"Roots: {len(self.roots)} directories"]
        if self.has_filters():
            parts.append("Filters applied")
        if self.negate:
            parts.append("Negated")
        if self.max_depth is not None:
            parts.append(f"Max depth: {self.max_depth}")
        return " | ".join(parts)
