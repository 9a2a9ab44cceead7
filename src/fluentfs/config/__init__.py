"""
Query file support for fluentfs.

This package loads YAML query files, validates them and turns them into
QueryDefinition objects.
"""

from .parser import (
    QueryFileParser,
    QueryParseResult,
    ConfigurationError,
    load_query_file,
    validate_query_file,
    create_query_template
)

__all__ = [
    'QueryFileParser',
    'QueryParseResult',
    'ConfigurationError',
    'load_query_file',
    'validate_query_file',
    'create_query_template'
]
