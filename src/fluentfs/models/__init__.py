"""
Data models for fluentfs.

This module contains the structures a query is evaluated with: the lazy
candidate view, tagged filters, the immutable query plan, and the declarative
query definition loaded from configuration.
"""

from .candidate import Candidate
from .filters import FileFilter, FilterKind, QueryPlan
from .query_definition import QueryDefinition

__all__ = ['Candidate', 'FileFilter', 'FilterKind', 'QueryPlan', 'QueryDefinition']
