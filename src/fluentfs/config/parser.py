"""
YAML query file parser for fluentfs.

This module provides functionality to load, parse, and validate YAML query
files. A query file describes the roots, filters and depth limit of a search
and is turned into a QueryDefinition, which can build a ready FileQuery.
"""

import yaml
from pathlib import Path
from typing import Dict, Any, Optional, List, Union
import logging
from dataclasses import dataclass

from pydantic import ValidationError

from ..errors import FileQueryError
from ..models.query_definition import QueryDefinition


logger = logging.getLogger(__name__)


MAX_ROOTS_WITHOUT_WARNING = 10


@dataclass
class QueryParseResult:
    """
    Result of a query file parsing operation.

    Attributes:
        definition: The parsed and validated query definition
        warnings: List of non-fatal warnings
        source_path: Path to the query file used
    """
    definition: QueryDefinition
    warnings: List[str]
    source_path: Path


class ConfigurationError(FileQueryError):
    """Raised when a query file cannot be read, parsed or validated."""
    pass


class QueryFileParser:
    """
    YAML query file parser with validation and error handling.

    Loads YAML query files, validates their contents against QueryDefinition,
    and reports non-fatal issues as warnings (or errors in strict mode).
    """

    SECTIONS = [
        ("roots", "Directories to search, walked in this order"),
        ("extensions", "Accepted file extensions, with or without the leading dot"),
        ("patterns", "Regular expressions searched for in the file name"),
        ("size", "File size bounds in bytes"),
        ("modified", "Last write time bounds (dates, timestamps or e.g. '7 days')"),
        ("accessed", "Last access time bounds"),
        ("created", "Creation time bounds"),
        ("max_depth", "Subdirectory levels to descend below each root (0 = root only)"),
        ("negate", "Invert every filter: keep only files matching none of them"),
    ]

    def __init__(self, strict_mode: bool = False):
        """
        Initialize the query file parser.

        Args:
            strict_mode: If True, treat warnings as errors
        """
        self.strict_mode = strict_mode
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def load(self, query_path: Union[str, Path]) -> QueryParseResult:
        """
        Load and validate a query file.

        Args:
            query_path: Path to the YAML query file

        Returns:
            QueryParseResult containing the definition and any warnings

        Raises:
            ConfigurationError: If the file is missing, unreadable or invalid
        """
        query_path = Path(query_path)
        if not query_path.exists():
            raise ConfigurationError(f"Query file not found: {query_path}")

        data = self._load_yaml_file(query_path)
        definition = self._validate_query_data(data)

        warnings = self._get_warnings(definition)
        if self.strict_mode and warnings:
            raise ConfigurationError(f"Query warnings in strict mode: {'; '.join(warnings)}")

        for warning in warnings:
            self.logger.warning(f"{query_path}: {warning}")
        self.logger.info(f"Query loaded successfully from {query_path}")

        return QueryParseResult(
            definition=definition,
            warnings=warnings,
            source_path=query_path
        )

    def _load_yaml_file(self, file_path: Path) -> Dict[str, Any]:
        """
        Load and parse YAML file.

        Args:
            file_path: Path to YAML file

        Returns:
            Parsed YAML data as dictionary

        Raises:
            ConfigurationError: If file cannot be read or parsed
        """
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                content = f.read()
        except OSError as e:
            raise ConfigurationError(f"Cannot read query file {file_path}: {e}") from e

        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML syntax in {file_path}: {e}") from e

        # Empty documents load as None
        if data is None:
            self.logger.warning(f"Query file is empty: {file_path}")
            return {}

        if not isinstance(data, dict):
            raise ConfigurationError(f"Query file must contain a YAML object, got {type(data).__name__}")

        return data

    def _validate_query_data(self, data: Dict[str, Any]) -> QueryDefinition:
        """
        Validate query data structure and values.

        Raises:
            ConfigurationError: If the data does not describe a valid query
        """
        try:
            return QueryDefinition.from_dict(data)
        except ValidationError as e:
            raise ConfigurationError(f"Query validation failed: {e}") from e

    def _get_warnings(self, definition: QueryDefinition) -> List[str]:
        """
        Get warnings for a valid but questionable query.

        Args:
            definition: The parsed query definition

        Returns:
            List of warning messages
        """
        warnings = []

        if len(definition.roots) > MAX_ROOTS_WITHOUT_WARNING:
            warnings.append(f"Large number of root directories ({len(definition.roots)}) may impact performance")

        relative_roots = [root for root in definition.roots if not Path(root).is_absolute()]
        if relative_roots:
            warnings.append(f"Relative roots depend on the working directory: {', '.join(relative_roots)}")

        if definition.negate and not definition.has_filters():
            warnings.append("Negation has no effect without filters")

        return warnings

    def validate_file(self, query_path: Union[str, Path]) -> List[str]:
        """
        Validate a query file without building a query from it.

        Args:
            query_path: Path to query file

        Returns:
            List of validation errors (empty if valid)
        """
        try:
            self.load(query_path)
        except ConfigurationError as e:
            return [str(e)]
        return []

    def _generate_yaml_with_comments(self, data: Dict[str, Any]) -> str:
        """
        Generate YAML content with a comment above each section.

        Args:
            data: Query data

        Returns:
            YAML content with comments
        """
        lines = [
            "# fluentfs query file",
            "# Files are matched when they pass every filter below",
            "",
        ]

        for section_name, comment in self.SECTIONS:
            if section_name in data:
                lines.append(f"# {comment}")
                section_yaml = yaml.dump({section_name: data[section_name]},
                                         default_flow_style=False,
                                         sort_keys=False)
                lines.append(section_yaml.rstrip())
                lines.append("")

        return "\n".join(lines)

    def get_template(self) -> str:
        """
        Get a template query file with all options and comments.

        Returns:
            YAML template as string
        """
        template = {
            'roots': ['.'],
            'extensions': ['txt', 'md'],
            'patterns': ['^report'],
            'size': {'min': 0, 'max': 1000000},
            'modified': {'after': '30 days'},
            'max_depth': 3,
            'negate': False,
        }
        return self._generate_yaml_with_comments(template)


def load_query_file(query_path: Union[str, Path], strict_mode: bool = False) -> QueryParseResult:
    """
    Convenience function to load a query file.

    Args:
        query_path: Path to the query file
        strict_mode: Whether to treat warnings as errors

    Returns:
        QueryParseResult containing the parsed definition

    Raises:
        ConfigurationError: If the query file is invalid
    """
    parser = QueryFileParser(strict_mode=strict_mode)
    return parser.load(query_path)


def validate_query_file(query_path: Union[str, Path]) -> List[str]:
    """
    Convenience function to validate a query file.

    Returns:
        List of validation errors (empty if valid)
    """
    parser = QueryFileParser()
    return parser.validate_file(query_path)


def create_query_template(output_path: Union[str, Path]) -> None:
    """
    Create a template query file.

    Args:
        output_path: Where to save the template

    Raises:
        ConfigurationError: If template cannot be created
    """
    parser = QueryFileParser()
    template_content = parser.get_template()

    try:
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        with open(output_path, 'w', encoding='utf-8') as f:
            f.write(template_content)

    except OSError as e:
        raise ConfigurationError(f"Cannot create template file {output_path}: {e}") from e
