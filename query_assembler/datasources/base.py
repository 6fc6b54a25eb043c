"""Base data source interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Tuple
import re

import pyarrow as pa


POSITIONAL_PARAM_PATTERN = re.compile(r"\?(\d+)")


class ParameterBindingError(KeyError):
    """A placeholder references a position with no bound value."""


@dataclass
class ColumnMetadata:
    """Metadata about a column."""

    name: str
    data_type: str
    nullable: bool


@dataclass
class TableMetadata:
    """Metadata about a table."""

    schema_name: str
    table_name: str
    columns: List[ColumnMetadata]


class DataSource(ABC):
    """Abstract base class for data sources."""

    # Placeholder marker understood by the underlying driver
    placeholder = "?"

    def __init__(self, name: str, config: Dict[str, Any]):
        """Initialize data source.

        Args:
            name: Unique name for this data source
            config: Configuration dictionary
        """
        self.name = name
        self.config = config
        self.connection = None
        self._connected = False

    @abstractmethod
    def connect(self) -> None:
        """Establish connection to the data source."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Close connection to the data source."""
        pass

    @abstractmethod
    def list_tables(self, schema: str) -> List[str]:
        """List all tables in a schema.

        Args:
            schema: Schema name

        Returns:
            List of table names
        """
        pass

    @abstractmethod
    def get_table_metadata(self, schema: str, table: str) -> TableMetadata:
        """Get metadata for a table.

        Args:
            schema: Schema name
            table: Table name

        Returns:
            Table metadata including columns and types
        """
        pass

    @abstractmethod
    def execute(self, query: str, args: List[Any]) -> pa.Table:
        """Execute a driver-native parameterized query.

        Args:
            query: SQL text using this source's placeholder marker
            args: Values in placeholder order

        Returns:
            Arrow table with all result rows
        """
        pass

    def bind_parameters(
        self, query: str, params: Mapping[int, Any]
    ) -> Tuple[str, List[Any]]:
        """Translate ``?<n>`` placeholders into the driver's marker.

        Args:
            query: SQL text with positional ``?<n>`` placeholders
            params: Map of 1-based position to value

        Returns:
            Tuple of (driver SQL, argument list in placeholder order)

        Raises:
            ParameterBindingError: If a placeholder has no bound value
        """
        args: List[Any] = []

        def _replace(match: "re.Match") -> str:
            position = int(match.group(1))
            if position not in params:
                raise ParameterBindingError(
                    f"No value bound for positional parameter ?{position}"
                )
            args.append(params[position])
            return self.placeholder

        translated = POSITIONAL_PARAM_PATTERN.sub(
            _replace, self._escape_query(query)
        )
        return translated, args

    def _escape_query(self, query: str) -> str:
        """Escape driver-significant characters in the raw SQL text."""
        return query

    def is_connected(self) -> bool:
        """Check if data source is connected.

        Returns:
            True if connected, False otherwise
        """
        return self._connected

    def ensure_connected(self) -> None:
        """Ensure data source is connected.

        Raises:
            ConnectionError: If connection cannot be established
        """
        if not self.is_connected():
            self.connect()
            self._connected = True

    def __enter__(self):
        """Context manager entry."""
        self.ensure_connected()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.disconnect()
        self._connected = False
        return False

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name})"
