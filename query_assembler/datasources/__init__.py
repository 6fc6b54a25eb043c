"""Data source connectors."""

from .base import (
    ColumnMetadata,
    DataSource,
    ParameterBindingError,
    TableMetadata,
)
from .postgresql import PostgreSQLDataSource
from .duckdb import DuckDBDataSource

__all__ = [
    "ColumnMetadata",
    "DataSource",
    "ParameterBindingError",
    "TableMetadata",
    "PostgreSQLDataSource",
    "DuckDBDataSource",
]
