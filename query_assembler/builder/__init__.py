"""SQL query builder."""

from .query_builder import QueryBuilder
from .rendering import (
    column_selection_as_sql,
    qualified_name,
    replace_column_references,
    table_reference,
)

__all__ = [
    "QueryBuilder",
    "column_selection_as_sql",
    "qualified_name",
    "replace_column_references",
    "table_reference",
]
