"""Column and projection value types."""

from .columns import (
    Column,
    ColumnExpression,
    ColumnKind,
    ColumnSubquery,
    DerivedColumn,
    Projection,
    SelectItem,
)

__all__ = [
    "Column",
    "ColumnExpression",
    "ColumnKind",
    "ColumnSubquery",
    "DerivedColumn",
    "Projection",
    "SelectItem",
]
