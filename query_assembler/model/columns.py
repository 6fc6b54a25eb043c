"""Column value types consumed by the query builder."""

from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, List, Optional, Union

from ..datasources.base import TableMetadata


# Data types the execution layer cannot bind natively
CAST_DATA_TYPES = frozenset({"UUID"})


class ColumnKind(Enum):
    """Closed set of column kinds the builder knows how to render."""

    PLAIN = "plain"
    EXPRESSION = "expression"
    SUBQUERY = "subquery"


@dataclass(frozen=True)
class Column:
    """A physical column of a table."""

    kind: ClassVar[ColumnKind] = ColumnKind.PLAIN

    table: str
    name: str
    needs_cast: bool = False

    @classmethod
    def from_metadata(cls, table: str, name: str, data_type: str) -> "Column":
        """Build a column, flagging types that must be cast before binding.

        Args:
            table: Table the column belongs to
            name: Column name
            data_type: Type name as reported by the data source

        Returns:
            Column with needs_cast set for UUID-like types
        """
        needs_cast = data_type.upper() in CAST_DATA_TYPES
        return cls(table=table, name=name, needs_cast=needs_cast)

    def __repr__(self) -> str:
        return f"Column({self.table}.{self.name})"


@dataclass(frozen=True)
class ColumnExpression:
    """A column computed from an SQL expression.

    Columns listed in ``columns`` are referenced by bare name inside
    ``expression`` and get qualified with their table alias when rendered.
    """

    kind: ClassVar[ColumnKind] = ColumnKind.EXPRESSION

    expression: str
    columns: List[Column] = field(default_factory=list)
    name: Optional[str] = None

    def __repr__(self) -> str:
        return f"ColumnExpression({self.expression!r}, name={self.name})"


@dataclass(frozen=True)
class ColumnSubquery:
    """A column computed from a scalar subquery.

    ``parent_columns`` are columns of the outer query referenced by bare name
    inside ``subquery``. The output name is required.
    """

    kind: ClassVar[ColumnKind] = ColumnKind.SUBQUERY

    subquery: str
    name: str
    parent_columns: List[Column] = field(default_factory=list)

    def __post_init__(self):
        if self.name is None or not self.name.strip():
            raise ValueError("ColumnSubquery requires an output name")

    def __repr__(self) -> str:
        return f"ColumnSubquery({self.subquery!r}, name={self.name})"


DerivedColumn = Union[ColumnExpression, ColumnSubquery]
SelectItem = Union[Column, ColumnExpression, ColumnSubquery]


@dataclass(frozen=True)
class Projection:
    """Ordered static select list of a query."""

    columns: List[Column] = field(default_factory=list)

    @classmethod
    def from_table_metadata(cls, metadata: TableMetadata) -> "Projection":
        """Select every column of a table, in ordinal order."""
        columns = []
        for col in metadata.columns:
            columns.append(
                Column.from_metadata(metadata.table_name, col.name, col.data_type)
            )
        return cls(columns=columns)

    def __len__(self) -> int:
        return len(self.columns)

    def __iter__(self):
        return iter(self.columns)
