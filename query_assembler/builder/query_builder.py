"""Fluent builder for parameterized native SQL queries."""

import logging
from typing import Any, Dict, List, Optional, Sequence, Type, Union

from ..executor import ProblemsPersistingError, QueryExecutor
from ..model import Column, DerivedColumn, Projection
from .rendering import column_selection_as_sql, qualified_name, table_reference

logger = logging.getLogger(__name__)

POSITIONAL_PARAM_TEMPLATE = "?{position}"


def _is_blank(text: Optional[str]) -> bool:
    return text is None or not text.strip()


class QueryBuilder:
    """Assembles a single SQL query clause by clause.

    Clauses are rendered as soon as the corresponding method is called, in
    the order select, where, order by, limit. Table aliases are read at
    render time, so they have to be configured before the clauses that use
    them. Literal values must go through ``add_param`` (directly or via
    ``eq`` / ``between``) so they are bound as positional parameters instead
    of being written into the SQL text.

    A builder owns mutable state and is meant to build exactly one query in
    a single thread. Nothing resets it.

    Example:
        >>> builder = QueryBuilder().configure_table_alias("orders", "o")
        >>> status = Column("orders", "status")
        >>> _ = builder.select(Projection([Column("orders", "id")]), "orders")
        >>> _ = builder.where(builder.eq(status, "PAID")).limit()
        >>> builder.sql
        'select o.id from orders o where o.status = ?1 limit 1'
    """

    def __init__(self):
        self._parts: List[str] = []
        self._table_aliases: Dict[str, str] = {}
        self._params: Dict[int, Any] = {}
        self._position = 0

    @property
    def sql(self) -> str:
        """The SQL text assembled so far."""
        return "".join(self._parts)

    @property
    def params(self) -> Dict[int, Any]:
        """Copy of the positional parameters, keyed by 1-based position."""
        return dict(self._params)

    def ordered_params(self) -> List[Any]:
        """Bound values in position order."""
        return [self._params[position] for position in sorted(self._params)]

    def configure_table_alias(self, table: str, alias: str) -> "QueryBuilder":
        """Register or replace the alias used to qualify a table's columns."""
        self._table_aliases[table] = alias
        return self

    def select(
        self,
        projection: Projection,
        from_table: str,
        *derived_columns: DerivedColumn,
    ) -> "QueryBuilder":
        """Append ``select <columns> from <table>``.

        Args:
            projection: Static columns, rendered first
            from_table: First table of the query
            *derived_columns: Expression or subquery columns computed at runtime

        Returns:
            This builder
        """
        items = list(projection.columns) + list(derived_columns)
        selection = []
        for item in items:
            selection.append(column_selection_as_sql(item, self._table_aliases))

        self._parts.append("select ")
        self._parts.append(", ".join(selection))
        self._parts.append(" from ")
        self._parts.append(table_reference(from_table, self._table_aliases))
        return self

    def where(self, condition: Optional[str]) -> "QueryBuilder":
        """Append a where clause; blank conditions are skipped."""
        if not _is_blank(condition):
            self._parts.append(" where ")
            self._parts.append(condition)
        return self

    def sort_by(self, sort_by: Optional[str]) -> "QueryBuilder":
        """Append a descending order by clause; blank input is skipped."""
        if not _is_blank(sort_by):
            self._parts.append(" order by ")
            self._parts.append(sort_by)
            self._parts.append(" DESC ")
        return self

    def limit(self) -> "QueryBuilder":
        """Limit the result to a single row."""
        self._parts.append(" limit 1")
        return self

    def add_param(self, value: Any) -> str:
        """Bind a value and return its positional placeholder."""
        self._position += 1
        self._params[self._position] = value
        return POSITIONAL_PARAM_TEMPLATE.format(position=self._position)

    def column(self, column: Column) -> str:
        """Render a column reference qualified with its table alias."""
        return qualified_name(column, self._table_aliases)

    def eq(self, column: Column, value: Any) -> Optional[str]:
        """``column = ?n``, or None when there is no value to compare."""
        if value is None:
            return None
        return f"{self.column(column)} = {self.add_param(value)}"

    def between(
        self, value: Any, start_column: Column, end_column: Column
    ) -> Optional[str]:
        """``?n between start and end``, or None when value is None."""
        if value is None:
            return None
        placeholder = self.add_param(value)
        return (
            f"{placeholder} between {self.column(start_column)} "
            f"and {self.column(end_column)}"
        )

    def parentheses(self, expression: Optional[str]) -> Optional[str]:
        if _is_blank(expression):
            return None
        return f"({expression})"

    def and_(self, *expressions: Union[Optional[str], Sequence[Optional[str]]]) -> str:
        """Join the non-blank expressions with ``and``.

        Accepts either several expressions or a single list of them. Blank
        and None entries are dropped, so an all-empty input gives ``""``.
        """
        if len(expressions) == 1 and isinstance(expressions[0], (list, tuple)):
            expressions = tuple(expressions[0])
        kept = [expr for expr in expressions if not _is_blank(expr)]
        return " and ".join(kept)

    def do_query(
        self, executor: QueryExecutor, row_type: Optional[Type] = None
    ) -> List[Any]:
        """Execute the assembled query.

        Args:
            executor: Executor bound to a data source
            row_type: Optional class built from each row's columns

        Returns:
            Result rows

        Raises:
            ProblemsPersistingError: On any failure while running the query
        """
        sql = self.sql
        params = self.params
        logger.debug(f"Prepared query {sql}")
        try:
            return executor.execute(sql, params, row_type)
        except Exception as e:
            raise ProblemsPersistingError(str(e)) from e

    def __repr__(self) -> str:
        return f"QueryBuilder(sql={self.sql!r}, params={self._params!r})"
