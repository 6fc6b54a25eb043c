"""Rendering of tables and select-list columns into SQL text.

All functions here are pure: they read the table alias map and never
modify it.
"""

import re
from typing import Iterable, Mapping

from ..model import Column, ColumnExpression, ColumnKind, ColumnSubquery, SelectItem

# Characters that make up an identifier token
_IDENTIFIER_CHARS = "a-zA-Z0-9_"


def table_reference(table: str, aliases: Mapping[str, str]) -> str:
    """Render a table for a FROM clause, with its alias when registered."""
    alias = aliases.get(table)
    if alias is not None:
        return f"{table} {alias}"
    return table


def qualified_name(column: Column, aliases: Mapping[str, str]) -> str:
    """Render ``alias.name`` for aliased tables, the bare name otherwise."""
    alias = aliases.get(column.table)
    if alias is not None:
        return f"{alias}.{column.name}"
    return column.name


def _token_pattern(name: str) -> "re.Pattern":
    return re.compile(
        rf"(?<![{_IDENTIFIER_CHARS}]){re.escape(name)}(?![{_IDENTIFIER_CHARS}])"
    )


def replace_column_references(
    template: str, columns: Iterable[Column], aliases: Mapping[str, str]
) -> str:
    """Qualify every whole-token occurrence of each column's bare name.

    A token matches when the characters around it are not identifier
    characters or are the string boundary, so ``id`` is rewritten in
    ``id + tax`` but left alone in ``paid`` or ``valid_id``.

    Args:
        template: SQL fragment referencing columns by bare name
        columns: Columns to qualify, applied in order
        aliases: Table alias map

    Returns:
        The rewritten fragment
    """
    sql = template
    for column in columns:
        replacement = qualified_name(column, aliases)
        sql = _token_pattern(column.name).sub(lambda _: replacement, sql)
    return sql


def expression_as_sql(column: ColumnExpression, aliases: Mapping[str, str]) -> str:
    expression = replace_column_references(column.expression, column.columns, aliases)
    if column.name and column.name.strip():
        return f"{expression} as {column.name}"
    return expression


def subquery_as_sql(column: ColumnSubquery, aliases: Mapping[str, str]) -> str:
    subquery = replace_column_references(
        column.subquery, column.parent_columns, aliases
    )
    return f"({subquery}) as {column.name}"


def column_selection_as_sql(item: SelectItem, aliases: Mapping[str, str]) -> str:
    """Render one select-list entry.

    Raises:
        TypeError: If the item is not a known column kind
    """
    kind = getattr(item, "kind", None)
    if kind is ColumnKind.EXPRESSION:
        return expression_as_sql(item, aliases)
    if kind is ColumnKind.SUBQUERY:
        return subquery_as_sql(item, aliases)
    if kind is ColumnKind.PLAIN:
        if item.needs_cast:
            return f"cast({qualified_name(item, aliases)} as varchar)"
        return qualified_name(item, aliases)
    raise TypeError(f"Unsupported select item: {item!r}")
