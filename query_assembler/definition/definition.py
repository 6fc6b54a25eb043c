"""Declarative query definitions loaded from YAML.

Example YAML format:
    from: orders
    aliases:
      orders: o
    projection:
      - orders.id
      - {table: orders, name: reference, cast: true}
    derived:
      - expression: total + tax
        columns: [orders.total, orders.tax]
        name: gross
      - subquery: select count(*) from order_lines l where l.order_id = id
        columns: [orders.id]
        name: line_count
    where:
      - eq: orders.status
        value: PAID
      - between: [orders.valid_from, orders.valid_to]
        value: 2024-01-01
    sort_by: o.created_at
    limit: true
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional
import yaml

from ..builder import QueryBuilder
from ..model import Column, ColumnExpression, ColumnSubquery, DerivedColumn, Projection


class DefinitionError(ValueError):
    """Raised when a query definition is malformed."""


@dataclass
class Condition:
    """A single where predicate: ``eq`` on one column or ``between`` two."""

    op: str
    columns: List[Column]
    value: Any

    def render(self, builder: QueryBuilder) -> Optional[str]:
        if self.op == "eq":
            return builder.eq(self.columns[0], self.value)
        return builder.between(self.value, self.columns[0], self.columns[1])


@dataclass
class QueryDefinition:
    """Everything needed to drive a QueryBuilder for one query."""

    from_table: str
    projection: Projection
    aliases: Dict[str, str] = field(default_factory=dict)
    derived: List[DerivedColumn] = field(default_factory=list)
    conditions: List[Condition] = field(default_factory=list)
    sort_by: Optional[str] = None
    limit: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "QueryDefinition":
        """Parse a definition mapping.

        Raises:
            DefinitionError: If a required key is missing or an entry is malformed
        """
        if not isinstance(data, dict):
            raise DefinitionError("Query definition must be a mapping")
        from_table = data.get("from")
        if not from_table:
            raise DefinitionError("Query definition requires a 'from' table")
        if not isinstance(from_table, str):
            raise DefinitionError(f"'from' must be a table name: {from_table!r}")

        aliases = data.get("aliases") or {}
        if not isinstance(aliases, dict):
            raise DefinitionError(f"'aliases' must map tables to aliases: {aliases!r}")
        sort_by = data.get("sort_by")
        if sort_by is not None and not isinstance(sort_by, str):
            raise DefinitionError(f"'sort_by' must be text: {sort_by!r}")
        limit = data.get("limit", False)
        if not isinstance(limit, bool):
            raise DefinitionError(f"'limit' must be true or false: {limit!r}")

        projection = Projection(
            columns=[_parse_column(entry) for entry in data.get("projection") or []]
        )
        derived = [_parse_derived(entry) for entry in data.get("derived") or []]
        conditions = [_parse_condition(entry) for entry in data.get("where") or []]

        return cls(
            from_table=from_table,
            projection=projection,
            aliases=dict(aliases),
            derived=derived,
            conditions=conditions,
            sort_by=sort_by,
            limit=limit,
        )

    def apply(self, builder: QueryBuilder) -> QueryBuilder:
        """Register aliases, then append every clause in SQL order."""
        for table, alias in self.aliases.items():
            builder.configure_table_alias(table, alias)
        builder.select(self.projection, self.from_table, *self.derived)

        predicates = []
        for condition in self.conditions:
            predicates.append(condition.render(builder))
        builder.where(builder.and_(predicates))

        builder.sort_by(self.sort_by)
        if self.limit:
            builder.limit()
        return builder

    def build(self) -> QueryBuilder:
        """Apply this definition to a fresh builder."""
        return self.apply(QueryBuilder())


def load_query_definition(path: str) -> QueryDefinition:
    """Load a query definition from a YAML file."""
    definition_path = Path(path)
    if not definition_path.exists():
        raise FileNotFoundError(f"Query definition not found: {path}")

    with open(definition_path, "r") as f:
        data = yaml.safe_load(f)

    return QueryDefinition.from_dict(data)


def _parse_column(entry: Any) -> Column:
    """Accept ``table.name`` strings or ``{table, name, cast}`` mappings."""
    if isinstance(entry, str):
        table, sep, name = entry.rpartition(".")
        if not sep or not table or not name:
            raise DefinitionError(f"Column must be written as table.name: {entry!r}")
        return Column(table=table, name=name)
    if isinstance(entry, dict):
        try:
            return Column(
                table=entry["table"],
                name=entry["name"],
                needs_cast=bool(entry.get("cast", False)),
            )
        except KeyError as e:
            raise DefinitionError(f"Column entry is missing {e}: {entry!r}") from e
    raise DefinitionError(f"Unsupported column entry: {entry!r}")


def _parse_derived(entry: Dict[str, Any]) -> DerivedColumn:
    if not isinstance(entry, dict):
        raise DefinitionError(f"Unsupported derived column entry: {entry!r}")
    columns = [_parse_column(col) for col in entry.get("columns") or []]
    for key in ("expression", "subquery"):
        if key in entry and not isinstance(entry[key], str):
            raise DefinitionError(f"Derived column '{key}' must be text: {entry!r}")
    if entry.get("name") is not None and not isinstance(entry["name"], str):
        raise DefinitionError(f"Derived column 'name' must be text: {entry!r}")
    if "expression" in entry:
        return ColumnExpression(
            expression=entry["expression"], columns=columns, name=entry.get("name")
        )
    if "subquery" in entry:
        try:
            return ColumnSubquery(
                subquery=entry["subquery"], name=entry.get("name"), parent_columns=columns
            )
        except ValueError as e:
            raise DefinitionError(str(e)) from e
    raise DefinitionError(
        f"Derived column needs an 'expression' or 'subquery': {entry!r}"
    )


def _parse_condition(entry: Dict[str, Any]) -> Condition:
    if not isinstance(entry, dict) or "value" not in entry:
        raise DefinitionError(f"Condition needs a 'value': {entry!r}")
    if "eq" in entry:
        return Condition("eq", [_parse_column(entry["eq"])], entry["value"])
    if "between" in entry:
        bounds = entry["between"]
        if not isinstance(bounds, list) or len(bounds) != 2:
            raise DefinitionError(f"'between' takes two columns: {entry!r}")
        return Condition(
            "between", [_parse_column(bounds[0]), _parse_column(bounds[1])], entry["value"]
        )
    raise DefinitionError(f"Condition needs 'eq' or 'between': {entry!r}")
