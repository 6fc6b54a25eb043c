"""Tests for YAML query definitions."""

import pytest

from query_assembler.definition import (
    DefinitionError,
    QueryDefinition,
    load_query_definition,
)
from query_assembler.model import Column, ColumnExpression, ColumnSubquery

ORDERS_QUERY = """
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
    name: lines
where:
  - eq: orders.status
    value: PAID
  - between: [orders.min_qty, orders.max_qty]
    value: 8
  - eq: orders.total
    value: null
sort_by: o.id
limit: true
"""


def test_load_and_build(tmp_path):
    path = tmp_path / "orders.yaml"
    path.write_text(ORDERS_QUERY)

    builder = load_query_definition(str(path)).build()

    assert builder.sql == (
        "select o.id, cast(o.reference as varchar), o.total + o.tax as gross, "
        "(select count(*) from order_lines l where l.order_id = o.id) as lines "
        "from orders o "
        "where o.status = ?1 and ?2 between o.min_qty and o.max_qty "
        "order by o.id DESC  limit 1"
    )
    assert builder.params == {1: "PAID", 2: 8}


def test_from_dict_parses_entries():
    definition = QueryDefinition.from_dict(
        {
            "from": "orders",
            "projection": ["orders.id"],
            "derived": [
                {"expression": "id * 2", "columns": ["orders.id"]},
                {"subquery": "select 1", "name": "one"},
            ],
        }
    )

    assert definition.projection.columns == [Column("orders", "id")]
    assert definition.derived == [
        ColumnExpression("id * 2", [Column("orders", "id")]),
        ColumnSubquery("select 1", name="one"),
    ]
    assert definition.aliases == {}
    assert definition.conditions == []
    assert definition.sort_by is None
    assert definition.limit is False


def test_minimal_definition_has_no_optional_clauses():
    builder = QueryDefinition.from_dict(
        {"from": "orders", "projection": ["orders.id"]}
    ).build()
    assert builder.sql == "select id from orders"
    assert builder.params == {}


def test_schema_qualified_column_name():
    definition = QueryDefinition.from_dict(
        {"from": "main.orders", "projection": ["main.orders.id"]}
    )
    assert definition.projection.columns == [Column("main.orders", "id")]


@pytest.mark.parametrize(
    "data, message",
    [
        ([], "mapping"),
        ({"projection": ["orders.id"]}, "'from'"),
        ({"from": "orders", "projection": ["id"]}, "table.name"),
        ({"from": "orders", "projection": [{"table": "orders"}]}, "missing"),
        ({"from": "orders", "projection": [42]}, "Unsupported column"),
        ({"from": "orders", "derived": [{"name": "x"}]}, "'expression' or 'subquery'"),
        ({"from": "orders", "derived": [{"subquery": "select 1"}]}, "output name"),
        ({"from": "orders", "where": [{"eq": "orders.id"}]}, "'value'"),
        ({"from": "orders", "where": [{"value": 1}]}, "'eq' or 'between'"),
        (
            {"from": "orders", "where": [{"between": ["orders.a"], "value": 1}]},
            "two columns",
        ),
        ({"from": ["orders"]}, "'from' must be a table name"),
        ({"from": "orders", "aliases": ["o"]}, "'aliases' must map"),
        ({"from": "orders", "sort_by": 5}, "'sort_by' must be text"),
        ({"from": "orders", "sort_by": ["id"]}, "'sort_by' must be text"),
        ({"from": "orders", "limit": "false"}, "'limit' must be true or false"),
        ({"from": "orders", "limit": 1}, "'limit' must be true or false"),
        ({"from": "orders", "derived": [{"expression": 5}]}, "'expression' must be text"),
        ({"from": "orders", "derived": [{"expression": None}]}, "'expression' must be text"),
        (
            {"from": "orders", "derived": [{"subquery": "select 1", "name": 7}]},
            "'name' must be text",
        ),
    ],
)
def test_invalid_definitions(data, message):
    with pytest.raises(DefinitionError, match=message):
        QueryDefinition.from_dict(data)


def test_definition_error_is_value_error():
    assert issubclass(DefinitionError, ValueError)


def test_missing_definition_file():
    with pytest.raises(FileNotFoundError):
        load_query_definition("/nonexistent/query.yaml")


def test_limit_false_adds_no_limit():
    builder = QueryDefinition.from_dict(
        {"from": "orders", "projection": ["orders.id"], "limit": False}
    ).build()
    assert builder.sql == "select id from orders"
