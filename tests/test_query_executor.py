"""End-to-end tests running built queries through QueryExecutor."""

from dataclasses import dataclass

import pyarrow as pa
import pytest

from query_assembler.builder import QueryBuilder
from query_assembler.config import ExecutorConfig
from query_assembler.executor import ProblemsPersistingError, QueryExecutor
from query_assembler.model import Column, ColumnExpression, ColumnSubquery, Projection

ORDER_ID = Column("orders", "id")
STATUS = Column("orders", "status")
TOTAL = Column("orders", "total")
TAX = Column("orders", "tax")


@dataclass
class OrderSummary:
    id: int
    gross: float
    lines: int


def _summary_query(status):
    builder = QueryBuilder()
    builder.configure_table_alias("orders", "o")
    builder.select(
        Projection([ORDER_ID]),
        "orders",
        ColumnExpression("total + tax", [TOTAL, TAX], name="gross"),
        ColumnSubquery(
            "select count(*) from order_lines l where l.order_id = id",
            name="lines",
            parent_columns=[ORDER_ID],
        ),
    )
    builder.where(builder.eq(STATUS, status)).sort_by("o.id")
    return builder


def test_execute_to_table(duckdb_datasource):
    executor = QueryExecutor(duckdb_datasource)
    table = executor.execute_to_table(
        "select id from orders where status = ?1 order by id", {1: "PAID"}
    )
    assert isinstance(table, pa.Table)
    assert table.column("id").to_pylist() == [1, 3]


def test_do_query_with_row_type(duckdb_datasource):
    builder = _summary_query("PAID")
    rows = builder.do_query(QueryExecutor(duckdb_datasource), OrderSummary)

    assert rows == [
        OrderSummary(id=3, gross=pytest.approx(96.8), lines=1),
        OrderSummary(id=1, gross=pytest.approx(121.0), lines=2),
    ]


def test_do_query_without_row_type_returns_tuples(duckdb_datasource):
    builder = _summary_query("PENDING")
    rows = builder.do_query(QueryExecutor(duckdb_datasource))
    assert rows == [(2, pytest.approx(60.5), 0)]


def test_do_query_no_rows(duckdb_datasource):
    builder = _summary_query("CANCELLED")
    assert builder.do_query(QueryExecutor(duckdb_datasource)) == []


def test_do_query_with_limit(duckdb_datasource):
    builder = _summary_query("PAID").limit()
    rows = builder.do_query(QueryExecutor(duckdb_datasource))
    assert len(rows) == 1
    assert rows[0][0] == 3


def test_between_and_uuid_cast(duckdb_datasource):
    """The bound value sits between two columns; UUIDs come back as text."""
    builder = QueryBuilder().configure_table_alias("orders", "o")
    reference = Column("orders", "reference", needs_cast=True)
    builder.select(Projection([ORDER_ID, reference]), "orders")
    builder.where(
        builder.between(
            8, Column("orders", "min_qty"), Column("orders", "max_qty")
        )
    ).sort_by("o.id")

    rows = builder.do_query(QueryExecutor(duckdb_datasource))

    assert rows == [
        (2, "0a9b8c7d-6e5f-4a3b-2c1d-0e9f8a7b6c5d"),
        (1, "6f1c2a9e-4b1d-4c55-9a0b-3e2f4d5c6b7a"),
    ]


def test_projection_from_metadata_runs(duckdb_datasource):
    metadata = duckdb_datasource.get_table_metadata("main", "orders")
    builder = QueryBuilder()
    builder.select(Projection.from_table_metadata(metadata), "orders")
    builder.where(builder.eq(ORDER_ID, 1))

    rows = builder.do_query(QueryExecutor(duckdb_datasource))

    assert rows == [
        (1, "6f1c2a9e-4b1d-4c55-9a0b-3e2f4d5c6b7a", "PAID", 100.0, 21.0, 1, 10)
    ]


def test_small_batch_size(duckdb_datasource):
    executor = QueryExecutor(duckdb_datasource, ExecutorConfig(batch_size=1))
    builder = QueryBuilder()
    builder.select(Projection([ORDER_ID]), "orders").sort_by("id")
    rows = builder.do_query(executor, dict)
    assert rows == [{"id": 3}, {"id": 2}, {"id": 1}]


def test_failure_is_wrapped(duckdb_datasource):
    """Any execution error surfaces as ProblemsPersistingError."""
    builder = QueryBuilder()
    builder.select(Projection([Column("missing_table", "id")]), "missing_table")

    with pytest.raises(ProblemsPersistingError) as excinfo:
        builder.do_query(QueryExecutor(duckdb_datasource))

    assert excinfo.value.__cause__ is not None
    assert str(excinfo.value) == str(excinfo.value.__cause__)


def test_row_type_mismatch_is_wrapped(duckdb_datasource):
    builder = _summary_query("PAID")

    @dataclass
    class OnlyId:
        id: int

    with pytest.raises(ProblemsPersistingError):
        builder.do_query(QueryExecutor(duckdb_datasource), OnlyId)


def test_executor_connects_lazily():
    from query_assembler.datasources import DuckDBDataSource

    datasource = DuckDBDataSource("lazy", {"path": ":memory:", "read_only": False})
    executor = QueryExecutor(datasource)
    try:
        assert executor.execute("select ?1 as answer", {1: 42}) == [(42,)]
        assert datasource.is_connected()
    finally:
        datasource.disconnect()
