"""Example: build a parameterized orders report and run it on DuckDB."""

from dataclasses import dataclass

from query_assembler.builder import QueryBuilder
from query_assembler.datasources.duckdb import DuckDBDataSource
from query_assembler.executor import ProblemsPersistingError, QueryExecutor
from query_assembler.model import Column, ColumnExpression, ColumnSubquery, Projection
from query_assembler.utils.logging import setup_logging


ORDER_ID = Column("orders", "id")
STATUS = Column("orders", "status")
TOTAL = Column("orders", "total")
TAX = Column("orders", "tax")
REGION = Column("customers", "region")


@dataclass
class OrderReport:
    id: int
    status: str
    gross: float
    lines: int


def create_sample_data(datasource):
    """Create sample tables in DuckDB for demonstration."""
    conn = datasource.connection
    conn.execute("""
        CREATE TABLE orders (
            id INTEGER,
            status VARCHAR,
            total DOUBLE,
            tax DOUBLE
        )
    """)
    conn.execute("""
        INSERT INTO orders VALUES
        (101, 'PAID', 1500.00, 315.00),
        (102, 'PENDING', 750.00, 157.50),
        (103, 'PAID', 2200.00, 462.00)
    """)
    conn.execute("CREATE TABLE order_lines (order_id INTEGER, product VARCHAR)")
    conn.execute("""
        INSERT INTO order_lines VALUES
        (101, 'laptop'), (101, 'dock'), (103, 'server')
    """)
    print("  Created orders and order_lines tables")


def build_report_query(status):
    builder = QueryBuilder()
    builder.configure_table_alias("orders", "o")
    builder.select(
        Projection([ORDER_ID, STATUS]),
        "orders",
        ColumnExpression("total + tax", [TOTAL, TAX], name="gross"),
        ColumnSubquery(
            "select count(*) from order_lines l where l.order_id = id",
            name="lines",
            parent_columns=[ORDER_ID],
        ),
    )
    # Region filter is absent here and drops out of the where clause
    builder.where(builder.and_(builder.eq(STATUS, status), builder.eq(REGION, None)))
    builder.sort_by("gross")
    return builder


def main():
    setup_logging(level="INFO")

    print("Setting up DuckDB...")
    datasource = DuckDBDataSource("shop", {"path": ":memory:", "read_only": False})
    with datasource:
        create_sample_data(datasource)

        builder = build_report_query("PAID")
        print(f"\nSQL:    {builder.sql}")
        print(f"Params: {builder.params}")

        try:
            rows = builder.do_query(QueryExecutor(datasource), OrderReport)
        except ProblemsPersistingError as e:
            print(f"Query failed: {e}")
            return

        print("\nResults:")
        for row in rows:
            print(f"  {row}")


if __name__ == "__main__":
    main()
