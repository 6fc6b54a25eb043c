"""Shared fixtures: an in-memory DuckDB shop database."""

import pytest

from query_assembler.datasources.duckdb import DuckDBDataSource


_CREATE_ORDERS_SQL = """
CREATE TABLE orders (
    id INTEGER,
    reference UUID,
    status VARCHAR,
    total DOUBLE,
    tax DOUBLE,
    min_qty INTEGER,
    max_qty INTEGER
)
"""

_INSERT_ORDERS_SQL = """
INSERT INTO orders VALUES
(1, '6f1c2a9e-4b1d-4c55-9a0b-3e2f4d5c6b7a', 'PAID', 100.0, 21.0, 1, 10),
(2, '0a9b8c7d-6e5f-4a3b-2c1d-0e9f8a7b6c5d', 'PENDING', 50.0, 10.5, 5, 20),
(3, '11111111-2222-4333-8444-555555555555', 'PAID', 80.0, 16.8, 10, 50)
"""

_CREATE_ORDER_LINES_SQL = """
CREATE TABLE order_lines (
    id INTEGER,
    order_id INTEGER,
    product VARCHAR
)
"""

_INSERT_ORDER_LINES_SQL = """
INSERT INTO order_lines VALUES
(10, 1, 'keyboard'),
(11, 1, 'mouse'),
(12, 3, 'monitor')
"""


def seed_shop(connection) -> None:
    """Create and fill the orders and order_lines tables."""
    connection.execute(_CREATE_ORDERS_SQL)
    connection.execute(_INSERT_ORDERS_SQL)
    connection.execute(_CREATE_ORDER_LINES_SQL)
    connection.execute(_INSERT_ORDER_LINES_SQL)


@pytest.fixture
def duckdb_datasource():
    """Create an in-memory DuckDB datasource with the shop tables."""
    ds = DuckDBDataSource("shop", {"path": ":memory:", "read_only": False})
    ds.connect()
    seed_shop(ds.connection)

    yield ds

    ds.disconnect()
