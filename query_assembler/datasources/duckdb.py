"""DuckDB data source implementation."""

from typing import Any, Dict, List
import pyarrow as pa
import duckdb
import logging

from .base import DataSource, TableMetadata, ColumnMetadata

logger = logging.getLogger(__name__)


class DuckDBDataSource(DataSource):
    """DuckDB data source connector."""

    placeholder = "?"

    def __init__(self, name: str, config: Dict[str, Any]):
        """Initialize DuckDB data source.

        Config should include:
            - path: Path to DuckDB database file (or :memory: for in-memory)
            - read_only: Whether to open in read-only mode (default: True)
        """
        super().__init__(name, config)
        self.connection = None
        self.db_path = config.get("path", ":memory:")
        self.read_only = config.get("read_only", True)

    def connect(self) -> None:
        """Establish connection to DuckDB."""
        logger.info(f"Connecting to DuckDB at '{self.db_path}'")
        try:
            self.connection = duckdb.connect(self.db_path, read_only=self.read_only)
        except duckdb.Error as e:
            logger.error(f"Failed to connect to DuckDB {self.name}: {e}")
            raise ConnectionError(f"DuckDB connection failed: {e}") from e
        self._connected = True
        logger.info(f"Successfully connected to DuckDB: {self.name}")

    def disconnect(self) -> None:
        """Close DuckDB connection."""
        if self.connection:
            self.connection.close()
            logger.info(f"Disconnected from DuckDB: {self.name}")
            self.connection = None
            self._connected = False

    def list_tables(self, schema: str) -> List[str]:
        """List tables in a schema."""
        result = self.connection.execute(
            """
            SELECT table_name
            FROM information_schema.tables
            WHERE table_schema = ? AND table_type = 'BASE TABLE'
            ORDER BY table_name
            """,
            [schema],
        ).fetchall()
        tables = []
        for row in result:
            tables.append(row[0])
        return tables

    def get_table_metadata(self, schema: str, table: str) -> TableMetadata:
        """Get table metadata."""
        result = self.connection.execute(
            """
            SELECT
                column_name,
                data_type,
                is_nullable
            FROM information_schema.columns
            WHERE table_schema = ? AND table_name = ?
            ORDER BY ordinal_position
            """,
            [schema, table],
        ).fetchall()

        columns = []
        for row in result:
            columns.append(
                ColumnMetadata(
                    name=row[0],
                    data_type=row[1],
                    nullable=row[2] == "YES",
                )
            )

        return TableMetadata(schema_name=schema, table_name=table, columns=columns)

    def execute(self, query: str, args: List[Any]) -> pa.Table:
        """Execute a parameterized query and fetch an Arrow table."""
        if self.connection is None:
            raise RuntimeError(f"Not connected to {self.name}")
        logger.debug(f"Executing query on {self.name}: {query[:100]}...")
        result = self.connection.execute(query, args)
        return result.fetch_arrow_table()
