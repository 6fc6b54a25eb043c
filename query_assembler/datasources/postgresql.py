"""PostgreSQL data source implementation."""

from typing import Any, Dict, List
import pyarrow as pa
import psycopg2
from psycopg2 import pool
from psycopg2.extras import RealDictCursor
import logging

from .base import DataSource, TableMetadata, ColumnMetadata

logger = logging.getLogger(__name__)


class PostgreSQLDataSource(DataSource):
    """PostgreSQL data source connector with connection pooling."""

    placeholder = "%s"

    def __init__(self, name: str, config: Dict[str, Any]):
        """Initialize PostgreSQL data source.

        Config should include:
            - host: Database host
            - port: Database port
            - database: Database name
            - user: Username
            - password: Password
            - min_connections: Minimum connections in pool (default: 1)
            - max_connections: Maximum connections in pool (default: 5)
        """
        super().__init__(name, config)
        self._pool = None
        self._min_connections = config.get("min_connections", 1)
        self._max_connections = config.get("max_connections", 5)

    def connect(self) -> None:
        """Establish connection pool to PostgreSQL."""
        try:
            logger.info(f"Connecting to PostgreSQL database '{self.config['database']}' at {self.config['host']}")
            self._pool = pool.ThreadedConnectionPool(
                self._min_connections,
                self._max_connections,
                host=self.config["host"],
                port=self.config.get("port", 5432),
                database=self.config["database"],
                user=self.config["user"],
                password=self.config["password"],
            )
            conn = self._pool.getconn()
            self._pool.putconn(conn)
            self._connected = True
            logger.info(f"Successfully connected to PostgreSQL: {self.name}")
        except psycopg2.Error as e:
            logger.error(f"Failed to connect to PostgreSQL {self.name}: {e}")
            raise ConnectionError(f"PostgreSQL connection failed: {e}") from e

    def disconnect(self) -> None:
        """Close all connections in the pool."""
        if self._pool:
            self._pool.closeall()
            logger.info(f"Disconnected from PostgreSQL: {self.name}")
            self._pool = None
            self._connected = False

    def _get_connection(self):
        """Get a connection from the pool."""
        if not self._pool:
            raise RuntimeError(f"Not connected to {self.name}")
        return self._pool.getconn()

    def _return_connection(self, conn):
        """Return a connection to the pool."""
        if self._pool:
            self._pool.putconn(conn)

    def _escape_query(self, query: str) -> str:
        # psycopg2 treats a bare % as the start of a placeholder
        return query.replace("%", "%%")

    def list_tables(self, schema: str) -> List[str]:
        """List tables in a schema."""
        conn = self._get_connection()
        try:
            with conn.cursor() as cursor:
                cursor.execute(
                    """
                    SELECT table_name
                    FROM information_schema.tables
                    WHERE table_schema = %s AND table_type = 'BASE TABLE'
                    ORDER BY table_name
                    """,
                    (schema,),
                )
                rows = cursor.fetchall()
                tables = []
                for row in rows:
                    tables.append(row[0])
                return tables
        except psycopg2.Error as e:
            logger.error(f"Error listing tables in schema {schema}: {e}")
            raise
        finally:
            self._return_connection(conn)

    def get_table_metadata(self, schema: str, table: str) -> TableMetadata:
        """Get table metadata from information_schema."""
        conn = self._get_connection()
        try:
            with conn.cursor(cursor_factory=RealDictCursor) as cursor:
                cursor.execute(
                    """
                    SELECT
                        column_name,
                        data_type,
                        is_nullable
                    FROM information_schema.columns
                    WHERE table_schema = %s AND table_name = %s
                    ORDER BY ordinal_position
                    """,
                    (schema, table),
                )

                columns = []
                for row in cursor.fetchall():
                    columns.append(
                        ColumnMetadata(
                            name=row["column_name"],
                            data_type=row["data_type"],
                            nullable=row["is_nullable"] == "YES",
                        )
                    )

                return TableMetadata(
                    schema_name=schema, table_name=table, columns=columns
                )
        except psycopg2.Error as e:
            logger.error(f"Error getting metadata for {schema}.{table}: {e}")
            raise
        finally:
            self._return_connection(conn)

    def execute(self, query: str, args: List[Any]) -> pa.Table:
        """Execute a parameterized query and fetch an Arrow table."""
        conn = self._get_connection()
        try:
            with conn.cursor() as cursor:
                logger.debug(f"Executing query on {self.name}: {query[:100]}...")
                cursor.execute(query, args)
                columns = self._extract_column_names(cursor.description)
                rows = cursor.fetchall()
            conn.commit()
            return self._build_table(columns, rows)
        except psycopg2.Error as e:
            conn.rollback()
            logger.error(f"Query execution failed on {self.name}: {e}")
            raise
        finally:
            self._return_connection(conn)

    def _extract_column_names(self, description) -> List[str]:
        """Extract column names from cursor description."""
        columns = []
        for desc in description:
            columns.append(desc[0])
        return columns

    def _build_table(self, columns: List[str], rows: List) -> pa.Table:
        """Build a column-wise Arrow table from fetched rows."""
        data = []
        for _ in columns:
            data.append([])

        for row in rows:
            for i in range(len(columns)):
                data[i].append(row[i])

        arrays = []
        for values in data:
            arrays.append(pa.array(values))
        return pa.Table.from_arrays(arrays, names=columns)
