"""Execution of assembled queries against a data source."""

from typing import Any, List, Mapping, Optional, Type

import pyarrow as pa

from ..config.config import ExecutorConfig
from ..datasources.base import DataSource
from ..utils.logging import get_contextual_logger


class ProblemsPersistingError(Exception):
    """Raised when an assembled query could not be run against the store."""


class QueryExecutor:
    """Runs SQL with positional ``?<n>`` parameters on a data source."""

    def __init__(self, datasource: DataSource, config: Optional[ExecutorConfig] = None):
        """Initialize executor.

        Args:
            datasource: Data source the queries run against
            config: Executor configuration
        """
        self.datasource = datasource
        if config is None:
            config = ExecutorConfig()
        self.config = config
        self.logger = get_contextual_logger(__name__, {"datasource": datasource.name})

    def execute_to_table(self, sql: str, params: Mapping[int, Any]) -> pa.Table:
        """Bind every parameter at its position and run the query.

        Args:
            sql: SQL text with ``?<n>`` placeholders
            params: Map of 1-based position to value

        Returns:
            Arrow table with all results
        """
        self.datasource.ensure_connected()
        native_sql, args = self.datasource.bind_parameters(sql, params)
        if self.config.log_parameters:
            self.logger.debug(f"Running {native_sql} with {args}")
        else:
            self.logger.debug(f"Running {native_sql}")
        return self.datasource.execute(native_sql, args)

    def execute(
        self,
        sql: str,
        params: Mapping[int, Any],
        row_type: Optional[Type] = None,
    ) -> List[Any]:
        """Run the query and return its rows.

        Args:
            sql: SQL text with ``?<n>`` placeholders
            params: Map of 1-based position to value
            row_type: Class called with each row's columns as keyword
                arguments; rows are tuples when omitted

        Returns:
            List of rows
        """
        table = self.execute_to_table(sql, params)
        if row_type is None:
            return self._as_tuples(table)
        rows = []
        for batch in table.to_batches(max_chunksize=self.config.batch_size):
            for record in batch.to_pylist():
                rows.append(row_type(**record))
        return rows

    def _as_tuples(self, table: pa.Table) -> List[tuple]:
        columns = []
        for column in table.columns:
            columns.append(column.to_pylist())
        return list(zip(*columns))

    def __repr__(self) -> str:
        return f"QueryExecutor(datasource={self.datasource.name})"
