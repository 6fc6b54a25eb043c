"""Query execution."""

from .executor import ProblemsPersistingError, QueryExecutor

__all__ = ["ProblemsPersistingError", "QueryExecutor"]
