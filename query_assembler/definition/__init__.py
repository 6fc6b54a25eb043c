"""Declarative query definitions."""

from .definition import (
    Condition,
    DefinitionError,
    QueryDefinition,
    load_query_definition,
)

__all__ = [
    "Condition",
    "DefinitionError",
    "QueryDefinition",
    "load_query_definition",
]
