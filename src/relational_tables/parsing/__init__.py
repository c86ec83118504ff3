"""Parsing module for the RAQ language."""

from relational_tables.parsing.query_parser import (
    EvalQuery,
    QueryParser,
)

__all__ = [
    "EvalQuery",
    "QueryParser",
]
