"""Relational Tables - an in-memory relational algebra engine."""

from relational_tables.errors import (
    ArityMismatch,
    AttributeNotFound,
    DuplicateKey,
    PersistenceFailure,
    RelationalError,
    SchemaError,
    SchemaMismatch,
    TypeMismatch,
)
from relational_tables.index import HashIndex, Index, IndexType, NoIndex, OrderedIndex
from relational_tables.key import CompositeKey
from relational_tables.schema import Schema
from relational_tables.storage import TableStore
from relational_tables.table import Table
from relational_tables.types import Domain

__all__ = [
    # Main API
    "Table",
    "Schema",
    "Domain",
    "CompositeKey",
    # Indexes
    "Index",
    "IndexType",
    "NoIndex",
    "HashIndex",
    "OrderedIndex",
    # Storage
    "TableStore",
    # Errors
    "RelationalError",
    "SchemaError",
    "SchemaMismatch",
    "ArityMismatch",
    "TypeMismatch",
    "DuplicateKey",
    "AttributeNotFound",
    "PersistenceFailure",
]

__version__ = "0.1.0"
