"""Query executor for RAQ statements."""

from __future__ import annotations

import logging
import operator
from dataclasses import dataclass, field
from typing import Any, Callable

from relational_tables.index import IndexType
from relational_tables.key import CompositeKey
from relational_tables.parsing.query_parser import (
    AssignQuery,
    AttributeRef,
    Comparison,
    CompoundCondition,
    Condition,
    CreateTableQuery,
    DescribeQuery,
    EvalQuery,
    Expr,
    IndexQuery,
    InsertQuery,
    Join,
    KeySelect,
    LoadQuery,
    Minus,
    NaturalJoin,
    NotCondition,
    Project,
    Query,
    SaveQuery,
    Select,
    ShowTablesQuery,
    TableRef,
    Union,
)
from relational_tables.schema import Schema
from relational_tables.storage import TableStore
from relational_tables.table import Predicate, Table

logger = logging.getLogger(__name__)


COMPARISON_OPERATORS: dict[str, Callable[[Any, Any], bool]] = {
    "=": operator.eq,
    "!=": operator.ne,
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
}


@dataclass
class QueryResult:
    """Result of a statement execution."""

    message: str | None = None


@dataclass
class TableResult(QueryResult):
    """Result carrying a table to display."""

    table: Table | None = None


@dataclass
class IndexResult(QueryResult):
    """Result of an INDEX statement."""

    table: Table | None = None


@dataclass
class TablesResult(QueryResult):
    """Result of SHOW TABLES: session tables and stored table names."""

    tables: list[tuple[str, int]] = field(default_factory=list)
    stored: list[str] = field(default_factory=list)


def compile_condition(condition: Condition, schema: Schema) -> Predicate:
    """Turn a parsed condition into a predicate over rows of ``schema``.

    Raises:
        AttributeNotFound: If the condition names an unknown attribute.
    """
    if isinstance(condition, CompoundCondition):
        left = compile_condition(condition.left, schema)
        right = compile_condition(condition.right, schema)
        if condition.operator == "and":
            return lambda row: left(row) and right(row)
        return lambda row: left(row) or right(row)

    if isinstance(condition, NotCondition):
        inner = compile_condition(condition.condition, schema)
        return lambda row: not inner(row)

    position = schema.col(condition.attribute)
    compare = COMPARISON_OPERATORS[condition.operator]
    if isinstance(condition.operand, AttributeRef):
        other = schema.col(condition.operand.name)
        return lambda row: compare(row[position], row[other])
    value = condition.operand
    return lambda row: compare(row[position], value)


class QueryExecutor:
    """Executes RAQ statements against a session of named tables."""

    def __init__(self, store: TableStore, index_type: IndexType = Table.DEFAULT_INDEX) -> None:
        self.store = store
        self.index_type = index_type
        self.tables: dict[str, Table] = {}

    def execute(self, query: Query) -> QueryResult:
        """Execute a statement and return its result."""
        if isinstance(query, CreateTableQuery):
            return self._execute_create(query)
        elif isinstance(query, InsertQuery):
            return self._execute_insert(query)
        elif isinstance(query, ShowTablesQuery):
            return self._execute_show_tables()
        elif isinstance(query, DescribeQuery):
            return self._execute_describe(query)
        elif isinstance(query, SaveQuery):
            path = self.get_table(query.table).save(self.store)
            return QueryResult(message=f"Saved {query.table} to {path}")
        elif isinstance(query, LoadQuery):
            table = Table.load(query.table, self.store)
            self.tables[table.name] = table
            return QueryResult(message=f"Loaded {table.name} ({len(table)} rows)")
        elif isinstance(query, IndexQuery):
            return IndexResult(table=self.get_table(query.table))
        elif isinstance(query, AssignQuery):
            return self._execute_assign(query)
        elif isinstance(query, EvalQuery):
            return TableResult(table=self.evaluate(query.expr))
        else:
            raise ValueError(f"Unknown query type: {type(query)}")

    def get_table(self, name: str) -> Table:
        table = self.tables.get(name)
        if table is None:
            raise ValueError(f"Unknown table: {name}")
        return table

    def _execute_create(self, query: CreateTableQuery) -> QueryResult:
        if query.name in self.tables:
            raise ValueError(f"Table '{query.name}' already exists")

        table = Table(
            query.name,
            [c.name for c in query.columns],
            [c.domain for c in query.columns],
            query.key,
            index_type=self.index_type,
        )
        self.tables[table.name] = table
        return QueryResult(message=f"Created table {table.name} ({table.schema.describe()})")

    def _execute_insert(self, query: InsertQuery) -> QueryResult:
        table = self.get_table(query.table)
        position = table.insert(query.values)
        return QueryResult(message=f"Inserted into {table.name} at row {position}")

    def _execute_show_tables(self) -> TablesResult:
        return TablesResult(
            tables=[(name, len(table)) for name, table in sorted(self.tables.items())],
            stored=self.store.list_tables(),
        )

    def _execute_describe(self, query: DescribeQuery) -> QueryResult:
        table = self.get_table(query.table)
        return QueryResult(
            message=(
                f"{table.name}: {table.schema.describe()} "
                f"[key: {' '.join(table.key)}; index: {table.index_type.value}; rows: {len(table)}]"
            )
        )

    def _execute_assign(self, query: AssignQuery) -> QueryResult:
        result = self.evaluate(query.expr)
        table = Table.from_schema(query.name, result.schema, result.rows, result.index_type)
        self.tables[query.name] = table
        return QueryResult(message=f"{query.name} = {len(table)} row{'s' if len(table) != 1 else ''}")

    def evaluate(self, expr: Expr) -> Table:
        """Evaluate an algebra expression to a table."""
        if isinstance(expr, TableRef):
            return self.get_table(expr.name)
        elif isinstance(expr, Project):
            return self.evaluate(expr.source).project(expr.attributes)
        elif isinstance(expr, Select):
            source = self.evaluate(expr.source)
            return source.select(compile_condition(expr.condition, source.schema))
        elif isinstance(expr, KeySelect):
            return self.evaluate(expr.source).select(CompositeKey(expr.values))
        elif isinstance(expr, Union):
            return self.evaluate(expr.left).union(self.evaluate(expr.right))
        elif isinstance(expr, Minus):
            return self.evaluate(expr.left).minus(self.evaluate(expr.right))
        elif isinstance(expr, NaturalJoin):
            return self.evaluate(expr.left).natural_join(self.evaluate(expr.right))
        elif isinstance(expr, Join):
            return self._evaluate_join(expr)
        else:
            raise ValueError(f"Unknown expression type: {type(expr)}")

    def _evaluate_join(self, expr: Join) -> Table:
        left = self.evaluate(expr.left)
        right = self.evaluate(expr.right)
        strategies = {
            "nested": left.join,
            "index": left.i_join,
            "hash": left.h_join,
        }
        join = strategies.get(expr.strategy)
        if join is None:
            raise ValueError(f"Unknown join strategy '{expr.strategy}' (expected nested, index or hash)")
        logger.debug("join strategy: %s", expr.strategy)
        return join(expr.left_attributes, expr.right_attributes, right)
