"""Parser for the RAQ (Relational Algebra Query) language."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import ply.yacc as yacc

from relational_tables.parsing.query_lexer import QueryLexer


# ----------------------------------------------------------------------
# Expressions
# ----------------------------------------------------------------------


@dataclass
class TableRef:
    """A reference to a named table."""

    name: str


@dataclass
class AttributeRef:
    """An attribute used as the right-hand side of a comparison."""

    name: str


@dataclass
class Comparison:
    """A comparison between an attribute and a literal or another attribute."""

    attribute: str
    operator: str  # =, !=, <, <=, >, >=
    operand: Any  # literal value or AttributeRef


@dataclass
class CompoundCondition:
    """A compound condition (and/or)."""

    left: Condition
    operator: str  # and, or
    right: Condition


@dataclass
class NotCondition:
    """A negated condition."""

    condition: Condition


Condition = Comparison | CompoundCondition | NotCondition


@dataclass
class Project:
    source: Expr
    attributes: list[str]


@dataclass
class Select:
    source: Expr
    condition: Condition


@dataclass
class KeySelect:
    """Select by primary key value: ``t.select(key "a", 1)``."""

    source: Expr
    values: list[Any]


@dataclass
class Union:
    left: Expr
    right: Expr


@dataclass
class Minus:
    left: Expr
    right: Expr


@dataclass
class Join:
    """An equi-join on explicit attribute pairs."""

    left: Expr
    right: Expr
    left_attributes: list[str]
    right_attributes: list[str]
    strategy: str = "nested"  # nested, index, hash


@dataclass
class NaturalJoin:
    left: Expr
    right: Expr


Expr = TableRef | Project | Select | KeySelect | Union | Minus | Join | NaturalJoin


# ----------------------------------------------------------------------
# Statements
# ----------------------------------------------------------------------


@dataclass
class ColumnDef:
    """An attribute definition in CREATE TABLE."""

    name: str
    domain: str


@dataclass
class CreateTableQuery:
    """A CREATE TABLE statement."""

    name: str
    columns: list[ColumnDef] = field(default_factory=list)
    key: list[str] = field(default_factory=list)


@dataclass
class InsertQuery:
    """An INSERT INTO statement."""

    table: str
    values: list[Any] = field(default_factory=list)


@dataclass
class ShowTablesQuery:
    """A SHOW TABLES statement."""

    pass


@dataclass
class DescribeQuery:
    table: str


@dataclass
class SaveQuery:
    table: str


@dataclass
class LoadQuery:
    table: str


@dataclass
class IndexQuery:
    """Show the primary-key index of a table."""

    table: str


@dataclass
class AssignQuery:
    """Bind the result of an expression to a table name."""

    name: str
    expr: Expr


@dataclass
class EvalQuery:
    """Evaluate an expression and show the resulting table."""

    expr: Expr


Query = (
    CreateTableQuery
    | InsertQuery
    | ShowTablesQuery
    | DescribeQuery
    | SaveQuery
    | LoadQuery
    | IndexQuery
    | AssignQuery
    | EvalQuery
)


class QueryParser:
    """Parser for RAQ statements."""

    tokens = QueryLexer.tokens

    # Operator precedence
    precedence = (
        ("left", "OR"),
        ("left", "AND"),
        ("right", "NOT"),
    )

    def __init__(self) -> None:
        self.lexer = QueryLexer()
        self.lexer.build()
        self.parser: yacc.LRParser = None  # type: ignore

    def p_program(self, p: yacc.YaccProduction) -> None:
        """program : statement_list
                   | statement_list SEMICOLON"""
        p[0] = p[1]

    def p_statement_list_single(self, p: yacc.YaccProduction) -> None:
        """statement_list : statement"""
        p[0] = [p[1]]

    def p_statement_list_multiple(self, p: yacc.YaccProduction) -> None:
        """statement_list : statement_list SEMICOLON statement"""
        p[0] = p[1] + [p[3]]

    def p_statement(self, p: yacc.YaccProduction) -> None:
        """statement : create_table
                     | insert
                     | show_tables
                     | describe
                     | save
                     | load
                     | index
                     | assign"""
        p[0] = p[1]

    def p_statement_eval(self, p: yacc.YaccProduction) -> None:
        """statement : expr"""
        p[0] = EvalQuery(expr=p[1])

    def p_create_table(self, p: yacc.YaccProduction) -> None:
        """create_table : CREATE TABLE IDENTIFIER LPAREN column_list RPAREN KEY LPAREN name_list RPAREN"""
        p[0] = CreateTableQuery(name=p[3], columns=p[5], key=p[9])

    def p_column_list_single(self, p: yacc.YaccProduction) -> None:
        """column_list : column"""
        p[0] = [p[1]]

    def p_column_list_multiple(self, p: yacc.YaccProduction) -> None:
        """column_list : column_list COMMA column"""
        p[0] = p[1] + [p[3]]

    def p_column(self, p: yacc.YaccProduction) -> None:
        """column : IDENTIFIER IDENTIFIER"""
        p[0] = ColumnDef(name=p[1], domain=p[2])

    def p_insert(self, p: yacc.YaccProduction) -> None:
        """insert : INSERT INTO IDENTIFIER VALUES LPAREN literal_list RPAREN"""
        p[0] = InsertQuery(table=p[3], values=p[6])

    def p_show_tables(self, p: yacc.YaccProduction) -> None:
        """show_tables : SHOW TABLES"""
        p[0] = ShowTablesQuery()

    def p_describe(self, p: yacc.YaccProduction) -> None:
        """describe : DESCRIBE IDENTIFIER"""
        p[0] = DescribeQuery(table=p[2])

    def p_save(self, p: yacc.YaccProduction) -> None:
        """save : SAVE IDENTIFIER"""
        p[0] = SaveQuery(table=p[2])

    def p_load(self, p: yacc.YaccProduction) -> None:
        """load : LOAD IDENTIFIER"""
        p[0] = LoadQuery(table=p[2])

    def p_index(self, p: yacc.YaccProduction) -> None:
        """index : INDEX IDENTIFIER"""
        p[0] = IndexQuery(table=p[2])

    def p_assign(self, p: yacc.YaccProduction) -> None:
        """assign : IDENTIFIER EQ expr"""
        p[0] = AssignQuery(name=p[1], expr=p[3])

    # Expressions

    def p_expr_table(self, p: yacc.YaccProduction) -> None:
        """expr : IDENTIFIER"""
        p[0] = TableRef(name=p[1])

    def p_expr_project(self, p: yacc.YaccProduction) -> None:
        """expr : expr DOT PROJECT LPAREN name_list RPAREN"""
        p[0] = Project(source=p[1], attributes=p[5])

    def p_expr_select(self, p: yacc.YaccProduction) -> None:
        """expr : expr DOT SELECT LPAREN condition RPAREN"""
        p[0] = Select(source=p[1], condition=p[5])

    def p_expr_select_key(self, p: yacc.YaccProduction) -> None:
        """expr : expr DOT SELECT LPAREN KEY literal_list RPAREN"""
        p[0] = KeySelect(source=p[1], values=p[6])

    def p_expr_union(self, p: yacc.YaccProduction) -> None:
        """expr : expr DOT UNION LPAREN expr RPAREN"""
        p[0] = Union(left=p[1], right=p[5])

    def p_expr_minus(self, p: yacc.YaccProduction) -> None:
        """expr : expr DOT MINUS LPAREN expr RPAREN"""
        p[0] = Minus(left=p[1], right=p[5])

    def p_expr_natural_join(self, p: yacc.YaccProduction) -> None:
        """expr : expr DOT JOIN LPAREN expr RPAREN"""
        p[0] = NaturalJoin(left=p[1], right=p[5])

    def p_expr_join(self, p: yacc.YaccProduction) -> None:
        """expr : expr DOT JOIN LPAREN expr ON join_pairs RPAREN"""
        left_attrs, right_attrs = p[7]
        p[0] = Join(left=p[1], right=p[5], left_attributes=left_attrs, right_attributes=right_attrs)

    def p_expr_join_using(self, p: yacc.YaccProduction) -> None:
        """expr : expr DOT JOIN LPAREN expr ON join_pairs USING IDENTIFIER RPAREN"""
        left_attrs, right_attrs = p[7]
        p[0] = Join(
            left=p[1],
            right=p[5],
            left_attributes=left_attrs,
            right_attributes=right_attrs,
            strategy=p[9],
        )

    def p_join_pairs_single(self, p: yacc.YaccProduction) -> None:
        """join_pairs : IDENTIFIER EQ IDENTIFIER"""
        p[0] = ([p[1]], [p[3]])

    def p_join_pairs_multiple(self, p: yacc.YaccProduction) -> None:
        """join_pairs : join_pairs AND IDENTIFIER EQ IDENTIFIER"""
        left_attrs, right_attrs = p[1]
        p[0] = (left_attrs + [p[3]], right_attrs + [p[5]])

    # Conditions

    def p_condition_compound(self, p: yacc.YaccProduction) -> None:
        """condition : condition AND condition
                     | condition OR condition"""
        p[0] = CompoundCondition(left=p[1], operator=p[2].lower(), right=p[3])

    def p_condition_not(self, p: yacc.YaccProduction) -> None:
        """condition : NOT condition"""
        p[0] = NotCondition(condition=p[2])

    def p_condition_group(self, p: yacc.YaccProduction) -> None:
        """condition : LPAREN condition RPAREN"""
        p[0] = p[2]

    def p_condition_comparison(self, p: yacc.YaccProduction) -> None:
        """condition : IDENTIFIER comp_op operand"""
        p[0] = Comparison(attribute=p[1], operator=p[2], operand=p[3])

    def p_comp_op(self, p: yacc.YaccProduction) -> None:
        """comp_op : EQ
                   | NEQ
                   | LT
                   | LTE
                   | GT
                   | GTE"""
        p[0] = p[1]

    def p_operand_literal(self, p: yacc.YaccProduction) -> None:
        """operand : literal"""
        p[0] = p[1]

    def p_operand_attribute(self, p: yacc.YaccProduction) -> None:
        """operand : IDENTIFIER"""
        p[0] = AttributeRef(name=p[1])

    # Shared lists

    def p_literal(self, p: yacc.YaccProduction) -> None:
        """literal : INTEGER
                   | FLOAT
                   | STRING"""
        p[0] = p[1]

    def p_literal_list_single(self, p: yacc.YaccProduction) -> None:
        """literal_list : literal"""
        p[0] = [p[1]]

    def p_literal_list_multiple(self, p: yacc.YaccProduction) -> None:
        """literal_list : literal_list COMMA literal"""
        p[0] = p[1] + [p[3]]

    def p_name_list_single(self, p: yacc.YaccProduction) -> None:
        """name_list : IDENTIFIER"""
        p[0] = [p[1]]

    def p_name_list_multiple(self, p: yacc.YaccProduction) -> None:
        """name_list : name_list COMMA IDENTIFIER"""
        p[0] = p[1] + [p[3]]

    def p_error(self, p: yacc.YaccProduction) -> None:
        if p:
            raise SyntaxError(f"Syntax error at '{p.value}' (position {p.lexpos})")
        else:
            raise SyntaxError("Syntax error at end of input")

    def build(self, **kwargs: Any) -> None:
        """Build the parser."""
        self.parser = yacc.yacc(module=self, start="program", **kwargs)

    def parse_program(self, data: str) -> list[Query]:
        """Parse a semicolon-separated sequence of statements."""
        if self.parser is None:
            self.build(debug=False, write_tables=False)

        return self.parser.parse(data, lexer=self.lexer.lexer)

    def parse(self, data: str) -> Query:
        """Parse a single statement."""
        statements = self.parse_program(data)
        if len(statements) != 1:
            raise SyntaxError(f"Expected one statement, got {len(statements)}")
        return statements[0]
