"""Tests for the RAQ lexer and parser."""

import pytest

from relational_tables.parsing.query_lexer import QueryLexer
from relational_tables.parsing.query_parser import (
    AssignQuery,
    AttributeRef,
    Comparison,
    CompoundCondition,
    CreateTableQuery,
    DescribeQuery,
    EvalQuery,
    IndexQuery,
    InsertQuery,
    Join,
    KeySelect,
    LoadQuery,
    Minus,
    NaturalJoin,
    NotCondition,
    Project,
    QueryParser,
    SaveQuery,
    Select,
    ShowTablesQuery,
    TableRef,
    Union,
)


@pytest.fixture
def parser():
    return QueryParser()


class TestLexer:
    """Tests for the RAQ lexer."""

    def test_literals(self):
        """Test integer, float and string literal tokens."""
        lexer = QueryLexer()
        lexer.build()
        tokens = lexer.tokenize('1977 -5 2.5 "Star_Wars" \'x\'')
        assert [t.type for t in tokens] == ["INTEGER", "INTEGER", "FLOAT", "STRING", "STRING"]
        assert [t.value for t in tokens] == [1977, -5, 2.5, "Star_Wars", "x"]

    def test_string_escapes(self):
        """Test escaped quotes and backslashes in strings."""
        lexer = QueryLexer()
        lexer.build()
        tokens = lexer.tokenize(r'"say \"hi\" \\ bye"')
        assert tokens[0].value == 'say "hi" \\ bye'

    def test_keywords_and_identifiers(self):
        """Test keywords, identifiers and trailing comments."""
        lexer = QueryLexer()
        lexer.build()
        tokens = lexer.tokenize("movie.project(title) -- trailing comment")
        assert [t.type for t in tokens] == [
            "IDENTIFIER", "DOT", "PROJECT", "LPAREN", "IDENTIFIER", "RPAREN",
        ]

    def test_illegal_character(self):
        """Test that an unknown character is a syntax error."""
        lexer = QueryLexer()
        lexer.build()
        with pytest.raises(SyntaxError, match="Illegal character"):
            lexer.tokenize("movie @ cinema")


class TestStatements:
    """Tests for parsing statements."""

    def test_create_table(self, parser):
        """Test parsing CREATE TABLE with a composite key."""
        query = parser.parse(
            "create table movie (title String, year Integer, genre String) key (title, year)"
        )
        assert isinstance(query, CreateTableQuery)
        assert query.name == "movie"
        assert [(c.name, c.domain) for c in query.columns] == [
            ("title", "String"),
            ("year", "Integer"),
            ("genre", "String"),
        ]
        assert query.key == ["title", "year"]

    def test_insert(self, parser):
        """Test parsing INSERT INTO with mixed literals."""
        query = parser.parse('insert into movie values ("Star_Wars", 1977, 124.5)')
        assert isinstance(query, InsertQuery)
        assert query.table == "movie"
        assert query.values == ["Star_Wars", 1977, 124.5]

    def test_simple_commands(self, parser):
        """Test the one-word and one-name commands."""
        assert isinstance(parser.parse("show tables"), ShowTablesQuery)
        assert parser.parse("describe movie") == DescribeQuery(table="movie")
        assert parser.parse("save movie") == SaveQuery(table="movie")
        assert parser.parse("load movie") == LoadQuery(table="movie")
        assert parser.parse("index movie") == IndexQuery(table="movie")

    def test_assign(self, parser):
        """Test binding an expression to a name."""
        query = parser.parse("both = movie.union(cinema)")
        assert query == AssignQuery(
            name="both",
            expr=Union(left=TableRef("movie"), right=TableRef("cinema")),
        )

    def test_trailing_semicolon(self, parser):
        """Test that a trailing semicolon is allowed."""
        assert parser.parse("show tables;") == ShowTablesQuery()

    def test_program(self, parser):
        """Test parsing several statements at once."""
        statements = parser.parse_program("describe a; describe b;")
        assert statements == [DescribeQuery(table="a"), DescribeQuery(table="b")]

    def test_parse_rejects_multiple(self, parser):
        """Test that parse expects exactly one statement."""
        with pytest.raises(SyntaxError, match="Expected one statement"):
            parser.parse("describe a; describe b")

    def test_syntax_error(self, parser):
        """Test that malformed input raises SyntaxError."""
        with pytest.raises(SyntaxError):
            parser.parse("create movie")

    def test_end_of_input(self, parser):
        """Test the error for input that stops early."""
        with pytest.raises(SyntaxError, match="end of input"):
            parser.parse("movie.project(")


class TestExpressions:
    """Tests for parsing algebra expressions."""

    def test_table_ref(self, parser):
        """Test that a bare name evaluates a table."""
        assert parser.parse("movie") == EvalQuery(expr=TableRef("movie"))

    def test_project(self, parser):
        """Test parsing a projection."""
        query = parser.parse("movie.project(title, year)")
        assert query.expr == Project(source=TableRef("movie"), attributes=["title", "year"])

    def test_chained(self, parser):
        """Test that operators chain left to right."""
        query = parser.parse("movie.minus(cinema).project(title)")
        assert query.expr == Project(
            source=Minus(left=TableRef("movie"), right=TableRef("cinema")),
            attributes=["title"],
        )

    def test_select_comparison(self, parser):
        """Test parsing a comparison against a literal."""
        query = parser.parse("movie.select(year >= 1980)")
        assert query.expr == Select(
            source=TableRef("movie"),
            condition=Comparison(attribute="year", operator=">=", operand=1980),
        )

    def test_select_attribute_operand(self, parser):
        """Test parsing a comparison between two attributes."""
        query = parser.parse("t.select(a != b)")
        assert query.expr.condition == Comparison("a", "!=", AttributeRef("b"))

    def test_condition_precedence(self, parser):
        """and binds tighter than or; not binds tightest."""
        query = parser.parse('movie.select(not genre = "x" or year < 1980 and length > 100)')
        condition = query.expr.condition
        assert isinstance(condition, CompoundCondition)
        assert condition.operator == "or"
        assert isinstance(condition.left, NotCondition)
        assert condition.right.operator == "and"

    def test_condition_grouping(self, parser):
        """Test that parentheses override precedence."""
        query = parser.parse("t.select((a = 1 or a = 2) and b = 3)")
        condition = query.expr.condition
        assert condition.operator == "and"
        assert condition.left.operator == "or"

    def test_key_select(self, parser):
        """Test parsing a select by key values."""
        query = parser.parse('movie.select(key "Rocky", 1985)')
        assert query.expr == KeySelect(source=TableRef("movie"), values=["Rocky", 1985])

    def test_natural_join(self, parser):
        """Test that join without ON is a natural join."""
        query = parser.parse("movie.join(starsIn)")
        assert query.expr == NaturalJoin(left=TableRef("movie"), right=TableRef("starsIn"))

    def test_equi_join(self, parser):
        """Test parsing join attribute pairs."""
        query = parser.parse("movie.join(studio on studioName = name and producerNo = presNo)")
        assert query.expr == Join(
            left=TableRef("movie"),
            right=TableRef("studio"),
            left_attributes=["studioName", "producerNo"],
            right_attributes=["name", "presNo"],
        )

    def test_join_strategy(self, parser):
        """Test choosing a join strategy with USING."""
        query = parser.parse("movie.join(studio on studioName = name using hash)")
        assert query.expr.strategy == "hash"

    def test_nested_expression_argument(self, parser):
        """Test an expression as an operator argument."""
        query = parser.parse("movie.union(cinema.select(year = 1999))")
        assert isinstance(query.expr.right, Select)
