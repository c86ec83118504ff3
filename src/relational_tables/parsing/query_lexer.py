"""Lexer for the RAQ (Relational Algebra Query) language."""

import ply.lex as lex


class QueryLexer:
    """Lexer for tokenizing RAQ statements."""

    # Reserved keywords
    reserved = {
        "create": "CREATE",
        "table": "TABLE",
        "key": "KEY",
        "insert": "INSERT",
        "into": "INTO",
        "values": "VALUES",
        "show": "SHOW",
        "tables": "TABLES",
        "describe": "DESCRIBE",
        "save": "SAVE",
        "load": "LOAD",
        "index": "INDEX",
        "project": "PROJECT",
        "select": "SELECT",
        "union": "UNION",
        "minus": "MINUS",
        "join": "JOIN",
        "on": "ON",
        "using": "USING",
        "and": "AND",
        "or": "OR",
        "not": "NOT",
    }

    # Token list
    tokens = [
        "IDENTIFIER",
        "INTEGER",
        "FLOAT",
        "STRING",
        "COMMA",
        "DOT",
        "LPAREN",
        "RPAREN",
        "EQ",
        "NEQ",
        "LT",
        "LTE",
        "GT",
        "GTE",
        "SEMICOLON",
    ] + list(reserved.values())

    # Simple tokens
    t_COMMA = r","
    t_DOT = r"\."
    t_LPAREN = r"\("
    t_RPAREN = r"\)"
    t_EQ = r"="
    t_NEQ = r"!="
    t_LTE = r"<="
    t_LT = r"<"
    t_GTE = r">="
    t_GT = r">"
    t_SEMICOLON = r";"

    # Ignored characters (spaces and tabs)
    t_ignore = " \t"

    # Comments
    t_ignore_COMMENT = r"--[^\n]*"

    def __init__(self) -> None:
        self.lexer: lex.LexToken = None  # type: ignore

    def t_FLOAT(self, t: lex.LexToken) -> lex.LexToken:
        r"-?\d+\.\d+"
        t.value = float(t.value)
        return t

    def t_INTEGER(self, t: lex.LexToken) -> lex.LexToken:
        r"-?\d+"
        t.value = int(t.value)
        return t

    def t_STRING(self, t: lex.LexToken) -> lex.LexToken:
        r""""([^"\\]|\\.)*"|'([^'\\]|\\.)*'"""
        body = t.value[1:-1]
        # Only the quote characters and backslash are escapable
        t.value = (
            body.replace("\\\\", "\x00")
            .replace('\\"', '"')
            .replace("\\'", "'")
            .replace("\x00", "\\")
        )
        return t

    def t_IDENTIFIER(self, t: lex.LexToken) -> lex.LexToken:
        r"[a-zA-Z_][a-zA-Z0-9_]*"
        # Check if it's a reserved word
        t.type = self.reserved.get(t.value, "IDENTIFIER")
        return t

    def t_NEWLINE(self, t: lex.LexToken) -> None:
        r"\n+"
        t.lexer.lineno += len(t.value)

    def t_error(self, t: lex.LexToken) -> None:
        raise SyntaxError(f"Illegal character '{t.value[0]}' at position {t.lexpos}")

    def build(self, **kwargs) -> None:  # type: ignore
        """Build the lexer."""
        self.lexer = lex.lex(module=self, **kwargs)

    def input(self, data: str) -> None:
        """Set the input string to tokenize."""
        self.lexer.input(data)

    def token(self) -> lex.LexToken | None:
        """Return the next token."""
        return self.lexer.token()

    def tokenize(self, data: str) -> list[lex.LexToken]:
        """Tokenize the input and return all tokens."""
        self.input(data)
        tokens = []
        while True:
            tok = self.token()
            if tok is None:
                break
            tokens.append(tok)
        return tokens
