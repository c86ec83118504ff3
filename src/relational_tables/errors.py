"""Exception hierarchy for relational table operations."""


class RelationalError(Exception):
    """Base exception for all table and algebra errors."""


class SchemaError(RelationalError):
    """Raised when a schema is malformed or names an unknown domain."""


class SchemaMismatch(RelationalError):
    """Raised when two tables are not union-compatible."""


class ArityMismatch(RelationalError):
    """Raised when a value or attribute count does not line up.

    Covers inserts whose width differs from the schema and joins whose
    attribute lists have different lengths.
    """


class TypeMismatch(RelationalError):
    """Raised when a value does not conform to its column's domain."""

    def __init__(self, attribute: str, domain: object, value: object) -> None:
        super().__init__(
            f"Value {value!r} for '{attribute}' does not conform to domain {domain}"
        )
        self.attribute = attribute
        self.domain = domain
        self.value = value


class DuplicateKey(RelationalError):
    """Raised when an insert repeats an existing primary-key value."""


class AttributeNotFound(RelationalError, KeyError):
    """Raised when a referenced attribute is not in the schema."""

    def __init__(self, attribute: str, table: str | None = None) -> None:
        where = f" in table '{table}'" if table else ""
        super().__init__(f"Attribute '{attribute}' not found{where}")
        self.attribute = attribute
        self.table = table

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return str(self.args[0])


class PersistenceFailure(RelationalError):
    """Raised when a table cannot be saved or loaded."""
