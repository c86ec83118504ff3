"""Interactive REPL for RAQ (Relational Algebra Query) statements."""

from __future__ import annotations

import argparse
import logging
import readline  # noqa: F401 - enables line editing in input()
import sys
from pathlib import Path

from relational_tables.display import format_index, format_table
from relational_tables.errors import RelationalError
from relational_tables.executor import IndexResult, QueryExecutor, QueryResult, TableResult, TablesResult
from relational_tables.index import IndexType
from relational_tables.parsing.query_parser import QueryParser
from relational_tables.storage import TableStore


def _split_statements(content: str) -> list[str]:
    """Split content into statements on semicolons outside string literals."""
    statements = []
    current = []
    quote: str | None = None
    escape_next = False

    for ch in content:
        if escape_next:
            current.append(ch)
            escape_next = False
            continue

        if quote is not None:
            if ch == "\\":
                escape_next = True
            elif ch == quote:
                quote = None
            current.append(ch)
            continue

        if ch in ("'", '"'):
            quote = ch
            current.append(ch)
        elif ch == ";":
            stmt = "".join(current).strip()
            if stmt:
                statements.append(stmt)
            current = []
        else:
            current.append(ch)

    stmt = "".join(current).strip()
    if stmt:
        statements.append(stmt)

    return statements


def _strip_comments(content: str) -> str:
    """Drop lines starting with ``--``."""
    return "\n".join(line for line in content.split("\n") if not line.strip().startswith("--"))


def has_balanced_parens(line: str) -> bool:
    """Check if parentheses outside string literals are balanced."""
    count = 0
    quote: str | None = None
    escape = False
    for char in line:
        if escape:
            escape = False
            continue
        if quote is not None:
            if char == "\\":
                escape = True
            elif char == quote:
                quote = None
            continue
        if char in ("'", '"'):
            quote = char
        elif char == "(":
            count += 1
        elif char == ")":
            count -= 1
    return count <= 0


def print_result(result: QueryResult) -> None:
    """Print a statement result."""
    if isinstance(result, TableResult) and result.table is not None:
        print(format_table(result.table))
        return

    if isinstance(result, IndexResult) and result.table is not None:
        print(format_index(result.table))
        return

    if isinstance(result, TablesResult):
        if not result.tables and not result.stored:
            print("(no tables)")
            return
        for name, count in result.tables:
            print(f"  {name} ({count} row{'s' if count != 1 else ''})")
        unloaded = [name for name in result.stored if name not in dict(result.tables)]
        if unloaded:
            print(f"  stored, not loaded: {', '.join(unloaded)}")
        return

    if result.message:
        print(result.message)


def print_help() -> None:
    """Print help text."""
    print("""
Statements (terminate with ';' in files, optional at the prompt):

  create table NAME (attr Domain, ...) key (attr, ...)
      Domains: Byte Short Integer Long Float Double Character String
  insert into NAME values (literal, ...)
  show tables
  describe NAME
  index NAME                        Show the primary-key index
  save NAME                         Write NAME to the store directory
  load NAME                         Read NAME from the store directory
  NAME = EXPR                       Bind the result of EXPR to NAME
  EXPR                              Evaluate and print EXPR

Expressions (operators chain left to right):

  t.project(a, b)
  t.select(a = 1 and not (b < 2.5 or c != "x"))
  t.select(key "Star_Wars", 1977)
  t.union(u)    t.minus(u)
  t.join(u)                         Natural join on common attributes
  t.join(u on a = b and c = d)      Equi-join (nested loop)
  t.join(u on a = b using hash)     Strategies: nested, index, hash

Other commands: help, exit, quit
""")


def _make_executor(data_dir: Path | None, index_type: IndexType) -> QueryExecutor:
    return QueryExecutor(TableStore(data_dir), index_type)


def run_repl(data_dir: Path | None, index_type: IndexType = IndexType.NO_INDEX) -> int:
    """Run the interactive REPL."""
    executor = _make_executor(data_dir, index_type)
    parser = QueryParser()

    print("RAQ REPL - Relational Algebra Query Language")
    print(f"Store directory: {executor.store.data_dir}")
    print("Type 'help' for commands, 'exit' to quit.\n")

    history_file = Path.home() / ".raq_history"
    try:
        readline.read_history_file(history_file)
    except (FileNotFoundError, OSError):
        pass

    try:
        while True:
            try:
                line = input("raq> ").strip()
                while not has_balanced_parens(line):
                    line += " " + input("...> ").strip()
            except EOFError:
                print()
                break

            if not line:
                continue

            if line.lower() in ("exit", "quit"):
                break
            if line.lower() == "help":
                print_help()
                continue

            for statement in _split_statements(line):
                try:
                    print_result(executor.execute(parser.parse(statement)))
                except SyntaxError as e:
                    print(f"Syntax error: {e}")
                except (RelationalError, ValueError, TypeError) as e:
                    print(f"Error: {e}")
    except KeyboardInterrupt:
        print()
    finally:
        try:
            readline.write_history_file(history_file)
        except OSError:
            pass

    return 0


def run_file(
    file_path: Path,
    data_dir: Path | None,
    verbose: bool = False,
    index_type: IndexType = IndexType.NO_INDEX,
) -> int:
    """Execute statements from a file.

    Args:
        file_path: Path to the file containing statements
        data_dir: Optional store directory
        verbose: If True, print each statement before executing
        index_type: Index strategy for tables created by the script

    Returns:
        0 on success, 1 on error
    """
    try:
        content = file_path.read_text()
    except OSError as e:
        print(f"Error reading file: {e}", file=sys.stderr)
        return 1

    statements = _split_statements(_strip_comments(content))
    if not statements:
        print("No statements found in file", file=sys.stderr)
        return 1

    return run_statements(statements, _make_executor(data_dir, index_type), verbose)


def run_statements(statements: list[str], executor: QueryExecutor, verbose: bool = False) -> int:
    """Execute statements in order, stopping at the first error."""
    parser = QueryParser()
    for statement in statements:
        if verbose:
            print(f"raq> {statement};")
        try:
            print_result(executor.execute(parser.parse(statement)))
        except SyntaxError as e:
            print(f"Syntax error: {e}", file=sys.stderr)
            return 1
        except (RelationalError, ValueError, TypeError) as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    arg_parser = argparse.ArgumentParser(
        description="Interactive REPL for the Relational Algebra Query language"
    )
    arg_parser.add_argument(
        "data_dir",
        type=Path,
        nargs="?",
        default=None,
        help=f"Directory for saved tables (default: {TableStore.DEFAULT_DIR})",
    )
    arg_parser.add_argument(
        "-c", "--command",
        type=str,
        help="Execute statements and exit",
    )
    arg_parser.add_argument(
        "-f", "--file",
        type=Path,
        help="Execute statements from a file and exit",
    )
    arg_parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Print each statement before executing (for -f/--file)",
    )
    arg_parser.add_argument(
        "--index",
        choices=[t.value for t in IndexType],
        default=IndexType.NO_INDEX.value,
        help="Primary-key index for tables created in this session",
    )
    arg_parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level; INFO echoes DDL/DML/RA operations",
    )

    args = arg_parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(levelname)s %(name)s: %(message)s",
    )
    index_type = IndexType(args.index)

    if args.file:
        if not args.file.exists():
            print(f"Error: File not found: {args.file}", file=sys.stderr)
            return 1
        return run_file(args.file, args.data_dir, args.verbose, index_type)

    if args.command:
        statements = _split_statements(args.command)
        return run_statements(statements, _make_executor(args.data_dir, index_type), args.verbose)

    return run_repl(args.data_dir, index_type)


if __name__ == "__main__":
    sys.exit(main())
