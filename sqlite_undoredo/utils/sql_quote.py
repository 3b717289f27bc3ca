"""
SQLite UndoRedo - SQL Quoting

Quoting routines shared by every SQL builder in the package.

Generated trigger bodies embed table and column names twice: once as
identifiers inside the trigger itself, and once inside the text of the
inverse statement that the trigger writes to the undo log. Both paths go
through the functions below so that a name containing quotes can never
break out of the generated SQL.

Usage:
    from sqlite_undoredo.utils.sql_quote import quote_identifier, quote_literal

    quote_identifier('my "odd" table')   # '"my ""odd"" table"'
    quote_literal("it's")                # "'it''s'"
"""

from typing import Iterable, List, Optional


class QuoteError(ValueError):
    """Raised when a value cannot be safely embedded in SQL text"""
    pass


def _check_text(value: str, kind: str) -> str:
    if not isinstance(value, str):
        raise QuoteError(f"{kind} must be a string, got {type(value).__name__}")
    # SQLite truncates statement text at NUL
    if "\x00" in value:
        raise QuoteError(f"{kind} must not contain NUL characters: {value!r}")
    return value


def quote_identifier(name: str) -> str:
    """
    Quote an SQL identifier (table, column, trigger name)

    Args:
        name: Raw identifier

    Returns:
        str: Identifier wrapped in double quotes, inner double quotes doubled

    Raises:
        QuoteError: Empty name, non-string, or NUL character
    """
    _check_text(name, "Identifier")
    if not name:
        raise QuoteError("Identifier must not be empty")
    return '"' + name.replace('"', '""') + '"'


def quote_literal(value: Optional[str]) -> str:
    """
    Quote a text value as an SQL string literal

    Args:
        value: Text to embed (None becomes the NULL keyword)

    Returns:
        str: Literal wrapped in single quotes, inner single quotes doubled

    Raises:
        QuoteError: Non-string value or NUL character

    Example:
        >>> quote_literal("it's")
        "'it''s'"
    """
    if value is None:
        return "NULL"
    _check_text(value, "Literal")
    return "'" + value.replace("'", "''") + "'"


def concat_sql(parts: Iterable[str]) -> str:
    """
    Join SQL expressions with the || concatenation operator

    Args:
        parts: Already-quoted SQL expressions

    Returns:
        str: A single concatenation expression
    """
    items: List[str] = [p for p in parts if p]
    if not items:
        return "''"
    return "||".join(items)
