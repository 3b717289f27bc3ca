"""
SQLite UndoRedo - Utilities

Database helpers and SQL quoting shared by the undo manager.
"""

from .db import (
    get_connection,
    close_connection,
    transaction,
    execute_query,
    fetch_one,
    fetch_all,
    fetch_scalar,
    table_exists,
    trigger_exists,
    get_table_columns,
    foreign_keys_enabled,
    get_foreign_key_pairs,
    DatabaseError,
)
from .sql_quote import (
    quote_identifier,
    quote_literal,
    concat_sql,
    QuoteError,
)

__all__ = [
    # Database
    "get_connection",
    "close_connection",
    "transaction",
    "execute_query",
    "fetch_one",
    "fetch_all",
    "fetch_scalar",
    "table_exists",
    "trigger_exists",
    "get_table_columns",
    "foreign_keys_enabled",
    "get_foreign_key_pairs",
    "DatabaseError",
    # Quoting
    "quote_identifier",
    "quote_literal",
    "concat_sql",
    "QuoteError",
]
