"""
SQLite UndoRedo - DB Connection Utilities

Connection setup, transaction management, query helpers and schema
introspection for the SQLite databases observed by the undo manager.
"""

import sqlite3
from pathlib import Path
from contextlib import contextmanager
from typing import Any, Dict, List, Optional, Tuple, Union, Generator

from .sql_quote import quote_identifier

MEMORY_DB = ":memory:"


class DatabaseError(Exception):
    """Database helper misuse or missing schema objects"""
    pass


def get_connection(
    db_path: Optional[Union[str, Path]] = None,
    *,
    foreign_keys: bool = True,
    check_same_thread: bool = False,
    timeout: float = 30.0,
) -> sqlite3.Connection:
    """
    Open an SQLite connection

    Args:
        db_path: Database file path (None for an in-memory database)
        foreign_keys: Enable foreign key enforcement (default: True)
        check_same_thread: sqlite3 same-thread check (default: False)
        timeout: Lock wait timeout in seconds (default: 30)

    Returns:
        sqlite3.Connection: Database connection

    Note:
        - Rows are returned as sqlite3.Row (dict-style access)
        - The undo triggers are TEMP objects, so they only observe writes
          made through the connection returned here
    """
    if db_path is None:
        target = MEMORY_DB
    else:
        target = str(db_path)
        if target != MEMORY_DB:
            Path(target).parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(
        target,
        check_same_thread=check_same_thread,
        timeout=timeout,
    )
    conn.row_factory = sqlite3.Row

    if foreign_keys:
        conn.execute("PRAGMA foreign_keys = ON")

    return conn


def close_connection(conn: sqlite3.Connection) -> None:
    """
    Close a connection, ignoring errors from an already-closed handle

    Args:
        conn: Connection to close
    """
    if conn:
        try:
            conn.close()
        except sqlite3.Error:
            pass


@contextmanager
def transaction(conn: sqlite3.Connection) -> Generator[sqlite3.Connection, None, None]:
    """
    Run a block inside one explicit transaction

    Args:
        conn: Connection that must not already be inside a transaction

    Yields:
        sqlite3.Connection: The same connection, with a transaction open

    Raises:
        DatabaseError: The connection already has an open transaction

    Note:
        - Commits on normal exit
        - Rolls back on any exception, then re-raises it unchanged

    Example:
        with transaction(conn):
            conn.execute("DELETE FROM undolog WHERE seq > ?", (4,))
    """
    if conn.in_transaction:
        raise DatabaseError(
            "A transaction is already open on this connection; "
            "commit or roll back before calling the undo manager"
        )

    conn.execute("BEGIN")
    try:
        yield conn
    except BaseException:
        conn.rollback()
        raise
    else:
        conn.commit()


def execute_query(
    conn: sqlite3.Connection,
    query: str,
    params: Optional[Union[Tuple, Dict]] = None,
) -> sqlite3.Cursor:
    """
    Execute an SQL statement

    Args:
        conn: Database connection
        query: SQL text
        params: Query parameters (tuple or dict)

    Returns:
        sqlite3.Cursor: Result cursor
    """
    if params:
        return conn.execute(query, params)
    return conn.execute(query)


def fetch_one(
    conn: sqlite3.Connection,
    query: str,
    params: Optional[Union[Tuple, Dict]] = None,
) -> Optional[sqlite3.Row]:
    """
    Fetch a single row

    Returns:
        sqlite3.Row or None: First result row
    """
    cursor = execute_query(conn, query, params)
    return cursor.fetchone()


def fetch_all(
    conn: sqlite3.Connection,
    query: str,
    params: Optional[Union[Tuple, Dict]] = None,
) -> List[sqlite3.Row]:
    """
    Fetch all rows

    Returns:
        List[sqlite3.Row]: Result rows
    """
    cursor = execute_query(conn, query, params)
    return cursor.fetchall()


def fetch_scalar(
    conn: sqlite3.Connection,
    query: str,
    params: Optional[Union[Tuple, Dict]] = None,
) -> Any:
    """
    Fetch the first column of the first row

    Returns:
        The value, or None when the query returns no row
    """
    row = fetch_one(conn, query, params)
    if row is None:
        return None
    return row[0]


def table_exists(conn: sqlite3.Connection, table_name: str, *, temp: bool = False) -> bool:
    """
    Check whether a table exists

    Args:
        conn: Database connection
        table_name: Table name
        temp: Look in the temp schema instead of main

    Returns:
        bool: True if the table exists
    """
    master = "sqlite_temp_master" if temp else "sqlite_master"
    row = fetch_one(
        conn,
        f"SELECT name FROM {master} WHERE type='table' AND name=?",
        (table_name,)
    )
    return row is not None


def trigger_exists(conn: sqlite3.Connection, trigger_name: str) -> bool:
    """
    Check whether a trigger exists (main or temp schema)

    Args:
        conn: Database connection
        trigger_name: Trigger name

    Returns:
        bool: True if the trigger exists
    """
    row = fetch_one(
        conn,
        """
        SELECT name FROM sqlite_master WHERE type='trigger' AND name=?
        UNION ALL
        SELECT name FROM sqlite_temp_master WHERE type='trigger' AND name=?
        """,
        (trigger_name, trigger_name)
    )
    return row is not None


def get_table_columns(conn: sqlite3.Connection, table_name: str) -> Tuple[str, ...]:
    """
    List the column names of a table, in declaration order

    Args:
        conn: Database connection
        table_name: Table name

    Returns:
        Tuple[str, ...]: Column names

    Raises:
        DatabaseError: The table does not exist
    """
    rows = fetch_all(conn, f"PRAGMA table_info({quote_identifier(table_name)})")
    if not rows:
        raise DatabaseError(f"Table not found or has no columns: {table_name}")
    # table_info columns: cid, name, type, notnull, dflt_value, pk
    return tuple(row[1] for row in rows)


def foreign_keys_enabled(conn: sqlite3.Connection) -> bool:
    """Return True if foreign key enforcement is on for this connection"""
    value = fetch_scalar(conn, "PRAGMA foreign_keys")
    return bool(value)


def get_foreign_key_pairs(conn: sqlite3.Connection) -> List[Tuple[str, str]]:
    """
    List every (referencer, referenced) table pair in the main schema

    Self-referencing foreign keys are excluded.

    Args:
        conn: Database connection

    Returns:
        List[Tuple[str, str]]: Distinct pairs ordered by referencer
    """
    rows = fetch_all(
        conn,
        """
        SELECT DISTINCT
            m.name AS referencer,
            p."table" AS referenced
        FROM sqlite_master m
        JOIN pragma_foreign_key_list(m.name) p ON m.name != p."table"
        WHERE m.type = 'table'
        ORDER BY m.name, p."table"
        """
    )
    # positional access: callers' connections may not use sqlite3.Row
    return [(row[0], row[1]) for row in rows]
