"""
SQLite UndoRedo - DB Utility Tests

utils/db.py: connections, transactions and schema introspection.
"""

import sqlite3
import tempfile
from pathlib import Path

import pytest

from sqlite_undoredo.utils.db import (
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


@pytest.fixture
def conn():
    conn = get_connection()
    conn.executescript("""
        CREATE TABLE parent (id INTEGER PRIMARY KEY, name TEXT);
        CREATE TABLE child (id INTEGER PRIMARY KEY, parent_id INTEGER REFERENCES parent(id));
        CREATE TABLE node (id INTEGER PRIMARY KEY, up INTEGER REFERENCES node(id));
    """)
    yield conn
    close_connection(conn)


def test_get_connection_file():
    with tempfile.TemporaryDirectory() as tmp:
        db_path = Path(tmp) / "sub" / "test.db"
        conn = get_connection(db_path)
        try:
            assert fetch_scalar(conn, "SELECT 1") == 1
            assert foreign_keys_enabled(conn)
            assert isinstance(fetch_one(conn, "SELECT 1 AS one"), sqlite3.Row)
        finally:
            close_connection(conn)
        assert db_path.exists()


def test_get_connection_without_foreign_keys():
    conn = get_connection(foreign_keys=False)
    assert not foreign_keys_enabled(conn)
    close_connection(conn)


def test_transaction_commit(conn):
    with transaction(conn):
        execute_query(conn, "INSERT INTO parent (id, name) VALUES (?, ?)", (1, "Alice"))
        execute_query(conn, "INSERT INTO parent (id, name) VALUES (?, ?)", (2, "Bob"))

    assert not conn.in_transaction
    rows = fetch_all(conn, "SELECT name FROM parent ORDER BY id")
    assert [row["name"] for row in rows] == ["Alice", "Bob"]


def test_transaction_rollback(conn):
    with pytest.raises(ValueError):
        with transaction(conn):
            execute_query(conn, "INSERT INTO parent (id, name) VALUES (?, ?)", (1, "Alice"))
            raise ValueError("Intentional error")

    assert not conn.in_transaction
    assert fetch_scalar(conn, "SELECT COUNT(*) FROM parent") == 0


def test_transaction_engine_error_propagates(conn):
    with pytest.raises(sqlite3.IntegrityError):
        with transaction(conn):
            execute_query(conn, "INSERT INTO parent (id, name) VALUES (1, 'a')")
            execute_query(conn, "INSERT INTO parent (id, name) VALUES (1, 'b')")

    assert fetch_scalar(conn, "SELECT COUNT(*) FROM parent") == 0


def test_transaction_refuses_nesting(conn):
    conn.execute("INSERT INTO parent (id, name) VALUES (1, 'a')")
    assert conn.in_transaction

    with pytest.raises(DatabaseError):
        with transaction(conn):
            pass

    # the caller's transaction is untouched
    assert conn.in_transaction
    conn.rollback()


def test_table_exists(conn):
    assert table_exists(conn, "parent")
    assert not table_exists(conn, "missing")
    conn.execute("CREATE TEMP TABLE scratch (x)")
    assert table_exists(conn, "scratch", temp=True)
    assert not table_exists(conn, "scratch")


def test_trigger_exists(conn):
    assert not trigger_exists(conn, "trg")
    conn.execute("CREATE TEMP TRIGGER trg AFTER INSERT ON parent BEGIN SELECT 1; END")
    assert trigger_exists(conn, "trg")


def test_get_table_columns(conn):
    assert get_table_columns(conn, "parent") == ("id", "name")
    with pytest.raises(DatabaseError):
        get_table_columns(conn, "missing")


def test_get_foreign_key_pairs(conn):
    # self references are not pairs
    assert get_foreign_key_pairs(conn) == [("child", "parent")]


def test_get_foreign_key_pairs_plain_rows():
    conn = sqlite3.connect(":memory:")
    conn.execute("CREATE TABLE a (id INTEGER PRIMARY KEY)")
    conn.execute("CREATE TABLE b (a_id INTEGER REFERENCES a(id))")
    assert get_foreign_key_pairs(conn) == [("b", "a")]
    conn.close()
