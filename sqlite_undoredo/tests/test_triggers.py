"""
SQLite UndoRedo - Trigger Generator Tests

undo/triggers.py: generated text and the inverse statements the triggers
log when they fire.
"""

import pytest

from sqlite_undoredo import UndoRedoManager
from sqlite_undoredo.undo.triggers import (
    trigger_name,
    insert_trigger_sql,
    update_trigger_sql,
    delete_trigger_sql,
    create_trigger_statements,
    drop_trigger_statements,
)
from sqlite_undoredo.utils.db import (
    get_connection,
    close_connection,
    fetch_all,
    trigger_exists,
)


@pytest.fixture
def conn():
    conn = get_connection()
    conn.execute("CREATE TABLE t (a INTEGER, b TEXT)")
    conn.execute("CREATE TEMP TABLE undolog (seq INTEGER PRIMARY KEY, sql TEXT)")
    for sql in create_trigger_statements("t", ("a", "b"), "undolog"):
        conn.execute(sql)
    conn.commit()
    yield conn
    close_connection(conn)


def logged(conn):
    return [row[0] for row in fetch_all(conn, "SELECT sql FROM undolog ORDER BY seq")]


class TestTriggerNames:

    def test_trigger_name(self):
        assert trigger_name("", "tbl1", "i") == "_tbl1_it"
        assert trigger_name("doc_", "tbl1", "u") == "_doc_tbl1_ut"
        assert trigger_name("doc_", "tbl1", "d") == "_doc_tbl1_dt"

    def test_unknown_kind(self):
        with pytest.raises(ValueError):
            trigger_name("", "tbl1", "x")


class TestGeneratedText:

    def test_insert_trigger(self):
        assert insert_trigger_sql("tbl1", "undolog") == (
            'CREATE TEMP TRIGGER "_tbl1_it" AFTER INSERT ON "tbl1" BEGIN\n'
            '  INSERT INTO "undolog" VALUES(NULL,\'DELETE FROM "tbl1" WHERE rowid=\'||new.rowid);\n'
            'END'
        )

    def test_update_trigger_guard(self):
        sql = update_trigger_sql("t", ["a", "b"], "undolog")
        assert 'AFTER UPDATE ON "t" WHEN ((old."a" IS NOT new."a") OR (old."b" IS NOT new."b"))' in sql
        assert "quote(old.\"a\")" in sql
        assert "quote(old.\"b\")" in sql

    def test_delete_trigger_fires_before(self):
        sql = delete_trigger_sql("t", ["a"], "undolog", "p_")
        assert sql.startswith('CREATE TEMP TRIGGER "_p_t_dt" BEFORE DELETE ON "t"')

    def test_deterministic(self):
        first = create_trigger_statements("t", ("a", "b"), "x_undolog", "x_")
        second = create_trigger_statements("t", ("a", "b"), "x_undolog", "x_")
        assert first == second

    def test_no_columns(self):
        with pytest.raises(ValueError):
            update_trigger_sql("t", [], "undolog")
        with pytest.raises(ValueError):
            delete_trigger_sql("t", [], "undolog")

    def test_drop_statements(self):
        assert drop_trigger_statements("t", "p_") == [
            'DROP TRIGGER IF EXISTS "_p_t_it"',
            'DROP TRIGGER IF EXISTS "_p_t_ut"',
            'DROP TRIGGER IF EXISTS "_p_t_dt"',
        ]


class TestLoggedStatements:
    """Statements written to the log when the triggers fire"""

    def test_insert_logs_delete(self, conn):
        conn.execute("INSERT INTO t(a, b) VALUES (1, 'x')")
        assert logged(conn) == ['DELETE FROM "t" WHERE rowid=1']

    def test_update_logs_old_values(self, conn):
        conn.execute("INSERT INTO t(a, b) VALUES (1, 'x')")
        conn.execute("UPDATE t SET a=2")
        assert logged(conn)[1] == 'UPDATE "t" SET "a"=1,"b"=\'x\' WHERE rowid=1'

    def test_update_logs_null(self, conn):
        conn.execute("INSERT INTO t(a, b) VALUES (NULL, 'it''s')")
        conn.execute("UPDATE t SET a=5")
        assert logged(conn)[1] == 'UPDATE "t" SET "a"=NULL,"b"=\'it\'\'s\' WHERE rowid=1'

    def test_noop_update_not_logged(self, conn):
        conn.execute("INSERT INTO t(a, b) VALUES (NULL, 'x')")
        conn.execute("UPDATE t SET a=NULL, b='x'")
        assert len(logged(conn)) == 1

    def test_delete_logs_insert(self, conn):
        conn.execute("INSERT INTO t(a, b) VALUES (7, NULL)")
        conn.execute("DELETE FROM t")
        assert logged(conn)[1] == 'INSERT INTO "t"(rowid,"a","b") VALUES(1,7,NULL)'

    def test_rowid_alias_update(self):
        """Changing an INTEGER PRIMARY KEY is undone at the row's new position"""
        conn = get_connection()
        conn.execute("CREATE TABLE k (id INTEGER PRIMARY KEY, v TEXT)")
        conn.execute("INSERT INTO k(id, v) VALUES (1, 'a')")
        conn.commit()
        m = UndoRedoManager(["k"], conn)

        conn.execute("UPDATE k SET id=9 WHERE id=1")
        conn.commit()
        m.barrier()
        m.undo()

        assert [tuple(r) for r in fetch_all(conn, "SELECT id, v FROM k")] == [(1, "a")]
        m.close()
        close_connection(conn)


class TestAwkwardNames:
    """Quotes in table and column names cannot break the generated SQL"""

    def test_quoted_identifiers(self):
        conn = get_connection()
        conn.execute('CREATE TABLE "we""ird \'t\'" ("col\'1" TEXT, "x""y" INTEGER)')
        conn.commit()
        table = 'we"ird \'t\''

        m = UndoRedoManager([table], conn, "odd")
        assert trigger_exists(conn, trigger_name("odd_", table, "u"))

        conn.execute('INSERT INTO "we""ird \'t\'" VALUES (?, ?)', ("v'1", 1))
        conn.commit()
        m.barrier()
        conn.execute('UPDATE "we""ird \'t\'" SET "col\'1"=?', ("v2",))
        conn.commit()
        m.barrier()
        conn.execute('DELETE FROM "we""ird \'t\'"')
        conn.commit()
        m.barrier()

        m.undo()
        m.undo()
        rows = [tuple(r) for r in fetch_all(conn, 'SELECT * FROM "we""ird \'t\'"')]
        assert rows == [("v'1", 1)]

        m.undo()
        assert fetch_all(conn, 'SELECT * FROM "we""ird \'t\'"') == []
        m.close()
        close_connection(conn)
