"""
SQLite UndoRedo - Undo Log Store

The append-only table of inverse statements, one per manager scope.
Rows are appended only by the capture triggers; this class creates and
drops the table and runs the range queries the manager needs.
"""

import logging
import sqlite3
from typing import List

from ..utils.db import execute_query, fetch_all, fetch_one, fetch_scalar
from ..utils.sql_quote import quote_identifier
from .errors import InternalInconsistency
from .state import LogEntry

logger = logging.getLogger(__name__)


class UndoLog:
    """
    Undo log table bound to one connection

    Args:
        conn: Connection the capture triggers live on
        table_name: Unquoted log table name (prefix included)
    """

    def __init__(self, conn: sqlite3.Connection, table_name: str):
        self.conn = conn
        self.table_name = table_name
        self._table = quote_identifier(table_name)

    def create(self) -> None:
        """
        Create the log table, replacing any leftover table of the same name

        Must run inside the caller's transaction.
        """
        try:
            execute_query(self.conn, f"DROP TABLE IF EXISTS temp.{self._table}")
        except sqlite3.Error as e:
            logger.debug(f"Ignored failure dropping stale log table {self.table_name}: {e}")

        execute_query(
            self.conn,
            f"CREATE TEMP TABLE {self._table}(seq INTEGER PRIMARY KEY, sql TEXT)"
        )

    def drop(self) -> None:
        execute_query(self.conn, f"DROP TABLE temp.{self._table}")

    def max_seq(self) -> int:
        """
        Highest sequence number in the log (0 when empty)

        Raises:
            InternalInconsistency: The aggregate query returned no row
        """
        row = fetch_one(self.conn, f"SELECT coalesce(max(seq), 0) FROM {self._table}")
        if row is None or row[0] is None:
            raise InternalInconsistency(f"Could not read the cursor of {self.table_name}")
        return int(row[0])

    def next_seq(self) -> int:
        """Sequence number the next appended entry will receive"""
        return self.max_seq() + 1

    def fetch_range(self, begin: int, end: int) -> List[str]:
        """
        Statements in [begin, end], newest first

        Later changes of a step may depend on the rows earlier ones
        created, so they must be reversed first.
        """
        rows = fetch_all(
            self.conn,
            f"SELECT sql FROM {self._table} WHERE seq >= ? AND seq <= ? ORDER BY seq DESC",
            (begin, end)
        )
        return [row[0] for row in rows]

    def delete_range(self, begin: int, end: int) -> int:
        cursor = execute_query(
            self.conn,
            f"DELETE FROM {self._table} WHERE seq >= ? AND seq <= ?",
            (begin, end)
        )
        return cursor.rowcount

    def delete_after(self, seq: int) -> int:
        """Delete every entry with a sequence number above seq"""
        cursor = execute_query(
            self.conn,
            f"DELETE FROM {self._table} WHERE seq > ?",
            (seq,)
        )
        return cursor.rowcount

    def entries(self) -> List[LogEntry]:
        """All entries in ascending order"""
        rows = fetch_all(self.conn, f"SELECT seq, sql FROM {self._table} ORDER BY seq")
        return [LogEntry(seq=row[0], sql=row[1]) for row in rows]

    def count(self) -> int:
        return int(fetch_scalar(self.conn, f"SELECT COUNT(*) FROM {self._table}") or 0)
