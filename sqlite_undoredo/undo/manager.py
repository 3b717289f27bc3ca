"""
SQLite UndoRedo - Undo/Redo Manager

Trigger-based undo/redo for a set of SQLite tables.

Temporary triggers record, for every insert, update and delete on the
observed tables, the SQL statement that reverses it. barrier() groups the
statements recorded since the previous barrier into one step;
perform(Action.UNDO) replays a step backwards and records the replay
itself as the matching redo step.

Usage:
    from sqlite_undoredo import UndoRedoManager, Action

    manager = UndoRedoManager(["documents", "paragraphs"], conn)
    conn.execute("INSERT INTO documents(title) VALUES ('draft')")
    conn.commit()
    manager.barrier()
    manager.perform(Action.UNDO)

Note:
    - The triggers and the log table are TEMP objects: all writes to be
      captured must go through the connection given to the manager.
    - Methods must not be called while that connection has an open
      transaction, nor concurrently on one manager.
    - Several managers may share a connection when their table sets are
      disjoint and their prefixes differ. Overlapping scopes interleave
      their logs unpredictably and are not detected.
    - Trigger names join prefix and table with underscores, so prefix "a"
      with table "b_c" collides with prefix "a_b" with table "c". The
      second activation then fails with sqlite3.OperationalError and
      leaves nothing behind.
"""

import dataclasses
import logging
import sqlite3
from typing import Dict, Iterable, Optional, Tuple, Union

from ..config.undo_config import UndoRedoConfig, get_undo_config
from ..utils.db import get_table_columns, transaction, execute_query
from .errors import EndOfStack, NotActive
from .fk_check import check_foreign_key_scope
from .log_store import UndoLog
from .state import NOT_FROZEN, Action, UndoRange, UndoState, UndoStatus
from .triggers import create_trigger_statements, drop_trigger_statements

logger = logging.getLogger(__name__)


def _table_name(table) -> str:
    if isinstance(table, str):
        return table
    # mapped classes (e.g. declarative models) expose their table name
    name = getattr(table, "__tablename__", None)
    if isinstance(name, str):
        return name
    raise TypeError(f"Cannot determine a table name from {table!r}")


class UndoRedoManager:
    """
    Undo/redo manager for one scope of observed tables

    Args:
        tables: Observed table names (or classes with __tablename__)
        conn: Connection the application writes through
        table_prefix: Namespace for the log table and trigger names;
            overrides config.table_prefix when given
        config: Manager configuration (default: get_undo_config())

    Raises:
        ForeignKeyReferencedTableNotObserved: Scope check failed
        DatabaseError: An observed table does not exist, or conn is
            inside a transaction
    """

    def __init__(
        self,
        tables: Union[str, Iterable],
        conn: sqlite3.Connection,
        table_prefix: Optional[str] = None,
        *,
        config: Optional[UndoRedoConfig] = None,
    ):
        if config is None:
            config = get_undo_config()
        if table_prefix is not None:
            config = dataclasses.replace(config, table_prefix=table_prefix)

        if isinstance(tables, str):
            tables = [tables]
        names = []
        for table in tables:
            name = _table_name(table)
            if name not in names:
                names.append(name)

        self.conn = conn
        self.config = config
        self._tables: Tuple[str, ...] = tuple(names)
        self._prefix = config.normalized_prefix
        self._log = UndoLog(conn, config.full_log_table_name)
        self._state = UndoState()
        self._scope: Dict[str, Tuple[str, ...]] = {}

        self.reactivate()

    # ------------------------------------------------------------------
    # activation

    def reactivate(self) -> None:
        """
        Create the log table and triggers and start capturing changes

        Does nothing if the manager is already active. Both stacks start
        empty.
        """
        if self._state.active:
            return

        if self.config.check_foreign_keys:
            check_foreign_key_scope(self.conn, frozenset(self._tables))

        scope: Dict[str, Tuple[str, ...]] = {}
        with transaction(self.conn):
            self._log.create()
            for table in self._tables:
                columns = get_table_columns(self.conn, table)
                for sql in create_trigger_statements(
                    table, columns, self._log.table_name, self._prefix
                ):
                    execute_query(self.conn, sql)
                scope[table] = columns

        self._scope = scope
        self._state = UndoState(active=True, freeze=NOT_FROZEN)
        self._start_interval()

        logger.info(
            f"Undo capture activated: log={self._log.table_name}, tables={list(self._tables)}"
        )

    activate = reactivate

    def deactivate(self) -> None:
        """
        Drop the triggers and the log table and forget both stacks

        Does nothing if the manager is not active.
        """
        if not self._state.active:
            return

        with transaction(self.conn):
            for table in self._tables:
                for sql in drop_trigger_statements(table, self._prefix):
                    execute_query(self.conn, sql)
            self._log.drop()

        self._state = UndoState(active=False, freeze=NOT_FROZEN)
        self._scope = {}

        logger.info(f"Undo capture deactivated: log={self._log.table_name}")

    def close(self) -> None:
        """Deactivate; the manager can be reactivated afterwards"""
        self.deactivate()

    def __enter__(self) -> "UndoRedoManager":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ------------------------------------------------------------------
    # freeze

    def freeze(self) -> None:
        """
        Stop accepting changes into the undo stack

        Triggers keep firing, but entries logged from now on are left out
        of every barrier and discarded by unfreeze().

        Raises:
            NotActive: The manager is not active
        """
        self._require_active()

        if self._state.is_frozen:
            return

        self._state.freeze = self._log.max_seq()
        logger.debug(f"Frozen at seq={self._state.freeze}")

    def unfreeze(self) -> None:
        """
        Accept changes again, discarding everything logged while frozen

        Raises:
            NotActive: The manager is not active
        """
        self._require_active()

        if not self._state.is_frozen:
            return

        with transaction(self.conn):
            purged = self._log.delete_after(self._state.freeze)

        # seq numbers above the survivors are reused by the next writes
        self._state.discard_after(self._log.max_seq())

        logger.debug(f"Unfrozen: purged {purged} entries above seq={self._state.freeze}")
        self._state.freeze = NOT_FROZEN

    # ------------------------------------------------------------------
    # steps

    def barrier(self) -> bool:
        """
        Close the current step

        Returns:
            bool: True if a new step was pushed on the undo stack, False if
            nothing was logged since the previous barrier

        Raises:
            NotActive: The manager is not active
        """
        self._require_active()

        end = self._log.max_seq()
        if self._state.is_frozen and self._state.freeze < end:
            end = self._state.freeze

        begin = self._state.first_log
        if end < begin:
            return False

        self._state.undo_stack.append(UndoRange(begin=begin, end=end))
        self._state.redo_stack = []
        # end + 1 equals the recomputed cursor unless frozen entries follow
        self._state.first_log = end + 1

        logger.debug(f"Barrier: step {begin}..{end} captured")
        return True

    def perform(self, action: Action) -> None:
        """
        Undo or redo a single step

        The step's statements run newest first inside one transaction, with
        foreign key verification deferred to commit. The statements fire
        the capture triggers again; the entries they produce become the
        complementary step on the opposite stack. A replay that logs
        nothing (its rows were already changed outside the history) pops
        the step without pushing a complementary one.

        Args:
            action: Action.UNDO or Action.REDO

        Raises:
            EndOfStack: No step available in that direction
            InternalInconsistency: The log cursor could not be read
            sqlite3.Error: A replayed statement failed (nothing is changed)
        """
        action = Action(action)
        source = self._state.stack_for(action)
        if not source:
            raise EndOfStack(action.value)

        op = source[-1]

        with transaction(self.conn):
            statements = self._log.fetch_range(op.begin, op.end)
            self._log.delete_range(op.begin, op.end)
            first_log = self._log.next_seq()

            if self.config.defer_foreign_keys:
                execute_query(self.conn, "PRAGMA defer_foreign_keys = ON")
            for sql in statements:
                execute_query(self.conn, sql)

        end = self._log.max_seq()

        state = self._state.copy()
        state.stack_for(action).pop()
        if end >= first_log:
            target = state.redo_stack if action is Action.UNDO else state.undo_stack
            target.append(UndoRange(begin=first_log, end=end))
        else:
            logger.warning(
                f"{action.value}: replay of {op.begin}..{op.end} changed nothing; "
                f"no complementary step recorded"
            )
        self._state = state
        self._start_interval()

        logger.debug(
            f"{action.value}: replayed {len(statements)} statements from {op.begin}..{op.end}, "
            f"recorded {first_log}..{end}"
        )

    def undo(self) -> None:
        """Shortcut for perform(Action.UNDO)"""
        self.perform(Action.UNDO)

    def redo(self) -> None:
        """Shortcut for perform(Action.REDO)"""
        self.perform(Action.REDO)

    # ------------------------------------------------------------------
    # queries

    @property
    def is_active(self) -> bool:
        return self._state.active

    @property
    def is_frozen(self) -> bool:
        return self._state.is_frozen

    @property
    def can_undo(self) -> bool:
        return bool(self._state.undo_stack)

    @property
    def can_redo(self) -> bool:
        return bool(self._state.redo_stack)

    @property
    def status(self) -> UndoStatus:
        return self._state.status

    @property
    def state(self) -> UndoState:
        """Snapshot of the current state"""
        return self._state.copy()

    @property
    def observed_tables(self) -> Tuple[str, ...]:
        return self._tables

    @property
    def scope(self) -> Dict[str, Tuple[str, ...]]:
        """Observed table -> columns captured at activation (empty while inactive)"""
        return dict(self._scope)

    @property
    def table_prefix(self) -> str:
        return self.config.table_prefix

    @property
    def undo_log(self) -> UndoLog:
        return self._log

    @property
    def log_table_name(self) -> str:
        return self._log.table_name

    def __repr__(self) -> str:
        return (
            f"<UndoRedoManager tables={list(self._tables)} log={self._log.table_name} "
            f"status={self.status.value} undo={len(self._state.undo_stack)} "
            f"redo={len(self._state.redo_stack)}>"
        )

    # ------------------------------------------------------------------
    # internals

    def _require_active(self) -> None:
        if not self._state.active:
            raise NotActive()

    def _start_interval(self) -> None:
        """Open a new interval at the current end of the log"""
        self._state.first_log = self._log.next_seq()
