"""
SQLite UndoRedo - Undo/Redo

Trigger-based undo/redo manager, its state, log store and trigger
generator.
"""

from .manager import UndoRedoManager
from .state import (
    Action,
    UndoStatus,
    UndoRange,
    UndoState,
    LogEntry,
    NOT_FROZEN,
)
from .log_store import UndoLog
from .errors import (
    UndoRedoError,
    NotActive,
    AlreadyActive,
    EndOfStack,
    InternalInconsistency,
    ForeignKeyReferencedTableNotObserved,
)

__all__ = [
    # manager
    "UndoRedoManager",
    # state
    "Action",
    "UndoStatus",
    "UndoRange",
    "UndoState",
    "LogEntry",
    "NOT_FROZEN",
    "UndoLog",
    # errors
    "UndoRedoError",
    "NotActive",
    "AlreadyActive",
    "EndOfStack",
    "InternalInconsistency",
    "ForeignKeyReferencedTableNotObserved",
]
