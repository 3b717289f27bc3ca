"""
SQLite UndoRedo

Transactional undo/redo for SQLite databases, driven by temporary
triggers that log the inverse of every change to the observed tables.
"""

from .undo import (
    UndoRedoManager,
    Action,
    UndoStatus,
    UndoRange,
    UndoState,
    UndoRedoError,
    NotActive,
    AlreadyActive,
    EndOfStack,
    InternalInconsistency,
    ForeignKeyReferencedTableNotObserved,
)
from .config import UndoRedoConfig, get_undo_config, set_undo_config, load_config_from_env

__version__ = "1.0.0"

__all__ = [
    "UndoRedoManager",
    "Action",
    "UndoStatus",
    "UndoRange",
    "UndoState",
    "UndoRedoError",
    "NotActive",
    "AlreadyActive",
    "EndOfStack",
    "InternalInconsistency",
    "ForeignKeyReferencedTableNotObserved",
    "UndoRedoConfig",
    "get_undo_config",
    "set_undo_config",
    "load_config_from_env",
]
