"""
SQLite UndoRedo - Configuration Module

Provides configuration management for undo/redo managers.
"""

from .undo_config import (
    UndoRedoConfig,
    get_undo_config,
    set_undo_config,
    load_config_from_env,
)

__all__ = [
    "UndoRedoConfig",
    "get_undo_config",
    "set_undo_config",
    "load_config_from_env",
]
