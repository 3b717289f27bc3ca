"""
SQLite UndoRedo - Undo Manager Configuration

Defines configuration for undo/redo managers, including:
- Name prefix for the log table and triggers
- Log table base name
- Foreign key scope validation
- Deferred foreign key checks during replay
"""

from dataclasses import dataclass
from typing import Optional
import os
import re


_IDENTIFIER_CHARS = re.compile(r"^[A-Za-z0-9_]*$")

_TRUE_VALUES = ("1", "true", "yes", "on")


@dataclass
class UndoRedoConfig:
    """Configuration for one undo/redo manager"""

    # Namespace for the log table and trigger names.
    # "" or a plain identifier; "doc" becomes "doc_undolog".
    table_prefix: str = ""

    # Base name of the per-scope log table
    log_table_name: str = "undolog"

    # Reject scopes whose foreign keys reach unobserved tables
    check_foreign_keys: bool = True

    # Defer foreign key verification to commit while replaying a step
    defer_foreign_keys: bool = True

    def __post_init__(self):
        """Validate configuration values"""
        if not isinstance(self.table_prefix, str) or not _IDENTIFIER_CHARS.match(self.table_prefix):
            raise ValueError(
                f"table_prefix must contain only letters, digits and underscores: {self.table_prefix!r}"
            )

        if not self.log_table_name:
            raise ValueError("log_table_name must not be empty")

        if not _IDENTIFIER_CHARS.match(self.log_table_name):
            raise ValueError(
                f"log_table_name must contain only letters, digits and underscores: {self.log_table_name!r}"
            )

    @property
    def normalized_prefix(self) -> str:
        """Prefix with its trailing separator ("" stays "")"""
        return f"{self.table_prefix}_" if self.table_prefix else ""

    @property
    def full_log_table_name(self) -> str:
        """Log table name including the prefix"""
        return f"{self.normalized_prefix}{self.log_table_name}"


# Global default configuration
_default_undo_config: Optional[UndoRedoConfig] = None


def get_undo_config() -> UndoRedoConfig:
    """
    Get the process-wide default configuration

    Returns:
        UndoRedoConfig: Current configuration
    """
    global _default_undo_config

    if _default_undo_config is None:
        _default_undo_config = UndoRedoConfig()

    return _default_undo_config


def set_undo_config(config: Optional[UndoRedoConfig]) -> None:
    """
    Set the process-wide default configuration

    Args:
        config: New configuration (None resets to defaults)
    """
    global _default_undo_config
    _default_undo_config = config


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value.strip().lower() in _TRUE_VALUES


def load_config_from_env() -> UndoRedoConfig:
    """
    Load configuration from environment variables

    Environment variables:
        SQLITE_UNDOREDO_TABLE_PREFIX: Name prefix for log table and triggers
        SQLITE_UNDOREDO_LOG_TABLE: Log table base name
        SQLITE_UNDOREDO_CHECK_FOREIGN_KEYS: Validate FK scope (true/false)
        SQLITE_UNDOREDO_DEFER_FOREIGN_KEYS: Defer FK checks on replay (true/false)

    Returns:
        UndoRedoConfig: Configuration from environment

    Raises:
        ValueError: An environment value is invalid
    """
    defaults = UndoRedoConfig()

    return UndoRedoConfig(
        table_prefix=os.getenv("SQLITE_UNDOREDO_TABLE_PREFIX", defaults.table_prefix),
        log_table_name=os.getenv("SQLITE_UNDOREDO_LOG_TABLE") or defaults.log_table_name,
        check_foreign_keys=_env_flag(
            "SQLITE_UNDOREDO_CHECK_FOREIGN_KEYS", defaults.check_foreign_keys
        ),
        defer_foreign_keys=_env_flag(
            "SQLITE_UNDOREDO_DEFER_FOREIGN_KEYS", defaults.defer_foreign_keys
        ),
    )
