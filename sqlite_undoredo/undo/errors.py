"""
SQLite UndoRedo - Undo/Redo Errors

Exception taxonomy raised by the undo manager. Engine failures
(sqlite3.Error) are never wrapped: they reach the caller unchanged.
"""

from typing import Any, Dict, Optional


class UndoRedoError(Exception):
    """
    Base class for undo manager errors

    Attributes:
        code: Stable machine-readable error code
    """

    code = "UNDO_REDO_ERROR"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.__doc__.strip().splitlines()[0])

    def get_error_details(self) -> Dict[str, Any]:
        """Return the error as a dict"""
        return {
            "code": self.code,
            "message": str(self),
        }


class NotActive(UndoRedoError):
    """The undo manager is not active"""

    code = "NOT_ACTIVE"


class AlreadyActive(UndoRedoError):
    """The undo manager is already active"""

    # Reserved: activation while active is a no-op, nothing raises this.
    code = "ALREADY_ACTIVE"


class EndOfStack(UndoRedoError):
    """
    No further undo (respectively redo) step is available

    Attributes:
        action: "undo" or "redo"
    """

    code = "END_OF_STACK"

    def __init__(self, action: str, message: Optional[str] = None):
        super().__init__(message or f"Nothing to {action}")
        self.action = action

    def get_error_details(self) -> Dict[str, Any]:
        details = super().get_error_details()
        details["action"] = self.action
        return details


class InternalInconsistency(UndoRedoError):
    """The undo log state has become inconsistent"""

    code = "INTERNAL_INCONSISTENCY"


class ForeignKeyReferencedTableNotObserved(UndoRedoError):
    """
    A foreign key links an observed table to an unobserved one

    Cascading actions across such a key would run outside the capture
    triggers and silently corrupt the undo history.

    Attributes:
        referencer: Table declaring the foreign key
        referenced: Table the foreign key points to
    """

    code = "FOREIGN_KEY_REFERENCED_TABLE_NOT_OBSERVED"

    def __init__(self, referencer: str, referenced: str):
        super().__init__(
            f"Foreign key {referencer} -> {referenced} crosses the observed scope: "
            f"observe both tables or neither"
        )
        self.referencer = referencer
        self.referenced = referenced

    def get_error_details(self) -> Dict[str, Any]:
        details = super().get_error_details()
        details["referencer"] = self.referencer
        details["referenced"] = self.referenced
        return details
