"""
SQLite UndoRedo - Undo State

In-process bookkeeping of one undo manager: activation status, freeze
boundary, log cursor and the undo/redo stacks of log ranges.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List


NOT_FROZEN = -1


class Action(Enum):
    """Direction of a perform() step"""
    UNDO = "undo"
    REDO = "redo"


class UndoStatus(Enum):
    """Explicit state tag of a manager"""
    INACTIVE = "inactive"
    ACTIVE = "active"
    FROZEN = "frozen"


@dataclass(frozen=True)
class UndoRange:
    """Inclusive range of log sequence numbers produced by one step"""
    begin: int
    end: int

    def to_dict(self) -> Dict[str, int]:
        return {"begin": self.begin, "end": self.end}


@dataclass(frozen=True)
class LogEntry:
    """One row of the undo log"""
    seq: int
    sql: str


@dataclass
class UndoState:
    """
    Mutable state owned by exactly one manager

    Attributes:
        active: Triggers and log table exist
        freeze: NOT_FROZEN, or the last sequence number a barrier may include
        first_log: Sequence number where the open interval begins
        undo_stack: Steps that can be undone (top is the last element)
        redo_stack: Steps that can be redone (top is the last element)
    """
    active: bool = False
    freeze: int = NOT_FROZEN
    first_log: int = 1
    undo_stack: List[UndoRange] = field(default_factory=list)
    redo_stack: List[UndoRange] = field(default_factory=list)

    @property
    def status(self) -> UndoStatus:
        if not self.active:
            return UndoStatus.INACTIVE
        if self.freeze >= 0:
            return UndoStatus.FROZEN
        return UndoStatus.ACTIVE

    @property
    def is_frozen(self) -> bool:
        return self.freeze >= 0

    def discard_after(self, seq: int) -> None:
        """
        Forget every log entry above seq

        Ranges starting above seq are dropped, ranges crossing it are cut
        back to end at seq, and the cursor is pulled back to seq + 1 if it
        lies beyond.

        Args:
            seq: Last sequence number still present in the log
        """
        self.undo_stack = _ranges_up_to(self.undo_stack, seq)
        self.redo_stack = _ranges_up_to(self.redo_stack, seq)
        self.first_log = min(self.first_log, seq + 1)

    def stack_for(self, action: Action) -> List[UndoRange]:
        """Stack a step is popped from when performing action"""
        return self.undo_stack if action is Action.UNDO else self.redo_stack

    def copy(self) -> "UndoState":
        """Return a copy whose stacks are independent of this one"""
        return UndoState(
            active=self.active,
            freeze=self.freeze,
            first_log=self.first_log,
            undo_stack=list(self.undo_stack),
            redo_stack=list(self.redo_stack),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "status": self.status.value,
            "active": self.active,
            "freeze": self.freeze,
            "first_log": self.first_log,
            "undo_stack": [r.to_dict() for r in self.undo_stack],
            "redo_stack": [r.to_dict() for r in self.redo_stack],
        }


def _ranges_up_to(stack: List[UndoRange], seq: int) -> List[UndoRange]:
    kept = []
    for r in stack:
        if r.begin > seq:
            continue
        kept.append(r if r.end <= seq else UndoRange(begin=r.begin, end=seq))
    return kept
