"""
SQLite UndoRedo - Foreign Key Scope Check

An engine-level cascade (ON DELETE CASCADE, SET NULL, ...) that touches a
table outside the observed scope runs without any capture trigger, so its
effect could never be undone. Activation is refused when a foreign key
links an observed table to an unobserved one.
"""

import logging
import sqlite3
from typing import AbstractSet, List, Tuple

from ..utils.db import foreign_keys_enabled, get_foreign_key_pairs
from .errors import ForeignKeyReferencedTableNotObserved

logger = logging.getLogger(__name__)


def find_scope_violations(
    pairs: List[Tuple[str, str]],
    observed: AbstractSet[str],
) -> List[Tuple[str, str]]:
    """
    Foreign key pairs with exactly one side inside the observed scope

    Args:
        pairs: (referencer, referenced) table pairs
        observed: Observed table names

    Returns:
        List[Tuple[str, str]]: Offending pairs, in input order
    """
    return [
        (referencer, referenced)
        for referencer, referenced in pairs
        if (referencer in observed) != (referenced in observed)
    ]


def check_foreign_key_scope(conn: sqlite3.Connection, observed: AbstractSet[str]) -> None:
    """
    Validate the observed scope against the foreign key graph

    Does nothing when foreign key enforcement is off on the connection,
    since no cascade can fire then.

    Args:
        conn: Database connection
        observed: Observed table names

    Raises:
        ForeignKeyReferencedTableNotObserved: First offending pair found
    """
    if not foreign_keys_enabled(conn):
        logger.debug("Foreign keys disabled, scope check skipped")
        return

    violations = find_scope_violations(get_foreign_key_pairs(conn), observed)
    if violations:
        referencer, referenced = violations[0]
        raise ForeignKeyReferencedTableNotObserved(referencer, referenced)
