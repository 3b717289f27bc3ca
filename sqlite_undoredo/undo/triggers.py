"""
SQLite UndoRedo - Trigger Generator

Builds the CREATE TEMP TRIGGER statements that write inverse SQL into the
undo log. Every function here is pure: the same (table, columns, log
table, prefix) always yields the same text.

For a table T with columns C1..Cn:

    insert  AFTER INSERT   logs  DELETE FROM T WHERE rowid=<new.rowid>
    update  AFTER UPDATE   logs  UPDATE T SET C1=<old.C1>,... WHERE rowid=<new.rowid>
            (only WHEN some old.Ci IS NOT new.Ci)
    delete  BEFORE DELETE  logs  INSERT INTO T(rowid,C1,...) VALUES(<old.rowid>,<old.C1>,...)

Column values are rendered with SQLite's quote() when the trigger fires,
so the logged statement reproduces them exactly, NULL and blobs included.
"""

from typing import List, Sequence

from ..utils.sql_quote import quote_identifier, quote_literal, concat_sql


TRIGGER_KINDS = ("i", "u", "d")


def trigger_name(prefix: str, table: str, kind: str) -> str:
    """
    Name of the trigger of a given kind for a table

    Args:
        prefix: Normalized prefix ("" or "name_")
        table: Observed table name
        kind: "i", "u" or "d"

    Returns:
        str: Unquoted trigger name, e.g. "_doc_tbl1_it"
    """
    if kind not in TRIGGER_KINDS:
        raise ValueError(f"Unknown trigger kind: {kind!r}")
    return f"_{prefix}{table}_{kind}t"


def _log_insert(log_table: str, expression: str) -> str:
    return f"  INSERT INTO {quote_identifier(log_table)} VALUES(NULL,{expression});\n"


def insert_trigger_sql(table: str, log_table: str, prefix: str = "") -> str:
    """Trigger logging a DELETE that removes each inserted row"""
    name = quote_identifier(trigger_name(prefix, table, "i"))
    tbl = quote_identifier(table)

    expression = concat_sql([
        quote_literal(f"DELETE FROM {tbl} WHERE rowid="),
        "new.rowid",
    ])

    return (
        f"CREATE TEMP TRIGGER {name} AFTER INSERT ON {tbl} BEGIN\n"
        f"{_log_insert(log_table, expression)}"
        f"END"
    )


def update_trigger_sql(
    table: str,
    columns: Sequence[str],
    log_table: str,
    prefix: str = "",
) -> str:
    """Trigger logging an UPDATE that restores every old column value"""
    if not columns:
        raise ValueError(f"Table {table} has no columns")

    name = quote_identifier(trigger_name(prefix, table, "u"))
    tbl = quote_identifier(table)
    cols = [quote_identifier(c) for c in columns]

    # null-safe: IS NOT treats NULL as an ordinary value
    changed = " OR ".join(f"(old.{c} IS NOT new.{c})" for c in cols)

    parts: List[str] = []
    sep = f"UPDATE {tbl} SET "
    for col in cols:
        parts.append(quote_literal(f"{sep}{col}="))
        parts.append(f"quote(old.{col})")
        sep = ","
    parts.append(quote_literal(" WHERE rowid="))
    # new.rowid: the row is found where it is now, even if its INTEGER
    # PRIMARY KEY changed; restoring that column moves it back.
    parts.append("new.rowid")

    return (
        f"CREATE TEMP TRIGGER {name} AFTER UPDATE ON {tbl} WHEN ({changed}) BEGIN\n"
        f"{_log_insert(log_table, concat_sql(parts))}"
        f"END"
    )


def delete_trigger_sql(
    table: str,
    columns: Sequence[str],
    log_table: str,
    prefix: str = "",
) -> str:
    """Trigger logging an INSERT that recreates each deleted row with its rowid"""
    if not columns:
        raise ValueError(f"Table {table} has no columns")

    name = quote_identifier(trigger_name(prefix, table, "d"))
    tbl = quote_identifier(table)
    cols = [quote_identifier(c) for c in columns]

    parts: List[str] = [
        quote_literal(f"INSERT INTO {tbl}(rowid,{','.join(cols)}) VALUES("),
        "old.rowid",
    ]
    for col in cols:
        parts.append(quote_literal(","))
        parts.append(f"quote(old.{col})")
    parts.append(quote_literal(")"))

    return (
        f"CREATE TEMP TRIGGER {name} BEFORE DELETE ON {tbl} BEGIN\n"
        f"{_log_insert(log_table, concat_sql(parts))}"
        f"END"
    )


def create_trigger_statements(
    table: str,
    columns: Sequence[str],
    log_table: str,
    prefix: str = "",
) -> List[str]:
    """All three capture triggers for one table, in i/u/d order"""
    return [
        insert_trigger_sql(table, log_table, prefix),
        update_trigger_sql(table, columns, log_table, prefix),
        delete_trigger_sql(table, columns, log_table, prefix),
    ]


def drop_trigger_statements(table: str, prefix: str = "") -> List[str]:
    """DROP statements matching create_trigger_statements()"""
    return [
        f"DROP TRIGGER IF EXISTS {quote_identifier(trigger_name(prefix, table, kind))}"
        for kind in TRIGGER_KINDS
    ]
