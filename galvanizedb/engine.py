"""SQLite engine and local filesystem used by the dispatcher."""

import logging
import sqlite3
from pathlib import Path

from .errors import DeletionError, EngineConnectionError, ExecutionError
from .resultset import ColumnDescriptor, ColumnKind, ResultSet, RowOutcome

logger = logging.getLogger(__name__)

# Storage class names as SQLite's typeof() reports them
_TYPE_NAMES = {
    str: "TEXT",
    int: "INTEGER",
    float: "REAL",
    bytes: "BLOB",
}


def value_type_name(value):
    """Type name of a value returned by sqlite3 ("NULL" for None)."""
    if value is None:
        return "NULL"
    return _TYPE_NAMES.get(type(value), type(value).__name__.upper())


def column_type_names(rows, width):
    """Type name per column, taken from its first non-NULL value."""
    names = ["NULL"] * width
    for i in range(width):
        for row in rows:
            if row[i] is not None:
                names[i] = value_type_name(row[i])
                break
    return names


class SqliteEngine:
    """Opens, runs statements on and closes sqlite3 connections."""

    def open_or_create(self, file_name):
        """Opens file_name, creating the database if it does not exist."""
        try:
            conn = sqlite3.connect(file_name)
        except sqlite3.Error as e:
            raise EngineConnectionError(f"Cannot open {file_name}: {e}") from e
        logger.debug("Opened %s", file_name)
        return conn

    def execute(self, conn, statement, fetch=False):
        """
        Runs one statement.

        With fetch=True the rows are returned as a ResultSet; otherwise the
        change is committed and a RowOutcome with the affected row count is
        returned.
        """
        try:
            cur = conn.execute(statement)
            if not fetch:
                conn.commit()
                return RowOutcome(cur.rowcount)
            rows = cur.fetchall()
        except (sqlite3.Error, sqlite3.Warning) as e:
            raise ExecutionError(str(e)) from e

        headers = [desc[0] for desc in cur.description or ()]
        kinds = [
            ColumnKind.from_type_name(name)
            for name in column_type_names(rows, len(headers))
        ]
        columns = [ColumnDescriptor(h, k) for h, k in zip(headers, kinds)]
        return ResultSet(columns, rows)

    def close(self, conn):
        try:
            conn.close()
        except sqlite3.Error as e:
            raise EngineConnectionError(f"Cannot close connection: {e}") from e

    def table_names(self, conn):
        """Tables and views of conn, for completion. Empty on error."""
        try:
            cur = conn.execute(
                "SELECT name FROM sqlite_master WHERE type IN ('table', 'view')"
            )
            return [row[0] for row in cur]
        except sqlite3.Error:
            return []


class LocalFilesystem:
    def exists(self, file_name):
        return Path(file_name).exists()

    def delete(self, file_name):
        try:
            Path(file_name).unlink()
        except OSError as e:
            raise DeletionError(f"Cannot delete {file_name}: {e.strerror or e}") from e
        logger.info("Deleted %s", file_name)
