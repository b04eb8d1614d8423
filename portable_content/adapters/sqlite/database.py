import sqlite3
from pathlib import Path
from typing import Any

from portable_content.adapters.sqlite.migrator import run_migrations


def dict_factory(cursor: sqlite3.Cursor, row: tuple[Any, ...]) -> dict[str, Any]:
    """Convert SQLite row to dictionary."""
    return {col[0]: row[idx] for idx, col in enumerate(cursor.description)}


def open_connection(path: str) -> sqlite3.Connection:
    """Open a connection with foreign keys enforced. Raises sqlite3.Error."""
    conn = sqlite3.connect(path)
    try:
        conn.execute("PRAGMA foreign_keys = ON;")
    except sqlite3.Error:
        conn.close()
        raise
    return conn


def connect(path: str) -> sqlite3.Connection:
    try:
        return open_connection(path)
    except sqlite3.Error as e:
        raise RuntimeError(f"Failed to create database connection: {e}") from e


def connect_in_memory() -> sqlite3.Connection:
    return connect(":memory:")


def initialize(path: str, migrations_dir: str | None = None) -> sqlite3.Connection:
    """Create the parent directory if needed, connect, and migrate."""
    if path != ":memory:":
        Path(path).parent.mkdir(parents=True, exist_ok=True)
    conn = connect(path)
    run_migrations(conn, migrations_dir)
    return conn
