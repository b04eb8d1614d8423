import logging
import os
import sqlite3
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_MIGRATIONS_DIR = str(Path(__file__).parent / "migrations")


class SQLiteMigrator:
    """Applies ``NNN_name.sql`` files in order, recording them in ``_migrations``."""

    def __init__(self, migrations_dir: str | None = None):
        self.migrations_dir = migrations_dir or DEFAULT_MIGRATIONS_DIR

    def _ensure_migration_table(self, conn: sqlite3.Connection) -> None:
        conn.execute("""
            CREATE TABLE IF NOT EXISTS _migrations (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                filename TEXT UNIQUE NOT NULL,
                applied_at DATETIME DEFAULT CURRENT_TIMESTAMP
            );
        """)
        conn.commit()

    def _get_applied_migrations(self, conn: sqlite3.Connection) -> set[str]:
        cursor = conn.execute("SELECT filename FROM _migrations")
        return {row[0] for row in cursor.fetchall()}

    def pending(self, conn: sqlite3.Connection) -> list[str]:
        self._ensure_migration_table(conn)
        applied = self._get_applied_migrations(conn)
        if not os.path.isdir(self.migrations_dir):
            raise RuntimeError(f"Migrations directory not found: {self.migrations_dir}")
        files = sorted(f for f in os.listdir(self.migrations_dir) if f.endswith(".sql"))
        return [f for f in files if f not in applied]

    def run_migrations(self, conn: sqlite3.Connection) -> list[str]:
        """Apply all pending migrations. Returns the filenames applied."""
        applied = []
        for filename in self.pending(conn):
            logger.info("Applying migration: %s", filename)
            self._apply_migration(conn, filename)
            applied.append(filename)

        if not applied:
            logger.info("Database schema is up to date.")
        return applied

    def _read_up_script(self, filename: str) -> str:
        path = os.path.join(self.migrations_dir, filename)
        with open(path) as f:
            content = f.read()

        # Everything before '-- Down' is the up script
        return content.split("-- Down")[0]

    def _apply_migration(self, conn: sqlite3.Connection, filename: str) -> None:
        script = self._read_up_script(filename)
        try:
            conn.executescript(script)
            conn.execute("INSERT INTO _migrations (filename) VALUES (?)", (filename,))
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise RuntimeError(f"Migration {filename} failed: {e}") from e


def run_migrations(conn: sqlite3.Connection, migrations_dir: str | None = None) -> list[str]:
    return SQLiteMigrator(migrations_dir).run_migrations(conn)


def list_tables(conn: sqlite3.Connection) -> list[str]:
    rows = conn.execute(
        "SELECT name FROM sqlite_master WHERE type='table' AND name NOT LIKE 'sqlite_%' "
        "ORDER BY name"
    ).fetchall()
    return [row[0] for row in rows]


def table_exists(conn: sqlite3.Connection, table_name: str) -> bool:
    row = conn.execute(
        "SELECT 1 FROM sqlite_master WHERE type='table' AND name=?", (table_name,)
    ).fetchone()
    return row is not None


def get_table_info(conn: sqlite3.Connection, table_name: str) -> list[dict[str, Any]]:
    """Column descriptions (name, type, notnull, dflt_value, pk) for an existing table."""
    if not table_exists(conn, table_name):
        raise ValueError(f"Table not found: {table_name}")

    # Name checked against sqlite_master above; PRAGMA takes no parameters
    cursor = conn.execute(f'PRAGMA table_info("{table_name}")')
    columns = [col[0] for col in cursor.description]
    return [dict(zip(columns, row, strict=True)) for row in cursor.fetchall()]
