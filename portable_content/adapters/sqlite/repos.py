"""
SQLite content repository.

Content rows live in ``content_items``; markdown blocks in
``markdown_blocks`` (FK to content_items, ON DELETE CASCADE). Every
operation runs in one explicit transaction on one connection and either
commits or rolls back before returning. Storage exceptions, connection
failures included, surface as SaveError / DeleteError / QueryError /
TransactionError.

Saving replaces the item's block rows wholesale (delete, then insert in
list order), so stored blocks always match the in-memory list.
"""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from datetime import datetime
from typing import Any

from portable_content.adapters.sqlite.database import dict_factory, open_connection
from portable_content.domain.entities import Block, ContentItem, MarkdownBlock
from portable_content.domain.errors import (
    DeleteError,
    QueryError,
    SaveError,
    TransactionError,
)

logger = logging.getLogger(__name__)


def format_dt(dt: datetime) -> str:
    """Fixed-width ISO-8601 so text ordering matches time ordering."""
    return dt.isoformat(timespec="microseconds")


def parse_dt(s: str) -> datetime:
    return datetime.fromisoformat(s)


class SQLiteRepoBase:
    """Base class for SQLite repositories."""

    def __init__(self, db_path: str | None = None, connection: sqlite3.Connection | None = None):
        if db_path is None and connection is None:
            raise ValueError("Either db_path or connection is required")
        self.db_path = db_path
        self._external_conn = connection
        if connection is not None:
            connection.execute("PRAGMA foreign_keys = ON;")

    def _get_conn(self) -> sqlite3.Connection:
        """Get database connection (uses external if provided). Raises sqlite3.Error."""
        if self._external_conn is None:
            return open_connection(str(self.db_path))
        return self._external_conn

    def _should_close(self) -> bool:
        """Whether to close connection after use."""
        return self._external_conn is None

    def _release(self, conn: sqlite3.Connection) -> None:
        if self._should_close():
            conn.close()

    @staticmethod
    def _query(conn: sqlite3.Connection, sql: str, params: Sequence[Any] = ()) -> sqlite3.Cursor:
        # Row factory on the cursor so a caller's connection is left as it was
        cursor = conn.cursor()
        cursor.row_factory = dict_factory
        return cursor.execute(sql, params)

    @contextmanager
    def _transaction(self, conn: sqlite3.Connection, operation: str) -> Iterator[None]:
        try:
            conn.execute("BEGIN")
        except sqlite3.Error as e:
            raise TransactionError(str(e), operation=operation) from e

        try:
            yield
        except BaseException:
            self._rollback(conn, operation)
            raise

        try:
            conn.commit()
        except sqlite3.Error as e:
            self._rollback(conn, operation)
            raise TransactionError(str(e), operation=operation) from e

    @staticmethod
    def _rollback(conn: sqlite3.Connection, operation: str) -> None:
        try:
            conn.rollback()
        except sqlite3.Error:
            logger.exception("Rollback failed during %s", operation)

    @contextmanager
    def _session(self, operation: str) -> Iterator[sqlite3.Connection]:
        """One connection and one transaction for a single repository call."""
        conn = self._get_conn()
        try:
            with self._transaction(conn, operation):
                yield conn
        finally:
            self._release(conn)


class SQLiteContentRepo(SQLiteRepoBase):
    """
    SQLite implementation of ContentRepoPort.

    Blocks whose kind has no table are skipped on save with a warning;
    pass ``strict_blocks=True`` to fail the save instead.
    """

    def __init__(
        self,
        db_path: str | None = None,
        connection: sqlite3.Connection | None = None,
        *,
        strict_blocks: bool = False,
    ):
        super().__init__(db_path, connection)
        self.strict_blocks = strict_blocks

    # --- Writes ---

    def save(self, item: ContentItem) -> None:
        try:
            with self._session("save") as conn:
                # 1. Upsert content row
                conn.execute(
                    """
                    INSERT INTO content_items (
                        id, type, title, summary, created_at, updated_at
                    ) VALUES (?, ?, ?, ?, ?, ?)
                    ON CONFLICT(id) DO UPDATE SET
                        type=excluded.type,
                        title=excluded.title,
                        summary=excluded.summary,
                        updated_at=excluded.updated_at
                    """,
                    (
                        item.id,
                        item.type,
                        item.title,
                        item.summary,
                        format_dt(item.created_at),
                        format_dt(item.updated_at),
                    ),
                )

                # 2. Delete existing blocks
                conn.execute("DELETE FROM markdown_blocks WHERE content_id = ?", (item.id,))

                # 3. Insert blocks in list order
                for position, block in enumerate(item.blocks):
                    self._insert_block(conn, item.id, position, block)
        except sqlite3.Error as e:
            raise SaveError(item.id, str(e)) from e

        logger.debug("Saved content %s with %d block(s)", item.id, len(item.blocks))

    def _insert_block(
        self, conn: sqlite3.Connection, content_id: str, position: int, block: Block
    ) -> None:
        if not isinstance(block, MarkdownBlock):
            if self.strict_blocks:
                raise SaveError(content_id, f"no storage for block kind '{block.kind}'")
            logger.warning(
                "Skipping block %s of kind '%s' on content %s: no storage for this kind",
                block.id,
                block.kind,
                content_id,
            )
            return

        conn.execute(
            """
            INSERT INTO markdown_blocks (id, content_id, source, position, created_at)
            VALUES (?, ?, ?, ?, ?)
            """,
            (block.id, content_id, block.source, position, format_dt(block.created_at)),
        )

    def delete(self, content_id: str) -> None:
        try:
            with self._session("delete") as conn:
                # Explicit child delete also covers connections without FK enforcement
                conn.execute("DELETE FROM markdown_blocks WHERE content_id = ?", (content_id,))
                conn.execute("DELETE FROM content_items WHERE id = ?", (content_id,))
        except sqlite3.Error as e:
            raise DeleteError(content_id, str(e)) from e

        logger.debug("Deleted content %s", content_id)

    # --- Reads ---

    def find_by_id(self, content_id: str) -> ContentItem | None:
        try:
            with self._session("find_by_id") as conn:
                row = self._query(
                    conn, "SELECT * FROM content_items WHERE id = ?", (content_id,)
                ).fetchone()
                if not row:
                    return None

                blocks = self._load_blocks(conn, [content_id]).get(content_id, [])
                return self._map_row(row, blocks)
        except (sqlite3.Error, ValueError) as e:
            raise QueryError("find_by_id", str(e)) from e

    def find_all(self, limit: int = 20, offset: int = 0) -> list[ContentItem]:
        """Newest first. Blocks for the whole page are fetched in one query."""
        return self._find_page(
            "find_all",
            "SELECT * FROM content_items ORDER BY created_at DESC, id DESC LIMIT ? OFFSET ?",
            (limit, offset),
        )

    def find_by_type(
        self, content_type: str, limit: int = 20, offset: int = 0
    ) -> list[ContentItem]:
        return self._find_page(
            "find_by_type",
            """
            SELECT * FROM content_items
            WHERE type = ?
            ORDER BY created_at DESC, id DESC
            LIMIT ? OFFSET ?
            """,
            (content_type, limit, offset),
        )

    def count(self) -> int:
        try:
            with self._session("count") as conn:
                row = self._query(conn, "SELECT COUNT(*) AS cnt FROM content_items").fetchone()
                return int(row["cnt"]) if row else 0
        except sqlite3.Error as e:
            raise QueryError("count", str(e)) from e

    def exists(self, content_id: str) -> bool:
        try:
            with self._session("exists") as conn:
                row = self._query(
                    conn, "SELECT 1 AS found FROM content_items WHERE id = ? LIMIT 1", (content_id,)
                ).fetchone()
                return row is not None
        except sqlite3.Error as e:
            raise QueryError("exists", str(e)) from e

    # --- Helpers ---

    def _find_page(self, operation: str, sql: str, params: Sequence[Any]) -> list[ContentItem]:
        try:
            with self._session(operation) as conn:
                rows = self._query(conn, sql, params).fetchall()
                blocks = self._load_blocks(conn, [row["id"] for row in rows])
                return [self._map_row(row, blocks.get(row["id"], [])) for row in rows]
        except (sqlite3.Error, ValueError) as e:
            raise QueryError(operation, str(e)) from e

    def _load_blocks(
        self, conn: sqlite3.Connection, content_ids: list[str]
    ) -> dict[str, list[Block]]:
        if not content_ids:
            return {}

        placeholders = ", ".join("?" for _ in content_ids)
        rows = self._query(
            conn,
            f"""
            SELECT * FROM markdown_blocks
            WHERE content_id IN ({placeholders})
            ORDER BY position ASC, created_at ASC
            """,
            content_ids,
        ).fetchall()

        blocks: dict[str, list[Block]] = {}
        for b_row in rows:
            blocks.setdefault(b_row["content_id"], []).append(
                MarkdownBlock(
                    id=b_row["id"],
                    source=b_row["source"],
                    created_at=parse_dt(b_row["created_at"]),
                )
            )
        return blocks

    @staticmethod
    def _map_row(row: dict[str, Any], blocks: list[Block]) -> ContentItem:
        """Raises ValueError (or pydantic ValidationError) for rows that no longer parse."""
        return ContentItem(
            id=row["id"],
            type=row["type"],
            title=row["title"],
            summary=row["summary"],
            blocks=blocks,
            created_at=parse_dt(row["created_at"]),
            updated_at=parse_dt(row["updated_at"]),
        )
