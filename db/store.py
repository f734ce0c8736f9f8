"""Record store for texts and lines.

`RecordStore` is the storage contract the review core depends on;
`SqliteRecordStore` implements it on a single sqlite3 connection. Writes
issued outside `atomic()` commit immediately, writes inside it commit
together when the outermost block exits cleanly.
"""
from __future__ import annotations

import logging
import sqlite3
from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Iterator, List, Optional

from errors import StorageError
from models.line import Line, LineCreate
from models.text import Text

logger = logging.getLogger(__name__)

TEXT_UPDATABLE_FIELDS = ("title", "author", "last_reviewed_at", "max_unlocked_line_number")


def to_db_ts(value: Optional[datetime]) -> Optional[str]:
    """Serialize to fixed-width UTC ISO-8601 so string order equals time order."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds")


class RecordStore(ABC):
    @abstractmethod
    def insert_text(self, *, title: str, author: Optional[str], content: str,
                    created_at: datetime, max_unlocked_line_number: int = 0) -> int: ...

    @abstractmethod
    def get_text(self, text_id: int) -> Optional[Text]: ...

    @abstractmethod
    def list_texts(self) -> List[Text]: ...

    @abstractmethod
    def update_text(self, text_id: int, changes: Dict[str, Any]) -> bool: ...

    @abstractmethod
    def delete_text(self, text_id: int) -> bool: ...

    @abstractmethod
    def bulk_insert_lines(self, lines: Iterable[LineCreate]) -> None: ...

    @abstractmethod
    def get_lines(
        self,
        text_id: int,
        *,
        due_at: Optional[datetime] = None,
        unreviewed: Optional[bool] = None,
        max_line_number: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> List[Line]: ...

    @abstractmethod
    def get_line(self, line_id: int) -> Optional[Line]: ...

    @abstractmethod
    def count_lines(self, text_id: int) -> int: ...

    @abstractmethod
    def update_line(self, line: Line) -> bool: ...

    @abstractmethod
    def delete_lines(self, text_id: int) -> int: ...

    @abstractmethod
    def atomic(self): ...


class SqliteRecordStore(RecordStore):
    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn
        self._depth = 0

    def _fail(self, error: sqlite3.Error) -> StorageError:
        # Inside atomic() the outermost block rolls back.
        if not self._depth:
            self.conn.rollback()
        logger.error("Storage failure: %s", error)
        return StorageError(str(error))

    def _execute(self, sql: str, params: Iterable[Any] = ()) -> sqlite3.Cursor:
        try:
            return self.conn.execute(sql, tuple(params))
        except sqlite3.Error as e:
            raise self._fail(e) from e

    def _commit(self) -> None:
        if self._depth:
            return
        try:
            self.conn.commit()
        except sqlite3.Error as e:
            self.conn.rollback()
            raise StorageError(str(e)) from e

    @contextmanager
    def atomic(self) -> Iterator["SqliteRecordStore"]:
        self._depth += 1
        try:
            yield self
        except BaseException:
            self._depth -= 1
            if self._depth == 0:
                self.conn.rollback()
                logger.warning("Grouped write rolled back")
            raise
        self._depth -= 1
        self._commit()

    # Texts

    def insert_text(self, *, title, author, content, created_at, max_unlocked_line_number=0):
        cursor = self._execute(
            """
            INSERT INTO texts (title, author, content, created_at, max_unlocked_line_number)
            VALUES (?, ?, ?, ?, ?)
            """,
            (title, author, content, to_db_ts(created_at), max_unlocked_line_number),
        )
        self._commit()
        return cursor.lastrowid

    def get_text(self, text_id):
        row = self._execute("SELECT * FROM texts WHERE id = ?", (text_id,)).fetchone()
        return Text(**dict(row)) if row else None

    def list_texts(self):
        rows = self._execute("SELECT * FROM texts ORDER BY created_at DESC, id DESC").fetchall()
        return [Text(**dict(row)) for row in rows]

    def update_text(self, text_id, changes):
        unknown = set(changes) - set(TEXT_UPDATABLE_FIELDS)
        if unknown:
            raise ValueError(f"Cannot update text fields: {', '.join(sorted(unknown))}")
        if not changes:
            return self.get_text(text_id) is not None
        columns = list(changes)
        values = [to_db_ts(v) if isinstance(v, datetime) else v for v in changes.values()]
        assignments = ", ".join(f"{column} = ?" for column in columns)
        cursor = self._execute(
            f"UPDATE texts SET {assignments} WHERE id = ?",
            (*values, text_id),
        )
        self._commit()
        return cursor.rowcount > 0

    def delete_text(self, text_id):
        cursor = self._execute("DELETE FROM texts WHERE id = ?", (text_id,))
        self._commit()
        return cursor.rowcount > 0

    # Lines

    def bulk_insert_lines(self, lines):
        rows = [
            (
                line.text_id,
                line.line_number,
                line.original_line_text,
                to_db_ts(line.next_review_date),
                line.interval,
                line.ease_factor,
                line.repetitions,
                line.lapses,
                to_db_ts(line.last_reviewed_at),
                line.mask_level,
            )
            for line in lines
        ]
        try:
            self.conn.executemany(
                """
                INSERT INTO lines (
                    text_id, line_number, original_line_text, next_review_date, interval,
                    ease_factor, repetitions, lapses, last_reviewed_at, mask_level
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                rows,
            )
        except sqlite3.Error as e:
            raise self._fail(e) from e
        self._commit()

    def get_lines(self, text_id, *, due_at=None, unreviewed=None, max_line_number=None, limit=None):
        clauses = ["text_id = ?"]
        params: List[Any] = [text_id]
        if due_at is not None:
            clauses.append("next_review_date <= ?")
            params.append(to_db_ts(due_at))
        if unreviewed is True:
            clauses.append("last_reviewed_at IS NULL")
        elif unreviewed is False:
            clauses.append("last_reviewed_at IS NOT NULL")
        if max_line_number is not None:
            clauses.append("line_number <= ?")
            params.append(max_line_number)
        sql = f"SELECT * FROM lines WHERE {' AND '.join(clauses)} ORDER BY line_number ASC"
        if limit is not None:
            sql += " LIMIT ?"
            params.append(limit)
        return [Line(**dict(row)) for row in self._execute(sql, params).fetchall()]

    def get_line(self, line_id):
        row = self._execute("SELECT * FROM lines WHERE id = ?", (line_id,)).fetchone()
        return Line(**dict(row)) if row else None

    def count_lines(self, text_id):
        row = self._execute("SELECT COUNT(*) FROM lines WHERE text_id = ?", (text_id,)).fetchone()
        return int(row[0] or 0)

    def update_line(self, line):
        cursor = self._execute(
            """
            UPDATE lines
            SET next_review_date = ?, interval = ?, ease_factor = ?, repetitions = ?,
                lapses = ?, last_reviewed_at = ?, mask_level = ?
            WHERE id = ?
            """,
            (
                to_db_ts(line.next_review_date),
                line.interval,
                line.ease_factor,
                line.repetitions,
                line.lapses,
                to_db_ts(line.last_reviewed_at),
                line.mask_level,
                line.id,
            ),
        )
        self._commit()
        return cursor.rowcount > 0

    def delete_lines(self, text_id):
        cursor = self._execute("DELETE FROM lines WHERE text_id = ?", (text_id,))
        self._commit()
        return cursor.rowcount
