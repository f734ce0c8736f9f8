from __future__ import annotations

import logging
import re
from datetime import datetime
from typing import List, Optional

from db.store import RecordStore
from errors import NotFoundError, StorageError, ValidationError
from models.line import LineCreate
from models.text import Text
from utils.srs import INITIAL_EASE_FACTOR, as_utc

logger = logging.getLogger(__name__)

_LINE_BREAK_RE = re.compile(r"\r?\n")


def split_lines(content: str) -> List[str]:
    """Non-blank lines of `content`, in order and otherwise unchanged."""
    return [line for line in _LINE_BREAK_RE.split(content) if line.strip()]


def normalize_author(author: Optional[str]) -> Optional[str]:
    if author is None:
        return None
    return author.strip() or None


def add_text_with_lines(
    store: RecordStore,
    title: str,
    content: str,
    author: Optional[str] = None,
    now: Optional[datetime] = None,
) -> int:
    """Create a text and one line per non-blank source line as a single unit."""
    if not title or not title.strip():
        raise ValidationError("Title cannot be empty")
    if not content or not content.strip():
        raise ValidationError("Content cannot be empty")
    now = as_utc(now)
    line_texts = split_lines(content)
    try:
        with store.atomic():
            text_id = store.insert_text(
                title=title.strip(),
                author=normalize_author(author),
                content=content,
                created_at=now,
                max_unlocked_line_number=0,
            )
            store.bulk_insert_lines(
                LineCreate(
                    text_id=text_id,
                    line_number=index,
                    original_line_text=line_text,
                    next_review_date=now,
                    interval=0,
                    ease_factor=INITIAL_EASE_FACTOR,
                    repetitions=0,
                    lapses=0,
                    mask_level=0,
                    last_reviewed_at=None,
                )
                for index, line_text in enumerate(line_texts)
            )
    except StorageError:
        logger.exception("Failed to add text %r", title)
        raise
    logger.info("Text added with ID %s (%d lines)", text_id, len(line_texts))
    return text_id


def get_all_texts(store: RecordStore) -> List[Text]:
    return store.list_texts()


def delete_text_and_lines(store: RecordStore, text_id: int) -> None:
    """Remove a text and every line it owns, or nothing at all."""
    with store.atomic():
        if store.get_text(text_id) is None:
            raise NotFoundError("Text", text_id)
        removed = store.delete_lines(text_id)
        store.delete_text(text_id)
    logger.info("Deleted text %s and %d lines", text_id, removed)
