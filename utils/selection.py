"""Read-only line queries for one text. Each call is a single SELECT."""
from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from db.store import RecordStore
from models.line import Line
from utils.srs import as_utc


def get_lines_for_text(store: RecordStore, text_id: int) -> List[Line]:
    return store.get_lines(text_id)


def get_due_lines_for_text(
    store: RecordStore,
    text_id: int,
    now: Optional[datetime] = None,
    max_line_number: Optional[int] = None,
) -> List[Line]:
    """Lines whose next review date has passed.

    Not gated by the text's unlock state unless `max_line_number` is given;
    see `utils.unlock.build_review_queue` for the gated variant.
    """
    return store.get_lines(
        text_id,
        due_at=as_utc(now),
        max_line_number=max_line_number,
    )


def get_next_unreviewed_line_for_text(store: RecordStore, text_id: int) -> Optional[Line]:
    lines = store.get_lines(text_id, unreviewed=True, limit=1)
    return lines[0] if lines else None
