from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Optional

from db.store import RecordStore
from errors import NotFoundError, ValidationError
from models.line import Line, Outcome
from models.text import Text
from utils.selection import get_due_lines_for_text, get_next_unreviewed_line_for_text
from utils.srs import apply_review, as_utc, calculate_next_review

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReviewResult:
    line: Line
    max_unlocked_line_number: int


def _require_text(store: RecordStore, text_id: int) -> Text:
    text = store.get_text(text_id)
    if text is None:
        raise NotFoundError("Text", text_id)
    return text


def should_unlock_next_line(lines: Iterable[Line], max_unlocked: int, now: datetime) -> bool:
    """True once every unlocked line was reviewed at least once and none is due."""
    unlocked = [line for line in lines if line.line_number <= max_unlocked]
    if not unlocked:
        return False
    return all(
        line.last_reviewed_at is not None and line.next_review_date > now
        for line in unlocked
    )


def unlock_next_line(store: RecordStore, text_id: int, now: Optional[datetime] = None) -> int:
    """Advance max_unlocked_line_number by one when the guard allows it."""
    now = as_utc(now)
    text = _require_text(store, text_id)
    current = text.max_unlocked_line_number
    if current + 1 >= store.count_lines(text_id):
        return current
    unlocked = store.get_lines(text_id, max_line_number=current)
    if not should_unlock_next_line(unlocked, current, now):
        return current
    store.update_text(text_id, {"max_unlocked_line_number": current + 1})
    logger.info("Text %s: unlocked line %d", text_id, current + 1)
    return current + 1


def build_review_queue(
    store: RecordStore,
    text_id: int,
    now: Optional[datetime] = None,
    text: Optional[Text] = None,
) -> List[Line]:
    """Due lines that are also unlocked; locked lines never surface.

    Pass an already loaded `text` to gate against that same read.
    """
    if text is None:
        text = _require_text(store, text_id)
    return get_due_lines_for_text(
        store, text_id, now=as_utc(now), max_line_number=text.max_unlocked_line_number
    )


def next_review_line(store: RecordStore, text_id: int, now: Optional[datetime] = None) -> Optional[Line]:
    queue = build_review_queue(store, text_id, now)
    if queue:
        return queue[0]
    text = _require_text(store, text_id)
    line = get_next_unreviewed_line_for_text(store, text_id)
    if line is not None and line.line_number <= text.max_unlocked_line_number:
        return line
    return None


def record_review(
    store: RecordStore,
    text_id: int,
    line_id: int,
    outcome: Outcome,
    now: Optional[datetime] = None,
    auto_unlock: bool = True,
) -> ReviewResult:
    """Apply one review outcome and persist line, text and unlock state together."""
    now = as_utc(now)
    with store.atomic():
        text = _require_text(store, text_id)
        line = store.get_line(line_id)
        if line is None or line.text_id != text_id:
            raise NotFoundError("Line", line_id)
        if line.line_number > text.max_unlocked_line_number:
            raise ValidationError(f"Line {line.line_number} is still locked")
        updated = apply_review(line, calculate_next_review(line, outcome, now))
        store.update_line(updated)
        store.update_text(text_id, {"last_reviewed_at": now})
        if auto_unlock:
            max_unlocked = unlock_next_line(store, text_id, now)
        else:
            max_unlocked = text.max_unlocked_line_number
    return ReviewResult(line=updated, max_unlocked_line_number=max_unlocked)
