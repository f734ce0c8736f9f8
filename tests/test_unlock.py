from datetime import timedelta

import pytest

from errors import NotFoundError, ValidationError
from models.line import Outcome
from utils.ingest import add_text_with_lines
from utils.selection import get_lines_for_text
from utils.unlock import (
    build_review_queue,
    next_review_line,
    record_review,
    should_unlock_next_line,
    unlock_next_line,
)


def test_should_unlock_requires_every_unlocked_line_reviewed(store, now):
    text_id = add_text_with_lines(store, "T", "a\nb\nc", now=now)
    lines = get_lines_for_text(store, text_id)
    assert not should_unlock_next_line(lines, 0, now)
    reviewed = lines[0].model_copy(
        update={"last_reviewed_at": now, "next_review_date": now + timedelta(days=1)}
    )
    assert should_unlock_next_line([reviewed] + lines[1:], 0, now)
    assert not should_unlock_next_line([reviewed] + lines[1:], 1, now)


def test_should_unlock_false_while_line_still_due(store, now):
    text_id = add_text_with_lines(store, "T", "a\nb", now=now)
    line = get_lines_for_text(store, text_id)[0].model_copy(update={"last_reviewed_at": now})
    assert not should_unlock_next_line([line], 0, now)


def test_unlock_without_trigger_is_a_no_op(store, now):
    text_id = add_text_with_lines(store, "T", "a\nb", now=now)
    assert unlock_next_line(store, text_id, now) == 0
    assert store.get_text(text_id).max_unlocked_line_number == 0


def test_review_unlocks_next_line(store, now):
    text_id = add_text_with_lines(store, "T", "a b\nc d\ne f", now=now)
    first = get_lines_for_text(store, text_id)[0]

    result = record_review(store, text_id, first.id, Outcome.REMEMBERED, now=now)

    assert result.max_unlocked_line_number == 1
    assert result.line.repetitions == 1
    assert result.line.mask_level == 1
    text = store.get_text(text_id)
    assert text.max_unlocked_line_number == 1
    assert text.last_reviewed_at == now
    persisted = store.get_line(first.id)
    assert persisted.next_review_date == now + timedelta(days=1)
    assert persisted.last_reviewed_at == now


def test_forgotten_review_also_counts_toward_unlock(store, now):
    text_id = add_text_with_lines(store, "T", "a\nb", now=now)
    first = get_lines_for_text(store, text_id)[0]
    result = record_review(store, text_id, first.id, Outcome.FORGOTTEN, now=now)
    assert result.line.lapses == 1
    assert result.max_unlocked_line_number == 1


def test_unlock_stops_at_last_line(store, now):
    text_id = add_text_with_lines(store, "T", "only", now=now)
    line = get_lines_for_text(store, text_id)[0]
    result = record_review(store, text_id, line.id, Outcome.REMEMBERED, now=now)
    assert result.max_unlocked_line_number == 0
    assert unlock_next_line(store, text_id, now + timedelta(days=30)) == 0


def test_auto_unlock_disabled(store, now):
    text_id = add_text_with_lines(store, "T", "a\nb", now=now)
    first = get_lines_for_text(store, text_id)[0]
    result = record_review(store, text_id, first.id, Outcome.REMEMBERED, now=now, auto_unlock=False)
    assert result.max_unlocked_line_number == 0
    assert store.get_text(text_id).max_unlocked_line_number == 0


def test_locked_line_cannot_be_reviewed(store, now):
    text_id = add_text_with_lines(store, "T", "a\nb", now=now)
    locked = get_lines_for_text(store, text_id)[1]
    with pytest.raises(ValidationError):
        record_review(store, text_id, locked.id, Outcome.REMEMBERED, now=now)
    assert store.get_line(locked.id).last_reviewed_at is None


def test_review_of_foreign_line_raises(store, now):
    first = add_text_with_lines(store, "A", "a", now=now)
    second = add_text_with_lines(store, "B", "b", now=now)
    foreign = get_lines_for_text(store, second)[0]
    with pytest.raises(NotFoundError):
        record_review(store, first, foreign.id, Outcome.REMEMBERED, now=now)


def test_review_queue_excludes_locked_lines(store, now):
    text_id = add_text_with_lines(store, "T", "a\nb\nc", now=now)
    queue = build_review_queue(store, text_id, now)
    assert [line.line_number for line in queue] == [0]

    store.update_text(text_id, {"max_unlocked_line_number": 2})
    queue = build_review_queue(store, text_id, now)
    assert [line.line_number for line in queue] == [0, 1, 2]


def test_review_loop_walks_through_text(store, now):
    text_id = add_text_with_lines(store, "T", "a\nb\nc", now=now)
    seen = []
    line = next_review_line(store, text_id, now)
    while line is not None:
        seen.append(line.line_number)
        record_review(store, text_id, line.id, Outcome.REMEMBERED, now=now)
        line = next_review_line(store, text_id, now)
    assert seen == [0, 1, 2]
    assert store.get_text(text_id).max_unlocked_line_number == 2
    assert next_review_line(store, text_id, now + timedelta(days=1)).line_number == 0


def test_queue_for_missing_text_raises(store, now):
    with pytest.raises(NotFoundError):
        build_review_queue(store, 99, now)


def test_naive_now_is_read_as_utc(store, now):
    naive = now.replace(tzinfo=None)
    text_id = add_text_with_lines(store, "T", "a b\nc d", now=naive)
    first = next_review_line(store, text_id, naive)

    result = record_review(store, text_id, first.id, Outcome.REMEMBERED, now=naive)

    assert result.max_unlocked_line_number == 1
    assert result.line.last_reviewed_at == now
    assert store.get_line(first.id).next_review_date == now + timedelta(days=1)
    assert unlock_next_line(store, text_id, naive) == 1
    assert [line.line_number for line in build_review_queue(store, text_id, naive)] == [1]


def test_review_queue_uses_given_text(store, now):
    text_id = add_text_with_lines(store, "T", "a\nb\nc", now=now)
    loaded = store.get_text(text_id)
    store.update_text(text_id, {"max_unlocked_line_number": 2})
    queue = build_review_queue(store, text_id, now, text=loaded)
    assert [line.line_number for line in queue] == [0]
