"""Simplified SM-2 scheduling for lines of text.

Two outcomes only (remembered / forgotten). Success grows the interval and
hides one more trailing word; a lapse resets the streak, lowers the ease
factor and reveals the whole line again.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from models.line import Line, Outcome

logger = logging.getLogger(__name__)

MIN_INTERVAL = 1  # days
INITIAL_EASE_FACTOR = 2.5
MIN_EASE_FACTOR = 1.3
EASE_PENALTY = 0.2
SECOND_REVIEW_EASE_THRESHOLD = 1.5


@dataclass(frozen=True)
class LineReviewState:
    repetitions: int
    interval: int
    ease_factor: float
    lapses: int
    mask_level: int
    next_review_date: datetime
    last_reviewed_at: datetime


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(moment: Optional[datetime]) -> datetime:
    """Current time when absent; naive values are read as UTC."""
    if moment is None:
        return utcnow()
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def count_words(text: str) -> int:
    return len(text.split())


def max_mask_level(text: str) -> int:
    """At least one word stays visible, unless there are none."""
    return max(count_words(text) - 1, 0)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def add_days(moment: datetime, days: int) -> datetime:
    # Calendar-day addition; month and year rollover handled by timedelta.
    return moment + timedelta(days=days)


def calculate_next_review(line: Line, outcome: Outcome, now: datetime) -> LineReviewState:
    """Compute the next scheduling state of a line. Pure: reads only its arguments."""
    repetitions = line.repetitions
    interval = line.interval
    ease_factor = line.ease_factor
    lapses = line.lapses
    mask_level = line.mask_level

    if Outcome(outcome) is Outcome.REMEMBERED:
        repetitions += 1
        if repetitions == 1:
            interval = MIN_INTERVAL
        elif repetitions == 2:
            multiplier = 2.5 if ease_factor > SECOND_REVIEW_EASE_THRESHOLD else 1.5
            interval = max(MIN_INTERVAL, _round_half_up(MIN_INTERVAL * multiplier))
        else:
            interval = max(MIN_INTERVAL, _round_half_up(interval * ease_factor))
        mask_level = min(mask_level + 1, max_mask_level(line.original_line_text))
    else:
        repetitions = 0
        lapses += 1
        interval = MIN_INTERVAL
        ease_factor = max(MIN_EASE_FACTOR, ease_factor - EASE_PENALTY)
        mask_level = 0

    logger.debug(
        "Line %s %s: interval=%d ease=%.2f reps=%d mask=%d",
        line.id, Outcome(outcome).value, interval, ease_factor, repetitions, mask_level,
    )
    return LineReviewState(
        repetitions=repetitions,
        interval=interval,
        ease_factor=ease_factor,
        lapses=lapses,
        mask_level=mask_level,
        next_review_date=add_days(now, interval),
        last_reviewed_at=now,
    )


def apply_review(line: Line, state: LineReviewState) -> Line:
    """Replace the mutable scheduling fields; identity and source text stay."""
    return line.model_copy(
        update={
            "repetitions": state.repetitions,
            "interval": state.interval,
            "ease_factor": state.ease_factor,
            "lapses": state.lapses,
            "mask_level": state.mask_level,
            "next_review_date": state.next_review_date,
            "last_reviewed_at": state.last_reviewed_at,
        }
    )
