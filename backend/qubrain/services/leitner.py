"""
Leitner box scheduling.

Cards live in one of five boxes. A correct answer promotes the card one box
(capped at the last box); a wrong answer sends it back to box 1. The next
review date is always ``now + INTERVAL_DAYS[box - 1]`` days, evaluated at the
moment of the transition.

All functions are pure: the caller supplies ``now``.
"""
from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, time, timedelta, timezone, tzinfo
from typing import Protocol
from zoneinfo import ZoneInfo

BOX_MIN = 1
BOX_MAX = 5

# Days until the next review, indexed by box - 1.
INTERVAL_DAYS: tuple[int, ...] = (1, 3, 7, 14, 30)


class ScheduledCard(Protocol):
    box: int
    next_review_date: datetime


@dataclass(frozen=True)
class Transition:
    box: int
    next_review_date: datetime
    last_reviewed_at: datetime


def _check_box(box: int) -> None:
    if not BOX_MIN <= box <= BOX_MAX:
        raise ValueError(f"box must be between {BOX_MIN} and {BOX_MAX}, got {box}")


def interval_for(box: int) -> timedelta:
    _check_box(box)
    return timedelta(days=INTERVAL_DAYS[box - 1])


def intervals() -> dict[int, int]:
    """Box number -> review interval in days."""
    return {box: days for box, days in enumerate(INTERVAL_DAYS, start=BOX_MIN)}


def next_box(box: int, correct: bool) -> int:
    if not correct:
        return BOX_MIN
    return max(BOX_MIN, min(box + 1, BOX_MAX))


def next_review_date(box: int, now: datetime) -> datetime:
    return now + interval_for(box)


def initial_schedule(box: int, now: datetime) -> datetime:
    """Next review date for a card created directly into ``box``."""
    return next_review_date(box, now)


def schedule(box: int, correct: bool, now: datetime) -> Transition:
    new_box = next_box(box, correct)
    return Transition(
        box=new_box,
        next_review_date=next_review_date(new_box, now),
        last_reviewed_at=now,
    )


def apply_override(box: int, review_date: datetime, now: datetime) -> Transition:
    """Set box and date explicitly. Out-of-range boxes are rejected, not clamped."""
    _check_box(box)
    return Transition(box=box, next_review_date=review_date, last_reviewed_at=now)


def is_due(card: ScheduledCard, now: datetime) -> bool:
    return card.next_review_date <= now


def due_sort_key(card: ScheduledCard) -> tuple[int, datetime]:
    # Lower boxes first, then earliest review date.
    return card.box, card.next_review_date


def select_due(cards: Iterable[ScheduledCard], now: datetime) -> list:
    return sorted((c for c in cards if is_due(c, now)), key=due_sort_key)


def count_by_box(cards: Iterable[ScheduledCard]) -> list[int]:
    counts = [0] * (BOX_MAX - BOX_MIN + 1)
    for card in cards:
        if BOX_MIN <= card.box <= BOX_MAX:
            counts[card.box - BOX_MIN] += 1
    return counts


def resolve_timezone(name: str) -> tzinfo:
    if name.upper() == "UTC":
        return timezone.utc
    return ZoneInfo(name)


def day_bounds(now: datetime, tz: tzinfo) -> tuple[datetime, datetime]:
    """Inclusive start and end of the calendar day containing ``now`` in ``tz``, in UTC."""
    local_day = now.astimezone(tz).date()
    start = datetime.combine(local_day, time.min, tzinfo=tz)
    end = datetime.combine(local_day + timedelta(days=1), time.min, tzinfo=tz)
    end -= timedelta(microseconds=1)
    return start.astimezone(timezone.utc), end.astimezone(timezone.utc)
