from __future__ import annotations

from datetime import datetime

import aiosqlite

from qubrain.config import settings
from qubrain.db.sqlite import count_flashcards, list_all_flashcards
from qubrain.models.flashcard import DueCards, ReviewStats
from qubrain.services.leitner import (
    BOX_MAX,
    BOX_MIN,
    count_by_box,
    day_bounds,
    resolve_timezone,
    select_due,
)


def today_bounds(now: datetime) -> tuple[datetime, datetime]:
    return day_bounds(now, resolve_timezone(settings.timezone))


async def due_cards(db: aiosqlite.Connection, user_id: str, now: datetime) -> DueCards:
    """Due queue for the review screen, with the progress counters shown beside it."""
    cards = await list_all_flashcards(db, user_id)
    _, end_of_day = today_bounds(now)
    return DueCards(
        cards=select_due(cards, now),
        due_today=sum(1 for c in cards if c.next_review_date <= end_of_day),
        total=len(cards),
        box_counts=count_by_box(cards),
    )


async def review_stats(
    db: aiosqlite.Connection, user_id: str, now: datetime
) -> ReviewStats:
    start_of_day, end_of_day = today_bounds(now)
    box_counts = [
        await count_flashcards(db, user_id, box=box)
        for box in range(BOX_MIN, BOX_MAX + 1)
    ]
    return ReviewStats(
        total_cards=await count_flashcards(db, user_id),
        box_counts=box_counts,
        due_today=await count_flashcards(db, user_id, due_before=end_of_day),
        reviewed_today=await count_flashcards(
            db, user_id, reviewed_between=(start_of_day, end_of_day)
        ),
    )
