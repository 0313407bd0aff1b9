import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import AsyncIterator

import aiosqlite

from qubrain.config import settings
from qubrain.models.flashcard import Flashcard, FlashcardUpdate
from qubrain.models.user import User

logger = logging.getLogger(__name__)

_db_path: Path | None = None

SCHEMA_SQL = """
PRAGMA journal_mode=WAL;
PRAGMA foreign_keys=ON;

CREATE TABLE IF NOT EXISTS users (
    id            TEXT PRIMARY KEY,
    name          TEXT NOT NULL,
    email         TEXT NOT NULL UNIQUE,
    password_hash TEXT NOT NULL,
    created_at    TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS flashcards (
    id               TEXT PRIMARY KEY,
    user_id          TEXT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    question         TEXT NOT NULL,
    answer           TEXT NOT NULL,
    box              INTEGER NOT NULL DEFAULT 1 CHECK (box BETWEEN 1 AND 5),
    next_review_date TEXT NOT NULL,
    created_at       TEXT NOT NULL,
    last_reviewed_at TEXT
);
CREATE INDEX IF NOT EXISTS idx_flashcards_user ON flashcards(user_id);
CREATE INDEX IF NOT EXISTS idx_flashcards_due ON flashcards(user_id, next_review_date);

CREATE TABLE IF NOT EXISTS schema_version (
    version    INTEGER PRIMARY KEY,
    applied_at TEXT NOT NULL DEFAULT (datetime('now'))
);
INSERT OR IGNORE INTO schema_version(version) VALUES (1);
"""


async def init_sqlite(data_dir: Path) -> None:
    global _db_path
    _db_path = data_dir / settings.sqlite_filename
    async with aiosqlite.connect(_db_path) as db:
        await db.executescript(SCHEMA_SQL)
        await db.commit()
    logger.info("SQLite ready at %s", _db_path)


async def get_db() -> AsyncIterator[aiosqlite.Connection]:
    assert _db_path is not None, "SQLite not initialized"
    async with aiosqlite.connect(_db_path) as db:
        db.row_factory = aiosqlite.Row
        await db.execute("PRAGMA foreign_keys=ON")
        yield db


def _ts(value: datetime) -> str:
    """Fixed-width UTC ISO-8601, so string order matches time order."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds")


def _now() -> str:
    return _ts(datetime.now(timezone.utc))


# --- Users ---


def _row_to_user(row: aiosqlite.Row) -> User:
    return User(**dict(row))


async def create_user(
    db: aiosqlite.Connection, name: str, email: str, password_hash: str
) -> User:
    user_id = str(uuid.uuid4())
    await db.execute(
        """INSERT INTO users (id, name, email, password_hash, created_at)
           VALUES (?, ?, ?, ?, ?)""",
        (user_id, name, email, password_hash, _now()),
    )
    await db.commit()
    return await get_user(db, user_id)  # type: ignore[return-value]


async def get_user(db: aiosqlite.Connection, user_id: str) -> User | None:
    cursor = await db.execute("SELECT * FROM users WHERE id = ?", (user_id,))
    row = await cursor.fetchone()
    return _row_to_user(row) if row else None


async def get_user_by_email(db: aiosqlite.Connection, email: str) -> User | None:
    cursor = await db.execute("SELECT * FROM users WHERE email = ?", (email,))
    row = await cursor.fetchone()
    return _row_to_user(row) if row else None


# --- Flashcards ---
# Every query is filtered by user_id; a card owned by someone else is "not found".


def _row_to_flashcard(row: aiosqlite.Row) -> Flashcard:
    return Flashcard(**dict(row))


async def create_flashcard(
    db: aiosqlite.Connection,
    user_id: str,
    question: str,
    answer: str,
    box: int,
    next_review_date: datetime,
    created_at: datetime,
) -> Flashcard:
    card_id = str(uuid.uuid4())
    await db.execute(
        """INSERT INTO flashcards
           (id, user_id, question, answer, box, next_review_date, created_at)
           VALUES (?, ?, ?, ?, ?, ?, ?)""",
        (
            card_id,
            user_id,
            question,
            answer,
            box,
            _ts(next_review_date),
            _ts(created_at),
        ),
    )
    await db.commit()
    return await get_flashcard(db, user_id, card_id)  # type: ignore[return-value]


async def get_flashcard(
    db: aiosqlite.Connection, user_id: str, card_id: str
) -> Flashcard | None:
    cursor = await db.execute(
        "SELECT * FROM flashcards WHERE id = ? AND user_id = ?", (card_id, user_id)
    )
    row = await cursor.fetchone()
    return _row_to_flashcard(row) if row else None


async def list_flashcards(
    db: aiosqlite.Connection, user_id: str, offset: int = 0, limit: int = 50
) -> tuple[list[Flashcard], int]:
    total = await count_flashcards(db, user_id)
    cursor = await db.execute(
        """SELECT * FROM flashcards WHERE user_id = ?
           ORDER BY created_at ASC LIMIT ? OFFSET ?""",
        (user_id, limit, offset),
    )
    rows = await cursor.fetchall()
    return [_row_to_flashcard(r) for r in rows], total


async def list_all_flashcards(
    db: aiosqlite.Connection, user_id: str
) -> list[Flashcard]:
    cursor = await db.execute(
        "SELECT * FROM flashcards WHERE user_id = ? ORDER BY created_at ASC",
        (user_id,),
    )
    rows = await cursor.fetchall()
    return [_row_to_flashcard(r) for r in rows]


async def update_flashcard_schedule(
    db: aiosqlite.Connection,
    user_id: str,
    card_id: str,
    box: int,
    next_review_date: datetime,
    last_reviewed_at: datetime,
) -> Flashcard | None:
    await db.execute(
        """UPDATE flashcards
           SET box = ?, next_review_date = ?, last_reviewed_at = ?
           WHERE id = ? AND user_id = ?""",
        (box, _ts(next_review_date), _ts(last_reviewed_at), card_id, user_id),
    )
    await db.commit()
    return await get_flashcard(db, user_id, card_id)


async def update_flashcard_content(
    db: aiosqlite.Connection,
    user_id: str,
    card_id: str,
    update: FlashcardUpdate,
) -> Flashcard | None:
    card = await get_flashcard(db, user_id, card_id)
    if not card:
        return None
    new_q = update.question if update.question is not None else card.question
    new_a = update.answer if update.answer is not None else card.answer
    await db.execute(
        "UPDATE flashcards SET question = ?, answer = ? WHERE id = ? AND user_id = ?",
        (new_q, new_a, card_id, user_id),
    )
    await db.commit()
    return await get_flashcard(db, user_id, card_id)


async def delete_flashcard(
    db: aiosqlite.Connection, user_id: str, card_id: str
) -> bool:
    cursor = await db.execute(
        "DELETE FROM flashcards WHERE id = ? AND user_id = ?", (card_id, user_id)
    )
    await db.commit()
    return (cursor.rowcount or 0) > 0


async def count_flashcards(
    db: aiosqlite.Connection,
    user_id: str,
    box: int | None = None,
    due_before: datetime | None = None,
    reviewed_between: tuple[datetime, datetime] | None = None,
) -> int:
    """Count the user's cards, optionally narrowed by box, due date or review window (inclusive)."""
    clauses = ["user_id = ?"]
    params: list = [user_id]
    if box is not None:
        clauses.append("box = ?")
        params.append(box)
    if due_before is not None:
        clauses.append("next_review_date <= ?")
        params.append(_ts(due_before))
    if reviewed_between is not None:
        start, end = reviewed_between
        clauses.append("last_reviewed_at BETWEEN ? AND ?")
        params.extend([_ts(start), _ts(end)])

    cursor = await db.execute(
        f"SELECT COUNT(*) FROM flashcards WHERE {' AND '.join(clauses)}",  # noqa: S608
        params,
    )
    row = await cursor.fetchone()
    return row[0] if row else 0
