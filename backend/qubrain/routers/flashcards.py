"""
Flashcards & Leitner review router.

Endpoints (all owner-scoped, bearer token required):
  POST   /flashcards               — create a card in box 1 (or a given box)
  GET    /flashcards               — list the caller's cards
  GET    /flashcards/due           — due cards, lowest box first, plus progress counters
  GET    /flashcards/intervals     — review interval per box
  GET    /flashcards/{id}          — single card
  PUT    /flashcards/{id}          — submit a review ({correct} or {box, nextReviewDate})
  PATCH  /flashcards/{id}          — edit question / answer
  DELETE /flashcards/{id}          — delete card
"""
from __future__ import annotations

import logging

import aiosqlite
from fastapi import APIRouter, Depends, HTTPException, Query

from qubrain.db.sqlite import (
    create_flashcard,
    delete_flashcard,
    get_db,
    get_flashcard,
    list_flashcards,
    update_flashcard_content,
    update_flashcard_schedule,
)
from qubrain.models.flashcard import (
    DueCards,
    Flashcard,
    FlashcardCreate,
    FlashcardList,
    FlashcardUpdate,
    IntervalTable,
    ReviewRequest,
)
from qubrain.models.user import User
from qubrain.services import leitner
from qubrain.services.auth import get_current_user
from qubrain.services.clock import Clock, get_clock
from qubrain.services.stats import due_cards

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("", response_model=Flashcard, status_code=201)
async def create_card(
    body: FlashcardCreate,
    user: User = Depends(get_current_user),
    db: aiosqlite.Connection = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> Flashcard:
    now = clock.now()
    card = await create_flashcard(
        db,
        user.id,
        question=body.question,
        answer=body.answer,
        box=body.box,
        next_review_date=leitner.initial_schedule(body.box, now),
        created_at=now,
    )
    logger.info("Created card %s for user %s in box %d", card.id, user.id, card.box)
    return card


@router.get("", response_model=FlashcardList)
async def list_cards(
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=500),
    user: User = Depends(get_current_user),
    db: aiosqlite.Connection = Depends(get_db),
) -> FlashcardList:
    items, total = await list_flashcards(db, user.id, offset=offset, limit=limit)
    return FlashcardList(items=items, total=total)


@router.get("/due", response_model=DueCards)
async def get_due(
    user: User = Depends(get_current_user),
    db: aiosqlite.Connection = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> DueCards:
    return await due_cards(db, user.id, clock.now())


@router.get("/intervals", response_model=IntervalTable)
async def get_intervals() -> IntervalTable:
    return IntervalTable(intervals=leitner.intervals())


@router.get("/{card_id}", response_model=Flashcard)
async def get_card(
    card_id: str,
    user: User = Depends(get_current_user),
    db: aiosqlite.Connection = Depends(get_db),
) -> Flashcard:
    card = await get_flashcard(db, user.id, card_id)
    if not card:
        raise HTTPException(status_code=404, detail="Flashcard not found")
    return card


@router.put("/{card_id}", response_model=Flashcard)
async def review_card(
    card_id: str,
    body: ReviewRequest,
    user: User = Depends(get_current_user),
    db: aiosqlite.Connection = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> Flashcard:
    """Apply a review outcome, or an explicit box/date override, to a card."""
    if not body.is_override and body.correct is None:
        raise HTTPException(
            status_code=422,
            detail="Provide either 'correct' or both 'box' and 'nextReviewDate'",
        )

    card = await get_flashcard(db, user.id, card_id)
    if not card:
        raise HTTPException(status_code=404, detail="Flashcard not found")

    now = clock.now()
    if body.is_override:
        transition = leitner.apply_override(body.box, body.next_review_date, now)
    else:
        transition = leitner.schedule(card.box, body.correct, now)

    updated = await update_flashcard_schedule(
        db,
        user.id,
        card_id,
        box=transition.box,
        next_review_date=transition.next_review_date,
        last_reviewed_at=transition.last_reviewed_at,
    )
    if not updated:
        raise HTTPException(status_code=404, detail="Flashcard not found")

    logger.info(
        "Reviewed card %s: box %d -> %d (%s)",
        card_id,
        card.box,
        updated.box,
        "override" if body.is_override else ("correct" if body.correct else "incorrect"),
    )
    return updated


@router.patch("/{card_id}", response_model=Flashcard)
async def edit_card(
    card_id: str,
    body: FlashcardUpdate,
    user: User = Depends(get_current_user),
    db: aiosqlite.Connection = Depends(get_db),
) -> Flashcard:
    updated = await update_flashcard_content(db, user.id, card_id, body)
    if not updated:
        raise HTTPException(status_code=404, detail="Flashcard not found")
    return updated


@router.delete("/{card_id}")
async def remove_card(
    card_id: str,
    user: User = Depends(get_current_user),
    db: aiosqlite.Connection = Depends(get_db),
) -> dict:
    deleted = await delete_flashcard(db, user.id, card_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Flashcard not found")
    logger.info("Deleted card %s for user %s", card_id, user.id)
    return {"message": "Flashcard deleted successfully"}
