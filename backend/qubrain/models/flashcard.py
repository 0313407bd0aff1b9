from __future__ import annotations

from datetime import datetime, timezone

from pydantic import Field, field_validator

from qubrain.models.base import CamelModel


class Flashcard(CamelModel):
    id: str
    user_id: str
    question: str
    answer: str
    box: int                          # 1-5, Leitner box
    next_review_date: datetime
    created_at: datetime
    last_reviewed_at: datetime | None  # None until the first review


class FlashcardList(CamelModel):
    items: list[Flashcard]
    total: int


class FlashcardCreate(CamelModel):
    question: str = Field(min_length=1)
    answer: str = Field(min_length=1)
    box: int = Field(default=1, ge=1, le=5)


class FlashcardUpdate(CamelModel):
    question: str | None = Field(default=None, min_length=1)
    answer: str | None = Field(default=None, min_length=1)


class ReviewRequest(CamelModel):
    """Either ``correct`` or an explicit ``box`` + ``next_review_date`` override."""

    correct: bool | None = None
    box: int | None = Field(default=None, ge=1, le=5)
    next_review_date: datetime | None = None

    @field_validator("next_review_date")
    @classmethod
    def normalise_to_utc(cls, value: datetime | None) -> datetime | None:
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        try:
            return value.astimezone(timezone.utc)
        except OverflowError:
            raise ValueError("nextReviewDate is outside the supported date range")

    @property
    def is_override(self) -> bool:
        return self.box is not None and self.next_review_date is not None


class DueCards(CamelModel):
    cards: list[Flashcard]
    due_today: int
    total: int
    box_counts: list[int]


class ReviewStats(CamelModel):
    total_cards: int
    box_counts: list[int]
    due_today: int
    reviewed_today: int


class IntervalTable(CamelModel):
    intervals: dict[int, int]
