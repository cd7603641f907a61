from pydantic import BaseModel, Field, model_validator
from typing import List, Optional
from datetime import datetime, timedelta

from flashdeck.sm2 import DEFAULT_EASE, MAX_EASE, MAX_INTERVAL, MIN_EASE

class CardCreate(BaseModel):
    """Schema for adding a card to a deck"""
    question: str
    answer: str

class Card(CardCreate):
    """Flashcard with its spaced repetition state"""
    id: str
    created: datetime
    last_reviewed: Optional[datetime] = None
    next_review: Optional[datetime] = None  # None: never scheduled, due now
    ease_factor: float = Field(default=DEFAULT_EASE, ge=MIN_EASE, le=MAX_EASE)
    interval: int = Field(default=0, ge=0, le=MAX_INTERVAL)
    reviews: int = Field(default=0, ge=0)
    correct: int = Field(default=0, ge=0)
    streak: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def check_correct_within_reviews(self):
        if self.correct > self.reviews:
            raise ValueError("correct count cannot exceed review count")
        return self

class DeckCreate(BaseModel):
    """Schema for creating a deck"""
    name: str
    description: str = ""

class Deck(DeckCreate):
    """Named, ordered collection of card ids"""
    id: str
    created: datetime
    last_reviewed: Optional[datetime] = None
    cards: List[str] = Field(default_factory=list)

class StudySession(BaseModel):
    """Snapshot of due cards being worked through"""
    deck_id: Optional[str] = None  # None: all decks
    card_ids: List[str]
    current_card_index: int = 0
    start_time: datetime
    end_time: Optional[datetime] = None
    is_active: bool = True

    @model_validator(mode="after")
    def check_position(self):
        if not self.card_ids:
            raise ValueError("a study session needs at least one card")
        if not 0 <= self.current_card_index <= len(self.card_ids):
            raise ValueError("current_card_index outside the card snapshot")
        return self

    @property
    def total(self) -> int:
        return len(self.card_ids)

    @property
    def remaining(self) -> int:
        return len(self.card_ids) - self.current_card_index

    @property
    def progress(self) -> float:
        """Percentage of the snapshot already graded or skipped"""
        return self.current_card_index / len(self.card_ids) * 100

    @property
    def duration(self) -> Optional[timedelta]:
        if self.end_time is None:
            return None
        return self.end_time - self.start_time

class DailyReview(BaseModel):
    """Review totals recorded under one local calendar day"""
    date: str  # YYYY-MM-DD
    count: int = 0
    correct: int = 0

class ReviewStats(BaseModel):
    """Aggregate statistics recomputed from the card collection"""
    total_reviews: int = 0
    correct_reviews: int = 0
    retention: float = 0
    streak_days: int = 0
    cards_learned: int = 0
    cards_to_review: int = 0
    average_ease: float = 0
    daily_reviews: List[DailyReview] = Field(default_factory=list)
