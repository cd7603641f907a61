from datetime import datetime, timedelta
from typing import List, Optional

from flashdeck.config import settings
from flashdeck.schemas import DailyReview, ReviewStats
from flashdeck.sm2 import SM2Algorithm
from flashdeck.state import AppState

DATE_FORMAT = "%Y-%m-%d"


def recompute_stats(state: AppState, reference_time: Optional[datetime] = None) -> ReviewStats:
    """
    Recompute review statistics from the card collection.

    The daily log keeps the cumulative review totals observed on each local
    calendar day, not the reviews done that day. Today's entry is overwritten
    on every recompute; a new day appends an entry and the log is truncated
    to the newest ``settings.daily_log_days`` entries.
    """
    now = reference_time if reference_time else datetime.now()
    all_cards = list(state.cards.values())

    total_reviews = sum(card.reviews for card in all_cards)
    correct_reviews = sum(card.correct for card in all_cards)
    retention = correct_reviews / total_reviews * 100 if total_reviews > 0 else 0
    cards_learned = sum(1 for card in all_cards if card.reviews > 0)
    cards_to_review = sum(1 for card in all_cards if SM2Algorithm.is_due(card.next_review, now))
    average_ease = (
        sum(card.ease_factor for card in all_cards) / len(all_cards) if all_cards else 0
    )

    today = now.strftime(DATE_FORMAT)
    daily_reviews = [entry.model_copy() for entry in state.stats.daily_reviews]
    today_entry = next((entry for entry in daily_reviews if entry.date == today), None)
    if today_entry:
        today_entry.count = total_reviews
        today_entry.correct = correct_reviews
    else:
        daily_reviews.append(DailyReview(date=today, count=total_reviews, correct=correct_reviews))
        daily_reviews = daily_reviews[-settings.daily_log_days:]

    state.stats = ReviewStats(
        total_reviews=total_reviews,
        correct_reviews=correct_reviews,
        retention=retention,
        streak_days=_streak_days(daily_reviews, now),
        cards_learned=cards_learned,
        cards_to_review=cards_to_review,
        average_ease=average_ease,
        daily_reviews=daily_reviews,
    )
    state.save_stats()
    return state.stats


def _streak_days(daily_reviews: List[DailyReview], now: datetime) -> int:
    """Consecutive days with activity, ending today"""
    counts = {entry.date: entry.count for entry in daily_reviews}
    day = now.date()
    if counts.get(day.strftime(DATE_FORMAT), 0) <= 0:
        return 0

    streak = 1
    day -= timedelta(days=1)
    while counts.get(day.strftime(DATE_FORMAT), 0) > 0:
        streak += 1
        day -= timedelta(days=1)
    return streak


def recent_activity(stats: ReviewStats, days: int = 7) -> List[DailyReview]:
    """Most recent daily log entries, oldest first"""
    if days <= 0:
        return []
    return stats.daily_reviews[-days:]
