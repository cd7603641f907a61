import pytest
from datetime import datetime, timedelta

from flashdeck.crud import add_card, recompute_stats, recent_activity
from flashdeck.schemas import CardCreate, DailyReview, ReviewStats
from flashdeck.state import AppState

T0 = datetime(2026, 3, 10, 18, 0)


def day(offset: int) -> str:
    return (T0 + timedelta(days=offset)).strftime("%Y-%m-%d")


def set_card(state, card_id, fields):
    state.cards[card_id] = state.cards[card_id].model_copy(update=fields)


@pytest.fixture
def card(state, deck):
    card = add_card(state, deck.id, CardCreate(question="Capital of France?", answer="Paris"))
    # Start each test from an empty daily log
    state.stats = ReviewStats()
    return card


class TestTotals:

    def test_empty_collection(self, state):
        stats = recompute_stats(state, reference_time=T0)
        assert stats.total_reviews == 0
        assert stats.retention == 0
        assert stats.average_ease == 0
        assert stats.cards_learned == 0
        assert stats.cards_to_review == 0
        assert stats.streak_days == 0

    def test_retention(self, state, card):
        set_card(state, card.id, {"reviews": 10, "correct": 7})
        stats = recompute_stats(state, reference_time=T0)
        assert stats.total_reviews == 10
        assert stats.correct_reviews == 7
        assert stats.retention == pytest.approx(70.0)

    def test_learned_due_and_ease(self, state, deck, card):
        other = add_card(state, deck.id, CardCreate(question="Capital of Spain?", answer="Madrid"))
        set_card(state, other.id, {
            "reviews": 2, "correct": 2, "ease_factor": 2.1,
            "next_review": T0 + timedelta(days=3)
        })
        stats = recompute_stats(state, reference_time=T0)
        assert stats.cards_learned == 1
        assert stats.cards_to_review == 1
        assert stats.average_ease == pytest.approx(2.3)

    def test_stats_persisted(self, state, store, card):
        set_card(state, card.id, {"reviews": 3, "correct": 1})
        recompute_stats(state, reference_time=T0)
        reloaded = AppState.load(store)
        assert reloaded.stats.total_reviews == 3
        assert reloaded.stats.daily_reviews == state.stats.daily_reviews


class TestDailyLog:

    def test_today_entry_holds_cumulative_totals(self, state, card):
        state.stats = ReviewStats(daily_reviews=[DailyReview(date=day(-1), count=4, correct=3)])
        set_card(state, card.id, {"reviews": 6, "correct": 4})
        stats = recompute_stats(state, reference_time=T0)
        assert stats.daily_reviews[-1] == DailyReview(date=day(0), count=6, correct=4)
        assert stats.daily_reviews[0] == DailyReview(date=day(-1), count=4, correct=3)

    def test_today_entry_updated_in_place(self, state, card):
        recompute_stats(state, reference_time=T0)
        set_card(state, card.id, {"reviews": 2, "correct": 1})
        stats = recompute_stats(state, reference_time=T0 + timedelta(hours=2))
        assert stats.daily_reviews == [DailyReview(date=day(0), count=2, correct=1)]

    def test_log_keeps_thirty_days(self, state, card):
        for offset in range(35):
            set_card(state, card.id, {"reviews": offset + 1, "correct": 0})
            recompute_stats(state, reference_time=T0 + timedelta(days=offset))

        log = state.stats.daily_reviews
        assert len(log) == 30
        assert log[0].date == day(5)
        assert log[-1].date == day(34)
        assert log[-1].count == 35

    def test_recent_activity(self, state):
        state.stats = ReviewStats(daily_reviews=[
            DailyReview(date=day(-i), count=1) for i in range(10, 0, -1)
        ])
        recent = recent_activity(state.stats)
        assert [entry.date for entry in recent] == [day(-i) for i in range(7, 0, -1)]
        assert recent_activity(state.stats, days=0) == []


class TestStreak:

    def test_no_reviews_no_streak(self, state, card):
        state.stats = ReviewStats(daily_reviews=[DailyReview(date=day(-1), count=5)])
        assert recompute_stats(state, reference_time=T0).streak_days == 0

    def test_first_day(self, state, card):
        set_card(state, card.id, {"reviews": 1, "correct": 1})
        assert recompute_stats(state, reference_time=T0).streak_days == 1

    def test_consecutive_days(self, state, card):
        state.stats = ReviewStats(daily_reviews=[
            DailyReview(date=day(-3), count=1),
            DailyReview(date=day(-2), count=2),
            DailyReview(date=day(-1), count=3),
        ])
        set_card(state, card.id, {"reviews": 4, "correct": 4})
        assert recompute_stats(state, reference_time=T0).streak_days == 4

    def test_gap_stops_streak(self, state, card):
        state.stats = ReviewStats(daily_reviews=[
            DailyReview(date=day(-4), count=1),
            DailyReview(date=day(-3), count=2),
            DailyReview(date=day(-1), count=3),
        ])
        set_card(state, card.id, {"reviews": 4, "correct": 4})
        assert recompute_stats(state, reference_time=T0).streak_days == 2

    def test_zero_count_day_stops_streak(self, state, card):
        state.stats = ReviewStats(daily_reviews=[
            DailyReview(date=day(-2), count=1),
            DailyReview(date=day(-1), count=0),
        ])
        set_card(state, card.id, {"reviews": 1})
        assert recompute_stats(state, reference_time=T0).streak_days == 1

    def test_streak_across_month_boundary(self, state, card):
        march_first = datetime(2026, 3, 1, 12, 0)
        state.stats = ReviewStats(daily_reviews=[
            DailyReview(date="2026-02-27", count=1),
            DailyReview(date="2026-02-28", count=1),
        ])
        set_card(state, card.id, {"reviews": 2})
        assert recompute_stats(state, reference_time=march_first).streak_days == 3
