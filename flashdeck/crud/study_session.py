"""
Study session state machine.

A session is a frozen snapshot of due card ids taken when it starts. Cards are
presented strictly in snapshot order and the snapshot is never re-queried, so
cards that become due mid-session wait for the next session. When the position
reaches the end of the snapshot (or the session is ended) the session is
cleared and the ended record is kept on ``state.completed_session``.
"""

import logging
from datetime import datetime
from typing import Optional

from flashdeck.crud.card import cards_in_deck, due_cards
from flashdeck.crud.stats import recompute_stats
from flashdeck.exceptions import UnknownCard
from flashdeck.schemas import Card, StudySession
from flashdeck.sm2 import SM2Algorithm
from flashdeck.state import AppState

logger = logging.getLogger(__name__)


def start_session(
    state: AppState,
    deck_id: Optional[str] = None,
    reference_time: Optional[datetime] = None
) -> Optional[StudySession]:
    """
    Start a session over the currently due cards.

    Args:
        deck_id: Limit the session to one deck, or None for all decks

    Returns:
        The new active session, or None when nothing is due
    """
    now = reference_time if reference_time else datetime.now()
    with state.lock:
        if deck_id:
            cards = [
                card for card in cards_in_deck(state, deck_id)
                if SM2Algorithm.is_due(card.next_review, now)
            ]
        else:
            cards = due_cards(state, reference_time=now)

        if not cards:
            logger.info("No cards due%s; session not started", f" in deck {deck_id}" if deck_id else "")
            return None

        state.session = StudySession(
            deck_id=deck_id,
            card_ids=[card.id for card in cards],
            current_card_index=0,
            start_time=now,
        )
        state.save_session()
    logger.info("Started session with %d cards", len(cards))
    return state.session


def current_card(state: AppState) -> Optional[Card]:
    """Card at the session's current position, or None without an active session"""
    session = state.session
    if not session or not session.is_active or session.current_card_index >= session.total:
        return None
    return state.cards.get(session.card_ids[session.current_card_index])


def grade_card(state: AppState, grade: int, reference_time: Optional[datetime] = None) -> Optional[Card]:
    """
    Grade the current card, reschedule it and move to the next one.

    Returns the updated card, or None when there is no active session.
    Raises InvalidGrade for grades outside 0-3 and UnknownCard when the
    current card was deleted after the session started.
    """
    grade = SM2Algorithm.validate_grade(grade)
    now = reference_time if reference_time else datetime.now()

    with state.lock:
        session = state.session
        if not session or not session.is_active:
            return None

        card_id = session.card_ids[session.current_card_index]
        card = state.cards.get(card_id)
        if card is None:
            raise UnknownCard(card_id)

        interval, ease_factor, next_review = SM2Algorithm.calculate_next_review(
            grade,
            card.interval,
            card.ease_factor,
            reference_time=now
        )
        is_correct = SM2Algorithm.is_correct(grade)
        updated_card = Card.model_validate({
            **card.model_dump(),
            "last_reviewed": now,
            "next_review": next_review,
            "interval": interval,
            "ease_factor": ease_factor,
            "reviews": card.reviews + 1,
            "correct": card.correct + (1 if is_correct else 0),
            "streak": card.streak + 1 if is_correct else 0,
        })
        state.cards[card_id] = updated_card

        deck = state.decks.get(session.deck_id) if session.deck_id else None
        if deck:
            state.decks[deck.id] = deck.model_copy(update={"last_reviewed": now})

        state.save_cards()
        state.save_decks()
        logger.debug("Graded card %s as %s; next review in %d days", card_id, grade.name, interval)

        _advance(state, now)
        recompute_stats(state, reference_time=now)
    return updated_card


def skip_card(state: AppState, reference_time: Optional[datetime] = None):
    """Move past the current card without rescheduling it"""
    now = reference_time if reference_time else datetime.now()
    with state.lock:
        session = state.session
        if not session or not session.is_active:
            return
        _advance(state, now)


def end_session(state: AppState, reference_time: Optional[datetime] = None) -> Optional[StudySession]:
    """End the active session regardless of position; returns the ended record"""
    now = reference_time if reference_time else datetime.now()
    with state.lock:
        if not state.session:
            return None
        return _complete(state, now)


def _advance(state: AppState, now: datetime):
    session = state.session
    next_index = session.current_card_index + 1
    state.session = session.model_copy(update={"current_card_index": next_index})
    if next_index >= session.total:
        _complete(state, now)
    else:
        state.save_session()


def _complete(state: AppState, now: datetime) -> StudySession:
    ended = state.session.model_copy(update={"end_time": now, "is_active": False})
    state.completed_session = ended
    state.session = None
    state.save_session()
    logger.info(
        "Session complete: %d of %d cards seen",
        ended.current_card_index, ended.total
    )
    return ended
