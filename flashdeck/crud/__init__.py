from flashdeck.crud.deck import create_deck, get_deck, list_decks, update_deck, delete_deck
from flashdeck.crud.card import (
    add_card,
    get_card,
    list_cards,
    update_card,
    delete_card,
    cards_in_deck,
    due_cards,
    due_count
)
from flashdeck.crud.study_session import (
    start_session,
    current_card,
    grade_card,
    skip_card,
    end_session
)
from flashdeck.crud.stats import recompute_stats, recent_activity

__all__ = [
    "create_deck",
    "get_deck",
    "list_decks",
    "update_deck",
    "delete_deck",
    "add_card",
    "get_card",
    "list_cards",
    "update_card",
    "delete_card",
    "cards_in_deck",
    "due_cards",
    "due_count",
    "start_session",
    "current_card",
    "grade_card",
    "skip_card",
    "end_session",
    "recompute_stats",
    "recent_activity",
]
