import logging
import uuid
from datetime import datetime
from typing import List, Optional

from flashdeck.crud.stats import recompute_stats
from flashdeck.exceptions import UnknownDeck
from flashdeck.schemas import Card, CardCreate
from flashdeck.sm2 import SM2Algorithm
from flashdeck.state import AppState

logger = logging.getLogger(__name__)

# Fields callers may not change through update_card
PROTECTED_FIELDS = ("id", "created")

def add_card(state: AppState, deck_id: str, card: CardCreate) -> Card:
    """Create a card with initial SM-2 values and append it to a deck"""
    with state.lock:
        deck = state.decks.get(deck_id)
        if deck is None:
            raise UnknownDeck(deck_id)

        db_card = Card(
            id=uuid.uuid4().hex,
            created=datetime.now(),
            **card.model_dump(),
            **SM2Algorithm.initialize_card()
        )
        state.cards[db_card.id] = db_card
        state.decks[deck_id] = deck.model_copy(update={"cards": deck.cards + [db_card.id]})

        state.save_cards()
        state.save_decks()
        recompute_stats(state)
    logger.info("Added card %s to deck %s", db_card.id, deck_id)
    return db_card

def get_card(state: AppState, card_id: str) -> Optional[Card]:
    """Get card by ID"""
    return state.cards.get(card_id)

def list_cards(state: AppState) -> List[Card]:
    """All cards, oldest first"""
    return sorted(state.cards.values(), key=lambda card: card.created)

def update_card(state: AppState, card_id: str, card_data: dict) -> Optional[Card]:
    """Update card fields; returns None if the card does not exist"""
    with state.lock:
        db_card = get_card(state, card_id)
        if db_card:
            updates = {k: v for k, v in card_data.items() if k not in PROTECTED_FIELDS}
            db_card = Card.model_validate({**db_card.model_dump(), **updates})
            state.cards[card_id] = db_card
            state.save_cards()
            recompute_stats(state)
        return db_card

def delete_card(state: AppState, card_id: str) -> bool:
    """Delete a card and remove it from every deck that lists it"""
    with state.lock:
        if card_id not in state.cards:
            return False

        del state.cards[card_id]
        for deck_id, deck in state.decks.items():
            if card_id in deck.cards:
                state.decks[deck_id] = deck.model_copy(
                    update={"cards": [c for c in deck.cards if c != card_id]}
                )

        state.save_cards()
        state.save_decks()
        recompute_stats(state)
    logger.info("Deleted card %s", card_id)
    return True

def cards_in_deck(state: AppState, deck_id: str) -> List[Card]:
    """Cards of a deck in deck order; empty for an unknown deck"""
    deck = state.decks.get(deck_id)
    if deck is None:
        return []
    return [state.cards[card_id] for card_id in deck.cards if card_id in state.cards]

def due_cards(state: AppState, deck_id: Optional[str] = None,
              reference_time: Optional[datetime] = None) -> List[Card]:
    """Get all cards due for review, optionally limited to one deck"""
    if deck_id and deck_id in state.decks:
        card_list = cards_in_deck(state, deck_id)
    else:
        card_list = list(state.cards.values())
    return [card for card in card_list if SM2Algorithm.is_due(card.next_review, reference_time)]

def due_count(state: AppState, deck_id: Optional[str] = None) -> int:
    return len(due_cards(state, deck_id))
