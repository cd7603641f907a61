import logging
import uuid
from datetime import datetime
from typing import List, Optional

from flashdeck.exceptions import UnknownCard
from flashdeck.schemas import Deck, DeckCreate
from flashdeck.state import AppState

logger = logging.getLogger(__name__)

# Fields callers may not change through update_deck
PROTECTED_FIELDS = ("id", "created")

def create_deck(state: AppState, deck: DeckCreate) -> Deck:
    """Create a new, empty deck"""
    with state.lock:
        db_deck = Deck(id=uuid.uuid4().hex, created=datetime.now(), **deck.model_dump())
        state.decks[db_deck.id] = db_deck
        state.save_decks()
    logger.info("Created deck %s (%s)", db_deck.id, db_deck.name)
    return db_deck

def get_deck(state: AppState, deck_id: str) -> Optional[Deck]:
    """Get deck by ID"""
    return state.decks.get(deck_id)

def list_decks(state: AppState) -> List[Deck]:
    """All decks, oldest first"""
    return sorted(state.decks.values(), key=lambda deck: deck.created)

def update_deck(state: AppState, deck_id: str, deck_data: dict) -> Optional[Deck]:
    """Update deck fields; returns None if the deck does not exist"""
    with state.lock:
        db_deck = get_deck(state, deck_id)
        if db_deck:
            updates = {k: v for k, v in deck_data.items() if k not in PROTECTED_FIELDS}
            for card_id in updates.get("cards", []):
                if card_id not in state.cards:
                    raise UnknownCard(card_id)
            db_deck = Deck.model_validate({**db_deck.model_dump(), **updates})
            state.decks[deck_id] = db_deck
            state.save_decks()
        return db_deck

def delete_deck(state: AppState, deck_id: str) -> bool:
    """Delete a deck; its cards are kept"""
    with state.lock:
        if deck_id not in state.decks:
            return False
        del state.decks[deck_id]
        state.save_decks()
    logger.info("Deleted deck %s", deck_id)
    return True
