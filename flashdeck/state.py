"""Process-wide study state, constructed once and passed explicitly"""

import logging
import threading
from typing import Dict, Optional

from flashdeck import storage
from flashdeck.schemas import Card, Deck, ReviewStats, StudySession
from flashdeck.sm2 import SM2Algorithm

logger = logging.getLogger(__name__)


class AppState:
    """
    In-memory cards, decks, session and statistics backed by a BlobStore.

    Every mutation goes through the crud functions, which write the affected
    namespaces back to the store before returning. Hold ``lock`` around any
    sequence of mutations when the state is shared between threads.
    """

    def __init__(self, store: storage.BlobStore):
        self.store = store
        self.cards: Dict[str, Card] = {}
        self.decks: Dict[str, Deck] = {}
        self.session: Optional[StudySession] = None
        self.completed_session: Optional[StudySession] = None
        self.stats = ReviewStats()
        self.lock = threading.RLock()

    @classmethod
    def load(cls, store: storage.BlobStore) -> "AppState":
        """Initialize from persisted storage"""
        state = cls(store)
        state.cards = {
            card_id: Card.model_validate(data)
            for card_id, data in store.load(storage.CARDS).items()
        }
        state.decks = {
            deck_id: Deck.model_validate(data)
            for deck_id, data in store.load(storage.DECKS).items()
        }
        session = store.load(storage.SESSION)
        if session:
            state.session = StudySession.model_validate(session)
        stats = store.load(storage.STATS)
        if stats:
            state.stats = ReviewStats.model_validate(stats)

        # Due counts drift while the app is closed
        state.stats.cards_to_review = sum(
            1 for card in state.cards.values() if SM2Algorithm.is_due(card.next_review)
        )
        logger.info("Loaded %d cards in %d decks", len(state.cards), len(state.decks))
        return state

    def save_cards(self):
        self.store.save(storage.CARDS, {
            card_id: card.model_dump(mode="json") for card_id, card in self.cards.items()
        })

    def save_decks(self):
        self.store.save(storage.DECKS, {
            deck_id: deck.model_dump(mode="json") for deck_id, deck in self.decks.items()
        })

    def save_session(self):
        if self.session is None:
            self.store.clear(storage.SESSION)
        else:
            self.store.save(storage.SESSION, self.session.model_dump(mode="json"))

    def save_stats(self):
        self.store.save(storage.STATS, self.stats.model_dump(mode="json"))

    def has_data(self) -> bool:
        """Whether any cards or decks have been persisted"""
        return self.store.exists(storage.CARDS) or self.store.exists(storage.DECKS)

    def reset(self):
        """Delete all persisted data and clear in-memory state"""
        with self.lock:
            for namespace in storage.NAMESPACES:
                self.store.clear(namespace)
            self.cards = {}
            self.decks = {}
            self.session = None
            self.completed_session = None
            self.stats = ReviewStats()
        logger.info("All study data reset")
