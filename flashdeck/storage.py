"""Key-value blob persistence for the four state namespaces"""

import logging
from typing import Any

from sqlalchemy.orm import sessionmaker

from flashdeck.models import StoredBlob

logger = logging.getLogger(__name__)

CARDS = "cards"
DECKS = "decks"
SESSION = "session"
STATS = "stats"

NAMESPACES = (CARDS, DECKS, SESSION, STATS)


def _empty_default(namespace: str) -> Any:
    if namespace in (CARDS, DECKS):
        return {}
    return None


class BlobStore:
    """
    Load/save/clear JSON blobs keyed by namespace.

    Each namespace is read and written independently; there is no
    transaction spanning namespaces.
    """

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def _check(self, namespace: str):
        if namespace not in NAMESPACES:
            raise ValueError(f"Unknown storage namespace: {namespace}")

    def load(self, namespace: str) -> Any:
        """Return the stored blob, or the namespace's empty default"""
        self._check(namespace)
        db = self.session_factory()
        try:
            blob = db.get(StoredBlob, namespace)
            if blob is None:
                return _empty_default(namespace)
            return blob.payload
        finally:
            db.close()

    def save(self, namespace: str, payload: Any):
        self._check(namespace)
        db = self.session_factory()
        try:
            blob = db.get(StoredBlob, namespace)
            if blob is None:
                db.add(StoredBlob(namespace=namespace, payload=payload))
            else:
                blob.payload = payload
            db.commit()
        finally:
            db.close()
        logger.debug("Saved %s", namespace)

    def clear(self, namespace: str):
        self._check(namespace)
        db = self.session_factory()
        try:
            db.query(StoredBlob).filter(StoredBlob.namespace == namespace).delete()
            db.commit()
        finally:
            db.close()

    def exists(self, namespace: str) -> bool:
        self._check(namespace)
        db = self.session_factory()
        try:
            return db.get(StoredBlob, namespace) is not None
        finally:
            db.close()
