from sqlalchemy import Column, String, DateTime, JSON
from datetime import datetime
from flashdeck.database import Base

class StoredBlob(Base):
    """One persisted namespace (cards, decks, session or stats) as a JSON document"""
    __tablename__ = "blobs"

    namespace = Column(String, primary_key=True)
    payload = Column(JSON, nullable=False)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)
