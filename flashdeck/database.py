from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from flashdeck.config import settings

engine = create_engine(settings.database_url)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()

def init_db(bind=None):
    """Create all tables"""
    # Import models so they register on Base.metadata
    import flashdeck.models  # noqa: F401
    Base.metadata.create_all(bind=bind or engine)
