import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from flashdeck.database import init_db
from flashdeck.storage import BlobStore
from flashdeck.state import AppState
from flashdeck.crud import create_deck
from flashdeck.schemas import DeckCreate


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def store(engine):
    return BlobStore(sessionmaker(autocommit=False, autoflush=False, bind=engine))


@pytest.fixture
def state(store):
    return AppState(store)


@pytest.fixture
def deck(state):
    return create_deck(state, DeckCreate(name="Capitals", description="European capitals"))
