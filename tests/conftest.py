"""Shared test fixtures."""

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel, create_engine
from sqlmodel.pool import StaticPool

from visitplan.core.database import get_session
from visitplan.core.snapshot import get_store
from visitplan.main import app
from visitplan.models import ItemBase
from visitplan.planner.store import EventStore
from visitplan.sheets.sync import SyncState

EVENT = "C105"


def make_draft(circle, block, number, title="", price=0, remarks="", event_date="1日目"):
    return ItemBase(
        circle_name=circle,
        event_date=event_date,
        block=block,
        number=number,
        title=title,
        price=price,
        remarks=remarks,
    )


def sheet_row(circle, event_date, block, number, title="", price="", remarks=""):
    """A spreadsheet row with the item in columns M to W."""
    row = [""] * 23
    row[12:18] = [circle, event_date, block, number, title, price]
    row[22] = remarks
    return row


SHEET_HEADER = [f"col{i}" for i in range(23)]


@pytest.fixture(autouse=True)
def clear_sync_state():
    """Pending change sets are process-wide; start every test without any."""
    SyncState.clear()
    yield
    SyncState.clear()


@pytest.fixture(name="engine")
def engine_fixture():
    """Create an in-memory SQLite database for testing."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="session")
def session_fixture(engine):
    """Create a new database session for each test."""
    with Session(engine) as session:
        yield session


@pytest.fixture(name="store")
def store_fixture() -> EventStore:
    """An empty event store."""
    return EventStore()


@pytest.fixture(name="event_store")
def event_store_fixture(store: EventStore) -> EventStore:
    """A store holding one event with items on both days."""
    store.create_or_append(
        EVENT,
        [
            make_draft("Alpha", "A", "01a", "Alpha Book", 500),
            make_draft("Beta", "A", "10b", "Beta Book", 1000),
            make_draft("Gamma", "B", "02a", "Gamma Book", 700),
            make_draft("Delta", "C", "05b", "Delta Book", 300, event_date="2日目"),
            make_draft("Epsilon", "D", "11a", "Epsilon Book", 800, event_date="2日目"),
        ],
    )
    return store


@pytest.fixture(name="client")
def client_fixture(session: Session, store: EventStore):
    """Create a test client with the test database session and store."""

    def get_session_override():
        return session

    app.dependency_overrides[get_session] = get_session_override
    app.dependency_overrides[get_store] = lambda: store
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()
