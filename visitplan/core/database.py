"""Database engine and session management.

The planner state lives in memory and is written to the database as a few
JSON blobs after every change (see ``visitplan.core.snapshot``). SQLite is
the default backend:

    - **WAL (Write-Ahead Logging)**: the background spreadsheet check and
      request handlers may touch the database at the same time; WAL lets
      readers proceed while a snapshot is being written.

    - **check_same_thread=False**: FastAPI may hand a session to a different
      thread than the one that opened the connection.

Neither applies to other backends, so both are only set for sqlite URLs.
"""

from sqlalchemy import event as sa_event
from sqlmodel import Session, SQLModel, create_engine

from visitplan.core.config import settings

is_sqlite = settings.database_url.startswith("sqlite")

engine = create_engine(
    settings.database_url,
    connect_args={"check_same_thread": False} if is_sqlite else {},
    echo=settings.debug,  # Log SQL statements when DEBUG=true
)

if is_sqlite:

    @sa_event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):
        """Enable WAL on each new connection; the pragma is per connection."""
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()


def create_db_and_tables():
    """Create the state blob table."""
    SQLModel.metadata.create_all(engine)


def get_session():
    """Dependency for getting database session."""
    with Session(engine) as session:
        yield session
