"""Load and save the event store as named state blobs."""
import json
import logging
from datetime import UTC, datetime

from fastapi import Request
from sqlmodel import Session, select

from visitplan.models import StateBlob
from visitplan.planner.store import EventStore

logger = logging.getLogger(__name__)

# Every blob is read and written together; a partial write would leave active
# columns pointing at items that are not in the saved lists.
BLOB_NAMES = ("event_items", "event_metadata", "active_ids", "day_modes")


def load_store(session: Session) -> EventStore:
    """Rebuild the event store from the saved blobs.

    A missing or unreadable blob set yields an empty store.
    """
    blobs = {blob.name: blob for blob in session.exec(select(StateBlob)).all()}
    try:
        snapshot = {name: json.loads(blobs[name].payload) for name in BLOB_NAMES if name in blobs}
        store = EventStore.from_snapshot(snapshot)
    except (ValueError, TypeError, AttributeError, KeyError) as e:
        # Unparsable JSON, or JSON of the wrong shape.
        logger.error(f"Failed to load saved state, starting empty: {e}")
        return EventStore()

    logger.info(f"Loaded {len(store.event_names())} events from saved state")
    return store


def save_store(session: Session, store: EventStore) -> None:
    """Write all blobs in one transaction."""
    snapshot = store.to_snapshot()
    now = datetime.now(UTC)

    for name in BLOB_NAMES:
        blob = session.get(StateBlob, name) or StateBlob(name=name)
        blob.payload = json.dumps(snapshot[name], ensure_ascii=False)
        blob.updated_at = now
        session.add(blob)

    session.commit()
    logger.debug("Saved planner state")


def get_store(request: Request) -> EventStore:
    """Dependency for getting the application's event store."""
    return request.app.state.store
