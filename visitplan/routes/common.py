"""Helpers shared by the routers."""
from fastapi import HTTPException

from visitplan.planner.errors import SourceUnavailable, ValidationError
from visitplan.planner.store import EventStore


def require_event(store: EventStore, event_name: str) -> None:
    """Raise 404 if the event does not exist."""
    if not store.has_event(event_name):
        raise HTTPException(status_code=404, detail="Event not found")


def validation_failed(e: ValidationError) -> HTTPException:
    return HTTPException(status_code=422, detail=str(e))


def source_unavailable(e: SourceUnavailable) -> HTTPException:
    """422 asking the client for a corrected spreadsheet URL."""
    return HTTPException(
        status_code=422,
        detail={
            "error": "source_unavailable",
            "message": str(e),
            "source_url": e.source_url,
            "action": "Provide a new spreadsheet URL and sheet name, then retry",
        },
    )
