"""Sync routes for checking an event against its spreadsheet."""
from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, SQLModel

from visitplan.core.config import settings
from visitplan.core.database import get_session
from visitplan.core.snapshot import get_store, save_store
from visitplan.planner.errors import NotFound, SourceUnavailable
from visitplan.planner.store import EventStore
from visitplan.routes.common import require_event, source_unavailable
from visitplan.sheets.client import has_valid_credentials
from visitplan.sheets.sync import SyncState, check_event, confirm_pending, discard_pending

router = APIRouter(prefix="/events/{event_name}/sync", tags=["sync"])


class SourceOverride(SQLModel):
    """Replacement spreadsheet location, sent after a failed check."""
    source_url: str | None = None
    sheet_name: str | None = None


@router.post("/check")
async def check_spreadsheet(
    event_name: str,
    payload: SourceOverride | None = None,
    store: EventStore = Depends(get_store),
):
    """
    Fetch the spreadsheet and compute the pending change set.

    Nothing is applied. If the sheet cannot be read, returns 422 asking for a
    new URL; post it back here in ``source_url`` to retry.
    """
    require_event(store, event_name)
    payload = payload or SourceOverride()
    try:
        change_set = await check_event(store, event_name, payload.source_url, payload.sheet_name)
    except SourceUnavailable as e:
        raise source_unavailable(e)
    except NotFound:
        raise HTTPException(status_code=404, detail="Event not found")

    return {"event_name": event_name, "change_set": change_set, "empty": change_set.is_empty()}


@router.get("/pending")
async def pending_changes(event_name: str, store: EventStore = Depends(get_store)):
    """Show the pending change set, if any."""
    require_event(store, event_name)
    pending = SyncState.get_pending(event_name)
    if pending is None:
        raise HTTPException(status_code=404, detail="No pending changes")
    return {
        "event_name": event_name,
        "change_set": pending.change_set,
        "source_url": pending.source_url,
        "sheet_name": pending.sheet_name,
        "checked_at": pending.checked_at.isoformat(),
    }


@router.post("/confirm")
async def confirm_changes(
    event_name: str,
    session: Session = Depends(get_session),
    store: EventStore = Depends(get_store),
):
    """
    Apply the pending change set to the event as it is now.

    Returns 404 if there is nothing pending.
    """
    require_event(store, event_name)
    if not confirm_pending(store, event_name):
        raise HTTPException(status_code=404, detail="No pending changes")

    save_store(session, store)
    return {"event_name": event_name, "applied": True, "item_count": len(store.items[event_name])}


@router.post("/discard")
async def discard_changes(event_name: str, store: EventStore = Depends(get_store)):
    """Drop the pending change set without applying anything."""
    require_event(store, event_name)
    return {"event_name": event_name, "discarded": discard_pending(event_name)}


@router.get("/status")
async def sync_status(event_name: str, store: EventStore = Depends(get_store)):
    """
    Get sync status of an event.

    Returns JSON with the saved spreadsheet, the last check outcome, whether
    a change set is pending, and the background check configuration.
    """
    require_event(store, event_name)
    status = SyncState.get_sync_status(event_name)
    return {
        "metadata": store.metadata.get(event_name),
        "authenticated": has_valid_credentials(),
        "has_pending": SyncState.get_pending(event_name) is not None,
        "sync_check_enabled": settings.sync_check_enabled,
        "sync_interval_minutes": settings.sync_interval_minutes,
        "last_sync_time": status["last_sync_time"].isoformat() if status["last_sync_time"] else None,
        "last_sync_success": status["success"],
        "last_sync_error": status["error"],
    }
