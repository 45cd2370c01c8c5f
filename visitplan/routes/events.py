"""Event routes for importing, listing and exporting shopping lists."""
from urllib.parse import quote

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response
from sqlmodel import Session, SQLModel

from visitplan.core.database import get_session
from visitplan.core.snapshot import get_store, save_store
from visitplan.models import Day, EventMetadata, ItemBase
from visitplan.planner.errors import SourceUnavailable
from visitplan.planner.store import EventStore
from visitplan.routes.common import require_event, source_unavailable
from visitplan.sheets.rows import export_csv, parse_paste, parse_sheet_rows
from visitplan.sheets.source import fetch_rows
from visitplan.sheets.sync import SyncState

router = APIRouter(prefix="/events", tags=["events"])


class BulkImport(SQLModel):
    """Items to import, given as parsed items and/or a tab-delimited paste."""
    event_name: str
    items: list[ItemBase] = []
    paste: str = ""


class SheetImport(SQLModel):
    """A spreadsheet to import a list from."""
    event_name: str
    source_url: str
    sheet_name: str = ""


def _event_overview(store: EventStore, event_name: str) -> dict:
    return {
        "name": event_name,
        "item_count": len(store.items[event_name]),
        "metadata": store.metadata.get(event_name),
        "modes": {day.value: store.get_mode(event_name, day).value for day in Day},
    }


@router.get("")
async def list_events(store: EventStore = Depends(get_store)):
    """List all events with item counts, source and day modes."""
    return {"events": [_event_overview(store, name) for name in store.event_names()]}


@router.post("")
async def import_items(
    payload: BulkImport,
    session: Session = Depends(get_session),
    store: EventStore = Depends(get_store),
):
    """
    Create an event from imported items, or append them to an existing one.

    Pasted lines without block or number are skipped. Returns 400 if nothing
    importable remains.
    """
    event_name = payload.event_name.strip()
    if not event_name:
        raise HTTPException(status_code=400, detail="Event name is required")

    drafts = [item for item in payload.items if item.block and item.number]
    drafts += parse_paste(payload.paste)
    if not drafts:
        raise HTTPException(status_code=400, detail="No valid items to import")

    created = not store.has_event(event_name)
    added = store.create_or_append(event_name, drafts)
    save_store(session, store)

    return {"event_name": event_name, "created": created, "added": added}


@router.post("/import-sheet")
async def import_sheet(
    payload: SheetImport,
    session: Session = Depends(get_session),
    store: EventStore = Depends(get_store),
):
    """
    Import an event's list straight from a spreadsheet.

    The spreadsheet URL and sheet name are remembered for later syncs.
    Returns 422 with a request for a new URL if the sheet cannot be read.
    """
    event_name = payload.event_name.strip()
    if not event_name:
        raise HTTPException(status_code=400, detail="Event name is required")

    try:
        rows = await fetch_rows(payload.source_url, payload.sheet_name)
    except SourceUnavailable as e:
        raise source_unavailable(e)

    drafts = parse_sheet_rows(rows)
    if not drafts:
        raise HTTPException(status_code=400, detail="No valid items to import")

    created = not store.has_event(event_name)
    added = store.create_or_append(
        event_name,
        drafts,
        metadata=EventMetadata(source_url=payload.source_url, sheet_name=payload.sheet_name),
    )
    save_store(session, store)

    return {"event_name": event_name, "created": created, "added": added}


@router.get("/{event_name}")
async def event_detail(event_name: str, store: EventStore = Depends(get_store)):
    """Show an event with its full item list in route order."""
    require_event(store, event_name)
    return {**_event_overview(store, event_name), "items": store.get_items(event_name)}


@router.get("/{event_name}/summary")
async def event_summary(event_name: str, store: EventStore = Depends(get_store)):
    """Counts per purchase status and planned/spent totals."""
    require_event(store, event_name)
    return store.summary(event_name)


@router.delete("/{event_name}")
async def delete_event(
    event_name: str,
    session: Session = Depends(get_session),
    store: EventStore = Depends(get_store),
):
    """Delete an event together with its columns, modes and pending sync."""
    require_event(store, event_name)
    store.delete_event(event_name)
    SyncState.forget(event_name)
    save_store(session, store)
    return {"deleted": event_name}


@router.get("/{event_name}/export")
async def export_event(event_name: str, store: EventStore = Depends(get_store)):
    """
    Download an event's list as CSV.

    Rows follow the route order. Returns 400 if the list is empty.
    """
    require_event(store, event_name)
    items = store.get_items(event_name)
    if not items:
        raise HTTPException(status_code=400, detail="No items to export")

    filename = quote(f"{event_name}.csv")
    return Response(
        content=export_csv(items).encode("utf-8"),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f"attachment; filename*=UTF-8''{filename}"},
    )
