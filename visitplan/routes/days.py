"""Day routes: view modes, active/candidate columns and route ordering."""
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlmodel import Session, SQLModel

from visitplan.core.database import get_session
from visitplan.core.snapshot import get_store, save_store
from visitplan.models import Column, Day, PurchaseStatus, SortDirection
from visitplan.planner.store import EventStore
from visitplan.routes.common import require_event

router = APIRouter(prefix="/events/{event_name}/days/{day}", tags=["days"])


class ItemIds(SQLModel):
    item_ids: list[UUID]


class MoveRequest(SQLModel):
    """A drag of one item, or of the selection it is part of."""
    column: Column
    dragged_id: UUID
    target_id: UUID
    selected_ids: list[UUID] = []


class BlockSort(SQLModel):
    direction: SortDirection = SortDirection.ASC


class NumberSort(SQLModel):
    selected_ids: list[UUID]
    direction: SortDirection = SortDirection.ASC


def _day_view(store: EventStore, event_name: str, day: Day, status: PurchaseStatus | None = None) -> dict:
    return {
        "event_name": event_name,
        "day": day.value,
        "mode": store.get_mode(event_name, day).value,
        "active": store.active_items(event_name, day, status),
        "candidate": store.candidate_items(event_name, day),
    }


@router.get("")
async def day_view(
    event_name: str,
    day: Day,
    status: PurchaseStatus | None = None,
    store: EventStore = Depends(get_store),
):
    """
    Show one day of an event.

    Returns both columns and the day's mode. The optional ``status`` filter
    narrows the active column to one purchase outcome.
    """
    require_event(store, event_name)
    return _day_view(store, event_name, day, status)


@router.post("/mode")
async def toggle_mode(
    event_name: str,
    day: Day,
    session: Session = Depends(get_session),
    store: EventStore = Depends(get_store),
):
    """Switch the day between edit and execute mode."""
    require_event(store, event_name)
    mode = store.toggle_mode(event_name, day)
    save_store(session, store)
    return {"day": day.value, "mode": mode.value}


@router.post("/active")
async def add_to_active(
    event_name: str,
    day: Day,
    payload: ItemIds,
    session: Session = Depends(get_session),
    store: EventStore = Depends(get_store),
):
    """
    Move items into the active column.

    Ids already active, unknown, or of another day are ignored, as is any
    request while the day is in execute mode.
    """
    require_event(store, event_name)
    added = store.add_to_active(event_name, day, payload.item_ids)
    if added:
        save_store(session, store)
    return {**_day_view(store, event_name, day), "changed": added}


@router.post("/active/remove")
async def remove_from_active(
    event_name: str,
    day: Day,
    payload: ItemIds,
    session: Session = Depends(get_session),
    store: EventStore = Depends(get_store),
):
    """Move items back to the candidate column."""
    require_event(store, event_name)
    removed = store.remove_from_active(event_name, day, payload.item_ids)
    if removed:
        save_store(session, store)
    return {**_day_view(store, event_name, day), "changed": removed}


@router.post("/move")
async def move_item(
    event_name: str,
    day: Day,
    payload: MoveRequest,
    session: Session = Depends(get_session),
    store: EventStore = Depends(get_store),
):
    """
    Drop an item (or its whole selection) in front of another item.

    Stale ids make this a no-op rather than an error, since drags can race
    with deletes.
    """
    require_event(store, event_name)
    moved = store.move_item(
        event_name,
        day,
        payload.column,
        payload.dragged_id,
        payload.target_id,
        frozenset(payload.selected_ids),
    )
    if moved:
        save_store(session, store)
    return {**_day_view(store, event_name, day), "changed": moved}


@router.post("/sort-block")
async def sort_by_block(
    event_name: str,
    day: Day,
    payload: BlockSort,
    session: Session = Depends(get_session),
    store: EventStore = Depends(get_store),
):
    """Sort the day's items by block in the event's route order."""
    require_event(store, event_name)
    store.sort_by_block(event_name, day, payload.direction)
    save_store(session, store)
    return _day_view(store, event_name, day)


@router.post("/sort-number")
async def sort_selected_by_number(
    event_name: str,
    day: Day,
    payload: NumberSort,
    session: Session = Depends(get_session),
    store: EventStore = Depends(get_store),
):
    """Sort the selected items by number, grouped where the first one was."""
    require_event(store, event_name)
    store.sort_selected_by_number(event_name, day, frozenset(payload.selected_ids), payload.direction)
    save_store(session, store)
    return _day_view(store, event_name, day)
