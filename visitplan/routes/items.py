"""Item routes for managing shopping list items."""
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlmodel import Session, SQLModel

from visitplan.core.database import get_session
from visitplan.core.snapshot import get_store, save_store
from visitplan.models import Item, ItemBase, PurchaseStatus
from visitplan.planner.errors import ValidationError
from visitplan.planner.store import EventStore
from visitplan.routes.common import require_event, validation_failed

router = APIRouter(prefix="/events/{event_name}/items", tags=["items"])


class ItemEdit(ItemBase):
    purchase_status: PurchaseStatus = PurchaseStatus.NONE


class StatusChange(SQLModel):
    purchase_status: PurchaseStatus


@router.post("")
async def create_item(
    event_name: str,
    payload: ItemBase,
    session: Session = Depends(get_session),
    store: EventStore = Depends(get_store),
):
    """
    Add a new item to the end of the event's list.

    Returns 422 if both circle name and title are blank.
    """
    require_event(store, event_name)
    try:
        item = store.add_item(event_name, payload)
    except ValidationError as e:
        raise validation_failed(e)

    save_store(session, store)
    return {"item": item}


@router.put("/{item_id}")
async def update_item(
    event_name: str,
    item_id: UUID,
    payload: ItemEdit,
    session: Session = Depends(get_session),
    store: EventStore = Depends(get_store),
):
    """
    Replace an item's fields.

    An unknown item id is a no-op ("changed": false), since the item may
    have been deleted by an earlier request. Returns 422 if both circle name
    and title are blank.
    """
    require_event(store, event_name)
    item = Item(id=item_id, **payload.model_dump())
    try:
        changed = store.update_item(event_name, item)
    except ValidationError as e:
        raise validation_failed(e)

    if changed:
        save_store(session, store)
    return {"changed": changed, "item": store.get_item(event_name, item_id)}


@router.post("/{item_id}/status")
async def set_status(
    event_name: str,
    item_id: UUID,
    payload: StatusChange,
    session: Session = Depends(get_session),
    store: EventStore = Depends(get_store),
):
    """Record a purchase outcome for an item."""
    require_event(store, event_name)
    changed = store.set_status(event_name, item_id, payload.purchase_status)
    if changed:
        save_store(session, store)
    return {"changed": changed, "item": store.get_item(event_name, item_id)}


@router.delete("/{item_id}")
async def delete_item(
    event_name: str,
    item_id: UUID,
    session: Session = Depends(get_session),
    store: EventStore = Depends(get_store),
):
    """Delete an item and take it out of both days' active columns."""
    require_event(store, event_name)
    changed = store.delete_item(event_name, item_id)
    if changed:
        save_store(session, store)
    return {"changed": changed}
