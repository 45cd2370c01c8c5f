from visitplan.models.change_set import ChangeSet
from visitplan.models.event import Column, Day, EventMetadata, Mode, SortDirection
from visitplan.models.item import Item, ItemBase, PurchaseStatus
from visitplan.models.state import StateBlob

__all__ = [
    "ChangeSet",
    "Column",
    "Day",
    "EventMetadata",
    "Item",
    "ItemBase",
    "Mode",
    "PurchaseStatus",
    "SortDirection",
    "StateBlob",
]
