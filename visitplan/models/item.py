"""Shopping item models for circle visit planning.

This module defines the Item model which represents one purchasable unit
sold by one circle at an event. Items are imported in bulk, pulled from a
spreadsheet, or added manually by users, and they carry the purchase outcome
recorded while walking the route.
"""

from enum import Enum
from uuid import UUID, uuid4

from sqlmodel import Field, SQLModel


class PurchaseStatus(str, Enum):
    """Outcome recorded for an item while visiting circles."""

    NONE = "None"
    PURCHASED = "Purchased"
    SOLD_OUT = "SoldOut"
    ABSENT = "Absent"
    POSTPONE = "Postpone"
    LATE = "Late"


class ItemBase(SQLModel):
    """Fields shared by stored items and not-yet-stored drafts.

    A draft is what the spreadsheet and the bulk paste produce: it has no
    identity and no purchase status until it is added to an event.

    Attributes:
        circle_name: Name of the circle (vendor) selling the item.
        event_date: Free-text day label such as "1日目" or "day 1".
        block: Hall block of the circle's space.
        number: Space number within the block.
        title: Item title.
        price: Price in yen, never negative.
        remarks: Free-form notes.
    """
    circle_name: str = ""
    event_date: str = ""
    block: str = ""
    number: str = ""
    title: str = ""
    price: int = Field(default=0, ge=0)
    remarks: str = ""


class Item(ItemBase):
    """An item on an event's shopping list.

    Attributes:
        id: Unique identifier (UUID), generated on creation and never changed.
        purchase_status: Local-only purchase outcome. Spreadsheet syncs never
            overwrite it.
    """
    id: UUID = Field(default_factory=uuid4)
    purchase_status: PurchaseStatus = Field(default=PurchaseStatus.NONE)

    @classmethod
    def from_draft(cls, draft: ItemBase) -> "Item":
        """Create a new item with a fresh id from a draft."""
        return cls(**draft.model_dump(include=set(ItemBase.model_fields)))
