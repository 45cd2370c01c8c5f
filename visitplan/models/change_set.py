"""Pending spreadsheet sync result."""

from sqlmodel import Field, SQLModel

from visitplan.models.item import Item, ItemBase


class ChangeSet(SQLModel):
    """Edits that would bring an event's list in line with its spreadsheet.

    A change set is only a proposal. Nothing is applied until the user
    confirms it, and discarding it leaves the event untouched.

    Attributes:
        to_delete: Current items whose circle/day/space no longer appears
            in the spreadsheet.
        to_update: Current items with their id and purchase status kept and
            title, price or remarks replaced by the spreadsheet values.
        to_add: Spreadsheet rows that match nothing current. They get an id
            only when the change set is confirmed.
    """
    to_delete: list[Item] = Field(default_factory=list)
    to_update: list[Item] = Field(default_factory=list)
    to_add: list[ItemBase] = Field(default_factory=list)

    def is_empty(self) -> bool:
        return not (self.to_delete or self.to_update or self.to_add)
