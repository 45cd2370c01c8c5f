"""Event-level models: days, columns, view modes and source metadata.

An event (for example "C105") owns one ordered item list. Each of its two
days has its own view mode and its own active column, so the enums below are
what the rest of the application uses to address a day or a column instead
of passing free-form tags around.
"""

from datetime import UTC, datetime
from enum import Enum

from sqlmodel import Field, SQLModel

# Substrings of an item's event_date that place it on a day. Compared
# case-insensitively.
DAY_MARKERS = {
    "day1": ("1日目", "day 1", "day1"),
    "day2": ("2日目", "day 2", "day2"),
}


class Day(str, Enum):
    """One of the two days of an event."""

    DAY1 = "day1"
    DAY2 = "day2"

    def matches(self, event_date: str) -> bool:
        """Return True if an item's event_date label falls on this day."""
        label = event_date.casefold()
        return any(marker.casefold() in label for marker in DAY_MARKERS[self.value])

    @classmethod
    def for_event_date(cls, event_date: str) -> "Day | None":
        """Return the day an event_date label belongs to, if any."""
        for day in cls:
            if day.matches(event_date):
                return day
        return None


class Column(str, Enum):
    """The two columns of a day view.

    ACTIVE holds the items chosen for the route. CANDIDATE is everything else
    on that day and is never stored, only derived.
    """

    ACTIVE = "active"
    CANDIDATE = "candidate"


class Mode(str, Enum):
    """View mode of one day.

    In EDIT both columns are shown and column membership can change. In
    EXECUTE only the active column is shown and it can only be reordered.
    """

    EDIT = "edit"
    EXECUTE = "execute"

    def toggled(self) -> "Mode":
        return Mode.EXECUTE if self is Mode.EDIT else Mode.EDIT


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


class EventMetadata(SQLModel):
    """Where an event's list was imported from.

    Attributes:
        source_url: Spreadsheet URL the list was last imported from.
        sheet_name: Optional sheet (tab) name; empty means the first sheet.
        last_import_at: When the list was last imported or synced.
    """
    source_url: str
    sheet_name: str = ""
    last_import_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
