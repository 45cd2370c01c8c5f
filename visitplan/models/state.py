"""Persisted application state.

The whole planner state is stored as a handful of named JSON blobs, one per
top-level map of the event store. They are always read together at startup
and written together in a single transaction after each change, so item
lists and the column partitions that reference them cannot drift apart.
"""

from datetime import UTC, datetime

from sqlmodel import Field, SQLModel


class StateBlob(SQLModel, table=True):
    """A named blob of serialized state.

    Attributes:
        name: Blob name, e.g. "event_items" or "day_modes".
        payload: JSON document.
        updated_at: When the blob was last written.
    """
    name: str = Field(primary_key=True)
    payload: str = Field(default="{}")
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
