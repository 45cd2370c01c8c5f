"""Spreadsheet synchronization service.

A sync runs in two steps. ``check_event`` fetches the sheet and computes a
change set, which is parked as pending. ``confirm_pending`` applies it once
the user agrees; ``discard_pending`` drops it. Between the two steps the user
keeps editing, so nothing computed before the fetch is trusted at confirm
time.
"""
import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime

from visitplan.models import ChangeSet
from visitplan.planner.errors import NotFound, SourceUnavailable
from visitplan.planner.reconcile import compute_change_set
from visitplan.planner.store import EventStore
from visitplan.sheets.rows import parse_sheet_rows
from visitplan.sheets.source import fetch_rows

logger = logging.getLogger(__name__)


@dataclass
class PendingChange:
    """A computed change set waiting for confirmation."""

    change_set: ChangeSet
    source_url: str
    sheet_name: str
    checked_at: datetime = field(default_factory=lambda: datetime.now(UTC))


class SyncState:
    """Track pending change sets and last sync outcome per event."""

    _pending: dict[str, PendingChange] = {}
    _status: dict[str, dict] = {}

    @classmethod
    def get_pending(cls, event_name: str) -> PendingChange | None:
        return cls._pending.get(event_name)

    @classmethod
    def set_pending(cls, event_name: str, pending: PendingChange) -> None:
        cls._pending[event_name] = pending

    @classmethod
    def pop_pending(cls, event_name: str) -> PendingChange | None:
        return cls._pending.pop(event_name, None)

    @classmethod
    def record_sync_success(cls, event_name: str) -> None:
        cls._status[event_name] = {
            "last_sync_time": datetime.now(UTC),
            "success": True,
            "error": None,
        }

    @classmethod
    def record_sync_failure(cls, event_name: str, error: str) -> None:
        cls._status[event_name] = {
            "last_sync_time": datetime.now(UTC),
            "success": False,
            "error": error,
        }

    @classmethod
    def get_sync_status(cls, event_name: str) -> dict:
        return cls._status.get(
            event_name, {"last_sync_time": None, "success": None, "error": None}
        )

    @classmethod
    def forget(cls, event_name: str) -> None:
        cls._pending.pop(event_name, None)
        cls._status.pop(event_name, None)

    @classmethod
    def clear(cls) -> None:
        cls._pending.clear()
        cls._status.clear()


async def check_event(
    store: EventStore,
    event_name: str,
    source_url: str | None = None,
    sheet_name: str | None = None,
) -> ChangeSet:
    """
    Fetch an event's spreadsheet and park the resulting change set.

    Args:
        store: The event store.
        event_name: Event to check.
        source_url: Spreadsheet URL to use instead of the stored one, e.g.
            after the stored one stopped working.
        sheet_name: Sheet name to use; blank falls back to the stored one.

    Returns:
        The pending change set. Nothing is applied.

    Raises:
        NotFound: If the event does not exist (or was deleted during the fetch).
        SourceUnavailable: If there is no usable URL or the fetch fails.
    """
    if not store.has_event(event_name):
        raise NotFound(f"Event not found: {event_name}")

    metadata = store.metadata.get(event_name)
    url = source_url or (metadata.source_url if metadata else "")
    sheet_name = sheet_name or (metadata.sheet_name if metadata else "")
    if not url:
        SyncState.record_sync_failure(event_name, "No spreadsheet URL saved")
        raise SourceUnavailable("No spreadsheet URL saved for this event")

    try:
        rows = await fetch_rows(url, sheet_name)
    except SourceUnavailable as e:
        SyncState.record_sync_failure(event_name, str(e))
        raise

    # The list may have changed while the fetch was in flight; diff against
    # what is there now.
    if not store.has_event(event_name):
        raise NotFound(f"Event deleted during sync: {event_name}")
    change_set = compute_change_set(store.get_items(event_name), parse_sheet_rows(rows))

    SyncState.set_pending(event_name, PendingChange(change_set, url, sheet_name))
    SyncState.record_sync_success(event_name)
    return change_set


def confirm_pending(store: EventStore, event_name: str) -> bool:
    """
    Apply an event's pending change set and remember its spreadsheet.

    Returns:
        True if a change set was applied.
    """
    pending = SyncState.pop_pending(event_name)
    if pending is None:
        return False

    applied = store.confirm_reconciliation(event_name, pending.change_set)
    if applied:
        store.record_import(event_name, pending.source_url, pending.sheet_name)
    return applied


def discard_pending(event_name: str) -> bool:
    """Drop an event's pending change set without applying anything."""
    discarded = SyncState.pop_pending(event_name) is not None
    if discarded:
        logger.info(f"Discarded pending change set for {event_name}")
    return discarded


async def check_all_events(store: EventStore) -> dict:
    """
    Check every event that has a saved spreadsheet URL.

    Failures are recorded per event and do not stop the others.

    Returns dict with check statistics.
    """
    stats = {"checked": 0, "with_changes": 0, "failed": 0}

    for event_name in list(store.metadata):
        try:
            change_set = await check_event(store, event_name)
        except (SourceUnavailable, NotFound) as e:
            logger.warning(f"Spreadsheet check failed for {event_name}: {e}")
            stats["failed"] += 1
            continue
        stats["checked"] += 1
        if not change_set.is_empty():
            stats["with_changes"] += 1

    logger.info(f"Spreadsheet check completed: {stats}")
    return stats
