"""Active/candidate column split of one day's items.

Only the active column is stored: an ordered list of item ids with its own
route order, independent of the event's item list. The candidate column is
always derived as "items of the day not in the active list", so an item can
never be in both columns.
"""

from collections.abc import Iterable, Sequence
from uuid import UUID

from visitplan.models import Day, Item


def add_to_active(active: Sequence[UUID], ids: Iterable[UUID]) -> list[UUID]:
    """Append ids that are not yet active, in the order given."""
    result = list(active)
    present = set(result)
    for item_id in ids:
        if item_id not in present:
            result.append(item_id)
            present.add(item_id)
    return result


def remove_from_active(active: Sequence[UUID], ids: Iterable[UUID]) -> list[UUID]:
    """Drop the given ids, keeping the order of the rest."""
    removed = set(ids)
    return [item_id for item_id in active if item_id not in removed]


def prune(active: Sequence[UUID], existing_ids: Iterable[UUID]) -> list[UUID]:
    """Keep only ids that still exist."""
    existing = set(existing_ids)
    return [item_id for item_id in active if item_id in existing]


def day_items(items: Iterable[Item], day: Day) -> list[Item]:
    """Items falling on a day, in route order."""
    return [item for item in items if day.matches(item.event_date)]


def active_items(active: Sequence[UUID], items: Iterable[Item], day: Day) -> list[Item]:
    """Project the active id list onto the day's items, in active order.

    Ids of deleted items, or of items since moved to another day, are skipped.
    """
    by_id = {item.id: item for item in day_items(items, day)}
    return [by_id[item_id] for item_id in active if item_id in by_id]


def candidate_items(active: Sequence[UUID], items: Iterable[Item], day: Day) -> list[Item]:
    """The day's items that are not active, in route order."""
    active_set = set(active)
    return [item for item in day_items(items, day) if item.id not in active_set]
