"""Diff an event's item list against a fresh spreadsheet snapshot."""
import logging
from collections import defaultdict
from collections.abc import Sequence
from uuid import UUID

from visitplan.models import ChangeSet, Item, ItemBase
from visitplan.planner.keys import full_key, loose_key

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("circle_name", "event_date", "block", "number")


def is_complete(draft: ItemBase) -> bool:
    """Check that a spreadsheet row carries circle, day and space."""
    return all(getattr(draft, name) for name in REQUIRED_FIELDS)


def _index(items: Sequence[Item], key) -> dict[str, list[Item]]:
    index = defaultdict(list)
    for item in items:
        index[key(item)].append(item)
    return index


def _claim(matches: list[Item], claimed: set[UUID]) -> Item | None:
    for item in matches:
        if item.id not in claimed:
            claimed.add(item.id)
            return item
    return None


def compute_change_set(current: Sequence[Item], fetched: Sequence[ItemBase]) -> ChangeSet:
    """
    Compute the edits that bring ``current`` in line with ``fetched``.

    Items are matched in two tiers:
        1. Full key (circle, day, block, number, title). Identity is unchanged;
           an update is proposed only if price or remarks differ.
        2. Loose key (same without title). The title was edited upstream; an
           update carries over the current id and purchase status and takes
           title, price and remarks from the spreadsheet.

    Anything matching neither tier is an add. Current items whose loose key is
    not in the spreadsheet are deletes. There is no fuzzy matching: a row with
    a different circle/day/space is always an add, however similar its title.

    Each current item is matched by at most one row, and all full-key matches
    are settled before any loose-key match, so repeated rows for one space
    cannot steal an item whose title still matches exactly.

    Nothing is mutated; the caller decides whether to apply the result.
    """
    candidates = [draft for draft in fetched if is_complete(draft)]
    skipped = len(fetched) - len(candidates)
    if skipped:
        logger.debug(f"Skipped {skipped} incomplete spreadsheet rows")

    by_full_key = _index(current, full_key)
    by_loose_key = _index(current, loose_key)
    fetched_loose_keys = {loose_key(draft) for draft in candidates}

    change_set = ChangeSet()
    claimed: set[UUID] = set()

    for item in current:
        if loose_key(item) not in fetched_loose_keys:
            change_set.to_delete.append(item)

    exact = [_claim(by_full_key.get(full_key(draft), []), claimed) for draft in candidates]

    for draft, existing in zip(candidates, exact):
        if existing is not None:
            if existing.price != draft.price or existing.remarks != draft.remarks:
                change_set.to_update.append(
                    existing.model_copy(update={"price": draft.price, "remarks": draft.remarks})
                )
            continue

        existing = _claim(by_loose_key.get(loose_key(draft), []), claimed)
        if existing is not None:
            change_set.to_update.append(
                existing.model_copy(
                    update={"title": draft.title, "price": draft.price, "remarks": draft.remarks}
                )
            )
            continue

        change_set.to_add.append(draft)

    logger.info(
        f"Computed change set: {len(change_set.to_delete)} to delete, "
        f"{len(change_set.to_update)} to update, {len(change_set.to_add)} to add"
    )
    return change_set
