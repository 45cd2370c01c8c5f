"""Route ordering: manual moves, sorted insertion and partial sorts.

The order of an event's item list is the walking route, so every function
here returns a new list holding exactly the same entries as its input. Only
positions change.
"""

import re
import unicodedata
from collections.abc import Callable, Collection, Hashable, Sequence
from functools import cmp_to_key
from typing import TypeVar
from uuid import UUID

from visitplan.models import Item, ItemBase, SortDirection

T = TypeVar("T")

_DIGITS = re.compile(r"(\d+)")


def _identity(value):
    return value


def natural_key(value: str) -> tuple:
    """Sort key comparing digit runs by value, so "A-2" sorts before "A-10".

    Width and case differences are folded ("Ａ１" equals "a1").
    """
    text = unicodedata.normalize("NFKC", value).casefold()
    parts = _DIGITS.split(text)
    # split() with a capturing group alternates text and digit runs, so odd
    # positions are always digits.
    return tuple(int(part) if index % 2 else part for index, part in enumerate(parts))


def _cmp(a, b) -> int:
    return (a > b) - (a < b)


def compare_position(a: ItemBase, b: ItemBase) -> int:
    """Compare two items by (block, number). Items without a block go last."""
    if not a.block and not b.block:
        return 0
    if not a.block:
        return 1
    if not b.block:
        return -1
    return _cmp(
        (natural_key(a.block), natural_key(a.number)),
        (natural_key(b.block), natural_key(b.number)),
    )


def move_item(
    sequence: Sequence[T],
    dragged_id: Hashable,
    target_id: Hashable,
    selected_ids: Collection[Hashable] = frozenset(),
    key: Callable[[T], Hashable] | None = None,
) -> list[T]:
    """Move an entry, or the whole selection, to just before the target.

    If the dragged entry is part of a selection of more than one id, every
    selected entry moves as one block, keeping its relative order. Otherwise
    only the dragged entry moves.

    Args:
        sequence: Entries in route order (items or bare ids).
        dragged_id: Id of the entry being dragged.
        target_id: Id of the entry to drop in front of.
        selected_ids: Ids currently selected in the UI.
        key: Returns an entry's id. Defaults to the entry itself.

    Returns:
        The reordered list, or an unchanged copy when the dragged or target
        entry cannot be found (for example when the target is itself part of
        the moved selection).
    """
    key = key or _identity
    entries = list(sequence)
    ids = [key(entry) for entry in entries]

    if dragged_id not in ids or dragged_id == target_id:
        return entries

    if dragged_id in selected_ids and len(selected_ids) > 1:
        block = [entry for entry in entries if key(entry) in selected_ids]
        remaining = [entry for entry in entries if key(entry) not in selected_ids]
    else:
        block = [entries[ids.index(dragged_id)]]
        remaining = [entry for entry in entries if key(entry) != dragged_id]

    target_index = next(
        (index for index, entry in enumerate(remaining) if key(entry) == target_id),
        None,
    )
    if target_index is None:
        return entries

    return remaining[:target_index] + block + remaining[target_index:]


def insert_sorted(items: Sequence[Item], new_item: Item) -> list[Item]:
    """Insert an item in front of the first item it does not sort after.

    Existing items keep their manual order; only the new item is placed by
    (block, number).
    """
    result = list(items)
    for index, item in enumerate(result):
        if compare_position(new_item, item) <= 0:
            result.insert(index, new_item)
            return result
    result.append(new_item)
    return result


def sort_by_block(
    items: Sequence[Item],
    in_scope: Callable[[Item], bool],
    direction: SortDirection,
) -> list[Item]:
    """Sort the in-scope items by block, leaving every other item in place.

    The sorted items are written back into the slots the in-scope items
    occupied. Items without a block stay last in either direction.
    """

    def compare(a: Item, b: Item) -> int:
        if not a.block and not b.block:
            return 0
        if not a.block:
            return 1
        if not b.block:
            return -1
        result = _cmp(natural_key(a.block), natural_key(b.block))
        return result if direction is SortDirection.ASC else -result

    result = list(items)
    slots = [index for index, item in enumerate(result) if in_scope(item)]
    ordered = sorted((result[index] for index in slots), key=cmp_to_key(compare))
    for index, item in zip(slots, ordered):
        result[index] = item
    return result


def sort_selected_by_number(
    items: Sequence[Item],
    selected_ids: Collection[UUID],
    direction: SortDirection,
) -> list[Item]:
    """Sort the selected items by number and regroup them as one block.

    The block is placed where the first selected item was.
    """
    result = list(items)
    first = next(
        (index for index, item in enumerate(result) if item.id in selected_ids), None
    )
    if first is None:
        return result

    selected = [item for item in result if item.id in selected_ids]
    others = [item for item in result if item.id not in selected_ids]
    selected.sort(
        key=lambda item: natural_key(item.number),
        reverse=direction is SortDirection.DESC,
    )
    return others[:first] + selected + others[first:]
