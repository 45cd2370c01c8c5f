"""In-memory owner of every event's items, columns and view modes.

The store only mutates state. Persisting it is the caller's job: routes and
the background job save a snapshot after each successful mutation (see
``visitplan.core.snapshot``), never from inside these methods.
"""
import logging
from collections.abc import Collection, Iterable
from datetime import UTC, datetime
from operator import attrgetter
from uuid import UUID

from visitplan.models import (
    ChangeSet,
    Column,
    Day,
    EventMetadata,
    Item,
    ItemBase,
    Mode,
    PurchaseStatus,
    SortDirection,
)
from visitplan.planner import ordering, partition
from visitplan.planner.errors import NotFound, ValidationError

logger = logging.getLogger(__name__)

_item_id = attrgetter("id")


def _empty_partitions() -> dict[Day, list[UUID]]:
    return {day: [] for day in Day}


def _default_modes() -> dict[Day, Mode]:
    return {day: Mode.EDIT for day in Day}


def trimmed(draft: ItemBase) -> ItemBase:
    """Copy of a draft with surrounding whitespace stripped from every text field."""
    return draft.model_copy(
        update={
            name: value.strip()
            for name, value in draft.model_dump(include=set(ItemBase.model_fields)).items()
            if isinstance(value, str)
        }
    )


def validate_item(item: ItemBase) -> None:
    """Check a manually entered item.

    Raises:
        ValidationError: If both circle name and title are blank, or the
            price is negative.
    """
    if not item.circle_name.strip() and not item.title.strip():
        raise ValidationError("Enter a circle name or a title")
    if item.price < 0:
        raise ValidationError("Price cannot be negative")


class EventStore:
    """All planner state, keyed by event name.

    Attributes:
        items: Event name -> items in route order.
        metadata: Event name -> spreadsheet the list came from.
        partitions: Event name -> day -> active item ids in active order.
        modes: Event name -> day -> view mode.
    """

    def __init__(
        self,
        items: dict[str, list[Item]] | None = None,
        metadata: dict[str, EventMetadata] | None = None,
        partitions: dict[str, dict[Day, list[UUID]]] | None = None,
        modes: dict[str, dict[Day, Mode]] | None = None,
    ):
        self.items = items or {}
        self.metadata = metadata or {}
        self.partitions = partitions or {}
        self.modes = modes or {}
        for event_name in self.items:
            self.partitions.setdefault(event_name, _empty_partitions())
            self.modes.setdefault(event_name, _default_modes())

    # Queries

    def event_names(self) -> list[str]:
        return list(self.items)

    def has_event(self, event_name: str) -> bool:
        return event_name in self.items

    def get_items(self, event_name: str) -> list[Item]:
        """Items of an event in route order.

        Raises:
            NotFound: If the event does not exist.
        """
        if event_name not in self.items:
            raise NotFound(f"Event not found: {event_name}")
        return list(self.items[event_name])

    def get_item(self, event_name: str, item_id: UUID) -> Item | None:
        return next((item for item in self.items.get(event_name, []) if item.id == item_id), None)

    def get_mode(self, event_name: str, day: Day) -> Mode:
        return self.modes.get(event_name, {}).get(day, Mode.EDIT)

    def get_active_ids(self, event_name: str, day: Day) -> tuple[UUID, ...]:
        return tuple(self.partitions.get(event_name, {}).get(day, ()))

    def day_items(self, event_name: str, day: Day) -> list[Item]:
        return partition.day_items(self.get_items(event_name), day)

    def active_items(
        self, event_name: str, day: Day, status: PurchaseStatus | None = None
    ) -> list[Item]:
        """Active column of a day, optionally limited to one purchase status."""
        result = partition.active_items(
            self.get_active_ids(event_name, day), self.get_items(event_name), day
        )
        if status is not None:
            result = [item for item in result if item.purchase_status == status]
        return result

    def candidate_items(self, event_name: str, day: Day) -> list[Item]:
        return partition.candidate_items(
            self.get_active_ids(event_name, day), self.get_items(event_name), day
        )

    def summary(self, event_name: str) -> dict:
        """Counts per purchase status plus planned and spent totals."""
        items = self.get_items(event_name)
        counts = {status.value: 0 for status in PurchaseStatus}
        for item in items:
            counts[item.purchase_status.value] += 1
        return {
            "total_count": len(items),
            "status_counts": counts,
            "total_price": sum(item.price for item in items),
            "spent_price": sum(
                item.price for item in items if item.purchase_status == PurchaseStatus.PURCHASED
            ),
            "day_counts": {day.value: len(partition.day_items(items, day)) for day in Day},
        }

    # Item lifecycle

    def create_or_append(
        self,
        event_name: str,
        drafts: Iterable[ItemBase],
        metadata: EventMetadata | None = None,
    ) -> int:
        """
        Add items to an event, creating the event if it does not exist.

        New events start with empty active columns and both days in edit
        mode. Every item gets a fresh id and an unset purchase status.

        Returns:
            Number of items added.
        """
        new_items = [Item.from_draft(draft) for draft in drafts]

        if event_name not in self.items:
            self.items[event_name] = []
            self.partitions[event_name] = _empty_partitions()
            self.modes[event_name] = _default_modes()
            logger.info(f"Created event {event_name}")

        self.items[event_name] = self.items[event_name] + new_items
        if metadata is not None:
            self.metadata[event_name] = metadata

        logger.info(f"Added {len(new_items)} items to {event_name}")
        return len(new_items)

    def add_item(self, event_name: str, draft: ItemBase) -> Item:
        """Add one manually entered item to the end of an existing event.

        Raises:
            NotFound: If the event does not exist.
            ValidationError: If the item fails validation.
        """
        if event_name not in self.items:
            raise NotFound(f"Event not found: {event_name}")
        draft = trimmed(draft)
        validate_item(draft)
        self.create_or_append(event_name, [draft])
        return self.items[event_name][-1]

    def update_item(self, event_name: str, item: Item, validate: bool = True) -> bool:
        """
        Replace the item with the same id.

        If the edit moves the item to another day, it leaves the active
        column of the day it no longer falls on.

        Returns:
            True if an item was replaced, False if the id is unknown.

        Raises:
            ValidationError: If ``validate`` is set and the item is invalid.
        """
        if validate:
            validate_item(item)

        current = self.items.get(event_name)
        if current is None or not any(existing.id == item.id for existing in current):
            logger.debug(f"Ignoring update of unknown item {item.id} in {event_name}")
            return False

        self.items[event_name] = [item if existing.id == item.id else existing for existing in current]

        partitions = self.partitions[event_name]
        for day in Day:
            if not day.matches(item.event_date) and item.id in partitions[day]:
                partitions[day] = partition.remove_from_active(partitions[day], [item.id])
        return True

    def set_status(self, event_name: str, item_id: UUID, status: PurchaseStatus) -> bool:
        """Record a purchase outcome. Returns False if the item is unknown."""
        item = self.get_item(event_name, item_id)
        if item is None:
            return False
        return self.update_item(
            event_name, item.model_copy(update={"purchase_status": status}), validate=False
        )

    def delete_item(self, event_name: str, item_id: UUID) -> bool:
        """Remove an item and drop it from both days' active columns."""
        current = self.items.get(event_name)
        if current is None or not any(item.id == item_id for item in current):
            logger.debug(f"Ignoring delete of unknown item {item_id} in {event_name}")
            return False

        self.items[event_name] = [item for item in current if item.id != item_id]
        partitions = self.partitions[event_name]
        for day in Day:
            partitions[day] = partition.remove_from_active(partitions[day], [item_id])
        return True

    def delete_event(self, event_name: str) -> bool:
        """Remove an event and everything attached to it."""
        if event_name not in self.items:
            return False
        del self.items[event_name]
        self.metadata.pop(event_name, None)
        self.partitions.pop(event_name, None)
        self.modes.pop(event_name, None)
        logger.info(f"Deleted event {event_name}")
        return True

    def record_import(self, event_name: str, source_url: str, sheet_name: str = "") -> None:
        """Remember the spreadsheet an event was last imported from."""
        if event_name not in self.items:
            return
        self.metadata[event_name] = EventMetadata(
            source_url=source_url,
            sheet_name=sheet_name,
            last_import_at=datetime.now(UTC),
        )

    # Modes and columns

    def toggle_mode(self, event_name: str, day: Day) -> Mode | None:
        """Flip a day between edit and execute. Returns the new mode."""
        modes = self.modes.get(event_name)
        if modes is None:
            return None
        modes[day] = modes[day].toggled()
        logger.debug(f"{event_name} {day.value} is now in {modes[day].value} mode")
        return modes[day]

    def add_to_active(self, event_name: str, day: Day, item_ids: Iterable[UUID]) -> int:
        """
        Put items into a day's active column.

        Only ids of existing items on that day are taken; anything else is
        ignored. Membership only changes in edit mode.

        Returns:
            Number of ids newly added.
        """
        if event_name not in self.items or self.get_mode(event_name, day) is not Mode.EDIT:
            return 0
        on_day = {item.id for item in self.day_items(event_name, day)}
        before = self.partitions[event_name][day]
        after = partition.add_to_active(before, [i for i in item_ids if i in on_day])
        self.partitions[event_name][day] = after
        return len(after) - len(before)

    def remove_from_active(self, event_name: str, day: Day, item_ids: Iterable[UUID]) -> int:
        """Send items back to the candidate column. Returns number removed."""
        if event_name not in self.items or self.get_mode(event_name, day) is not Mode.EDIT:
            return 0
        before = self.partitions[event_name][day]
        after = partition.remove_from_active(before, item_ids)
        self.partitions[event_name][day] = after
        return len(before) - len(after)

    # Ordering

    def move_item(
        self,
        event_name: str,
        day: Day,
        column: Column,
        dragged_id: UUID,
        target_id: UUID,
        selected_ids: Collection[UUID] = frozenset(),
    ) -> bool:
        """
        Drag an item (or the selection it belongs to) in front of another.

        Moves in the active column reorder that day's active list, in either
        mode. Moves in the candidate column reorder the event's item list and
        are only possible in edit mode, where that column is visible.

        Returns:
            True if anything moved.
        """
        if event_name not in self.items:
            return False
        selected = frozenset(selected_ids)

        if column is Column.ACTIVE:
            before = self.partitions[event_name][day]
            after = ordering.move_item(before, dragged_id, target_id, selected)
            self.partitions[event_name][day] = after
            return after != before

        if column is Column.CANDIDATE:
            if self.get_mode(event_name, day) is not Mode.EDIT:
                return False
            before = self.items[event_name]
            after = ordering.move_item(before, dragged_id, target_id, selected, key=_item_id)
            self.items[event_name] = after
            return [item.id for item in after] != [item.id for item in before]

        raise ValueError(f"Unknown column: {column}")

    def sort_by_block(self, event_name: str, day: Day, direction: SortDirection) -> None:
        """Sort one day's items by block inside the event's item list."""
        if event_name not in self.items:
            return
        self.items[event_name] = ordering.sort_by_block(
            self.items[event_name], lambda item: day.matches(item.event_date), direction
        )

    def sort_selected_by_number(
        self,
        event_name: str,
        day: Day,
        selected_ids: Collection[UUID],
        direction: SortDirection,
    ) -> None:
        """
        Sort the selected items by number.

        In edit mode this sorts within the day's active column; in execute
        mode it sorts within the event's item list.
        """
        if event_name not in self.items or not selected_ids:
            return
        selected = frozenset(selected_ids)

        if self.get_mode(event_name, day) is Mode.EDIT:
            active = self.active_items(event_name, day)
            ordered = ordering.sort_selected_by_number(active, selected, direction)
            self.partitions[event_name][day] = [item.id for item in ordered]
        else:
            self.items[event_name] = ordering.sort_selected_by_number(
                self.items[event_name], selected, direction
            )

    # Spreadsheet sync

    def confirm_reconciliation(self, event_name: str, change_set: ChangeSet) -> bool:
        """
        Apply a confirmed change set against the event's current state.

        Deletes go first, then updates by id, then each new item is inserted
        at its sorted position. Everything is computed on copies and swapped
        in at the end, so either the whole change set applies or nothing
        does.

        Updates only carry the spreadsheet fields (title, price, remarks) onto
        the item as it is now, so a purchase status recorded while the sheet
        was being fetched survives. Items deleted since the change set was
        computed are not resurrected.

        Returns:
            False if the event no longer exists, True otherwise.
        """
        current = self.items.get(event_name)
        if current is None:
            logger.warning(f"Discarding change set for deleted event {event_name}")
            return False

        delete_ids = {item.id for item in change_set.to_delete}
        updates = {item.id: item for item in change_set.to_update if item.id not in delete_ids}

        def merged(item: Item) -> Item:
            update = updates.get(item.id)
            if update is None:
                return item
            return item.model_copy(
                update={"title": update.title, "price": update.price, "remarks": update.remarks}
            )

        new_items = [merged(item) for item in current if item.id not in delete_ids]
        for draft in change_set.to_add:
            new_items = ordering.insert_sorted(new_items, Item.from_draft(draft))

        existing_ids = [item.id for item in new_items]
        new_partitions = {
            day: partition.prune(active, existing_ids)
            for day, active in self.partitions[event_name].items()
        }

        self.items[event_name] = new_items
        self.partitions[event_name] = new_partitions
        logger.info(
            f"Applied change set to {event_name}: {len(delete_ids)} deleted, "
            f"{len(updates)} updated, {len(change_set.to_add)} added"
        )
        return True

    # Snapshot

    def to_snapshot(self) -> dict[str, dict]:
        """Serialize the four state maps into JSON-ready dicts."""
        return {
            "event_items": {
                name: [item.model_dump(mode="json") for item in items]
                for name, items in self.items.items()
            },
            "event_metadata": {
                name: meta.model_dump(mode="json") for name, meta in self.metadata.items()
            },
            "active_ids": {
                name: {day.value: [str(i) for i in ids] for day, ids in days.items()}
                for name, days in self.partitions.items()
            },
            "day_modes": {
                name: {day.value: mode.value for day, mode in days.items()}
                for name, days in self.modes.items()
            },
        }

    @classmethod
    def from_snapshot(cls, snapshot: dict[str, dict]) -> "EventStore":
        """Rebuild a store from ``to_snapshot`` output.

        Active ids that no longer match an item are dropped on load.
        """
        items = {
            name: [Item.model_validate(raw) for raw in raw_items]
            for name, raw_items in snapshot.get("event_items", {}).items()
        }
        metadata = {
            name: EventMetadata.model_validate(raw)
            for name, raw in snapshot.get("event_metadata", {}).items()
            if name in items
        }
        partitions = {}
        for name, days in snapshot.get("active_ids", {}).items():
            if name not in items:
                continue
            existing_ids = [item.id for item in items[name]]
            partitions[name] = _empty_partitions()
            for day_value, ids in days.items():
                partitions[name][Day(day_value)] = partition.prune(
                    [UUID(i) for i in ids], existing_ids
                )
        modes = {}
        for name, days in snapshot.get("day_modes", {}).items():
            if name not in items:
                continue
            modes[name] = _default_modes()
            for day_value, mode_value in days.items():
                modes[name][Day(day_value)] = Mode(mode_value)
        return cls(items=items, metadata=metadata, partitions=partitions, modes=modes)
