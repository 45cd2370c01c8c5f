"""Tests for the active/candidate column split."""

from uuid import uuid4

from conftest import make_draft

from visitplan.models import Day, Item
from visitplan.planner.partition import (
    active_items,
    add_to_active,
    candidate_items,
    day_items,
    prune,
    remove_from_active,
)


def day_list():
    return [
        Item.from_draft(make_draft("A", "A", "01")),
        Item.from_draft(make_draft("B", "A", "02")),
        Item.from_draft(make_draft("C", "B", "01", event_date="2日目")),
        Item.from_draft(make_draft("D", "B", "02")),
        Item.from_draft(make_draft("E", "B", "03", event_date="day 2")),
    ]


class TestMembership:
    """Tests for active column membership."""

    def test_add_appends_in_given_order(self):
        """Test that added ids join the end in the order given."""
        a, b, c = uuid4(), uuid4(), uuid4()
        assert add_to_active([a], [c, b]) == [a, c, b]

    def test_add_ignores_duplicates(self):
        """Test that ids already active are not added twice."""
        a, b = uuid4(), uuid4()
        assert add_to_active([a, b], [b, a, b]) == [a, b]

    def test_remove_keeps_order(self):
        """Test that removal keeps the order of the rest."""
        a, b, c, d = uuid4(), uuid4(), uuid4(), uuid4()
        assert remove_from_active([a, b, c, d], [c, a, uuid4()]) == [b, d]

    def test_prune_drops_missing_ids(self):
        """Test that ids of deleted items are dropped."""
        a, b = uuid4(), uuid4()
        assert prune([a, b], [b]) == [b]


class TestProjections:
    """Tests for the day views derived from the collection."""

    def test_day_items_by_label(self):
        """Test that items are assigned to days by their date label."""
        items = day_list()
        assert [item.circle_name for item in day_items(items, Day.DAY1)] == ["A", "B", "D"]
        assert [item.circle_name for item in day_items(items, Day.DAY2)] == ["C", "E"]

    def test_active_follows_active_order(self):
        """Test that the active column follows its own order."""
        items = day_list()
        active = [items[3].id, items[0].id]
        assert [item.circle_name for item in active_items(active, items, Day.DAY1)] == ["D", "A"]

    def test_candidates_follow_route_order(self):
        """Test that candidates follow the collection order."""
        items = day_list()
        active = [items[3].id, items[0].id]
        assert [item.circle_name for item in candidate_items(active, items, Day.DAY1)] == ["B"]

    def test_deleted_items_disappear(self):
        """Test that deleted items leave both columns."""
        items = day_list()
        active = [items[0].id, items[1].id]
        remaining = items[1:]
        assert [item.circle_name for item in active_items(active, remaining, Day.DAY1)] == ["B"]
        assert all(item.id != items[0].id for item in candidate_items(active, remaining, Day.DAY1))

    def test_columns_are_exclusive_and_cover_the_day(self):
        """Test that every day item is in exactly one column."""
        items = day_list()
        active = [items[1].id, items[2].id]  # items[2] is on day 2
        for day in Day:
            act = {item.id for item in active_items(active, items, day)}
            cand = {item.id for item in candidate_items(active, items, day)}
            assert act.isdisjoint(cand)
            assert act | cand == {item.id for item in day_items(items, day)}
