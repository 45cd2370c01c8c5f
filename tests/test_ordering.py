"""Tests for route ordering."""

from collections import Counter

from conftest import make_draft

from visitplan.models import Item, SortDirection
from visitplan.planner.ordering import (
    compare_position,
    insert_sorted,
    move_item,
    natural_key,
    sort_by_block,
    sort_selected_by_number,
)


def make_item(circle, block, number, event_date="1日目"):
    return Item.from_draft(make_draft(circle, block, number, event_date=event_date))


class TestNaturalKey:
    """Tests for natural ordering keys."""

    def test_numeric_runs_compare_by_value(self):
        """Test that digit runs compare as numbers."""
        assert natural_key("A-2") < natural_key("A-10")
        assert natural_key("09") < natural_key("10a")

    def test_case_and_width_folded(self):
        """Test that case and full-width forms sort together."""
        assert natural_key("Ａ１") == natural_key("a1")

    def test_mixed_text_and_digits(self):
        """Test ordering of labels mixing text and digits."""
        assert natural_key("東A") < natural_key("東B")
        assert natural_key("1") < natural_key("a")


class TestComparePosition:
    """Tests for comparing map positions."""

    def test_block_then_number(self):
        """Test that block decides before space number."""
        assert compare_position(make_draft("x", "A", "10"), make_draft("y", "A", "2")) > 0
        assert compare_position(make_draft("x", "A", "99"), make_draft("y", "B", "01")) < 0
        assert compare_position(make_draft("x", "A", "01"), make_draft("y", "A", "1")) == 0

    def test_blockless_items_go_last(self):
        """Test that items without a block sort after the rest."""
        assert compare_position(make_draft("x", "", "01"), make_draft("y", "Z", "99")) > 0
        assert compare_position(make_draft("x", "Z", "99"), make_draft("y", "", "01")) < 0
        assert compare_position(make_draft("x", "", "01"), make_draft("y", "", "02")) == 0


class TestMoveItem:
    """Tests for drag-and-drop reordering."""

    def test_single_move_before_target(self):
        """Test moving one item in front of the drop target."""
        assert move_item(list("abcde"), "e", "b") == list("aebcd")

    def test_single_move_downwards(self):
        """Test moving one item further down the list."""
        assert move_item(list("abcde"), "a", "d") == list("bcade")

    def test_unselected_drag_moves_only_dragged(self):
        """Test that dragging an unselected item ignores the selection."""
        assert move_item(list("abcde"), "e", "a", {"b", "c"}) == list("eabcd")

    def test_single_selection_is_a_single_move(self):
        """Test that a one-item selection moves like a single item."""
        assert move_item(list("abcde"), "d", "a", {"d"}) == list("dabce")

    def test_block_move_keeps_relative_order(self):
        """Test that a selection moves together in its current order."""
        # Selection given in a different order than it appears in the list
        result = move_item(list("abcdefg"), "f", "b", {"f", "a", "d"})
        assert result == list("adfbceg")

    def test_block_move_to_later_target(self):
        """Test a selection moved past later items."""
        result = move_item(list("abcdefg"), "a", "g", {"a", "b", "c"})
        assert result == list("defabcg")

    def test_target_inside_selection_is_noop(self):
        """Test that dropping onto the selection changes nothing."""
        entries = list("abcde")
        assert move_item(entries, "b", "c", {"b", "c"}) == entries

    def test_unknown_ids_are_noop(self):
        """Test that unknown ids leave the list unchanged."""
        entries = list("abc")
        assert move_item(entries, "x", "a") == entries
        assert move_item(entries, "a", "x") == entries

    def test_drop_on_itself_is_noop(self):
        """Test that dropping an item on itself changes nothing."""
        assert move_item(list("abc"), "b", "b") == list("abc")

    def test_moves_items_by_key(self):
        """Test reordering a list of items by their ids."""
        items = [make_item("A", "A", "01"), make_item("B", "A", "02"), make_item("C", "A", "03")]
        result = move_item(items, items[2].id, items[0].id, key=lambda item: item.id)
        assert [item.circle_name for item in result] == ["C", "A", "B"]

    def test_moves_conserve_entries(self):
        """Test that every move keeps the same entries."""
        entries = list("abcdefghij")
        moves = [
            ("j", "a", {"j", "c", "e"}),
            ("b", "i", set()),
            ("e", "b", {"e"}),
            ("c", "h", {"c", "d", "h"}),
        ]
        for dragged, target, selected in moves:
            entries = move_item(entries, dragged, target, selected)
            assert Counter(entries) == Counter("abcdefghij")


class TestInsertSorted:
    """Tests for inserting new items at their map position."""

    def test_inserts_before_first_not_smaller(self):
        """Test insertion in front of the first item not before it."""
        items = [make_item("A", "A", "01"), make_item("B", "A", "10"), make_item("C", "B", "01")]
        new = make_item("N", "A", "2")
        result = insert_sorted(items, new)
        assert [item.circle_name for item in result] == ["A", "N", "B", "C"]

    def test_appends_when_largest(self):
        """Test that an item sorting after every other is appended."""
        items = [make_item("A", "A", "01")]
        result = insert_sorted(items, make_item("N", "Z", "01"))
        assert result[-1].circle_name == "N"

    def test_keeps_manual_order_of_existing_items(self):
        """Test that existing items keep their hand-made order."""
        items = [make_item("C", "C", "01"), make_item("A", "A", "01")]
        result = insert_sorted(items, make_item("B", "B", "01"))
        assert [item.circle_name for item in result] == ["B", "C", "A"]

    def test_blockless_item_goes_before_first_blockless(self):
        """Test that a blockless item goes in front of existing blockless items."""
        items = [make_item("A", "A", "01"), make_item("X", "", ""), make_item("Y", "", "")]
        result = insert_sorted(items, make_item("N", "", ""))
        assert [item.circle_name for item in result] == ["A", "N", "X", "Y"]

    def test_insert_into_empty(self):
        """Test insertion into an empty list."""
        new = make_item("N", "A", "01")
        assert insert_sorted([], new) == [new]


class TestSortByBlock:
    """Tests for sorting one day by block."""

    def test_only_day_items_move(self):
        """Test that items of other days keep their slots."""
        items = [
            make_item("d1-C", "C", "01"),
            make_item("d2-Z", "Z", "01", event_date="2日目"),
            make_item("d1-A", "A", "01"),
            make_item("d1-none", "", "01"),
            make_item("d1-B", "B", "01"),
        ]
        result = sort_by_block(items, lambda item: "1日目" in item.event_date, SortDirection.ASC)
        assert [item.circle_name for item in result] == ["d1-A", "d2-Z", "d1-B", "d1-C", "d1-none"]

    def test_descending_keeps_blockless_last(self):
        """Test that descending order still puts blockless items last."""
        items = [make_item("none", "", "01"), make_item("A", "A", "01"), make_item("B", "B", "01")]
        result = sort_by_block(items, lambda item: True, SortDirection.DESC)
        assert [item.circle_name for item in result] == ["B", "A", "none"]


class TestSortSelectedByNumber:
    """Tests for sorting a selection by space number."""

    def test_block_placed_at_first_selected(self):
        """Test that sorted items fill the slot of the first selected one."""
        items = [
            make_item("a", "A", "30"),
            make_item("b", "A", "05"),
            make_item("c", "A", "20"),
            make_item("d", "A", "10"),
        ]
        selected = {items[1].id, items[3].id, items[2].id}
        result = sort_selected_by_number(items, selected, SortDirection.ASC)
        assert [item.circle_name for item in result] == ["a", "b", "d", "c"]

    def test_descending(self):
        """Test sorting a selection in descending order."""
        items = [make_item("a", "A", "2"), make_item("b", "A", "10"), make_item("c", "A", "1")]
        result = sort_selected_by_number(items, {item.id for item in items}, SortDirection.DESC)
        assert [item.circle_name for item in result] == ["b", "a", "c"]

    def test_nothing_selected(self):
        """Test that an empty selection changes nothing."""
        items = [make_item("a", "A", "2")]
        assert sort_selected_by_number(items, set(), SortDirection.ASC) == items
