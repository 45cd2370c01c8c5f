"""Tests for spreadsheet rows, bulk paste and CSV export."""

from conftest import SHEET_HEADER, make_draft, sheet_row

from visitplan.models import Item, PurchaseStatus
from visitplan.sheets.rows import (
    EXPORT_HEADER,
    UTF8_BOM,
    export_csv,
    parse_paste,
    parse_price,
    parse_sheet_rows,
    split_csv,
)


class TestParsePrice:
    """Tests for reading prices."""

    def test_plain_and_decorated(self):
        """Test prices with and without yen signs and separators."""
        assert parse_price("500") == 500
        assert parse_price("1,000円") == 1000
        assert parse_price("¥ 2,500") == 2500

    def test_full_width_digits(self):
        """Test prices written in full-width digits."""
        assert parse_price("１２００") == 1200

    def test_blank_or_no_digits_is_zero(self):
        """Test that a price without digits is zero."""
        assert parse_price("") == 0
        assert parse_price(None) == 0
        assert parse_price("free") == 0


class TestSplitCsv:
    """Tests for splitting CSV text."""

    def test_quoted_comma_and_doubled_quote(self):
        """Test quoted commas and doubled quotes."""
        rows = split_csv('a,"b,c","say ""hi"""\n')
        assert rows == [["a", "b,c", 'say "hi"']]

    def test_newline_inside_quotes(self):
        """Test a line break inside a quoted cell."""
        rows = split_csv('x,"line one\nline two"\ny,z\n')
        assert rows == [["x", "line one\nline two"], ["y", "z"]]

    def test_blank_lines_dropped(self):
        """Test that blank lines are dropped."""
        assert split_csv("a,b\n\n,\nc,d") == [["a", "b"], ["c", "d"]]


class TestParseSheetRows:
    """Tests for reading spreadsheet rows."""

    def test_reads_fixed_columns(self):
        """Test reading items from the fixed column layout."""
        rows = [
            SHEET_HEADER,
            sheet_row("Circle", "1日目", "東A", "01a", "Book", "1,500", "set only"),
        ]

        drafts = parse_sheet_rows(rows)

        assert len(drafts) == 1
        draft = drafts[0]
        assert draft.circle_name == "Circle"
        assert draft.event_date == "1日目"
        assert draft.block == "東A"
        assert draft.number == "01a"
        assert draft.title == "Book"
        assert draft.price == 1500
        assert draft.remarks == "set only"

    def test_header_is_skipped(self):
        """Test that the header row is skipped."""
        header = sheet_row("circle", "day", "block", "number")
        assert parse_sheet_rows([header]) == []
        assert len(parse_sheet_rows([header], has_header=False)) == 1

    def test_rows_missing_required_fields_are_skipped(self):
        """Test that rows missing a required field are skipped."""
        rows = [
            SHEET_HEADER,
            sheet_row("", "1日目", "A", "01"),
            sheet_row("C", "", "A", "01"),
            sheet_row("C", "1日目", "", "01"),
            sheet_row("C", "1日目", "A", ""),
            sheet_row("Kept", "2日目", "B", "02"),
        ]

        assert [draft.circle_name for draft in parse_sheet_rows(rows)] == ["Kept"]

    def test_short_rows_have_blank_optional_fields(self):
        """Test that missing trailing cells read as blank."""
        rows = [SHEET_HEADER, sheet_row("C", "1日目", "A", "01")[:16]]

        draft = parse_sheet_rows(rows)[0]

        assert draft.title == ""
        assert draft.price == 0
        assert draft.remarks == ""


class TestParsePaste:
    """Tests for reading pasted text."""

    def test_tab_delimited_lines(self):
        """Test reading tab separated lines."""
        text = "Circle\t2日目\tA\t01\tBook\t800\nOther\t1日目\tB\t02\t\t\n"

        drafts = parse_paste(text)

        assert [(d.circle_name, d.event_date, d.block, d.number) for d in drafts] == [
            ("Circle", "2日目", "A", "01"),
            ("Other", "1日目", "B", "02"),
        ]
        assert drafts[0].title == "Book"
        assert drafts[0].price == 800

    def test_blank_day_defaults_to_day_one(self):
        """Test that a blank day falls on day one."""
        assert parse_paste("Circle\t\tA\t01")[0].event_date == "1日目"

    def test_lines_without_space_are_skipped(self):
        """Test that lines without a space are skipped."""
        text = "No block\t1日目\t\t01\nNo number\t1日目\tA\t\n\nKept\t1日目\tA\t01"
        assert [d.circle_name for d in parse_paste(text)] == ["Kept"]


class TestExportCsv:
    """Tests for exporting items as CSV."""

    def test_bom_header_and_status_label(self):
        """Test the BOM, the header and the status labels."""
        item = Item.from_draft(make_draft("Circle", "A", "01", "Book", 500))
        item.purchase_status = PurchaseStatus.PURCHASED

        text = export_csv([item])

        assert text.startswith(UTF8_BOM)
        lines = text[len(UTF8_BOM):].splitlines()
        assert lines[0] == ",".join(EXPORT_HEADER)
        assert lines[1] == "Circle,1日目,A,01,Book,500,購入済,"

    def test_quotes_cells_with_separators(self):
        """Test that cells with separators are quoted."""
        item = Item.from_draft(make_draft("A, B", "A", "01", 'The "Book"', remarks="two\nlines"))

        text = export_csv([item])

        assert '"A, B"' in text
        assert '"The ""Book"""' in text
        assert '"two\nlines"' in text

    def test_export_reads_back(self):
        """Test that exported text reads back as the same rows."""
        items = [
            Item.from_draft(make_draft("A, B", "A", "01", 'The "Book"', 300)),
            Item.from_draft(make_draft("C", "B", "02", "Plain", 0, event_date="2日目")),
        ]

        rows = split_csv(export_csv(items)[len(UTF8_BOM):])

        assert rows[1][:6] == ["A, B", "1日目", "A", "01", 'The "Book"', "300"]
        assert rows[2][6] == "未購入"
