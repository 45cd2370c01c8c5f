"""Convert between delimited text rows and items."""
import csv
import io
import re
import unicodedata
from collections.abc import Iterable, Sequence

from visitplan.models import ItemBase, PurchaseStatus

# Column positions in the circle-list spreadsheet (column M onwards).
SHEET_COLUMNS = {
    "circle_name": 12,
    "event_date": 13,
    "block": 14,
    "number": 15,
    "title": 16,
    "price": 17,
    "remarks": 22,
}

# Column order of a bulk paste (a copy of spreadsheet columns M to R).
PASTE_COLUMNS = ("circle_name", "event_date", "block", "number", "title", "price")

DEFAULT_EVENT_DATE = "1日目"

EXPORT_HEADER = ["サークル名", "参加日", "ブロック", "ナンバー", "タイトル", "頒布価格", "購入状態", "備考"]

STATUS_LABELS = {
    PurchaseStatus.NONE: "未購入",
    PurchaseStatus.PURCHASED: "購入済",
    PurchaseStatus.SOLD_OUT: "売切",
    PurchaseStatus.ABSENT: "欠席",
    PurchaseStatus.POSTPONE: "後回し",
    PurchaseStatus.LATE: "遅参",
}

UTF8_BOM = "\ufeff"


def parse_price(value: str | None) -> int:
    """Keep only the digits of a price cell ("1,000円" -> 1000). Blank is 0."""
    if not value:
        return 0
    digits = re.sub(r"[^0-9]", "", unicodedata.normalize("NFKC", value))
    return int(digits) if digits else 0


def split_csv(text: str) -> list[list[str]]:
    """
    Split comma-delimited text into rows of cells.

    Quoted cells may contain commas, newlines and doubled quotes ("" stands
    for one literal quote). Blank lines are dropped.
    """
    reader = csv.reader(io.StringIO(text))
    return [row for row in reader if any(cell.strip() for cell in row)]


def _cell(row: Sequence[str], index: int) -> str:
    return row[index].strip() if index < len(row) and row[index] else ""


def parse_sheet_rows(rows: Sequence[Sequence[str]], has_header: bool = True) -> list[ItemBase]:
    """
    Turn spreadsheet rows into item drafts.

    Rows without a circle name, day, block or number are skipped entirely.
    """
    drafts = []
    for row in rows[1:] if has_header else rows:
        values = {name: _cell(row, index) for name, index in SHEET_COLUMNS.items()}
        if not all(values[name] for name in ("circle_name", "event_date", "block", "number")):
            continue
        values["price"] = parse_price(values["price"])
        drafts.append(ItemBase(**values))
    return drafts


def parse_paste(text: str) -> list[ItemBase]:
    """
    Parse tab-delimited text pasted from a spreadsheet.

    One item per line in the order circle, day, block, number, title, price.
    Lines without block or number are skipped; a blank day defaults to day 1.
    """
    drafts = []
    for line in text.splitlines():
        if not line.strip():
            continue
        cells = [cell.strip() for cell in line.split("\t")]
        values = {name: _cell(cells, index) for index, name in enumerate(PASTE_COLUMNS)}
        if not values["block"] or not values["number"]:
            continue
        values["event_date"] = values["event_date"] or DEFAULT_EVENT_DATE
        values["price"] = parse_price(values["price"])
        drafts.append(ItemBase(**values))
    return drafts


def export_csv(items: Iterable) -> str:
    """
    Format items as CSV for download.

    The text starts with a UTF-8 byte order mark so spreadsheet software
    picks the right encoding. Cells containing a comma, quote or newline are
    quoted with inner quotes doubled.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(EXPORT_HEADER)
    for item in items:
        writer.writerow([
            item.circle_name,
            item.event_date,
            item.block,
            item.number,
            item.title,
            item.price,
            STATUS_LABELS.get(item.purchase_status, item.purchase_status.value),
            item.remarks,
        ])
    return UTF8_BOM + buffer.getvalue()
