"""Identity keys used to match items across spreadsheet snapshots."""

from visitplan.models import ItemBase

# Unit separator; never typed into a spreadsheet cell.
_SEP = "\x1f"


def loose_key(item: ItemBase) -> str:
    """Key from circle, day and space. Ignores the title."""
    return _SEP.join((item.circle_name, item.event_date, item.block, item.number))


def full_key(item: ItemBase) -> str:
    """Key from circle, day, space and title."""
    return _SEP.join((loose_key(item), item.title))
