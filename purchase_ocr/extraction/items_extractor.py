"""Line-item extraction from a repeating template pattern.

Each match becomes one ``LineItem``. Matches exposing recognised named
groups (``name``/``product``, ``qty``/``quantity``, ``unit``, ``price``) are
read by name; anything else is read positionally as
``(name)(qty)(unit)(price)``.
"""

import re

from purchase_ocr.extraction.models import LineItem
from purchase_ocr.extraction.normalization import normalize_number, parse_number
from purchase_ocr.utils.logger import get_logger

logger = get_logger(__name__)

ITEM_GROUP_NAMES = ("name", "product", "qty", "quantity", "price", "unit")


def extract_items(text: str, matcher: re.Pattern[str] | None) -> list[LineItem]:
    """Extract every line item matched in the text, in order of occurrence.

    Args:
        text: Receipt text to scan.
        matcher: Compiled items pattern, or ``None`` if unusable.

    Returns:
        One line item per non-overlapping match.
    """
    if matcher is None:
        return []

    items: list[LineItem] = []
    for match in matcher.finditer(text):
        named = _named_captures(match)
        if named:
            items.append(item_from_named(named))
        else:
            items.append(item_from_positional(match.groups()))

    logger.debug("Items pattern produced %d line items", len(items))
    return items


def _named_captures(match: re.Match[str]) -> dict[str, str]:
    """Recognised named groups that captured something."""
    return {
        name: value
        for name, value in match.groupdict().items()
        if name in ITEM_GROUP_NAMES and value
    }


def item_from_named(captures: dict[str, str]) -> LineItem:
    """Build a line item from named captures."""
    name = captures.get("name") or captures.get("product") or ""
    qty = parse_number(captures.get("qty") or captures.get("quantity"))
    price = normalize_number(captures.get("price"))
    return LineItem(
        product_name=name.strip(),
        qty=qty or 0,
        unit=captures.get("unit", ""),
        price=price or 0,
    )


def item_from_positional(groups: tuple[str | None, ...]) -> LineItem:
    """Build a line item from capture groups read as name, qty, unit, price.

    Groups that did not participate in the match are skipped, so later
    captures shift into their place.
    """
    captures = [group for group in groups if group is not None]
    captures += [""] * (4 - len(captures))
    name, qty, unit, price = captures[:4]
    return LineItem(
        product_name=name.strip(),
        qty=normalize_number(qty) or 0,
        unit=unit,
        price=normalize_number(price) or 0,
    )
