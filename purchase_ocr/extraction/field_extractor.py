"""Single-value field extraction for vendor, date, total and subtotal."""

import re

from purchase_ocr.extraction.normalization import normalize_number

_TEXT_FIELDS = ("vendor", "date")
_AMOUNT_FIELDS = ("total", "subtotal")


def _first_group(match: re.Match[str]) -> str | None:
    """Return capture group 1 if the pattern has one and it matched."""
    if match.re.groups:
        return match.group(1)
    return None


def extract_scalar(
    text: str, matcher: re.Pattern[str] | None, kind: str
) -> str | float | None:
    """Extract one scalar field from text using its first match.

    Args:
        text: Receipt text to search.
        matcher: Compiled field pattern, or ``None`` if unusable.
        kind: One of ``vendor``, ``date``, ``total`` or ``subtotal``.

    Returns:
        A string for vendor/date (``""`` when unmatched) and a number or
        ``None`` for total/subtotal.

    Raises:
        ValueError: If ``kind`` is not a known field.
    """
    if kind not in _TEXT_FIELDS and kind not in _AMOUNT_FIELDS:
        raise ValueError(f"Unknown scalar field: {kind}")

    default = "" if kind in _TEXT_FIELDS else None
    if matcher is None:
        return default

    match = matcher.search(text)
    if match is None:
        return default

    if kind == "vendor":
        return extract_vendor(match)
    if kind == "date":
        return extract_date(match)
    return extract_amount(match)


def extract_vendor(match: re.Match[str]) -> str:
    """Vendor name: trimmed group 1, falling back to the trimmed match."""
    group = _first_group(match)
    if group and group.strip():
        return group.strip()
    return match.group(0).strip()


def extract_date(match: re.Match[str]) -> str:
    """Date token exactly as found, without trimming or parsing.

    Unlike a plain whole-match rule, a participating capture group narrows
    the token, so ``Date: (\\S+)`` yields ``2024-01-15`` rather than
    ``Date: 2024-01-15``. Without a participating group the whole match is
    the date.
    """
    group = _first_group(match)
    if group:
        return group
    return match.group(0)


def extract_amount(match: re.Match[str]) -> float | None:
    """Numeric amount from group 1 (or the whole match), ``None`` if unparsable."""
    candidate = _first_group(match) or match.group(0)
    return normalize_number(candidate)
