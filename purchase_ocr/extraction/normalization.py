"""Numeric cleanup for amounts captured from noisy OCR text."""

import math
import re

# A dot right after a letter or not followed by a digit is punctuation
# ("Rs. 2,000", "No.5"), not a decimal point.
_PUNCTUATION_DOT = re.compile(r"(?<=[^\W\d_])\.|\.(?!\d)")
_NON_NUMERIC = re.compile(r"[^0-9.,]")


def normalize_number(raw: str | None) -> float | None:
    """Convert a currency-formatted capture into a number.

    Abbreviation dots are dropped, then every character other than ASCII
    digits, ``.`` and ``,`` goes, then commas are removed as thousands
    separators.

    Args:
        raw: Captured text such as ``"₹1,234.50"`` or ``"Rs. 2,000"``.

    Returns:
        Parsed value, or ``None`` when nothing numeric remains.
    """
    if raw is None:
        return None
    cleaned = _PUNCTUATION_DOT.sub("", raw)
    cleaned = _NON_NUMERIC.sub("", cleaned).replace(",", "")
    return _to_float(cleaned)


def parse_number(raw: str | None) -> float | None:
    """Parse a capture as a plain number without stripping characters.

    Args:
        raw: Captured text, surrounding whitespace allowed.

    Returns:
        Parsed value, or ``None`` if the text is not a finite number.
    """
    if raw is None:
        return None
    return _to_float(raw.strip())


def _to_float(value: str) -> float | None:
    if not value:
        return None
    try:
        number = float(value)
    except ValueError:
        return None
    if not math.isfinite(number):
        return None
    return number
