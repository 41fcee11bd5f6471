"""Template-free first look at freshly OCR'd receipt text.

Used when an upload is scanned without a template: the first non-blank line
is taken as the vendor and the labelled (or last) amount as the total.
"""

import re

from purchase_ocr.extraction.models import ExtractedRecord

_LABELLED_TOTAL = re.compile(
    r"(?:total|grand total|amount|balance|₹|rs\.?|inr)[:\s]*([0-9,]+(?:\.[0-9]+)?)",
    re.IGNORECASE,
)
_NUMERIC_TOKEN = re.compile(r"[0-9]{1,3}(?:,[0-9]{3})*(?:\.[0-9]+)?|\d+\.\d+")


def _amount(token: str) -> float | None:
    try:
        value = float(token.replace(",", ""))
    except ValueError:
        return None
    # a zero total is as good as none here
    return value or None


def guess_total(text: str) -> float | None:
    """Best-effort total: labelled amount first, else the last number."""
    match = _LABELLED_TOTAL.search(text)
    if match:
        return _amount(match.group(1))
    numbers = _NUMERIC_TOKEN.findall(text)
    if numbers:
        return _amount(numbers[-1])
    return None


def summarize(text: str) -> ExtractedRecord:
    """Build a partial record from raw OCR text without a template."""
    lines = [line.strip() for line in text.splitlines() if line.strip()]
    return ExtractedRecord(
        raw=text,
        vendor_name=lines[0] if lines else "",
        total=guess_total(text),
    )
