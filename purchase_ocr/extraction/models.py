"""Data models for template-driven receipt extraction.

A ``Template`` holds the five user-authored regex patterns, and an
``ExtractedRecord`` is the fully shaped result of running one against text.
"""

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

# Template field -> wire key used by API clients and YAML template files.
TEMPLATE_WIRE_KEYS: dict[str, str] = {
    "vendor": "vendorRegex",
    "date": "dateRegex",
    "total": "totalRegex",
    "subtotal": "subtotalRegex",
    "items": "itemsRegex",
}


@dataclass(frozen=True)
class Template:
    """User-authored extraction patterns, one per receipt field."""

    vendor_pattern: str | None = None
    date_pattern: str | None = None
    total_pattern: str | None = None
    subtotal_pattern: str | None = None
    items_pattern: str | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> "Template":
        """Build a template from a wire-format mapping.

        Accepts both the ``vendorRegex`` style keys and the attribute
        names. Unknown keys are ignored and non-string values count as
        absent patterns.

        Args:
            data: Mapping of pattern keys to pattern strings.

        Returns:
            Template with whichever patterns were supplied.
        """
        if not data:
            return cls()

        patterns: dict[str, str | None] = {}
        for name, wire_key in TEMPLATE_WIRE_KEYS.items():
            attr = f"{name}_pattern"
            value = data.get(wire_key, data.get(attr))
            patterns[attr] = value if isinstance(value, str) else None
        return cls(**patterns)

    def pattern_for(self, name: str) -> str | None:
        """Return the pattern string for a field name such as ``"total"``."""
        return getattr(self, f"{name}_pattern")

    def to_dict(self) -> dict[str, str]:
        """Render the supplied patterns using wire keys."""
        return {
            wire_key: pattern
            for name, wire_key in TEMPLATE_WIRE_KEYS.items()
            if (pattern := self.pattern_for(name)) is not None
        }


@dataclass(frozen=True)
class CompiledTemplate:
    """Compiled matchers for a template, ``None`` where a field is unusable."""

    vendor: re.Pattern[str] | None = None
    date: re.Pattern[str] | None = None
    total: re.Pattern[str] | None = None
    subtotal: re.Pattern[str] | None = None
    items: re.Pattern[str] | None = None
    errors: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class LineItem:
    """A single purchased product line."""

    product_name: str = ""
    qty: float = 0
    unit: str = ""
    price: float = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "productName": self.product_name,
            "qty": self.qty,
            "unit": self.unit,
            "price": self.price,
        }


@dataclass(frozen=True)
class ExtractedRecord:
    """Structured purchase data extracted from receipt text."""

    raw: str
    vendor_name: str = ""
    purchase_date: str = ""
    subtotal: float | None = None
    total: float | None = None
    items: tuple[LineItem, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        """Render the record in its camelCase wire shape."""
        return {
            "raw": self.raw,
            "vendorName": self.vendor_name,
            "purchaseDate": self.purchase_date,
            "subtotal": self.subtotal,
            "total": self.total,
            "items": [item.to_dict() for item in self.items],
        }
