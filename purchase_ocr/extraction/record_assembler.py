"""Assemble a complete extracted record from text and a template.

This is the engine entry point: a pure function of ``(text, template)``
with no shared state, safe to call concurrently.
"""

from collections.abc import Mapping
from typing import Any

from purchase_ocr.extraction.field_extractor import extract_scalar
from purchase_ocr.extraction.items_extractor import extract_items
from purchase_ocr.extraction.models import CompiledTemplate, ExtractedRecord, Template
from purchase_ocr.extraction.template_compiler import compile_template
from purchase_ocr.utils.logger import get_logger

logger = get_logger(__name__)


def _coerce_template(template: Template | Mapping[str, Any] | None) -> Template:
    if isinstance(template, Template):
        return template
    return Template.from_mapping(template)


def _build_record(text: str, compiled: CompiledTemplate) -> ExtractedRecord:
    record = ExtractedRecord(
        raw=text,
        vendor_name=extract_scalar(text, compiled.vendor, "vendor"),
        purchase_date=extract_scalar(text, compiled.date, "date"),
        subtotal=extract_scalar(text, compiled.subtotal, "subtotal"),
        total=extract_scalar(text, compiled.total, "total"),
        items=tuple(extract_items(text, compiled.items)),
    )
    logger.info(
        "Extracted record: vendor=%r total=%s items=%d",
        record.vendor_name,
        record.total,
        len(record.items),
    )
    return record


def assemble(
    text: str, template: Template | Mapping[str, Any] | None
) -> ExtractedRecord:
    """Extract a purchase record from text using a template.

    Args:
        text: Raw OCR or plain text.
        template: Template object or wire-format mapping of patterns.

    Returns:
        Fully shaped record; unusable or unmatched fields keep defaults.
    """
    return _build_record(text, compile_template(_coerce_template(template)))


def assemble_with_diagnostics(
    text: str, template: Template | Mapping[str, Any] | None
) -> tuple[ExtractedRecord, dict[str, str]]:
    """Like :func:`assemble`, also returning per-field compile errors.

    Args:
        text: Raw OCR or plain text.
        template: Template object or wire-format mapping of patterns.

    Returns:
        Tuple of (record, errors) where ``errors`` maps field names to the
        regex compile error message for patterns that failed to compile.
    """
    compiled = compile_template(_coerce_template(template))
    return _build_record(text, compiled), dict(compiled.errors)
