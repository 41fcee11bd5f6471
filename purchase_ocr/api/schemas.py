"""Pydantic request/response schemas for the FastAPI endpoints."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from purchase_ocr.extraction.models import ExtractedRecord


class TemplatePatterns(BaseModel):
    """Regex patterns of a purchase template, in wire form."""

    model_config = ConfigDict(extra="allow")

    vendorRegex: str | None = None
    dateRegex: str | None = None
    totalRegex: str | None = None
    subtotalRegex: str | None = None
    itemsRegex: str | None = None


class TemplateTestRequest(BaseModel):
    """Sample text plus the template to try against it.

    Clients may also send the template keys at the top level instead of
    nesting them under ``template``.
    """

    model_config = ConfigDict(extra="allow")

    text: Any = None
    template: dict[str, Any] | None = None

    def template_mapping(self) -> dict[str, Any]:
        if self.template:
            return self.template
        return dict(self.model_extra or {})

    def text_value(self) -> str:
        return str(self.text) if self.text else ""


class LineItemResponse(BaseModel):
    """One parsed line item."""

    productName: str
    qty: float
    unit: str
    price: float


class ParsedRecordResponse(BaseModel):
    """Structured purchase record."""

    raw: str
    vendorName: str
    purchaseDate: str
    subtotal: float | None
    total: float | None
    items: list[LineItemResponse]

    @classmethod
    def from_record(cls, record: ExtractedRecord) -> "ParsedRecordResponse":
        return cls(**record.to_dict())


class TemplateTestResponse(BaseModel):
    """Response of the template test endpoint.

    ``diagnostics`` maps field names to compile errors and is only sent
    when requested.
    """

    parsed: ParsedRecordResponse
    diagnostics: dict[str, str] | None = None


class OCRResponse(BaseModel):
    """Response of the OCR upload endpoint."""

    parsed: ParsedRecordResponse
    raw: str
    url: str | None = None


class PurchaseTemplateCreate(TemplatePatterns):
    """Body for storing a named purchase template."""

    name: str = Field(min_length=1)
    description: str = ""


class ErrorResponse(BaseModel):
    """Error body used by every failing route."""

    error: str
    details: str | None = None


class HealthResponse(BaseModel):
    """Response schema for the health check endpoint."""

    ok: bool
