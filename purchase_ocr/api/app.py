"""FastAPI application for the purchase OCR service.

Provides the template test endpoint backed by the extraction engine, the
product/purchase/template collections, OCR uploads, signed file downloads,
and a health check.
"""

from pathlib import Path
from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, FastAPI, File, Query, Request, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse

from purchase_ocr.extraction.models import Template
from purchase_ocr.extraction.runner import ExtractionFailed, ExtractionRunner, ExtractionTimeout
from purchase_ocr.extraction.template_library import TemplateLibrary
from purchase_ocr.ocr.receipt_summary import summarize
from purchase_ocr.ocr.tesseract_engine import OCRError, TesseractEngine
from purchase_ocr.storage.blob_store import BlobStoreError, LocalBlobStore
from purchase_ocr.storage.document_store import DocumentStore, DocumentStoreError
from purchase_ocr.utils.config import AppConfig
from purchase_ocr.utils.logger import get_logger

from .deps import (
    ApiError,
    get_blob_store,
    get_config,
    get_document_store,
    get_extraction_runner,
    get_ocr_engine,
    require_identity,
)
from .schemas import (
    HealthResponse,
    OCRResponse,
    ParsedRecordResponse,
    PurchaseTemplateCreate,
    TemplateTestRequest,
    TemplateTestResponse,
)

logger = get_logger(__name__)

PRODUCTS = "products"
PURCHASES = "purchases"
PURCHASE_TEMPLATES = "purchaseTemplates"

app = FastAPI(
    title="Purchase OCR API",
    description="Extract purchase records from receipt text with regex templates",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    logger.info("%s %s", request.method, request.url.path)
    return await call_next(request)


@app.exception_handler(ApiError)
async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    content: dict[str, Any] = {"error": exc.error}
    if exc.details is not None:
        content["details"] = exc.details
    return JSONResponse(status_code=exc.status_code, content=content)


@app.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Return service liveness."""
    return HealthResponse(ok=True)


@app.get("/files/{name:path}")
async def download_file(
    name: str,
    expires: int,
    signature: str,
    blobs: Annotated[LocalBlobStore, Depends(get_blob_store)],
) -> FileResponse:
    """Serve an uploaded file behind a signed URL."""
    try:
        path = blobs.resolve(name, expires, signature)
    except BlobStoreError as exc:
        raise ApiError(403, "invalid file url", str(exc)) from exc
    return FileResponse(path)


api = APIRouter(prefix="/api", dependencies=[Depends(require_identity)])


@api.get("/products")
async def list_products(
    store: Annotated[DocumentStore, Depends(get_document_store)],
) -> list[dict[str, Any]]:
    """List the product catalogue."""
    return _list_collection(store, PRODUCTS)


@api.post("/purchases", status_code=201)
async def create_purchase(
    store: Annotated[DocumentStore, Depends(get_document_store)],
    payload: Annotated[dict[str, Any] | None, Body()] = None,
) -> dict[str, Any]:
    """Record a purchase; the stored document gets a ``createdAt`` stamp."""
    try:
        return store.create(PURCHASES, payload or {})
    except DocumentStoreError as exc:
        logger.error("purchases:create failed: %s", exc)
        raise ApiError(500, "failed") from exc


@api.get("/admin/purchase-templates")
async def list_purchase_templates(
    store: Annotated[DocumentStore, Depends(get_document_store)],
    config: Annotated[AppConfig, Depends(get_config)],
    include_builtin: Annotated[bool, Query()] = False,
) -> list[dict[str, Any]]:
    """List stored purchase templates, optionally with the YAML library."""
    templates = _list_collection(store, PURCHASE_TEMPLATES)
    if include_builtin:
        library = TemplateLibrary(Path(config.extraction.templates_path))
        templates.extend(
            {
                "id": f"builtin:{name}",
                "name": name,
                "description": library.describe(name),
                **library.get(name).to_dict(),
            }
            for name in library.names
        )
    return templates


@api.post("/admin/purchase-templates", status_code=201)
async def create_purchase_template(
    body: PurchaseTemplateCreate,
    store: Annotated[DocumentStore, Depends(get_document_store)],
) -> dict[str, Any]:
    """Store a named purchase template."""
    try:
        return store.create(PURCHASE_TEMPLATES, body.model_dump(exclude_none=True))
    except DocumentStoreError as exc:
        logger.error("purchase-templates:create failed: %s", exc)
        raise ApiError(500, "failed") from exc


@api.post(
    "/admin/purchase-templates/test",
    response_model=TemplateTestResponse,
    response_model_exclude_unset=True,
)
async def test_purchase_template(
    body: TemplateTestRequest,
    runner: Annotated[ExtractionRunner, Depends(get_extraction_runner)],
    diagnostics: Annotated[bool, Query()] = False,
) -> TemplateTestResponse:
    """Run a template against sample text and return the parsed record.

    Broken or non-matching patterns leave their fields at defaults; pass
    ``diagnostics=true`` to also get each invalid pattern's compile error.
    Extraction runs in a worker process that is terminated after
    ``extraction.timeout_seconds``.
    """
    text = body.text_value()
    if not text:
        raise ApiError(400, "text required to test template")

    template = Template.from_mapping(body.template_mapping())
    try:
        record, errors = await run_in_threadpool(runner.run, text, template)
    except ExtractionTimeout as exc:
        logger.warning("Template test stopped: %s", exc)
        raise ApiError(504, "template test timed out") from exc
    except ExtractionFailed as exc:
        logger.error("template test failed: %s", exc)
        raise ApiError(500, "template test failed", str(exc)) from exc

    parsed = ParsedRecordResponse.from_record(record)
    if diagnostics:
        return TemplateTestResponse(parsed=parsed, diagnostics=errors)
    return TemplateTestResponse(parsed=parsed)


@api.post("/admin/purchases/ocr", response_model=OCRResponse)
async def ocr_purchase(
    engine: Annotated[TesseractEngine, Depends(get_ocr_engine)],
    blobs: Annotated[LocalBlobStore, Depends(get_blob_store)],
    file: Annotated[UploadFile | None, File()] = None,
) -> OCRResponse:
    """OCR an uploaded receipt image and summarise the recognised text.

    The upload is also kept in blob storage; if that fails the response
    still carries the OCR result with ``url`` set to null.
    """
    if file is None:
        raise ApiError(400, "file required")
    content = await file.read()
    if not content:
        raise ApiError(400, "file required")

    try:
        raw = await run_in_threadpool(engine.image_to_text, content)
    except OCRError as exc:
        logger.error("ocr failed: %s", exc)
        raise ApiError(500, "ocr failed", str(exc)) from exc

    url: str | None = None
    try:
        url = blobs.save(content, file.filename)
    except BlobStoreError as exc:
        logger.warning("Failed to store OCR upload: %s", exc)

    parsed = ParsedRecordResponse.from_record(summarize(raw))
    return OCRResponse(parsed=parsed, raw=raw, url=url)


def _list_collection(store: DocumentStore, collection: str) -> list[dict[str, Any]]:
    try:
        return store.list(collection)
    except DocumentStoreError as exc:
        logger.error("%s:list failed: %s", collection, exc)
        raise ApiError(500, "failed") from exc


app.include_router(api)
