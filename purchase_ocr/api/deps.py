"""FastAPI dependencies wiring configuration and collaborators.

Each collaborator is built once from the loaded configuration; tests swap
them out through ``app.dependency_overrides``.
"""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Header

from purchase_ocr.auth.token_verifier import (
    Identity,
    TokenVerificationError,
    TokenVerifier,
    extract_bearer_token,
)
from purchase_ocr.extraction.runner import ExtractionRunner
from purchase_ocr.ocr.tesseract_engine import TesseractEngine
from purchase_ocr.storage.blob_store import LocalBlobStore
from purchase_ocr.storage.document_store import DocumentStore
from purchase_ocr.utils.config import AppConfig, load_config
from purchase_ocr.utils.logger import get_logger

logger = get_logger(__name__)


class ApiError(Exception):
    """An error answered with ``{"error": ..., "details": ...}``."""

    def __init__(self, status_code: int, error: str, details: str | None = None) -> None:
        super().__init__(error)
        self.status_code = status_code
        self.error = error
        self.details = details


@lru_cache
def get_config() -> AppConfig:
    return load_config()


def get_document_store(config: Annotated[AppConfig, Depends(get_config)]) -> DocumentStore:
    return _document_store(config.storage.database_path)


@lru_cache
def _document_store(database_path: str) -> DocumentStore:
    return DocumentStore(database_path)


def get_blob_store(config: Annotated[AppConfig, Depends(get_config)]) -> LocalBlobStore:
    return LocalBlobStore(config.storage)


def get_ocr_engine(config: Annotated[AppConfig, Depends(get_config)]) -> TesseractEngine:
    return TesseractEngine.from_config(config.ocr)


def get_extraction_runner(
    config: Annotated[AppConfig, Depends(get_config)],
) -> ExtractionRunner:
    return ExtractionRunner(config.extraction.timeout_seconds)


def get_token_verifier(config: Annotated[AppConfig, Depends(get_config)]) -> TokenVerifier:
    return TokenVerifier(config.auth)


def require_identity(
    config: Annotated[AppConfig, Depends(get_config)],
    verifier: Annotated[TokenVerifier, Depends(get_token_verifier)],
    authorization: Annotated[str | None, Header()] = None,
) -> Identity | None:
    """Verify the caller's bearer token unless auth is disabled.

    Raises:
        ApiError: 401 for a missing or non-Bearer header, 403 for a token
            that fails verification.
    """
    if config.auth.disable_auth:
        logger.info("Auth disabled: skipping token verification (development only)")
        return None

    try:
        token = extract_bearer_token(authorization)
    except TokenVerificationError as exc:
        raise ApiError(401, str(exc)) from exc

    try:
        return verifier.verify(token)
    except TokenVerificationError as exc:
        logger.warning("Invalid or expired token: %s", exc)
        raise ApiError(403, "invalid token") from exc
