"""Configuration management for the purchase OCR service.

Loads and validates YAML configuration with defaults for the HTTP server,
token verification, storage, OCR, and template extraction. A couple of
environment variables override the file for container deployments.
"""

import logging
import os
from pathlib import Path

import yaml
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class ServerConfig(BaseModel):
    """HTTP server binding."""

    host: str = "0.0.0.0"
    port: int = 8080


class AuthConfig(BaseModel):
    """Bearer token verification for ``/api`` routes."""

    disable_auth: bool = False
    jwt_secret: str = "change-me"
    jwt_algorithm: str = "HS256"
    audience: str | None = None


class StorageConfig(BaseModel):
    """Document and blob storage locations."""

    database_path: str = "data/purchases.db"
    upload_dir: str = "data/uploads"
    public_base_url: str = "http://localhost:8080/files"
    signing_secret: str = "change-me"
    url_ttl_seconds: int = 7 * 24 * 3600


class OCRConfig(BaseModel):
    """Configuration for the Tesseract OCR collaborator."""

    tesseract_cmd: str | None = None
    default_lang: str = "eng"
    psm: int = 3


class ExtractionConfig(BaseModel):
    """Configuration for template extraction."""

    timeout_seconds: float = 5.0
    templates_path: str = "configs/templates.yaml"


class AppConfig(BaseModel):
    """Top-level application configuration."""

    server: ServerConfig = Field(default_factory=ServerConfig)
    auth: AuthConfig = Field(default_factory=AuthConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    ocr: OCRConfig = Field(default_factory=OCRConfig)
    extraction: ExtractionConfig = Field(default_factory=ExtractionConfig)
    log_level: str = "INFO"


def _apply_env_overrides(config: AppConfig) -> AppConfig:
    """Apply ``DISABLE_AUTH`` and ``PORT`` from the environment."""
    if os.environ.get("DISABLE_AUTH") == "true":
        config.auth.disable_auth = True
    port = os.environ.get("PORT")
    if port:
        try:
            config.server.port = int(port)
        except ValueError:
            logger.warning("Ignoring non-numeric PORT=%r", port)
    return config


def load_config(path: Path | None = None) -> AppConfig:
    """Load configuration from a YAML file.

    Args:
        path: Path to the YAML configuration file.
            Defaults to configs/config.yaml.

    Returns:
        Validated application configuration.
    """
    if path is None:
        path = Path("configs/config.yaml")

    if path.exists():
        logger.info("Loading configuration from %s", path)
        with open(path) as f:
            raw = yaml.safe_load(f) or {}
        return _apply_env_overrides(AppConfig(**raw))

    logger.info("No config file found at %s, using defaults", path)
    return _apply_env_overrides(AppConfig())
