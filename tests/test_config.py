"""Tests for configuration loading and validation."""

from pathlib import Path

import pytest
import yaml

from purchase_ocr.utils.config import (
    AppConfig,
    AuthConfig,
    ExtractionConfig,
    OCRConfig,
    ServerConfig,
    StorageConfig,
    load_config,
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("DISABLE_AUTH", raising=False)
    monkeypatch.delenv("PORT", raising=False)


class TestSectionDefaults:
    """Tests for the per-section defaults."""

    def test_server(self) -> None:
        cfg = ServerConfig()
        assert cfg.host == "0.0.0.0"
        assert cfg.port == 8080

    def test_auth(self) -> None:
        cfg = AuthConfig()
        assert cfg.disable_auth is False
        assert cfg.jwt_algorithm == "HS256"
        assert cfg.audience is None

    def test_storage(self) -> None:
        cfg = StorageConfig()
        assert cfg.database_path == "data/purchases.db"
        assert cfg.upload_dir == "data/uploads"
        assert cfg.url_ttl_seconds > 0

    def test_ocr(self) -> None:
        cfg = OCRConfig()
        assert cfg.default_lang == "eng"
        assert cfg.psm == 3
        assert cfg.tesseract_cmd is None

    def test_extraction(self) -> None:
        cfg = ExtractionConfig()
        assert cfg.timeout_seconds == 5.0
        assert cfg.templates_path == "configs/templates.yaml"


class TestAppConfig:
    """Tests for the top-level AppConfig."""

    def test_defaults(self) -> None:
        cfg = AppConfig()
        assert isinstance(cfg.server, ServerConfig)
        assert isinstance(cfg.storage, StorageConfig)
        assert cfg.log_level == "INFO"

    def test_nested_override(self) -> None:
        cfg = AppConfig(auth=AuthConfig(disable_auth=True), log_level="DEBUG")
        assert cfg.auth.disable_auth is True
        assert cfg.log_level == "DEBUG"


class TestLoadConfig:
    """Tests for the load_config function."""

    def test_load_shipped_config(self, config_dir: Path) -> None:
        cfg = load_config(config_dir / "config.yaml")
        assert cfg.ocr.default_lang == "eng"
        assert cfg.extraction.templates_path == "configs/templates.yaml"

    def test_load_missing_file_returns_defaults(self) -> None:
        cfg = load_config(Path("/nonexistent/path/config.yaml"))
        assert cfg == AppConfig()

    def test_load_custom_yaml(self, tmp_path: Path) -> None:
        config_file = tmp_path / "config.yaml"
        with open(config_file, "w") as f:
            yaml.dump(
                {
                    "server": {"port": 9000},
                    "extraction": {"timeout_seconds": 1.5},
                    "log_level": "DEBUG",
                },
                f,
            )

        cfg = load_config(config_file)
        assert cfg.server.port == 9000
        assert cfg.extraction.timeout_seconds == 1.5
        assert cfg.log_level == "DEBUG"

    def test_load_empty_yaml(self, tmp_path: Path) -> None:
        config_file = tmp_path / "empty.yaml"
        config_file.write_text("")
        assert isinstance(load_config(config_file), AppConfig)

    def test_disable_auth_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DISABLE_AUTH", "true")
        assert load_config(Path("/nonexistent.yaml")).auth.disable_auth is True

    def test_disable_auth_env_other_value(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DISABLE_AUTH", "yes")
        assert load_config(Path("/nonexistent.yaml")).auth.disable_auth is False

    def test_port_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PORT", "5050")
        assert load_config(Path("/nonexistent.yaml")).server.port == 5050

    def test_bad_port_env_ignored(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PORT", "http")
        assert load_config(Path("/nonexistent.yaml")).server.port == 8080
