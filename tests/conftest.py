"""Shared test fixtures for the purchase OCR test suite."""

from pathlib import Path

import pytest

ACME_TEXT = (
    "Acme Store\n"
    "Date: 2024-01-15\n"
    "Item A 2 pcs 50.00\n"
    "Item B 1 pcs 30.00\n"
    "Total: ₹130.00"
)

ACME_TEMPLATE = {
    "vendorRegex": "^(.+)$",
    "dateRegex": r"Date: (\S+)",
    "totalRegex": r"Total:\s*[₹]?([0-9,\.]+)",
    "itemsRegex": r"(\w+ \w)\s+(\d+)\s+(\w+)\s+([0-9\.]+)",
}


@pytest.fixture
def acme_text() -> str:
    """Receipt text matching the Acme template."""
    return ACME_TEXT


@pytest.fixture
def acme_template() -> dict[str, str]:
    """Wire-format Acme template."""
    return dict(ACME_TEMPLATE)


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def config_dir(project_root: Path) -> Path:
    """Return the configs directory path."""
    return project_root / "configs"
