"""Tests for templates loaded from YAML and the template model."""

from pathlib import Path

import pytest
import yaml

from purchase_ocr.extraction.models import Template
from purchase_ocr.extraction.record_assembler import assemble
from purchase_ocr.extraction.template_library import TemplateLibrary, load_template_file


class TestTemplateFromMapping:
    """Tests for Template.from_mapping."""

    def test_wire_keys(self, acme_template: dict[str, str]) -> None:
        template = Template.from_mapping(acme_template)
        assert template.vendor_pattern == "^(.+)$"
        assert template.subtotal_pattern is None

    def test_attribute_names(self) -> None:
        template = Template.from_mapping({"total_pattern": r"Total (\d+)"})
        assert template.total_pattern == r"Total (\d+)"

    def test_unknown_keys_ignored(self) -> None:
        assert Template.from_mapping({"text": "x", "foo": "bar"}) == Template()

    def test_round_trip_wire_keys(self, acme_template: dict[str, str]) -> None:
        assert Template.from_mapping(acme_template).to_dict() == acme_template


class TestTemplateLibrary:
    """Tests for the YAML template library."""

    def test_missing_file(self) -> None:
        library = TemplateLibrary(templates_path=Path("/nonexistent/templates.yaml"))
        assert library.names == []

    def test_empty_file(self, tmp_path: Path) -> None:
        empty_file = tmp_path / "empty.yaml"
        empty_file.write_text("")
        assert TemplateLibrary(templates_path=empty_file).definitions == {}

    def test_get_and_describe(self, tmp_path: Path) -> None:
        tpl_file = tmp_path / "templates.yaml"
        with open(tpl_file, "w") as f:
            yaml.dump(
                {"corner": {"description": "Corner shop", "totalRegex": r"TOTAL (\d+)"}},
                f,
            )

        library = TemplateLibrary(templates_path=tpl_file)
        assert library.names == ["corner"]
        assert library.describe("corner") == "Corner shop"
        assert library.get("corner") == Template(total_pattern=r"TOTAL (\d+)")

    def test_unknown_name(self, tmp_path: Path) -> None:
        library = TemplateLibrary(templates_path=tmp_path / "none.yaml")
        with pytest.raises(KeyError):
            library.get("missing")

    def test_shipped_templates(self, config_dir: Path, acme_text: str) -> None:
        library = TemplateLibrary(config_dir / "templates.yaml")
        assert {"acme", "fresh_mart"} <= set(library.names)

        record = assemble(acme_text, library.get("acme"))
        assert record.vendor_name == "Acme Store"
        assert record.total == 130.0
        assert len(record.items) == 2

    def test_shipped_named_group_template(self, config_dir: Path) -> None:
        text = (
            "Fresh Mart Koramangala\n"
            "12/03/2024 18:22\n"
            "Basmati Rice 5kg Rs. 1,250.00\n"
            "Tomato 2 kg Rs 80.00\n"
            "Sub Total: Rs. 1,330.00\n"
            "Grand Total: Rs. 1,396.50\n"
        )
        record = assemble(text, TemplateLibrary(config_dir / "templates.yaml").get("fresh_mart"))

        assert record.vendor_name == "Fresh Mart Koramangala"
        assert record.purchase_date == "12/03/2024"
        assert record.subtotal == 1330.0
        assert record.total == 1396.5
        assert [(i.product_name, i.qty, i.unit, i.price) for i in record.items] == [
            ("Basmati Rice", 5.0, "kg", 1250.0),
            ("Tomato", 2.0, "kg", 80.0),
        ]


def test_load_template_file(tmp_path: Path) -> None:
    path = tmp_path / "one.yaml"
    path.write_text("vendorRegex: '^(.+)$'\ndateRegex: '\\d{4}'\n")
    assert load_template_file(path) == Template(vendor_pattern="^(.+)$", date_pattern=r"\d{4}")
