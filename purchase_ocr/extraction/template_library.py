"""Named vendor templates loaded from a YAML file.

The file maps template names to pattern definitions using the same keys as
the API (``vendorRegex``, ``dateRegex``, ``totalRegex``, ``subtotalRegex``,
``itemsRegex``) plus an optional ``description``.
"""

from pathlib import Path

import yaml

from purchase_ocr.extraction.models import Template
from purchase_ocr.utils.logger import get_logger

logger = get_logger(__name__)


class TemplateLibrary:
    """Lookup of receipt templates by name.

    Args:
        templates_path: Path to the YAML file defining templates.
    """

    def __init__(self, templates_path: Path = Path("configs/templates.yaml")) -> None:
        self.definitions = self._load_definitions(templates_path)

    def _load_definitions(self, path: Path) -> dict:
        """Load template definitions from a YAML file.

        Args:
            path: Path to the templates YAML file.

        Returns:
            Dictionary of template definitions keyed by name.
        """
        if path.exists():
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
                return data or {}
        logger.debug("No templates file at %s, using empty library", path)
        return {}

    @property
    def names(self) -> list[str]:
        return sorted(self.definitions)

    def get(self, name: str) -> Template:
        """Return the named template.

        Args:
            name: Template name as it appears in the YAML file.

        Returns:
            The parsed template.

        Raises:
            KeyError: If no template has that name.
        """
        if name not in self.definitions:
            raise KeyError(f"Unknown template: {name}")
        return Template.from_mapping(self.definitions[name])

    def describe(self, name: str) -> str:
        return (self.definitions.get(name) or {}).get("description", "")


def load_template_file(path: Path) -> Template:
    """Load a single template from a YAML file of pattern keys."""
    with open(path, encoding="utf-8") as f:
        return Template.from_mapping(yaml.safe_load(f) or {})
