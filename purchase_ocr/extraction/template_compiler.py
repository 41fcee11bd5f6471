"""Compile user-supplied template patterns into regex matchers.

Each field compiles on its own; a missing or broken pattern yields ``None``
for that field and never stops the others from compiling.
"""

import re

from purchase_ocr.extraction.models import CompiledTemplate, Template
from purchase_ocr.utils.logger import get_logger

logger = get_logger(__name__)

SCALAR_FLAGS = re.IGNORECASE | re.MULTILINE
ITEMS_FLAGS = re.IGNORECASE | re.MULTILINE

SCALAR_FIELDS = ("vendor", "date", "total", "subtotal")

# Escapes and character classes are consumed whole so that only a real
# ``(?<name>`` group opener is rewritten, never ``\(?<`` or ``[(?<]``.
# Lookbehinds ``(?<=`` / ``(?<!`` are left alone.
_NAMED_GROUP_SCAN = re.compile(
    r"\\.|\[\^?\]?(?:\\.|[^\]\\])*\]|\(\?<(?![=!])", re.DOTALL
)

# Parser failures that are not ``re.error``: huge repeat counts overflow and
# deeply nested groups exhaust the recursion limit.
_COMPILE_ERRORS = (re.error, OverflowError, RecursionError)


def _rewrite_group_opener(match: re.Match[str]) -> str:
    token = match.group(0)
    return "(?P<" if token == "(?<" else token


def translate_named_groups(pattern: str) -> str:
    """Rewrite ``(?<name>...)`` groups into Python's ``(?P<name>...)`` form."""
    return _NAMED_GROUP_SCAN.sub(_rewrite_group_opener, pattern)


def _compile(pattern: str | None, flags: int) -> tuple[re.Pattern[str] | None, str | None]:
    if not pattern:
        return None, None
    try:
        return re.compile(translate_named_groups(pattern), flags), None
    except _COMPILE_ERRORS as exc:
        logger.debug("Ignoring invalid pattern %r: %s", pattern, exc)
        return None, str(exc) or type(exc).__name__


def compile_pattern(pattern: str | None, flags: int = SCALAR_FLAGS) -> re.Pattern[str] | None:
    """Compile a single template pattern.

    Args:
        pattern: Pattern string, possibly empty or ``None``.
        flags: Regex flags for the field.

    Returns:
        Compiled matcher, or ``None`` if the pattern is absent or invalid.
    """
    matcher, _ = _compile(pattern, flags)
    return matcher


def compile_template(template: Template) -> CompiledTemplate:
    """Compile all five fields of a template independently.

    Args:
        template: Template holding the raw pattern strings.

    Returns:
        Compiled template with per-field matchers and any compile errors.
    """
    matchers: dict[str, re.Pattern[str] | None] = {}
    errors: dict[str, str] = {}

    for name in SCALAR_FIELDS:
        matchers[name], error = _compile(template.pattern_for(name), SCALAR_FLAGS)
        if error:
            errors[name] = error

    matchers["items"], error = _compile(template.pattern_for("items"), ITEMS_FLAGS)
    if error:
        errors["items"] = error

    if errors:
        logger.info("Template compiled with invalid fields: %s", ", ".join(errors))
    return CompiledTemplate(**matchers, errors=errors)
