"""Validator for screenshot settings stored in JSON documents."""

import json
import logging
import math
import re
from typing import Any, Iterable, Optional

from .base import BaseValidator, ValidationContext
from .quality import MAX_QUALITY, MIN_QUALITY, quality_message
from ..core.findings import Finding, FindingSeverity, Range, range_for_span
from ..core.types import FileType

logger = logging.getLogger(__name__)

CONFIG_KEYS = ("format", "quality", "enablePIIMasking", "savePath")


def _key_range(text: str, key: str) -> Range:
    """Range of the first ``"key": value`` member, or of the key alone."""
    match = re.search(rf'"{re.escape(key)}"\s*:\s*("[^"]*"|[^,}}\s]+)', text)
    if match is None:
        match = re.search(rf'"{re.escape(key)}"', text)
    if match is None:
        return Range.on_line(0, 0, 0)
    return range_for_span(text, match.start(), match.end())


def _as_number(value: Any) -> Optional[float]:
    """Numeric reading of a JSON value: null and booleans coerce, numeric strings parse.

    Returns None for values with no numeric reading.
    """
    if value is None:
        return 0.0
    if isinstance(value, (bool, int, float)):
        return float(value)
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            return 0.0
        try:
            number = float(stripped)
        except ValueError:
            return None
        return None if math.isnan(number) else number
    return None


class JsonConfigValidator(BaseValidator):
    """Checks ``format`` and ``quality`` members of a JSON config object."""

    name = "json_config"

    def applies_to(self, file_type: FileType) -> bool:
        return file_type.supports_json_validation

    def run(self, ctx: ValidationContext) -> Iterable[Finding]:
        config = self._parse(ctx.text)
        # Empty strings, zero, false and null members count as unset
        if config is None or not any(config.get(key) for key in CONFIG_KEYS):
            return

        value = config.get("format")
        if value:
            valid = ctx.valid_formats
            if value not in valid:
                yield Finding(
                    severity=FindingSeverity.WARNING,
                    range=_key_range(ctx.text, "format"),
                    message=f"Invalid format value '{value}'. Valid formats are: {', '.join(valid)}",
                    code="invalid-format",
                )

        if "quality" in config:
            value = config["quality"]
            number = _as_number(value)
            if number is None or not MIN_QUALITY <= number <= MAX_QUALITY:
                yield Finding(
                    severity=FindingSeverity.ERROR,
                    range=_key_range(ctx.text, "quality"),
                    message=quality_message(value),
                    code="quality-out-of-range",
                )

    @staticmethod
    def _parse(text: str) -> Optional[dict]:
        try:
            parsed: Any = json.loads(text)
        except ValueError:
            logger.debug("Skipping JSON validation: document is not valid JSON")
            return None
        return parsed if isinstance(parsed, dict) else None
