"""Quality range validator."""

import re
from typing import Iterable

from .base import BaseValidator, ValidationContext
from ..core.findings import Finding, FindingSeverity

QUALITY_PATTERN = re.compile(r"quality\s*:\s*(-?\d+)")

MIN_QUALITY = 0
MAX_QUALITY = 100


def quality_message(value: object) -> str:
    return (
        f"Quality value {value} is out of range. "
        f"Quality must be between {MIN_QUALITY} and {MAX_QUALITY}."
    )


class QualityRangeValidator(BaseValidator):
    """Flags integer ``quality`` literals outside 0-100 inclusive."""

    name = "quality"

    def run(self, ctx: ValidationContext) -> Iterable[Finding]:
        for match in QUALITY_PATTERN.finditer(ctx.text):
            value = int(match.group(1))
            if MIN_QUALITY <= value <= MAX_QUALITY:
                continue
            yield self.finding_for_match(
                ctx,
                match,
                FindingSeverity.ERROR,
                quality_message(value),
                "quality-out-of-range",
            )
