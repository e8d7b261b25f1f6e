"""Image format value validator."""

import re
from typing import Iterable

from .base import BaseValidator, ValidationContext
from ..core.findings import Finding, FindingSeverity

FORMAT_PATTERN = re.compile(r"""format\s*:\s*['"]([^'"]+)['"]""")


class FormatValidator(BaseValidator):
    """Flags ``format: "<value>"`` literals outside the supported formats."""

    name = "format"

    def run(self, ctx: ValidationContext) -> Iterable[Finding]:
        valid = ctx.valid_formats
        for match in FORMAT_PATTERN.finditer(ctx.text):
            value = match.group(1)
            if value in valid:
                continue
            yield self.finding_for_match(
                ctx,
                match,
                FindingSeverity.WARNING,
                f"Invalid format value '{value}'. Valid formats are: {', '.join(valid)}",
                "invalid-format",
            )
