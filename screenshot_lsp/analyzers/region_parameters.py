"""Region capture parameter validator.

Works from the cached patterns rather than rescanning the text: only lines
the matcher classified as region operations are considered.
"""

from typing import Iterable

from .base import BaseValidator, ValidationContext
from ..core.findings import Finding, FindingSeverity
from ..core.types import PatternCategory

# Width/height findings span the whole line, however long it is.
WHOLE_LINE_END = 1000


class RegionParametersValidator(BaseValidator):
    """Reports missing or non-positive region parameters."""

    name = "region_parameters"

    def run(self, ctx: ValidationContext) -> Iterable[Finding]:
        lines = ctx.lines
        for pattern in ctx.patterns:
            if pattern.category is not PatternCategory.REGION:
                continue

            missing = pattern.missing_parameters()
            if missing:
                yield self.finding_on_line(
                    pattern.line,
                    pattern.column,
                    pattern.end_column,
                    FindingSeverity.ERROR,
                    f"Region capture is missing required parameters: {', '.join(missing)}",
                    "missing-region-parameters",
                )

            params = pattern.parameters or {}
            line_end = max(WHOLE_LINE_END, len(lines[pattern.line])) if pattern.line < len(lines) else WHOLE_LINE_END
            for name in ("width", "height"):
                value = params.get(name)
                if value is not None and value <= 0:
                    yield self.finding_on_line(
                        pattern.line,
                        0,
                        line_end,
                        FindingSeverity.ERROR,
                        f"Region {name} must be positive, got {value}",
                        f"invalid-region-{name}",
                    )
