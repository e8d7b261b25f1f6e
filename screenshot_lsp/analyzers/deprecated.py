"""Deprecated screenshot API validator."""

import re
from typing import Dict, Iterable, List, Tuple

from .base import BaseValidator, ValidationContext
from ..core.findings import Finding, FindingSeverity

# deprecated name -> replacement
DEPRECATED_APIS: Dict[str, str] = {
    "takeScreenshot": "captureFullScreen",
    "getScreenshot": "captureFullScreen",
    "screenshotWindow": "captureWindow",
    "screenshotRegion": "captureRegion",
    "getDisplayList": "listDisplays",
    "getWindowList": "listWindows",
}


def deprecation_message(name: str, replacement: str) -> str:
    return (
        f"{name} is deprecated. Use {replacement} instead.\n\n"
        f"Migration: Replace with {replacement}()"
    )


class DeprecatedApiValidator(BaseValidator):
    """Emits an informational finding for every deprecated API name."""

    name = "deprecated"

    def __init__(self, table: Dict[str, str] = DEPRECATED_APIS):
        self.table = dict(table)
        self._patterns = [
            (name, replacement, re.compile(rf"\b{re.escape(name)}\b"))
            for name, replacement in self.table.items()
        ]

    def run(self, ctx: ValidationContext) -> Iterable[Finding]:
        hits: List[Tuple[int, "re.Match[str]", str, str]] = []
        for name, replacement, regex in self._patterns:
            for match in regex.finditer(ctx.text):
                hits.append((match.start(), match, name, replacement))
        hits.sort(key=lambda hit: hit[0])

        for _, match, name, replacement in hits:
            yield self.finding_for_match(
                ctx,
                match,
                FindingSeverity.INFO,
                deprecation_message(name, replacement),
                "deprecated-api",
            )
