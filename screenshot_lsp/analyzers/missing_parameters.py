"""Detects capture calls made without any configuration object."""

import re
from typing import Iterable, Tuple

from .base import BaseValidator, ValidationContext
from ..core.findings import Finding, FindingSeverity

# (empty call regex, message) in reporting order for a line
EMPTY_CALLS: Tuple[Tuple["re.Pattern", str], ...] = (
    (
        re.compile(r"captureFullScreen\s*\(\s*\)"),
        "captureFullScreen requires a configuration object with at least a 'format' parameter",
    ),
    (
        re.compile(r"captureWindow\s*\(\s*\)"),
        "captureWindow requires a configuration object with 'format' and either "
        "'windowId' or 'windowTitle'",
    ),
    (
        re.compile(r"captureRegion\s*\(\s*\)"),
        "captureRegion requires a configuration object with 'x', 'y', 'width', "
        "'height', and 'format' parameters",
    ),
)


class MissingParametersValidator(BaseValidator):
    """Reports ``captureFullScreen()``-style calls with zero arguments."""

    name = "missing_parameters"

    def run(self, ctx: ValidationContext) -> Iterable[Finding]:
        for line_number, line in enumerate(ctx.lines):
            for regex, message in EMPTY_CALLS:
                match = regex.search(line)
                if match is None:
                    continue
                yield self.finding_on_line(
                    line_number,
                    match.start(),
                    match.end(),
                    FindingSeverity.ERROR,
                    message,
                    "missing-parameters",
                )
