"""Base validator interface and context."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Protocol, runtime_checkable

from ..core.findings import Finding, FindingSeverity, Range, range_for_span
from ..core.types import FileType, Pattern

DEFAULT_VALID_FORMATS = ("png", "jpeg", "webp")


@dataclass
class ValidationContext:
    """Everything a validator may look at for one document snapshot."""
    uri: str
    version: int
    text: str
    file_type: FileType = FileType.JAVASCRIPT
    patterns: List[Pattern] = field(default_factory=list)
    config: Dict[str, Any] = field(default_factory=dict)

    @property
    def lines(self) -> List[str]:
        return self.text.split("\n")

    @property
    def valid_formats(self) -> List[str]:
        return list(self.config.get("valid_formats", DEFAULT_VALID_FORMATS))


@runtime_checkable
class Validator(Protocol):
    """Protocol for all validators in the pipeline."""

    name: str

    def applies_to(self, file_type: FileType) -> bool:
        ...

    def run(self, ctx: ValidationContext) -> Iterable[Finding]:
        """Run the validator and yield findings."""
        ...


class BaseValidator:
    """Shared helpers for regex-driven validators over source text."""

    name = "base"

    def applies_to(self, file_type: FileType) -> bool:
        return file_type.supports_full_features

    def run(self, ctx: ValidationContext) -> Iterable[Finding]:
        raise NotImplementedError

    @staticmethod
    def finding_for_match(
        ctx: ValidationContext,
        match: "re.Match[str]",
        severity: FindingSeverity,
        message: str,
        code: str,
    ) -> Finding:
        """Build a finding whose range covers a regex match over the whole text."""
        return Finding(
            severity=severity,
            range=range_for_span(ctx.text, match.start(), match.end()),
            message=message,
            code=code,
        )

    @staticmethod
    def finding_on_line(
        line: int,
        start: int,
        end: int,
        severity: FindingSeverity,
        message: str,
        code: str,
    ) -> Finding:
        return Finding(
            severity=severity,
            range=Range.on_line(line, start, end),
            message=message,
            code=code,
        )

