"""Diagnostic finding data structures."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Dict, Iterator, List, Literal, TypedDict

SOURCE = "screenshot-lsp"


class FindingSeverity(IntEnum):
    """Finding severity levels, numbered as in the Language Server Protocol."""
    ERROR = 1
    WARNING = 2
    INFO = 3


@dataclass(frozen=True)
class Position:
    """Zero-based line and character offset."""
    line: int
    character: int

    def to_dict(self) -> Dict[str, int]:
        return {"line": self.line, "character": self.character}


@dataclass(frozen=True)
class Range:
    """A span of document text."""
    start: Position
    end: Position

    @classmethod
    def on_line(cls, line: int, start: int, end: int) -> "Range":
        return cls(Position(line, start), Position(line, end))

    def to_dict(self) -> Dict[str, Any]:
        return {"start": self.start.to_dict(), "end": self.end.to_dict()}


def position_at(text: str, offset: int) -> Position:
    """Convert an absolute character offset into a line/character position."""
    offset = max(0, min(offset, len(text)))
    line = text.count("\n", 0, offset)
    line_start = text.rfind("\n", 0, offset) + 1
    return Position(line, offset - line_start)


def range_for_span(text: str, start: int, end: int) -> Range:
    """Range covering ``text[start:end]``."""
    return Range(position_at(text, start), position_at(text, end))


class FindingDict(TypedDict):
    """Type definition for finding dictionary representation."""
    severity: str
    range: Dict[str, Any]
    message: str
    code: str
    source: str


@dataclass(frozen=True)
class Finding:
    """One diagnostic produced by the validation pipeline."""

    severity: FindingSeverity
    range: Range
    message: str
    code: str
    source: str = SOURCE

    @property
    def line(self) -> int:
        return self.range.start.line

    def to_dict(self) -> FindingDict:
        """Convert to dictionary for JSON serialization."""
        return {
            "severity": self.severity.name.lower(),
            "range": self.range.to_dict(),
            "message": self.message,
            "code": self.code,
            "source": self.source,
        }


@dataclass
class FindingCollection:
    """Collection of findings with convenience methods."""

    findings: List[Finding] = field(default_factory=list)

    def add(self, finding: Finding) -> None:
        self.findings.append(finding)

    def extend(self, findings: List[Finding]) -> None:
        self.findings.extend(findings)

    def filter_by_code(self, code: str) -> List[Finding]:
        """Get all findings with a specific diagnostic code."""
        return [f for f in self.findings if f.code == code]

    def filter_by_severity(self, severity: FindingSeverity) -> List[Finding]:
        """Get all findings at exactly the given severity."""
        return [f for f in self.findings if f.severity == severity]

    def has_errors(self) -> bool:
        return any(f.severity == FindingSeverity.ERROR for f in self.findings)

    def count_by_severity(self) -> Dict[FindingSeverity, int]:
        counts = {severity: 0 for severity in FindingSeverity}
        for finding in self.findings:
            counts[finding.severity] += 1
        return counts

    def sort(self, key: Literal["severity", "position", "code"] = "position") -> None:
        """Sort findings by the given key."""
        if key == "severity":
            self.findings.sort(key=lambda f: f.severity)
        elif key == "position":
            self.findings.sort(key=lambda f: (f.range.start.line, f.range.start.character))
        elif key == "code":
            self.findings.sort(key=lambda f: f.code)

    def __len__(self) -> int:
        return len(self.findings)

    def __iter__(self) -> Iterator[Finding]:
        return iter(self.findings)

    def to_dict_list(self) -> List[FindingDict]:
        """Convert all findings to dictionary list."""
        return [finding.to_dict() for finding in self.findings]
