"""Conversions from engine results to Language Server Protocol types."""

from typing import Dict, List, Optional, Sequence, Tuple

from lsprotocol import types as lsp

from ..core.findings import Finding, FindingSeverity, Range
from ..core.types import Pattern, PatternCategory
from ..rpc.commands import (
    CMD_CAPTURE,
    CMD_GET_CAPABILITIES,
    CMD_LIST_DISPLAYS,
    CMD_LIST_WINDOWS,
)

SERVER_COMMANDS: List[str] = [
    CMD_CAPTURE,
    CMD_LIST_DISPLAYS,
    CMD_LIST_WINDOWS,
    CMD_GET_CAPABILITIES,
]

SEVERITY_MAP: Dict[FindingSeverity, lsp.DiagnosticSeverity] = {
    FindingSeverity.ERROR: lsp.DiagnosticSeverity.Error,
    FindingSeverity.WARNING: lsp.DiagnosticSeverity.Warning,
    FindingSeverity.INFO: lsp.DiagnosticSeverity.Information,
}

# category -> (title, command id, arguments); REGION gets no lens
LENS_COMMANDS: Dict[PatternCategory, Tuple[str, str, Optional[list]]] = {
    PatternCategory.CAPTURE: ("📸 Capture Screenshot", CMD_CAPTURE, [{"format": "png"}]),
    PatternCategory.LIST_DISPLAYS: ("🖥️ List Displays", CMD_LIST_DISPLAYS, None),
    PatternCategory.LIST_WINDOWS: ("🪟 List Windows", CMD_LIST_WINDOWS, None),
}


def to_lsp_range(range_: Range) -> lsp.Range:
    return lsp.Range(
        start=lsp.Position(line=range_.start.line, character=range_.start.character),
        end=lsp.Position(line=range_.end.line, character=range_.end.character),
    )


def to_lsp_diagnostic(finding: Finding) -> lsp.Diagnostic:
    return lsp.Diagnostic(
        range=to_lsp_range(finding.range),
        message=finding.message,
        severity=SEVERITY_MAP[finding.severity],
        code=finding.code,
        source=finding.source,
    )


def to_lsp_diagnostics(findings: Sequence[Finding]) -> List[lsp.Diagnostic]:
    return [to_lsp_diagnostic(f) for f in findings]


def code_lenses(patterns: Sequence[Pattern]) -> List[lsp.CodeLens]:
    """One actionable lens per capture or listing pattern."""
    lenses = []
    for pattern in patterns:
        entry = LENS_COMMANDS.get(pattern.category)
        if entry is None:
            continue
        title, command, arguments = entry
        lenses.append(lsp.CodeLens(
            range=lsp.Range(
                start=lsp.Position(line=pattern.line, character=pattern.column),
                end=lsp.Position(line=pattern.line, character=pattern.end_column),
            ),
            command=lsp.Command(
                title=title,
                command=command,
                arguments=[dict(a) for a in arguments] if arguments is not None else None,
            ),
        ))
    return lenses
