"""Consolidated type definitions for the screenshot analysis engine.

This module provides the shared data structures passed between the pattern
matcher, the pattern cache, the diagnostics pipeline and the editor adapter.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Mapping, Optional, Tuple
from urllib.parse import urlparse

# =============================================================================
# Documents
# =============================================================================


class FileType(Enum):
    """Level of support a document receives, derived from its language."""
    JAVASCRIPT = "javascript"
    TYPESCRIPT = "typescript"
    JAVASCRIPT_REACT = "javascriptreact"
    TYPESCRIPT_REACT = "typescriptreact"
    JSON = "json"
    UNSUPPORTED = "unsupported"

    @classmethod
    def from_language_id(cls, language_id: Optional[str]) -> "FileType":
        """Map an editor language id onto a file type."""
        for member in cls:
            if member.value == language_id and member is not cls.UNSUPPORTED:
                return member
        return cls.UNSUPPORTED

    @classmethod
    def from_uri(cls, uri: str) -> Optional["FileType"]:
        """Guess the file type from a URI's extension, or None when unknown."""
        path = urlparse(uri).path or uri
        ext = os.path.splitext(path)[1].lower()
        return _EXTENSION_TYPES.get(ext)

    @property
    def supports_full_features(self) -> bool:
        """JS/TS sources get every validator, patterns and code lenses."""
        return self in (
            FileType.JAVASCRIPT,
            FileType.TYPESCRIPT,
            FileType.JAVASCRIPT_REACT,
            FileType.TYPESCRIPT_REACT,
        )

    @property
    def supports_json_validation(self) -> bool:
        return self is FileType.JSON


_EXTENSION_TYPES: Dict[str, FileType] = {
    ".js": FileType.JAVASCRIPT,
    ".mjs": FileType.JAVASCRIPT,
    ".cjs": FileType.JAVASCRIPT,
    ".ts": FileType.TYPESCRIPT,
    ".mts": FileType.TYPESCRIPT,
    ".cts": FileType.TYPESCRIPT,
    ".jsx": FileType.JAVASCRIPT_REACT,
    ".tsx": FileType.TYPESCRIPT_REACT,
    ".json": FileType.JSON,
}


@dataclass(frozen=True)
class DocumentSnapshot:
    """Point-in-time view of an editor document.

    Owned by the editor integration; the engine only ever reads it.

    Attributes:
        uri: Opaque document identity
        version: Monotonically increasing version number
        text: Full document text at this version
        language_id: Editor language id, if known
    """
    uri: str
    version: int
    text: str
    language_id: Optional[str] = None

    @property
    def file_type(self) -> FileType:
        """Resolve the file type from the language id, then the URI.

        Documents with no recognisable language or extension are treated as
        plain JavaScript source so that ad hoc text still gets analyzed.
        """
        if self.language_id is not None:
            return FileType.from_language_id(self.language_id)
        return FileType.from_uri(self.uri) or FileType.JAVASCRIPT


# =============================================================================
# Patterns
# =============================================================================


class PatternCategory(Enum):
    """Kinds of screenshot operations recognised in source text."""
    CAPTURE = "capture"
    REGION = "region"
    LIST_DISPLAYS = "list_displays"
    LIST_WINDOWS = "list_windows"


REGION_PARAMETER_NAMES: Tuple[str, ...] = ("x", "y", "width", "height")


@dataclass(frozen=True)
class Pattern:
    """A classified, positioned screenshot operation found on one line.

    ``parameters`` is None when no literal region parameter was found on the
    line; it is never an empty mapping.
    """
    category: PatternCategory
    line: int
    column: int
    matched_text: str
    parameters: Optional[Mapping[str, int]] = None

    @property
    def end_column(self) -> int:
        return self.column + len(self.matched_text)

    def missing_parameters(self) -> List[str]:
        """Region parameter names that were not found on the line."""
        params = self.parameters or {}
        return [name for name in REGION_PARAMETER_NAMES if name not in params]

    def to_dict(self) -> Dict[str, object]:
        """Convert to dictionary for JSON serialization."""
        result: Dict[str, object] = {
            "category": self.category.value,
            "line": self.line,
            "column": self.column,
            "matchedText": self.matched_text,
        }
        if self.parameters is not None:
            result["parameters"] = dict(self.parameters)
        return result


@dataclass
class CacheEntry:
    """Patterns computed for one document version."""
    version: int
    patterns: Tuple[Pattern, ...] = field(default_factory=tuple)
    created_at: float = 0.0
