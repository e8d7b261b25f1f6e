"""screenshot-lsp - Static analysis and command bridge for screenshot API usage."""

__version__ = "0.1.0"

from .core.engine import AnalysisEngine
from .core.findings import Finding, FindingSeverity
from .core.patterns import analyze
from .core.types import DocumentSnapshot, Pattern, PatternCategory

__all__ = [
    "AnalysisEngine",
    "DocumentSnapshot",
    "Finding",
    "FindingSeverity",
    "Pattern",
    "PatternCategory",
    "analyze",
    "__version__",
]
