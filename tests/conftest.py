"""Shared fixtures for screenshot-lsp tests."""

import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import pytest

from screenshot_lsp.analyzers.pipeline import DiagnosticsPipeline
from screenshot_lsp.core.cache import PatternCache
from screenshot_lsp.rpc.transport import ProcessTransport

FIXTURES = Path(__file__).parent / "fixtures"
MOCK_SERVER = FIXTURES / "mock_mcp_server.py"


class RecordingExecutor:
    """In-memory command executor that records every call."""

    def __init__(self, result: Any = None, available: bool = True, error: Optional[Exception] = None):
        self.result = result if result is not None else {"ok": True}
        self.available = available
        self.error = error
        self.calls: List[Tuple[str, Dict[str, Any]]] = []

    async def call(self, method: str, params: Optional[Dict[str, Any]] = None) -> Any:
        self.calls.append((method, dict(params or {})))
        if self.error is not None:
            raise self.error
        return self.result

    def is_available(self) -> bool:
        return self.available


@pytest.fixture
def pipeline():
    return DiagnosticsPipeline(PatternCache())


@pytest.fixture
def executor():
    return RecordingExecutor()


@pytest.fixture
def make_transport():
    """Factory for transports talking to the mock server script."""

    def _make(**kwargs) -> ProcessTransport:
        options = {"settle_delay": 0.05, "request_timeout": 5.0}
        options.update(kwargs)
        return ProcessTransport(sys.executable, [str(MOCK_SERVER)], **options)

    return _make


@pytest.fixture
def published():
    """Collects (uri, version, findings) tuples from an engine's publish callback."""
    calls: List[Tuple[str, int, list]] = []

    def _publish(uri, version, findings):
        calls.append((uri, version, list(findings)))

    _publish.calls = calls
    return _publish
