"""
Newline-delimited JSON-RPC 2.0 framing.

Each message is one UTF-8 JSON object terminated by ``"\\n"``. Requests
invoke subordinate tools through the ``tools/call`` method.
"""

import json
import logging
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

JSONRPC_VERSION = "2.0"
TOOLS_CALL = "tools/call"


def build_request(request_id: int, method: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Create a ``tools/call`` request invoking ``method`` with ``params``."""
    return {
        "jsonrpc": JSONRPC_VERSION,
        "id": request_id,
        "method": TOOLS_CALL,
        "params": {
            "name": method,
            "arguments": params if params is not None else {},
        },
    }


def success_response(request_id: int, result: Any) -> Dict[str, Any]:
    """Create a JSON-RPC success response."""
    return {"jsonrpc": JSONRPC_VERSION, "id": request_id, "result": result}


def error_response(request_id: int, code: int, message: str, data: Any = None) -> Dict[str, Any]:
    """Create a JSON-RPC error response."""
    error: Dict[str, Any] = {"code": code, "message": message}
    if data is not None:
        error["data"] = data
    return {"jsonrpc": JSONRPC_VERSION, "id": request_id, "error": error}


def encode_message(message: Dict[str, Any]) -> bytes:
    """Serialize one message as a single newline-terminated line."""
    return (json.dumps(message, separators=(",", ":")) + "\n").encode("utf-8")


def is_response(message: Any) -> bool:
    """True for objects carrying an ``id`` and no ``method``."""
    return isinstance(message, dict) and "id" in message and "method" not in message


class LineBuffer:
    """
    Accumulates raw output chunks and yields complete JSON messages.

    A trailing partial line is kept until its terminator arrives; bytes are
    decoded per complete line so multi-byte characters may straddle chunks.
    Complete lines that are not JSON are logged and dropped.
    """

    def __init__(self):
        self._buffer = bytearray()
        self.dropped_lines = 0

    def feed(self, chunk: bytes) -> List[Dict[str, Any]]:
        self._buffer.extend(chunk)
        messages: List[Dict[str, Any]] = []

        while True:
            newline = self._buffer.find(b"\n")
            if newline < 0:
                break
            raw = bytes(self._buffer[:newline])
            del self._buffer[: newline + 1]

            message = self._parse_line(raw)
            if message is not None:
                messages.append(message)

        return messages

    def _parse_line(self, raw: bytes) -> Optional[Dict[str, Any]]:
        line = raw.decode("utf-8", errors="replace").strip()
        if not line:
            return None
        try:
            message = json.loads(line)
        except ValueError:
            self.dropped_lines += 1
            logger.debug(f"Dropping non-JSON output line: {line[:200]}")
            return None
        if not isinstance(message, dict):
            self.dropped_lines += 1
            logger.debug(f"Dropping non-object JSON line: {line[:200]}")
            return None
        return message

    @property
    def pending_bytes(self) -> int:
        """Size of the buffered partial line."""
        return len(self._buffer)

    def clear(self) -> None:
        self._buffer.clear()
