"""
Error types for the process transport and the command facade.

Every error carries a human readable ``message`` and a ``details`` dict so
callers can report failures in a structured way.
"""

from typing import Any, Dict, List, Optional, Sequence


class TransportError(Exception):
    """
    Base exception for all transport and command errors.

    Provides common functionality for error tracking and reporting.
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        """
        Initialize transport error.

        Args:
            message: Error message
            details: Optional detailed error context
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": type(self).__name__,
            "message": self.message,
            "details": dict(self.details),
        }


class SpawnError(TransportError):
    """Raised when the subordinate process cannot be started."""

    def __init__(self, message: str,
                 command: Optional[str] = None,
                 args: Sequence[str] = (),
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)
        self.command = command
        self.command_args = list(args)

        self.details.update({
            'command': command,
            'args': self.command_args,
        })


class NotConnectedError(TransportError):
    """Raised when a request is issued while the transport is not connected."""

    def __init__(self, message: str = "MCP server not running",
                 state: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)
        self.state = state
        self.details['state'] = state


class TransportWriteError(TransportError):
    """Raised when a request cannot be written to the subordinate's input."""


class RequestTimeoutError(TransportError):
    """
    Raised when no response arrives within the request timeout.

    The pending request is removed first, so a late response is dropped.
    """

    def __init__(self, message: str = "Request timeout",
                 request_id: Optional[int] = None,
                 method: Optional[str] = None,
                 timeout: Optional[float] = None,
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)
        self.request_id = request_id
        self.method = method
        self.timeout = timeout

        self.details.update({
            'request_id': request_id,
            'method': method,
            'timeout': timeout,
        })


class RemoteError(TransportError):
    """Raised when the subordinate answers a request with an error object."""

    def __init__(self, message: str,
                 code: Optional[int] = None,
                 data: Any = None,
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)
        self.code = code
        self.data = data

        self.details.update({
            'code': code,
            'data': data,
        })

    @classmethod
    def from_error_object(cls, error: Any) -> "RemoteError":
        """Build from a JSON-RPC ``error`` member, tolerating odd shapes."""
        if isinstance(error, dict):
            return cls(
                str(error.get("message", "Unknown error")),
                code=error.get("code"),
                data=error.get("data"),
            )
        return cls(str(error))


class CommandError(TransportError):
    """Base exception for failures detected by the command facade."""


class UnknownCommandError(CommandError):
    """Raised for a command or tool name the facade does not know."""

    def __init__(self, command: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(f"Unknown command: {command}", details)
        self.command = command
        self.details['command'] = command


class MissingArgumentsError(CommandError):
    """Raised when required arguments are absent."""

    def __init__(self, command: str, missing: List[str],
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(
            f"{command} is missing required arguments: {', '.join(missing)}",
            details,
        )
        self.command = command
        self.missing = list(missing)

        self.details.update({
            'command': command,
            'missing': self.missing,
        })
