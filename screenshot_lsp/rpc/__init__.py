"""Process transport and command facade for the screenshot server."""

from .commands import CommandExecutor, ScreenshotCommands
from .errors import (
    CommandError,
    MissingArgumentsError,
    NotConnectedError,
    RemoteError,
    RequestTimeoutError,
    SpawnError,
    TransportError,
    TransportWriteError,
    UnknownCommandError,
)
from .transport import ProcessTransport, TransportState

__all__ = [
    "CommandExecutor",
    "ScreenshotCommands",
    "ProcessTransport",
    "TransportState",
    "TransportError",
    "SpawnError",
    "NotConnectedError",
    "TransportWriteError",
    "RequestTimeoutError",
    "RemoteError",
    "CommandError",
    "UnknownCommandError",
    "MissingArgumentsError",
]
