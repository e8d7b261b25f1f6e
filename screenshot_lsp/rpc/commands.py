"""
Command facade over the screenshot server's tools.

``ScreenshotCommands`` exposes the five screenshot tools as typed calls.
Each call checks that required fields are present, drops arguments that
were not given and delegates to a ``CommandExecutor``. Value ranges are
not checked here; that is the diagnostics pipeline's job.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence, Tuple, runtime_checkable

from typing_extensions import NotRequired, TypedDict

from .errors import MissingArgumentsError, NotConnectedError, TransportError, UnknownCommandError

logger = logging.getLogger(__name__)

# Tool names understood by the screenshot server
CAPTURE_FULL = "screenshot_capture_full"
CAPTURE_WINDOW = "screenshot_capture_window"
CAPTURE_REGION = "screenshot_capture_region"
LIST_DISPLAYS = "screenshot_list_displays"
LIST_WINDOWS = "screenshot_list_windows"

# Editor command ids
CMD_CAPTURE = "mcp.screenshot.capture"
CMD_LIST_DISPLAYS = "mcp.screenshot.listDisplays"
CMD_LIST_WINDOWS = "mcp.screenshot.listWindows"
CMD_GET_CAPABILITIES = "mcp.screenshot.getCapabilities"

EDITOR_COMMANDS: Dict[str, str] = {
    CMD_CAPTURE: CAPTURE_FULL,
    CMD_LIST_DISPLAYS: LIST_DISPLAYS,
    CMD_LIST_WINDOWS: LIST_WINDOWS,
}

CAPABILITIES: Dict[str, List[str]] = {
    "formats": ["png", "jpeg", "webp"],
    "features": [
        "fullscreen",
        "window",
        "region",
        "pii-masking",
        "display-enumeration",
        "window-enumeration",
    ],
}

# Python keyword -> wire argument name
WIRE_NAMES: Dict[str, str] = {
    "enable_pii_masking": "enablePIIMasking",
    "save_path": "savePath",
    "window_id": "windowId",
    "window_title": "windowTitle",
    "include_frame": "includeFrame",
}

# Error codes returned to the editor
CLIENT_UNAVAILABLE = "CLIENT_UNAVAILABLE"
UNKNOWN_COMMAND = "UNKNOWN_COMMAND"
EXECUTION_ERROR = "EXECUTION_ERROR"


class FullScreenArguments(TypedDict):
    format: str
    quality: NotRequired[int]
    enablePIIMasking: NotRequired[bool]
    savePath: NotRequired[str]


class WindowArguments(TypedDict):
    format: str
    windowId: NotRequired[str]
    windowTitle: NotRequired[str]
    includeFrame: NotRequired[bool]
    savePath: NotRequired[str]


class RegionArguments(TypedDict):
    x: int
    y: int
    width: int
    height: int
    format: str
    quality: NotRequired[int]
    savePath: NotRequired[str]


@runtime_checkable
class CommandExecutor(Protocol):
    """Anything that can run a named tool call. ``ProcessTransport`` qualifies."""

    async def call(self, method: str, params: Optional[Dict[str, Any]] = None) -> Any:
        ...

    def is_available(self) -> bool:
        ...


@dataclass(frozen=True)
class ToolSpec:
    """Required fields of one tool; ``one_of`` lists alternatives where one must be set."""
    name: str
    required: Tuple[str, ...] = ()
    one_of: Tuple[str, ...] = ()

    def missing(self, arguments: Mapping[str, Any]) -> List[str]:
        missing = [key for key in self.required if arguments.get(key) is None]
        if self.one_of and all(arguments.get(key) is None for key in self.one_of):
            missing.append(" or ".join(self.one_of))
        return missing


TOOLS: Dict[str, ToolSpec] = {
    CAPTURE_FULL: ToolSpec(CAPTURE_FULL, required=("format",)),
    CAPTURE_WINDOW: ToolSpec(CAPTURE_WINDOW, required=("format",), one_of=("windowId", "windowTitle")),
    CAPTURE_REGION: ToolSpec(CAPTURE_REGION, required=("x", "y", "width", "height", "format")),
    LIST_DISPLAYS: ToolSpec(LIST_DISPLAYS),
    LIST_WINDOWS: ToolSpec(LIST_WINDOWS),
}


def to_wire_arguments(arguments: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> Dict[str, Any]:
    """Merge arguments, rename Python keywords to wire names and drop ``None`` values."""
    merged = dict(arguments or {})
    merged.update(kwargs)
    return {
        WIRE_NAMES.get(key, key): value
        for key, value in merged.items()
        if value is not None
    }


def success_result(result: Any) -> Dict[str, Any]:
    return {"status": "success", "result": result}


def error_result(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    return {
        "status": "error",
        "error": {"code": code, "message": message, "details": details or {}},
    }


class ScreenshotCommands:
    """Typed screenshot operations delegated to a command executor."""

    def __init__(
        self,
        executor: Optional[CommandExecutor] = None,
        defaults: Optional[Dict[str, Any]] = None,
    ):
        """
        Args:
            executor: Transport (or test double) that performs the tool calls
            defaults: ``capture`` configuration applied by editor commands only
        """
        self.executor = executor
        self.defaults = dict(defaults or {})

    def is_available(self) -> bool:
        return self.executor is not None and self.executor.is_available()

    # -- typed operations ---------------------------------------------------

    async def capture_full_screen(
        self,
        format: str,
        quality: Optional[int] = None,
        enable_pii_masking: Optional[bool] = None,
        save_path: Optional[str] = None,
    ) -> Any:
        arguments = to_wire_arguments(
            format=format,
            quality=quality,
            enable_pii_masking=enable_pii_masking,
            save_path=save_path,
        )
        return await self._invoke(CAPTURE_FULL, arguments)

    async def capture_window(
        self,
        format: str,
        window_id: Optional[str] = None,
        window_title: Optional[str] = None,
        include_frame: Optional[bool] = None,
        save_path: Optional[str] = None,
    ) -> Any:
        arguments = to_wire_arguments(
            format=format,
            window_id=window_id,
            window_title=window_title,
            include_frame=include_frame,
            save_path=save_path,
        )
        return await self._invoke(CAPTURE_WINDOW, arguments)

    async def capture_region(
        self,
        x: int,
        y: int,
        width: int,
        height: int,
        format: str,
        quality: Optional[int] = None,
        save_path: Optional[str] = None,
    ) -> Any:
        arguments = to_wire_arguments(
            x=x,
            y=y,
            width=width,
            height=height,
            format=format,
            quality=quality,
            save_path=save_path,
        )
        return await self._invoke(CAPTURE_REGION, arguments)

    async def list_displays(self) -> Any:
        return await self._invoke(LIST_DISPLAYS, {})

    async def list_windows(self) -> Any:
        return await self._invoke(LIST_WINDOWS, {})

    @staticmethod
    def capabilities() -> Dict[str, List[str]]:
        """Formats and features the server supports. No round-trip."""
        return {key: list(values) for key, values in CAPABILITIES.items()}

    # -- generic dispatch ---------------------------------------------------

    @staticmethod
    def resolve(name: str) -> str:
        """Map a tool name or editor command id to a tool name."""
        if name in TOOLS:
            return name
        if name in EDITOR_COMMANDS:
            return EDITOR_COMMANDS[name]
        raise UnknownCommandError(name)

    async def execute(self, name: str, arguments: Optional[Mapping[str, Any]] = None) -> Any:
        """Run a tool by tool name or editor command id."""
        tool = self.resolve(name)
        return await self._invoke(tool, to_wire_arguments(arguments))

    async def _invoke(self, tool: str, arguments: Dict[str, Any]) -> Any:
        missing = TOOLS[tool].missing(arguments)
        if missing:
            raise MissingArgumentsError(tool, missing)
        if self.executor is None:
            raise NotConnectedError(
                "MCP Screenshot client is not available",
                details={"command": tool},
            )
        logger.debug(f"Calling {tool} with {sorted(arguments)}")
        return await self.executor.call(tool, arguments)

    # -- editor commands ----------------------------------------------------

    def _capture_arguments(self, arguments: Sequence[Any]) -> Dict[str, Any]:
        given = arguments[0] if arguments and isinstance(arguments[0], dict) else {}

        def pick(key: str, default_key: str, fallback: Any) -> Any:
            value = given.get(key)
            return value if value is not None else self.defaults.get(default_key, fallback)

        return to_wire_arguments(
            format=pick("format", "default_format", "png"),
            quality=pick("quality", "default_quality", 90),
            enable_pii_masking=pick("enablePIIMasking", "enable_pii_masking", False),
            save_path=given.get("savePath"),
        )

    async def execute_editor_command(
        self,
        command: str,
        arguments: Optional[Sequence[Any]] = None,
    ) -> Dict[str, Any]:
        """
        Run a ``workspace/executeCommand`` request and wrap the outcome.

        Never raises; failures become ``{"status": "error", ...}`` results.
        """
        arguments = list(arguments or [])
        logger.info(f"Executing command: {command}")

        if command == CMD_GET_CAPABILITIES:
            return success_result(self.capabilities())

        if command not in EDITOR_COMMANDS:
            logger.error(f"Unknown command: {command}")
            return error_result(UNKNOWN_COMMAND, f"Unknown command: {command}", {"command": command})

        if not self.is_available():
            logger.error(f"MCP Screenshot client is not available for {command}")
            return error_result(
                CLIENT_UNAVAILABLE,
                "MCP Screenshot client is not available",
                {"command": command},
            )

        try:
            if command == CMD_CAPTURE:
                result = await self._invoke(CAPTURE_FULL, self._capture_arguments(arguments))
            else:
                result = await self._invoke(EDITOR_COMMANDS[command], {})
        except TransportError as e:
            logger.error(f"Command {command} failed: {e.message}")
            return error_result(
                EXECUTION_ERROR,
                e.message or "Command execution failed",
                {**e.details, "command": command, "error": repr(e)},
            )
        except Exception as e:
            logger.exception(f"Command {command} raised unexpectedly")
            return error_result(
                EXECUTION_ERROR,
                str(e) or "Command execution failed",
                {"command": command, "error": repr(e)},
            )
        return success_result(result)
