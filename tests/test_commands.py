"""
Tests for the screenshot command facade.
"""

import asyncio

import pytest

from screenshot_lsp.rpc.commands import (
    CAPTURE_FULL,
    CAPTURE_REGION,
    CAPTURE_WINDOW,
    CLIENT_UNAVAILABLE,
    CMD_CAPTURE,
    CMD_GET_CAPABILITIES,
    CMD_LIST_DISPLAYS,
    CMD_LIST_WINDOWS,
    CommandExecutor,
    EXECUTION_ERROR,
    LIST_DISPLAYS,
    LIST_WINDOWS,
    ScreenshotCommands,
    UNKNOWN_COMMAND,
    to_wire_arguments,
)
from screenshot_lsp.rpc.errors import (
    MissingArgumentsError,
    NotConnectedError,
    RemoteError,
    RequestTimeoutError,
    UnknownCommandError,
)
from screenshot_lsp.rpc.transport import ProcessTransport

from conftest import RecordingExecutor


class TestWireArguments:
    """Tests for argument renaming."""

    def test_renames_and_drops_none(self):
        assert to_wire_arguments(
            format="png",
            quality=None,
            enable_pii_masking=True,
            save_path="/tmp/shot.png",
            window_title=None,
        ) == {"format": "png", "enablePIIMasking": True, "savePath": "/tmp/shot.png"}

    def test_mapping_and_keywords_merge(self):
        assert to_wire_arguments({"format": "png", "x": 1}, x=2) == {"format": "png", "x": 2}

    def test_falsy_values_are_kept(self):
        assert to_wire_arguments(x=0, include_frame=False) == {"x": 0, "includeFrame": False}


class TestTypedOperations:
    """Tests for the typed capture and list calls."""

    def test_capture_full_screen(self, executor):
        commands = ScreenshotCommands(executor)
        result = asyncio.run(commands.capture_full_screen("png", quality=80, enable_pii_masking=True))

        assert result == {"ok": True}
        assert executor.calls == [(CAPTURE_FULL, {"format": "png", "quality": 80, "enablePIIMasking": True})]

    def test_capture_window(self, executor):
        commands = ScreenshotCommands(executor)
        asyncio.run(commands.capture_window("jpeg", window_title="Terminal", include_frame=False))

        assert executor.calls == [
            (CAPTURE_WINDOW, {"format": "jpeg", "windowTitle": "Terminal", "includeFrame": False})
        ]

    def test_capture_window_needs_id_or_title(self, executor):
        commands = ScreenshotCommands(executor)
        with pytest.raises(MissingArgumentsError) as exc_info:
            asyncio.run(commands.capture_window("png"))

        assert exc_info.value.missing == ["windowId or windowTitle"]
        assert executor.calls == []

    def test_capture_region(self, executor):
        commands = ScreenshotCommands(executor)
        asyncio.run(commands.capture_region(0, 0, 640, 480, "webp", save_path="out.webp"))

        assert executor.calls == [(
            CAPTURE_REGION,
            {"x": 0, "y": 0, "width": 640, "height": 480, "format": "webp", "savePath": "out.webp"},
        )]

    def test_values_are_not_range_checked(self, executor):
        commands = ScreenshotCommands(executor)
        asyncio.run(commands.capture_full_screen("gif", quality=500))
        assert executor.calls[0][1] == {"format": "gif", "quality": 500}

    def test_list_operations(self, executor):
        commands = ScreenshotCommands(executor)
        asyncio.run(commands.list_displays())
        asyncio.run(commands.list_windows())
        assert executor.calls == [(LIST_DISPLAYS, {}), (LIST_WINDOWS, {})]

    def test_executor_errors_propagate(self):
        executor = RecordingExecutor(error=RequestTimeoutError(request_id=1, method=LIST_DISPLAYS, timeout=30.0))
        commands = ScreenshotCommands(executor)
        with pytest.raises(RequestTimeoutError):
            asyncio.run(commands.list_displays())

    def test_no_executor(self):
        commands = ScreenshotCommands()
        assert not commands.is_available()
        with pytest.raises(NotConnectedError):
            asyncio.run(commands.list_windows())

    def test_capabilities(self):
        capabilities = ScreenshotCommands.capabilities()
        assert capabilities["formats"] == ["png", "jpeg", "webp"]
        assert "pii-masking" in capabilities["features"]
        capabilities["formats"].append("gif")
        assert "gif" not in ScreenshotCommands.capabilities()["formats"]

    def test_process_transport_is_an_executor(self):
        assert isinstance(ProcessTransport("unused"), CommandExecutor)
        assert isinstance(RecordingExecutor(), CommandExecutor)


class TestExecute:
    """Tests for dispatch by name."""

    def test_by_tool_name(self, executor):
        commands = ScreenshotCommands(executor)
        asyncio.run(commands.execute(CAPTURE_FULL, {"format": "png", "savePath": None}))
        assert executor.calls == [(CAPTURE_FULL, {"format": "png"})]

    def test_by_editor_command(self, executor):
        commands = ScreenshotCommands(executor)
        asyncio.run(commands.execute(CMD_LIST_WINDOWS))
        assert executor.calls == [(LIST_WINDOWS, {})]

    def test_unknown_name_makes_no_round_trip(self, executor):
        commands = ScreenshotCommands(executor)
        with pytest.raises(UnknownCommandError) as exc_info:
            asyncio.run(commands.execute("screenshot_capture_everything", {}))

        assert str(exc_info.value) == "Unknown command: screenshot_capture_everything"
        assert executor.calls == []

    def test_missing_arguments_make_no_round_trip(self, executor):
        commands = ScreenshotCommands(executor)
        with pytest.raises(MissingArgumentsError) as exc_info:
            asyncio.run(commands.execute(CAPTURE_REGION, {"x": 0, "format": "png"}))

        assert exc_info.value.missing == ["y", "width", "height"]
        assert executor.calls == []


class TestEditorCommands:
    """Tests for execute_editor_command result shapes."""

    def test_capture_uses_defaults(self, executor):
        commands = ScreenshotCommands(executor)
        result = asyncio.run(commands.execute_editor_command(CMD_CAPTURE, []))

        assert result == {"status": "success", "result": {"ok": True}}
        assert executor.calls == [(CAPTURE_FULL, {"format": "png", "quality": 90, "enablePIIMasking": False})]

    def test_capture_with_arguments(self, executor):
        commands = ScreenshotCommands(executor)
        asyncio.run(commands.execute_editor_command(
            CMD_CAPTURE,
            [{"format": "jpeg", "quality": 0, "enablePIIMasking": True, "savePath": "a.jpg"}],
        ))

        assert executor.calls[0][1] == {
            "format": "jpeg",
            "quality": 0,
            "enablePIIMasking": True,
            "savePath": "a.jpg",
        }

    def test_capture_uses_configured_defaults(self, executor):
        commands = ScreenshotCommands(
            executor,
            defaults={"default_format": "webp", "default_quality": 70, "enable_pii_masking": True},
        )
        asyncio.run(commands.execute_editor_command(CMD_CAPTURE, [{"format": None}]))

        assert executor.calls[0][1] == {"format": "webp", "quality": 70, "enablePIIMasking": True}

    def test_list_commands(self, executor):
        commands = ScreenshotCommands(executor)
        asyncio.run(commands.execute_editor_command(CMD_LIST_DISPLAYS))
        asyncio.run(commands.execute_editor_command(CMD_LIST_WINDOWS, ["ignored"]))
        assert executor.calls == [(LIST_DISPLAYS, {}), (LIST_WINDOWS, {})]

    def test_capabilities_without_client(self):
        result = asyncio.run(ScreenshotCommands().execute_editor_command(CMD_GET_CAPABILITIES))
        assert result["status"] == "success"
        assert result["result"]["formats"] == ["png", "jpeg", "webp"]

    def test_unknown_command(self, executor):
        result = asyncio.run(ScreenshotCommands(executor).execute_editor_command("mcp.screenshot.record"))

        assert result["status"] == "error"
        assert result["error"]["code"] == UNKNOWN_COMMAND
        assert result["error"]["message"] == "Unknown command: mcp.screenshot.record"
        assert executor.calls == []

    def test_unknown_command_without_client(self):
        result = asyncio.run(ScreenshotCommands().execute_editor_command("mcp.screenshot.record"))
        assert result["error"]["code"] == UNKNOWN_COMMAND

    def test_client_unavailable(self):
        executor = RecordingExecutor(available=False)
        result = asyncio.run(ScreenshotCommands(executor).execute_editor_command(CMD_CAPTURE))

        assert result["error"]["code"] == CLIENT_UNAVAILABLE
        assert result["error"]["message"] == "MCP Screenshot client is not available"
        assert executor.calls == []

    def test_no_executor(self):
        result = asyncio.run(ScreenshotCommands().execute_editor_command(CMD_LIST_WINDOWS))
        assert result["error"]["code"] == CLIENT_UNAVAILABLE

    def test_execution_error(self):
        executor = RecordingExecutor(error=RemoteError("capture failed", code=-32000))
        result = asyncio.run(ScreenshotCommands(executor).execute_editor_command(CMD_CAPTURE))

        assert result["status"] == "error"
        assert result["error"]["code"] == EXECUTION_ERROR
        assert result["error"]["message"] == "capture failed"
        assert result["error"]["details"]["command"] == CMD_CAPTURE
        assert result["error"]["details"]["code"] == -32000

    def test_timeout_becomes_execution_error(self):
        executor = RecordingExecutor(error=RequestTimeoutError(request_id=3, method=LIST_DISPLAYS, timeout=30.0))
        result = asyncio.run(ScreenshotCommands(executor).execute_editor_command(CMD_LIST_DISPLAYS))

        assert result["error"]["code"] == EXECUTION_ERROR
        assert result["error"]["message"] == "Request timeout"

    def test_unexpected_error_becomes_execution_error(self):
        executor = RecordingExecutor(error=RuntimeError("executor bug"))
        result = asyncio.run(ScreenshotCommands(executor).execute_editor_command(CMD_LIST_DISPLAYS))

        assert result["error"]["code"] == EXECUTION_ERROR
        assert result["error"]["message"] == "executor bug"
