"""
Tests for the screenshot-lsp command-line interface.
"""

import json
import sys

import pytest
import yaml
from click.testing import CliRunner

from screenshot_lsp import __version__
from screenshot_lsp.cli import cli

from conftest import MOCK_SERVER


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def config_file(tmp_path):
    """Quiet config pointing the transport at the stand-in server."""
    path = tmp_path / ".screenshot-lsp.yml"
    path.write_text(yaml.dump({
        "server": {
            "command": sys.executable,
            "args": [str(MOCK_SERVER)],
            "settle_delay": 0.05,
            "request_timeout": 5.0,
        },
        "logging": {"level": "WARNING"},
    }))
    return path


def write_source(tmp_path, name, text):
    path = tmp_path / name
    path.write_text(text)
    return str(path)


class TestCheck:
    """Tests for the check command."""

    def test_clean_file(self, runner, tmp_path, config_file):
        path = write_source(tmp_path, "app.ts", 'await captureFullScreen({ format: "png" });\n')

        result = runner.invoke(cli, ["check", path, "--config", str(config_file)], obj={})

        assert result.exit_code == 0
        assert "No issues found" in result.output

    def test_errors_exit_nonzero(self, runner, tmp_path, config_file):
        path = write_source(tmp_path, "app.ts", "captureFullScreen();\n")

        result = runner.invoke(cli, ["check", path, "--config", str(config_file)], obj={})

        assert result.exit_code == 1
        assert "missing-parameters" in result.output
        assert "Summary" in result.output

    def test_warnings_only_exit_zero(self, runner, tmp_path, config_file):
        path = write_source(tmp_path, "app.js", 'captureFullScreen({ format: "gif" });\ntakeScreenshot({ format: "png" });\n')

        result = runner.invoke(cli, ["check", path, "--config", str(config_file)], obj={})

        assert result.exit_code == 0
        assert "invalid-format" in result.output

    def test_json_output(self, runner, tmp_path, config_file):
        source = write_source(tmp_path, "app.ts", "listWindows();\ncaptureRegion({ width: 0 });\n")
        settings = write_source(tmp_path, "settings.json", '{"quality": 150}')

        result = runner.invoke(
            cli, ["check", source, settings, "--json", "--config", str(config_file)], obj={}
        )

        assert result.exit_code == 1
        report = json.loads(result.stdout)
        assert report["total_findings"] == 3
        assert [f["code"] for f in report["files"][source]] == [
            "missing-region-parameters",
            "invalid-region-width",
        ]
        assert report["files"][settings][0]["severity"] == "error"
        assert report["files"][settings][0]["source"] == "screenshot-lsp"

    def test_language_override(self, runner, tmp_path, config_file):
        path = write_source(tmp_path, "notes.txt", "captureFullScreen();\n")

        plain = runner.invoke(cli, ["check", path, "--json", "--config", str(config_file)], obj={})
        as_markdown = runner.invoke(
            cli, ["check", path, "--json", "--language", "markdown", "--config", str(config_file)], obj={}
        )

        # Unknown extensions are analyzed as JavaScript; an unsupported language is skipped
        assert json.loads(plain.stdout)["total_findings"] == 1
        assert json.loads(as_markdown.stdout)["total_findings"] == 0

    def test_missing_file(self, runner, tmp_path):
        result = runner.invoke(cli, ["check", str(tmp_path / "absent.ts")], obj={})
        assert result.exit_code == 2

    def test_invalid_config(self, runner, tmp_path):
        bad = tmp_path / "bad.yml"
        bad.write_text("- not\n- a mapping\n")
        path = write_source(tmp_path, "app.ts", "")

        result = runner.invoke(cli, ["check", path, "--config", str(bad)], obj={})

        assert result.exit_code == 1
        assert "Invalid configuration" in result.output


class TestCall:
    """Tests for the call command against the stand-in server."""

    def test_list_displays(self, runner, config_file):
        result = runner.invoke(cli, ["call", "screenshot_list_displays", "--config", str(config_file)], obj={})

        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout) == {"tool": "screenshot_list_displays", "arguments": {}}

    def test_arguments_are_decoded(self, runner, config_file):
        result = runner.invoke(cli, [
            "call", "screenshot_capture_full",
            "--arg", "format=png",
            "--arg", "quality=80",
            "--arg", "enablePIIMasking=true",
            "--config", str(config_file),
        ], obj={})

        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)["arguments"] == {
            "format": "png",
            "quality": 80,
            "enablePIIMasking": True,
        }

    def test_editor_command_id(self, runner, config_file):
        result = runner.invoke(cli, ["call", "mcp.screenshot.listWindows", "--config", str(config_file)], obj={})

        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)["tool"] == "screenshot_list_windows"

    def test_unknown_tool(self, runner, config_file):
        result = runner.invoke(cli, ["call", "screenshot_record_video", "--config", str(config_file)], obj={})

        assert result.exit_code == 1
        assert "Unknown command: screenshot_record_video" in result.output

    def test_missing_arguments(self, runner, config_file):
        result = runner.invoke(cli, [
            "call", "screenshot_capture_region", "--arg", "x=0", "--config", str(config_file),
        ], obj={})

        assert result.exit_code == 1
        assert "missing required arguments" in result.output

    def test_bad_argument_syntax(self, runner, config_file):
        result = runner.invoke(cli, [
            "call", "screenshot_list_windows", "--arg", "novalue", "--config", str(config_file),
        ], obj={})
        assert result.exit_code == 2

    def test_spawn_failure(self, runner, tmp_path):
        path = tmp_path / "broken.yml"
        path.write_text(yaml.dump({
            "server": {"command": "/nonexistent/screenshot-server-binary", "settle_delay": 0},
            "logging": {"level": "CRITICAL"},
        }))

        result = runner.invoke(cli, ["call", "screenshot_list_displays", "--config", str(path)], obj={})

        assert result.exit_code == 1
        assert "Failed to start" in result.output


class TestStatus:
    """Tests for the status command."""

    def test_reports_connected(self, runner, config_file):
        result = runner.invoke(cli, ["status", "--config", str(config_file)], obj={})

        assert result.exit_code == 0, result.output
        assert "connected" in result.output
        assert "pending_request_count" in result.output


class TestConfigCommands:
    """Tests for config init/show."""

    def test_init_and_show(self, runner):
        with runner.isolated_filesystem():
            result = runner.invoke(cli, ["config", "init"], obj={})
            assert result.exit_code == 0
            assert "Created config file" in result.output

            shown = runner.invoke(cli, ["config", "show", "--path", ".screenshot-lsp.yml"], obj={})
            assert shown.exit_code == 0
            assert "request_timeout" in shown.output
            assert "⚠" not in shown.output

    def test_init_refuses_overwrite(self, runner):
        with runner.isolated_filesystem():
            runner.invoke(cli, ["config", "init"], obj={})
            result = runner.invoke(cli, ["config", "init"], input="n\n", obj={})
            assert "Aborted" in result.output

    def test_show_reports_issues(self, runner, tmp_path):
        path = tmp_path / "config.yml"
        path.write_text("capture:\n  default_quality: 150\n")

        result = runner.invoke(cli, ["config", "show", "--path", str(path)], obj={})

        assert result.exit_code == 0
        assert "capture.default_quality" in result.output


def test_version(runner):
    result = runner.invoke(cli, ["--version"])
    assert __version__ in result.output
