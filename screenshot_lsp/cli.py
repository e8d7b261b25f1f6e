"""
Command-line interface for screenshot-lsp.

``check`` runs the diagnostics pipeline over files, ``serve`` starts the
language server on stdio and ``call`` invokes one screenshot tool through
the process transport.
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

import click
import yaml
from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table

from . import __version__
from .config import Config, create_default_config_file
from .core.engine import AnalysisEngine
from .core.findings import FindingSeverity
from .core.reporting import Reporter
from .core.types import DocumentSnapshot
from .rpc.commands import ScreenshotCommands
from .rpc.errors import TransportError
from .rpc.transport import ProcessTransport
from .utils.logging_setup import log_operation, setup_logging

console = Console()
err_console = Console(stderr=True)

logger = logging.getLogger(__name__)


def _load_config(path: Optional[str]) -> Config:
    try:
        return Config.load(path)
    except (ValueError, yaml.YAMLError) as e:
        raise click.ClickException(f"Invalid configuration: {e}")


def _configure_logging(config: Config, verbose: bool) -> None:
    level = "DEBUG" if verbose else config.get("logging.level", "INFO")
    setup_logging(
        "screenshot_lsp",
        level=level,
        file=bool(config.get("logging.file", False)),
        json_format=bool(config.get("logging.json_format", True)),
    )


def _parse_arguments(pairs: Sequence[str]) -> Dict[str, Any]:
    """Turn ``KEY=VALUE`` pairs into a dict, decoding JSON values where possible."""
    arguments: Dict[str, Any] = {}
    for pair in pairs:
        key, sep, raw = pair.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"expected KEY=VALUE, got {pair!r}", param_hint="--arg")
        try:
            arguments[key] = json.loads(raw)
        except ValueError:
            arguments[key] = raw
    return arguments


def _fail(error: TransportError) -> None:
    err_console.print(f"[red]✗ {error.message}[/red]")
    if error.details:
        err_console.print(f"[dim]{json.dumps(error.details, default=str)}[/dim]")
    raise click.exceptions.Exit(1)


@click.group(name="screenshot-lsp")
@click.version_option(__version__, prog_name="screenshot-lsp")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx, verbose):
    """Static analysis and command bridge for screenshot API usage."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose


@cli.command()
@click.argument("files", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
@click.option("--json", "as_json", is_flag=True, help="Print findings as JSON")
@click.option("--language", default=None, help="Language id for every file (default: from extension)")
@click.option("--config", "config_path", type=click.Path(exists=True, dir_okay=False), help="Path to config file")
@click.pass_context
def check(ctx, files, as_json, language, config_path):
    """Report screenshot API problems in FILES."""
    config = _load_config(config_path)
    _configure_logging(config, ctx.obj["verbose"])
    log_operation(logger, "check", files=len(files))

    engine = AnalysisEngine(**config.analysis_options())
    results = {}
    try:
        for path in files:
            file_path = Path(path)
            snapshot = DocumentSnapshot(
                uri=file_path.resolve().as_uri(),
                version=1,
                text=file_path.read_text(encoding="utf-8"),
                language_id=language,
            )
            results[path] = engine.validate(snapshot)
    finally:
        engine.close()

    if as_json:
        Reporter(console).render_json(results)
    else:
        Reporter(console).render_text(results)

    if any(f.severity == FindingSeverity.ERROR for findings in results.values() for f in findings):
        ctx.exit(1)


@cli.command()
@click.option("--config", "config_path", type=click.Path(exists=True, dir_okay=False), help="Path to config file")
@click.option("--no-transport", is_flag=True, help="Do not spawn the screenshot server")
@click.pass_context
def serve(ctx, config_path, no_transport):
    """Run the language server on stdio."""
    from .lsp.server import main as serve_main

    config = _load_config(config_path)
    _configure_logging(config, ctx.obj["verbose"])
    log_operation(logger, "serve", transport=not no_transport)
    serve_main(config, with_transport=not no_transport)


async def _run_call(config: Config, tool: str, arguments: Dict[str, Any]) -> Any:
    # Unknown names fail before anything is spawned
    ScreenshotCommands.resolve(tool)
    async with ProcessTransport(**config.transport_options()) as transport:
        commands = ScreenshotCommands(transport, config.capture_defaults())
        return await commands.execute(tool, arguments)


@cli.command()
@click.argument("tool")
@click.option("--arg", "pairs", multiple=True, metavar="KEY=VALUE", help="Tool argument (repeatable)")
@click.option("--config", "config_path", type=click.Path(exists=True, dir_okay=False), help="Path to config file")
@click.pass_context
def call(ctx, tool, pairs, config_path):
    """Invoke TOOL (tool name or editor command id) and print its result."""
    config = _load_config(config_path)
    _configure_logging(config, ctx.obj["verbose"])
    arguments = _parse_arguments(pairs)

    try:
        result = asyncio.run(_run_call(config, tool, arguments))
    except TransportError as e:
        _fail(e)
        return

    click.echo(json.dumps(result, indent=2, default=str))


async def _read_status(config: Config) -> Dict[str, Any]:
    transport = ProcessTransport(**config.transport_options())
    try:
        await transport.start()
        return transport.diagnostics()
    finally:
        await transport.stop()


@cli.command()
@click.option("--config", "config_path", type=click.Path(exists=True, dir_okay=False), help="Path to config file")
@click.pass_context
def status(ctx, config_path):
    """Start the screenshot server once and show transport diagnostics."""
    config = _load_config(config_path)
    _configure_logging(config, ctx.obj["verbose"])

    try:
        info = asyncio.run(_read_status(config))
    except TransportError as e:
        _fail(e)
        return

    table = Table(title="Transport", show_header=True, header_style="bold cyan")
    table.add_column("Field", style="yellow")
    table.add_column("Value", style="green")
    for key, value in info.items():
        table.add_row(key, json.dumps(value) if isinstance(value, (list, dict)) else str(value))
    console.print(table)


@cli.group(name="config")
def config_group():
    """Manage screenshot-lsp configuration."""
    pass


@config_group.command(name="init")
@click.option(
    "--path",
    type=click.Path(),
    default=".screenshot-lsp.yml",
    help="Path for config file"
)
def config_init(path):
    """Write a configuration file with the default settings."""
    config_path = Path(path)

    if config_path.exists():
        if not click.confirm(f"Config file {path} already exists. Overwrite?"):
            console.print("[yellow]Aborted[/yellow]")
            return

    if create_default_config_file(config_path):
        console.print(f"[green]✓ Created config file at {path}[/green]")
    else:
        console.print("[red]✗ Failed to create config file[/red]")
        raise click.exceptions.Exit(1)


@config_group.command(name="show")
@click.option(
    "--path",
    type=click.Path(exists=True, dir_okay=False),
    help="Path to config file"
)
def config_show(path):
    """Display the effective configuration."""
    config = _load_config(path)
    source = str(config.source) if config.source else "defaults"
    console.print(f"[bold]Configuration[/bold] ({source})")
    console.print(Syntax(yaml.dump(config.to_dict(), default_flow_style=False, sort_keys=False), "yaml"))

    for issue in config.validate():
        console.print(f"[yellow]⚠ {issue}[/yellow]")


def main():
    cli(obj={})


if __name__ == "__main__":
    main()
