"""
pygls language server wiring the analysis engine to an editor.

The server publishes findings as diagnostics, offers code lenses on
recognised screenshot calls and runs the ``mcp.screenshot.*`` commands
through an injected command executor. Logging goes to stderr only; stdout
carries protocol frames.
"""

import logging
from functools import partial
from typing import Any, Callable, List, Optional

from lsprotocol import types as lsp
from pygls.lsp.server import LanguageServer

from .. import __version__
from ..config import Config
from ..core.engine import AnalysisEngine
from ..core.findings import Finding
from ..core.types import DocumentSnapshot
from ..rpc.commands import (
    CMD_CAPTURE,
    CMD_GET_CAPABILITIES,
    CMD_LIST_DISPLAYS,
    CMD_LIST_WINDOWS,
    CommandExecutor,
    ScreenshotCommands,
)
from ..rpc.errors import TransportError
from ..rpc.transport import ProcessTransport
from .features import SERVER_COMMANDS, code_lenses, to_lsp_diagnostics

logger = logging.getLogger(__name__)

SERVER_NAME = "screenshot-lsp"

TransportFactory = Callable[[], ProcessTransport]


class ScreenshotLanguageServer:
    """
    Per-session state behind one pygls ``LanguageServer``.

    Owns the analysis engine and the command facade. The command executor
    is attached explicitly, either by the caller or once the transport
    built by ``transport_factory`` has started.
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        transport_factory: Optional[TransportFactory] = None,
        server: Optional[LanguageServer] = None,
    ):
        self.config = config or Config()
        self.transport_factory = transport_factory
        self.transport: Optional[ProcessTransport] = None

        self.engine = AnalysisEngine(publish=self.publish, **self.config.analysis_options())
        self.commands = ScreenshotCommands(None, self.config.capture_defaults())

        self.server = server or LanguageServer(
            SERVER_NAME,
            __version__,
            text_document_sync_kind=lsp.TextDocumentSyncKind.Full,
        )
        self._register()

    def attach_executor(self, executor: CommandExecutor) -> None:
        """Route editor commands through ``executor``."""
        self.commands.executor = executor
        logger.info("Command executor attached")

    # -- outbound -------------------------------------------------------------

    def publish(self, uri: str, version: int, findings: List[Finding]) -> None:
        self.server.text_document_publish_diagnostics(
            lsp.PublishDiagnosticsParams(
                uri=uri,
                version=version,
                diagnostics=to_lsp_diagnostics(findings),
            )
        )

    def snapshot(self, uri: str) -> DocumentSnapshot:
        """Current workspace text of ``uri`` as an immutable snapshot."""
        document = self.server.workspace.get_text_document(uri)
        return DocumentSnapshot(
            uri=uri,
            version=document.version if document.version is not None else 0,
            text=document.source,
            language_id=document.language_id,
        )

    # -- handlers -------------------------------------------------------------

    def did_open(self, params: lsp.DidOpenTextDocumentParams) -> None:
        td = params.text_document
        logger.debug(f"Document opened: {td.uri}")
        self.engine.open_document(DocumentSnapshot(
            uri=td.uri,
            version=td.version,
            text=td.text,
            language_id=td.language_id,
        ))

    def did_change(self, params: lsp.DidChangeTextDocumentParams) -> None:
        uri = params.text_document.uri
        logger.debug(f"Document changed: {uri}")
        self.engine.change_document(self.snapshot(uri))

    def did_close(self, params: lsp.DidCloseTextDocumentParams) -> None:
        uri = params.text_document.uri
        logger.debug(f"Document closed: {uri}")
        self.engine.close_document(uri)
        self.server.text_document_publish_diagnostics(
            lsp.PublishDiagnosticsParams(uri=uri, diagnostics=[])
        )

    def code_lens(self, params: lsp.CodeLensParams) -> List[lsp.CodeLens]:
        return code_lenses(self.engine.get_patterns(params.text_document.uri))

    async def execute(self, command: str, arguments: List[Any]) -> dict:
        return await self.commands.execute_editor_command(command, arguments)

    async def start_transport(self) -> None:
        """Start the subordinate process and attach it, if a factory was given."""
        if self.transport_factory is None:
            return
        transport = self.transport_factory()
        try:
            await transport.start()
        except TransportError as e:
            logger.error(f"MCP Screenshot server unavailable: {e.message}")
            return
        self.transport = transport
        self.attach_executor(transport)

    async def shutdown(self) -> None:
        self.engine.close()
        if self.transport is not None:
            await self.transport.stop()
            self.transport = None

    def _register(self) -> None:
        ls = self.server

        @ls.feature(lsp.INITIALIZED)
        async def on_initialized(params: lsp.InitializedParams):
            logger.info("MCP Screenshot Language Server initialized")
            await self.start_transport()

        @ls.feature(lsp.SHUTDOWN)
        async def on_shutdown(params: None):
            await self.shutdown()

        @ls.feature(lsp.TEXT_DOCUMENT_DID_OPEN)
        def on_did_open(params: lsp.DidOpenTextDocumentParams):
            self.did_open(params)

        @ls.feature(lsp.TEXT_DOCUMENT_DID_CHANGE)
        def on_did_change(params: lsp.DidChangeTextDocumentParams):
            self.did_change(params)

        @ls.feature(lsp.TEXT_DOCUMENT_DID_CLOSE)
        def on_did_close(params: lsp.DidCloseTextDocumentParams):
            self.did_close(params)

        @ls.feature(lsp.TEXT_DOCUMENT_CODE_LENS, lsp.CodeLensOptions(resolve_provider=False))
        def on_code_lens(params: lsp.CodeLensParams):
            return self.code_lens(params)

        # pygls unpacks executeCommand ``arguments`` as positional args
        @ls.command(CMD_CAPTURE)
        async def capture(*args):
            return await self.execute(CMD_CAPTURE, list(args))

        @ls.command(CMD_LIST_DISPLAYS)
        async def list_displays(*args):
            return await self.execute(CMD_LIST_DISPLAYS, list(args))

        @ls.command(CMD_LIST_WINDOWS)
        async def list_windows(*args):
            return await self.execute(CMD_LIST_WINDOWS, list(args))

        @ls.command(CMD_GET_CAPABILITIES)
        async def get_capabilities(*args):
            return await self.execute(CMD_GET_CAPABILITIES, list(args))

        logger.debug(f"Registered commands: {', '.join(SERVER_COMMANDS)}")


def create_server(config: Optional[Config] = None, with_transport: bool = True) -> ScreenshotLanguageServer:
    """Build a server whose transport is spawned from ``config`` once initialized."""
    config = config or Config()
    factory: Optional[TransportFactory] = None
    if with_transport:
        factory = partial(ProcessTransport, **config.transport_options())
    return ScreenshotLanguageServer(config, transport_factory=factory)


def main(config: Optional[Config] = None, with_transport: bool = True) -> None:
    """Run the language server on stdio."""
    create_server(config, with_transport).server.start_io()
