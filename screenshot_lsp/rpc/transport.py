"""
Process transport speaking newline-delimited JSON-RPC over stdio.

``ProcessTransport`` spawns the screenshot server as a child process, writes
one JSON request per line to its stdin and demultiplexes the lines it
prints on stdout back onto the pending requests by id. Every request has
its own timer; a request that outlives it fails with
``RequestTimeoutError``.

The transport is confined to the event loop that started it. Other threads
must submit calls with ``asyncio.run_coroutine_threadsafe``.
"""

import asyncio
import itertools
import logging
import os
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

from .errors import (
    NotConnectedError,
    RemoteError,
    RequestTimeoutError,
    SpawnError,
    TransportError,
    TransportWriteError,
)
from .protocol import LineBuffer, build_request, encode_message, is_response
from ..utils.logging_setup import log_request

logger = logging.getLogger(__name__)

DEFAULT_SETTLE_DELAY = 1.0
DEFAULT_REQUEST_TIMEOUT = 30.0
STOP_GRACE_PERIOD = 5.0
READ_CHUNK_SIZE = 64 * 1024
STDERR_LOG_LIMIT = 2000


class TransportState(Enum):
    NOT_STARTED = "not_started"
    STARTING = "starting"
    CONNECTED = "connected"
    STOPPED = "stopped"


@dataclass
class PendingRequest:
    """A request awaiting its response."""
    id: int
    method: str
    submitted_at: float
    future: asyncio.Future
    timer: asyncio.TimerHandle

    def age(self, now: Optional[float] = None) -> float:
        return (now if now is not None else time.monotonic()) - self.submitted_at


class ProcessTransport:
    """Async JSON-RPC client for a subordinate process on stdio."""

    def __init__(
        self,
        command: str,
        args: Sequence[str] = (),
        env: Optional[Dict[str, str]] = None,
        settle_delay: float = DEFAULT_SETTLE_DELAY,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
    ):
        """
        Initialize the transport. Nothing is spawned until ``start()``.

        Args:
            command: Executable to spawn
            args: Arguments for the executable
            env: Extra environment variables, layered over ``os.environ``
            settle_delay: Seconds to wait after spawning before accepting calls
            request_timeout: Seconds before an unanswered request fails
        """
        self.command = command
        self.args = list(args)
        self.env = dict(env or {})
        self.settle_delay = settle_delay
        self.request_timeout = request_timeout

        self.state = TransportState.NOT_STARTED
        self._process: Optional[asyncio.subprocess.Process] = None
        self._ids = itertools.count(1)
        self._pending: Dict[int, PendingRequest] = {}
        self._buffer = LineBuffer()
        self._reader_task: Optional[asyncio.Task] = None
        self._stderr_task: Optional[asyncio.Task] = None

    # -- lifecycle ----------------------------------------------------------

    async def start(self) -> None:
        """Spawn the subordinate process and wait for it to settle."""
        if self.state is not TransportState.NOT_STARTED:
            raise TransportError(
                "Transport already started",
                {'state': self.state.value},
            )

        self.state = TransportState.STARTING
        logger.info(f"Starting MCP Screenshot server: {self.command} {' '.join(self.args)}")

        env = {**os.environ, **self.env}
        try:
            self._process = await asyncio.create_subprocess_exec(
                self.command,
                *self.args,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env=env,
            )
        except OSError as e:
            self.state = TransportState.STOPPED
            logger.error(f"Failed to spawn {self.command}: {e}")
            raise SpawnError(
                f"Failed to start {self.command}: {e}",
                command=self.command,
                args=self.args,
            ) from e

        self._reader_task = asyncio.create_task(self._read_stdout(self._process))
        self._stderr_task = asyncio.create_task(self._read_stderr(self._process))

        await asyncio.sleep(self.settle_delay)

        if self.state is TransportState.STARTING:
            self.state = TransportState.CONNECTED
            logger.info(f"MCP Screenshot server running (pid {self._process.pid})")

    async def stop(self) -> None:
        """Terminate the subordinate process. Safe to call more than once.

        Pending requests are not failed here; each expires through its own
        timer.
        """
        self.state = TransportState.STOPPED
        process, self._process = self._process, None

        if process is not None and process.returncode is None:
            try:
                process.terminate()
                await asyncio.wait_for(process.wait(), timeout=STOP_GRACE_PERIOD)
            except ProcessLookupError:
                pass
            except asyncio.TimeoutError:
                logger.warning(f"Process {process.pid} ignored terminate, killing")
                process.kill()
                await process.wait()

        for task in (self._reader_task, self._stderr_task):
            if task is None:
                continue
            if not task.done():
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
            elif not task.cancelled() and task.exception() is not None:
                logger.warning(f"Output reader failed: {task.exception()!r}")
        self._reader_task = None
        self._stderr_task = None
        self._buffer.clear()

        if process is not None:
            logger.info("MCP Screenshot server stopped")

    async def __aenter__(self) -> "ProcessTransport":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()

    def is_available(self) -> bool:
        return self.state is TransportState.CONNECTED

    # -- requests -----------------------------------------------------------

    async def call(self, method: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """
        Invoke a subordinate tool and wait for its result.

        Args:
            method: Tool name, sent as ``params.name`` of a ``tools/call`` request
            params: Tool arguments

        Returns:
            The response's ``result`` member

        Raises:
            NotConnectedError: The transport is not connected
            TransportWriteError: The request could not be written
            RequestTimeoutError: No response within ``request_timeout``
            RemoteError: The subordinate answered with an error object
        """
        if self.state is not TransportState.CONNECTED or self._process is None:
            raise NotConnectedError(state=self.state.value)

        request_id = next(self._ids)
        loop = asyncio.get_running_loop()
        future = loop.create_future()
        timer = loop.call_later(self.request_timeout, self._expire, request_id)
        self._pending[request_id] = PendingRequest(
            id=request_id,
            method=method,
            submitted_at=time.monotonic(),
            future=future,
            timer=timer,
        )

        log_request(logger, request_id, method)
        try:
            stdin = self._process.stdin
            if stdin is None:
                raise BrokenPipeError("stdin is closed")
            stdin.write(encode_message(build_request(request_id, method, params)))
            await stdin.drain()
        except (OSError, ConnectionError) as e:
            self._discard(request_id)
            raise TransportWriteError(
                f"Failed to send {method}: {e}",
                {'request_id': request_id, 'method': method},
            ) from e

        try:
            return await future
        finally:
            self._discard(request_id)

    def _discard(self, request_id: int) -> None:
        pending = self._pending.pop(request_id, None)
        if pending is not None:
            pending.timer.cancel()

    def _expire(self, request_id: int) -> None:
        pending = self._pending.pop(request_id, None)
        if pending is None or pending.future.done():
            return
        logger.warning(f"Request {request_id} ({pending.method}) timed out after {self.request_timeout}s")
        pending.future.set_exception(RequestTimeoutError(
            request_id=request_id,
            method=pending.method,
            timeout=self.request_timeout,
        ))

    # -- responses ----------------------------------------------------------

    def handle_chunk(self, chunk: bytes) -> None:
        """Feed raw stdout bytes and dispatch every complete message."""
        for message in self._buffer.feed(chunk):
            self._handle_message(message)

    def _handle_message(self, message: Dict[str, Any]) -> None:
        if not is_response(message):
            logger.debug(f"Ignoring server message: {message.get('method')}")
            return

        request_id = message["id"]
        # bool is an int subclass; true must not match request 1
        is_id = isinstance(request_id, int) and not isinstance(request_id, bool)
        pending = self._pending.pop(request_id, None) if is_id else None
        if pending is None:
            logger.debug(f"Ignoring response with unmatched id {request_id!r}")
            return

        pending.timer.cancel()
        if pending.future.done():
            return
        if message.get("error") is not None:
            pending.future.set_exception(RemoteError.from_error_object(message["error"]))
        else:
            pending.future.set_result(message.get("result"))

    async def _read_stdout(self, process: asyncio.subprocess.Process) -> None:
        assert process.stdout is not None
        while True:
            chunk = await process.stdout.read(READ_CHUNK_SIZE)
            if not chunk:
                break
            self.handle_chunk(chunk)

        returncode = await process.wait()
        logger.info(f"Process exited with code {returncode}")
        self.state = TransportState.STOPPED

    async def _read_stderr(self, process: asyncio.subprocess.Process) -> None:
        """Drain stderr in fixed-size chunks so no line length can stall the pipe."""
        assert process.stderr is not None
        partial = bytearray()
        while True:
            chunk = await process.stderr.read(READ_CHUNK_SIZE)
            if not chunk:
                break
            partial.extend(chunk)
            *lines, rest = partial.split(b"\n")
            for line in lines:
                self._log_stderr(line)
            if len(rest) > READ_CHUNK_SIZE:
                self._log_stderr(rest)
                rest = b""
            partial = bytearray(rest)
        if partial:
            self._log_stderr(partial)

    @staticmethod
    def _log_stderr(line: bytes) -> None:
        text = bytes(line[:STDERR_LOG_LIMIT]).decode("utf-8", errors="replace").rstrip()
        if len(line) > STDERR_LOG_LIMIT:
            text += f"... ({len(line)} bytes)"
        logger.debug(f"[stderr] {text}")

    # -- introspection ------------------------------------------------------

    @property
    def pid(self) -> Optional[int]:
        return self._process.pid if self._process is not None else None

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def diagnostics(self) -> Dict[str, Any]:
        """Snapshot of connection state and in-flight requests."""
        now = time.monotonic()
        requests: List[Dict[str, Any]] = [
            {"id": p.id, "method": p.method, "age": round(p.age(now), 3)}
            for p in self._pending.values()
        ]
        return {
            "state": self.state.value,
            "process_running": self._process is not None and self._process.returncode is None,
            "pid": self.pid,
            "pending_request_count": len(requests),
            "pending_requests": requests,
        }
