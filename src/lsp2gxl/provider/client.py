"""
Language server client over stdio.

The server runs as a child process. A reader task dispatches responses to
the futures of pending requests, answers the server-to-client requests it
supports with an empty result, rejects the rest with MethodNotFound and
logs notifications. Requests are issued one at a time by the pipeline, but
the client itself does not rely on that.
"""

import asyncio
import itertools
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Set, Union

from lsp2gxl.exceptions import ProviderError
from lsp2gxl.logging_config import logger
from lsp2gxl.schemas import Position, RawSymbol, Reference, Symbol
from lsp2gxl.tracing import trace
from lsp2gxl.uris import path_to_uri, uri_to_path
from .config import CLIENT_CAPABILITIES, CLIENT_CONFIG, SUPPORTED_SERVER_REQUESTS, language_id_for
from .flatten import DOCUMENT_SYMBOL, REFERENCES, flatten_document_symbols, parse_locations
from .protocol import (
    JSONRPCNotification,
    JSONRPCRequest,
    JSONRPCResponse,
    RPCErrorCode,
    create_error_response,
    create_success_response,
    encode_message,
    parse_message,
    read_message,
)

# window/logMessage and window/showMessage MessageType -> loguru level
MESSAGE_LEVELS = {1: "ERROR", 2: "WARNING", 3: "INFO", 4: "DEBUG"}


class LanguageServerClient:
    """
    SymbolProvider backed by a language server process.

    Use as an async context manager; leaving the context shuts the server
    down, terminating it if it does not exit in time.

    Example:
        async with LanguageServerClient(["pylsp"], root) as client:
            symbols = await client.get_document_symbols(uri)
    """

    def __init__(
        self,
        command: Sequence[str],
        root_path: Path,
        config: Optional[Dict[str, Any]] = None,
    ):
        if not command:
            raise ProviderError("<spawn>", "No language server command given")
        self.command = list(command)
        self.root_path = Path(root_path).resolve()
        self.config = {**CLIENT_CONFIG, **(config or {})}
        self.server_capabilities: Dict[str, Any] = {}

        self._process: Optional[asyncio.subprocess.Process] = None
        self._reader_task: Optional[asyncio.Task] = None
        self._stderr_task: Optional[asyncio.Task] = None
        self._ids = itertools.count(1)
        self._pending: Dict[Union[int, str], asyncio.Future] = {}
        self._methods: Dict[Union[int, str], str] = {}
        self._opened: Set[str] = set()
        self._failure: Optional[ProviderError] = None

    async def __aenter__(self) -> "LanguageServerClient":
        try:
            await self.start()
        except BaseException:
            await self.stop()
            raise
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()

    @property
    def running(self) -> bool:
        return self._process is not None and self._process.returncode is None

    # === Lifecycle ===

    @trace
    async def start(self) -> None:
        """
        Spawn the server and run the initialize handshake.

        Raises:
            ProviderError: If the command cannot be started or initialize fails.
        """
        logger.info(f"Starting language server: {' '.join(self.command)}")
        try:
            self._process = await asyncio.create_subprocess_exec(
                *self.command,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=str(self.root_path),
            )
        except (FileNotFoundError, PermissionError) as e:
            raise ProviderError("<spawn>", f"Cannot start '{self.command[0]}': {e}") from e

        self._reader_task = asyncio.create_task(self._read_loop())
        self._stderr_task = asyncio.create_task(self._drain_stderr())

        result = await self.request(
            "initialize",
            {
                "processId": os.getpid(),
                "rootPath": str(self.root_path),
                "rootUri": path_to_uri(self.root_path),
                "capabilities": CLIENT_CAPABILITIES,
            },
        )
        self.server_capabilities = (result or {}).get("capabilities", {})
        await self.notify("initialized", {})
        logger.debug(f"Language server initialized (pid {self._process.pid})")

    @trace
    async def stop(self) -> None:
        """
        Shut the server down: shutdown and exit best-effort, then terminate or kill.
        """
        if self._process is None:
            return
        timeout = self.config["shutdown_timeout"]

        if self.running and self._failure is None:
            try:
                await asyncio.wait_for(self.request("shutdown"), timeout)
                if self._failure is None:
                    await self.notify("exit")
            except (ProviderError, asyncio.TimeoutError) as e:
                logger.warning(f"Language server did not shut down cleanly: {e}")

        if self._process.returncode is None:
            try:
                await asyncio.wait_for(self._process.wait(), timeout)
            except asyncio.TimeoutError:
                logger.warning(f"Terminating language server (pid {self._process.pid})")
                self._process.terminate()
                try:
                    await asyncio.wait_for(self._process.wait(), timeout)
                except asyncio.TimeoutError:
                    logger.warning(f"Killing language server (pid {self._process.pid})")
                    self._process.kill()
                    await self._process.wait()

        for task in (self._reader_task, self._stderr_task):
            if task is not None and not task.done():
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
        self._fail_pending(ProviderError("<shutdown>", "Language server stopped"))
        logger.info(f"Language server exited with code {self._process.returncode}")

    # === JSON-RPC ===

    async def _send(self, method: str, message: Union[JSONRPCRequest, JSONRPCNotification, JSONRPCResponse]) -> None:
        if self._failure is not None:
            raise ProviderError(method, f"Language server unavailable: {self._failure.message}")
        if not self.running or self._process.stdin is None:
            raise ProviderError(method, "Language server is not running")
        try:
            self._process.stdin.write(encode_message(message))
            await self._process.stdin.drain()
        except (BrokenPipeError, ConnectionResetError) as e:
            raise ProviderError(method, f"Cannot write to language server: {e}") from e

    async def request(self, method: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """
        Send a request and wait for its result.

        Raises:
            ProviderError: On an error response, a timeout, or a dead server.
        """
        request_id = next(self._ids)
        future = asyncio.get_running_loop().create_future()
        self._pending[request_id] = future
        self._methods[request_id] = method
        try:
            await self._send(method, JSONRPCRequest(method=method, params=params, id=request_id))
            timeout = self.config["request_timeout"]
            if timeout is None:
                return await future
            try:
                return await asyncio.wait_for(future, timeout)
            except asyncio.TimeoutError as e:
                raise ProviderError(method, f"No response within {timeout} seconds") from e
        finally:
            self._pending.pop(request_id, None)
            self._methods.pop(request_id, None)

    async def notify(self, method: str, params: Optional[Dict[str, Any]] = None) -> None:
        await self._send(method, JSONRPCNotification(method=method, params=params))

    async def _read_loop(self) -> None:
        reader = self._process.stdout
        try:
            while True:
                data = await read_message(reader)
                if data is None:
                    break
                await self._dispatch(parse_message(data))
        except ProviderError as e:
            logger.error(f"Language server protocol failure: {e}")
            self._failure = e
            self._fail_pending(e)
            return
        code = await self._process.wait()
        self._failure = ProviderError("<transport>", f"Language server exited with code {code}")
        self._fail_pending(self._failure)

    async def _drain_stderr(self) -> None:
        stream = self._process.stderr
        while True:
            line = await stream.readline()
            if not line:
                return
            logger.debug(f"[server stderr] {line.decode(self.config['encoding'], errors='replace').rstrip()}")

    async def _dispatch(self, message: Union[JSONRPCRequest, JSONRPCNotification, JSONRPCResponse]) -> None:
        if isinstance(message, JSONRPCResponse):
            self._resolve(message)
        elif isinstance(message, JSONRPCRequest):
            await self._send(message.method, self._answer(message))
        else:
            self._log_notification(message)

    def _answer(self, request: JSONRPCRequest) -> JSONRPCResponse:
        if request.method not in SUPPORTED_SERVER_REQUESTS:
            logger.debug(f"Rejecting unsupported server request '{request.method}'")
            return create_error_response(
                RPCErrorCode.METHOD_NOT_FOUND, f"Unsupported request {request.method}", request.id
            )
        logger.debug(f"Answering server request '{request.method}' with an empty result")
        if request.method == "workspace/configuration":
            params = request.params if isinstance(request.params, dict) else {}
            return create_success_response([None] * len(params.get("items") or []), request.id)
        return create_success_response(None, request.id)

    def _resolve(self, response: JSONRPCResponse) -> None:
        future = self._pending.get(response.id)
        if future is None or future.done():
            logger.warning(f"Discarding response for unknown request id {response.id!r}")
            return
        method = self._methods.get(response.id, "<unknown>")
        if response.error is not None:
            future.set_exception(ProviderError(method, response.error.message, response.error.code))
        else:
            future.set_result(response.result)

    def _log_notification(self, notification: JSONRPCNotification) -> None:
        params = notification.params if isinstance(notification.params, dict) else {}
        if notification.method in ("window/logMessage", "window/showMessage"):
            level = MESSAGE_LEVELS.get(params.get("type"), "DEBUG")
            # Server chatter stays below INFO unless it reports a problem.
            if level in ("INFO", "DEBUG"):
                level = "DEBUG"
            logger.log(level, f"[server] {params.get('message', '')}")
        else:
            logger.debug(f"Ignoring server notification '{notification.method}'")

    def _fail_pending(self, error: ProviderError) -> None:
        for future in self._pending.values():
            if not future.done():
                future.set_exception(error)

    # === SymbolProvider ===

    async def _ensure_open(self, uri: str) -> None:
        if not self.config["open_documents"] or uri in self._opened:
            return
        path = uri_to_path(uri)
        try:
            text = path.read_text(encoding=self.config["encoding"], errors="replace")
        except OSError as e:
            raise ProviderError("textDocument/didOpen", f"Cannot read {path}: {e}") from e
        await self.notify(
            "textDocument/didOpen",
            {
                "textDocument": {
                    "uri": uri,
                    "languageId": language_id_for(str(path)),
                    "version": 1,
                    "text": text,
                }
            },
        )
        self._opened.add(uri)

    async def get_document_symbols(self, uri: str) -> List[RawSymbol]:
        await self._ensure_open(uri)
        result = await self.request(DOCUMENT_SYMBOL, {"textDocument": {"uri": uri}})
        return flatten_document_symbols(result)

    async def get_references(self, symbol: Symbol, position: Position) -> List[Reference]:
        await self._ensure_open(symbol.document_uri)
        result = await self.request(
            REFERENCES,
            {
                "textDocument": {"uri": symbol.document_uri},
                "position": {"line": position.line, "character": position.character},
                "context": {"includeDeclaration": False},
            },
        )
        return parse_locations(result)
