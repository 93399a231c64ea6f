"""
JSON-RPC 2.0 messages and LSP base-protocol framing.

Messages travel over the language server's stdio, each preceded by a
Content-Length header:

    Content-Length: 52\r\n
    \r\n
    {"jsonrpc":"2.0","id":1,"method":"shutdown"}
"""

import asyncio
import json
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field

from lsp2gxl.exceptions import ProviderError
from lsp2gxl.logging_config import logger

TRANSPORT = "<transport>"
CONTENT_LENGTH = "content-length"


# === JSON-RPC 2.0 Schemas ===

class JSONRPCRequest(BaseModel):
    """
    JSON-RPC 2.0 Request.

    Example:
        {"jsonrpc": "2.0", "method": "textDocument/references", "params": {...}, "id": 7}
    """
    jsonrpc: str = Field(default="2.0", description="JSON-RPC version")
    method: str = Field(..., description="Method name to invoke")
    params: Optional[Union[Dict[str, Any], List[Any]]] = Field(
        default=None,
        description="Method parameters (object or array)"
    )
    id: Union[str, int] = Field(..., description="Request ID")

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


class JSONRPCNotification(BaseModel):
    """
    JSON-RPC 2.0 Notification: a request without an id, never answered.

    Example:
        {"jsonrpc": "2.0", "method": "window/logMessage", "params": {"type": 3, "message": "..."}}
    """
    jsonrpc: str = Field(default="2.0", description="JSON-RPC version")
    method: str = Field(..., description="Method name")
    params: Optional[Union[Dict[str, Any], List[Any]]] = Field(
        default=None,
        description="Method parameters (object or array)"
    )

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


class JSONRPCError(BaseModel):
    """
    JSON-RPC 2.0 Error object.

    Standard error codes:
        -32700: Parse error
        -32600: Invalid Request
        -32601: Method not found
        -32602: Invalid params
        -32603: Internal error
        -32099 to -32000: Server error (LSP reserves some of these)
    """
    code: int = Field(..., description="Error code")
    message: str = Field(..., description="Error message")
    data: Optional[Any] = Field(default=None, description="Additional error data")


class JSONRPCResponse(BaseModel):
    """
    JSON-RPC 2.0 Response.

    Success example:
        {"jsonrpc": "2.0", "result": [...], "id": 1}

    Error example:
        {"jsonrpc": "2.0", "error": {"code": -32601, "message": "Method not found"}, "id": 1}
    """
    jsonrpc: str = Field(default="2.0", description="JSON-RPC version")
    result: Optional[Any] = Field(default=None, description="Result (on success)")
    error: Optional[JSONRPCError] = Field(default=None, description="Error (on failure)")
    id: Optional[Union[str, int]] = Field(default=None, description="Request ID")

    def to_wire(self) -> Dict[str, Any]:
        # A successful response must carry "result" even when it is null.
        payload: Dict[str, Any] = {"jsonrpc": self.jsonrpc, "id": self.id}
        if self.error is not None:
            payload["error"] = self.error.model_dump(exclude_none=True)
        else:
            payload["result"] = self.result
        return payload


# === Error Code Constants ===

class RPCErrorCode:
    """JSON-RPC 2.0 and LSP error codes."""
    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603

    # LSP-defined codes
    SERVER_NOT_INITIALIZED = -32002
    UNKNOWN_ERROR_CODE = -32001
    REQUEST_CANCELLED = -32800
    CONTENT_MODIFIED = -32801


# === Helper Functions ===

def create_success_response(result: Any, request_id: Optional[Union[str, int]]) -> JSONRPCResponse:
    return JSONRPCResponse(
        jsonrpc="2.0",
        result=result,
        id=request_id,
    )


def create_error_response(
    code: int,
    message: str,
    request_id: Optional[Union[str, int]] = None,
    data: Optional[Any] = None,
) -> JSONRPCResponse:
    return JSONRPCResponse(
        jsonrpc="2.0",
        error=JSONRPCError(
            code=code,
            message=message,
            data=data,
        ),
        id=request_id,
    )


def parse_message(data: Any) -> Union[JSONRPCRequest, JSONRPCNotification, JSONRPCResponse]:
    """
    Classify a decoded message as a request, a notification or a response.

    Raises:
        ProviderError: If the payload is not a JSON-RPC message.
    """
    if not isinstance(data, dict):
        raise ProviderError(TRANSPORT, f"Expected a JSON object, got {type(data).__name__}")
    try:
        if "method" in data:
            if data.get("id") is None:
                return JSONRPCNotification(**data)
            return JSONRPCRequest(**data)
        return JSONRPCResponse(**data)
    except Exception as e:
        logger.error(f"Failed to parse JSON-RPC message: {e}")
        raise ProviderError(TRANSPORT, f"Invalid JSON-RPC message: {e}") from e


# === Framing ===

def encode_message(
    message: Union[JSONRPCRequest, JSONRPCNotification, JSONRPCResponse, Dict[str, Any]],
) -> bytes:
    """Serialize a message with its Content-Length header."""
    payload = message if isinstance(message, dict) else message.to_wire()
    body = json.dumps(payload, separators=(",", ":"), ensure_ascii=False).encode("utf-8")
    header = f"Content-Length: {len(body)}\r\n\r\n".encode("ascii")
    return header + body


async def read_message(reader: asyncio.StreamReader) -> Optional[Dict[str, Any]]:
    """
    Read one framed message.

    Returns:
        The decoded JSON payload, or None on a clean end of stream.

    Raises:
        ProviderError: On malformed headers, a truncated body, or invalid JSON.
    """
    headers: Dict[str, str] = {}
    while True:
        line = await reader.readline()
        if not line:
            if headers:
                raise ProviderError(TRANSPORT, "Stream ended inside message headers")
            return None
        line = line.rstrip(b"\r\n")
        if not line:
            if not headers:
                continue
            break
        name, separator, value = line.decode("ascii", errors="replace").partition(":")
        if not separator:
            raise ProviderError(TRANSPORT, f"Malformed header line: {line!r}")
        headers[name.strip().lower()] = value.strip()

    if CONTENT_LENGTH not in headers:
        raise ProviderError(TRANSPORT, "Message without Content-Length header")
    try:
        length = int(headers[CONTENT_LENGTH])
    except ValueError as e:
        raise ProviderError(TRANSPORT, f"Invalid Content-Length: {headers[CONTENT_LENGTH]}") from e

    try:
        body = await reader.readexactly(length)
    except asyncio.IncompleteReadError as e:
        raise ProviderError(TRANSPORT, f"Stream ended after {len(e.partial)} of {length} body bytes") from e

    try:
        return json.loads(body.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ProviderError(TRANSPORT, f"Invalid JSON body: {e}") from e
