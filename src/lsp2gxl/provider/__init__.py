"""
Code-intelligence providers: the SymbolProvider interface and its
language server implementation.
"""
from .base import SymbolProvider
from .client import LanguageServerClient
from .config import CLIENT_CAPABILITIES, CLIENT_CONFIG, LANGUAGE_IDS, language_id_for
from .flatten import flatten_document_symbols, flatten_raw_symbols, parse_locations
from .protocol import (
    JSONRPCError,
    JSONRPCNotification,
    JSONRPCRequest,
    JSONRPCResponse,
    RPCErrorCode,
    encode_message,
    parse_message,
    read_message,
)

__all__ = [
    "SymbolProvider",
    "LanguageServerClient",
    "CLIENT_CAPABILITIES",
    "CLIENT_CONFIG",
    "LANGUAGE_IDS",
    "language_id_for",
    "flatten_document_symbols",
    "flatten_raw_symbols",
    "parse_locations",
    "JSONRPCError",
    "JSONRPCNotification",
    "JSONRPCRequest",
    "JSONRPCResponse",
    "RPCErrorCode",
    "encode_message",
    "parse_message",
    "read_message",
]
