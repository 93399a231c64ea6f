"""
Configuration for the language server client.
"""

import os

# === Client Configuration ===
CLIENT_CONFIG = {
    "request_timeout": None,  # Seconds per request, None waits indefinitely
    "shutdown_timeout": 5.0,  # Seconds to wait for the server to exit after "exit"
    "open_documents": True,  # Send textDocument/didOpen before the first request on a document
    "encoding": "utf-8",
}

# === Language identifiers for textDocument/didOpen, by file extension ===
LANGUAGE_IDS = {
    ".py": "python",
    ".pyi": "python",
    ".js": "javascript",
    ".jsx": "javascriptreact",
    ".ts": "typescript",
    ".tsx": "typescriptreact",
    ".go": "go",
    ".rs": "rust",
    ".java": "java",
    ".kt": "kotlin",
    ".c": "c",
    ".h": "c",
    ".cc": "cpp",
    ".cpp": "cpp",
    ".hpp": "cpp",
    ".cs": "csharp",
    ".rb": "ruby",
    ".php": "php",
    ".lua": "lua",
}

DEFAULT_LANGUAGE_ID = "plaintext"

# === Capabilities announced in the initialize request ===
CLIENT_CAPABILITIES = {
    "textDocument": {
        "documentSymbol": {
            "hierarchicalDocumentSymbolSupport": True,
            "symbolKind": {"valueSet": list(range(1, 27))},
        },
        "references": {"dynamicRegistration": False},
        "synchronization": {"didSave": False, "dynamicRegistration": False},
    },
    "workspace": {"workspaceFolders": False, "configuration": False},
    "window": {"workDoneProgress": False},
}


# === Server-to-client requests answered with an empty result ===
# workspace/configuration gets one null per requested item; anything not
# listed here is answered with MethodNotFound.
SUPPORTED_SERVER_REQUESTS = {
    "workspace/configuration",
    "client/registerCapability",
    "client/unregisterCapability",
    "window/workDoneProgress/create",
    "window/showMessageRequest",
}


def language_id_for(path: str) -> str:
    """The LSP language identifier for a file, by extension."""
    _, extension = os.path.splitext(path)
    return LANGUAGE_IDS.get(extension.lower(), DEFAULT_LANGUAGE_ID)
