# Custom exceptions for lsp2gxl

class Lsp2GxlError(Exception):
    """Base exception for all application-specific errors."""
    pass

class ConfigError(Lsp2GxlError):
    """Raised for configuration-related problems."""
    pass

class ProviderError(Lsp2GxlError):
    """Raised when the language server fails, answers with an error, or breaks the protocol."""
    def __init__(self, method: str, message: str, code: int = None):
        self.method = method
        self.message = message
        self.code = code
        detail = f" (code {code})" if code is not None else ""
        super().__init__(f"Provider request '{method}' failed{detail}: {message}")

class GraphIntegrityError(Lsp2GxlError):
    """Raised when the assembled graph violates a structural invariant."""
    def __init__(self, message: str, violations: list = None):
        self.violations = violations or []
        super().__init__(message)

class NodeAttributeError(Lsp2GxlError):
    """Raised when a graph node cannot be built because an attribute is missing or malformed."""
    def __init__(self, node_id: str, message: str):
        self.node_id = node_id
        self.message = message
        super().__init__(f"Invalid attributes for node {node_id}: {message}")

class GxlSerializationError(Lsp2GxlError):
    """Raised when a value cannot be represented in the GXL document."""
    pass
