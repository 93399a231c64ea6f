"""
lsp2gxl - Language server symbols to GXL dependency graphs

Queries a language server for the symbols and references of a workspace and
exports directories, files, classes, members and their usages as a typed
graph in the GXL exchange format.
"""

__version__ = "0.3.0"

# Core exports
from lsp2gxl.diagnostics import Diagnostic, DiagnosticCode, DiagnosticLog
from lsp2gxl.graph import GraphBuilder, validate_graph
from lsp2gxl.gxl import to_gxl, write_gxl
from lsp2gxl.pipeline import index_files, index_workspace, run_index
from lsp2gxl.provider import LanguageServerClient, SymbolProvider
from lsp2gxl.schemas import Graph, IndexSummary, RawSymbol, Reference, Symbol

__all__ = [
    "__version__",
    "Diagnostic",
    "DiagnosticCode",
    "DiagnosticLog",
    "GraphBuilder",
    "validate_graph",
    "to_gxl",
    "write_gxl",
    "index_files",
    "index_workspace",
    "run_index",
    "LanguageServerClient",
    "SymbolProvider",
    "Graph",
    "IndexSummary",
    "RawSymbol",
    "Reference",
    "Symbol",
]
