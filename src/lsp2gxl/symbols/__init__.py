"""
Symbol store: reduced symbols per document and the directory hierarchy.

Other parts of the application import from here, not from the internal
modules.
"""
from .kinds import KIND_PRECEDENCE, KIND_REDUCTION, SymbolKind, reduce_kind, specificity
from .store import SymbolStore, reduce_symbols
from .tree import DirectoryTree

__all__ = [
    "KIND_PRECEDENCE",
    "KIND_REDUCTION",
    "SymbolKind",
    "reduce_kind",
    "specificity",
    "SymbolStore",
    "reduce_symbols",
    "DirectoryTree",
]
