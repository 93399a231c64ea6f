"""
Reference resolution: attribute each raw usage site to the symbol it occurs in.
"""

from typing import Dict, Iterable, List, Optional

from lsp2gxl.diagnostics import DiagnosticCode, DiagnosticLog
from lsp2gxl.logging_config import logger
from lsp2gxl.schemas import Reference, Symbol
from lsp2gxl.symbols import SymbolStore, specificity


def rank_candidates(symbols: Iterable[Symbol]) -> List[Symbol]:
    """
    Order a document's symbols from most to least specific.

    Leaf kinds come before containers. Within a specificity tier the
    smaller range wins, then the one starting later (the more deeply nested
    one); remaining ties keep declaration order.
    """
    return sorted(
        symbols,
        key=lambda symbol: (
            specificity(symbol.kind),
            symbol.range.span,
            -symbol.range.start.line,
            -symbol.range.start.character,
        ),
    )


class ReferenceResolver:
    """
    Maps definitions to the symbols that reference them.

    References are accumulated per definition while files are processed and
    consumed once by resolve(), after every document's symbols are known.
    """

    def __init__(self, store: SymbolStore, diagnostics: Optional[DiagnosticLog] = None):
        self.store = store
        self.diagnostics = diagnostics if diagnostics is not None else DiagnosticLog()
        self._references: Dict[Symbol, List[Reference]] = {}
        self._ranked: Dict[str, List[Symbol]] = {}

    def add_references(self, definition: Symbol, references: Iterable[Reference]) -> None:
        self._references.setdefault(definition, []).extend(references)

    @property
    def pending(self) -> int:
        """Number of definitions with references awaiting resolution."""
        return len(self._references)

    def _ranked_symbols(self, uri: str) -> Optional[List[Symbol]]:
        ranked = self._ranked.get(uri)
        if ranked is None:
            symbols = self.store.get(uri)
            if symbols is None:
                return None
            ranked = rank_candidates(symbols)
            self._ranked[uri] = ranked
        return ranked

    def find_enclosing_symbol(self, reference: Reference, definition: Optional[Symbol] = None) -> Optional[Symbol]:
        """
        The most specific symbol of the referencing document containing the reference start.

        Returns None, with a diagnostic, when the document is unknown or no
        symbol contains the point.
        """
        target = definition.name if definition is not None else None
        candidates = self._ranked_symbols(reference.target_document_uri)
        if candidates is None:
            self.diagnostics.emit(
                DiagnosticCode.UNKNOWN_DOCUMENT,
                f"Reference to {target} is in unknown document {reference.target_document_uri}",
                uri=reference.target_document_uri,
                symbol=target,
            )
            return None

        point = reference.range.start
        for symbol in candidates:
            if symbol.range.contains(point):
                return symbol

        self.diagnostics.emit(
            DiagnosticCode.NOT_WITHIN_SYMBOL,
            f"Reference to {target} at {point.line}:{point.character} was not within any known symbol",
            uri=reference.target_document_uri,
            symbol=target,
        )
        return None

    def resolve(self) -> Dict[Symbol, List[Symbol]]:
        """
        Resolve every accumulated reference.

        Returns:
            Definition -> referencing symbols, in definition insertion order.
            Duplicates are kept; edges are deduplicated by the graph builder.
        """
        self._ranked.clear()
        resolved: Dict[Symbol, List[Symbol]] = {}
        for definition, references in self._references.items():
            referencing: List[Symbol] = []
            for reference in references:
                symbol = self.find_enclosing_symbol(reference, definition)
                if symbol is None:
                    continue
                logger.debug(f"Mapped reference from {symbol.name} to {definition.name}")
                referencing.append(symbol)
            resolved[definition] = referencing

        total = sum(len(symbols) for symbols in resolved.values())
        logger.info(f"Resolved {total} references for {len(resolved)} definitions")
        self._references.clear()
        return resolved
