"""
Conversion of LSP responses into the core's flat input models.

textDocument/documentSymbol answers either with SymbolInformation[] (flat,
containerName given by the server) or DocumentSymbol[] (a tree). Trees are
flattened depth-first in document order; a child without a container name
inherits its parent's name.
"""

from typing import Any, Dict, Iterable, List, Optional

from pydantic import ValidationError

from lsp2gxl.exceptions import ProviderError
from lsp2gxl.logging_config import logger
from lsp2gxl.schemas import Range, RawSymbol, Reference

DOCUMENT_SYMBOL = "textDocument/documentSymbol"
REFERENCES = "textDocument/references"


def _range(data: Dict[str, Any], method: str) -> Range:
    try:
        return Range.model_validate(data)
    except ValidationError as e:
        raise ProviderError(method, f"Malformed range {data!r}: {e}") from e


def _raw_symbol(item: Dict[str, Any], **fields: Any) -> RawSymbol:
    try:
        return RawSymbol(name=item.get("name"), kind=item.get("kind"), **fields)
    except ValidationError as e:
        raise ProviderError(DOCUMENT_SYMBOL, f"Malformed symbol entry {item!r}: {e}") from e


def _is_symbol_information(item: Dict[str, Any]) -> bool:
    return "location" in item


def _from_symbol_information(item: Dict[str, Any]) -> RawSymbol:
    location = item.get("location") or {}
    return _raw_symbol(
        item,
        container_name=item.get("containerName") or None,
        range=_range(location.get("range"), DOCUMENT_SYMBOL),
    )


def _flatten_document_symbol(
    item: Dict[str, Any],
    parent_name: Optional[str],
    out: List[RawSymbol],
) -> None:
    if not isinstance(item, dict):
        raise ProviderError(DOCUMENT_SYMBOL, f"Malformed symbol entry: {item!r}")
    selection = item.get("selectionRange")
    out.append(
        _raw_symbol(
            item,
            container_name=item.get("containerName") or parent_name,
            range=_range(item.get("range"), DOCUMENT_SYMBOL),
            selection_range=_range(selection, DOCUMENT_SYMBOL) if selection else None,
        )
    )
    for child in item.get("children") or []:
        _flatten_document_symbol(child, item["name"], out)


def flatten_document_symbols(result: Optional[Iterable[Dict[str, Any]]]) -> List[RawSymbol]:
    """
    Flatten a documentSymbol result into RawSymbols without children.

    Raises:
        ProviderError: If an entry lacks a valid name, kind or range.
    """
    if not result:
        return []
    symbols: List[RawSymbol] = []
    for item in result:
        if not isinstance(item, dict) or "name" not in item or "kind" not in item:
            raise ProviderError(DOCUMENT_SYMBOL, f"Malformed symbol entry: {item!r}")
        if _is_symbol_information(item):
            symbols.append(_from_symbol_information(item))
        else:
            _flatten_document_symbol(item, None, symbols)
    return symbols


def flatten_raw_symbols(raw_symbols: Iterable[RawSymbol]) -> List[RawSymbol]:
    """Flatten RawSymbol trees, as built by in-process providers."""
    flat: List[RawSymbol] = []

    def visit(symbol: RawSymbol, parent_name: Optional[str]) -> None:
        flat.append(
            symbol.model_copy(
                update={
                    "container_name": symbol.container_name or parent_name,
                    "children": [],
                }
            )
        )
        for child in symbol.children:
            visit(child, symbol.name)

    for symbol in raw_symbols:
        visit(symbol, None)
    return flat


def parse_locations(result: Optional[Iterable[Dict[str, Any]]]) -> List[Reference]:
    """
    Convert a references result (Location[]) into References.

    LocationLink entries are accepted too, using their target selection range.
    """
    if not result:
        return []
    references: List[Reference] = []
    for item in result:
        if not isinstance(item, dict):
            raise ProviderError(REFERENCES, f"Malformed location: {item!r}")
        if "targetUri" in item:
            uri = item["targetUri"]
            location_range = item.get("targetSelectionRange") or item.get("targetRange")
        else:
            uri = item.get("uri")
            location_range = item.get("range")
        if not uri or location_range is None:
            raise ProviderError(REFERENCES, f"Malformed location: {item!r}")
        references.append(Reference(target_document_uri=uri, range=_range(location_range, REFERENCES)))
    logger.debug(f"Parsed {len(references)} reference locations")
    return references
