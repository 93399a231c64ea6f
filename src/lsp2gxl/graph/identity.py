"""
Stable identifiers for nodes and graphs.

Ids are SHA-1 digests of a canonical JSON encoding, so they depend only on
content and never on object identity or run order.
"""

import hashlib
import json
from typing import Any, Dict, Iterable, List, Tuple

from lsp2gxl.schemas import Symbol


def _digest(payload: Any) -> str:
    encoded = json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    return hashlib.sha1(encoded.encode("utf-8")).hexdigest()


def node_id(symbol: Symbol) -> str:
    """Node id for a symbol: a pure function of name, kind, range and document."""
    return _digest(list(symbol.identity))


def graph_id(
    documents: Iterable[Tuple[str, List[Symbol]]],
    references: Dict[Symbol, List[Symbol]],
) -> str:
    """Graph id covering every recorded symbol and every resolved reference."""
    payload = {
        "symbols": [
            [uri, [[*symbol.identity, symbol.container_name] for symbol in symbols]]
            for uri, symbols in documents
        ],
        "references": [
            [node_id(definition), [node_id(symbol) for symbol in referencing]]
            for definition, referencing in references.items()
        ],
    }
    return _digest(payload)
