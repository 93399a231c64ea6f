"""
Reduction of the provider's symbol kinds to graph node types.

The LSP enumeration is open-ended (servers may send values a client does not
know), so reduce_kind is total: anything without an explicit entry is
excluded.
"""

from enum import IntEnum
from typing import Dict, List, Optional, Tuple

from lsp2gxl.logging_config import logger
from lsp2gxl.schemas import ReducedKind


class SymbolKind(IntEnum):
    """LSP SymbolKind values."""
    FILE = 1
    MODULE = 2
    NAMESPACE = 3
    PACKAGE = 4
    CLASS = 5
    METHOD = 6
    PROPERTY = 7
    FIELD = 8
    CONSTRUCTOR = 9
    ENUM = 10
    INTERFACE = 11
    FUNCTION = 12
    VARIABLE = 13
    CONSTANT = 14
    STRING = 15
    NUMBER = 16
    BOOLEAN = 17
    ARRAY = 18
    OBJECT = 19
    KEY = 20
    NULL = 21
    ENUM_MEMBER = 22
    STRUCT = 23
    EVENT = 24
    OPERATOR = 25
    TYPE_PARAMETER = 26


# None marks an excluded kind. Every SymbolKind member is listed.
KIND_REDUCTION: Dict[SymbolKind, Optional[ReducedKind]] = {
    SymbolKind.FILE: ReducedKind.FILE,
    SymbolKind.MODULE: ReducedKind.FILE,
    SymbolKind.NAMESPACE: None,
    SymbolKind.PACKAGE: None,
    SymbolKind.CLASS: ReducedKind.CLASS,
    SymbolKind.METHOD: ReducedKind.METHOD,
    SymbolKind.PROPERTY: ReducedKind.MEMBER,
    SymbolKind.FIELD: ReducedKind.MEMBER,
    SymbolKind.CONSTRUCTOR: None,
    SymbolKind.ENUM: None,
    SymbolKind.INTERFACE: None,
    SymbolKind.FUNCTION: ReducedKind.ROUTINE,
    SymbolKind.VARIABLE: None,
    SymbolKind.CONSTANT: None,
    SymbolKind.STRING: None,
    SymbolKind.NUMBER: None,
    SymbolKind.BOOLEAN: None,
    SymbolKind.ARRAY: None,
    SymbolKind.OBJECT: None,
    SymbolKind.KEY: None,
    SymbolKind.NULL: None,
    SymbolKind.ENUM_MEMBER: None,
    SymbolKind.STRUCT: None,
    SymbolKind.EVENT: None,
    SymbolKind.OPERATOR: None,
    SymbolKind.TYPE_PARAMETER: None,
}

# Specificity tiers, leaf-most first. Kinds sharing a tier are ordered by range.
KIND_PRECEDENCE: List[Tuple[ReducedKind, ...]] = [
    (ReducedKind.MEMBER, ReducedKind.METHOD, ReducedKind.ROUTINE),
    (ReducedKind.CLASS,),
    (ReducedKind.FILE,),
]

_PRECEDENCE_RANK: Dict[ReducedKind, int] = {
    kind: rank for rank, tier in enumerate(KIND_PRECEDENCE) for kind in tier
}


def reduce_kind(kind: int) -> Optional[ReducedKind]:
    """
    Map a provider symbol kind to a node type.

    Returns:
        The ReducedKind, or None when the kind is excluded from the graph.
    """
    try:
        known = SymbolKind(kind)
    except ValueError:
        logger.debug(f"Unknown provider symbol kind {kind}, excluding")
        return None
    return KIND_REDUCTION[known]


def specificity(kind: ReducedKind) -> int:
    """Tier of kind in KIND_PRECEDENCE; lower is more specific."""
    return _PRECEDENCE_RANK[kind]
