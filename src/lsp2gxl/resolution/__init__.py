"""
Reference resolution and the lookup policy applied before references are requested.
"""

from .resolver import ReferenceResolver, rank_candidates
from .policy import (
    is_import_binding,
    reference_lookup_position,
    skip_declaration_keyword,
    split_source_lines,
)
from .config import DECLARATION_KEYWORDS, IMPORT_PATTERNS

__all__ = [
    "ReferenceResolver",
    "rank_candidates",
    "is_import_binding",
    "reference_lookup_position",
    "skip_declaration_keyword",
    "split_source_lines",
    "DECLARATION_KEYWORDS",
    "IMPORT_PATTERNS",
]
