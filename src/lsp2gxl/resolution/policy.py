"""
Lookup policy applied before references to a definition are requested.

Some providers report a definition at the start of its declaration header,
so asking for references at that position would return the header itself
as a usage. The lookup position is moved onto the declared name instead.
"""

import re
from typing import List, Optional, Sequence

from lsp2gxl.schemas import Position, Symbol
from .config import DECLARATION_KEYWORDS, IMPORT_PATTERNS

_IMPORT_RES = [re.compile(pattern) for pattern in IMPORT_PATTERNS]
_KEYWORD_RES = [re.compile(re.escape(keyword) + r"\s+") for keyword in DECLARATION_KEYWORDS]


def is_import_binding(line_text: str) -> bool:
    return any(pattern.search(line_text) for pattern in _IMPORT_RES)


def skip_declaration_keyword(position: Position, line_text: str) -> Position:
    """
    Advance past a declaration keyword and its trailing whitespace.

    "def foo():" at column 0 becomes column 4. Positions not followed by a
    keyword are returned unchanged.
    """
    rest = line_text[position.character:]
    for keyword_re in _KEYWORD_RES:
        match = keyword_re.match(rest)
        if match:
            return Position(line=position.line, character=position.character + match.end())
    return position


def reference_lookup_position(symbol: Symbol, source_lines: Sequence[str]) -> Optional[Position]:
    """
    Position at which to ask the provider for references to a definition.

    Returns:
        None when the definition is an import binding, otherwise the
        declaration position with any leading keyword skipped.
    """
    position = symbol.declaration_position
    line_text = source_lines[position.line] if position.line < len(source_lines) else ""
    if is_import_binding(line_text):
        return None
    return skip_declaration_keyword(position, line_text)


def split_source_lines(content: str) -> List[str]:
    """Lines as the provider counts them (LF separated, CR stripped)."""
    return [line.rstrip("\r") for line in content.split("\n")]
