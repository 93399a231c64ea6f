import os
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from lsp2gxl.logging_config import logger
from lsp2gxl.schemas import RawSymbol, ReducedKind, Symbol, ZERO_RANGE
from lsp2gxl.uris import path_to_uri, uri_to_path
from .kinds import reduce_kind
from .tree import DirectoryTree, Segments


def reduce_symbols(raw_symbols: Iterable[RawSymbol], uri: str) -> List[Symbol]:
    """
    Reduce a document's flat provider symbols, dropping excluded kinds.

    Document order is preserved.
    """
    reduced: List[Symbol] = []
    for raw in raw_symbols:
        kind = reduce_kind(raw.kind)
        if kind is None:
            continue
        reduced.append(
            Symbol(
                name=raw.name,
                kind=kind,
                container_name=raw.container_name,
                range=raw.range,
                selection_range=raw.selection_range,
                document_uri=uri,
            )
        )
    return reduced


class SymbolStore:
    """
    Reduced symbols per document URI, plus the synthesized directory hierarchy.

    Directory pseudo-symbols are recorded under their own directory URI, so
    documents() yields directories and source documents alike.
    """

    def __init__(self, root_path: Path):
        self.root_path = Path(os.path.normpath(root_path))
        self._symbols: Dict[str, List[Symbol]] = {}
        self._document_symbols: Dict[str, Symbol] = {}
        self._directories = DirectoryTree(self.root_path)
        self._directory_segments: Dict[str, Segments] = {}

    def record(self, uri: str, symbols: Iterable[Symbol]) -> None:
        """Store the reduced symbol list for a document, replacing any previous one."""
        self._symbols[uri] = list(symbols)

    def get(self, uri: str) -> Optional[List[Symbol]]:
        return self._symbols.get(uri)

    def documents(self) -> Iterator[Tuple[str, List[Symbol]]]:
        return iter(self._symbols.items())

    def __contains__(self, uri: str) -> bool:
        return uri in self._symbols

    def __len__(self) -> int:
        return len(self._symbols)

    def relative_path(self, uri: str) -> str:
        return os.path.relpath(uri_to_path(uri), self.root_path)

    def ensure_ancestor_chain(self, file_path: Path) -> List[Symbol]:
        """
        Create pseudo-symbols for every ancestor directory strictly inside the root.

        Walks upward from the file's parent and stops at the first ancestor
        at or outside the root. Directories seen before are left untouched.

        Returns:
            The pseudo-symbols created by this call, innermost first.
        """
        created: List[Symbol] = []
        for directory in Path(os.path.normpath(file_path)).parents:
            segments = self._directories.segments_for(directory)
            if segments is None:
                break
            if segments in self._directories:
                continue
            uri = path_to_uri(directory)
            symbol = Symbol(
                name=directory.name,
                kind=ReducedKind.FILE,
                container_name=directory.parent.name,
                range=ZERO_RANGE,
                document_uri=uri,
            )
            self._directories.add(segments, symbol)
            self._directory_segments[uri] = segments
            self.record(uri, [symbol])
            created.append(symbol)
            logger.debug(f"Added directory symbol for '{os.sep.join(segments)}'")
        return created

    def document_symbol(self, file_path: Path) -> Symbol:
        """
        The File-kind symbol standing for a document itself.

        Named by its path relative to the root; its container is the relative
        path of its parent directory, or None directly under the root.
        """
        file_path = Path(os.path.normpath(file_path))
        uri = path_to_uri(file_path)
        existing = self._document_symbols.get(uri)
        if existing is not None:
            return existing
        relative = os.path.relpath(file_path, self.root_path)
        parent = os.path.dirname(relative)
        symbol = Symbol(
            name=relative,
            kind=ReducedKind.FILE,
            container_name=parent or None,
            range=ZERO_RANGE,
            document_uri=uri,
        )
        self._document_symbols[uri] = symbol
        return symbol

    def document_symbol_of(self, uri: str) -> Optional[Symbol]:
        return self._document_symbols.get(uri)

    def is_directory(self, uri: str) -> bool:
        return uri in self._directory_segments

    def directory_symbol(self, directory: Path) -> Optional[Symbol]:
        segments = self._directories.segments_for(directory)
        if segments is None:
            return None
        return self._directories.get(segments)

    def is_inside_root(self, directory: Path) -> bool:
        """True when the directory lies strictly inside the root."""
        return self._directories.segments_for(directory) is not None

    def parent_directory_of(self, directory_uri: str) -> Optional[Symbol]:
        """The enclosing pseudo-symbol of a directory, None for top-level directories."""
        segments = self._directory_segments.get(directory_uri)
        if segments is None:
            return None
        return self._directories.parent_of(segments)
