import os
from pathlib import Path
from typing import Dict, Iterator, Optional, Tuple

from lsp2gxl.schemas import Symbol

Segments = Tuple[str, ...]


class DirectoryTree:
    """
    Directory pseudo-symbols keyed by their path segments relative to the root.

    The root itself is the boundary: it has no entry, and neither does
    anything outside it. A directory's parent is the entry one segment
    shorter, absent for top-level directories.
    """

    def __init__(self, root_path: Path):
        self.root_path = Path(os.path.normpath(root_path))
        self._nodes: Dict[Segments, Symbol] = {}

    def segments_for(self, path: Path) -> Optional[Segments]:
        """
        Relative segments of a directory strictly inside the root.

        Returns None for the root itself and for anything outside it.
        """
        normalized = Path(os.path.normpath(path))
        try:
            relative = normalized.relative_to(self.root_path)
        except ValueError:
            return None
        segments = relative.parts
        return segments or None

    def get(self, segments: Segments) -> Optional[Symbol]:
        return self._nodes.get(segments)

    def add(self, segments: Segments, symbol: Symbol) -> None:
        self._nodes[segments] = symbol

    def parent_of(self, segments: Segments) -> Optional[Symbol]:
        if len(segments) <= 1:
            return None
        return self._nodes.get(segments[:-1])

    def __contains__(self, segments: Segments) -> bool:
        return segments in self._nodes

    def __iter__(self) -> Iterator[Segments]:
        return iter(self._nodes)

    def __len__(self) -> int:
        return len(self._nodes)
