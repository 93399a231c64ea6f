"""
Graph assembly from the symbol store and the resolved references.

Nodes are deduplicated by symbol identity. Enclosing edges wire directories
to their parent directory, documents to their directory, and every other
symbol to its named container or, failing that, to its document.
"""

from typing import Dict, List, Optional, Set, Tuple

from pydantic import ValidationError

from lsp2gxl.diagnostics import DiagnosticCode, DiagnosticLog
from lsp2gxl.exceptions import NodeAttributeError
from lsp2gxl.logging_config import logger
from lsp2gxl.schemas import EdgeType, Graph, GraphEdge, GraphNode, NodeAttributes, ReducedKind, Symbol
from lsp2gxl.symbols import SymbolStore
from lsp2gxl.tracing import trace
from lsp2gxl.uris import uri_to_path
from .identity import graph_id, node_id
from .validation import validate_graph


def build_node(node_id: str, node_type: ReducedKind, name, line, column, path) -> GraphNode:
    """
    Build a node, refusing missing or mistyped attributes.

    Raises:
        NodeAttributeError: If an attribute is None or has the wrong type.
    """
    values = {"name": name, "line": line, "column": column, "path": path}
    for attribute, value in values.items():
        if value is None:
            raise NodeAttributeError(node_id, f"attribute '{attribute}' has no value")
    try:
        attributes = NodeAttributes(**values)
    except ValidationError as e:
        raise NodeAttributeError(node_id, str(e)) from e
    return GraphNode(id=node_id, type=node_type, attributes=attributes)


class GraphBuilder:
    """
    Builds one validated Graph from a populated store and resolver output.
    """

    def __init__(
        self,
        store: SymbolStore,
        references: Dict[Symbol, List[Symbol]],
        diagnostics: Optional[DiagnosticLog] = None,
    ):
        self.store = store
        self.references = references
        self.diagnostics = diagnostics if diagnostics is not None else DiagnosticLog()
        self._nodes: Dict[str, GraphNode] = {}
        self._edges: List[GraphEdge] = []
        self._edge_keys: Set[Tuple[str, str, EdgeType]] = set()
        self._parents: Dict[str, str] = {}

    @trace
    def build(self) -> Graph:
        """
        Assemble and validate the graph.

        Raises:
            NodeAttributeError: If a node cannot be built.
            GraphIntegrityError: If the result has dangling edges or the
                enclosing edges are not a forest.
        """
        self._nodes.clear()
        self._edges.clear()
        self._edge_keys.clear()
        self._parents.clear()

        for _, symbols in self.store.documents():
            for symbol in symbols:
                self._add_node(symbol)

        for uri, symbols in self.store.documents():
            if self.store.is_directory(uri):
                self._wire_directory(uri, symbols)
            else:
                self._wire_document(uri, symbols)

        self._wire_dependencies()

        graph = Graph(
            id=graph_id(self.store.documents(), self.references),
            nodes=list(self._nodes.values()),
            edges=list(self._edges),
        )
        validate_graph(graph)
        logger.info(f"Built graph with {len(graph.nodes)} nodes and {len(graph.edges)} edges")
        return graph

    def _add_node(self, symbol: Symbol) -> None:
        identifier = node_id(symbol)
        if identifier in self._nodes:
            return
        self._nodes[identifier] = build_node(
            identifier,
            symbol.kind,
            name=symbol.name,
            line=symbol.range.start.line,
            column=symbol.range.start.character,
            path=self.store.relative_path(symbol.document_uri),
        )

    def _add_edge(self, from_id: str, to_id: str, edge_type: EdgeType) -> None:
        key = (from_id, to_id, edge_type)
        if key in self._edge_keys:
            return
        self._edge_keys.add(key)
        self._edges.append(GraphEdge(from_id=from_id, to_id=to_id, type=edge_type))

    def _would_cycle(self, child_id: str, parent_id: str) -> bool:
        current = parent_id
        seen = set()
        while current is not None and current not in seen:
            if current == child_id:
                return True
            seen.add(current)
            current = self._parents.get(current)
        return False

    def _add_enclosing(self, child: Symbol, parent: Symbol) -> None:
        child_id = node_id(child)
        if child_id in self._parents:
            return
        parent_id = node_id(parent)
        self._parents[child_id] = parent_id
        self._add_edge(child_id, parent_id, EdgeType.ENCLOSING)

    def _wire_directory(self, uri: str, symbols: List[Symbol]) -> None:
        parent = self.store.parent_directory_of(uri)
        if parent is None:
            return
        for symbol in symbols:
            self._add_enclosing(symbol, parent)

    def _wire_document(self, uri: str, symbols: List[Symbol]) -> None:
        document = self.store.document_symbol_of(uri)
        for symbol in symbols:
            if document is not None and symbol == document:
                self._wire_file(uri, symbol)
                continue
            container = self._find_container(symbol, symbols, document)
            if container is not None:
                self._add_enclosing(symbol, container)

    def _wire_file(self, uri: str, symbol: Symbol) -> None:
        parent_dir = uri_to_path(uri).parent
        if not self.store.is_inside_root(parent_dir):
            return
        parent = self.store.directory_symbol(parent_dir)
        if parent is None:
            self.diagnostics.emit(
                DiagnosticCode.MISSING_PARENT_DIRECTORY,
                f"No parent directory symbol for {symbol.name}",
                uri=uri,
                symbol=symbol.name,
            )
            return
        self._add_enclosing(symbol, parent)

    def _find_container(
        self,
        symbol: Symbol,
        symbols: List[Symbol],
        document: Optional[Symbol],
    ) -> Optional[Symbol]:
        """
        The same-document symbol named by container_name, else the document.

        Among several symbols with the container's name, one whose range
        encloses the symbol is preferred, the smallest first.
        """
        if symbol.container_name:
            symbol_id = node_id(symbol)
            named = [
                candidate for candidate in symbols
                if candidate.name == symbol.container_name and node_id(candidate) != symbol_id
            ]
            enclosing = [
                candidate for candidate in named
                if candidate.range.contains(symbol.range.start) and candidate.range.contains(symbol.range.end)
            ]
            enclosing.sort(key=lambda candidate: candidate.range.span)
            for candidate in enclosing + [c for c in named if c not in enclosing]:
                if not self._would_cycle(symbol_id, node_id(candidate)):
                    return candidate
                self.diagnostics.emit(
                    DiagnosticCode.CONTAINER_CYCLE,
                    f"Container {candidate.name} of {symbol.name} would close an enclosing cycle",
                    uri=symbol.document_uri,
                    symbol=symbol.name,
                )
        return document

    def _wire_dependencies(self) -> None:
        for definition, referencing in self.references.items():
            to_id = node_id(definition)
            if to_id not in self._nodes:
                self.diagnostics.emit(
                    DiagnosticCode.NOT_A_NODE,
                    f"Dropped references to {definition.name}: definition is not a graph node",
                    uri=definition.document_uri,
                    symbol=definition.name,
                )
                continue
            for symbol in referencing:
                from_id = node_id(symbol)
                if from_id not in self._nodes:
                    self.diagnostics.emit(
                        DiagnosticCode.NOT_A_NODE,
                        f"Dropped reference from {symbol.name} to {definition.name}: referencing symbol is not a graph node",
                        uri=symbol.document_uri,
                        symbol=symbol.name,
                    )
                    continue
                self._add_edge(from_id, to_id, EdgeType.DEPENDENCY)
