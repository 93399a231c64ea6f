from enum import Enum
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class ReducedKind(str, Enum):
    """
    Node types of the exchange graph.

    Every provider symbol kind collapses into one of these or is excluded.
    """
    FILE = "File"
    CLASS = "Class"
    MEMBER = "Member"
    METHOD = "Method"
    ROUTINE = "Routine"


class EdgeType(str, Enum):
    ENCLOSING = "Enclosing"
    DEPENDENCY = "Source_Dependency"


class Position(BaseModel):
    """
    A zero-based line/character location, LSP convention.
    """
    model_config = ConfigDict(frozen=True)

    line: int = Field(..., ge=0)
    character: int = Field(..., ge=0)

    def key(self) -> Tuple[int, int]:
        return (self.line, self.character)


class Range(BaseModel):
    model_config = ConfigDict(frozen=True)

    start: Position
    end: Position

    @classmethod
    def of(cls, start_line: int, start_character: int, end_line: int, end_character: int) -> "Range":
        return cls(
            start=Position(line=start_line, character=start_character),
            end=Position(line=end_line, character=end_character),
        )

    def contains(self, position: Position) -> bool:
        """Inclusive 2D containment, comparing line first then character."""
        return self.start.key() <= position.key() <= self.end.key()

    @property
    def span(self) -> Tuple[int, int]:
        return (self.end.line - self.start.line, self.end.character - self.start.character)


ZERO_RANGE = Range.of(0, 0, 0, 0)


class RawSymbol(BaseModel):
    """
    A symbol as reported by the provider, before kind reduction.

    kind is the provider's numeric symbol kind. children is only populated
    by hierarchical providers and is flattened before the core sees it.
    """
    name: str
    kind: int
    container_name: Optional[str] = None
    range: Range
    selection_range: Optional[Range] = None
    children: List["RawSymbol"] = Field(default_factory=list)


RawSymbol.model_rebuild()


class Symbol(BaseModel):
    """
    A reduced symbol owned by one document (or one directory, for pseudo-symbols).

    container_name is a weak back-reference by name, not ownership.
    """
    model_config = ConfigDict(frozen=True)

    name: str
    kind: ReducedKind
    container_name: Optional[str] = None
    range: Range
    selection_range: Optional[Range] = None
    document_uri: str

    @property
    def identity(self) -> Tuple[str, str, Tuple[int, int, int, int], str]:
        return (
            self.name,
            self.kind.value,
            (self.range.start.line, self.range.start.character, self.range.end.line, self.range.end.character),
            self.document_uri,
        )

    @property
    def declaration_position(self) -> Position:
        """Where the symbol's name is declared, used to request its references."""
        return (self.selection_range or self.range).start


class Reference(BaseModel):
    """
    A raw usage site. The definition it points at is the key it is stored under.
    """
    model_config = ConfigDict(frozen=True)

    target_document_uri: str
    range: Range


class NodeAttributes(BaseModel):
    model_config = ConfigDict(frozen=True, strict=True)

    name: str
    line: int = Field(..., ge=0)
    column: int = Field(..., ge=0)
    path: str


class GraphNode(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    type: ReducedKind
    attributes: NodeAttributes


class GraphEdge(BaseModel):
    model_config = ConfigDict(frozen=True)

    from_id: str
    to_id: str
    type: EdgeType


class Graph(BaseModel):
    """
    The validated node/edge lists handed to the serializer.
    """
    id: str
    nodes: List[GraphNode] = Field(default_factory=list)
    edges: List[GraphEdge] = Field(default_factory=list)

    def edges_of_type(self, edge_type: EdgeType) -> List[GraphEdge]:
        return [edge for edge in self.edges if edge.type == edge_type]


class IndexSummary(BaseModel):
    """
    Outcome of one indexing run, as reported by the CLI.
    """
    root_path: str
    out_file: str
    total_files: int
    total_nodes: int
    total_edges: int
    nodes_by_type: Dict[str, int] = Field(default_factory=dict)
    edges_by_type: Dict[str, int] = Field(default_factory=dict)
    diagnostics: Dict[str, int] = Field(default_factory=dict)
    duration: float = 0.0
