from typing import Dict, List

from lsp2gxl.exceptions import GraphIntegrityError
from lsp2gxl.schemas import EdgeType, Graph


def find_dangling_edges(graph: Graph) -> List[str]:
    node_ids = {node.id for node in graph.nodes}
    return [
        f"{edge.type.value} edge {edge.from_id} -> {edge.to_id}"
        for edge in graph.edges
        if edge.from_id not in node_ids or edge.to_id not in node_ids
    ]


def find_forest_violations(graph: Graph) -> List[str]:
    """Nodes with several enclosing parents, and enclosing cycles."""
    violations: List[str] = []
    parents: Dict[str, str] = {}
    for edge in graph.edges_of_type(EdgeType.ENCLOSING):
        if edge.from_id in parents:
            violations.append(f"Node {edge.from_id} has more than one enclosing parent")
            continue
        parents[edge.from_id] = edge.to_id

    # Walk each chain once; a chain that revisits a node is a cycle.
    finished = set()
    for start in parents:
        path = []
        on_path = set()
        current = start
        while current in parents and current not in finished:
            if current in on_path:
                violations.append(f"Enclosing cycle through node {current}")
                break
            on_path.add(current)
            path.append(current)
            current = parents[current]
        finished.update(path)
    return violations


def validate_graph(graph: Graph) -> None:
    """
    Check the structural invariants of an assembled graph.

    Raises:
        GraphIntegrityError: If any edge references a node that does not
            exist, or the enclosing edges do not form a forest. Either means
            upstream assembly logic is broken, so the graph must not be
            emitted.
    """
    dangling = find_dangling_edges(graph)
    if dangling:
        raise GraphIntegrityError(
            f"{len(dangling)} edge(s) reference non-existent nodes",
            violations=dangling,
        )
    forest = find_forest_violations(graph)
    if forest:
        raise GraphIntegrityError(
            f"Enclosing edges do not form a forest ({len(forest)} violation(s))",
            violations=forest,
        )
