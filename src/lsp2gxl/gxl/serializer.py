"""
GXL rendering of a validated graph.

Rendering is a pure function of the Graph value. Each node is followed by
its outgoing edges, sorted by edge type and target; attributes keep a fixed
order.
"""

import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Dict, List, Tuple, Union

from lsp2gxl.exceptions import GxlSerializationError
from lsp2gxl.graph import validate_graph
from lsp2gxl.logging_config import logger
from lsp2gxl.schemas import Graph, GraphEdge, GraphNode

XLINK_NS = "http://www.w3.org/1999/xlink"
XML_DECLARATION = '<?xml version="1.0" encoding="utf-8"?>\n'

ET.register_namespace("xlink", XLINK_NS)


def _node_attributes(node: GraphNode) -> List[Tuple[str, Union[str, int]]]:
    attributes = node.attributes
    return [
        ("Source.Name", attributes.name),
        ("Source.Line", attributes.line),
        ("Source.Column", attributes.column),
        ("Source.Path", attributes.path),
    ]


def _type_element(parent: ET.Element, type_name: str) -> ET.Element:
    return ET.SubElement(parent, "type", {f"{{{XLINK_NS}}}href": type_name})


def _attr_element(parent: ET.Element, name: str, value: Union[str, int]) -> ET.Element:
    if isinstance(value, bool):
        raise GxlSerializationError(f"Attribute {name} has unsupported boolean value")
    if isinstance(value, int):
        value_type = "int"
    elif isinstance(value, str):
        value_type = "string"
    else:
        raise GxlSerializationError(f"Attribute {name} has unsupported type {type(value).__name__}")
    attr = ET.SubElement(parent, "attr", {"name": name})
    ET.SubElement(attr, value_type).text = str(value)
    return attr


def _edges_by_source(graph: Graph) -> Dict[str, List[GraphEdge]]:
    grouped: Dict[str, List[GraphEdge]] = {}
    for edge in graph.edges:
        grouped.setdefault(edge.from_id, []).append(edge)
    for edges in grouped.values():
        edges.sort(key=lambda edge: (edge.type.value, edge.to_id))
    return grouped


def build_gxl_tree(graph: Graph) -> ET.Element:
    """The <gxl> element for a graph."""
    validate_graph(graph)
    root = ET.Element("gxl")
    graph_element = ET.SubElement(root, "graph", {"id": graph.id})
    outgoing = _edges_by_source(graph)

    for node in graph.nodes:
        node_element = ET.SubElement(graph_element, "node", {"id": node.id})
        _type_element(node_element, node.type.value)
        for name, value in _node_attributes(node):
            _attr_element(node_element, name, value)
        for edge in outgoing.get(node.id, []):
            edge_element = ET.SubElement(graph_element, "edge", {"from": edge.from_id, "to": edge.to_id})
            _type_element(edge_element, edge.type.value)

    return root


def to_gxl(graph: Graph) -> str:
    """
    Render a graph as a GXL document.

    Raises:
        GraphIntegrityError: If the graph has dangling edges.
        GxlSerializationError: If an attribute value cannot be represented.
    """
    root = build_gxl_tree(graph)
    ET.indent(root, space="  ")
    return XML_DECLARATION + ET.tostring(root, encoding="unicode") + "\n"


def write_gxl(graph: Graph, path: Path) -> Path:
    """Render a graph and write it to disk as UTF-8."""
    document = to_gxl(graph)
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(document, encoding="utf-8")
    logger.info(f"Wrote GXL with {len(graph.nodes)} nodes and {len(graph.edges)} edges to {path}")
    return path
