from __future__ import annotations

import logging
import re

import graphviz
from graphviz import Digraph

from nodegrad.constants import GRAPH_FORMAT, GRAPH_RANKDIR
from nodegrad.node import Node

logger = logging.getLogger(__name__)

_RECORD_SPECIAL = re.compile(r"([{}|<>])")


def _escape_record(text: str) -> str:
    """Backslash-escape the characters that structure a graphviz record label."""
    return _RECORD_SPECIAL.sub(r"\\\1", text)


def collect_nodes_and_edges(root: Node) -> tuple[set[Node], set[tuple[Node, Node]]]:
    """
    Traverses the computational graph starting from the root node.

    Collects all nodes and edges in the graph by visiting each node and its
    parents. Returns the complete set of nodes and edges for visualization
    purposes.

    Args:
        root: The root node of the computational graph.

    Returns:
        A tuple containing:
        - nodes: Set of all nodes in the graph.
        - edges: Set of tuples (parent_node, node), one per operand edge.
    """
    nodes: set[Node] = set()
    edges: set[tuple[Node, Node]] = set()

    stack = [root]
    while stack:
        node = stack.pop()
        if node in nodes:
            continue
        nodes.add(node)
        for parent_node in node.parents:
            # Edge direction: operand -> result.
            edges.add((parent_node, node))
            stack.append(parent_node)

    return nodes, edges


def draw_graph(root: Node) -> Digraph:
    """
    Visualizes the computational graph using Graphviz.

    Each node is drawn as a record showing its label, value and gradient. Nodes
    produced by an operation get an extra small node for the operation symbol,
    which their operands point into.

    Args:
        root: The root node of the computational graph to visualize.

    Returns:
        A Digraph object representing the computational graph.
    """
    graph = Digraph(format=GRAPH_FORMAT, graph_attr={"rankdir": GRAPH_RANKDIR})

    nodes, edges = collect_nodes_and_edges(root)

    # Sorted by index so the generated source is stable between runs.
    for node in sorted(nodes, key=lambda n: n.index):
        node_id = str(node.index)
        graph.node(
            name=node_id,
            label=f"{{ {_escape_record(node.label)} | data {node.data:.4f} | grad {node.grad:.4f} }}",
            shape="record",
        )

        if node.op.value:
            op_node_id = node_id + node.op.value
            graph.node(name=op_node_id, label=node.op.value)
            graph.edge(op_node_id, node_id)

    for parent_node, node in sorted(edges, key=lambda e: (e[1].index, e[0].index)):
        graph.edge(str(parent_node.index), str(node.index) + node.op.value)

    return graph


def render_graph(root: Node, filename: str, view: bool = False) -> str | None:
    """
    Draw the graph rooted at root and render it to a file.

    Args:
        root: The root node of the computational graph.
        filename: Output path without extension.
        view: If True, opens the rendered file with the default viewer.

    Returns:
        The path of the rendered file, or None when the Graphviz executable
        is not installed.
    """
    graph = draw_graph(root)
    try:
        return graph.render(filename, view=view)
    except graphviz.ExecutableNotFound:
        logger.warning("graphviz executable not found, skipping render of %s", filename)
        return None
