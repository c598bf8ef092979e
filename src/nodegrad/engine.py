from __future__ import annotations

import logging

from nodegrad.node import Node, local_backward

logger = logging.getLogger(__name__)


def topological_sort(root: Node) -> list[Node]:
    """
    Performs a topological sort of the computational graph using depth-first search.

    Traverses the graph starting from the root and builds an ordering where every
    node appears after all of its parents. Parents are visited in the order they
    were recorded, so the result is deterministic. The traversal keeps its own
    stack instead of recursing, which keeps long chains (e.g. a sum over a few
    hundred parameters) clear of the interpreter's recursion limit.

    Args:
        root: The node to start the traversal from.

    Returns:
        A list of every distinct node reachable from root, each exactly once, in
        topological order. The root is always the last element.
    """
    arena = root.arena
    topo_ordering: list[Node] = []

    # Keyed by arena index, so a node reached through several paths is seen once.
    visited: set[int] = {root.index}
    stack = [(root.index, iter(arena._parents[root.index]))]

    while stack:
        index, parents = stack[-1]
        for parent in parents:
            if parent not in visited:
                visited.add(parent)
                stack.append((parent, iter(arena._parents[parent])))
                break
        else:
            # All parents are placed; the node itself can follow them.
            stack.pop()
            topo_ordering.append(Node(arena, index))

    return topo_ordering


def collect_nodes(root: Node) -> set[Node]:
    """
    Collects all nodes in the computational graph starting from the root.

    Returns:
        A set of all nodes in the graph.
    """
    return set(topological_sort(root))


def zero_grad(root: Node) -> None:
    """Reset the gradient of every node reachable from root to 0.0."""
    for node in collect_nodes(root):
        node.grad = 0.0


def backward(root: Node) -> None:
    """
    Performs backward propagation to compute gradients for all nodes.

    The backpropagation process:
    1. Get a topological ordering of all nodes reachable from the root.
    2. Initialize the root's gradient to 1.0 (d(root)/d(root) = 1).
    3. Traverse the nodes in reverse order (root first, leaves last) and apply
       each node's local backward rule to push its gradient into its parents.

    A node only runs after every node that consumed it, so its gradient is
    complete by the time it is propagated further. Existing gradients are not
    reset. Only the root is re-seeded to 1.0; intermediate nodes keep the
    gradient left by an earlier pass and propagate it again, so repeated calls
    without zero_grad compound rather than add one d(root)/d(x) each time.

    Args:
        root: The node to differentiate.
    """
    topo_order = topological_sort(root)
    logger.debug("backward from %r over %d nodes", root, len(topo_order))

    root.grad = 1.0

    for node in reversed(topo_order):
        local_backward(node)
