from __future__ import annotations

from enum import Enum
from numbers import Real


class Op(Enum):
    """
    Kind of operation that produced a node.

    The value of each member is the symbol shown for it when the graph is drawn.
    """

    LEAF = ""
    ADD = "+"
    MUL = "*"


class NodeArena:
    """
    Owning pool for the nodes of a computational graph.

    Every node lives in a set of parallel slots (data, grad, op, parents, label)
    addressed by a stable integer index. Parent edges record indices rather than
    objects, so a node that feeds many consumers is stored once and stays alive
    until the arena is truncated below it or dropped.
    """

    def __init__(self) -> None:
        self._data: list[float] = []
        self._grads: list[float] = []
        self._ops: list[Op] = []
        self._parents: list[tuple[int, ...]] = []
        self._labels: list[str] = []

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"NodeArena(size={len(self)})"

    def _append(
        self, data: float, op: Op, parents: tuple[int, ...], label: str
    ) -> Node:
        self._data.append(data)
        self._grads.append(0.0)
        self._ops.append(op)
        self._parents.append(parents)
        self._labels.append(label)
        return Node(self, len(self._data) - 1)

    def leaf(self, value: float, label: str = "") -> Node:
        """
        Create a node with no parents (an input, parameter or constant).

        Args:
            value: The numerical value stored in the node.
            label: Human-readable label for visualization purposes.

        Returns:
            A handle to the new leaf node, with a gradient of 0.0.
        """
        return self._append(_to_float(value), Op.LEAF, (), label)

    def truncate(self, mark: int) -> None:
        """
        Drop every node created after a mark.

        Take the mark with len(arena) before building a transient graph (a
        forward pass and its loss), then truncate back to it once the backward
        pass is done. Nodes below the mark, such as module parameters, keep
        their values and gradients. A node only ever references earlier nodes,
        so the kept part is still a complete graph.

        Handles to nodes at or above the mark become invalid and must not be
        used afterwards.

        Args:
            mark: Number of nodes to keep; a value previously read from len(arena).
        """
        if not 0 <= mark <= len(self):
            raise ValueError(f"mark must be between 0 and {len(self)}, got {mark}")
        del self._data[mark:]
        del self._grads[mark:]
        del self._ops[mark:]
        del self._parents[mark:]
        del self._labels[mark:]


_DEFAULT_ARENA = NodeArena()


def default_arena() -> NodeArena:
    """Return the arena used when no arena is given explicitly."""
    return _DEFAULT_ARENA


class Node:
    """
    Handle to a single scalar node stored in a NodeArena.

    A node carries a value (data), a gradient slot (grad) and, unless it is a
    leaf, the two parent nodes and the operation that produced it. Two handles
    are equal only when they point at the same slot of the same arena; nodes
    holding equal values are still different nodes.
    """

    __slots__ = ("arena", "index")

    def __init__(self, arena: NodeArena, index: int) -> None:
        self.arena = arena
        self.index = index

    @property
    def data(self) -> float:
        return self.arena._data[self.index]

    @data.setter
    def data(self, value: float) -> None:
        self.arena._data[self.index] = _to_float(value)

    @property
    def grad(self) -> float:
        return self.arena._grads[self.index]

    @grad.setter
    def grad(self, value: float) -> None:
        self.arena._grads[self.index] = _to_float(value)

    @property
    def label(self) -> str:
        return self.arena._labels[self.index]

    @label.setter
    def label(self, value: str) -> None:
        self.arena._labels[self.index] = value

    @property
    def op(self) -> Op:
        return self.arena._ops[self.index]

    @property
    def parents(self) -> tuple[Node, ...]:
        """The operands that produced this node, in the order they were given."""
        return tuple(Node(self.arena, i) for i in self.arena._parents[self.index])

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Node):
            return NotImplemented
        return self.arena is other.arena and self.index == other.index

    def __hash__(self) -> int:
        return hash((id(self.arena), self.index))

    def __repr__(self) -> str:
        return f"Node(data={self.data}, grad={self.grad})"

    def __add__(self, other: Node | float) -> Node:
        return add(self, other)

    def __radd__(self, other: float) -> Node:
        return add(other, self)

    def __mul__(self, other: Node | float) -> Node:
        return multiply(self, other)

    def __rmul__(self, other: float) -> Node:
        return multiply(other, self)

    def backward(self, visualize: bool = False) -> None:
        """
        Run backward propagation from this node.

        Seeds this node's gradient to 1.0 and accumulates gradients into every
        node it depends on. Gradients are not reset first: intermediate nodes keep
        what an earlier pass left in them, so calling this twice without zeroing
        compounds the gradients (see engine.backward).

        Args:
            visualize: If True, renders the graph before and after backpropagation
                       using graphviz.
        """
        from nodegrad.engine import backward

        if visualize:
            from nodegrad.graph import render_graph

            render_graph(self, "graph-before-backprop", view=True)

        backward(self)

        if visualize:
            render_graph(self, "graph-after-backprop", view=True)


def _to_float(value: object) -> float:
    if isinstance(value, bool) or not isinstance(value, Real):
        raise TypeError(f"node values must be real numbers, got {type(value).__name__}")
    return float(value)


def _operands(a: Node | float, b: Node | float) -> tuple[Node, Node]:
    """Resolve both operands to nodes living in one arena."""
    if isinstance(a, Node):
        arena = a.arena
    elif isinstance(b, Node):
        arena = b.arena
    else:
        arena = _DEFAULT_ARENA

    # Plain numbers become constant leaves next to the other operand.
    if not isinstance(a, Node):
        a = arena.leaf(a)
    if not isinstance(b, Node):
        b = arena.leaf(b)

    if a.arena is not b.arena:
        raise ValueError("cannot combine nodes from different arenas")
    return a, b


def leaf(value: float, label: str = "", arena: NodeArena | None = None) -> Node:
    """
    Create a leaf node.

    Args:
        value: The numerical value stored in the node.
        label: Human-readable label for visualization purposes.
        arena: Arena that owns the node. Defaults to the shared default arena.

    Returns:
        A new node with no parents and a gradient of 0.0.
    """
    if arena is None:
        arena = _DEFAULT_ARENA
    return arena.leaf(value, label)


def add(a: Node | float, b: Node | float) -> Node:
    """
    Create a node holding the sum of two nodes.

    The operands are only read. The derivative of a sum with respect to each
    operand is 1, so during backward propagation each one receives the full
    gradient of the result.

    Args:
        a: The left operand.
        b: The right operand.

    Returns:
        A new node with parents (a, b) and operation Op.ADD.
    """
    a, b = _operands(a, b)
    return a.arena._append(a.data + b.data, Op.ADD, (a.index, b.index), "")


def multiply(a: Node | float, b: Node | float) -> Node:
    """
    Create a node holding the product of two nodes.

    During backward propagation each operand receives the gradient of the
    result scaled by the value of the other operand (d(ab)/da = b, d(ab)/db = a).

    Args:
        a: The left operand.
        b: The right operand.

    Returns:
        A new node with parents (a, b) and operation Op.MUL.
    """
    a, b = _operands(a, b)
    return a.arena._append(a.data * b.data, Op.MUL, (a.index, b.index), "")


def local_backward(node: Node) -> None:
    """
    Add the local gradient contribution of a node into its parents.

    Reads the node's current gradient and applies the chain rule for the
    operation recorded on it. Contributions are accumulated with += so a parent
    used by several consumers receives the sum of all of them. Leaves have no
    parents and are left untouched.

    Args:
        node: The node whose gradient is propagated one step backward.
    """
    arena = node.arena
    op = arena._ops[node.index]
    if op is Op.LEAF:
        return

    a, b = arena._parents[node.index]
    out_grad = arena._grads[node.index]

    if op is Op.ADD:
        arena._grads[a] += out_grad
        arena._grads[b] += out_grad
    elif op is Op.MUL:
        # Read both values first; a and b may be the same node (x * x).
        a_data = arena._data[a]
        b_data = arena._data[b]
        arena._grads[a] += b_data * out_grad
        arena._grads[b] += a_data * out_grad
    else:
        raise ValueError(f"unsupported operation: {op!r}")
