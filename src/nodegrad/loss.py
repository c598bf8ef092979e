from __future__ import annotations

import logging
from collections.abc import Sequence
from functools import reduce

from nodegrad.constants import ALPHA
from nodegrad.nn import Module
from nodegrad.node import Node, NodeArena, add, multiply

logger = logging.getLogger(__name__)


def _single_output(out: Node | Sequence[Node]) -> Node:
    if isinstance(out, Node):
        return out
    if len(out) != 1:
        raise ValueError(f"the loss needs one score per example, model returned {len(out)}")
    return out[0]


def _sum(nodes: list[Node], arena: NodeArena) -> Node:
    if not nodes:
        return arena.leaf(0.0)
    return reduce(add, nodes)


def max_margin_loss(
    model: Module,
    X: Sequence[Sequence[Node | float]],
    y: Sequence[int],
    alpha: float = ALPHA,
    hinge: bool = False,
) -> tuple[Node, float]:
    """
    Build a max-margin classification loss with L2 regularization.

    The model is evaluated on every input to get one score per example. Each
    example contributes 1 + y*score. With hinge=True the standard hinge term
    max(0, 1 - y*score) is used instead; terms that are not positive are
    replaced by a constant zero leaf, which is also their derivative. The total
    is the mean of the per-example terms plus alpha * sum(p*p) over all model
    parameters.

    Args:
        model: The model to evaluate. Calling it must return a single node,
               or a sequence holding exactly one node.
        X: Input vectors, one per example.
        y: Labels, each +1 or -1.
        alpha: L2 regularization strength.
        hinge: Use the clamped hinge term instead of 1 + y*score.

    Returns:
        A tuple containing:
        - total_loss: The node holding the loss; call backward() on it to
          populate the gradients of every model parameter.
        - accuracy: Fraction of examples whose score has the sign of the label.
    """
    if len(X) != len(y):
        raise ValueError(f"got {len(X)} inputs but {len(y)} labels")
    if not X:
        raise ValueError("cannot compute a loss over an empty dataset")
    for yi in y:
        if yi not in (1, -1):
            raise ValueError(f"labels must be +1 or -1, got {yi!r}")

    scores = [_single_output(model(xi)) for xi in X]
    arena = scores[0].arena

    losses = []
    for yi, scorei in zip(y, scores):
        if hinge:
            term = add(1.0, multiply(-yi, scorei))
            if term.data <= 0:
                term = arena.leaf(0.0)
        else:
            term = add(1.0, multiply(yi, scorei))
        losses.append(term)

    data_loss = multiply(_sum(losses, arena), 1.0 / len(losses))
    reg_loss = multiply(alpha, _sum([multiply(p, p) for p in model.parameters()], arena))
    total_loss = add(data_loss, reg_loss)

    # sign(0) matches neither label
    accuracy = sum(yi * scorei.data > 0 for yi, scorei in zip(y, scores)) / len(y)
    logger.debug(
        "loss %.6f (data %.6f, reg %.6f), accuracy %.3f",
        total_loss.data,
        data_loss.data,
        reg_loss.data,
        accuracy,
    )

    return total_loss, accuracy
