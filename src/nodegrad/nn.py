from __future__ import annotations

import random
from collections.abc import Iterable, Sequence
from typing import Protocol, runtime_checkable

from nodegrad.constants import BIAS_INIT, WEIGHT_INIT
from nodegrad.node import Node, NodeArena, add, default_arena, multiply


@runtime_checkable
class Module(Protocol):
    """
    Anything that owns trainable parameter nodes.

    Neuron, Layer and MLP satisfy this without inheriting from it: each lists
    its parameters by delegating to the modules it is built from, and zeroes
    them through zero_parameters.
    """

    def parameters(self) -> list[Node]: ...

    def zero_grad(self) -> None: ...


def zero_parameters(parameters: Iterable[Node]) -> None:
    """Set the gradient of every given parameter to 0.0."""
    for p in parameters:
        p.grad = 0.0


def _check_inputs(x: Sequence[Node | float], nin: int, owner: str) -> None:
    if len(x) != nin:
        raise ValueError(f"{owner} expects {nin} inputs, got {len(x)}")


class Neuron:
    """
    A single neuron: a weight per input plus a bias.

    Calling it builds w0*x0 + w1*x1 + ... + b out of add and multiply nodes and
    returns the resulting node. The nonlin flag is recorded but no activation
    function is applied to the output.
    """

    def __init__(
        self,
        nin: int,
        nonlin: bool = True,
        arena: NodeArena | None = None,
        rng: random.Random | None = None,
    ) -> None:
        """
        Args:
            nin: Number of inputs.
            nonlin: Whether this neuron is flagged as non-linear (display only).
            arena: Arena that owns the parameters. Defaults to the shared arena.
            rng: Optional random source; when given, weights are drawn from
                 uniform(-1, 1) instead of the constant WEIGHT_INIT.
        """
        if nin < 1:
            raise ValueError(f"a neuron needs at least one input, got nin={nin}")
        if arena is None:
            arena = default_arena()

        self.nin = nin
        self.nonlin = nonlin
        self.arena = arena
        self.w = [
            arena.leaf(rng.uniform(-1, 1) if rng is not None else WEIGHT_INIT, label=f"w{i}")
            for i in range(nin)
        ]
        self.b = arena.leaf(BIAS_INIT, label="b")

    def __call__(self, x: Sequence[Node | float]) -> Node:
        _check_inputs(x, self.nin, "Neuron")
        act = self.b
        for wi, xi in zip(self.w, x):
            act = add(act, multiply(wi, xi))
        return act

    def parameters(self) -> list[Node]:
        return self.w + [self.b]

    def zero_grad(self) -> None:
        zero_parameters(self.parameters())

    def __repr__(self) -> str:
        return f"{'ReLU' if self.nonlin else 'Linear'}Neuron({self.nin})"


class Layer:
    """A row of independent neurons that all read the same input vector."""

    def __init__(self, nin: int, nout: int, **kwargs) -> None:
        if nout < 1:
            raise ValueError(f"a layer needs at least one neuron, got nout={nout}")
        self.nin = nin
        self.neurons = [Neuron(nin, **kwargs) for _ in range(nout)]

    def __call__(self, x: Sequence[Node | float]) -> list[Node]:
        _check_inputs(x, self.nin, "Layer")
        return [n(x) for n in self.neurons]

    def parameters(self) -> list[Node]:
        return [p for n in self.neurons for p in n.parameters()]

    def zero_grad(self) -> None:
        zero_parameters(self.parameters())

    def __repr__(self) -> str:
        return f"Layer of [{', '.join(str(n) for n in self.neurons)}]"


class MLP:
    """
    Multi-layer perceptron.

    Layer sizes are [nin] + nouts; the output of each layer is the input of the
    next. Every layer except the last is flagged non-linear.
    """

    def __init__(
        self,
        nin: int,
        nouts: Sequence[int],
        arena: NodeArena | None = None,
        rng: random.Random | None = None,
    ) -> None:
        if not nouts:
            raise ValueError("an MLP needs at least one layer")
        sz = [nin] + list(nouts)
        self.nin = nin
        self.layers = [
            Layer(sz[i], sz[i + 1], nonlin=i != len(nouts) - 1, arena=arena, rng=rng)
            for i in range(len(nouts))
        ]

    def __call__(self, x: Sequence[Node | float]) -> list[Node]:
        _check_inputs(x, self.nin, "MLP")
        for layer in self.layers:
            x = layer(x)
        return x

    def parameters(self) -> list[Node]:
        return [p for layer in self.layers for p in layer.parameters()]

    def zero_grad(self) -> None:
        zero_parameters(self.parameters())

    def __repr__(self) -> str:
        return f"MLP of [{', '.join(str(layer) for layer in self.layers)}]"
