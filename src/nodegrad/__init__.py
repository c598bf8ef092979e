from nodegrad.engine import backward, topological_sort, zero_grad
from nodegrad.loss import max_margin_loss
from nodegrad.nn import MLP, Layer, Module, Neuron, zero_parameters
from nodegrad.node import Node, NodeArena, Op, add, default_arena, leaf, local_backward, multiply

__all__ = [
    "MLP",
    "Layer",
    "Module",
    "Neuron",
    "Node",
    "NodeArena",
    "Op",
    "add",
    "backward",
    "default_arena",
    "leaf",
    "local_backward",
    "max_margin_loss",
    "multiply",
    "topological_sort",
    "zero_grad",
    "zero_parameters",
]
