"""scalargrad: A scalar-value autograd engine."""

from .ops import Op
from .engine import Value, topological_sort, draw_graph
from .nn import Module, Neuron, Layer, MLP

__all__ = [
    "Op",
    "Value",
    "topological_sort",
    "draw_graph",
    "Module",
    "Neuron",
    "Layer",
    "MLP",
]
