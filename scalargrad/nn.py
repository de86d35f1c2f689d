"""
Neural Network Module
=====================

Neuron, Layer and MLP assembled from scalar Values.

This module provides:
- Module: Base class for all neural network components
- Neuron: weighted sum of inputs plus bias, squashed with tanh
- Layer: A collection of neurons reading the same input
- MLP: Multi-layer perceptron (stack of layers)

Nothing here differentiates anything itself: a forward pass only calls
Value's arithmetic and tanh, and the resulting graph is handed to
Value.backward() by the caller. There is no optimizer; consuming the
gradients is up to the caller.

Weights and biases are drawn from an injectable ``numpy.random.Generator``
so networks can be built reproducibly.
"""

from __future__ import annotations
import logging
import numpy as np
from typing import List, Optional, Sequence, Tuple, Union

from .engine import Value


logger = logging.getLogger(__name__)

# Weights and biases are drawn uniformly from [low, high)
DEFAULT_INIT_RANGE: Tuple[float, float] = (-1.0, 1.0)


class Module:
    """
    Base class for all neural network modules.

    Provides:
    - parameters(): collect all trainable Value objects
    - zero_grad(): reset gradients before a new backward pass
    """

    def parameters(self) -> List[Value]:
        """
        Return all trainable parameters in this module.

        Override this in subclasses to return the module's parameters.

        Returns:
            List of Value objects representing trainable parameters.
        """
        return []

    def zero_grad(self) -> None:
        """
        Reset gradients of all parameters to zero.

        Call this before each backward pass to prevent gradient accumulation.
        """
        for p in self.parameters():
            p.grad = 0.0

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


def _check_size(name: str, n: int) -> None:
    if n <= 0:
        raise ValueError(f"{name} must be positive, got {n}")


class Neuron(Module):
    """
    A single artificial neuron.

    Computes: output = tanh(sum(w_i * x_i) + b)

    Attributes:
        w: List of weight Values
        b: Bias Value

    Example:
        >>> n = Neuron(3, rng=np.random.default_rng(0))
        >>> x = [Value(1.0), Value(2.0), Value(3.0)]
        >>> out = n(x)  # Forward pass
    """

    def __init__(
        self,
        nin: int,
        rng: Optional[np.random.Generator] = None,
        init_range: Tuple[float, float] = DEFAULT_INIT_RANGE
    ) -> None:
        """
        Initialize a neuron.

        Args:
            nin: Number of inputs to this neuron.
            rng: Uniform random source for weights and bias. A fresh
                default generator is used when omitted.
            init_range: (low, high) bounds for the initial values.

        Raises:
            ValueError: If nin is not positive.
        """
        _check_size('nin', nin)
        rng = rng if rng is not None else np.random.default_rng()
        low, high = init_range

        self.w: List[Value] = [
            Value(rng.uniform(low, high), label=f'w{i}')
            for i in range(nin)
        ]
        self.b: Value = Value(rng.uniform(low, high), label='b')

    def forward(self, x: Sequence[Union[Value, float]]) -> Value:
        """
        Forward pass: compute neuron output.

        Args:
            x: List of inputs (Values or floats).

        Returns:
            Single Value representing neuron output.

        Raises:
            ValueError: If input length doesn't match weight count.
        """
        if len(x) != len(self.w):
            raise ValueError(
                f"Expected {len(self.w)} inputs, got {len(x)}"
            )

        # Weighted sum: sum(w_i * x_i) + b
        act = sum(
            (wi * xi for wi, xi in zip(self.w, x)),
            start=self.b
        )
        return act.tanh()

    __call__ = forward

    def parameters(self) -> List[Value]:
        """Return weights and bias."""
        return self.w + [self.b]

    def __repr__(self) -> str:
        return f"Neuron({len(self.w)})"


class Layer(Module):
    """
    A fully connected layer of neurons.

    Every neuron receives the same input, so a layer with `nout` neurons
    maps an input of size `nin` to an output of size `nout`.

    Example:
        >>> layer = Layer(3, 4)  # 3 inputs, 4 outputs
        >>> x = [Value(1.0), Value(2.0), Value(3.0)]
        >>> out = layer(x)  # Returns list of 4 Values
    """

    def __init__(
        self,
        nin: int,
        nout: int,
        rng: Optional[np.random.Generator] = None,
        init_range: Tuple[float, float] = DEFAULT_INIT_RANGE
    ) -> None:
        _check_size('nout', nout)
        rng = rng if rng is not None else np.random.default_rng()
        self.neurons: List[Neuron] = [
            Neuron(nin, rng=rng, init_range=init_range)
            for _ in range(nout)
        ]

    def forward(self, x: Sequence[Union[Value, float]]) -> List[Value]:
        """Compute all neuron outputs, one Value per neuron."""
        return [n(x) for n in self.neurons]

    __call__ = forward

    def parameters(self) -> List[Value]:
        """Return all parameters from all neurons."""
        return [p for n in self.neurons for p in n.parameters()]

    def __repr__(self) -> str:
        return f"Layer({len(self.neurons[0].w)} -> {len(self.neurons)})"


class MLP(Module):
    """
    Multi-Layer Perceptron: a stack of fully connected layers.

    Each layer's output count becomes the next layer's input count:
        Input -> Hidden1 -> ... -> HiddenN -> Output

    Example:
        >>> # Create MLP: 3 inputs -> 4 hidden -> 4 hidden -> 1 output
        >>> model = MLP(3, [4, 4, 1])
        >>> x = [Value(1.0), Value(2.0), Value(3.0)]
        >>> out = model(x)  # List with a single Value
    """

    def __init__(
        self,
        nin: int,
        nouts: Sequence[int],
        rng: Optional[np.random.Generator] = None,
        init_range: Tuple[float, float] = DEFAULT_INIT_RANGE
    ) -> None:
        """
        Initialize an MLP.

        Args:
            nin: Number of input features.
            nouts: List of layer sizes. Last element is output size.
            rng: Uniform random source shared by every layer.
            init_range: (low, high) bounds for the initial values.

        Raises:
            ValueError: If nouts is empty or any size is not positive.
        """
        if not nouts:
            raise ValueError("MLP needs at least one layer")
        rng = rng if rng is not None else np.random.default_rng()

        sizes = [nin] + list(nouts)
        self.layers: List[Layer] = [
            Layer(sizes[i], sizes[i + 1], rng=rng, init_range=init_range)
            for i in range(len(nouts))
        ]
        logger.debug(
            "built MLP %s with %d parameters", sizes, len(self.parameters())
        )

    def forward(self, x: Sequence[Union[Value, float]]) -> List[Value]:
        """
        Forward pass through all layers.

        Args:
            x: Input values.

        Returns:
            The final layer's outputs.
        """
        for layer in self.layers:
            x = layer(x)
        return x

    __call__ = forward

    def parameters(self) -> List[Value]:
        """Return all parameters from all layers."""
        return [p for layer in self.layers for p in layer.parameters()]

    def __repr__(self) -> str:
        layer_strs = [str(layer) for layer in self.layers]
        return f"MLP([{', '.join(layer_strs)}])"
