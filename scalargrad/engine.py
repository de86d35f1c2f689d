"""
scalargrad: A Scalar-Value Autograd Engine
==========================================

Reverse-mode automatic differentiation over plain scalars.

Every arithmetic operation on a Value allocates a new Value that remembers
which operation produced it and from which operands. That recorded graph is
all the backward pass needs: walk it from the output towards the leaves in
reverse topological order, and at every node apply the local derivative
rule from the operation catalog (see ops.py), accumulating the results into
the operands' gradients.

A node may feed many consumers (``a + a``, a weight reused in two
products), so the graph is a DAG rather than a tree. A node's gradient is
only complete once every consumer has pushed its contribution, which is
why backward() processes nodes strictly in reverse topological order and
each node exactly once.
"""

from __future__ import annotations
import logging
import numpy as np
from typing import Iterable, List, Optional, Set, Tuple, Union

from . import ops
from .ops import Op


logger = logging.getLogger(__name__)

# Type alias for numeric inputs
Numeric = Union[int, float, np.floating, np.integer]


class Value:
    """
    A scalar node in the computation graph.

    Every Value knows:
    1. Its data (the forward value, computed eagerly)
    2. Its gradient (derivative of the backward root with respect to it)
    3. Its operands (the Values it was computed from, in order)
    4. Its operation tag (which local derivative rule applies to it)

    Leaf Values (inputs, weights, constants) have no operands and no tag.
    Gradients stay at 0.0 until backward() is called on some descendant.

    Attributes:
        data: The scalar value stored in this node.
        grad: Accumulated gradient.
        label: Optional name for debugging and visualization.

    Example:
        >>> a = Value(2.0, label='a')
        >>> b = Value(3.0, label='b')
        >>> c = a * b + a
        >>> c.backward()
        >>> print(a.grad)  # dc/da = b + 1 = 4.0
        4.0
        >>> print(b.grad)  # dc/db = a = 2.0
        2.0
    """

    __slots__ = ('data', 'grad', '_prev', '_op', 'label')

    def __init__(
        self,
        data: Numeric,
        _children: Tuple[Value, ...] = (),
        _op: Optional[Op] = None,
        label: str = ''
    ) -> None:
        """
        Initialize a Value node.

        Args:
            data: The scalar value to store.
            _children: Operands in the computation graph (internal use).
            _op: The operation that produced this node (internal use).
            label: Optional name for debugging.

        Raises:
            TypeError: If data is not a numeric type.
        """
        if isinstance(data, bool) or not isinstance(
            data, (int, float, np.floating, np.integer)
        ):
            raise TypeError(
                f"Value data must be numeric, got {type(data).__name__}"
            )
        if _op is not None and len(_children) != ops.ARITY[_op]:
            raise ValueError(
                f"{_op.name} expects {ops.ARITY[_op]} operand(s), "
                f"got {len(_children)}"
            )

        self.data: float = float(data)
        self.grad: float = 0.0
        self._prev: Tuple[Value, ...] = tuple(_children)
        self._op: Optional[Op] = _op
        self.label: str = label

    def __repr__(self) -> str:
        """String representation showing data and gradient."""
        if self.label:
            return f"Value({self.label}={self.data:.4f}, grad={self.grad:.4f})"
        return f"Value(data={self.data:.4f}, grad={self.grad:.4f})"

    # =========================================================================
    # Structure
    # =========================================================================

    @property
    def operands(self) -> Tuple[Value, ...]:
        """The Values this node was computed from, in recorded order."""
        return self._prev

    @property
    def op(self) -> Optional[Op]:
        """The operation that produced this node, or None for a leaf."""
        return self._op

    @property
    def is_leaf(self) -> bool:
        return self._op is None

    def item(self) -> float:
        """Return the scalar value (PyTorch compatibility)."""
        return self.data

    def set_grad(self, grad: float) -> None:
        self.grad = float(grad)

    def accumulate_grad(self, grad: float) -> None:
        """
        Add a gradient contribution from one consumer.

        Contributions are summed, never overwritten: a node with several
        consumers receives one contribution from each.
        """
        self.grad += grad

    @classmethod
    def _wrap(cls, other: Union[Value, Numeric]) -> Value:
        return other if isinstance(other, Value) else cls(other)

    @classmethod
    def _apply(cls, op: Op, *operands: Value) -> Value:
        # Every operator funnels through here so the tag recorded on the
        # node is the one whose rule backward() will apply.
        data = ops.forward(op, *(v.data for v in operands))
        return cls(data, operands, op)

    # =========================================================================
    # Arithmetic Operations
    # =========================================================================

    def __add__(self, other: Union[Value, Numeric]) -> Value:
        """
        Addition: out = self + other

        Local derivatives:
            d(out)/d(self) = 1
            d(out)/d(other) = 1

        Args:
            other: Value or numeric to add.

        Returns:
            New Value representing the sum.
        """
        return Value._apply(Op.ADD, self, Value._wrap(other))

    def __radd__(self, other: Numeric) -> Value:
        """Handle numeric + Value."""
        return Value._apply(Op.ADD, Value._wrap(other), self)

    def __neg__(self) -> Value:
        """Negation: -self, recorded as self * -1."""
        return self * -1

    def __sub__(self, other: Union[Value, Numeric]) -> Value:
        """Subtraction: self + (-other)."""
        return self + (-Value._wrap(other))

    def __rsub__(self, other: Numeric) -> Value:
        """Handle numeric - Value."""
        return Value._wrap(other) + (-self)

    def __mul__(self, other: Union[Value, Numeric]) -> Value:
        """
        Multiplication: out = self * other

        Local derivatives:
            d(out)/d(self) = other.data
            d(out)/d(other) = self.data

        Args:
            other: Value or numeric to multiply.

        Returns:
            New Value representing the product.
        """
        return Value._apply(Op.MUL, self, Value._wrap(other))

    def __rmul__(self, other: Numeric) -> Value:
        """Handle numeric * Value."""
        return Value._apply(Op.MUL, Value._wrap(other), self)

    def __truediv__(self, other: Union[Value, Numeric]) -> Value:
        """
        Division: self / other = self * other^(-1).

        A zero-valued divisor is not rejected: the result is inf or nan,
        following IEEE float semantics. Guarding against that is up to
        the caller.
        """
        return self * (Value._wrap(other) ** -1)

    def __rtruediv__(self, other: Numeric) -> Value:
        """Handle numeric / Value."""
        return Value._wrap(other) * (self ** -1)

    def __pow__(self, n: Union[Value, Numeric]) -> Value:
        """
        Power: out = self^n, where n is a constant.

        The exponent is recorded as a leaf Value in the second operand slot
        and is treated as a constant: it never receives gradient.

        Local derivative:
            d(out)/d(self) = n * self^(n-1)

        Args:
            n: The exponent, a number or a leaf Value holding one.

        Returns:
            New Value representing self raised to power n.

        Raises:
            TypeError: If n is a computed (non-leaf) Value or not numeric.
        """
        if isinstance(n, Value):
            if not n.is_leaf:
                raise TypeError(
                    "Power exponent must be a constant, "
                    "got a Value produced by an operation"
                )
            exponent = n
        elif isinstance(n, bool) or not isinstance(
            n, (int, float, np.floating, np.integer)
        ):
            raise TypeError(
                f"Power exponent must be numeric, got {type(n).__name__}"
            )
        else:
            exponent = Value(n)

        return Value._apply(Op.POW, self, exponent)

    # =========================================================================
    # Activation Functions
    # =========================================================================

    def tanh(self) -> Value:
        """
        Hyperbolic tangent activation: out = tanh(self)

        Local derivative:
            d(tanh(x))/dx = 1 - tanh(x)^2

        Returns:
            New Value with tanh applied.
        """
        return Value._apply(Op.TANH, self)

    def exp(self) -> Value:
        """
        Exponential: out = e^self

        Local derivative:
            d(e^x)/dx = e^x

        Returns:
            New Value with exp applied.
        """
        return Value._apply(Op.EXP, self)

    # =========================================================================
    # Backpropagation
    # =========================================================================

    def backward(self) -> None:
        """
        Compute gradients for all nodes in the computation graph.

        The algorithm:
        1. Build a topological ordering of the graph rooted here
        2. Set this node's gradient to 1.0 (d(self)/d(self) = 1)
        3. Walk the ordering backward (this node first) and apply each
           node's local derivative rule exactly once

        Step 3 only reaches a node after all of its consumers have been
        processed, so the gradient it propagates is already the full sum.

        After calling backward(), every Value in the graph has its .grad
        populated with the derivative of this Value with respect to it.

        Note: Calling backward() multiple times will ACCUMULATE gradients
        into every node except this one, which is reseeded to 1.0.
        Call zero_grad() first if you want fresh gradients.

        Example:
            >>> x = Value(2.0)
            >>> y = x ** 2 + 3 * x
            >>> y.backward()
            >>> print(x.grad)  # dy/dx = 2x + 3 = 7.0
            7.0
        """
        topo = topological_sort(self)
        logger.debug("backward: propagating through %d nodes", len(topo))

        # Seed gradient: d(self)/d(self) = 1
        self.grad = 1.0

        for node in reversed(topo):
            if node._op is None:
                continue
            contributions = ops.local_grads(
                node._op,
                node.data,
                node.grad,
                [v.data for v in node._prev],
            )
            for operand, contribution in zip(node._prev, contributions):
                if contribution is not None:
                    operand.accumulate_grad(contribution)

    def zero_grad(self) -> None:
        """
        Reset gradient to zero.

        Call this before a new backward pass if you don't want gradient
        accumulation.
        """
        self.grad = 0.0

    @staticmethod
    def zero_grad_all(values: Iterable[Value]) -> None:
        """
        Zero gradients for a collection of Values.

        Args:
            values: Value objects to zero.
        """
        for v in values:
            v.grad = 0.0


def topological_sort(root: Value) -> List[Value]:
    """
    Compute topological ordering of computation graph rooted at `root`.

    Depth-first post-order with a visited set: a node is emitted only after
    all of its operands, and shared nodes are emitted once. The traversal
    uses an explicit stack so deep graphs do not hit the recursion limit.

    Args:
        root: The root node of the computation graph.

    Returns:
        List of Values in topological order (root is last).

    Example:
        >>> a = Value(1.0)
        >>> b = Value(2.0)
        >>> c = a + b
        >>> d = c * a
        >>> topo = topological_sort(d)
        >>> # topo is [a, b, c, d]
    """
    topo: List[Value] = []
    visited: Set[int] = set()
    stack: List[Tuple[Value, bool]] = [(root, False)]

    while stack:
        node, expanded = stack.pop()
        if expanded:
            topo.append(node)
            continue
        if id(node) in visited:
            continue
        visited.add(id(node))
        stack.append((node, True))
        # Reversed so operands are visited in recorded order
        for operand in reversed(node._prev):
            if id(operand) not in visited:
                stack.append((operand, False))

    return topo


def draw_graph(root: Value, format: str = 'text') -> str:
    """
    Generate a visualization of the computation graph.

    Args:
        root: Root node of the graph to visualize.
        format: 'text' for ASCII art, 'dot' for Graphviz DOT format.

    Returns:
        String representation of the graph.

    Raises:
        ValueError: If format is not 'text' or 'dot'.
    """
    if format not in ('text', 'dot'):
        raise ValueError(f"Unknown graph format: {format!r}")

    nodes = topological_sort(root)
    node_ids = {id(n): i for i, n in enumerate(nodes)}

    def name(node: Value) -> str:
        return node.label or f'v{node_ids[id(node)]}'

    if format == 'dot':
        lines = ['digraph G {', '  rankdir=LR;']
        for node in nodes:
            nid = node_ids[id(node)]
            lines.append(
                f'  n{nid} [label="{name(node)}\\n'
                f'data={node.data:.4f}\\n'
                f'grad={node.grad:.4f}", shape=box];'
            )
            if node._op is not None:
                op_id = f'op{nid}'
                lines.append(f'  {op_id} [label="{node._op}", shape=circle];')
                lines.append(f'  {op_id} -> n{nid};')
                for operand in node._prev:
                    lines.append(f'  n{node_ids[id(operand)]} -> {op_id};')
        lines.append('}')
        return '\n'.join(lines)

    lines = ['Computation Graph:', '=' * 50]
    for node in reversed(nodes):
        op_str = ''
        if node._op is not None:
            op_str = f' = {node._op}(' + ', '.join(name(p) for p in node._prev) + ')'
        lines.append(
            f'{name(node):>10}: data={node.data:>10.4f}, '
            f'grad={node.grad:>10.4f}{op_str}'
        )
    return '\n'.join(lines)
