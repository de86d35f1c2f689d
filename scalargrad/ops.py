"""
Operation Catalog
=================

The closed set of differentiable operations the engine knows about.

Each operation is a tag (``Op``) plus two rules:
- a forward rule that computes the output value from the operand values
- a local-derivative rule that turns the output's gradient into the
  contributions each operand receives (the chain rule, one step)

Everything else (subtraction, division, negation) is built from these
five, so the backward pass only ever needs this table.
"""

from __future__ import annotations
import enum
import numpy as np
from typing import Dict, Optional, Sequence, Tuple


class Op(enum.Enum):
    """Tag recorded on every non-leaf node. The value is the display symbol."""

    ADD = '+'
    MUL = '*'
    TANH = 'tanh'
    EXP = 'exp'
    POW = '**'

    def __str__(self) -> str:
        return self.value


ARITY: Dict[Op, int] = {
    Op.ADD: 2,
    Op.MUL: 2,
    Op.TANH: 1,
    Op.EXP: 1,
    Op.POW: 2,  # (base, exponent)
}


def _check_arity(op: Op, operands: Sequence[float]) -> None:
    if op not in ARITY:
        raise ValueError(f"Unknown operation: {op!r}")
    if len(operands) != ARITY[op]:
        raise ValueError(
            f"{op.name} expects {ARITY[op]} operand(s), got {len(operands)}"
        )


def forward(op: Op, *operands: float) -> float:
    """
    Compute the forward value of ``op`` applied to raw operand values.

    Arithmetic runs in float64 with numpy's IEEE semantics, so 0 ** -1
    gives inf and exp of a huge number gives inf instead of raising.

    Args:
        op: The operation tag.
        *operands: Operand values, in recorded order.

    Returns:
        The output value as a Python float.
    """
    _check_arity(op, operands)
    x = [np.float64(v) for v in operands]

    with np.errstate(divide='ignore', invalid='ignore', over='ignore'):
        if op is Op.ADD:
            out = x[0] + x[1]
        elif op is Op.MUL:
            out = x[0] * x[1]
        elif op is Op.TANH:
            out = np.tanh(x[0])
        elif op is Op.EXP:
            out = np.exp(x[0])
        else:
            out = np.power(x[0], x[1])

    return float(out)


def local_grads(
    op: Op,
    out_data: float,
    out_grad: float,
    operands: Sequence[float]
) -> Tuple[Optional[float], ...]:
    """
    Apply the local derivative rule for ``op``.

    Args:
        op: The operation tag of the node being processed.
        out_data: The node's own forward value.
        out_grad: The node's accumulated gradient (the upstream gradient).
        operands: The operand values, in recorded order.

    Returns:
        One entry per operand: the amount to add to that operand's
        gradient, or None if the operand is a constant (POW exponent).
    """
    _check_arity(op, operands)
    g = np.float64(out_grad)
    x = [np.float64(v) for v in operands]

    with np.errstate(divide='ignore', invalid='ignore', over='ignore'):
        if op is Op.ADD:
            # d(a+b)/da = d(a+b)/db = 1
            return float(g), float(g)
        if op is Op.MUL:
            return float(x[1] * g), float(x[0] * g)
        if op is Op.TANH:
            # 1 - tanh(a)^2, reusing the forward output
            return (float((1.0 - np.float64(out_data) ** 2) * g),)
        if op is Op.EXP:
            return (float(np.float64(out_data) * g),)

        base, k = x
        return float(k * np.power(base, k - 1.0) * g), None
