# ExprDiff - Symbolic Simplification
# Copyright (c) 2024 ExprDiff Contributors. All rights reserved.

"""
Simplifying constructors for ExprDiff expression trees.

Every binary or function node built by the parser, by the Expression
combinators or by differentiation goes through one of these constructors,
so simplification happens bottom-up as the tree is built rather than as a
separate pass. The rules are purely local:

1. Constant folding (2 + 3 -> 5, sin(0) -> 0)
2. Identity removal (x + 0 -> x, x * 1 -> x, x / 1 -> x, x ^ 1 -> x)
3. Zero propagation (x * 0 -> 0, 0 / x -> 0, x ^ 0 -> 1)

A node counts as zero or one only if it is literally a Constant holding that
value. x - x is not reduced.

Example:
    >>> from exprdiff.domain import REAL
    >>> x = Variable('x')
    >>> make_multiply(Constant(1.0), make_additive(BinaryKind.ADD, x, Constant(0.0), REAL), REAL)
    Variable('x')
"""

from __future__ import annotations
import logging
from typing import Optional, TYPE_CHECKING

from .exceptions import DomainError
from .nodes import AstNode, BinaryKind, BinaryOp, Constant, Function, FunctionKind

if TYPE_CHECKING:
    from .domain import NumericDomain


logger = logging.getLogger(__name__)


def is_zero(node: AstNode) -> bool:
    """True if node is the syntactic zero constant."""
    return isinstance(node, Constant) and node.value == 0


def is_one(node: AstNode) -> bool:
    """True if node is the syntactic one constant."""
    return isinstance(node, Constant) and node.value == 1


def _fold(kind: BinaryKind, left: Constant, right: Constant, domain: NumericDomain) -> Optional[Constant]:
    """Evaluate a constant-only node, or None if the result is undefined."""
    try:
        return Constant(domain.apply_binary(kind.symbol, left.value, right.value))
    except DomainError as exc:
        # Leave the node in place; evaluating it raises the same error
        logger.debug("Not folding %s: %s", BinaryOp(kind, left, right).serialize(domain), exc)
        return None


def make_additive(kind: BinaryKind, left: AstNode, right: AstNode, domain: NumericDomain) -> AstNode:
    """Build left + right or left - right."""
    if kind not in (BinaryKind.ADD, BinaryKind.SUBTRACT):
        raise ValueError(f"make_additive expects '+' or '-', got '{kind.symbol}'")
    if is_zero(left):
        if kind is BinaryKind.SUBTRACT:
            return make_multiply(Constant(domain.coerce(-1)), right, domain)
        return right
    if is_zero(right):
        return left
    if isinstance(left, Constant) and isinstance(right, Constant):
        folded = _fold(kind, left, right, domain)
        if folded is not None:
            return folded
    return BinaryOp(kind, left, right)


def make_multiply(left: AstNode, right: AstNode, domain: NumericDomain) -> AstNode:
    """Build left * right."""
    if is_zero(left) or is_zero(right):
        return Constant(domain.zero)
    if is_one(left):
        return right
    if is_one(right):
        return left
    if isinstance(left, Constant) and isinstance(right, Constant):
        folded = _fold(BinaryKind.MULTIPLY, left, right, domain)
        if folded is not None:
            return folded
    return BinaryOp(BinaryKind.MULTIPLY, left, right)


def make_divide(left: AstNode, right: AstNode, domain: NumericDomain) -> AstNode:
    """
    Build left / right.

    Division by the zero constant is not rejected here; it stays in the
    tree and raises DomainError when evaluated.
    """
    if is_one(right):
        return left
    if is_zero(left):
        return Constant(domain.zero)
    if isinstance(left, Constant) and isinstance(right, Constant):
        folded = _fold(BinaryKind.DIVIDE, left, right, domain)
        if folded is not None:
            return folded
    return BinaryOp(BinaryKind.DIVIDE, left, right)


def make_power(left: AstNode, right: AstNode, domain: NumericDomain) -> AstNode:
    """Build left ^ right."""
    if is_one(right):
        return left
    if is_zero(right):
        return Constant(domain.one)
    if isinstance(left, Constant) and isinstance(right, Constant):
        folded = _fold(BinaryKind.POWER, left, right, domain)
        if folded is not None:
            return folded
    return BinaryOp(BinaryKind.POWER, left, right)


def make_binary(kind: BinaryKind, left: AstNode, right: AstNode, domain: NumericDomain) -> AstNode:
    """Build any binary node through the matching simplifying constructor."""
    if kind in (BinaryKind.ADD, BinaryKind.SUBTRACT):
        return make_additive(kind, left, right, domain)
    if kind is BinaryKind.MULTIPLY:
        return make_multiply(left, right, domain)
    if kind is BinaryKind.DIVIDE:
        return make_divide(left, right, domain)
    return make_power(left, right, domain)


def make_function(kind: FunctionKind, arg: AstNode, domain: NumericDomain) -> AstNode:
    """Build kind(arg), folding it when arg is a constant with a defined result."""
    if isinstance(arg, Constant):
        try:
            return Constant(domain.apply_function(kind.value, arg.value))
        except DomainError as exc:
            logger.debug("Not folding %s(%s): %s", kind.value, arg.serialize(domain), exc)
    return Function(kind, arg)
