# ExprDiff - Symbolic Expressions
# Copyright (c) 2024 ExprDiff Contributors. All rights reserved.

"""
Expression values for ExprDiff.

An Expression owns one tree and the numeric domain it computes over.
Expressions are immutable values: every combinator deep-copies its operands
and builds the new node through the simplifying constructors, so two
expressions never share nodes and no combination ever alters an operand.

Example:
    >>> x = var('x')
    >>> f = x ** 2 + sin(x)
    >>> f.serialize()
    '((x^2)+sin(x))'
    >>> f.differentiate('x').serialize()
    '(((x^2)*(2/x))+cos(x))'
    >>> f.eval({'x': 0})
    0.0
"""

from __future__ import annotations
import logging
from typing import Any, FrozenSet, Mapping, Optional, Union

import numpy as np

from .domain import (
    ArrayDomain, COMPLEX, REAL, DomainLike, NumericDomain, Scalar, get_domain, promote,
)
from .nodes import AstNode, BinaryKind, BinaryOp, Constant, Function, FunctionKind, Variable
from .simplify import make_binary, make_function, make_multiply


logger = logging.getLogger(__name__)

# Type alias for things that can be converted to expressions
ExprLike = Union['Expression', int, float, complex]


class Expression:
    """
    A value-semantics handle on an expression tree.

    Supports natural Python math syntax (+, -, *, /, ** and unary -) with
    other expressions and plain numbers. `^` in expression text is `**`
    here; Python's `^` is left alone.
    """

    __slots__ = ('_root', '_domain')

    def __init__(self, root: AstNode, domain: DomainLike = REAL):
        self._root = root.clone()
        self._domain = get_domain(domain)

    @classmethod
    def _adopt(cls, root: AstNode, domain: NumericDomain) -> Expression:
        """Wrap a freshly built tree without copying it again."""
        expr = cls.__new__(cls)
        expr._root = root
        expr._domain = domain
        return expr

    @property
    def root(self) -> AstNode:
        return self._root

    @property
    def domain(self) -> NumericDomain:
        return self._domain

    # Value semantics

    def copy(self) -> Expression:
        """Structurally independent clone."""
        return Expression._adopt(self._root.clone(), self._domain)

    def __copy__(self) -> Expression:
        return self.copy()

    def __deepcopy__(self, memo: dict) -> Expression:
        return self.copy()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Expression):
            return NotImplemented
        return self._domain.name == other._domain.name and self._root == other._root

    def __hash__(self) -> int:
        return hash((self._domain.name, self._root))

    # Combinators

    def _combine(self, kind: BinaryKind, other: ExprLike, reverse: bool = False) -> Expression:
        other_expr = _to_expression(other, self._domain)
        domain = promote(self._domain, other_expr._domain)
        left, right = (other_expr, self) if reverse else (self, other_expr)
        root = make_binary(kind, _tree_in(left, domain), _tree_in(right, domain), domain)
        return Expression._adopt(root, domain)

    def add(self, other: ExprLike) -> Expression:
        return self._combine(BinaryKind.ADD, other)

    def sub(self, other: ExprLike) -> Expression:
        return self._combine(BinaryKind.SUBTRACT, other)

    def mul(self, other: ExprLike) -> Expression:
        return self._combine(BinaryKind.MULTIPLY, other)

    def div(self, other: ExprLike) -> Expression:
        return self._combine(BinaryKind.DIVIDE, other)

    def pow(self, other: ExprLike) -> Expression:
        return self._combine(BinaryKind.POWER, other)

    def __add__(self, other: ExprLike) -> Expression:
        return self._combine(BinaryKind.ADD, other)

    def __radd__(self, other: ExprLike) -> Expression:
        return self._combine(BinaryKind.ADD, other, reverse=True)

    def __sub__(self, other: ExprLike) -> Expression:
        return self._combine(BinaryKind.SUBTRACT, other)

    def __rsub__(self, other: ExprLike) -> Expression:
        return self._combine(BinaryKind.SUBTRACT, other, reverse=True)

    def __mul__(self, other: ExprLike) -> Expression:
        return self._combine(BinaryKind.MULTIPLY, other)

    def __rmul__(self, other: ExprLike) -> Expression:
        return self._combine(BinaryKind.MULTIPLY, other, reverse=True)

    def __truediv__(self, other: ExprLike) -> Expression:
        return self._combine(BinaryKind.DIVIDE, other)

    def __rtruediv__(self, other: ExprLike) -> Expression:
        return self._combine(BinaryKind.DIVIDE, other, reverse=True)

    def __pow__(self, other: ExprLike) -> Expression:
        return self._combine(BinaryKind.POWER, other)

    def __rpow__(self, other: ExprLike) -> Expression:
        return self._combine(BinaryKind.POWER, other, reverse=True)

    def __neg__(self) -> Expression:
        minus_one = Constant(self._domain.coerce(-1))
        return Expression._adopt(make_multiply(minus_one, self._root.clone(), self._domain), self._domain)

    def __pos__(self) -> Expression:
        return self.copy()

    def apply(self, kind: FunctionKind) -> Expression:
        """Wrap this expression in one of the named functions."""
        return Expression._adopt(make_function(kind, self._root.clone(), self._domain), self._domain)

    # Operations

    def eval(self, bindings: Optional[Mapping[str, Scalar]] = None) -> Any:
        """
        Evaluate the expression for concrete variable values.

        Binding names are case-insensitive like expression text; if two
        keys fold to the same name the later one wins.

        Args:
            bindings: Dictionary mapping variable names to values.

        Returns:
            A float for real expressions, a complex for complex ones.

        Raises:
            UnboundVariable: If a variable of the expression is not bound.
            DomainError: On division by zero, log of zero and the like,
                or if a value is not representable in the domain.
        """
        values = {name.lower(): self._domain.coerce(value) for name, value in (bindings or {}).items()}
        return self._root.eval(values, self._domain)

    def eval_array(self, bindings: Optional[Mapping[str, Any]] = None) -> np.ndarray:
        """
        Evaluate the expression over arrays of variable values at once.

        Arrays are broadcast against each other; the result has the
        broadcast shape even when the expression is constant.

        Raises:
            UnboundVariable: If a variable of the expression is not bound.
            DomainError: If any element hits an undefined operation.
        """
        domain = ArrayDomain(self._domain)
        values = {name.lower(): domain.coerce(value) for name, value in (bindings or {}).items()}
        shape = np.broadcast_shapes(*(v.shape for v in values.values())) if values else ()
        result = np.asarray(self._root.eval(values, domain), dtype=domain.dtype)
        return np.broadcast_to(result, shape).copy()

    def serialize(self) -> str:
        """Fully parenthesized text form, readable by parse()."""
        return self._root.serialize(self._domain)

    def differentiate(self, name: str) -> Expression:
        """Simplified derivative with respect to the variable `name`."""
        name = name.lower()
        derivative = self._root.differentiate(name, self._domain)
        result = Expression._adopt(derivative, self._domain)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("d/d%s %s -> %s (%d nodes)", name, self, result, derivative.size())
        return result

    def free_vars(self) -> FrozenSet[str]:
        """Return all variable names used in this expression."""
        return self._root.free_vars()

    def is_constant(self) -> bool:
        return isinstance(self._root, Constant)

    def __str__(self) -> str:
        return self.serialize()

    def __repr__(self) -> str:
        return f"Expression('{self.serialize()}', domain={self._domain.name})"


def _to_expression(x: ExprLike, domain: NumericDomain) -> Expression:
    """Convert a value to an Expression, numbers as constants of `domain`."""
    if isinstance(x, Expression):
        return x
    elif isinstance(x, (int, float, complex)):
        return const(x, COMPLEX if isinstance(x, complex) else domain)
    else:
        raise TypeError(f"Cannot convert {type(x).__name__} to Expression")


def _recast(node: AstNode, domain: NumericDomain) -> AstNode:
    """Copy of node with every constant coerced into domain."""
    if isinstance(node, Constant):
        return Constant(domain.coerce(node.value))
    if isinstance(node, Variable):
        return node.clone()
    if isinstance(node, BinaryOp):
        return BinaryOp(node.kind, _recast(node.left, domain), _recast(node.right, domain))
    if isinstance(node, Function):
        return Function(node.kind, _recast(node.arg, domain))
    raise TypeError(f"Not an expression node: {type(node).__name__}")


def _tree_in(expr: Expression, domain: NumericDomain) -> AstNode:
    """Independent copy of expr's tree, in the target domain."""
    if expr._domain is domain:
        return expr._root.clone()
    return _recast(expr._root, domain)


# Public constructors

def var(name: str, domain: DomainLike = REAL) -> Expression:
    """Create a variable. Names are case-insensitive, stored lower-case."""
    if not isinstance(name, str):
        raise TypeError(f"Variable name must be a string, got {type(name).__name__}")
    if not name:
        raise ValueError("Variable name cannot be empty")
    return Expression._adopt(Variable(name.lower()), get_domain(domain))


def const(value: Scalar, domain: Optional[DomainLike] = None) -> Expression:
    """Create a constant; complex values default to the complex domain."""
    if domain is None:
        domain = COMPLEX if isinstance(value, complex) else REAL
    resolved = get_domain(domain)
    return Expression._adopt(Constant(resolved.coerce(value)), resolved)


# Function constructors

def sin(e: ExprLike) -> Expression:
    """Sine function."""
    return _to_expression(e, REAL).apply(FunctionKind.SIN)


def cos(e: ExprLike) -> Expression:
    """Cosine function."""
    return _to_expression(e, REAL).apply(FunctionKind.COS)


def exp(e: ExprLike) -> Expression:
    """Exponential function."""
    return _to_expression(e, REAL).apply(FunctionKind.EXP)


def ln(e: ExprLike) -> Expression:
    """Natural logarithm."""
    return _to_expression(e, REAL).apply(FunctionKind.LN)
