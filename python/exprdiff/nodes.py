# ExprDiff - Expression Tree Nodes
# Copyright (c) 2024 ExprDiff Contributors. All rights reserved.

"""
Expression tree nodes for ExprDiff.

The tree has exactly four node variants: Constant, Variable, BinaryOp and
Function. Nodes are immutable once constructed; every operation returns a
new value or a new tree. The numeric domain is not stored on the nodes, it
is passed to each operation that needs scalar arithmetic.

Example:
    >>> from exprdiff.domain import REAL
    >>> tree = BinaryOp(BinaryKind.POWER, Variable('x'), Constant(2.0))
    >>> tree.serialize(REAL)
    '(x^2)'
    >>> tree.eval({'x': 3.0}, REAL)
    9.0
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, FrozenSet, Mapping, Union, TYPE_CHECKING

from .exceptions import UnboundVariable

if TYPE_CHECKING:
    from .domain import NumericDomain


# Type for evaluation bindings (already coerced to the domain)
Bindings = Mapping[str, Any]


class BinaryKind(Enum):
    """Binary operators, valued by their textual symbol."""
    ADD = '+'
    SUBTRACT = '-'
    MULTIPLY = '*'
    DIVIDE = '/'
    POWER = '^'

    @property
    def symbol(self) -> str:
        return self.value

    @property
    def priority(self) -> int:
        """Binding strength used by the parser: higher binds tighter."""
        return _PRIORITIES[self]

    @classmethod
    def from_symbol(cls, symbol: str) -> BinaryKind:
        return cls(symbol)


_PRIORITIES = {
    BinaryKind.ADD: 1,
    BinaryKind.SUBTRACT: 1,
    BinaryKind.MULTIPLY: 2,
    BinaryKind.DIVIDE: 2,
    BinaryKind.POWER: 3,
}


class FunctionKind(Enum):
    """Named functions, valued by their name in expression text."""
    SIN = 'sin'
    COS = 'cos'
    EXP = 'exp'
    LN = 'ln'

    @classmethod
    def names(cls) -> FrozenSet[str]:
        return frozenset(kind.value for kind in cls)


class _Node(ABC):
    """Common base of the four node variants. Not extensible."""

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        if cls.__module__ != __name__:
            raise TypeError(
                f"Cannot subclass expression nodes ({cls.__name__}); "
                "the variants are Constant, Variable, BinaryOp and Function"
            )

    @abstractmethod
    def eval(self, bindings: Bindings, domain: NumericDomain) -> Any:
        """
        Evaluate the tree to a scalar.

        Args:
            bindings: Variable name to domain value.
            domain: Numeric domain supplying the arithmetic.

        Raises:
            UnboundVariable: If a variable is missing from bindings.
            DomainError: If a scalar operation is undefined.
        """
        ...

    @abstractmethod
    def serialize(self, domain: NumericDomain) -> str:
        """Fully parenthesized text that the parser reads back unchanged."""
        ...

    @abstractmethod
    def clone(self) -> AstNode:
        """Deep copy sharing no nodes with this tree."""
        ...

    @abstractmethod
    def differentiate(self, name: str, domain: NumericDomain) -> AstNode:
        """Simplified derivative with respect to the variable `name`."""
        ...

    @abstractmethod
    def free_vars(self) -> FrozenSet[str]:
        ...

    @abstractmethod
    def size(self) -> int:
        """Number of nodes in the tree."""
        ...


@dataclass(frozen=True)
class Constant(_Node):
    """A literal scalar of the expression's domain."""
    value: Any

    def eval(self, bindings: Bindings, domain: NumericDomain) -> Any:
        return self.value

    def serialize(self, domain: NumericDomain) -> str:
        return domain.format(self.value)

    def clone(self) -> Constant:
        return Constant(self.value)

    def differentiate(self, name: str, domain: NumericDomain) -> Constant:
        return Constant(domain.zero)

    def free_vars(self) -> FrozenSet[str]:
        return frozenset()

    def size(self) -> int:
        return 1

    def __repr__(self) -> str:
        return f"Constant({self.value!r})"


@dataclass(frozen=True)
class Variable(_Node):
    """A free identifier, resolved only at evaluation time."""
    name: str

    def eval(self, bindings: Bindings, domain: NumericDomain) -> Any:
        if self.name not in bindings:
            raise UnboundVariable(self.name, bindings.keys())
        return bindings[self.name]

    def serialize(self, domain: NumericDomain) -> str:
        return self.name

    def clone(self) -> Variable:
        return Variable(self.name)

    def differentiate(self, name: str, domain: NumericDomain) -> Constant:
        return Constant(domain.one if self.name == name else domain.zero)

    def free_vars(self) -> FrozenSet[str]:
        return frozenset({self.name})

    def size(self) -> int:
        return 1

    def __repr__(self) -> str:
        return f"Variable('{self.name}')"


@dataclass(frozen=True)
class BinaryOp(_Node):
    """One of + - * / ^ applied to two exclusively owned subtrees."""
    kind: BinaryKind
    left: AstNode
    right: AstNode

    def eval(self, bindings: Bindings, domain: NumericDomain) -> Any:
        left_val = self.left.eval(bindings, domain)
        right_val = self.right.eval(bindings, domain)
        return domain.apply_binary(self.kind.symbol, left_val, right_val)

    def serialize(self, domain: NumericDomain) -> str:
        return f"({self.left.serialize(domain)}{self.kind.symbol}{self.right.serialize(domain)})"

    def clone(self) -> BinaryOp:
        return BinaryOp(self.kind, self.left.clone(), self.right.clone())

    def differentiate(self, name: str, domain: NumericDomain) -> AstNode:
        left, right = self.left, self.right
        d_left = left.differentiate(name, domain)
        d_right = right.differentiate(name, domain)

        if self.kind in (BinaryKind.ADD, BinaryKind.SUBTRACT):
            return _rules.make_additive(self.kind, d_left, d_right, domain)

        if self.kind is BinaryKind.MULTIPLY:
            # (fg)' = f'g + fg'
            return _rules.make_additive(
                BinaryKind.ADD,
                _rules.make_multiply(d_left, right.clone(), domain),
                _rules.make_multiply(left.clone(), d_right, domain),
                domain,
            )

        if self.kind is BinaryKind.DIVIDE:
            # (f/g)' = (f'g - fg') / g^2
            numerator = _rules.make_additive(
                BinaryKind.SUBTRACT,
                _rules.make_multiply(d_left, right.clone(), domain),
                _rules.make_multiply(left.clone(), d_right, domain),
                domain,
            )
            square = _rules.make_power(right.clone(), Constant(domain.coerce(2)), domain)
            return _rules.make_divide(numerator, square, domain)

        # (f^g)' = f^g * (f' * g/f + g' * ln(f))
        base_term = _rules.make_multiply(
            d_left, _rules.make_divide(right.clone(), left.clone(), domain), domain
        )
        exponent_term = _rules.make_multiply(
            d_right, _rules.make_function(FunctionKind.LN, left.clone(), domain), domain
        )
        return _rules.make_multiply(
            _rules.make_power(left.clone(), right.clone(), domain),
            _rules.make_additive(BinaryKind.ADD, base_term, exponent_term, domain),
            domain,
        )

    def free_vars(self) -> FrozenSet[str]:
        return self.left.free_vars() | self.right.free_vars()

    def size(self) -> int:
        return 1 + self.left.size() + self.right.size()

    def __repr__(self) -> str:
        return f"BinaryOp('{self.kind.symbol}', {self.left!r}, {self.right!r})"


@dataclass(frozen=True)
class Function(_Node):
    """One of sin, cos, exp, ln applied to an exclusively owned subtree."""
    kind: FunctionKind
    arg: AstNode

    def eval(self, bindings: Bindings, domain: NumericDomain) -> Any:
        return domain.apply_function(self.kind.value, self.arg.eval(bindings, domain))

    def serialize(self, domain: NumericDomain) -> str:
        return f"{self.kind.value}({self.arg.serialize(domain)})"

    def clone(self) -> Function:
        return Function(self.kind, self.arg.clone())

    def differentiate(self, name: str, domain: NumericDomain) -> AstNode:
        arg = self.arg
        d_arg = arg.differentiate(name, domain)

        if self.kind is FunctionKind.SIN:
            outer = _rules.make_function(FunctionKind.COS, arg.clone(), domain)
        elif self.kind is FunctionKind.COS:
            outer = _rules.make_multiply(
                Constant(domain.coerce(-1)),
                _rules.make_function(FunctionKind.SIN, arg.clone(), domain),
                domain,
            )
        elif self.kind is FunctionKind.EXP:
            outer = _rules.make_function(FunctionKind.EXP, arg.clone(), domain)
        else:
            outer = _rules.make_divide(Constant(domain.one), arg.clone(), domain)

        return _rules.make_multiply(outer, d_arg, domain)

    def free_vars(self) -> FrozenSet[str]:
        return self.arg.free_vars()

    def size(self) -> int:
        return 1 + self.arg.size()

    def __repr__(self) -> str:
        return f"Function('{self.kind.value}', {self.arg!r})"


AstNode = Union[Constant, Variable, BinaryOp, Function]


# Smart constructors live in simplify, which imports the node classes above
from . import simplify as _rules  # noqa: E402
