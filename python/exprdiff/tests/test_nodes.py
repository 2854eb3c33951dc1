# Tests for nodes.py - Expression tree variants

import math

import pytest

from exprdiff.domain import REAL
from exprdiff.exceptions import UnboundVariable, DomainError
from exprdiff.nodes import (
    BinaryKind, BinaryOp, Constant, Function, FunctionKind, Variable,
)


x = Variable('x')
y = Variable('y')


def add(a, b):
    return BinaryOp(BinaryKind.ADD, a, b)


def power(a, b):
    return BinaryOp(BinaryKind.POWER, a, b)


class TestEval:
    """Tests for evaluating each variant."""

    def test_constant(self):
        assert Constant(2.5).eval({}, REAL) == 2.5

    def test_variable(self):
        assert x.eval({'x': 3.0}, REAL) == 3.0

    def test_unbound_variable(self):
        with pytest.raises(UnboundVariable, match="Variable 'x' is not bound") as excinfo:
            x.eval({'y': 1.0}, REAL)
        assert excinfo.value.name == 'x'
        assert 'bound: y' in str(excinfo.value)

    def test_binary(self):
        tree = add(power(x, Constant(2.0)), Constant(1.0))
        assert tree.eval({'x': 3.0}, REAL) == 10.0

    def test_function(self):
        tree = Function(FunctionKind.EXP, Constant(0.0))
        assert tree.eval({}, REAL) == 1.0

    def test_domain_error_propagates(self):
        tree = BinaryOp(BinaryKind.DIVIDE, Constant(1.0), x)
        with pytest.raises(DomainError):
            tree.eval({'x': 0.0}, REAL)


class TestSerialize:
    """Tests for text rendering."""

    def test_leaves(self):
        assert Constant(2.0).serialize(REAL) == '2'
        assert Constant(0.25).serialize(REAL) == '0.25'
        assert x.serialize(REAL) == 'x'

    def test_binary_fully_parenthesized(self):
        tree = BinaryOp(BinaryKind.MULTIPLY, add(x, Constant(1.0)), y)
        assert tree.serialize(REAL) == '((x+1)*y)'

    def test_function(self):
        assert Function(FunctionKind.LN, add(x, y)).serialize(REAL) == 'ln((x+y))'


class TestClone:
    """Tests for deep copies."""

    def test_clone_is_equal_but_independent(self):
        tree = add(x, Function(FunctionKind.SIN, y))
        copy = tree.clone()
        assert copy == tree
        assert copy is not tree
        assert copy.left is not tree.left
        assert copy.right.arg is not tree.right.arg

    def test_nodes_are_immutable(self):
        with pytest.raises(AttributeError):
            x.name = 'z'


class TestClosedVariants:
    """The four node variants cannot be extended."""

    def test_subclassing_is_refused(self):
        with pytest.raises(TypeError, match="Cannot subclass"):
            class Negation(Constant):
                pass


class TestDifferentiate:
    """Tests for the derivative of each variant."""

    def d(self, tree, name='x'):
        return tree.differentiate(name, REAL).serialize(REAL)

    def test_constant(self):
        assert self.d(Constant(7.0)) == '0'

    def test_variable(self):
        assert self.d(x) == '1'
        assert self.d(y) == '0'

    def test_add(self):
        assert self.d(add(x, y)) == '1'

    def test_subtract(self):
        assert self.d(BinaryOp(BinaryKind.SUBTRACT, y, x)) == '-1'

    def test_multiply(self):
        assert self.d(BinaryOp(BinaryKind.MULTIPLY, x, y)) == 'y'

    def test_divide(self):
        assert self.d(BinaryOp(BinaryKind.DIVIDE, x, y)) == '(y/(y^2))'

    def test_power_constant_exponent(self):
        assert self.d(power(x, Constant(2.0))) == '((x^2)*(2/x))'

    def test_power_constant_base(self):
        derivative = power(Constant(2.0), x).differentiate('x', REAL)
        assert derivative.eval({'x': 1.0}, REAL) == pytest.approx(2 * math.log(2))

    def test_power_both_variable(self):
        # d/dx x^x = x^x (ln x + 1)
        derivative = power(x, x).differentiate('x', REAL)
        assert derivative.eval({'x': 2.0}, REAL) == pytest.approx(4 * (math.log(2) + 1))

    def test_sin(self):
        assert self.d(Function(FunctionKind.SIN, x)) == 'cos(x)'

    def test_cos(self):
        assert self.d(Function(FunctionKind.COS, x)) == '(-1*sin(x))'

    def test_exp(self):
        assert self.d(Function(FunctionKind.EXP, x)) == 'exp(x)'

    def test_ln(self):
        assert self.d(Function(FunctionKind.LN, x)) == '(1/x)'

    def test_chain_rule(self):
        tree = Function(FunctionKind.SIN, power(x, Constant(2.0)))
        assert self.d(tree) == '(cos((x^2))*((x^2)*(2/x)))'

    def test_other_variable_is_constant(self):
        tree = Function(FunctionKind.SIN, power(y, Constant(2.0)))
        assert self.d(tree) == '0'


class TestStructure:
    """Tests for free_vars and size."""

    def test_free_vars(self):
        tree = add(x, Function(FunctionKind.COS, y))
        assert tree.free_vars() == frozenset({'x', 'y'})
        assert Constant(1.0).free_vars() == frozenset()

    def test_size(self):
        assert add(x, Function(FunctionKind.COS, y)).size() == 4

    def test_priorities(self):
        assert BinaryKind.POWER.priority > BinaryKind.MULTIPLY.priority
        assert BinaryKind.DIVIDE.priority == BinaryKind.MULTIPLY.priority
        assert BinaryKind.MULTIPLY.priority > BinaryKind.ADD.priority
        assert BinaryKind.SUBTRACT.priority == BinaryKind.ADD.priority
