# Tests for expr.py - Expression values

import copy
import logging
import math

import numpy as np
import pytest

from exprdiff.domain import COMPLEX, REAL
from exprdiff.exceptions import DomainError, UnboundVariable
from exprdiff.expr import Expression, const, cos, exp, ln, sin, var
from exprdiff.nodes import Variable


class TestConstructors:
    """Tests for var and const."""

    def test_var(self):
        x = var('x')
        assert x.serialize() == 'x'
        assert x.domain is REAL

    def test_var_case_folded(self):
        assert var('X') == var('x')

    def test_var_empty_name(self):
        with pytest.raises(ValueError, match="cannot be empty"):
            var('')

    def test_var_non_string(self):
        with pytest.raises(TypeError):
            var(1)

    def test_const(self):
        c = const(2)
        assert c.is_constant()
        assert c.eval() == 2.0

    def test_complex_const_picks_complex_domain(self):
        assert const(2j).domain is COMPLEX

    def test_constructor_copies_tree(self):
        node = Variable('x')
        expr = Expression(node)
        assert expr.root == node
        assert expr.root is not node


class TestOperators:
    """Tests for natural math syntax."""

    def test_add(self):
        x = var('x')
        assert (x + 2).serialize() == '(x+2)'
        assert (2 + x).serialize() == '(2+x)'

    def test_sub(self):
        x = var('x')
        assert (x - 1).serialize() == '(x-1)'
        assert (1 - x).serialize() == '(1-x)'

    def test_mul_div_pow(self):
        x = var('x')
        assert (x * var('y')).serialize() == '(x*y)'
        assert (x / 2).serialize() == '(x/2)'
        assert (x ** 2).serialize() == '(x^2)'
        assert (2 ** x).serialize() == '(2^x)'

    def test_named_combinators(self):
        x = var('x')
        assert x.add(1) == x + 1
        assert x.sub(1) == x - 1
        assert x.mul(3) == x * 3
        assert x.div(3) == x / 3
        assert x.pow(3) == x ** 3

    def test_neg(self):
        assert (-var('x')).serialize() == '(-1*x)'
        assert (-const(2)).serialize() == '-2'

    def test_identities_removed(self):
        x = var('x')
        assert (x + 0).serialize() == 'x'
        assert (1 * x).serialize() == 'x'
        assert (x / 1).serialize() == 'x'
        assert (x ** 1).serialize() == 'x'
        assert (x ** 0).serialize() == '1'
        assert (x * 0).serialize() == '0'

    def test_constants_folded(self):
        assert (const(2) + 3).serialize() == '5'
        assert (const(2) ** 10).serialize() == '1024'

    def test_unsupported_operand(self):
        with pytest.raises(TypeError, match="Cannot convert"):
            var('x') + "y"

    def test_complex_operand_promotes(self):
        x = var('x')
        expr = x * 2j + 1
        assert expr.domain is COMPLEX
        assert expr.serialize() == '((x*2j)+1)'
        assert expr.eval({'x': 1}) == 1 + 2j

    def test_functions(self):
        x = var('x')
        assert sin(x).serialize() == 'sin(x)'
        assert cos(x).serialize() == 'cos(x)'
        assert exp(x).serialize() == 'exp(x)'
        assert ln(x).serialize() == 'ln(x)'

    def test_function_of_number_folds(self):
        assert sin(0).is_constant()
        assert exp(0).eval() == 1.0


class TestValueSemantics:
    """Expressions never share nodes."""

    def test_operands_are_copied(self):
        f = var('x') + 1
        g = f * f
        assert g.root.left == g.root.right
        assert g.root.left is not g.root.right
        assert g.root.left is not f.root

    def test_copy(self):
        f = sin(var('x')) + 1
        for clone in (f.copy(), copy.copy(f), copy.deepcopy(f)):
            assert clone == f
            assert clone.root is not f.root

    def test_equality_and_hash(self):
        assert var('x') + 1 == var('x') + 1
        assert var('x') + 1 != var('x') + 2
        assert len({var('x') + 1, var('x') + 1}) == 1

    def test_repr(self):
        assert repr(var('x') + 1) == "Expression('(x+1)', domain=real)"


class TestEval:
    """Tests for evaluation."""

    def test_eval(self):
        assert (var('x') + 3).eval({'x': 2}) == 5.0

    def test_binding_names_case_insensitive(self):
        assert (var('x') + 3).eval({'X': 2}) == 5.0

    def test_last_binding_wins(self):
        assert (var('x') + 3).eval({'x': 1, 'X': 2}) == 5.0

    def test_extra_bindings_ignored(self):
        assert var('x').eval({'x': 1, 'y': 2}) == 1.0

    def test_unbound(self):
        with pytest.raises(UnboundVariable):
            (var('x') + 3).eval({})

    def test_division_by_zero(self):
        with pytest.raises(DomainError):
            (1 / var('x')).eval({'x': 0})

    def test_complex_value_in_real_expression(self):
        with pytest.raises(DomainError, match="complex value"):
            var('x').eval({'x': 1j})


class TestEvalArray:
    """Tests for vectorized evaluation."""

    def test_elementwise(self):
        result = (var('x') ** 2).eval_array({'x': np.array([1.0, 2.0, 3.0])})
        np.testing.assert_allclose(result, [1.0, 4.0, 9.0])

    def test_broadcast(self):
        expr = var('x') * var('y')
        result = expr.eval_array({'x': [[1.0], [2.0]], 'y': [1.0, 10.0, 100.0]})
        assert result.shape == (2, 3)
        np.testing.assert_allclose(result[1], [2.0, 20.0, 200.0])

    def test_constant_is_broadcast(self):
        result = const(2).eval_array({'x': np.zeros(3)})
        np.testing.assert_allclose(result, [2.0, 2.0, 2.0])

    def test_matches_scalar_eval(self):
        expr = sin(var('x')) * exp(var('x'))
        points = np.linspace(-1.0, 1.0, 5)
        result = expr.eval_array({'x': points})
        expected = [expr.eval({'x': p}) for p in points]
        np.testing.assert_allclose(result, expected)

    def test_invalid_element(self):
        with pytest.raises(DomainError):
            ln(var('x')).eval_array({'x': [1.0, 0.0]})


class TestDifferentiate:
    """Tests for Expression.differentiate."""

    def test_polynomial(self):
        x = var('x')
        derivative = (3 * x ** 2 + 2 * x).differentiate('x')
        assert derivative.eval({'x': 2}) == pytest.approx(14.0)

    def test_name_case_insensitive(self):
        assert ln(var('x')).differentiate('X').serialize() == '(1/x)'

    def test_result_is_expression(self):
        derivative = sin(var('x')).differentiate('x')
        assert isinstance(derivative, Expression)
        assert derivative.domain is REAL

    def test_complex_domain_kept(self):
        derivative = (var('x', 'complex') ** 2).differentiate('x')
        assert derivative.domain is COMPLEX
        assert derivative.eval({'x': 1j}) == pytest.approx(2j)

    def test_constant_expression(self):
        assert (const(2) ** 3 + 1).differentiate('x').serialize() == '0'

    def test_free_vars(self):
        expr = var('x') * cos(var('y'))
        assert expr.free_vars() == frozenset({'x', 'y'})
        assert expr.differentiate('x').free_vars() == frozenset({'y'})

    def test_second_derivative(self):
        x = var('x')
        second = sin(x).differentiate('x').differentiate('x')
        assert second.eval({'x': math.pi / 2}) == pytest.approx(-1.0)

    def test_logs_derivative(self, caplog):
        with caplog.at_level(logging.DEBUG, logger='exprdiff.expr'):
            var('x').differentiate('x')
        assert 'd/dx x -> 1 (1 nodes)' in caplog.text

    def test_nothing_serialized_when_debug_off(self, caplog, monkeypatch):
        def fail(self):
            raise AssertionError("serialized with debug logging off")

        x = var('x')
        f = x ** 3 + sin(x)
        monkeypatch.setattr(Expression, '__str__', fail)
        monkeypatch.setattr(Expression, 'serialize', fail)
        with caplog.at_level(logging.INFO, logger='exprdiff'):
            derivative = f.differentiate('x')
        assert derivative.free_vars() == frozenset({'x'})
