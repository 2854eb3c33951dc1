# ExprDiff - Numeric Domains
# Copyright (c) 2024 ExprDiff Contributors. All rights reserved.

"""
Numeric domains for ExprDiff.

A domain is the scalar type a tree computes over. It is passed alongside a
tree rather than stored on its nodes, so a single parsed expression is either
entirely real or entirely complex.

Example:
    >>> from exprdiff.domain import REAL, COMPLEX
    >>> REAL.apply_binary('^', 2.0, 3.0)
    8.0
    >>> COMPLEX.format(COMPLEX.apply_function('exp', 0))
    '1'
"""

from __future__ import annotations
from abc import ABC, abstractmethod
import cmath
import math
import operator
from typing import Any, Callable, Union, TYPE_CHECKING

import numpy as np

from .exceptions import DomainError

if TYPE_CHECKING:
    from .config import Config


# Scalars accepted from callers before coercion
Scalar = Union[int, float, complex]

# Human readable operation names for error messages
OPERATION_NAMES = {
    '+': 'add',
    '-': 'subtract',
    '*': 'multiply',
    '/': 'divide',
    '^': 'power',
}

_BINARY_OPS: dict[str, Callable[[Any, Any], Any]] = {
    '+': operator.add,
    '-': operator.sub,
    '*': operator.mul,
    '/': operator.truediv,
}

# Largest magnitude at which an integral float is still written without a point
_MAX_EXACT_INT = 2 ** 53


def format_real(value: float) -> str:
    """Render a float in canonical form: '2', '-1', '0.5', '1e-05'."""
    if math.isfinite(value) and value.is_integer() and abs(value) <= _MAX_EXACT_INT:
        return str(int(value))
    return repr(float(value))


class NumericDomain(ABC):
    """
    Base class for the scalar types expressions compute over.

    Subclasses provide coercion, the transcendental functions used by
    Function nodes and the power operation. Every failure of an underlying
    operation is reported as DomainError.
    """

    name: str = ''
    zero: Any = 0
    one: Any = 1

    @abstractmethod
    def coerce(self, value: Any) -> Any:
        """Convert a caller-supplied value into this domain's scalar type."""
        ...

    @abstractmethod
    def format(self, value: Any) -> str:
        """Render a value in this domain's canonical textual form."""
        ...

    @abstractmethod
    def isclose(self, a: Any, b: Any, rel_tol: float = 1e-9, abs_tol: float = 1e-12) -> bool:
        ...

    @abstractmethod
    def _functions(self) -> dict[str, Callable[[Any], Any]]:
        ...

    @abstractmethod
    def _power(self, a: Any, b: Any) -> Any:
        ...

    def _is_finite(self, value: Any) -> bool:
        return True

    def _check_range(self, operation: str, operands: tuple[Any, ...], result: Any) -> Any:
        """Reject an infinite or NaN result computed from finite operands."""
        if not self._is_finite(result) and all(self._is_finite(v) for v in operands):
            raise DomainError(operation, operands, "result out of range")
        return result

    def apply_binary(self, symbol: str, a: Any, b: Any) -> Any:
        """Apply one of '+', '-', '*', '/', '^' to two domain values."""
        op = self._power if symbol == '^' else _BINARY_OPS[symbol]
        try:
            result = op(a, b)
        except (ArithmeticError, ValueError) as exc:
            raise DomainError(OPERATION_NAMES[symbol], (a, b), str(exc)) from exc
        return self._check_range(OPERATION_NAMES[symbol], (a, b), result)

    def apply_function(self, name: str, a: Any) -> Any:
        """Apply one of 'sin', 'cos', 'exp', 'ln' to a domain value."""
        func = self._functions()[name]
        try:
            result = func(a)
        except (ArithmeticError, ValueError) as exc:
            raise DomainError(name, (a,), str(exc)) from exc
        return self._check_range(name, (a,), result)

    def is_complex(self) -> bool:
        return self.name == 'complex'

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class RealDomain(NumericDomain):
    """Real numbers as Python floats, functions from the math module."""

    name = 'real'
    zero = 0.0
    one = 1.0

    def coerce(self, value: Any) -> float:
        if isinstance(value, complex):
            if value.imag != 0:
                raise DomainError('coerce', (value,), "complex value in the real domain")
            value = value.real
        try:
            return float(value)
        except (TypeError, ValueError) as exc:
            raise DomainError('coerce', (value,), str(exc)) from exc

    def format(self, value: Any) -> str:
        return format_real(float(value))

    def isclose(self, a: Any, b: Any, rel_tol: float = 1e-9, abs_tol: float = 1e-12) -> bool:
        return math.isclose(a, b, rel_tol=rel_tol, abs_tol=abs_tol)

    def _functions(self) -> dict[str, Callable[[Any], Any]]:
        return {'sin': math.sin, 'cos': math.cos, 'exp': math.exp, 'ln': math.log}

    def _power(self, a: float, b: float) -> float:
        # math.pow refuses results that would leave the reals
        return math.pow(a, b)

    def _is_finite(self, value: float) -> bool:
        return math.isfinite(value)


class ComplexDomain(NumericDomain):
    """Complex numbers as Python complex, functions from the cmath module."""

    name = 'complex'
    zero = 0j
    one = 1 + 0j

    def coerce(self, value: Any) -> complex:
        try:
            return complex(value)
        except (TypeError, ValueError) as exc:
            raise DomainError('coerce', (value,), str(exc)) from exc

    def format(self, value: Any) -> str:
        value = complex(value)
        re, im = value.real, value.imag
        if im == 0:
            return format_real(re)
        if re == 0:
            return f"{format_real(im)}j"
        sign = '-' if im < 0 else '+'
        return f"({format_real(re)}{sign}{format_real(abs(im))}j)"

    def isclose(self, a: Any, b: Any, rel_tol: float = 1e-9, abs_tol: float = 1e-12) -> bool:
        return cmath.isclose(a, b, rel_tol=rel_tol, abs_tol=abs_tol)

    def _functions(self) -> dict[str, Callable[[Any], Any]]:
        return {'sin': cmath.sin, 'cos': cmath.cos, 'exp': cmath.exp, 'ln': cmath.log}

    def _power(self, a: complex, b: complex) -> complex:
        return a ** b

    def _is_finite(self, value: complex) -> bool:
        return cmath.isfinite(value)


class ArrayDomain(NumericDomain):
    """
    Vectorized counterpart of a scalar domain, backed by numpy ufuncs.

    Used to evaluate one tree over many points at once. numpy reports
    invalid operations as warnings by default; here they are raised and
    converted to DomainError so array evaluation fails the same way
    scalar evaluation does.
    """

    def __init__(self, base: NumericDomain):
        self.base = base
        self.name = base.name
        self.zero = base.zero
        self.one = base.one
        self.dtype = np.complex128 if base.is_complex() else np.float64

    def coerce(self, value: Any) -> np.ndarray:
        try:
            return np.asarray(value, dtype=self.dtype)
        except (TypeError, ValueError) as exc:
            raise DomainError('coerce', (value,), str(exc)) from exc

    def format(self, value: Any) -> str:
        return self.base.format(value)

    def isclose(self, a: Any, b: Any, rel_tol: float = 1e-9, abs_tol: float = 1e-12) -> bool:
        return bool(np.all(np.isclose(a, b, rtol=rel_tol, atol=abs_tol)))

    def _functions(self) -> dict[str, Callable[[Any], Any]]:
        return {'sin': np.sin, 'cos': np.cos, 'exp': np.exp, 'ln': np.log}

    def _power(self, a: Any, b: Any) -> Any:
        return np.power(a, b)

    def apply_binary(self, symbol: str, a: Any, b: Any) -> Any:
        with np.errstate(divide='raise', over='raise', invalid='raise', under='ignore'):
            return super().apply_binary(symbol, a, b)

    def apply_function(self, name: str, a: Any) -> Any:
        with np.errstate(divide='raise', over='raise', invalid='raise', under='ignore'):
            return super().apply_function(name, a)

    def __repr__(self) -> str:
        return f"ArrayDomain({self.base!r})"


REAL = RealDomain()
COMPLEX = ComplexDomain()

DomainLike = Union[NumericDomain, str]


def get_domain(tag: DomainLike) -> NumericDomain:
    """
    Resolve a domain object or name ('real' / 'complex').

    Raises:
        ValueError: If the tag names no known domain.
    """
    if isinstance(tag, NumericDomain):
        return tag
    if isinstance(tag, str):
        key = tag.strip().lower()
        if key == REAL.name:
            return REAL
        if key == COMPLEX.name:
            return COMPLEX
    raise ValueError(f"Unknown numeric domain: {tag!r} (expected 'real' or 'complex')")


def promote(a: NumericDomain, b: NumericDomain) -> NumericDomain:
    """Common domain of two operands: complex wins over real."""
    if a.is_complex() or b.is_complex():
        return COMPLEX
    return REAL


def isclose(a: Scalar, b: Scalar, config: Config | None = None) -> bool:
    """Compare two scalars within the configured tolerances."""
    from .config import Config

    cfg = config or Config()
    domain = COMPLEX if isinstance(a, complex) or isinstance(b, complex) else REAL
    return domain.isclose(a, b, rel_tol=cfg.rel_tol, abs_tol=cfg.abs_tol)
