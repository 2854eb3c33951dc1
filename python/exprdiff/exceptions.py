# ExprDiff - Exceptions
# Copyright (c) 2024 ExprDiff Contributors. All rights reserved.

"""Exception hierarchy for ExprDiff."""

from __future__ import annotations
from typing import Iterable, Optional, Any


# Function names the parser recognises, for reference in error messages
SUPPORTED_FUNCTIONS = ['sin', 'cos', 'exp', 'ln']


class ExprDiffError(Exception):
    """Base class for all ExprDiff exceptions."""
    pass


class ParseError(ExprDiffError):
    """Raised when expression text cannot be turned into a tree."""

    def __init__(
        self,
        message: str,
        text: Optional[str] = None,
        position: Optional[int] = None,
        fragment: Optional[str] = None,
        suggestion: Optional[str] = None,
    ):
        full_message = message
        if fragment:
            full_message += f" near '{fragment}'"
        if text is not None and position is not None:
            full_message += f"\n  {text}\n  {' ' * position}^"
        if suggestion:
            full_message += f"\n  Suggestion: {suggestion}"
        super().__init__(full_message)
        self.text = text
        self.position = position
        self.fragment = fragment
        self.suggestion = suggestion


class UnbalancedParentheses(ParseError):
    """Raised when '(' and ')' do not pair up."""
    pass


class UnboundVariable(ExprDiffError):
    """Raised when evaluation meets a variable missing from the bindings."""

    def __init__(self, name: str, available: Iterable[str] = ()):
        available = sorted(available)
        message = f"Variable '{name}' is not bound"
        if available:
            message += f" (bound: {', '.join(available)})"
        super().__init__(message)
        self.name = name
        self.available = available


class DomainError(ExprDiffError):
    """Raised when a scalar operation is undefined in the numeric domain."""

    def __init__(self, operation: str, operands: tuple[Any, ...] = (), reason: Optional[str] = None):
        args = ', '.join(repr(o) for o in operands)
        message = f"{operation}({args}) is undefined"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.operation = operation
        self.operands = operands
        self.reason = reason


class DuplicateBinding(ExprDiffError):
    """Raised when the same variable is assigned twice on the command line."""

    def __init__(self, name: str):
        super().__init__(f"Variable '{name}' is assigned more than once")
        self.name = name


def get_suggestion_for_name(name: str) -> Optional[str]:
    """Get a helpful suggestion for an unsupported function name."""
    suggestions = {
        # Common misspellings
        'sine': "Did you mean 'sin'? Use sin(x) for sine.",
        'cosine': "Did you mean 'cos'? Use cos(x) for cosine.",
        'log': "Did you mean 'ln'? Use ln(x) for natural logarithm.",
        'exponent': "Did you mean 'exp'? Use exp(x) for the exponential.",
        'tan': "tan is not supported. Use sin(x)/cos(x) instead.",
        'sqrt': "sqrt is not supported. Use x^0.5 instead.",
        'log10': "log10 is not supported. Use ln(x)/ln(10) instead.",
        'log2': "log2 is not supported. Use ln(x)/ln(2) instead.",
        'pow': "Use the '^' operator, e.g. x^2.",
        'sinh': "sinh is not supported. Use (exp(x)-exp(-x))/2 instead.",
        'cosh': "cosh is not supported. Use (exp(x)+exp(-x))/2 instead.",
    }
    return suggestions.get(name.lower())
