# ExprDiff
# Copyright (c) 2024 ExprDiff Contributors. All rights reserved.

"""
ExprDiff - Arithmetic expressions with evaluation and symbolic derivatives.

This package parses infix expressions over the real or complex numbers into
immutable trees, evaluates them for given variable values, prints them back
as text and differentiates them symbolically, simplifying as it goes.

Example:
    >>> import exprdiff as ed
    >>> f = ed.parse('x^2 + sin(x)')
    >>> f.eval({'x': 0})
    0.0
    >>> f.differentiate('x').serialize()
    '(((x^2)*(2/x))+cos(x))'

Key Features:
    - Real and complex domains, chosen from the input text
    - Constant folding and identity removal while the tree is built
    - Python operator syntax for building expressions in code
    - Vectorized evaluation over numpy arrays
"""

__version__ = "0.1.0"

# Core expression types and constructors
from .expr import (
    Expression,
    var,
    const,
    sin,
    cos,
    exp,
    ln,
)

# Tree nodes
from .nodes import (
    AstNode,
    Constant,
    Variable,
    BinaryOp,
    Function,
    BinaryKind,
    FunctionKind,
)

# Numeric domains
from .domain import (
    NumericDomain,
    RealDomain,
    ComplexDomain,
    ArrayDomain,
    REAL,
    COMPLEX,
    get_domain,
    isclose,
)

# Parsing
from .parser import ExpressionParser, parse, tokenize

# Configuration
from .config import Config

# Exceptions
from .exceptions import (
    ExprDiffError,
    ParseError,
    UnbalancedParentheses,
    UnboundVariable,
    DomainError,
    DuplicateBinding,
    SUPPORTED_FUNCTIONS,
)

__all__ = [
    # Version
    "__version__",
    # Expressions
    "Expression",
    "var",
    "const",
    "sin",
    "cos",
    "exp",
    "ln",
    # Tree nodes
    "AstNode",
    "Constant",
    "Variable",
    "BinaryOp",
    "Function",
    "BinaryKind",
    "FunctionKind",
    # Numeric domains
    "NumericDomain",
    "RealDomain",
    "ComplexDomain",
    "ArrayDomain",
    "REAL",
    "COMPLEX",
    "get_domain",
    "isclose",
    # Parsing
    "ExpressionParser",
    "parse",
    "tokenize",
    # Configuration
    "Config",
    # Exceptions
    "ExprDiffError",
    "ParseError",
    "UnbalancedParentheses",
    "UnboundVariable",
    "DomainError",
    "DuplicateBinding",
    "SUPPORTED_FUNCTIONS",
]
