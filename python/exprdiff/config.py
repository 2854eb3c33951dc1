# ExprDiff - Configuration
# Copyright (c) 2024 ExprDiff Contributors. All rights reserved.

"""Configuration settings for ExprDiff."""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Union

from .domain import NumericDomain, COMPLEX, get_domain


@dataclass
class Config:
    """
    Configuration for parsing and numeric comparison.

    Attributes:
        domain: Domain used by parse() when none is passed explicitly.
                None means: complex if the text has an imaginary literal,
                real otherwise.
        rel_tol: Relative tolerance for comparing results.
        abs_tol: Absolute tolerance for comparing results near zero.
        max_depth: Maximum nesting of parentheses and function calls
                   accepted by the parser.
    """
    domain: Optional[Union[NumericDomain, str]] = None
    rel_tol: float = 1e-9
    abs_tol: float = 1e-12
    max_depth: int = 200

    def __post_init__(self):
        # Accept 'real' / 'complex' as well as domain objects
        if self.domain is not None:
            self.domain = get_domain(self.domain)
        if self.rel_tol < 0 or self.abs_tol < 0:
            raise ValueError("Tolerances must be non-negative")
        if self.max_depth < 1:
            raise ValueError(f"max_depth must be at least 1, got {self.max_depth}")

    @classmethod
    def strict(cls) -> Config:
        """Exact comparison of results."""
        return cls(rel_tol=0.0, abs_tol=0.0)

    @classmethod
    def loose(cls) -> Config:
        """Tolerant comparison, for results of long float computations."""
        return cls(rel_tol=1e-6, abs_tol=1e-9)

    @classmethod
    def complex(cls) -> Config:
        """Parse every expression over the complex numbers."""
        return cls(domain=COMPLEX)

    def __repr__(self) -> str:
        domain = self.domain.name if self.domain is not None else 'auto'
        return (
            f"Config(domain={domain}, "
            f"rel_tol={self.rel_tol}, "
            f"abs_tol={self.abs_tol}, "
            f"max_depth={self.max_depth})"
        )
