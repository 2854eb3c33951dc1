# ExprDiff - Command Line Interface
# Copyright (c) 2024 ExprDiff Contributors. All rights reserved.

"""
Command line front end for ExprDiff.

Usage:
    exprdiff --eval "x^2 + y" x=3 y=1
    exprdiff --diff "x^2 * sin(x)" --by x

Expressions that begin with '-' must be attached with '=':
    exprdiff --eval=-x+1 x=2
"""

from __future__ import annotations
import argparse
import logging
import sys
from typing import Any, Optional, Sequence

from .config import Config
from .domain import COMPLEX
from .exceptions import DuplicateBinding, ExprDiffError
from .parser import parse


logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Argument parser for the exprdiff command."""
    parser = argparse.ArgumentParser(
        prog='exprdiff',
        description="Evaluate or differentiate arithmetic expressions.",
    )
    mode = parser.add_mutually_exclusive_group(required=True)
    mode.add_argument('--eval', dest='eval_expr', metavar='EXPR',
                      help="evaluate EXPR with the given NAME=VALUE bindings")
    mode.add_argument('--diff', dest='diff_expr', metavar='EXPR',
                      help="print the derivative of EXPR (requires --by)")
    parser.add_argument('--by', metavar='NAME',
                        help="variable to differentiate with respect to")
    parser.add_argument('--complex', action='store_true',
                        help="compute over the complex numbers")
    parser.add_argument('-v', '--verbose', action='store_true',
                        help="log parsing and differentiation steps")
    parser.add_argument('assignments', nargs='*', metavar='NAME=VALUE',
                        help="variable bindings for --eval")
    return parser


def parse_bindings(assignments: Sequence[str], config: Optional[Config] = None) -> dict[str, Any]:
    """
    Turn NAME=VALUE strings into a bindings dict.

    VALUE may be any constant expression (2, -1.5, 1/3, 2j).

    Raises:
        ValueError: If an assignment has no '=' or no name.
        DuplicateBinding: If a name (case-insensitive) is assigned twice.
        ParseError: If a value is not a valid expression.
    """
    bindings: dict[str, Any] = {}
    for item in assignments:
        name, sep, value = item.partition('=')
        name = name.strip().lower()
        if not sep or not name or not name.isalpha():
            raise ValueError(f"Invalid assignment '{item}', expected NAME=VALUE")
        if name in bindings:
            raise DuplicateBinding(name)
        bindings[name] = parse(value, config=config).eval({})
    return bindings


def _configure_logging(verbose: bool) -> None:
    if not verbose:
        return
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(
        '%(asctime)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S',
    ))
    package_logger = logging.getLogger('exprdiff')
    package_logger.setLevel(logging.DEBUG)
    package_logger.addHandler(handler)


def run(args: argparse.Namespace) -> str:
    """Execute a parsed command line and return the text to print."""
    config = Config.complex() if args.complex else Config()

    if args.diff_expr is not None:
        expr = parse(args.diff_expr, config=config)
        return expr.differentiate(args.by).serialize()

    bindings = parse_bindings(args.assignments, config)
    domain = COMPLEX if any(isinstance(v, complex) for v in bindings.values()) else None
    expr = parse(args.eval_expr, domain=domain, config=config)
    logger.debug("Evaluating %s with %s", expr, bindings)
    return expr.domain.format(expr.eval(bindings))


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Entry point; returns the process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.diff_expr is not None and not args.by:
        parser.error("--diff requires --by NAME")
    if args.diff_expr is not None and args.assignments:
        parser.error("bindings are only used with --eval")
    if args.eval_expr is not None and args.by:
        parser.error("--by is only used with --diff")

    _configure_logging(args.verbose)
    try:
        print(run(args))
    except ValueError as exc:
        parser.error(str(exc))
    except ExprDiffError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0
