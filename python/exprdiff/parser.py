# ExprDiff - Expression Parser
# Copyright (c) 2024 ExprDiff Contributors. All rights reserved.

"""
Infix expression parser for ExprDiff.

Turns text such as ``"2*x^2 - sin(x)/3"`` into an Expression. Whitespace
separates tokens and is otherwise ignored, so ``sin x`` is an error while
``sinx`` is a variable. Letters are case-folded, so ``SIN(X)`` and ``sin(x)``
are the same expression.

Grammar (informal):
    expr    := operand (op operand)*
    op      := '+' | '-' | '*' | '/' | '^'
    operand := number | imaginary | name | func '(' expr ')' | '(' expr ')'
             | '-' operand
    func    := 'sin' | 'cos' | 'exp' | 'ln'

'^' binds tighter than '*' and '/', which bind tighter than '+' and '-'.
All operators, '^' included, group left to right: 2^3^2 is (2^3)^2 = 64.
A '-' where an operand is expected negates the single operand after it,
so -x^2 is (-x)^2.

Example:
    >>> parse('x * (5 + 2 - 2) * 1 * 0 - 3 * x ^ 2').serialize()
    '(-1*(3*(x^2)))'
"""

from __future__ import annotations
from dataclasses import dataclass
import logging
import math
import re
from typing import Optional

from .config import Config
from .domain import COMPLEX, REAL, DomainLike, NumericDomain, get_domain
from .exceptions import (
    ParseError, UnbalancedParentheses, SUPPORTED_FUNCTIONS, get_suggestion_for_name,
)
from .expr import Expression
from .nodes import AstNode, BinaryKind, Constant, FunctionKind, Variable
from .simplify import make_binary, make_function, make_multiply


logger = logging.getLogger(__name__)

# Token kinds
NUMBER = 'number'
IMAGINARY = 'imaginary'
NAME = 'name'
OPERATOR = 'operator'
LPAREN = 'lparen'
RPAREN = 'rparen'

OPERATORS = frozenset(kind.symbol for kind in BinaryKind)

_NUMBER_RE = re.compile(r'(?:\d+\.?\d*|\.\d+)(?:e[+-]?\d+)?')
_NAME_RE = re.compile(r'[a-z]+')
_SPACE_RE = re.compile(r'\s')


@dataclass(frozen=True)
class Token:
    """A lexical token with its offset in the source text."""
    kind: str
    text: str
    position: int


def normalize(text: str) -> str:
    """Case-fold and turn every whitespace character into a plain space.

    Offsets are preserved, so token positions index the original text.
    """
    return _SPACE_RE.sub(' ', text).lower()


def tokenize(text: str) -> list[Token]:
    """
    Split normalized expression text into tokens.

    Whitespace ends a number or a name and is then dropped.

    Raises:
        ParseError: On a malformed number or a character that starts no token.
    """
    tokens: list[Token] = []
    pos = 0
    while pos < len(text):
        ch = text[pos]

        if ch.isspace():
            pos += 1
        elif ch.isdigit() or ch == '.':
            match = _NUMBER_RE.match(text, pos)
            if match is None:
                raise ParseError("Malformed numeric literal", text, pos, fragment=ch)
            end = match.end()
            if end < len(text) and (text[end] == '.' or text[end].isdigit()):
                run = re.match(r'[\d.]+', text[pos:]).group()
                raise ParseError("Malformed numeric literal", text, pos, fragment=run)
            # A trailing 'j' not followed by more letters marks an imaginary literal
            if end < len(text) and text[end] == 'j' and not text[end + 1:end + 2].isalpha():
                tokens.append(Token(IMAGINARY, text[pos:end + 1], pos))
                pos = end + 1
            else:
                tokens.append(Token(NUMBER, text[pos:end], pos))
                pos = end
        elif ch.isalpha():
            match = _NAME_RE.match(text, pos)
            if match is None:
                raise ParseError("Unsupported character", text, pos, fragment=ch)
            tokens.append(Token(NAME, match.group(), pos))
            pos = match.end()
        elif ch in OPERATORS:
            tokens.append(Token(OPERATOR, ch, pos))
            pos += 1
        elif ch == '(':
            tokens.append(Token(LPAREN, ch, pos))
            pos += 1
        elif ch == ')':
            tokens.append(Token(RPAREN, ch, pos))
            pos += 1
        else:
            raise ParseError("Unexpected character", text, pos, fragment=ch)
    return tokens


class ExpressionParser:
    """
    Two-stack operator precedence parser.

    Operands and operators are kept on separate stacks. When an operator
    arrives, operators of equal or higher priority already on the stack are
    applied first; ')' applies everything back to its '('. Every node is
    built through the simplifying constructors, so constant parts of the
    input are folded as they are read.
    """

    def __init__(self, domain: Optional[DomainLike] = None, config: Optional[Config] = None):
        self.config = config or Config()
        if domain is None:
            domain = self.config.domain
        self.domain: Optional[NumericDomain] = get_domain(domain) if domain is not None else None

    def parse(self, text: str) -> Expression:
        """
        Parse expression text.

        Raises:
            ParseError: If the text is not a well-formed expression.
        """
        if not isinstance(text, str):
            raise TypeError(f"Expression text must be a string, got {type(text).__name__}")
        source = normalize(text)
        tokens = tokenize(source)
        if not tokens:
            raise ParseError("Empty expression", source, 0)

        domain = self.domain
        if domain is None:
            domain = COMPLEX if any(t.kind == IMAGINARY for t in tokens) else REAL
            logger.debug("Detected %s domain for %r", domain.name, source)

        root = _Run(source, tokens, domain, self.config.max_depth).expression(0, len(tokens), 0)
        expr = Expression._adopt(root, domain)
        logger.debug("Parsed %r as %s", source, expr)
        return expr


class _Run:
    """State of a single parse: the token list and the chosen domain."""

    def __init__(self, source: str, tokens: list[Token], domain: NumericDomain, max_depth: int):
        self.source = source
        self.tokens = tokens
        self.domain = domain
        self.max_depth = max_depth

    def _error(self, message: str, token: Optional[Token] = None, **kwargs) -> ParseError:
        position = token.position if token is not None else len(self.source)
        fragment = kwargs.pop('fragment', token.text if token is not None else None)
        cls = kwargs.pop('cls', ParseError)
        return cls(message, self.source, position, fragment=fragment, **kwargs)

    def _fragment(self, start: int, end: int) -> str:
        """Source text covered by tokens[start:end]."""
        if start >= end:
            return ''
        last = self.tokens[end - 1]
        return self.source[self.tokens[start].position:last.position + len(last.text)]

    def expression(self, start: int, end: int, depth: int) -> AstNode:
        """Parse tokens[start:end] as a complete expression."""
        if depth > self.max_depth:
            raise self._error("Expression nested too deeply", self.tokens[start])

        operands: list[AstNode] = []
        operators: list[Token] = []
        expect_operand = True
        nesting = depth
        i = start

        while i < end:
            tok = self.tokens[i]

            if expect_operand:
                if tok.kind == LPAREN:
                    nesting += 1
                    if nesting > self.max_depth:
                        raise self._error("Expression nested too deeply", tok)
                    operators.append(tok)
                    i += 1
                elif tok.kind == OPERATOR and tok.text == '-':
                    node, i = self.negation(i, end, depth)
                    operands.append(node)
                    expect_operand = False
                elif tok.kind in (NUMBER, IMAGINARY, NAME):
                    node, i = self.primary(i, end, depth)
                    operands.append(node)
                    expect_operand = False
                elif tok.kind == RPAREN:
                    raise self._error("Expected an operand before ')'", tok)
                else:
                    raise self._error(f"Operator '{tok.text}' where an operand is expected", tok)
                continue

            if tok.kind == OPERATOR:
                kind = BinaryKind.from_symbol(tok.text)
                while operators and operators[-1].kind == OPERATOR and \
                        BinaryKind.from_symbol(operators[-1].text).priority >= kind.priority:
                    self._reduce(operands, operators)
                operators.append(tok)
                expect_operand = True
            elif tok.kind == RPAREN:
                while operators and operators[-1].kind != LPAREN:
                    self._reduce(operands, operators)
                if not operators:
                    raise self._error("Unmatched ')'", tok, cls=UnbalancedParentheses)
                operators.pop()
                nesting -= 1
            else:
                raise self._error("Expected an operator", tok)
            i += 1

        unclosed = [t for t in operators if t.kind == LPAREN]
        if unclosed:
            raise self._error("Unclosed '('", unclosed[-1], cls=UnbalancedParentheses)
        if expect_operand:
            raise self._error(
                "Unexpected end of expression",
                fragment=self._fragment(start, end) or None,
            )
        while operators:
            self._reduce(operands, operators)
        return operands[0]

    def _reduce(self, operands: list[AstNode], operators: list[Token]) -> None:
        """Pop an operator and two operands, push the combined node."""
        tok = operators.pop()
        if len(operands) < 2:
            raise self._error(f"Missing operand for '{tok.text}'", tok)
        right = operands.pop()
        left = operands.pop()
        operands.append(make_binary(BinaryKind.from_symbol(tok.text), left, right, self.domain))

    def _matching(self, open_index: int, end: int) -> int:
        """Index of the ')' closing the '(' at open_index."""
        level = 0
        for i in range(open_index, end):
            kind = self.tokens[i].kind
            if kind == LPAREN:
                level += 1
            elif kind == RPAREN:
                level -= 1
                if level == 0:
                    return i
        raise self._error("Unclosed '('", self.tokens[open_index], cls=UnbalancedParentheses)

    def group(self, i: int, end: int, depth: int) -> tuple[AstNode, int]:
        """Parse the parenthesized group opening at tokens[i]."""
        close = self._matching(i, end)
        if close == i + 1:
            raise self._error("Empty parentheses", self.tokens[i], fragment='()')
        return self.expression(i + 1, close, depth + 1), close + 1

    def negation(self, i: int, end: int, depth: int) -> tuple[AstNode, int]:
        """Parse unary minus at tokens[i] as -1 * operand."""
        if depth > self.max_depth:
            raise self._error("Expression nested too deeply", self.tokens[i])
        j = i + 1
        if j >= end:
            raise self._error("Unary '-' without an operand", self.tokens[i])
        nxt = self.tokens[j]
        if nxt.kind == OPERATOR and nxt.text == '-':
            operand, k = self.negation(j, end, depth + 1)
        elif nxt.kind in (NUMBER, IMAGINARY, NAME):
            operand, k = self.primary(j, end, depth)
        elif nxt.kind == LPAREN:
            operand, k = self.group(j, end, depth)
        else:
            raise self._error(f"Unexpected '{nxt.text}' after unary '-'", nxt)
        minus_one = Constant(self.domain.coerce(-1))
        return make_multiply(minus_one, operand, self.domain), k

    def primary(self, i: int, end: int, depth: int) -> tuple[AstNode, int]:
        """Parse a literal, a variable or a function call at tokens[i]."""
        tok = self.tokens[i]

        if tok.kind == NUMBER:
            value = float(tok.text)
            if not math.isfinite(value):
                raise self._error("Numeric literal out of range", tok)
            return Constant(self.domain.coerce(value)), i + 1

        if tok.kind == IMAGINARY:
            if not self.domain.is_complex():
                raise self._error(
                    "Imaginary literal in a real expression", tok,
                    suggestion="Parse with the complex domain.",
                )
            value = float(tok.text[:-1])
            if not math.isfinite(value):
                raise self._error("Numeric literal out of range", tok)
            return Constant(complex(0.0, value)), i + 1

        has_call = i + 1 < end and self.tokens[i + 1].kind == LPAREN
        if tok.text in FunctionKind.names():
            if not has_call:
                raise self._error(
                    f"Function '{tok.text}' must be followed by '('", tok,
                    suggestion=f"Write {tok.text}(x) instead of {tok.text} x.",
                )
            close = self._matching(i + 1, end)
            if close == i + 2:
                raise self._error(f"Empty argument to '{tok.text}'", tok, fragment=f"{tok.text}()")
            arg = self.expression(i + 2, close, depth + 1)
            return make_function(FunctionKind(tok.text), arg, self.domain), close + 1

        if has_call:
            suggestion = get_suggestion_for_name(tok.text) or \
                f"Supported functions: {', '.join(SUPPORTED_FUNCTIONS)}."
            raise self._error(f"Unknown function '{tok.text}'", tok, suggestion=suggestion)
        return Variable(tok.text), i + 1


def parse(text: str, domain: Optional[DomainLike] = None, config: Optional[Config] = None) -> Expression:
    """
    Parse infix expression text into an Expression.

    Args:
        text: Expression such as "x^2 + sin(x)".
        domain: REAL, COMPLEX, 'real' or 'complex'. If omitted the config's
                domain is used, and failing that the domain is complex
                exactly when the text contains an imaginary literal (2j).
        config: Parser settings.

    Raises:
        ParseError: If the text is not a well-formed expression.
    """
    return ExpressionParser(domain, config).parse(text)
