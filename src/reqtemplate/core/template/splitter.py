"""
Split a template string into literal text runs and parsed expressions.

    split_template("/{domain}/test")
    # ["/", FieldRef(path=["domain"]), "/test"]

Braces nest: ``{$$.merge(a, {b: c})}`` is one placeholder, the inner
``{...}`` is object literal syntax.
"""

from __future__ import annotations

import re

from reqtemplate.core.errors import make_syntax_error
from reqtemplate.core.expression_lang.parser import ExpressionParseError, parse_expr
from reqtemplate.core.ir.expressions import Expr

# A string is templated when it contains at least one non-empty {...} run
_PLACEHOLDER_RE = re.compile(r"\{[^}]+\}")


def has_placeholder(value: object) -> bool:
    """True when ``value`` is a string containing a ``{...}`` placeholder."""
    return isinstance(value, str) and _PLACEHOLDER_RE.search(value) is not None


def split_template(source: str, field: str | None = None) -> list[str | Expr]:
    """Split ``source`` into literal runs and parsed placeholder expressions.

    Args:
        source: The raw template string.
        field: Dotted field path, used in error messages.

    Returns:
        Ordered segments: ``str`` for literal text, ``Expr`` for placeholders.

    Raises:
        TemplateSyntaxError: On unbalanced braces or a malformed expression.
    """
    segments: list[str | Expr] = []
    depth = 0
    start = 0

    for index, char in enumerate(source):
        if char == "{":
            if depth == 0:
                if start != index:
                    segments.append(source[start:index])
                start = index + 1
            depth += 1
        elif char == "}":
            if depth == 0:
                raise make_syntax_error(
                    "Illegal template, unbalanced curly braces", source, index, field
                )
            if depth == 1:
                segments.append(_parse_placeholder(source, start, index, field))
                start = index + 1
            depth -= 1

    if depth > 0:
        raise make_syntax_error(
            "Illegal template, unbalanced curly braces", source, len(source), field
        )
    if start < len(source):
        segments.append(source[start:])
    return segments


def _parse_placeholder(source: str, start: int, end: int, field: str | None) -> Expr:
    try:
        return parse_expr(source[start:end])
    except ExpressionParseError as e:
        raise make_syntax_error(str(e), source, start + e.pos, field) from e
