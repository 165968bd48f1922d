"""
Placeholder expression language.

Tokenizer, parser and evaluator for the content of ``{...}`` placeholders.

Usage:
    from reqtemplate.core.expression_lang import Scope, evaluate, parse_expr

    expr = parse_expr("$.request.params.domain")
    result = evaluate(expr, Scope(root={"request": {"params": {"domain": "x"}}}))
    # result == "x"
"""

from reqtemplate.core.expression_lang.evaluator import (
    FragmentAccumulator,
    Scope,
    compile_forest,
    evaluate,
    get_member,
)
from reqtemplate.core.expression_lang.parser import ExpressionParseError, parse_expr

__all__ = [
    "ExpressionParseError",
    "FragmentAccumulator",
    "Scope",
    "compile_forest",
    "evaluate",
    "get_member",
    "parse_expr",
]
