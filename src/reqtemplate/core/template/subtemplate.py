"""
Standalone sub-templates.

A sub-template is one templated string (``"test {field}"``,
``"{$$.merge($.request.query, {a: 1})}"``) compiled into a function of the
evaluation context. Relative references resolve against one request part,
e.g. ``context["request"]["body"]`` for fields under ``body``.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from reqtemplate.core.expression_lang.evaluator import compile_forest, get_member
from reqtemplate.core.ir.expressions import Expr
from reqtemplate.core.undefined import UNDEFINED

logger = logging.getLogger(__name__)


def part_view(context: Any, request_key: str, part: str) -> Any:
    """The request part relative references of ``part`` resolve against."""
    return get_member(get_member(context, request_key), part)


class SubTemplate:
    """A compiled template string bound to a request part."""

    def __init__(
        self,
        segments: Sequence[str | Expr],
        *,
        part: str,
        globals: Mapping[str, Any],
        request_key: str = "request",
        label: str = "",
    ) -> None:
        self.part = part
        self.request_key = request_key
        self.label = label
        self._evaluator = compile_forest(segments, globals=globals, on_error=self._on_error)

    def _on_error(self, expr: Expr) -> Any:
        logger.debug("Unresolved reference {%s} in %s", expr, self.label or self.part)
        return UNDEFINED

    def __call__(self, context: Any) -> Any:
        return self._evaluator(context, part_view(context, self.request_key, self.part))

    def __repr__(self) -> str:
        return f"SubTemplate({self.label or self.part!r}, {self._evaluator!r})"
