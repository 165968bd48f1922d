"""
Expression evaluator for placeholder expressions.

Evaluates expression AST nodes against a ``Scope``: the whole evaluation
context (``$``), a stack of request-part views for relative references, and
the global function table (``$$``). Pure evaluation, no I/O. Does NOT use
Python's eval().

References that cannot be resolved are handed to the scope's ``on_error``
callback, whose return value (``UNDEFINED`` by default) is substituted. The
rest of the tree keeps evaluating. Exceptions raised by called functions
propagate.
"""

from __future__ import annotations

import json
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from reqtemplate.core.ir.expressions import (
    ArrayLiteral,
    Expr,
    FieldRef,
    FuncCall,
    Literal,
    ObjectLiteral,
    PathRoot,
)
from reqtemplate.core.undefined import UNDEFINED

ErrorHandler = Callable[[Expr], Any]

_SCALAR_TYPES = (str, bytes, int, float, complex)


class ExpressionEvalError(Exception):
    """Error during expression evaluation."""


def _undefined_on_error(expr: Expr) -> Any:
    return UNDEFINED


@dataclass(frozen=True)
class Scope:
    """Bindings for one evaluation.

    Attributes:
        root: The whole evaluation context, addressed by ``$``.
        views: Request-part views for relative references, innermost last.
        globals: The global function table, addressed by ``$$``.
        on_error: Called with the failing node when a reference cannot be
            resolved; its return value replaces the node's value.
    """

    root: Any
    views: tuple[Any, ...] = ()
    globals: Mapping[str, Any] = field(default_factory=dict)
    on_error: ErrorHandler = _undefined_on_error

    @property
    def model(self) -> Any:
        """The innermost request-part view."""
        return self.views[-1] if self.views else UNDEFINED


def get_member(container: Any, key: str | int) -> Any:
    """Look up ``key`` in a mapping, sequence or plain object.

    Returns ``UNDEFINED`` when the member does not exist. Scalars have no
    members and object attributes are data only: methods, private names and
    other callables are never exposed.
    """
    if container is UNDEFINED or container is None:
        return UNDEFINED
    if isinstance(container, _SCALAR_TYPES):
        return UNDEFINED
    if isinstance(container, Mapping):
        if key in container:
            return container[key]
        if isinstance(key, int) and str(key) in container:
            return container[str(key)]
        return UNDEFINED
    if isinstance(container, Sequence) and not isinstance(container, (str, bytes)):
        if isinstance(key, int) and 0 <= key < len(container):
            return container[key]
        return UNDEFINED
    if isinstance(key, str) and not key.startswith("_"):
        value = getattr(container, key, UNDEFINED)
        return UNDEFINED if callable(value) else value
    return UNDEFINED


def evaluate(expr: Expr, scope: Scope) -> Any:
    """Evaluate an expression within a scope.

    This is a safe tree-walking interpreter; it does NOT use Python's
    eval(). Only the closed set of AST node types are handled.

    Args:
        expr: Parsed expression AST.
        scope: Bindings for ``$``, ``$$`` and relative references.

    Returns:
        The computed value, or whatever ``scope.on_error`` substituted for an
        unresolved reference.

    Raises:
        ExpressionEvalError: If the node type is unknown.
    """
    return _interpret(expr, scope)


def _interpret(expr: Expr, scope: Scope) -> Any:
    """Dispatch evaluation to the appropriate handler."""
    if isinstance(expr, Literal):
        return expr.value

    if isinstance(expr, FieldRef):
        return _interpret_field_ref(expr, scope)

    if isinstance(expr, FuncCall):
        return _interpret_func_call(expr, scope)

    if isinstance(expr, ObjectLiteral):
        result: dict[str, Any] = {}
        for key, value_expr in expr.entries:
            value = _interpret(value_expr, scope)
            if value is not UNDEFINED:
                result[key] = value
        return result

    if isinstance(expr, ArrayLiteral):
        items = [_interpret(item, scope) for item in expr.items]
        return [None if item is UNDEFINED else item for item in items]

    raise ExpressionEvalError(f"Unknown expression type: {type(expr).__name__}")


def _interpret_field_ref(expr: FieldRef, scope: Scope) -> Any:
    """Resolve a reference against its root."""
    if expr.root == PathRoot.CONTEXT:
        current: Any = scope.root
        segments = expr.path
    elif expr.root == PathRoot.GLOBALS:
        current = scope.globals
        segments = expr.path
    else:
        # Relative: the innermost view holding the first segment wins
        first, segments = expr.path[0], expr.path[1:]
        current = UNDEFINED
        for view in reversed(scope.views):
            current = get_member(view, first)
            if current is not UNDEFINED:
                break
        if current is UNDEFINED:
            return scope.on_error(expr)

    for segment in segments:
        current = get_member(current, segment)
        if current is UNDEFINED:
            return scope.on_error(expr)
    return current


def _interpret_func_call(expr: FuncCall, scope: Scope) -> Any:
    """Evaluate a call into the global function table.

    Bare names and ``$$`` lookups are the only callees; values reached
    through the context are never called.
    """
    if expr.callee.is_simple:
        fn = scope.globals.get(str(expr.callee.path[0]), UNDEFINED)
    elif expr.callee.root == PathRoot.GLOBALS:
        fn = _interpret_field_ref(expr.callee, scope)
    else:
        fn = UNDEFINED

    if not callable(fn):
        return scope.on_error(expr)

    args = [_interpret(arg, scope) for arg in expr.args]
    return fn(*args)


# ---------------------------------------------------------------------------
# Fragment accumulation
# ---------------------------------------------------------------------------


def to_text(value: Any) -> str:
    """Render a fragment for string interpolation."""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    if isinstance(value, (Mapping, list, tuple)):
        return json.dumps(value, default=str, separators=(",", ":"))
    return str(value)


class FragmentAccumulator:
    """Collects the fragments produced by one evaluation.

    A single fragment is kept as-is (objects stay objects); several
    fragments are joined as text. Any undefined fragment makes the whole
    value undefined.
    """

    __slots__ = ("_fragments",)

    def __init__(self) -> None:
        self._fragments: list[Any] = []

    def push(self, fragment: Any) -> None:
        self._fragments.append(fragment)

    @property
    def value(self) -> Any:
        if not self._fragments:
            return UNDEFINED
        if any(fragment is UNDEFINED for fragment in self._fragments):
            return UNDEFINED
        if len(self._fragments) == 1:
            return self._fragments[0]
        return "".join(to_text(fragment) for fragment in self._fragments)


class ForestEvaluator:
    """A compiled sequence of literal text runs and expressions.

    Calling it evaluates every segment into a fresh accumulator, so one
    instance can be shared between concurrent callers.
    """

    def __init__(
        self,
        segments: Sequence[str | Expr],
        globals: Mapping[str, Any],
        on_error: ErrorHandler,
    ) -> None:
        self.segments = tuple(segments)
        self.globals = globals
        self.on_error = on_error

    def __call__(self, root: Any, model: Any = UNDEFINED) -> Any:
        scope = Scope(
            root=root,
            views=(model,),
            globals=self.globals,
            on_error=self.on_error,
        )
        accumulator = FragmentAccumulator()
        for segment in self.segments:
            if isinstance(segment, str):
                accumulator.push(segment)
            else:
                accumulator.push(_interpret(segment, scope))
        return accumulator.value

    def __repr__(self) -> str:
        parts = [s if isinstance(s, str) else "{" + str(s) + "}" for s in self.segments]
        return f"ForestEvaluator({''.join(parts)!r})"


def compile_forest(
    segments: Sequence[str | Expr],
    *,
    globals: Mapping[str, Any] | None = None,
    on_error: ErrorHandler | None = None,
) -> ForestEvaluator:
    """Compile split template segments into a reusable evaluator.

    Args:
        segments: Literal text runs and parsed expressions, in order.
        globals: The mapping exposed as ``$$`` and used for bare calls.
        on_error: Substitute provider for unresolved references.

    Returns:
        ``evaluator(root, model)`` returning the accumulated value.
    """
    return ForestEvaluator(
        segments,
        globals if globals is not None else {},
        on_error or _undefined_on_error,
    )
