"""
Expression types for placeholder content.

This module defines the typed AST produced by the placeholder expression
parser and walked by the evaluator.

Supports:
- Relative references: field, a.b.c, headers['name-with-dashes']
- Absolute references: $.request.params.domain
- Global function table references: $$.merge
- Function calls: default(field, 'x'), $$.merge($.request.query, {a: 1})
- Object and array literals: {a: 1, 'b-c': field}, [1, 2]
- Literals: strings, numbers, true, false, null
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# Reference roots
# ---------------------------------------------------------------------------


class PathRoot(StrEnum):
    """Where a reference starts its lookup."""

    RELATIVE = ""  # the current request part
    CONTEXT = "$"  # the whole evaluation context
    GLOBALS = "$$"  # the global function table


# ---------------------------------------------------------------------------
# AST node types
# ---------------------------------------------------------------------------


class Literal(BaseModel):
    """A literal value: int, float, str, bool, or None (null)."""

    value: int | float | str | bool | None = Field(description="The literal value")

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        if self.value is None:
            return "null"
        if isinstance(self.value, str):
            return repr(self.value)
        if isinstance(self.value, bool):
            return "true" if self.value else "false"
        return str(self.value)


class FieldRef(BaseModel):
    """
    Reference to a value, by root and path.

    Examples:
        - FieldRef(path=["domain"]) → domain
        - FieldRef(root=PathRoot.CONTEXT, path=["request", "params"]) → $.request.params
        - FieldRef(root=PathRoot.GLOBALS, path=["merge"]) → $$.merge
        - FieldRef(path=["items", 0]) → items[0]
    """

    root: PathRoot = Field(default=PathRoot.RELATIVE, description="Lookup root")
    path: list[str | int] = Field(default_factory=list, description="Path segments")

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        text = self.root.value
        for segment in self.path:
            if isinstance(segment, int):
                text += f"[{segment}]"
            elif text:
                text += f".{segment}"
            else:
                text = segment
        return text

    @property
    def is_simple(self) -> bool:
        """Single relative field, no traversal."""
        return self.root == PathRoot.RELATIVE and len(self.path) == 1

    @property
    def field_name(self) -> str | int | None:
        """The final path segment."""
        return self.path[-1] if self.path else None


class FuncCall(BaseModel):
    """
    Function call: callee(arg1, arg2, ...).

    A bare callee (``default(...)``) is looked up in the global function
    table; any other callee is resolved as an ordinary reference.
    """

    callee: FieldRef = Field(description="Reference to the function")
    args: list[Expr] = Field(default_factory=list, description="Arguments")

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        args_str = ", ".join(str(a) for a in self.args)
        return f"{self.callee}({args_str})"


class ObjectLiteral(BaseModel):
    """Object construction: {key: expr, ...}."""

    entries: list[tuple[str, Expr]] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        body = ", ".join(f"{key!r}: {value}" for key, value in self.entries)
        return "{" + body + "}"


class ArrayLiteral(BaseModel):
    """Array construction: [expr, ...]."""

    items: list[Expr] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return "[" + ", ".join(str(i) for i in self.items) + "]"


# ---------------------------------------------------------------------------
# Union type
# ---------------------------------------------------------------------------

Expr = Literal | FieldRef | FuncCall | ObjectLiteral | ArrayLiteral

# Rebuild models for recursive forward references
FuncCall.model_rebuild()
ObjectLiteral.model_rebuild()
ArrayLiteral.model_rebuild()


def is_reference(expr: Any) -> bool:
    """True when ``expr`` is a plain data reference (not into ``$$``)."""
    return isinstance(expr, FieldRef) and expr.root != PathRoot.GLOBALS
