"""
Template node types.

A compiled request template is one tree of these nodes, mirroring the shape
of the original spec:

- LiteralNode: a leaf copied verbatim into every resolved request
- FieldRefNode: a leaf that is a single reference, resolved against the
  request part it belongs to
- FunctionCallRefNode: a leaf compiled into a standalone sub-template and
  invoked through the function table by handle
- CompositeNode: a mapping or sequence of child nodes
"""

from __future__ import annotations

from collections.abc import Iterator
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .expressions import FieldRef


class ContainerKind(StrEnum):
    """Kind of container a spec node was in the original spec."""

    OBJECT = "object"
    SEQUENCE = "sequence"


class LiteralNode(BaseModel):
    """A constant leaf."""

    value: Any = Field(description="The literal value")

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return repr(self.value)


class FieldRefNode(BaseModel):
    """A leaf resolved by a single inlined reference."""

    part: str = Field(description="Request part the reference is relative to")
    ref: FieldRef

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return "{" + str(self.ref) + "}"


class FunctionCallRefNode(BaseModel):
    """A leaf resolved by calling a sub-template from the function table."""

    handle: int = Field(description="Opaque function table handle")
    label: str = Field(default="", description="Human-readable origin, for diagnostics")

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return f"<fn #{self.handle} {self.label}>"


class CompositeNode(BaseModel):
    """A mapping or sequence of child nodes."""

    kind: ContainerKind
    entries: list[tuple[str | int, TemplateNode]] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    def new_container(self) -> dict[str, Any] | list[Any]:
        """A fresh empty container of this node's kind."""
        return [] if self.kind == ContainerKind.SEQUENCE else {}

    def iter_leaves(
        self, prefix: tuple[str | int, ...] = ()
    ) -> Iterator[tuple[tuple[str | int, ...], TemplateNode]]:
        """Yield ``(path, node)`` for every non-composite descendant.

        Empty composites are yielded too, they resolve to an empty container.
        """
        for key, node in self.entries:
            path = (*prefix, key)
            if isinstance(node, CompositeNode) and node.entries:
                yield from node.iter_leaves(path)
            else:
                yield path, node


TemplateNode = LiteralNode | FieldRefNode | FunctionCallRefNode | CompositeNode

CompositeNode.model_rebuild()
