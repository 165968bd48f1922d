"""
Field classification.

Walks one request part of a spec (``headers``, ``query``, ``body``, ...) and
turns every leaf into a template node:

- a plain string (no placeholder) or non-string scalar → ``LiteralNode``
- a string that is exactly one plain reference, ``{field}``, ``{a.b.c}``
  or ``{$.request.params.domain}`` → ``FieldRefNode``, resolved inline
- anything else (text around placeholders, several placeholders, calls,
  ``$$`` lookups, object literals) → a ``SubTemplate`` registered in the
  function table, referenced by a ``FunctionCallRefNode``

Mappings and sequences become ``CompositeNode``.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from reqtemplate.core.ir.expressions import FieldRef, is_reference
from reqtemplate.core.ir.template import (
    CompositeNode,
    ContainerKind,
    FieldRefNode,
    FunctionCallRefNode,
    LiteralNode,
    TemplateNode,
)
from reqtemplate.core.settings import CompilerSettings

from .functions import FunctionTable
from .splitter import has_placeholder, split_template
from .subtemplate import SubTemplate

logger = logging.getLogger(__name__)


class FieldKind(StrEnum):
    """How a leaf is resolved at evaluation time."""

    LITERAL = "literal"
    INLINE = "inline"
    COMPLEX = "complex"
    URI = "uri"
    METHOD = "method"


@dataclass(frozen=True)
class ClassifiedField:
    """Classification report entry for one leaf."""

    path: tuple[str | int, ...]
    kind: FieldKind
    source: Any

    @property
    def dotted_path(self) -> str:
        return ".".join(str(key) for key in self.path)


def _is_empty_container(node: Any) -> bool:
    if isinstance(node, (str, bytes)):
        return False
    return isinstance(node, (Mapping, Sequence)) and not node


def _dotted(path: Sequence[str | int]) -> str:
    return ".".join(str(key) for key in path)


class FieldClassifier:
    """Classifies spec leaves and compiles the complex ones.

    Args:
        functions: Table receiving compiled sub-templates.
        settings: Compiler settings (request key in the context).
    """

    def __init__(self, functions: FunctionTable, settings: CompilerSettings | None = None) -> None:
        self.functions = functions
        self.settings = settings or CompilerSettings()
        self.fields: list[ClassifiedField] = []

    def classify_part(self, part: str, subspec: Any) -> TemplateNode:
        """Classify the whole subtree of one request part."""
        return self._classify(part, subspec, (part,))

    def _classify(self, part: str, node: Any, path: tuple[str | int, ...]) -> TemplateNode:
        if _is_empty_container(node):
            self._record(path, FieldKind.LITERAL, node)
        if isinstance(node, Mapping):
            return CompositeNode(
                kind=ContainerKind.OBJECT,
                entries=[
                    (str(key), self._classify(part, value, (*path, str(key))))
                    for key, value in node.items()
                ],
            )
        if isinstance(node, Sequence) and not isinstance(node, (str, bytes)):
            return CompositeNode(
                kind=ContainerKind.SEQUENCE,
                entries=[
                    (index, self._classify(part, value, (*path, index)))
                    for index, value in enumerate(node)
                ],
            )
        return self.classify_leaf(part, node, path)

    def classify_leaf(self, part: str, value: Any, path: tuple[str | int, ...]) -> TemplateNode:
        """Classify a single leaf value."""
        if not has_placeholder(value):
            self._record(path, FieldKind.LITERAL, value)
            return LiteralNode(value=value)

        segments = split_template(value, field=_dotted(path))
        if len(segments) == 1 and is_reference(segments[0]):
            ref = segments[0]
            assert isinstance(ref, FieldRef)
            self._record(path, FieldKind.INLINE, value)
            return FieldRefNode(part=part, ref=ref)

        label = _dotted(path)
        sub_template = SubTemplate(
            segments,
            part=part,
            globals=self.functions.helpers,
            request_key=self.settings.request_key,
            label=label,
        )
        handle = self.functions.register(sub_template, label)
        self._record(path, FieldKind.COMPLEX, value)
        return FunctionCallRefNode(handle=handle, label=label)

    def record(self, path: tuple[str | int, ...], kind: FieldKind, source: Any) -> None:
        """Add a report entry for a field classified elsewhere (uri, method)."""
        self._record(path, kind, source)

    def _record(self, path: tuple[str | int, ...], kind: FieldKind, source: Any) -> None:
        logger.debug("Field %s classified as %s", _dotted(path), kind)
        self.fields.append(ClassifiedField(path=path, kind=kind, source=source))
