"""
Request template compiler and evaluation runtime.

A ``RequestTemplate`` is compiled once from a request spec and evaluated for
every inbound request:

    template = RequestTemplate({
        "uri": "/{domain}/sys/summary/{title}",
        "method": "post",
        "headers": {"x-domain": "{$.request.params.domain}"},
        "body": {"title": "{title}", "label": "page {title}"},
    })
    template.eval({"request": {"params": {"domain": "en.wikipedia.org"},
                               "body": {"title": "Foo"}}})
    # {"uri": URI("/en.wikipedia.org/sys/summary/..."), "method": "post", ...}

Compilation turns the spec into one ``CompositeNode`` tree. The ``uri`` and
``method`` fields are registered in the function table, every other part goes
through the field classifier. The tree is then flattened into a plan of
``(setter, node)`` leaves. Evaluation resolves each leaf into a fresh
output dict; leaves that do not resolve are left out.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any, TypedDict

from reqtemplate.core.errors import TemplateSyntaxError
from reqtemplate.core.expression_lang.evaluator import Scope, evaluate, get_member
from reqtemplate.core.ir.template import (
    CompositeNode,
    ContainerKind,
    FieldRefNode,
    FunctionCallRefNode,
    LiteralNode,
    TemplateNode,
)
from reqtemplate.core.settings import CompilerSettings
from reqtemplate.core.undefined import UNDEFINED
from reqtemplate.core.uri import URI

from .classifier import ClassifiedField, FieldClassifier, FieldKind
from .functions import FunctionTable
from .setter import PathSetter, build_path_setter
from .splitter import has_placeholder, split_template
from .subtemplate import SubTemplate, part_view
from .uri_resolver import UriStrategy, build_uri_resolver

logger = logging.getLogger(__name__)


class ResolvedRequest(TypedDict, total=False):
    """Shape of an evaluated request. Other spec parts may appear too."""

    method: str
    uri: URI
    headers: dict[str, Any]
    query: dict[str, Any]
    body: Any


class MethodResolver:
    """Resolves the request method.

    The spec's method wins when it resolves to a non-empty value, then the
    inbound request's method, then the configured default.
    """

    def __init__(
        self,
        method: Any,
        functions: FunctionTable,
        settings: CompilerSettings,
    ) -> None:
        self.settings = settings
        self.source = method
        self._template: SubTemplate | None = None
        if has_placeholder(method):
            self._template = SubTemplate(
                split_template(method, field="method"),
                part=settings.params_part,
                globals=functions.helpers,
                request_key=settings.request_key,
                label="method",
            )

    def __call__(self, context: Any) -> Any:
        method = self._template(context) if self._template else self.source
        if method:
            return method
        inbound = get_member(get_member(context, self.settings.request_key), "method")
        return inbound or self.settings.default_method


class RequestTemplate:
    """A compiled request spec.

    Args:
        spec: Mapping of request parts (``uri``, ``method``, ``headers``,
            ``query``, ``body``, ...) to templated values.
        settings: Compiler settings; defaults apply when omitted.
        helpers: Extra functions exposed to expressions next to
            ``default`` and ``merge``.

    Raises:
        TemplateSyntaxError: If the spec is not a mapping or a placeholder
            cannot be parsed.
    """

    def __init__(
        self,
        spec: Any,
        *,
        settings: CompilerSettings | None = None,
        helpers: Mapping[str, Callable[..., Any]] | None = None,
    ) -> None:
        if not isinstance(spec, Mapping):
            raise TemplateSyntaxError(
                f"Illegal spec. Request template must be an object, got {type(spec).__name__}"
            )

        self.spec = spec
        self.settings = settings or CompilerSettings()
        self.functions = FunctionTable(helpers)
        self.uri_strategy: UriStrategy | None = None

        classifier = FieldClassifier(self.functions, self.settings)
        entries: list[tuple[str | int, TemplateNode]] = []
        for key, subspec in spec.items():
            part = str(key)
            if part == "uri":
                node = self._compile_uri(subspec, classifier)
            elif part == "method":
                node = self._compile_method(subspec, classifier)
            else:
                node = classifier.classify_part(part, subspec)
            entries.append((part, node))

        self.tree = CompositeNode(kind=ContainerKind.OBJECT, entries=entries)
        self.fields: tuple[ClassifiedField, ...] = tuple(classifier.fields)
        self._plan: list[tuple[PathSetter, TemplateNode]] = [
            (build_path_setter(path, spec), node) for path, node in self.tree.iter_leaves()
        ]
        logger.debug(
            "Compiled request template: %d fields, %d sub-templates",
            len(self._plan),
            len(self.functions),
        )

    def _compile_uri(self, uri: Any, classifier: FieldClassifier) -> TemplateNode:
        if isinstance(uri, URI):
            uri = str(uri)
        if not isinstance(uri, str):
            raise TemplateSyntaxError(
                f"Illegal spec. uri must be a string, got {type(uri).__name__}"
            )
        resolver = build_uri_resolver(uri, self.functions, self.settings)
        self.uri_strategy = resolver.strategy
        classifier.record(("uri",), FieldKind.URI, uri)
        return FunctionCallRefNode(handle=self.functions.register(resolver, "uri"), label="uri")

    def _compile_method(self, method: Any, classifier: FieldClassifier) -> TemplateNode:
        resolver = MethodResolver(method, self.functions, self.settings)
        classifier.record(("method",), FieldKind.METHOD, method)
        return FunctionCallRefNode(
            handle=self.functions.register(resolver, "method"), label="method"
        )

    # -------------------------------------------------------------------------
    # Evaluation
    # -------------------------------------------------------------------------

    def eval(self, context: Any) -> ResolvedRequest:
        """Resolve the template against an evaluation context.

        Args:
            context: Mapping (or object) holding the inbound request under
                ``request`` plus any auxiliary values.

        Returns:
            A new dict with every field that resolved to a defined value.

        Raises:
            IllegalSpecError: If a helper is called with illegal operands.
        """
        result: dict[str, Any] = {}
        for setter, node in self._plan:
            setter.set(result, self._resolve_node(node, context))
        return result  # type: ignore[return-value]

    evaluate = eval

    def _resolve_node(self, node: TemplateNode, context: Any) -> Any:
        if isinstance(node, LiteralNode):
            return node.value
        if isinstance(node, FieldRefNode):
            scope = Scope(
                root=context,
                views=(part_view(context, self.settings.request_key, node.part),),
                globals=self.functions.helpers,
            )
            return evaluate(node.ref, scope)
        if isinstance(node, FunctionCallRefNode):
            return self.functions.call(node.handle, context)
        if isinstance(node, CompositeNode) and not node.entries:
            return node.new_container()
        # Non-empty composites are flattened into the plan
        raise TypeError(f"Unexpected template node: {type(node).__name__}")

    def __call__(self, context: Any) -> ResolvedRequest:
        return self.eval(context)

    def __repr__(self) -> str:
        parts = ", ".join(str(key) for key, _ in self.tree.entries)
        return f"RequestTemplate({parts})"
