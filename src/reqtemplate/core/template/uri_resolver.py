"""
URI resolvers.

The ``uri`` field of a request spec is resolved by one of three strategies,
picked from the shape of the pattern:

- EXPRESSION: the whole uri is one placeholder (``{uri}``), or it refers to
  ``$`` / ``$$`` (``{$.request.params.target}``). Evaluated as a template
  over the inbound params; strings are parsed into a ``URI``.
- TEMPLATED_HOST: the host is a placeholder and the path is a pattern
  (``{host}/api/{path}``, ``https://{domain}/wiki/{title}``). The host is
  evaluated as a template, the path expanded as a ``PathTemplate``.
- PATH_TEMPLATE: anything else (``/{domain}/sys/page/{title}``), expanded as
  a ``PathTemplate`` against the inbound params.

A resolver returns ``UNDEFINED`` when the uri cannot be built.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from enum import StrEnum
from typing import Any, Protocol

from reqtemplate.core.errors import MissingParameterError
from reqtemplate.core.expression_lang.evaluator import to_text
from reqtemplate.core.settings import CompilerSettings
from reqtemplate.core.undefined import UNDEFINED
from reqtemplate.core.uri import URI, PathTemplate

from .functions import FunctionTable
from .splitter import split_template
from .subtemplate import SubTemplate, part_view

logger = logging.getLogger(__name__)

_WHOLE_EXPRESSION_RE = re.compile(r"^\{[^{}]+\}$")
_CONTEXT_ROOT_RE = re.compile(r"\{\$\$?\..+\}")
_TEMPLATED_HOST_RE = re.compile(r"^((?:https?://)?\{[^/]+\}/)")


class UriStrategy(StrEnum):
    """How the ``uri`` field is resolved."""

    EXPRESSION = "expression"
    TEMPLATED_HOST = "templated-host"
    PATH_TEMPLATE = "path-template"


class UriResolver(Protocol):
    strategy: UriStrategy

    def __call__(self, context: Any) -> URI | Any: ...


def detect_strategy(uri: str) -> UriStrategy:
    """Pick the resolution strategy for a uri pattern."""
    if _WHOLE_EXPRESSION_RE.match(uri) or _CONTEXT_ROOT_RE.search(uri):
        return UriStrategy.EXPRESSION
    if _TEMPLATED_HOST_RE.match(uri):
        return UriStrategy.TEMPLATED_HOST
    return UriStrategy.PATH_TEMPLATE


def _params(context: Any, settings: CompilerSettings) -> Mapping[str, Any]:
    params = part_view(context, settings.request_key, settings.params_part)
    return params if isinstance(params, Mapping) else {}


class ExpressionUriResolver:
    """Evaluates the whole uri as a template over the inbound params."""

    strategy = UriStrategy.EXPRESSION

    def __init__(self, uri: str, functions: FunctionTable, settings: CompilerSettings) -> None:
        self.pattern = uri
        self._template = SubTemplate(
            split_template(uri, field="uri"),
            part=settings.params_part,
            globals=functions.helpers,
            request_key=settings.request_key,
            label="uri",
        )

    def __call__(self, context: Any) -> Any:
        value = self._template(context)
        if value is UNDEFINED or isinstance(value, URI):
            return value
        return URI.parse(to_text(value))


class TemplatedHostUriResolver:
    """Resolves a templated host and a path pattern separately."""

    strategy = UriStrategy.TEMPLATED_HOST

    def __init__(self, uri: str, functions: FunctionTable, settings: CompilerSettings) -> None:
        self.pattern = uri
        self.settings = settings
        host = _TEMPLATED_HOST_RE.match(uri).group(1)  # type: ignore[union-attr]
        self._host = SubTemplate(
            split_template(host, field="uri"),
            part=settings.params_part,
            globals=functions.helpers,
            request_key=settings.request_key,
            label="uri host",
        )
        self.path_template = PathTemplate.parse(uri[len(host) :])

    def __call__(self, context: Any) -> Any:
        host = self._host(context)
        if host is UNDEFINED:
            logger.debug("Host of uri %s did not resolve", self.pattern)
            return UNDEFINED
        try:
            path = self.path_template.expand(_params(context, self.settings))
        except MissingParameterError as e:
            logger.debug("Cannot expand uri %s: %s", self.pattern, e)
            return UNDEFINED
        return path.with_base(to_text(host).rstrip("/"))


class PathTemplateUriResolver:
    """Expands a path pattern against the inbound params."""

    strategy = UriStrategy.PATH_TEMPLATE

    def __init__(self, uri: str, functions: FunctionTable, settings: CompilerSettings) -> None:
        self.pattern = uri
        self.settings = settings
        self.path_template = PathTemplate.parse(uri)

    def __call__(self, context: Any) -> Any:
        try:
            return self.path_template.expand(_params(context, self.settings))
        except MissingParameterError as e:
            logger.debug("Cannot expand uri %s: %s", self.pattern, e)
            return UNDEFINED


_RESOLVERS: dict[UriStrategy, type] = {
    UriStrategy.EXPRESSION: ExpressionUriResolver,
    UriStrategy.TEMPLATED_HOST: TemplatedHostUriResolver,
    UriStrategy.PATH_TEMPLATE: PathTemplateUriResolver,
}


def build_uri_resolver(
    uri: str,
    functions: FunctionTable,
    settings: CompilerSettings | None = None,
) -> UriResolver:
    """Build the resolver for a uri pattern.

    Args:
        uri: The ``uri`` value of a request spec.
        functions: Function table providing the ``$$`` helpers.
        settings: Compiler settings (where the inbound params live).

    Returns:
        A callable ``resolver(context) -> URI | UNDEFINED``.

    Raises:
        TemplateSyntaxError: If a placeholder in the uri is malformed.
    """
    settings = settings or CompilerSettings()
    strategy = detect_strategy(uri)
    logger.debug("Uri %s resolved with strategy %s", uri, strategy)
    return _RESOLVERS[strategy](uri, functions, settings)
