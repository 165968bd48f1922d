"""
reqtemplate - declarative request templates.

Compiles a nested spec of an outbound request (uri, method, headers, query,
body) with ``{expr}`` placeholders into a reusable evaluator producing
resolved requests from inbound request contexts.
"""

from __future__ import annotations

from ._version import get_version
from .core.errors import (
    IllegalSpecError,
    MissingParameterError,
    ReqTemplateError,
    SpecLoadError,
    TemplateSyntaxError,
)
from .core.settings import CompilerSettings, load_settings
from .core.spec_loader import load_templates
from .core.template import RequestTemplate
from .core.undefined import UNDEFINED
from .core.uri import URI, PathTemplate

__version__ = get_version()

__all__ = [
    "__version__",
    "RequestTemplate",
    "CompilerSettings",
    "load_settings",
    "load_templates",
    "UNDEFINED",
    "URI",
    "PathTemplate",
    "ReqTemplateError",
    "TemplateSyntaxError",
    "IllegalSpecError",
    "MissingParameterError",
    "SpecLoadError",
]
