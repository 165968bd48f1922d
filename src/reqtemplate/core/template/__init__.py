"""
Request template compilation.

Usage:
    from reqtemplate.core.template import RequestTemplate

    template = RequestTemplate(spec)
    request = template.eval(context)
"""

from .classifier import ClassifiedField, FieldClassifier, FieldKind
from .compiler import MethodResolver, RequestTemplate, ResolvedRequest
from .functions import FunctionTable, SubTemplateHandle
from .helpers import HELPERS, default, merge
from .setter import PathSetter, PathStep, build_path_setter
from .splitter import has_placeholder, split_template
from .subtemplate import SubTemplate
from .uri_resolver import UriStrategy, build_uri_resolver, detect_strategy

__all__ = [
    # Compiler
    "RequestTemplate",
    "ResolvedRequest",
    "MethodResolver",
    # Classification
    "ClassifiedField",
    "FieldClassifier",
    "FieldKind",
    # Building blocks
    "FunctionTable",
    "SubTemplateHandle",
    "SubTemplate",
    "PathSetter",
    "PathStep",
    "build_path_setter",
    "has_placeholder",
    "split_template",
    "UriStrategy",
    "build_uri_resolver",
    "detect_strategy",
    # Helpers
    "HELPERS",
    "default",
    "merge",
]
