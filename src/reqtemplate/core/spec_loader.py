"""
Loading request templates from YAML documents.

Two layouts are recognised. A plain ``templates`` mapping:

    templates:
      summary:
        uri: /{domain}/sys/summary/{title}
        headers:
          cache-control: '{cache-control}'

and OpenAPI-style route specs whose operations declare a request handler:

    paths:
      /page/summary/{title}:
        get:
          x-request-handler:
            - get_summary:
                request:
                  uri: /{domain}/sys/summary/{title}

Handler templates are named ``"<method> <path> <step>"``, e.g.
``"get /page/summary/{title} get_summary"``.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import SpecLoadError, TemplateSyntaxError
from .settings import CompilerSettings
from .template import RequestTemplate

logger = logging.getLogger(__name__)

REQUEST_HANDLER_KEY = "x-request-handler"


class HandlerStep(BaseModel):
    """One named step of a request handler. Only ``request`` is used."""

    request: dict[str, Any] | None = None

    model_config = ConfigDict(extra="allow")


class HandlerOperation(BaseModel):
    """An OpenAPI operation carrying a request handler."""

    handler: list[dict[str, HandlerStep]] = Field(
        default_factory=list, alias=REQUEST_HANDLER_KEY
    )

    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class TemplateDocument(BaseModel):
    """Top-level shape of a template document."""

    templates: dict[str, dict[str, Any]] = Field(default_factory=dict)
    paths: dict[str, dict[str, Any]] = Field(default_factory=dict)

    model_config = ConfigDict(extra="ignore")


def collect_request_specs(document: Any) -> dict[str, dict[str, Any]]:
    """Find every request spec in a parsed template document.

    Args:
        document: The parsed YAML document.

    Returns:
        Request specs by template name, in document order.

    Raises:
        SpecLoadError: If the document does not have the expected shape.
    """
    if not isinstance(document, Mapping):
        raise SpecLoadError(
            f"Template document must be a mapping, got {type(document).__name__}"
        )

    try:
        parsed = TemplateDocument.model_validate(document)
        specs: dict[str, dict[str, Any]] = dict(parsed.templates)

        for path, operations in parsed.paths.items():
            for method, operation in operations.items():
                if not isinstance(operation, Mapping) or REQUEST_HANDLER_KEY not in operation:
                    continue
                handler = HandlerOperation.model_validate(operation)
                for step in handler.handler:
                    for step_name, body in step.items():
                        if body.request is not None:
                            specs[f"{method} {path} {step_name}"] = body.request
    except ValidationError as e:
        raise SpecLoadError(f"Invalid template document: {e}") from e

    return specs


def load_templates(
    path: Path,
    *,
    settings: CompilerSettings | None = None,
) -> dict[str, RequestTemplate]:
    """Load and compile every request template of a YAML document.

    Args:
        path: YAML file.
        settings: Compiler settings for every template.

    Returns:
        Compiled templates by name.

    Raises:
        SpecLoadError: If the file cannot be read or parsed, or a template
            does not compile.
    """
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise SpecLoadError(f"Cannot read template document {path}: {e}") from e

    try:
        document = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise SpecLoadError(f"Invalid YAML in {path}: {e}") from e

    if not document:
        raise SpecLoadError(f"Empty or invalid YAML in {path}")

    specs = collect_request_specs(document)
    if not specs:
        logger.warning("No request templates found in %s", path)

    templates: dict[str, RequestTemplate] = {}
    for name, spec in specs.items():
        try:
            templates[name] = RequestTemplate(spec, settings=settings)
        except TemplateSyntaxError as e:
            raise SpecLoadError(f"Template '{name}' in {path}: {e}") from e

    logger.info("Loaded %d request template(s) from %s", len(templates), path)
    return templates
