"""
Compiler settings.

Defaults suit request contexts shaped like ``{"request": {"params": ...,
"method": ...}}``. Settings can be read from a TOML file:

    [compiler]
    default_method = "get"
    request_key = "request"
    params_part = "params"

and the default method can be overridden with the
``REQTEMPLATE_DEFAULT_METHOD`` environment variable.

Usage:
    from reqtemplate.core.settings import load_settings

    settings = load_settings(Path("reqtemplate.toml"))
"""

from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass, fields, replace
from pathlib import Path

from .errors import SpecLoadError

logger = logging.getLogger(__name__)

# Environment variable overriding the fallback HTTP method
DEFAULT_METHOD_ENV_VAR = "REQTEMPLATE_DEFAULT_METHOD"


@dataclass(frozen=True)
class CompilerSettings:
    """Settings used when compiling request templates."""

    default_method: str = "get"  # used when neither spec nor inbound request has one
    request_key: str = "request"  # context key holding the inbound request
    params_part: str = "params"  # request part the URI is expanded from


def settings_from_env(base: CompilerSettings | None = None) -> CompilerSettings:
    """Apply environment overrides to ``base`` (or the defaults)."""
    settings = base or CompilerSettings()
    method = os.environ.get(DEFAULT_METHOD_ENV_VAR, "").strip()
    if method:
        settings = replace(settings, default_method=method)
    return settings


def load_settings(path: Path | None = None) -> CompilerSettings:
    """Load settings from the ``[compiler]`` table of a TOML file.

    Args:
        path: TOML file; ``None`` or a missing file gives the defaults.

    Returns:
        CompilerSettings with environment overrides applied.

    Raises:
        SpecLoadError: If the file is not valid TOML or has unknown keys.
    """
    settings = CompilerSettings()
    if path is not None and path.exists():
        try:
            data = tomllib.loads(path.read_text(encoding="utf-8"))
        except tomllib.TOMLDecodeError as e:
            raise SpecLoadError(f"Invalid settings file {path}: {e}") from e

        table = data.get("compiler", {})
        known = {f.name for f in fields(CompilerSettings)}
        unknown = set(table) - known
        if unknown:
            raise SpecLoadError(
                f"Unknown compiler settings in {path}: {', '.join(sorted(unknown))}"
            )
        settings = CompilerSettings(**{k: str(v) for k, v in table.items()})
        logger.debug("Loaded compiler settings from %s", path)

    return settings_from_env(settings)
