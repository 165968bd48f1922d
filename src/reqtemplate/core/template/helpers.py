"""
Helper functions available inside every template expression.

Callable bare (``default(a, 'x')``) or through the function table
(``$$.merge($.request.query, {limit: 10})``).
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from reqtemplate.core.errors import IllegalSpecError
from reqtemplate.core.undefined import UNDEFINED


def default(value: Any, fallback: Any) -> Any:
    """``value`` if truthy, else ``fallback``."""
    return value if value else fallback


def merge(destination: Any, source: Any) -> dict[str, Any]:
    """Shallow merge without overriding.

    Returns a new dict holding every entry of ``destination`` plus the
    entries of ``source`` whose key is missing (or undefined) in
    ``destination``. Neither argument is modified; null or undefined
    arguments count as empty.

    Raises:
        IllegalSpecError: If a non-null argument is not a mapping.
    """
    if destination is None or destination is UNDEFINED:
        destination = {}
    if source is None or source is UNDEFINED:
        source = {}

    if not isinstance(destination, Mapping) or not isinstance(source, Mapping):
        raise IllegalSpecError("Illegal spec. Merge source and destination must be objects")

    result = dict(destination)
    for key, value in source.items():
        if result.get(key, UNDEFINED) is UNDEFINED:
            result[key] = value
    return result


HELPERS: Mapping[str, Callable[..., Any]] = {
    "default": default,
    "merge": merge,
}
