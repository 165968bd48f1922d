"""
The global function table.

Holds the named helpers exposed to expressions as ``$$`` and the compiled
sub-templates of one request template. Sub-templates are addressed by an
opaque integer handle, never by a name derived from the field path, so a
spec key containing dots or underscores cannot collide with another.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator, Mapping
from typing import Any, NewType

from .helpers import HELPERS

logger = logging.getLogger(__name__)

SubTemplateHandle = NewType("SubTemplateHandle", int)

Resolver = Callable[[Any], Any]


class FunctionTable:
    """Named helpers plus handle-addressed sub-templates."""

    def __init__(self, helpers: Mapping[str, Callable[..., Any]] | None = None) -> None:
        self._helpers: dict[str, Callable[..., Any]] = dict(HELPERS)
        if helpers:
            self._helpers.update(helpers)
        self._resolvers: list[Resolver] = []
        self._labels: list[str] = []

    @property
    def helpers(self) -> Mapping[str, Callable[..., Any]]:
        """The mapping exposed to expressions as ``$$``."""
        return self._helpers

    def register(self, resolver: Resolver, label: str = "") -> SubTemplateHandle:
        """Add a sub-template and return its handle."""
        handle = SubTemplateHandle(len(self._resolvers))
        self._resolvers.append(resolver)
        self._labels.append(label)
        logger.debug("Registered sub-template #%d for %s", handle, label or "<anonymous>")
        return handle

    def call(self, handle: int, context: Any) -> Any:
        """Invoke the sub-template behind ``handle`` with the evaluation context."""
        return self._resolvers[handle](context)

    def label(self, handle: int) -> str:
        return self._labels[handle]

    def __getitem__(self, handle: int) -> Resolver:
        return self._resolvers[handle]

    def __len__(self) -> int:
        return len(self._resolvers)

    def __iter__(self) -> Iterator[tuple[SubTemplateHandle, str]]:
        for handle, label in enumerate(self._labels):
            yield SubTemplateHandle(handle), label
