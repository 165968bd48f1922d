"""
Path setters: assign a value deep inside a resolved request.

A setter is derived once per leaf path at compile time. Each step records
the key and the kind of container that holds it in the original spec, so
the containers built at evaluation time have the spec's shape:

    setter = build_path_setter("body.nested.one.two.tree", spec)
    out = {}
    setter.set(out, "v")
    # {"body": {"nested": {"one": {"two": {"tree": "v"}}}}}

Setting ``UNDEFINED`` is a no-op, so unresolved fields leave no trace.
"""

from __future__ import annotations

from collections.abc import Mapping, MutableMapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from reqtemplate.core.ir.template import ContainerKind
from reqtemplate.core.undefined import UNDEFINED


@dataclass(frozen=True)
class PathStep:
    """One step of a path: a key and the kind of container holding it.

    ``size`` is the length of a sequence container in the spec. Sequences are
    built at that length so unresolved items keep their position.
    """

    key: str | int
    container: ContainerKind
    size: int = field(default=0, compare=False)


def _new_container(step: PathStep) -> dict[str, Any] | list[Any]:
    if step.container == ContainerKind.SEQUENCE:
        return [None] * step.size
    return {}


def _kind_of(node: Any) -> ContainerKind:
    if isinstance(node, Sequence) and not isinstance(node, (str, bytes)):
        return ContainerKind.SEQUENCE
    return ContainerKind.OBJECT


def _child(node: Any, key: str | int) -> Any:
    if isinstance(node, Mapping):
        if key in node:
            return node[key]
        # YAML may produce non-string keys, the classifier reports them as text
        return next((v for k, v in node.items() if str(k) == key), None)
    if isinstance(node, Sequence) and isinstance(key, int) and 0 <= key < len(node):
        return node[key]
    return None


class PathSetter:
    """Assigns values along a fixed list of ``PathStep``."""

    __slots__ = ("steps",)

    def __init__(self, steps: Sequence[PathStep]) -> None:
        if not steps:
            raise ValueError("A path setter needs at least one step")
        self.steps: tuple[PathStep, ...] = tuple(steps)

    @property
    def path(self) -> tuple[str | int, ...]:
        return tuple(step.key for step in self.steps)

    def set(self, root: MutableMapping[str, Any] | list[Any], value: Any) -> None:
        """Assign ``value`` at this path under ``root``.

        Intermediate containers are created on demand. ``root`` is left
        untouched when ``value`` is ``UNDEFINED``.
        """
        if value is UNDEFINED:
            return

        current: Any = root
        for step, next_step in zip(self.steps, self.steps[1:]):
            child = self._get(current, step)
            if child is None:
                child = _new_container(next_step)
                self._put(current, step, child)
            current = child

        self._put(current, self.steps[-1], value)

    @staticmethod
    def _get(container: Any, step: PathStep) -> Any:
        if step.container == ContainerKind.SEQUENCE:
            index = int(step.key)
            return container[index] if index < len(container) else None
        return container.get(step.key)

    @staticmethod
    def _put(container: Any, step: PathStep, value: Any) -> None:
        if step.container == ContainerKind.SEQUENCE:
            index = int(step.key)
            # Containers built from a bare step list may still be short
            while len(container) <= index:
                container.append(None)
            container[index] = value
        else:
            container[step.key] = value

    def __repr__(self) -> str:
        return f"PathSetter({'.'.join(str(k) for k in self.path)})"


def build_path_setter(path: str | Sequence[str | int], spec: Any) -> PathSetter:
    """Derive a setter for ``path`` from the shape of ``spec``.

    Args:
        path: Keys from the spec root to the leaf, or a dotted string.
        spec: The original spec (the root the path starts from). Only used to
            tell object keys from sequence indexes.

    Returns:
        A reusable ``PathSetter``.
    """
    keys: list[str | int] = path.split(".") if isinstance(path, str) else list(path)
    steps: list[PathStep] = []
    node = spec
    for key in keys:
        kind = _kind_of(node)
        size = 0
        if kind == ContainerKind.SEQUENCE:
            key = int(key)
            size = len(node)
        steps.append(PathStep(key=key, container=kind, size=size))
        node = _child(node, key)
    return PathSetter(steps)
