"""
The ``UNDEFINED`` sentinel.

Marks a value that could not be resolved. It is distinct from ``None``:
``None`` is JSON null and is emitted in a resolved request, ``UNDEFINED`` is
never emitted.
"""

from __future__ import annotations

from typing import Final


class _Undefined:
    __slots__ = ()

    _instance: _Undefined | None = None

    def __new__(cls) -> _Undefined:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "undefined"

    def __reduce__(self) -> str:
        return "UNDEFINED"


UNDEFINED: Final = _Undefined()
