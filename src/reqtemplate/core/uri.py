"""
Path templates and structured URIs.

``PathTemplate`` parses URI path patterns with placeholders and expands them
against a parameter mapping into a ``URI``:

- ``{name}``: required parameter, one path segment
- ``{/name}``: optional segment, dropped when the parameter is missing
- ``{+name}``: greedy parameter, its value may span several segments

Text around a placeholder inside one segment is kept (``v{version}``). A pattern
may start with a scheme and host (``https://example.org/{title}``), which
are copied into the expanded URI as is.

Usage:
    template = PathTemplate.parse("/{domain}/sys/summary/{title}{/revision}")
    uri = template.expand({"domain": "en.wikipedia.org", "title": "Foo Bar"})
    str(uri)  # "/en.wikipedia.org/sys/summary/Foo%20Bar"
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import quote, unquote

from .errors import MissingParameterError
from .undefined import UNDEFINED

_PARAM_RE = re.compile(r"\{([/+]?)([A-Za-z0-9_$.\-]+)\}")
_AUTHORITY_RE = re.compile(r"^((?:[A-Za-z][A-Za-z0-9+.\-]*:)?//[^/?#]*)(.*)$", re.DOTALL)

# RFC 3986 pchar minus percent: kept verbatim inside a segment
_SEGMENT_SAFE = "-._~!$&'()*+,;=:@"


def _encode_segment(segment: str) -> str:
    return quote(segment, safe=_SEGMENT_SAFE)


class URI:
    """A structured URI: an optional base (scheme and authority, or a bare
    host) followed by path segments and an optional raw query string.

    Segments are stored decoded and percent-encoded on output. Two URIs are
    equal when their string forms are; a URI also compares equal to its
    string form.
    """

    __slots__ = ("segments", "base", "query", "rooted")

    def __init__(
        self,
        segments: Iterable[str] = (),
        *,
        base: str | None = None,
        query: str | None = None,
        rooted: bool = True,
    ) -> None:
        self.segments: tuple[str, ...] = tuple(segments)
        self.base = base.rstrip("/") if base else None
        self.query = query
        self.rooted = rooted

    @classmethod
    def parse(cls, text: str) -> URI:
        """Build a URI from its string form, without any templating."""
        query = None
        if "?" in text:
            text, query = text.split("?", 1)
        base = None
        match = _AUTHORITY_RE.match(text)
        if match:
            base, text = match.group(1), match.group(2)
        rooted = base is not None or text.startswith("/")
        path = text[1:] if text.startswith("/") else text
        segments = [unquote(s) for s in path.split("/")] if path else []
        return cls(segments, base=base, query=query, rooted=rooted)

    @property
    def path(self) -> str:
        """The encoded path component."""
        encoded = "/".join(_encode_segment(s) for s in self.segments)
        if self.rooted or self.base:
            return "/" + encoded
        return encoded

    def with_base(self, base: str | None) -> URI:
        """Return a copy of this URI under another base."""
        return URI(self.segments, base=base, query=self.query, rooted=True)

    def __str__(self) -> str:
        text = (self.base or "") + self.path
        if self.query:
            text += "?" + self.query
        return text

    def __repr__(self) -> str:
        return f"URI({str(self)!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, (URI, str)):
            return str(self) == str(other)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(str(self))


@dataclass(frozen=True)
class _Param:
    name: str
    greedy: bool = False


@dataclass
class _SegmentTemplate:
    parts: list[str | _Param] = field(default_factory=list)
    optional: bool = False

    @property
    def greedy(self) -> bool:
        return any(isinstance(p, _Param) and p.greedy for p in self.parts)


def _param_value(params: Mapping[str, Any], name: str) -> Any:
    value = params.get(name, UNDEFINED) if params is not None else UNDEFINED
    if value is None or value == "":
        return UNDEFINED
    return value


class PathTemplate:
    """A parsed URI path pattern."""

    def __init__(
        self,
        pattern: str,
        segments: list[_SegmentTemplate],
        base: str | None = None,
    ) -> None:
        self.pattern = pattern
        self.base = base
        self._segments = segments

    @classmethod
    def parse(cls, pattern: str) -> PathTemplate:
        """Parse a path pattern such as ``/{domain}/page/{+path}``."""
        base = None
        source = pattern
        authority = _AUTHORITY_RE.match(source)
        if authority:
            base, source = authority.group(1), authority.group(2)
        if not source.startswith("/"):
            source = "/" + source
        segments: list[_SegmentTemplate] = []
        current: _SegmentTemplate | None = None

        def push_text(text: str) -> None:
            nonlocal current
            for i, piece in enumerate(text.split("/")):
                if i > 0:
                    if current is not None:
                        segments.append(current)
                    current = _SegmentTemplate()
                if piece:
                    if current is None:
                        current = _SegmentTemplate()
                    current.parts.append(piece)

        pos = 0
        for match in _PARAM_RE.finditer(source):
            push_text(source[pos : match.start()])
            modifier, name = match.group(1), match.group(2)
            if modifier == "/":
                if current is not None:
                    segments.append(current)
                    current = None
                segments.append(_SegmentTemplate([_Param(name)], optional=True))
            else:
                if current is None:
                    current = _SegmentTemplate()
                current.parts.append(_Param(name, greedy=modifier == "+"))
            pos = match.end()
        push_text(source[pos:])
        if current is not None:
            segments.append(current)
        return cls(pattern, segments, base)

    @property
    def params(self) -> list[str]:
        """Names of all parameters, in pattern order."""
        return [p.name for s in self._segments for p in s.parts if isinstance(p, _Param)]

    def expand(self, params: Mapping[str, Any] | None) -> URI:
        """Expand the pattern into a ``URI``.

        Raises:
            MissingParameterError: If a required parameter has no value.
        """
        params = params if params is not None else {}
        out: list[str] = []
        for segment in self._segments:
            if segment.optional:
                value = _param_value(params, segment.parts[0].name)  # type: ignore[union-attr]
                if value is not UNDEFINED:
                    out.append(str(value))
                continue

            text = ""
            for part in segment.parts:
                if isinstance(part, str):
                    text += part
                    continue
                value = _param_value(params, part.name)
                if value is UNDEFINED:
                    raise MissingParameterError(
                        f"Missing required parameter '{part.name}' for path '{self.pattern}'"
                    )
                text += str(value)
            if segment.greedy:
                out.extend(text.split("/"))
            else:
                out.append(text)
        return URI(out, base=self.base)

    def __str__(self) -> str:
        return self.pattern

    def __repr__(self) -> str:
        return f"PathTemplate({self.pattern!r})"
