"""Tests for path templates and structured URIs."""

from __future__ import annotations

import pytest

from reqtemplate.core.errors import MissingParameterError
from reqtemplate.core.uri import URI, PathTemplate


class TestPathTemplateExpand:
    """Expansion of path patterns against parameters."""

    def test_required_params(self) -> None:
        template = PathTemplate.parse("/{domain}/test")
        assert str(template.expand({"domain": "en.wikipedia.org"})) == "/en.wikipedia.org/test"

    def test_segments_are_encoded(self) -> None:
        template = PathTemplate.parse("/{domain}/page/{title}")
        uri = template.expand({"domain": "d", "title": "Foo Bar/Baz"})
        assert str(uri) == "/d/page/Foo%20Bar%2FBaz"
        assert uri.segments == ("d", "page", "Foo Bar/Baz")

    def test_greedy_param_keeps_slashes(self) -> None:
        template = PathTemplate.parse("/{domain}/{+path}")
        assert str(template.expand({"domain": "d", "path": "a/b c"})) == "/d/a/b%20c"

    def test_optional_segment(self) -> None:
        template = PathTemplate.parse("/{domain}/page/{title}{/revision}")
        assert str(template.expand({"domain": "d", "title": "T"})) == "/d/page/T"
        assert (
            str(template.expand({"domain": "d", "title": "T", "revision": 123}))
            == "/d/page/T/123"
        )

    def test_text_around_param(self) -> None:
        template = PathTemplate.parse("/v{version}/x")
        assert str(template.expand({"version": 1})) == "/v1/x"

    def test_relative_pattern_is_rooted(self) -> None:
        assert str(PathTemplate.parse("api/{path}").expand({"path": "x"})) == "/api/x"

    def test_trailing_slash_kept(self) -> None:
        assert str(PathTemplate.parse("/{domain}/").expand({"domain": "d"})) == "/d/"

    def test_static_pattern(self) -> None:
        assert str(PathTemplate.parse("/static/path").expand(None)) == "/static/path"

    def test_absolute_pattern(self) -> None:
        template = PathTemplate.parse("https://example.org/wiki/{title}")
        uri = template.expand({"title": "Foo Bar"})
        assert uri.base == "https://example.org"
        assert str(uri) == "https://example.org/wiki/Foo%20Bar"

    def test_params(self) -> None:
        template = PathTemplate.parse("/{domain}/x/{+path}{/rev}")
        assert template.params == ["domain", "path", "rev"]
        assert str(template) == "/{domain}/x/{+path}{/rev}"

    def test_missing_required_param(self) -> None:
        template = PathTemplate.parse("/{domain}/test")
        with pytest.raises(MissingParameterError, match="domain"):
            template.expand({})

    def test_null_and_empty_count_as_missing(self) -> None:
        template = PathTemplate.parse("/{domain}/test")
        with pytest.raises(KeyError):
            template.expand({"domain": None})
        with pytest.raises(MissingParameterError):
            template.expand({"domain": ""})


class TestURI:
    """Structured URI values."""

    def test_parse_absolute(self) -> None:
        uri = URI.parse("https://example.org/a%20b/c?x=1")
        assert uri.base == "https://example.org"
        assert uri.segments == ("a b", "c")
        assert uri.query == "x=1"
        assert str(uri) == "https://example.org/a%20b/c?x=1"

    def test_parse_rooted_path(self) -> None:
        uri = URI.parse("/en.wikipedia.org/test")
        assert uri.base is None
        assert uri.segments == ("en.wikipedia.org", "test")
        assert str(uri) == "/en.wikipedia.org/test"

    def test_parse_relative(self) -> None:
        uri = URI.parse("relative/path")
        assert not uri.rooted
        assert str(uri) == "relative/path"

    def test_parse_root(self) -> None:
        assert str(URI.parse("/")) == "/"

    def test_with_base(self) -> None:
        uri = URI(["api", "x"]).with_base("svc.example")
        assert str(uri) == "svc.example/api/x"

    def test_base_trailing_slash_dropped(self) -> None:
        assert str(URI(["a"], base="http://h/")) == "http://h/a"

    def test_equality(self) -> None:
        assert URI(["a", "b"]) == "/a/b"
        assert URI(["a", "b"]) == URI.parse("/a/b")
        assert URI(["a"]) != URI(["b"])
        assert hash(URI(["a"])) == hash(URI.parse("/a"))
        assert URI(["a"]) != 1

    def test_repr(self) -> None:
        assert repr(URI(["a"])) == "URI('/a')"
