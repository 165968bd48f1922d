"""Tests for splitting template strings into text runs and expressions."""

from __future__ import annotations

import pytest

from reqtemplate.core.errors import TemplateSyntaxError
from reqtemplate.core.ir.expressions import FieldRef, FuncCall, ObjectLiteral, PathRoot
from reqtemplate.core.template.splitter import has_placeholder, split_template


class TestSplitTemplate:
    """Literal runs and placeholders come out in order."""

    def test_path(self) -> None:
        assert split_template("/{domain}/test") == ["/", FieldRef(path=["domain"]), "/test"]

    def test_plain_text(self) -> None:
        assert split_template("plain") == ["plain"]

    def test_empty(self) -> None:
        assert split_template("") == []

    def test_whole_placeholder(self) -> None:
        assert split_template("{$.request.params.domain}") == [
            FieldRef(root=PathRoot.CONTEXT, path=["request", "params", "domain"])
        ]

    def test_adjacent_placeholders(self) -> None:
        assert split_template("a{x}{y}b") == [
            "a",
            FieldRef(path=["x"]),
            FieldRef(path=["y"]),
            "b",
        ]

    def test_nested_braces_stay_in_one_placeholder(self) -> None:
        segments = split_template("{$$.merge(a, {b: c, d: {e: 1}})}")
        assert len(segments) == 1
        call = segments[0]
        assert isinstance(call, FuncCall)
        assert isinstance(call.args[1], ObjectLiteral)

    def test_interpolation(self) -> None:
        assert split_template("test {field_name_with_underscore}") == [
            "test ",
            FieldRef(path=["field_name_with_underscore"]),
        ]


class TestSplitTemplateErrors:
    """Unbalanced braces and malformed expressions."""

    def test_unclosed_brace(self) -> None:
        with pytest.raises(TemplateSyntaxError, match="unbalanced curly braces") as exc_info:
            split_template("{a")
        assert exc_info.value.context is not None
        assert exc_info.value.context.position == 2

    def test_stray_closing_brace(self) -> None:
        with pytest.raises(TemplateSyntaxError, match="unbalanced curly braces") as exc_info:
            split_template("a}")
        assert exc_info.value.context is not None
        assert exc_info.value.context.position == 1

    def test_expression_error_located_in_template(self) -> None:
        with pytest.raises(TemplateSyntaxError) as exc_info:
            split_template("{a b}", field="body.x")
        context = exc_info.value.context
        assert context is not None
        assert context.position == 3
        assert context.field == "body.x"
        assert "body.x at offset 3" in str(exc_info.value)

    def test_empty_placeholder(self) -> None:
        with pytest.raises(TemplateSyntaxError, match="Empty expression"):
            split_template("x{ }y")

    def test_error_snippet_has_caret(self) -> None:
        with pytest.raises(TemplateSyntaxError) as exc_info:
            split_template("ab}")
        lines = str(exc_info.value).splitlines()
        assert lines[1] == "    | ab}"
        assert lines[2].index("^") == len("    | ab")


class TestHasPlaceholder:
    """Detection of templated strings."""

    def test_templated(self) -> None:
        assert has_placeholder("x {a}")
        assert has_placeholder("{$.request}")

    def test_not_templated(self) -> None:
        assert not has_placeholder("plain")
        assert not has_placeholder("{}")
        assert not has_placeholder(5)
        assert not has_placeholder(None)
