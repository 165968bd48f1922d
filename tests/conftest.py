"""Shared pytest fixtures for reqtemplate tests."""

from typing import Any

import pytest


@pytest.fixture
def reference_spec() -> dict[str, Any]:
    """A spec touching every kind of field."""
    return {
        "uri": "/{domain}/test",
        "method": "post",
        "headers": {
            "name-with-dashes": "{name-with-dashes}",
            "global-header": "{$.request.params.domain}",
            "added-string-header": "added-string-header",
        },
        "query": {
            "simple": "{simple}",
            "added": "addedValue",
            "global": "{$.request.headers.name-with-dashes}",
        },
        "body": {
            "object": "{object}",
            "global": "{$.request.params.domain}",
            "added": "addedValue",
            "nested": {"one": {"two": {"tree": "{a.b.c}"}}},
            "field_name_with_underscore": "{field_name_with_underscore}",
            "additional_context_field": "{$.additional_context.field}",
            "string_templated": "test {field_name_with_underscore}",
        },
    }


@pytest.fixture
def reference_context() -> dict[str, Any]:
    """An inbound request with fields the reference spec does not keep."""
    return {
        "request": {
            "params": {"domain": "testDomain"},
            "method": "get",
            "headers": {
                "name-with-dashes": "name-with-dashes-value",
                "removed-header": "this-will-be-removed",
            },
            "query": {
                "simple": "simpleValue",
                "removed": "this-will-be-removed",
            },
            "body": {
                "object": {"testField": "testValue"},
                "removed": {"field": "this-will-be-removed"},
                "a": {"b": {"c": "nestedValue"}},
                "field_name_with_underscore": "field_value_with_underscore",
            },
        },
        "additional_context": {"field": "additional_test_value"},
    }
