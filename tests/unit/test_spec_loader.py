"""Tests for loading request templates from YAML documents."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from reqtemplate.core.errors import SpecLoadError
from reqtemplate.core.settings import CompilerSettings
from reqtemplate.core.spec_loader import collect_request_specs, load_templates
from reqtemplate.core.template import RequestTemplate

ROUTES_YAML = """\
paths:
  /page/summary/{title}:
    parameters:
      - name: title
        in: path
    get:
      summary: Page summary
      x-request-handler:
        - get_summary:
            request:
              uri: /{domain}/sys/summary/{title}
              headers:
                cache-control: '{cache-control}'
        - respond:
            return:
              status: 200
  /feed/featured:
    get:
      summary: No handler here
"""


class TestCollectRequestSpecs:
    def test_templates_mapping(self) -> None:
        document = {"templates": {"a": {"uri": "/x"}, "b": {"method": "post"}}}
        assert collect_request_specs(document) == {
            "a": {"uri": "/x"},
            "b": {"method": "post"},
        }

    def test_request_handlers(self) -> None:
        document = {
            "paths": {
                "/page/{title}": {
                    "get": {
                        "x-request-handler": [
                            {"fetch": {"request": {"uri": "/{domain}/x"}}},
                            {"respond": {"return": {"status": 200}}},
                        ]
                    },
                    "parameters": [{"name": "title"}],
                }
            }
        }
        assert collect_request_specs(document) == {
            "get /page/{title} fetch": {"uri": "/{domain}/x"}
        }

    def test_parallel_steps(self) -> None:
        document = {
            "paths": {
                "/p": {
                    "post": {
                        "x-request-handler": [
                            {
                                "one": {"request": {"uri": "/1"}},
                                "two": {"request": {"uri": "/2"}},
                            }
                        ]
                    }
                }
            }
        }
        assert list(collect_request_specs(document)) == ["post /p one", "post /p two"]

    def test_not_a_mapping(self) -> None:
        with pytest.raises(SpecLoadError, match="must be a mapping"):
            collect_request_specs(["a"])

    def test_template_not_a_mapping(self) -> None:
        with pytest.raises(SpecLoadError, match="Invalid template document"):
            collect_request_specs({"templates": {"a": "uri"}})

    def test_malformed_handler(self) -> None:
        document = {"paths": {"/p": {"get": {"x-request-handler": "fetch"}}}}
        with pytest.raises(SpecLoadError):
            collect_request_specs(document)


class TestLoadTemplates:
    def test_routes_document(self, tmp_path: Path) -> None:
        path = tmp_path / "routes.yaml"
        path.write_text(ROUTES_YAML)
        templates = load_templates(path)
        assert list(templates) == ["get /page/summary/{title} get_summary"]

        template = templates["get /page/summary/{title} get_summary"]
        assert isinstance(template, RequestTemplate)
        result = template.eval(
            {
                "request": {
                    "params": {"domain": "en.wikipedia.org", "title": "Foo"},
                    "headers": {"cache-control": "no-cache"},
                }
            }
        )
        assert result == {
            "uri": "/en.wikipedia.org/sys/summary/Foo",
            "headers": {"cache-control": "no-cache"},
        }

    def test_settings_passed_through(self, tmp_path: Path) -> None:
        path = tmp_path / "t.yaml"
        path.write_text("templates:\n  t:\n    method: null\n")
        templates = load_templates(path, settings=CompilerSettings(default_method="post"))
        assert templates["t"].eval({}) == {"method": "post"}

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(SpecLoadError, match="Cannot read"):
            load_templates(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text("templates: [\n")
        with pytest.raises(SpecLoadError, match="Invalid YAML"):
            load_templates(path)

    def test_empty_file(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("")
        with pytest.raises(SpecLoadError, match="Empty"):
            load_templates(path)

    def test_template_syntax_error_names_template(self, tmp_path: Path) -> None:
        path = tmp_path / "t.yaml"
        path.write_text("templates:\n  broken:\n    body:\n      a: '{field'\n")
        with pytest.raises(SpecLoadError, match="broken"):
            load_templates(path)

    def test_no_templates_warns(self, tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
        path = tmp_path / "t.yaml"
        path.write_text("info:\n  title: nothing\n")
        with caplog.at_level(logging.WARNING, logger="reqtemplate.core.spec_loader"):
            assert load_templates(path) == {}
        assert "No request templates found" in caplog.text

    def test_load_summary_logged(self, tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
        path = tmp_path / "t.yaml"
        path.write_text("templates:\n  a:\n    uri: /x\n")
        with caplog.at_level(logging.INFO, logger="reqtemplate.core.spec_loader"):
            load_templates(path)
        assert "Loaded 1 request template(s)" in caplog.text
