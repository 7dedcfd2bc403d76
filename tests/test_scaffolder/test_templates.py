"""Tests for the Jinja2 renderer (goscaffold.scaffolder.templates)."""

from __future__ import annotations

from pathlib import Path

import pytest

from goscaffold.scaffolder import CatalogConsistencyError, MissingVariableError, TemplateRenderer


pytestmark = pytest.mark.unit


@pytest.fixture
def renderer() -> TemplateRenderer:
    return TemplateRenderer()


class TestRenderString:
    def test_substitutes_placeholders(self, renderer: TemplateRenderer):
        out = renderer.render_string("go build && ./{{ binary_name }}\n", {"binary_name": "api"})
        assert out == "go build && ./api\n"

    def test_compact_placeholder_syntax(self, renderer: TemplateRenderer):
        assert renderer.render_string("{{name}}", {"name": "x"}) == "x"

    def test_keeps_trailing_newline(self, renderer: TemplateRenderer):
        assert renderer.render_string("a\n\n", {}) == "a\n\n"

    def test_no_html_escaping(self, renderer: TemplateRenderer):
        out = renderer.render_string("PASS={{ p }}", {"p": "a&b<c>\"d'"})
        assert out == "PASS=a&b<c>\"d'"

    def test_go_and_shell_syntax_passes_through(self, renderer: TemplateRenderer):
        body = 'c.JSON(400, gin.H{"error": "x"})\nexport PATH=$PATH:$(go env GOPATH)/bin\n'
        assert renderer.render_string(body, {}) == body

    def test_missing_variable(self, renderer: TemplateRenderer):
        with pytest.raises(MissingVariableError) as exc_info:
            renderer.render_string("{{ a }} {{ b }}", {"a": "1"}, name="x.txt")
        assert exc_info.value.names == frozenset({"b"})
        assert exc_info.value.relative_path == "x.txt"

    def test_missing_variable_is_catalog_error(self, renderer: TemplateRenderer):
        with pytest.raises(CatalogConsistencyError):
            renderer.render_string("{{ a }}", {})


class TestPlaceholders:
    def test_finds_names(self, renderer: TemplateRenderer):
        body = "{{ project_name }}/src/{{project_name}} {{ db_user }}"
        assert renderer.placeholders(body) == frozenset({"project_name", "db_user"})

    def test_plain_text_has_none(self, renderer: TemplateRenderer):
        assert renderer.placeholders("CREATE TABLE users();") == frozenset()

    def test_syntax_error(self, renderer: TemplateRenderer):
        with pytest.raises(CatalogConsistencyError):
            renderer.placeholders("{{ ", name="broken.j2")


class TestTemplateFiles:
    def test_list_templates(self, tmp_path: Path):
        (tmp_path / "v" / "sub").mkdir(parents=True)
        (tmp_path / "v" / "a.j2").write_text("a", encoding="utf-8")
        (tmp_path / "v" / "sub" / "b.j2").write_text("b", encoding="utf-8")
        (tmp_path / "v" / "ignored.txt").write_text("c", encoding="utf-8")
        renderer = TemplateRenderer(tmp_path)
        assert renderer.list_templates("v") == ["v/a.j2", "v/sub/b.j2"]
        assert renderer.list_templates("missing") == []

    def test_load_source(self, tmp_path: Path):
        (tmp_path / "t.j2").write_text("x={{ x }}\n", encoding="utf-8")
        assert TemplateRenderer(tmp_path).load_source("t.j2") == "x={{ x }}\n"

    def test_shipped_templates_present(self, renderer: TemplateRenderer):
        assert "relational_with_codegen/env.j2" in renderer.list_templates()
