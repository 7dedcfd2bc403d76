"""Jinja2 template rendering for project scaffolding.

Provides the TemplateRenderer class which loads the ``.j2`` template bodies
shipped under ``goscaffold/scaffolder/templates/`` and renders them with the
substitution context. Placeholders use the ``{{ name }}`` syntax; every other
character of a template body is emitted verbatim.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping

from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateSyntaxError, meta
from jinja2.exceptions import UndefinedError

from .errors import CatalogConsistencyError, MissingVariableError


# ---------------------------------------------------------------------------
# Template directory discovery
# ---------------------------------------------------------------------------

_DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "templates"


# ---------------------------------------------------------------------------
# TemplateRenderer
# ---------------------------------------------------------------------------


class TemplateRenderer:
    """Renders Jinja2 template bodies for project scaffolding.

    Undefined placeholders are errors, never empty strings, and trailing
    newlines are kept so the output matches the template byte-for-byte outside
    of the substituted tokens. Autoescaping is off: the outputs are source and
    config files, not HTML.
    """

    def __init__(self, template_dir: str | Path | None = None) -> None:
        if template_dir is None:
            template_dir = _DEFAULT_TEMPLATE_DIR
        self.template_dir = Path(template_dir)
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=False,
            keep_trailing_newline=True,
            undefined=StrictUndefined,
        )

    # -- Loading -----------------------------------------------------------

    def load_source(self, template_path: str) -> str:
        """Return the raw text of a template file relative to the template root."""
        source, _filename, _uptodate = self.env.loader.get_source(self.env, template_path)
        return source

    def placeholders(self, body: str, *, name: str = "<string>") -> frozenset[str]:
        """Return every placeholder name referenced by ``body``.

        Raises:
            CatalogConsistencyError: if ``body`` is not a valid template.
        """
        try:
            parsed = self.env.parse(body)
        except TemplateSyntaxError as exc:
            raise CatalogConsistencyError(f"{name}: invalid template: {exc.message}") from exc
        return frozenset(meta.find_undeclared_variables(parsed))

    # -- Rendering ---------------------------------------------------------

    def render_string(
        self,
        template_string: str,
        context: Mapping[str, Any],
        *,
        name: str = "<string>",
    ) -> str:
        """Render a template body with the provided context.

        Raises:
            MissingVariableError: if a placeholder is absent from ``context``.
        """
        missing = self.placeholders(template_string, name=name) - set(context)
        if missing:
            raise MissingVariableError(name, missing)
        try:
            return self.env.from_string(template_string).render(**context)
        except UndefinedError as exc:
            raise MissingVariableError(name, {str(exc)}) from exc

    def list_templates(self, prefix: str = "") -> list[str]:
        """Return a sorted list of all ``.j2`` template paths under *prefix*.

        Paths are relative to the template root directory.
        """
        search_dir = self.template_dir / prefix if prefix else self.template_dir
        if not search_dir.is_dir():
            return []
        return sorted(
            p.relative_to(self.template_dir).as_posix()
            for p in search_dir.rglob("*.j2")
        )
