"""Write a variant's template catalog to disk.

Entries are rendered and written one at a time, in catalog order, after the
variant's declared directories exist. Existing files are overwritten without
asking, so re-running with the same input reproduces the same tree and
discards any hand edits to generated files. There is no rollback: when a
write fails, the files written before it stay on disk and the run aborts.
"""

from __future__ import annotations

import fnmatch
import stat
from pathlib import Path
from typing import Mapping

from .catalog import TemplateCatalog, VariantCatalog, default_catalog
from .errors import MaterializationError
from .models import GeneratedFile, StackVariant, TemplateEntry
from .templates import TemplateRenderer

__all__ = ["ProjectMaterializer", "covers"]


class ProjectMaterializer:
    """Render template entries against a context and write the results."""

    def __init__(
        self,
        catalog: TemplateCatalog | None = None,
        renderer: TemplateRenderer | None = None,
    ) -> None:
        self.catalog = catalog or default_catalog()
        self.renderer = renderer or TemplateRenderer()

    # -- Public API --------------------------------------------------------

    def render(
        self,
        variant: StackVariant,
        context: Mapping[str, str],
        destination_root: str | Path,
    ) -> list[GeneratedFile]:
        """Render every entry of ``variant`` without touching the disk."""
        root = Path(destination_root).expanduser().resolve()
        variant_catalog = self.catalog.get(variant)
        return [
            self._render_entry(entry, variant_catalog, context, root)
            for entry in variant_catalog.entries
        ]

    def materialize(
        self,
        variant: StackVariant,
        context: Mapping[str, str],
        destination_root: str | Path,
    ) -> list[GeneratedFile]:
        """Create the directory tree and write every entry of ``variant``.

        Args:
            variant: Stack variant whose catalog is written.
            context: Placeholder values, normally from ``VariableBinder.bind``.
            destination_root: Project root. Created if missing.

        Returns:
            The written files, in write order.

        Raises:
            MissingVariableError: if a template placeholder is unresolved.
            MaterializationError: on the first failing directory or file.
        """
        root = Path(destination_root).expanduser().resolve()
        variant_catalog = self.catalog.get(variant)

        _make_dir(root)
        for directory in variant_catalog.directories:
            _make_dir(self._target(root, directory))

        written: list[GeneratedFile] = []
        for entry in variant_catalog.entries:
            generated = self._render_entry(entry, variant_catalog, context, root)
            _write_file(generated.absolute_path, generated.content)
            if entry.executable:
                _make_executable(generated.absolute_path)
            written.append(generated)
        return written

    # -- Internals ---------------------------------------------------------

    def _render_entry(
        self,
        entry: TemplateEntry,
        variant_catalog: VariantCatalog,
        context: Mapping[str, str],
        root: Path,
    ) -> GeneratedFile:
        content = self.renderer.render_string(
            entry.body, context, name=f"{variant_catalog.variant.value}/{entry.relative_path}"
        )
        if entry.ignore_list:
            content = _with_ignored(content, variant_catalog.credential_paths)
        return GeneratedFile(
            absolute_path=self._target(root, entry.relative_path),
            content=content,
            credential_bearing=entry.credential_bearing,
        )

    @staticmethod
    def _target(root: Path, relative_path: str) -> Path:
        target = (root / relative_path).resolve()
        if not target.is_relative_to(root):
            raise MaterializationError(target, f"resolves outside of {root}")
        return target


# ---------------------------------------------------------------------------
# Ignore-list handling
# ---------------------------------------------------------------------------


def covers(patterns: list[str], relative_path: str) -> bool:
    """Return ``True`` if a gitignore-style pattern list ignores ``relative_path``.

    Only plain and wildcard file patterns are considered. Directory patterns
    (trailing ``/``) and negations never count as covering a file.
    """
    name = relative_path.rsplit("/", 1)[-1]
    for raw in patterns:
        pattern = raw.strip()
        if not pattern or pattern.startswith(("#", "!")) or pattern.endswith("/"):
            continue
        if "/" in pattern.lstrip("/"):
            if fnmatch.fnmatchcase(relative_path, pattern.lstrip("/")):
                return True
        elif pattern.startswith("/"):
            if fnmatch.fnmatchcase(relative_path, pattern[1:]):
                return True
        elif fnmatch.fnmatchcase(name, pattern):
            return True
    return False


def _with_ignored(content: str, credential_paths: tuple[str, ...]) -> str:
    """Append every credential path the ignore file does not already cover."""
    patterns = content.splitlines()
    missing = [path for path in credential_paths if not covers(patterns, path)]
    if not missing:
        return content
    if content and not content.endswith("\n"):
        content += "\n"
    return content + "".join(f"{path}\n" for path in missing)


# ---------------------------------------------------------------------------
# File-system helpers
# ---------------------------------------------------------------------------


def _make_dir(path: Path) -> None:
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise MaterializationError(path, exc.strerror or str(exc)) from exc


def _write_file(path: Path, content: str) -> None:
    """Create parent dirs and write content, replacing any existing file."""
    _make_dir(path.parent)
    try:
        path.write_text(content, encoding="utf-8", newline="\n")
    except OSError as exc:
        raise MaterializationError(path, exc.strerror or str(exc)) from exc


def _make_executable(path: Path) -> None:
    """Set the executable bit on a file."""
    try:
        current = path.stat().st_mode
        path.chmod(current | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    except OSError as exc:
        raise MaterializationError(path, exc.strerror or str(exc)) from exc
