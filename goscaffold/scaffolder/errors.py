"""Exceptions raised by the generation engine.

Every error aborts the run. None of them is retried: the user fixes the input
(or the catalog is fixed) and the generator is invoked again.
"""

from __future__ import annotations

from pathlib import Path


class ScaffoldError(Exception):
    """Base class for all generation failures."""


class InputValidationError(ScaffoldError):
    """A user-supplied value failed its field's syntax rule.

    The message names the field and the rule, never the rejected value, so a
    mistyped password cannot leak into the diagnostic output.
    """

    def __init__(self, field: str, reason: str) -> None:
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid {field.replace('_', ' ')}: {reason}")


class CatalogConsistencyError(ScaffoldError):
    """A template entry disagrees with the catalog's declared invariants.

    This is a bug in the shipped catalog, not something the user can fix.
    """


class MissingVariableError(CatalogConsistencyError):
    """A template references a placeholder the substitution context lacks."""

    def __init__(self, relative_path: str, names: set[str] | frozenset[str]) -> None:
        self.relative_path = relative_path
        self.names = frozenset(names)
        missing = ", ".join(sorted(self.names))
        super().__init__(f"{relative_path}: unresolved placeholder(s): {missing}")


class MaterializationError(ScaffoldError):
    """Writing the generated tree failed at ``path``."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot write {path}: {reason}")
