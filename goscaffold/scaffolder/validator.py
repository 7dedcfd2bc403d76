"""Syntax checks for user-supplied values.

Each :class:`FieldKind` maps to one rule. Project names come in two flavours:
the strict form for plain binary names and the permissive form for names that
double as a Go module path (``github.com/acme/api``).
"""

from __future__ import annotations

import re
from typing import Mapping

from .catalog import TemplateCatalog, default_catalog
from .errors import InputValidationError
from .models import FieldKind, ProjectSpec, StackVariant

__all__ = ["FIELD_RULES", "InputValidator"]


FIELD_RULES: dict[FieldKind, tuple[re.Pattern[str], str]] = {
    FieldKind.PROJECT_NAME: (
        re.compile(r"[A-Za-z0-9-]+"),
        "only letters, numbers and hyphens are allowed",
    ),
    FieldKind.MODULE_PATH: (
        re.compile(r"[-A-Za-z0-9_./:]*[A-Za-z0-9_]"),
        "only letters, numbers, hyphens, underscores, dots, slashes and colons are allowed,"
        " and it must end with a letter, number or underscore",
    ),
    FieldKind.DATABASE_NAME: (
        re.compile(r"[A-Za-z0-9_]+"),
        "only letters, numbers and underscores are allowed",
    ),
}


class InputValidator:
    """Validate raw strings against the per-field rules."""

    def __init__(self, catalog: TemplateCatalog | None = None) -> None:
        self.catalog = catalog or default_catalog()

    def validate(self, field: FieldKind, raw: str) -> str:
        """Return ``raw`` if it satisfies the rule for ``field``.

        Credentials are opaque and always accepted.

        Raises:
            InputValidationError: naming the field and the broken rule.
        """
        rule = FIELD_RULES.get(field)
        if rule is None:
            return raw
        pattern, reason = rule
        if not pattern.fullmatch(raw):
            raise InputValidationError(field.value, reason)
        return raw

    def validate_all(
        self, variant: StackVariant, raw_values: Mapping[FieldKind, str]
    ) -> ProjectSpec:
        """Validate every field ``variant`` needs and build the ``ProjectSpec``.

        Fields are checked in prompt order and the first failure aborts.
        """
        values: dict[FieldKind, str] = {}
        for field in self.catalog.required_fields(variant):
            if field not in raw_values:
                raise InputValidationError(field.value, "a value is required")
            values[field] = self.validate(field, raw_values[field])

        project_name = values.get(FieldKind.MODULE_PATH, values.get(FieldKind.PROJECT_NAME))
        return ProjectSpec(
            project_name=project_name,
            database_name=values.get(FieldKind.DATABASE_NAME),
            db_user=values[FieldKind.DB_USER],
            db_password=values[FieldKind.DB_PASSWORD],
            stack_variant=variant,
        )
