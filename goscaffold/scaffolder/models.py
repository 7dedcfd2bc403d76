"""Data models for the generation engine.

Defines the closed set of stack variants, the user-facing input fields, the
validated project description, and the template entries that make up a
variant's catalog.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path, PurePosixPath
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class StackVariant(str, Enum):
    """Supported backend stacks. Each owns exactly one template catalog."""
    GRAPH_WITH_MIGRATIONS = "graph_with_migrations"
    RELATIONAL_WITH_CODEGEN = "relational_with_codegen"
    RELATIONAL_WITH_CACHE = "relational_with_cache"


class FieldKind(str, Enum):
    """User-supplied input fields, each with its own syntax rule."""
    PROJECT_NAME = "project_name"
    MODULE_PATH = "module_path"
    DATABASE_NAME = "database_name"
    DB_USER = "db_user"
    DB_PASSWORD = "db_password"

    @property
    def is_secret(self) -> bool:
        return self is FieldKind.DB_PASSWORD


# ---------------------------------------------------------------------------
# Project description
# ---------------------------------------------------------------------------

class ProjectSpec(BaseModel):
    """Validated user input for one run. Immutable once built."""

    model_config = ConfigDict(frozen=True)

    project_name: str = Field(..., min_length=1, description="Project name or Go module path")
    database_name: Optional[str] = Field(
        default=None, description="Database name, for variants that ask for one"
    )
    db_user: str = Field(..., description="Database username")
    db_password: SecretStr = Field(..., description="Database password, never echoed")
    stack_variant: StackVariant = Field(..., description="Selected stack")


# ---------------------------------------------------------------------------
# Catalog entries
# ---------------------------------------------------------------------------

class TemplateEntry(BaseModel):
    """One output file: where it goes, what it contains, what it needs."""

    model_config = ConfigDict(frozen=True)

    relative_path: str = Field(..., description="POSIX path relative to the project root")
    body: str = Field(..., description="Template text with {{ placeholder }} tokens")
    required_variables: frozenset[str] = Field(default_factory=frozenset)
    credential_bearing: bool = Field(
        default=False, description="Whether the rendered file contains credentials"
    )
    ignore_list: bool = Field(
        default=False, description="Whether this entry is the variant's VCS ignore file"
    )
    executable: bool = Field(default=False, description="Set the executable bit after writing")

    @field_validator("relative_path")
    @classmethod
    def _path_stays_inside_root(cls, value: str) -> str:
        return check_relative_path(value)


def check_relative_path(value: str) -> str:
    """Reject paths that are absolute or could escape the project root."""
    if not value:
        raise ValueError("relative path must not be empty")
    if "\\" in value:
        raise ValueError(f"{value!r}: use forward slashes")
    path = PurePosixPath(value)
    if path.is_absolute():
        raise ValueError(f"{value!r} is absolute")
    segments = value.split("/")
    if any(segment in ("", ".", "..") for segment in segments):
        raise ValueError(f"{value!r} contains an empty, '.' or '..' segment")
    return value


@dataclass(frozen=True)
class GeneratedFile:
    """A rendered template as written to disk."""

    absolute_path: Path
    content: str
    credential_bearing: bool = False
