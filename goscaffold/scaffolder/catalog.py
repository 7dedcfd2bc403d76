"""Static registry of template entries per stack variant.

Each variant is a complete, self-contained unit: if two variants emit the
same file, both declare it and both ship their own template copy under
``templates/<variant>/``. Nothing is inherited between variants.

The catalog is loaded once per process. Loading reads every template body and
checks the invariants that make rendering safe:

* every ``{{ placeholder }}`` in a body is listed in the entry's
  ``required_variables``;
* no two entries of a variant write the same path;
* a variant that writes credential-bearing files has exactly one ignore-list
  entry, so those files can always be excluded from version control.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import lru_cache
from typing import Mapping

from pydantic import ValidationError

from .errors import CatalogConsistencyError
from .models import FieldKind, StackVariant, TemplateEntry, check_relative_path
from .templates import TemplateRenderer

__all__ = [
    "EntryDeclaration",
    "TemplateCatalog",
    "VariantCatalog",
    "default_catalog",
]


# ---------------------------------------------------------------------------
# Declarations
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class EntryDeclaration:
    """Where an entry is written, which template renders it, what it needs."""

    relative_path: str
    template: str
    required_variables: frozenset[str] = frozenset()
    credential_bearing: bool = False
    ignore_list: bool = False
    executable: bool = False


def _decl(
    relative_path: str,
    template: str | None = None,
    *required: str,
    credential_bearing: bool = False,
    ignore_list: bool = False,
    executable: bool = False,
) -> EntryDeclaration:
    return EntryDeclaration(
        relative_path=relative_path,
        template=template or f"{relative_path}.j2",
        required_variables=frozenset(required),
        credential_bearing=credential_bearing,
        ignore_list=ignore_list,
        executable=executable,
    )


@dataclass(frozen=True)
class VariantDeclaration:
    required_fields: tuple[FieldKind, ...]
    directories: tuple[str, ...]
    entries: tuple[EntryDeclaration, ...]


_GRAPH_WITH_MIGRATIONS = VariantDeclaration(
    required_fields=(FieldKind.PROJECT_NAME, FieldKind.DB_USER, FieldKind.DB_PASSWORD),
    directories=(
        "src/routes",
        "src/controllers",
        "src/service",
        "src/utils",
        "src/security",
        "src/dto",
        "src/dao",
        "neo4j/migrations",
    ),
    entries=(
        _decl("frequentlyUsedCommands.txt", None, "binary_name"),
        _decl(
            ".env", "env.j2", "neo4j_uri", "db_user", "db_password", "port",
            credential_bearing=True,
        ),
        _decl(
            "migrations.properties", None, "neo4j_uri", "db_user", "db_password",
            credential_bearing=True,
        ),
        _decl(".gitignore", "gitignore.j2", ignore_list=True),
        _decl("neo4j/migrations/V001__creating_movie_node.cypher"),
        _decl("src/utils/getPort.go", None, "port"),
        _decl("src/utils/loadEnv.go"),
        _decl("src/utils/setupCors.go", None, "cors_origin"),
        _decl("src/utils/setupDatabase.go"),
        _decl("src/routes/allRoutes.go"),
        _decl("src/routes/userRoutes.go", None, "project_name"),
        _decl("src/controllers/userController.go", None, "database_name"),
        _decl("main.go", None, "project_name"),
    ),
)

_RELATIONAL_DIRECTORIES = (
    "src/routes",
    "src/controllers",
    "src/service",
    "src/utils",
    "src/security",
    "src/dto",
    "src/dao",
    "src/middleware",
    "src/entity",
    "sql/migrations",
    "sql/queries",
)

_RELATIONAL_FIELDS = (
    FieldKind.MODULE_PATH,
    FieldKind.DATABASE_NAME,
    FieldKind.DB_USER,
    FieldKind.DB_PASSWORD,
)

_RELATIONAL_WITH_CODEGEN = VariantDeclaration(
    required_fields=_RELATIONAL_FIELDS,
    directories=_RELATIONAL_DIRECTORIES,
    entries=(
        _decl("src/utils/getPort.go", None, "port"),
        _decl("src/utils/loadEnv.go"),
        _decl("src/utils/setupCors.go", None, "cors_origin"),
        _decl("src/utils/setUpDatabase.go"),
        _decl("src/routes/allRoutes.go", None, "project_name"),
        _decl("src/controllers/userController.go", None, "project_name"),
        _decl("sql/migrations/V1__init.sql"),
        _decl("sql/queries/users.sql"),
        _decl("main.go", None, "project_name"),
        _decl("sqlc.yaml"),
        _decl(".env", "env.j2", "port", "database_url", credential_bearing=True),
        _decl(
            "flyway.conf", None, "flyway_url", "db_user", "db_password",
            credential_bearing=True,
        ),
        _decl(".gitignore", "gitignore.j2", ignore_list=True),
        _decl(
            "createSchemaDump.sh", None, "db_user", "db_host", "db_port", "database_name",
            executable=True,
        ),
        _decl("frequentlyUsedCommands.txt", None, "binary_name"),
    ),
)

_RELATIONAL_WITH_CACHE = VariantDeclaration(
    required_fields=_RELATIONAL_FIELDS,
    directories=_RELATIONAL_DIRECTORIES,
    entries=(
        _decl("src/utils/getPort.go", None, "port"),
        _decl("src/utils/loadEnv.go"),
        _decl("src/utils/setupCors.go", None, "cors_origin"),
        _decl("src/utils/setUpDatabase.go"),
        _decl("src/utils/setupRedis.go"),
        _decl("src/routes/allRoutes.go", None, "project_name"),
        _decl("src/controllers/userController.go", None, "project_name"),
        _decl("src/controllers/authController.go", None, "project_name"),
        _decl("src/entity/sessionEntity.go"),
        _decl("src/middleware/checkUserSession.go"),
        _decl("sql/migrations/V1__init.sql"),
        _decl("sql/queries/users.sql"),
        _decl("main.go", None, "project_name"),
        _decl("sqlc.yaml"),
        _decl(
            ".env", "env.j2", "port", "database_url", "redis_addr", "redis_password",
            credential_bearing=True,
        ),
        _decl(
            "flyway.conf", None, "flyway_url", "db_user", "db_password",
            credential_bearing=True,
        ),
        _decl(".gitignore", "gitignore.j2", ignore_list=True),
        _decl(
            "createSchemaDump.sh", None, "db_user", "db_host", "db_port", "database_name",
            executable=True,
        ),
        _decl("frequentlyUsedCommands.txt", None, "binary_name"),
    ),
)

DECLARATIONS: dict[StackVariant, VariantDeclaration] = {
    StackVariant.GRAPH_WITH_MIGRATIONS: _GRAPH_WITH_MIGRATIONS,
    StackVariant.RELATIONAL_WITH_CODEGEN: _RELATIONAL_WITH_CODEGEN,
    StackVariant.RELATIONAL_WITH_CACHE: _RELATIONAL_WITH_CACHE,
}


# ---------------------------------------------------------------------------
# Loaded catalog
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class VariantCatalog:
    """Everything one variant writes, in write order."""

    variant: StackVariant
    required_fields: tuple[FieldKind, ...]
    directories: tuple[str, ...]
    entries: tuple[TemplateEntry, ...] = field(default_factory=tuple)

    @property
    def required_variables(self) -> frozenset[str]:
        """Union of the placeholders needed by every entry."""
        names: set[str] = set()
        for entry in self.entries:
            names |= entry.required_variables
        return frozenset(names)

    @property
    def credential_paths(self) -> tuple[str, ...]:
        return tuple(e.relative_path for e in self.entries if e.credential_bearing)


class TemplateCatalog:
    """Read-only mapping from :class:`StackVariant` to its :class:`VariantCatalog`."""

    def __init__(self, variants: Mapping[StackVariant, VariantCatalog]) -> None:
        self._variants = dict(variants)

    @classmethod
    def load(
        cls,
        declarations: Mapping[StackVariant, VariantDeclaration] | None = None,
        renderer: TemplateRenderer | None = None,
    ) -> "TemplateCatalog":
        """Read every template body and check the catalog invariants.

        Template files are looked up under ``templates/<variant value>/``.

        Raises:
            CatalogConsistencyError: on any violated invariant.
        """
        declarations = DECLARATIONS if declarations is None else declarations
        renderer = renderer or TemplateRenderer()

        variants: dict[StackVariant, VariantCatalog] = {}
        for variant, declaration in declarations.items():
            entries = tuple(
                _load_entry(variant, decl, renderer) for decl in declaration.entries
            )
            for directory in declaration.directories:
                try:
                    check_relative_path(directory)
                except ValueError as exc:
                    raise CatalogConsistencyError(f"{variant.value}: {exc}") from exc
            catalog = VariantCatalog(
                variant=variant,
                required_fields=declaration.required_fields,
                directories=declaration.directories,
                entries=entries,
            )
            _check_variant(catalog)
            variants[variant] = catalog
        return cls(variants)

    # -- Queries -----------------------------------------------------------

    def get(self, variant: StackVariant) -> VariantCatalog:
        """Return the checked catalog of ``variant``."""
        try:
            return self._variants[variant]
        except KeyError:
            raise CatalogConsistencyError(f"no templates registered for {variant!r}") from None

    def lookup(self, variant: StackVariant) -> tuple[TemplateEntry, ...]:
        """Return the ordered template entries of ``variant``."""
        return self.get(variant).entries

    def required_fields(self, variant: StackVariant) -> tuple[FieldKind, ...]:
        """Return the input fields ``variant`` needs, in prompt order."""
        return self.get(variant).required_fields

    def directories(self, variant: StackVariant) -> tuple[str, ...]:
        """Return the directories created for ``variant`` before any file."""
        return self.get(variant).directories

    def variants(self) -> list[StackVariant]:
        """Return every variant with a loaded catalog."""
        return list(self._variants)


@lru_cache(maxsize=1)
def default_catalog() -> TemplateCatalog:
    """Return the process-wide catalog built from the shipped templates."""
    return TemplateCatalog.load()


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _load_entry(
    variant: StackVariant, decl: EntryDeclaration, renderer: TemplateRenderer
) -> TemplateEntry:
    template_name = f"{variant.value}/{decl.template}"
    body = renderer.load_source(template_name)
    referenced = renderer.placeholders(body, name=template_name)
    undeclared = referenced - decl.required_variables
    if undeclared:
        raise CatalogConsistencyError(
            f"{template_name}: placeholder(s) not declared as required: "
            f"{', '.join(sorted(undeclared))}"
        )
    try:
        return TemplateEntry(
            relative_path=decl.relative_path,
            body=body,
            required_variables=decl.required_variables,
            credential_bearing=decl.credential_bearing,
            ignore_list=decl.ignore_list,
            executable=decl.executable,
        )
    except ValidationError as exc:
        raise CatalogConsistencyError(f"{template_name}: {exc}") from exc


def _check_variant(catalog: VariantCatalog) -> None:
    seen: set[str] = set()
    for entry in catalog.entries:
        if entry.relative_path in seen:
            raise CatalogConsistencyError(
                f"{catalog.variant.value}: duplicate entry for {entry.relative_path}"
            )
        seen.add(entry.relative_path)

    ignore_entries = [e for e in catalog.entries if e.ignore_list]
    if len(ignore_entries) > 1:
        raise CatalogConsistencyError(
            f"{catalog.variant.value}: more than one ignore-list entry"
        )
    if catalog.credential_paths and not ignore_entries:
        raise CatalogConsistencyError(
            f"{catalog.variant.value}: credential-bearing files need an ignore-list entry"
        )
