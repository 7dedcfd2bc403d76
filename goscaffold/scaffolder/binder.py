"""Build the substitution context for a run.

The context merges the validated :class:`ProjectSpec` with constants derived
from :class:`~goscaffold.config.Config` (ports, database addresses). It is
built once per run and checked against the variant's catalog before anything
is written.
"""

from __future__ import annotations

from typing import Callable, Iterator, Mapping

from ..config import Config
from .catalog import TemplateCatalog, default_catalog
from .errors import MissingVariableError
from .models import ProjectSpec, StackVariant

__all__ = ["SECRET_VARIABLES", "SubstitutionContext", "VariableBinder"]


SECRET_VARIABLES: frozenset[str] = frozenset({"db_password", "database_url", "redis_password"})


class SubstitutionContext(Mapping[str, str]):
    """Read-only placeholder -> value mapping whose repr hides credentials."""

    def __init__(self, values: Mapping[str, str]) -> None:
        self._values = dict(values)

    def __getitem__(self, key: str) -> str:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        shown = {
            key: ("**********" if key in SECRET_VARIABLES else value)
            for key, value in self._values.items()
        }
        return f"SubstitutionContext({shown!r})"

    __str__ = __repr__


class VariableBinder:
    """Turn a :class:`ProjectSpec` into a :class:`SubstitutionContext`."""

    def __init__(
        self,
        config: Config | None = None,
        catalog: TemplateCatalog | None = None,
    ) -> None:
        self.config = config or Config()
        self.catalog = catalog or default_catalog()
        self._derivers: dict[StackVariant, Callable[[ProjectSpec, dict[str, str]], None]] = {
            StackVariant.GRAPH_WITH_MIGRATIONS: self._derive_graph,
            StackVariant.RELATIONAL_WITH_CODEGEN: self._derive_relational,
            StackVariant.RELATIONAL_WITH_CACHE: self._derive_cached_relational,
        }

    def bind(self, spec: ProjectSpec) -> SubstitutionContext:
        """Build the context for ``spec`` and check it covers every template.

        Raises:
            MissingVariableError: if an entry of the variant needs a
                placeholder the context does not provide.
        """
        values: dict[str, str] = {
            "project_name": spec.project_name,
            "database_name": spec.database_name or "",
            "db_user": spec.db_user,
            "db_password": spec.db_password.get_secret_value(),
            "binary_name": spec.project_name.rstrip("/").rsplit("/", 1)[-1],
            "port": str(self.config.port),
            "cors_origin": self.config.cors_origin,
        }
        self._derivers[spec.stack_variant](spec, values)

        context = SubstitutionContext(values)
        self.check(spec.stack_variant, context)
        return context

    def check(self, variant: StackVariant, context: Mapping[str, str]) -> None:
        """Raise if any entry of ``variant`` needs a name ``context`` lacks."""
        for entry in self.catalog.lookup(variant):
            missing = entry.required_variables - set(context)
            if missing:
                raise MissingVariableError(entry.relative_path, missing)

    # -- Variant-specific constants ----------------------------------------

    def _derive_graph(self, spec: ProjectSpec, values: dict[str, str]) -> None:
        neo4j = self.config.neo4j
        values["database_name"] = spec.database_name or neo4j.database
        values["neo4j_uri"] = neo4j.uri

    def _derive_relational(self, spec: ProjectSpec, values: dict[str, str]) -> None:
        pg = self.config.postgres
        address = f"{pg.host}:{pg.port}/{values['database_name']}?sslmode={pg.sslmode}"
        values["db_host"] = pg.host
        values["db_port"] = str(pg.port)
        values["database_url"] = (
            f"postgres://{values['db_user']}:{values['db_password']}@{address}"
        )
        values["flyway_url"] = f"jdbc:postgresql://{address}"

    def _derive_cached_relational(self, spec: ProjectSpec, values: dict[str, str]) -> None:
        self._derive_relational(spec, values)
        values["redis_addr"] = self.config.redis.addr
        values["redis_password"] = self.config.redis.password
