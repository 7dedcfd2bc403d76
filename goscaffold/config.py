"""goscaffold configuration.

Centralised, typed configuration for the generator. The values here are the
generator-derived constants that end up in the rendered templates (default
listening port, database addresses, CORS origin). All settings use Pydantic v2
models so they can be validated at construction time and serialised to/from
JSON or environment variables without boiler-plate.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError


class ConfigError(ValueError):
    """An environment override could not be turned into a valid ``Config``."""


class PostgresConfig(BaseModel):
    """Connection defaults for the relational variants."""

    host: str = Field(default="localhost")
    port: int = Field(default=5432, ge=1, le=65535)
    sslmode: str = Field(default="disable")


class Neo4jConfig(BaseModel):
    """Connection defaults for the graph variant."""

    scheme: str = Field(default="bolt")
    host: str = Field(default="localhost")
    port: int = Field(default=7687, ge=1, le=65535)
    database: str = Field(
        default="neo4j", description="Database name used when the variant does not ask for one"
    )

    @property
    def uri(self) -> str:
        """Return the driver URI, e.g. ``bolt://localhost:7687``."""
        return f"{self.scheme}://{self.host}:{self.port}"


class RedisConfig(BaseModel):
    """Connection defaults for the session cache."""

    host: str = Field(default="localhost")
    port: int = Field(default=6379, ge=1, le=65535)
    password: str = Field(default="")

    @property
    def addr(self) -> str:
        """Return the ``host:port`` address go-redis expects."""
        return f"{self.host}:{self.port}"


class Config(BaseModel):
    """Global goscaffold configuration.

    Instances are typically created once by the CLI entry point and then
    passed to the :class:`~goscaffold.scaffolder.binder.VariableBinder`.
    """

    output_dir: Path = Field(default=Path("."))
    port: int = Field(default=3000, ge=1, le=65535, description="Listening port written to .env")
    cors_origin: str = Field(default="http://127.0.0.1:5500")
    postgres: PostgresConfig = Field(default_factory=PostgresConfig)
    neo4j: Neo4jConfig = Field(default_factory=Neo4jConfig)
    redis: RedisConfig = Field(default_factory=RedisConfig)

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def save(self, path: Path) -> Path:
        """Persist the configuration to a JSON file.

        Args:
            path: Destination file.

        Returns:
            The path where the file was written.
        """
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return path

    @classmethod
    def load(cls, path: Path) -> "Config":
        """Load a previously-saved configuration from JSON."""
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)

    @classmethod
    def from_env(cls) -> "Config":
        """Build a ``Config`` from environment variables.

        Recognised variables (all optional):
            GOSCAFFOLD_OUTPUT_DIR, GOSCAFFOLD_PORT, GOSCAFFOLD_CORS_ORIGIN,
            GOSCAFFOLD_POSTGRES_HOST, GOSCAFFOLD_POSTGRES_PORT,
            GOSCAFFOLD_NEO4J_HOST, GOSCAFFOLD_NEO4J_PORT,
            GOSCAFFOLD_REDIS_HOST, GOSCAFFOLD_REDIS_PORT.

        Raises:
            ConfigError: if a variable is not an integer where one is expected,
                or the resulting value is out of range.
        """
        postgres_kwargs: dict[str, Any] = {}
        if os.environ.get("GOSCAFFOLD_POSTGRES_HOST"):
            postgres_kwargs["host"] = os.environ["GOSCAFFOLD_POSTGRES_HOST"]
        if os.environ.get("GOSCAFFOLD_POSTGRES_PORT"):
            postgres_kwargs["port"] = _env_int("GOSCAFFOLD_POSTGRES_PORT")

        neo4j_kwargs: dict[str, Any] = {}
        if os.environ.get("GOSCAFFOLD_NEO4J_HOST"):
            neo4j_kwargs["host"] = os.environ["GOSCAFFOLD_NEO4J_HOST"]
        if os.environ.get("GOSCAFFOLD_NEO4J_PORT"):
            neo4j_kwargs["port"] = _env_int("GOSCAFFOLD_NEO4J_PORT")

        redis_kwargs: dict[str, Any] = {}
        if os.environ.get("GOSCAFFOLD_REDIS_HOST"):
            redis_kwargs["host"] = os.environ["GOSCAFFOLD_REDIS_HOST"]
        if os.environ.get("GOSCAFFOLD_REDIS_PORT"):
            redis_kwargs["port"] = _env_int("GOSCAFFOLD_REDIS_PORT")

        kwargs: dict[str, Any] = {
            "output_dir": Path(os.environ.get("GOSCAFFOLD_OUTPUT_DIR", ".")),
            "postgres": postgres_kwargs,
            "neo4j": neo4j_kwargs,
            "redis": redis_kwargs,
        }
        if os.environ.get("GOSCAFFOLD_PORT"):
            kwargs["port"] = _env_int("GOSCAFFOLD_PORT")
        if os.environ.get("GOSCAFFOLD_CORS_ORIGIN"):
            kwargs["cors_origin"] = os.environ["GOSCAFFOLD_CORS_ORIGIN"]

        try:
            return cls(**kwargs)
        except ValidationError as exc:
            first = exc.errors()[0]
            where = ".".join(str(part) for part in first["loc"])
            raise ConfigError(f"invalid {where} from environment: {first['msg']}") from None


def _env_int(name: str) -> int:
    raw = os.environ[name]
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from None
