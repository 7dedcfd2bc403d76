"""Shared pytest fixtures for the goscaffold test suite.

Provides reusable fixtures for:
- Temporary project directories
- Raw user input for each stack variant
- A default configuration and the shipped template catalog
- Mock subprocess helpers for the toolchain handoff
"""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from goscaffold.config import Config
from goscaffold.scaffolder import FieldKind, ProjectSpec, StackVariant, default_catalog


# ---------------------------------------------------------------------------
# Paths & Directories
# ---------------------------------------------------------------------------

@pytest.fixture
def tmp_project_dir(tmp_path: Path) -> Path:
    """Destination root for a generated project (not created up front)."""
    return tmp_path / "sample-api"


# ---------------------------------------------------------------------------
# Configuration & catalog
# ---------------------------------------------------------------------------

@pytest.fixture
def config() -> Config:
    """Default configuration, independent of the caller's environment."""
    return Config()


@pytest.fixture
def catalog():
    """The process-wide catalog built from the shipped templates."""
    return default_catalog()


# ---------------------------------------------------------------------------
# Raw input per variant
# ---------------------------------------------------------------------------

@pytest.fixture
def relational_input() -> dict[FieldKind, str]:
    """Input for the relational variants (end-to-end scenario A)."""
    return {
        FieldKind.MODULE_PATH: "sample-api",
        FieldKind.DATABASE_NAME: "sampledb",
        FieldKind.DB_USER: "admin",
        FieldKind.DB_PASSWORD: "secret",
    }


@pytest.fixture
def graph_input() -> dict[FieldKind, str]:
    """Input for the graph variant."""
    return {
        FieldKind.PROJECT_NAME: "movie-graph",
        FieldKind.DB_USER: "neo4j",
        FieldKind.DB_PASSWORD: "s3cr3t-pass",
    }


@pytest.fixture
def raw_inputs(relational_input, graph_input) -> dict[StackVariant, dict[FieldKind, str]]:
    """Valid raw input for every variant."""
    return {
        StackVariant.GRAPH_WITH_MIGRATIONS: graph_input,
        StackVariant.RELATIONAL_WITH_CODEGEN: relational_input,
        StackVariant.RELATIONAL_WITH_CACHE: relational_input,
    }


@pytest.fixture
def scenario_a_spec() -> ProjectSpec:
    """Validated project description for end-to-end scenario A."""
    return ProjectSpec(
        project_name="sample-api",
        database_name="sampledb",
        db_user="admin",
        db_password="secret",
        stack_variant=StackVariant.RELATIONAL_WITH_CODEGEN,
    )


# ---------------------------------------------------------------------------
# Mock Subprocess (generic)
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_subprocess():
    """Mock asyncio subprocess for testing command execution.

    Returns a factory that creates mock subprocess instances with configurable
    stdout, stderr, and return codes.

    Usage:
        def test_command(mock_subprocess):
            proc = mock_subprocess(stdout="output", returncode=0)
            with patch("asyncio.create_subprocess_exec", return_value=proc):
                ...
    """
    def factory(
        stdout: str = "",
        stderr: str = "",
        returncode: int = 0,
    ) -> AsyncMock:
        mock_proc = AsyncMock()
        mock_proc.communicate = AsyncMock(
            return_value=(stdout.encode("utf-8"), stderr.encode("utf-8"))
        )
        mock_proc.returncode = returncode
        mock_proc.pid = 99999
        mock_proc.kill = MagicMock()
        mock_proc.wait = AsyncMock(return_value=returncode)
        return mock_proc

    return factory
