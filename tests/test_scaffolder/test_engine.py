"""Tests for the run state machine (goscaffold.scaffolder.engine)."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from goscaffold.scaffolder import (
    FieldKind,
    InputValidationError,
    MaterializationError,
    RunState,
    ScaffoldRun,
    StackVariant,
)


pytestmark = pytest.mark.unit


class TestScaffoldRun:
    def test_initial_state(self, tmp_project_dir: Path, config):
        run = ScaffoldRun(StackVariant.RELATIONAL_WITH_CODEGEN, tmp_project_dir, config=config)
        assert run.state is RunState.UNSTARTED
        assert run.error is None
        assert run.spec is None
        assert run.required_fields[0] is FieldKind.MODULE_PATH

    def test_completed_run(self, tmp_project_dir: Path, config, relational_input):
        run = ScaffoldRun(StackVariant.RELATIONAL_WITH_CODEGEN, tmp_project_dir, config=config)
        files = run.execute(relational_input)
        assert run.state is RunState.COMPLETED
        assert run.state.is_terminal
        assert run.files == files
        assert run.spec.project_name == "sample-api"
        assert (tmp_project_dir / ".env").exists()

    def test_states_visited_in_order(self, tmp_project_dir: Path, config, relational_input):
        run = ScaffoldRun(StackVariant.RELATIONAL_WITH_CODEGEN, tmp_project_dir, config=config)
        seen: list[RunState] = []

        original_bind = run.binder.bind
        original_materialize = run.materializer.materialize

        def spy_bind(spec):
            seen.append(run.state)
            return original_bind(spec)

        def spy_materialize(*args, **kwargs):
            seen.append(run.state)
            return original_materialize(*args, **kwargs)

        with patch.object(run.binder, "bind", spy_bind), patch.object(
            run.materializer, "materialize", spy_materialize
        ):
            run.execute(relational_input)

        assert seen == [RunState.BINDING, RunState.MATERIALIZING]

    def test_validation_failure_aborts_before_writing(
        self, tmp_project_dir: Path, config, relational_input
    ):
        relational_input[FieldKind.DATABASE_NAME] = "sample db"
        run = ScaffoldRun(StackVariant.RELATIONAL_WITH_CODEGEN, tmp_project_dir, config=config)
        with pytest.raises(InputValidationError):
            run.execute(relational_input)
        assert run.state is RunState.ABORTED
        assert isinstance(run.error, InputValidationError)
        assert run.files == []
        assert not tmp_project_dir.exists()

    def test_materialization_failure_recorded(self, tmp_project_dir: Path, config, relational_input):
        (tmp_project_dir / "main.go").mkdir(parents=True)
        run = ScaffoldRun(StackVariant.RELATIONAL_WITH_CODEGEN, tmp_project_dir, config=config)
        with pytest.raises(MaterializationError):
            run.execute(relational_input)
        assert run.state is RunState.ABORTED
        assert isinstance(run.error, MaterializationError)

    def test_dry_run_writes_nothing(self, tmp_project_dir: Path, config, graph_input):
        run = ScaffoldRun(StackVariant.GRAPH_WITH_MIGRATIONS, tmp_project_dir, config=config)
        files = run.execute(graph_input, dry_run=True)
        assert run.state is RunState.COMPLETED
        assert files
        assert not tmp_project_dir.exists()

    def test_run_cannot_be_restarted(self, tmp_project_dir: Path, config, relational_input):
        run = ScaffoldRun(StackVariant.RELATIONAL_WITH_CODEGEN, tmp_project_dir, config=config)
        run.execute(relational_input)
        with pytest.raises(RuntimeError):
            run.execute(relational_input)

    def test_aborted_run_cannot_resume(self, tmp_project_dir: Path, config, relational_input):
        relational_input[FieldKind.MODULE_PATH] = "bad name"
        run = ScaffoldRun(StackVariant.RELATIONAL_WITH_CODEGEN, tmp_project_dir, config=config)
        with pytest.raises(InputValidationError):
            run.execute(relational_input)
        with pytest.raises(RuntimeError):
            run.execute(relational_input)

    def test_destination_expanded_and_absolute(self, tmp_path: Path, monkeypatch, config):
        monkeypatch.setenv("HOME", str(tmp_path))
        run = ScaffoldRun(StackVariant.GRAPH_WITH_MIGRATIONS, "~/proj", config=config)
        assert run.destination == (tmp_path / "proj").resolve()
        assert run.destination.is_absolute()
