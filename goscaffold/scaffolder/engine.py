"""One generation run, from raw input to a written project tree.

A run walks ``unstarted -> validating -> binding -> materializing`` and ends
in ``completed`` or ``aborted``. There is no way to resume: an aborted run is
fixed by invoking the generator again, which overwrites whatever the failed
run managed to write.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Mapping, Optional

from ..config import Config
from .binder import SubstitutionContext, VariableBinder
from .catalog import TemplateCatalog, default_catalog
from .errors import ScaffoldError
from .materializer import ProjectMaterializer
from .models import FieldKind, GeneratedFile, ProjectSpec, StackVariant
from .validator import InputValidator

__all__ = ["RunState", "ScaffoldRun"]


class RunState(str, Enum):
    """Lifecycle of a :class:`ScaffoldRun`."""
    UNSTARTED = "unstarted"
    VALIDATING = "validating"
    BINDING = "binding"
    MATERIALIZING = "materializing"
    COMPLETED = "completed"
    ABORTED = "aborted"

    @property
    def is_terminal(self) -> bool:
        return self in (RunState.COMPLETED, RunState.ABORTED)


class ScaffoldRun:
    """Drive validation, binding and materialization for one project.

    Attributes:
        variant: Selected stack variant.
        destination: Absolute project root the tree is written to (``~`` expanded).
        state: Current :class:`RunState`.
        error: The error that aborted the run, if any.
        spec: The validated project description, once validation passed.
        files: Files written by a completed run.
    """

    def __init__(
        self,
        variant: StackVariant,
        destination: str | Path,
        *,
        config: Config | None = None,
        catalog: TemplateCatalog | None = None,
    ) -> None:
        self.variant = variant
        self.destination = Path(destination).expanduser().resolve()
        self.catalog = catalog or default_catalog()
        self.validator = InputValidator(self.catalog)
        self.binder = VariableBinder(config, self.catalog)
        self.materializer = ProjectMaterializer(self.catalog)

        self.state = RunState.UNSTARTED
        self.error: Optional[ScaffoldError] = None
        self.spec: Optional[ProjectSpec] = None
        self.files: list[GeneratedFile] = []

    @property
    def required_fields(self) -> tuple[FieldKind, ...]:
        return self.catalog.required_fields(self.variant)

    def execute(
        self, raw_values: Mapping[FieldKind, str], *, dry_run: bool = False
    ) -> list[GeneratedFile]:
        """Run every step and return the generated files.

        With ``dry_run`` the files are rendered but nothing is written.

        Raises:
            ScaffoldError: whatever aborted the run, after ``state`` has been
                set to ``ABORTED`` and ``error`` recorded.
        """
        if self.state is not RunState.UNSTARTED:
            raise RuntimeError(f"run already {self.state.value}")

        try:
            self.state = RunState.VALIDATING
            self.spec = self.validator.validate_all(self.variant, raw_values)

            self.state = RunState.BINDING
            context: SubstitutionContext = self.binder.bind(self.spec)

            self.state = RunState.MATERIALIZING
            if dry_run:
                files = self.materializer.render(self.variant, context, self.destination)
            else:
                files = self.materializer.materialize(self.variant, context, self.destination)
        except ScaffoldError as exc:
            self.state = RunState.ABORTED
            self.error = exc
            raise

        self.files = files
        self.state = RunState.COMPLETED
        return files
