"""Hand a completed tree over to the Go toolchain.

After materialization the generated project still needs ``go mod init``,
dependency resolution and, for the relational stacks, ``sqlc generate``. This
module only knows which commands to run and in which order; it does not
install any of the tools.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from ..utils import console, run_command
from .engine import RunState, ScaffoldRun
from .models import StackVariant

__all__ = ["CommandResult", "ToolchainHandoff"]


@dataclass
class CommandResult:
    """Outcome of one toolchain command."""

    command: list[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


@dataclass
class ToolchainHandoff:
    """Build and optionally execute the post-generation command plan."""

    project_name: str
    variant: StackVariant
    project_root: Path
    timeout: int = 300
    results: list[CommandResult] = field(default_factory=list)

    @classmethod
    def from_run(cls, run: ScaffoldRun) -> "ToolchainHandoff":
        """Create the handoff for a completed run.

        Raises:
            RuntimeError: if the run has not completed.
        """
        if run.state is not RunState.COMPLETED or run.spec is None:
            raise RuntimeError(f"cannot hand off a run that is {run.state.value}")
        return cls(
            project_name=run.spec.project_name,
            variant=run.variant,
            project_root=run.destination,
        )

    def plan(self) -> list[list[str]]:
        """Return the commands to run inside the project root, in order.

        ``go mod init`` is left out when a previous run already created
        ``go.mod``.
        """
        commands: list[list[str]] = []
        if not (self.project_root / "go.mod").exists():
            commands.append(["go", "mod", "init", self.project_name])
        if self.variant in (
            StackVariant.RELATIONAL_WITH_CODEGEN,
            StackVariant.RELATIONAL_WITH_CACHE,
        ):
            commands.append(["sqlc", "generate"])
        commands.extend([["go", "mod", "tidy"], ["go", "mod", "vendor"], ["go", "build"]])
        return commands

    async def execute(self) -> list[CommandResult]:
        """Run the plan, stopping at the first failing command."""
        self.results = []
        for command in self.plan():
            console.print(f"  [cyan]$[/cyan] {' '.join(command)}", highlight=False)
            returncode, stdout, stderr = await run_command(
                command, cwd=self.project_root, timeout=self.timeout
            )
            result = CommandResult(command, returncode, stdout, stderr)
            self.results.append(result)
            if not result.ok:
                break
        return self.results
