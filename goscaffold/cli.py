"""Command line entry point for goscaffold.

Usage::

    goscaffold --variant relational_with_codegen --output ./sample-api
    python -m goscaffold --list-variants
"""

from __future__ import annotations

import argparse
import asyncio
from pathlib import Path
from typing import Protocol, Sequence

from rich.prompt import Prompt

from goscaffold.config import Config, ConfigError
from goscaffold.scaffolder import (
    FieldKind,
    ScaffoldError,
    ScaffoldRun,
    StackVariant,
    ToolchainHandoff,
    default_catalog,
)
from goscaffold.utils import (
    console,
    print_error,
    print_step_header,
    print_success,
    print_summary_table,
    print_warning,
)

PROMPTS: dict[FieldKind, str] = {
    FieldKind.PROJECT_NAME: "Enter the project name (letters, numbers, hyphens only)",
    FieldKind.MODULE_PATH: (
        "Enter the project name (letters, numbers, hyphens, dots, slashes, underscores allowed)"
    ),
    FieldKind.DATABASE_NAME: "Enter the database name (letters, numbers, underscores only)",
    FieldKind.DB_USER: "Enter database username",
    FieldKind.DB_PASSWORD: "Enter database password",
}


class InputSource(Protocol):
    """Supplies one raw value per requested field."""

    def ask(self, field: FieldKind, prompt: str) -> str: ...


class RichPromptSource:
    """Interactive prompts. Secret fields are read without echo."""

    def ask(self, field: FieldKind, prompt: str) -> str:
        return Prompt.ask(prompt, password=field.is_secret, console=console)


def collect_input(run: ScaffoldRun, source: InputSource) -> dict[FieldKind, str]:
    """Ask for every field the run's variant needs, validating as we go.

    Raises:
        InputValidationError: on the first invalid value; later fields are
            not asked for.
    """
    values: dict[FieldKind, str] = {}
    for field in run.required_fields:
        raw = source.ask(field, PROMPTS[field])
        values[field] = run.validator.validate(field, raw)
    return values


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the ``goscaffold`` command."""
    parser = argparse.ArgumentParser(
        prog="goscaffold",
        description="Generate a Go backend service skeleton from a template catalog",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  goscaffold --variant relational_with_codegen -o ./sample-api\n"
            "  goscaffold --variant graph_with_migrations --run-tools\n"
        ),
    )
    parser.add_argument(
        "--variant",
        choices=[v.value for v in StackVariant],
        default=None,
        help="Stack variant to generate (asked interactively when omitted)",
    )
    parser.add_argument(
        "--output", "-o",
        type=Path,
        default=None,
        help="Project root to write into (default: current directory)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Render every file but write nothing",
    )
    parser.add_argument(
        "--run-tools",
        action="store_true",
        help="Run go mod init/tidy/vendor, sqlc generate and go build afterwards",
    )
    parser.add_argument(
        "--list-variants",
        action="store_true",
        help="Print the available stack variants and exit",
    )
    return parser


def _list_variants() -> None:
    catalog = default_catalog()
    print_summary_table(
        {
            variant.value: f"{len(catalog.lookup(variant))} files, asks for "
            + ", ".join(f.value for f in catalog.required_fields(variant))
            for variant in catalog.variants()
        },
        title="Stack variants",
    )


def _report(run: ScaffoldRun, dry_run: bool) -> None:
    rows = {}
    for generated in run.files:
        relative = generated.absolute_path.relative_to(run.destination).as_posix()
        rows[relative] = "credentials (git-ignored)" if generated.credential_bearing else ""
    title = "Would write" if dry_run else "Generated files"
    print_summary_table(rows, title=title)


def main(argv: Sequence[str] | None = None, source: InputSource | None = None) -> int:
    """Run the generator. Returns the process exit status."""
    args = build_parser().parse_args(argv)
    if args.list_variants:
        _list_variants()
        return 0

    source = source or RichPromptSource()

    try:
        config = Config.from_env()
        variant_name = args.variant or Prompt.ask(
            "Stack variant",
            choices=[v.value for v in StackVariant],
            default=StackVariant.RELATIONAL_WITH_CODEGEN.value,
            console=console,
        )
        destination = args.output if args.output is not None else config.output_dir
        run = ScaffoldRun(StackVariant(variant_name), destination, config=config)

        print_step_header(f"goscaffold: {run.variant.value}")
        raw_values = collect_input(run, source)
        run.execute(raw_values, dry_run=args.dry_run)
    except (ConfigError, ScaffoldError) as exc:
        print_error(str(exc))
        return 1
    except (KeyboardInterrupt, EOFError):
        console.print()
        print_warning("Aborted.")
        return 130

    _report(run, args.dry_run)
    if args.dry_run:
        print_success("Dry run complete, nothing was written.")
        return 0

    handoff = ToolchainHandoff.from_run(run)
    if args.run_tools:
        print_step_header("Go toolchain")
        results = asyncio.run(handoff.execute())
        failed = [r for r in results if not r.ok]
        if failed:
            print_error(f"{' '.join(failed[0].command)} failed: {failed[0].stderr}")
            return 1
    else:
        console.print("Next steps:")
        for command in handoff.plan():
            console.print(f"  {' '.join(command)}", highlight=False)

    print_success(f"Project {run.spec.project_name} has been initialized in {run.destination}.")
    if run.spec.database_name:
        console.print(
            f"Remember to create the database '{run.spec.database_name}' before running the application."
        )
    return 0
