"""
xds_scaffold.cli - Command Line Interface
=========================================

The ``scaffold`` command, built with Typer.

Usage Examples
--------------
Minimal project (package directory defaults to the project name):
    $ scaffold myapp

Description and several packages:
    $ scaffold myapi "REST API service" "api,models,services"

Non-interactive, no post-steps:
    $ scaffold myapp --yes --no-git --no-sync

Preview only:
    $ scaffold myapp --dry-run

Exit Codes
----------
0   Project created (optional git/uv steps may have been skipped), or the
    user declined to reuse an existing directory
1   Invalid input, unreadable template, unbound placeholder or write failure

See Also
--------
- scaffolder.py: The scaffold pipeline
- models.py: ProjectDescriptor and ScaffoldSettings
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import questionary
import tomli
import typer
from pydantic import ValidationError as PydanticValidationError
from rich import print as rprint
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from xds_scaffold import __version__
from xds_scaffold.errors import ValidationError
from xds_scaffold.models import ScaffoldSettings
from xds_scaffold.reporter import Reporter
from xds_scaffold.scaffolder import Scaffolder, ScaffoldResult
from xds_scaffold.tools import NullTools


# =============================================================================
# CLI Application Setup
# =============================================================================

app = typer.Typer(
    name="scaffold",
    help="Create a new XDS Framework Python project.",
    rich_markup_mode="rich",
    add_completion=False,
)

# Console for rich output
console = Console()


# =============================================================================
# Callbacks and Prompts
# =============================================================================

def version_callback(value: bool) -> None:
    """Display version information and exit."""
    if value:
        console.print(Panel(
            f"[bold green]xds-scaffold[/] version [cyan]{__version__}[/]\n\n"
            f"[dim]XDS Framework project scaffolder[/]",
            border_style="green",
        ))
        raise typer.Exit()


def confirm_overwrite(question: str) -> bool:
    """Ask whether to continue into an existing directory. Defaults to no."""
    answer = questionary.confirm(question, default=False).ask()
    return bool(answer)


def _assume_yes(question: str) -> bool:
    return True


# =============================================================================
# Output
# =============================================================================

def show_plan(project_dir: Path, paths: list[Path]) -> None:
    """Print the files a run would create."""
    table = Table(title=f"Would create in {project_dir}", show_header=False)
    table.add_column("Path", style="cyan")
    for path in paths:
        table.add_row(path.as_posix())
    console.print(table)
    console.print("[dim]Run without --dry-run to create the project[/]")


def show_summary(result: ScaffoldResult) -> None:
    """Print the run summary and next steps."""
    summary = result.summary()

    table = Table(title="Scaffold Summary", show_header=False)
    table.add_column("Item", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Project", escape(summary["project"]))
    table.add_row("Directories created", str(summary["directories_created"]))
    table.add_row("Packages", str(summary["packages"]))
    table.add_row("Files rendered", str(summary["files_rendered"]))
    table.add_row("Files copied", str(summary["files_copied"]))
    table.add_row("Git", summary["vcs"])
    table.add_row("Dependency sync", summary["dependency_sync"])
    table.add_row("Warnings", str(len(summary["warnings"])))

    console.print()
    console.print(table)

    name = result.project_path.name
    console.print(Panel(
        f"[bold]Next steps:[/]\n"
        f"  1. cd {escape(name)}\n"
        f"  2. uv run {escape(name)} --help\n"
        f"  3. Start coding with TDD approach\n"
        f"  4. Use /xprd, /xspec, /xtasks, /xgo workflow for structured development",
        title="[bold green]Success[/]",
        border_style="green",
    ))


# =============================================================================
# Scaffold Command
# =============================================================================

@app.command()
def scaffold(
    project_name: Annotated[
        str,
        typer.Argument(help="Project name: lowercase letters, digits, '_' and '-'"),
    ],
    project_description: Annotated[
        str | None,
        typer.Argument(help="Short description (default: '<name> - XDS Framework Project')"),
    ] = None,
    package_dirs: Annotated[
        str | None,
        typer.Argument(help="Comma-separated package directories (default: project name)"),
    ] = None,
    output_dir: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Directory to create the project in (default: current directory)",
        ),
    ] = None,
    configs_dir: Annotated[
        Path | None,
        typer.Option(
            "--configs",
            help="Configuration root holding the templates (default: bundled templates)",
        ),
    ] = None,
    config_file: Annotated[
        Path | None,
        typer.Option(
            "--config",
            help="Settings TOML file (default: ~/.claude/configs/scaffold.toml)",
        ),
    ] = None,
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Continue without asking if the directory exists"),
    ] = False,
    no_git: Annotated[
        bool,
        typer.Option("--no-git", help="Skip git initialization"),
    ] = False,
    no_sync: Annotated[
        bool,
        typer.Option("--no-sync", help="Skip dependency sync (uv sync --dev)"),
    ] = False,
    no_vscode: Annotated[
        bool,
        typer.Option("--no-vscode", help="Skip VS Code settings"),
    ] = False,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Show what would be created without writing anything"),
    ] = False,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """
    Create a new XDS Framework Python project.

    [bold]Examples:[/]

        scaffold myapp

        scaffold myapi "REST API service" "api,models,services"

        scaffold myapp --yes --no-git --no-sync
    """
    try:
        settings = ScaffoldSettings.load(config_file)
    except (OSError, tomli.TOMLDecodeError, PydanticValidationError) as e:
        rprint(f"[red]Error:[/] Invalid settings: {escape(str(e))}")
        raise typer.Exit(1)

    updates: dict[str, object] = {}
    if configs_dir is not None:
        updates["configs_dir"] = configs_dir.expanduser()
    if no_git:
        updates["init_git"] = False
    if no_sync:
        updates["sync_dependencies"] = False
    if updates:
        settings = settings.model_copy(update=updates)

    scaffolder = Scaffolder(
        settings,
        tools=NullTools() if no_git and no_sync else None,
        reporter=Reporter(console),
        confirm=_assume_yes if yes else confirm_overwrite,
        output_dir=output_dir or Path.cwd(),
    )

    if dry_run:
        try:
            descriptor = scaffolder.describe(
                project_name, project_description, package_dirs, vscode=not no_vscode,
            )
        except ValidationError as e:
            rprint(f"[red]Error:[/] {escape(str(e))}")
            raise typer.Exit(1)
        show_plan(scaffolder.output_dir / descriptor.name, scaffolder.plan(descriptor))
        return

    result = scaffolder.run(
        project_name, project_description, package_dirs, vscode=not no_vscode,
    )

    if result.aborted:
        return

    if not result.success:
        if result.artifacts:
            console.print(
                f"[dim]{len(result.artifacts)} path(s) already written under "
                f"{escape(str(result.project_path))} were left in place.[/]"
            )
        raise typer.Exit(1)

    show_summary(result)


# =============================================================================
# Entry Point
# =============================================================================

def main() -> None:
    """Console script entry point."""
    app()


if __name__ == "__main__":
    main()
