"""
xds_scaffold.scaffolder - Project Scaffolding Pipeline
======================================================

This module creates one new project per run. A run is a small state
machine:

    VALIDATING
      -> CREATING_DIRS
      -> RENDERING_TEMPLATES
      -> WRITING_STATIC_FILES
      -> INITIALIZING_VCS        (best effort)
      -> SYNCING_DEPENDENCIES    (best effort)
      -> DONE

``FAILED`` is reachable from every non-terminal state. The pipeline fails
fast and does not roll back: a failed result lists in ``artifacts`` every
directory and file written before the failure, so the caller can inspect
or delete the half-written project and retry.

Ordering
--------
- Directories are created before any file is written
- Templates are rendered before static assets are copied
- The initial commit happens after every file write, so it captures the
  complete tree

Usage Example
-------------
>>> from xds_scaffold.scaffolder import Scaffolder
>>> from xds_scaffold.tools import NullTools
>>> result = Scaffolder(tools=NullTools()).run("myapi", "REST API service", "api,models")
>>> result.success
True
>>> [p.name for p in result.markers_created]
['__init__.py', '__init__.py']

See Also
--------
- store.py: Template loading and placeholder scanning
- resolver.py: Binding set construction
- renderer.py: Substitution and file output
- tools.py: git and dependency-sync capabilities
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

import tomli
from pydantic import ValidationError as PydanticValidationError

from xds_scaffold.errors import (
    ScaffoldAborted,
    ScaffoldError,
    ValidationError,
    WriteError,
)
from xds_scaffold.models import (
    ProjectDescriptor,
    ScaffoldSettings,
    ScaffoldState,
    StepStatus,
)
from xds_scaffold.renderer import RenderedFile, copy_verbatim, render_template, write_rendered
from xds_scaffold.reporter import Reporter
from xds_scaffold.resolver import build_bindings, split_package_dirs
from xds_scaffold.store import BUNDLED_TEMPLATES_DIR, TemplateStore, placeholders_of
from xds_scaffold.tools import SubprocessTools


if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from xds_scaffold.tools import ExternalTools, ToolResult


# =============================================================================
# Project Layout
# =============================================================================

@dataclass(frozen=True)
class FileSpec:
    """
    A file produced by the scaffold.

    Attributes
    ----------
    source : str
        Path relative to the configuration root.
    destination : str
        Path relative to the project root.
    when : Callable[[ProjectDescriptor], bool] | None
        Condition for including the file; always included when None.
    """

    source: str
    destination: str
    when: Callable[[ProjectDescriptor], bool] | None = None

    def applies_to(self, descriptor: ProjectDescriptor) -> bool:
        return self.when is None or self.when(descriptor)


def _with_vscode(descriptor: ProjectDescriptor) -> bool:
    return descriptor.vscode


# Rendered with the binding set. The project/ templates ship with the package;
# a configuration root only needs the vscode/, python/ and git/ files.
TEMPLATE_MANIFEST: tuple[FileSpec, ...] = (
    FileSpec("vscode/extensions.json.template", ".vscode/extensions.json", _with_vscode),
    FileSpec("python/pyproject.toml.template", "pyproject.toml"),
    FileSpec("python/ruff.toml.template", "ruff.toml"),
    FileSpec("git/.gitignore.template", ".gitignore"),
    FileSpec("project/cli.py.j2", "cli.py"),
    FileSpec("project/test_main.py.j2", "tests/test_main.py"),
    FileSpec("project/README.md.j2", "README.md"),
    FileSpec("project/CLAUDE.md.j2", "CLAUDE.md"),
)

# Copied byte for byte
STATIC_ASSETS: tuple[FileSpec, ...] = (
    FileSpec("vscode/settings.json", ".vscode/settings.json", _with_vscode),
    FileSpec("vscode/markdown-preview.css", ".vscode/markdown-preview.css", _with_vscode),
    FileSpec("python/mypy.ini.template", "mypy.ini"),
    FileSpec("python/.editorconfig.template", ".editorconfig"),
)

# Auxiliary directories: (relative path, condition)
AUXILIARY_DIRS: tuple[tuple[str, Callable[[ProjectDescriptor], bool] | None], ...] = (
    ("tests", None),
    ("examples", None),
    ("claudify", None),
    (".vscode", _with_vscode),
)

PACKAGE_MARKER = "__init__.py"


# =============================================================================
# Result Data Class
# =============================================================================

@dataclass
class ScaffoldResult:
    """
    Outcome of one scaffold run.

    Attributes
    ----------
    project_path : Path
        Target project root.
    state : ScaffoldState
        Current (after ``run`` returns: terminal) state.
    history : list[ScaffoldState]
        Every state entered, in order.
    descriptor : ProjectDescriptor | None
        The validated input, once validation has passed.
    directories_created : list[Path]
        Directories that did not exist before the run.
    markers_created : list[Path]
        Package ``__init__.py`` markers.
    files_rendered : list[Path]
        Files produced from templates.
    files_copied : list[Path]
        Static assets copied verbatim.
    artifacts : list[Path]
        Everything above, in the order it was written.
    vcs : StepStatus
        Outcome of the git step.
    dependency_sync : StepStatus
        Outcome of the dependency-sync step.
    warnings : list[str]
        Non-fatal problems.
    error : ScaffoldError | None
        The fatal error of a FAILED run.
    aborted : bool
        True when the user declined to use an existing directory.
    """

    project_path: Path
    state: ScaffoldState = ScaffoldState.VALIDATING
    history: list[ScaffoldState] = field(default_factory=lambda: [ScaffoldState.VALIDATING])
    descriptor: ProjectDescriptor | None = None
    directories_created: list[Path] = field(default_factory=list)
    markers_created: list[Path] = field(default_factory=list)
    files_rendered: list[Path] = field(default_factory=list)
    files_copied: list[Path] = field(default_factory=list)
    artifacts: list[Path] = field(default_factory=list)
    vcs: StepStatus = StepStatus.NOT_RUN
    dependency_sync: StepStatus = StepStatus.NOT_RUN
    warnings: list[str] = field(default_factory=list)
    error: ScaffoldError | None = None
    aborted: bool = False

    @property
    def success(self) -> bool:
        return self.state == ScaffoldState.DONE

    @property
    def failed_stage(self) -> ScaffoldState | None:
        """The state a FAILED run was in when it failed."""
        if self.state != ScaffoldState.FAILED:
            return None
        return self.history[-2]

    def enter(self, state: ScaffoldState) -> None:
        """
        Move to ``state``.

        Raises
        ------
        RuntimeError
            If the run has already reached a terminal state.
        """
        if self.state.is_terminal:
            msg = f"Cannot leave terminal state '{self.state.value}'"
            raise RuntimeError(msg)
        self.state = state
        self.history.append(state)

    def fail(self, error: ScaffoldError) -> None:
        if error.stage is None:
            error.stage = self.state.label
        self.error = error
        self.aborted = isinstance(error, ScaffoldAborted)
        self.enter(ScaffoldState.FAILED)

    def summary(self) -> dict[str, Any]:
        """Structured summary of the run."""
        return {
            "project": str(self.project_path),
            "state": self.state.value,
            "directories_created": len(self.directories_created),
            "packages": len(self.markers_created),
            "files_rendered": len(self.files_rendered),
            "files_copied": len(self.files_copied),
            "vcs": self.vcs.value,
            "dependency_sync": self.dependency_sync.value,
            "warnings": list(self.warnings),
            "error": str(self.error) if self.error else None,
        }


# =============================================================================
# Scaffolder
# =============================================================================

class Scaffolder:
    """
    Orchestrates the creation of one project.

    Parameters
    ----------
    settings : ScaffoldSettings | None
        Tool configuration. Defaults are used when omitted.
    store : TemplateStore | None
        Template source. Defaults to a store on ``settings.configs_dir``
        that falls back to the bundled templates for missing files.
    tools : ExternalTools | None
        git / dependency-sync capability. Defaults to ``SubprocessTools``.
    reporter : Reporter | None
        Progress reporting. Defaults to a quiet reporter.
    confirm : Callable[[str], bool] | None
        Asked whether to continue when the target directory exists. When
        omitted an existing directory is never reused.
    output_dir : Path | None
        Directory the project is created in. Defaults to the current
        working directory.
    verify : bool
        Run post-creation checks before finishing.
    """

    def __init__(
        self,
        settings: ScaffoldSettings | None = None,
        *,
        store: TemplateStore | None = None,
        tools: ExternalTools | None = None,
        reporter: Reporter | None = None,
        confirm: Callable[[str], bool] | None = None,
        output_dir: Path | None = None,
        verify: bool = True,
    ) -> None:
        self.settings = settings or ScaffoldSettings()
        self.store = store or TemplateStore(
            self.settings.configs_dir, fallback=BUNDLED_TEMPLATES_DIR,
        )
        self.tools = tools or SubprocessTools(self.settings.sync_command)
        self.reporter = reporter or Reporter(quiet=True)
        self.confirm = confirm
        self.output_dir = output_dir or Path.cwd()
        self.verify = verify

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def describe(
        self,
        name: str,
        description: str | None = None,
        package_dirs: str | Sequence[str] | None = None,
        *,
        vscode: bool = True,
    ) -> ProjectDescriptor:
        """
        Validate raw input into a ``ProjectDescriptor``.

        Empty package entries are dropped with a warning.

        Raises
        ------
        ValidationError
            If any field is invalid.
        """
        packages: str | Sequence[str] | None = package_dirs
        if isinstance(package_dirs, str) and package_dirs.strip():
            entries, dropped = split_package_dirs(package_dirs)
            if dropped:
                noun = "entry" if dropped == 1 else "entries"
                self.reporter.warning(
                    f"Ignoring {dropped} empty package directory {noun} in '{package_dirs}'"
                )
            if not entries:
                raise ValidationError(f"No package directories in '{package_dirs}'")
            packages = entries

        try:
            return ProjectDescriptor(
                name=name,
                description=description,
                package_dirs=packages,
                project_specific_ignores=self.settings.project_specific_ignores,
                vscode=vscode,
                framework=self.settings.framework,
            )
        except PydanticValidationError as e:
            raise ValidationError(_first_error(e)) from e

    def plan(self, descriptor: ProjectDescriptor) -> list[Path]:
        """
        List the paths a run would create, relative to the project root.

        Nothing is read or written.
        """
        paths = [Path(d) for d, when in AUXILIARY_DIRS if when is None or when(descriptor)]
        for package in descriptor.package_dirs:
            paths.append(Path(package) / PACKAGE_MARKER)
        for spec in (*TEMPLATE_MANIFEST, *STATIC_ASSETS):
            if spec.applies_to(descriptor):
                paths.append(Path(spec.destination))
        return paths

    def run(
        self,
        name: str,
        description: str | None = None,
        package_dirs: str | Sequence[str] | None = None,
        *,
        vscode: bool = True,
    ) -> ScaffoldResult:
        """
        Create a project.

        Fatal errors do not propagate: they end the run in ``FAILED`` with
        ``result.error`` set and everything already written listed in
        ``result.artifacts``.

        Parameters
        ----------
        name : str
            Project name, also the project directory name.
        description : str | None
            Project description. Defaulted when None.
        package_dirs : str | Sequence[str] | None
            Comma-separated string or list of package directories.
            Defaults to the project name.
        vscode : bool
            Generate .vscode configuration.

        Returns
        -------
        ScaffoldResult
            The terminal result (DONE or FAILED).
        """
        result = ScaffoldResult(project_path=self.output_dir / name)

        try:
            descriptor = self._validate(result, name, description, package_dirs, vscode)
            bindings = build_bindings(descriptor)

            result.enter(ScaffoldState.CREATING_DIRS)
            self._create_directories(result, descriptor)

            result.enter(ScaffoldState.RENDERING_TEMPLATES)
            self._render_templates(result, descriptor, bindings)

            result.enter(ScaffoldState.WRITING_STATIC_FILES)
            self._write_static_files(result, descriptor)

            result.enter(ScaffoldState.INITIALIZING_VCS)
            self._initialize_vcs(result)

            result.enter(ScaffoldState.SYNCING_DEPENDENCIES)
            self._sync_dependencies(result)

        except ScaffoldAborted as e:
            result.fail(e)
            self.reporter.info("Aborted.")
            return result

        except ScaffoldError as e:
            result.fail(e)
            self.reporter.error(f"{e.stage}: {e}")
            return result

        if self.verify:
            for issue in verify_project(result):
                result.warnings.append(issue)
                self.reporter.warning(issue)

        result.enter(ScaffoldState.DONE)
        self.reporter.success(f"Project '{name}' setup complete!")
        return result

    # -------------------------------------------------------------------------
    # Pipeline Steps
    # -------------------------------------------------------------------------

    def _validate(
        self,
        result: ScaffoldResult,
        name: str,
        description: str | None,
        package_dirs: str | Sequence[str] | None,
        vscode: bool,
    ) -> ProjectDescriptor:
        descriptor = self.describe(name, description, package_dirs, vscode=vscode)
        result.descriptor = descriptor
        project_dir = result.project_path

        if project_dir.exists():
            if not project_dir.is_dir():
                raise ValidationError(f"'{project_dir}' exists and is not a directory")

            self.reporter.warning(f"Directory '{name}' already exists.")
            if self.confirm is None or not self.confirm(f"Directory '{name}' already exists. Continue?"):
                raise ScaffoldAborted("Aborted.")

        self.reporter.info(f"Setting up {self.settings.framework} project: {descriptor.name}")
        self.reporter.info(f"Description: {descriptor.description}")
        self.reporter.info(f"Package directories: {', '.join(descriptor.package_dirs)}")
        return descriptor

    def _mkdir(self, result: ScaffoldResult, path: Path) -> None:
        if path.is_dir():
            return
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise WriteError(path, e.strerror or e) from e
        result.directories_created.append(path)
        result.artifacts.append(path)

    def _create_directories(self, result: ScaffoldResult, descriptor: ProjectDescriptor) -> None:
        root = result.project_path
        self._mkdir(result, root)

        for relative, when in AUXILIARY_DIRS:
            if when is None or when(descriptor):
                self._mkdir(result, root / relative)

        for package in descriptor.package_dirs:
            package_dir = root / package
            self._mkdir(result, package_dir)

            marker = package_dir / PACKAGE_MARKER
            try:
                marker.touch(exist_ok=True)
            except OSError as e:
                raise WriteError(marker, e.strerror or e) from e
            result.markers_created.append(marker)
            result.artifacts.append(marker)

        self.reporter.success(f"Project structure created at {root}")

    def _render_templates(
        self,
        result: ScaffoldResult,
        descriptor: ProjectDescriptor,
        bindings: dict[str, str],
    ) -> None:
        for spec in TEMPLATE_MANIFEST:
            if not spec.applies_to(descriptor):
                continue

            template = self.store.load(spec.source)
            rendered = RenderedFile(
                path=result.project_path / spec.destination,
                content=render_template(template, bindings),
            )
            write_rendered(rendered.path, rendered.content)

            result.files_rendered.append(rendered.path)
            result.artifacts.append(rendered.path)

        self.reporter.success(f"Rendered {len(result.files_rendered)} templates")

    def _write_static_files(self, result: ScaffoldResult, descriptor: ProjectDescriptor) -> None:
        for spec in STATIC_ASSETS:
            if not spec.applies_to(descriptor):
                continue

            dest = copy_verbatim(self.store.resolve(spec.source), result.project_path / spec.destination)
            result.files_copied.append(dest)
            result.artifacts.append(dest)

        self.reporter.success(f"Copied {len(result.files_copied)} configuration files")

    def _record_tool_result(self, result: ScaffoldResult, outcome: ToolResult) -> StepStatus:
        if outcome.warning is not None:
            result.warnings.append(str(outcome.warning))
            self.reporter.warning(str(outcome.warning))
        return outcome.status

    def _initialize_vcs(self, result: ScaffoldResult) -> None:
        if not self.settings.init_git:
            result.vcs = StepStatus.NOT_RUN
            return

        if not self.tools.is_available("git"):
            result.vcs = StepStatus.SKIPPED
            message = "Git not found. Skipping repository initialization."
            result.warnings.append(message)
            self.reporter.warning(message)
            return

        self.reporter.info("Initializing Git repository...")
        outcome = self.tools.init_repo(result.project_path)
        if outcome.ok:
            outcome = self.tools.commit_all(result.project_path, self.settings.commit_message)

        result.vcs = self._record_tool_result(result, outcome)
        if outcome.ok:
            self.reporter.success("Git repository initialized with initial commit")

    def _sync_dependencies(self, result: ScaffoldResult) -> None:
        if not self.settings.sync_dependencies:
            result.dependency_sync = StepStatus.NOT_RUN
            return

        command = " ".join(self.settings.sync_command)
        tool = self.settings.sync_command[0]
        if not self.tools.is_available(tool):
            result.dependency_sync = StepStatus.SKIPPED
            message = f"{tool} not found. Please install {tool} and run '{command}' manually."
            result.warnings.append(message)
            self.reporter.warning(message)
            return

        self.reporter.info(f"Initializing Python environment with {tool}...")
        outcome = self.tools.sync_dependencies(result.project_path)
        result.dependency_sync = self._record_tool_result(result, outcome)
        if outcome.ok:
            self.reporter.success("Python environment initialized")


# =============================================================================
# Post-Creation Checks
# =============================================================================

def verify_project(result: ScaffoldResult) -> list[str]:
    """
    Check the rendered files of a finished run.

    Checks Performed
    ----------------
    1. Rendered files contain no raw ``{{NAME}}`` placeholders
    2. pyproject.toml is valid TOML
    3. Rendered Python files compile

    Returns
    -------
    list[str]
        Issues found; empty when everything passed.
    """
    issues: list[str] = []

    for path in result.files_rendered:
        relative = path.relative_to(result.project_path)
        content = path.read_text(encoding="utf-8")

        leftover = placeholders_of(content)
        if leftover:
            issues.append(f"Unrendered placeholders in {relative}: {', '.join(leftover)}")

        if path.name == "pyproject.toml":
            try:
                tomli.loads(content)
            except tomli.TOMLDecodeError as e:
                issues.append(f"Invalid pyproject.toml: {e}")

        if path.suffix == ".py":
            try:
                compile(content, str(path), "exec")
            except SyntaxError as e:
                issues.append(f"Syntax error in {relative}: {e}")

    return issues


def _first_error(error: PydanticValidationError) -> str:
    """The first validation message, without pydantic's 'Value error, ' prefix."""
    details = error.errors()
    if not details:
        return str(error)
    first = details[0]
    message = str(first.get("msg", error))
    prefix = "Value error, "
    if message.startswith(prefix):
        message = message[len(prefix):]
    loc = tuple(first.get("loc", ()))
    # The name validator already quotes the rejected name
    if not loc or (loc == ("name",) and first.get("type") == "value_error"):
        return message
    field_name = ".".join(str(part) for part in loc)
    return f"{field_name}: {message}"
