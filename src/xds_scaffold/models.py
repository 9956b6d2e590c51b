"""
xds_scaffold.models - Pydantic Models for Scaffold Input and Settings
=====================================================================

This module defines the data models shared across xds_scaffold. Pydantic
gives us validation of user input with clear error messages, and frozen
models so a descriptor cannot change once a run has started.

Architecture Notes
------------------
::

    ProjectDescriptor (validated CLI input, one per run)
    ├── name: str
    ├── description: str
    ├── package_dirs: tuple[str, ...]
    ├── project_specific_ignores: str
    └── vscode: bool

    ScaffoldSettings (tool configuration, loaded from TOML + environment)

    Enums: Severity, ScaffoldState, StepStatus

Usage Example
-------------
>>> from xds_scaffold.models import ProjectDescriptor
>>> descriptor = ProjectDescriptor(name="myapi", package_dirs="api, models")
>>> descriptor.package_dirs
('api', 'models')
>>> descriptor.description
'myapi - XDS Framework Project'
"""

from __future__ import annotations

import os
import re
from enum import Enum
from pathlib import Path, PurePosixPath
from typing import Any

import tomli
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from xds_scaffold.resolver import split_package_dirs


# =============================================================================
# Constants
# =============================================================================

PROJECT_NAME_PATTERN = re.compile(r"^[a-z][a-z0-9_-]*$")

DEFAULT_FRAMEWORK = "XDS Framework"
DEFAULT_IGNORES = "# Add project-specific ignores here"
DEFAULT_COMMIT_MESSAGE = "feat: initial project setup with XDS Framework standards"

# Environment variables consulted by ScaffoldSettings.load()
CONFIG_FILE_ENV = "XDS_SCAFFOLD_CONFIG"
CONFIGS_DIR_ENV = "XDS_CONFIGS_DIR"
DEFAULT_CONFIG_FILE = Path("~/.claude/configs/scaffold.toml")

_DELIMITERS = ("{{", "}}")


def _reject_delimiters(field: str, value: str) -> str:
    if any(marker in value for marker in _DELIMITERS):
        msg = f"{field} must not contain template delimiters '{{{{' or '}}}}'"
        raise ValueError(msg)
    return value


# =============================================================================
# Enumerations
# =============================================================================

class Severity(str, Enum):
    """Severity of a reporter message."""

    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class ScaffoldState(str, Enum):
    """
    States of a single scaffold run.

    A run moves through the states in declaration order, skipping none
    (optional steps record a SKIPPED status but are still entered), and
    ends in DONE or FAILED.
    """

    VALIDATING = "validating"
    CREATING_DIRS = "creating_dirs"
    RENDERING_TEMPLATES = "rendering_templates"
    WRITING_STATIC_FILES = "writing_static_files"
    INITIALIZING_VCS = "initializing_vcs"
    SYNCING_DEPENDENCIES = "syncing_dependencies"
    DONE = "done"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        """Whether no further transition is possible."""
        return self in {ScaffoldState.DONE, ScaffoldState.FAILED}

    @property
    def label(self) -> str:
        """Human-readable stage name used in error lines."""
        return self.value.replace("_", " ")


class StepStatus(str, Enum):
    """Outcome of a best-effort external step."""

    NOT_RUN = "not run"
    SKIPPED = "skipped"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


# =============================================================================
# Project Descriptor
# =============================================================================

class ProjectDescriptor(BaseModel):
    """
    Validated description of the project to scaffold.

    Created once at the start of a run from CLI input and never mutated.

    Attributes
    ----------
    name : str
        Project name. Must match ``^[a-z][a-z0-9_-]*$``. Unlike most name
        fields it is not normalised: ``MyApp`` is rejected, not lowercased.

    description : str
        Free-text description. Defaults to ``"<name> - <framework> Project"``.

    package_dirs : tuple[str, ...]
        Package directories, in input order. A comma-separated string is
        accepted and split; entries are trimmed and empty entries dropped.
        The first entry is the primary package. Defaults to ``(name,)``.

    project_specific_ignores : str
        Text substituted for ``{{PROJECT_SPECIFIC_IGNORES}}`` in .gitignore.

    vscode : bool
        Whether .vscode settings are generated.

    framework : str
        Framework name used for the default description.

    Examples
    --------
    >>> ProjectDescriptor(name="myapp").package_dirs
    ('myapp',)
    >>> ProjectDescriptor(name="myapi", package_dirs="api,models").primary_package
    'api'
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Project name", min_length=1, max_length=100)
    description: str = Field(description="Free-text project description")
    package_dirs: tuple[str, ...] = Field(
        description="Package directories, primary first",
        min_length=1,
    )
    project_specific_ignores: str = Field(
        default=DEFAULT_IGNORES,
        description="Extra .gitignore content",
    )
    vscode: bool = Field(default=True, description="Generate VS Code configuration")
    framework: str = Field(default=DEFAULT_FRAMEWORK, description="Framework name")

    @model_validator(mode="before")
    @classmethod
    def apply_defaults(cls, data: Any) -> Any:
        """Fill in the description and package list when they are omitted."""
        if not isinstance(data, dict):
            return data

        data = dict(data)
        name = data.get("name")
        framework = data.get("framework") or DEFAULT_FRAMEWORK

        if not data.get("description"):
            data["description"] = f"{name} - {framework} Project"

        if data.get("package_dirs") in (None, ""):
            data["package_dirs"] = (name,)

        return data

    @field_validator("name")
    @classmethod
    def validate_project_name(cls, v: str) -> str:
        """
        Validate the project name against the allowed pattern.

        Raises
        ------
        ValueError
            If the name does not start with a lowercase letter or contains
            characters other than lowercase letters, digits, ``_`` and ``-``.
        """
        if not PROJECT_NAME_PATTERN.match(v):
            msg = (
                f"Invalid project name '{v}'. Project name must start with a letter "
                "and contain only lowercase letters, numbers, underscores, and hyphens."
            )
            raise ValueError(msg)
        return v

    @field_validator("description", "project_specific_ignores")
    @classmethod
    def validate_text(cls, v: str) -> str:
        return _reject_delimiters("Text", v)

    @field_validator("package_dirs", mode="before")
    @classmethod
    def parse_package_dirs(cls, v: Any) -> Any:
        """Accept a comma-separated string or an iterable of names."""
        if isinstance(v, str):
            entries, _ = split_package_dirs(v)
            return tuple(entries)
        if isinstance(v, (list, tuple)):
            return tuple(str(item).strip() for item in v if str(item).strip())
        return v

    @field_validator("package_dirs")
    @classmethod
    def validate_package_dirs(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        """
        Reject package directories that would escape the project root.

        Nested directories such as ``core/models`` are allowed; ``.``,
        absolute paths, ``..`` segments and duplicates are not.
        """
        seen: set[str] = set()
        for entry in v:
            _reject_delimiters("Package directory", entry)
            path = PurePosixPath(entry.replace("\\", "/"))
            if not path.parts:
                msg = f"Package directory '{entry}' must name a directory inside the project"
                raise ValueError(msg)
            if path.is_absolute() or ".." in path.parts:
                msg = f"Package directory '{entry}' must be a relative path inside the project"
                raise ValueError(msg)
            if entry in seen:
                msg = f"Duplicate package directory '{entry}'"
                raise ValueError(msg)
            seen.add(entry)
        return v

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------

    @property
    def primary_package(self) -> str:
        """The first package directory, treated as the main package."""
        return self.package_dirs[0]


# =============================================================================
# Tool Settings
# =============================================================================

class ScaffoldSettings(BaseModel):
    """
    Configuration for the scaffold tool itself.

    Attributes
    ----------
    configs_dir : Path | None
        Configuration root holding the templates and static assets. When
        None the templates bundled with xds_scaffold are used.

    framework : str
        Framework name used in default descriptions.

    commit_message : str
        Message of the initial commit.

    project_specific_ignores : str
        Default text for the .gitignore placeholder.

    init_git : bool
        Run the version-control step.

    sync_dependencies : bool
        Run the dependency-sync step.

    sync_command : list[str]
        Command run in the project root by the dependency-sync step.
    """

    configs_dir: Path | None = Field(default=None, description="Template root")
    framework: str = Field(default=DEFAULT_FRAMEWORK, min_length=1)
    commit_message: str = Field(default=DEFAULT_COMMIT_MESSAGE, min_length=1)
    project_specific_ignores: str = Field(default=DEFAULT_IGNORES)
    init_git: bool = True
    sync_dependencies: bool = True
    sync_command: list[str] = Field(
        default_factory=lambda: ["uv", "sync", "--dev"],
        min_length=1,
    )

    @field_validator("configs_dir")
    @classmethod
    def expand_configs_dir(cls, v: Path | None) -> Path | None:
        return v.expanduser() if v is not None else None

    @classmethod
    def from_toml(cls, path: Path) -> ScaffoldSettings:
        """
        Load settings from a TOML file.

        The file may hold the settings at top level or under a
        ``[scaffold]`` table.

        Raises
        ------
        FileNotFoundError
            If the file does not exist.
        tomli.TOMLDecodeError
            If the file is not valid TOML.
        pydantic.ValidationError
            If a value is invalid.
        """
        with open(path, "rb") as f:
            data = tomli.load(f)

        return cls(**data.get("scaffold", data))

    @classmethod
    def load(cls, path: Path | None = None) -> ScaffoldSettings:
        """
        Load settings from the first available source.

        Lookup order: the explicit ``path``, ``$XDS_SCAFFOLD_CONFIG``, then
        ``~/.claude/configs/scaffold.toml`` if it exists, else defaults.
        ``$XDS_CONFIGS_DIR`` then overrides ``configs_dir``.
        """
        if path is None and os.environ.get(CONFIG_FILE_ENV):
            path = Path(os.environ[CONFIG_FILE_ENV])
        if path is None and DEFAULT_CONFIG_FILE.expanduser().is_file():
            path = DEFAULT_CONFIG_FILE.expanduser()

        settings = cls.from_toml(path.expanduser()) if path is not None else cls()

        configs_dir = os.environ.get(CONFIGS_DIR_ENV)
        if configs_dir:
            settings = settings.model_copy(update={"configs_dir": Path(configs_dir).expanduser()})

        return settings
