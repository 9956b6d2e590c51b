"""
xds_scaffold.errors - Scaffold Error Taxonomy
=============================================

Every failure the scaffold pipeline can report is one of these types.
Fatal errors derive from ``ScaffoldError`` and abort the run; the
``ExternalToolWarning`` is a value attached to results of the optional
git and dependency-sync steps and is never raised by the pipeline.

Hierarchy
---------
::

    ScaffoldError
    ├── ValidationError
    │   └── ScaffoldAborted
    ├── NotFoundError
    ├── ReadError
    ├── RenderError
    │   └── UnboundPlaceholderError
    └── WriteError

    UserWarning
    └── ExternalToolWarning
"""

from __future__ import annotations

from pathlib import Path


class ScaffoldError(Exception):
    """
    Base class for fatal scaffold errors.

    Attributes
    ----------
    stage : str | None
        Name of the pipeline state the error was raised in. The scaffolder
        fills this in when the error passes through it.
    """

    def __init__(self, message: str, *, stage: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.stage = stage


class ValidationError(ScaffoldError):
    """Invalid project input. Raised before anything is written."""


class ScaffoldAborted(ValidationError):
    """The user declined to scaffold into an existing directory."""


class NotFoundError(ScaffoldError):
    """A template or static asset does not exist under the configuration root."""

    def __init__(self, path: Path | str, reason: str = "not found") -> None:
        super().__init__(f"{path}: {reason}")
        self.path = Path(path)


class ReadError(ScaffoldError):
    """A template or static asset exists but could not be read."""

    def __init__(self, path: Path | str, cause: Exception | str) -> None:
        super().__init__(f"Cannot read {path}: {cause}")
        self.path = Path(path)


class RenderError(ScaffoldError):
    """A template could not be rendered."""


class UnboundPlaceholderError(RenderError):
    """
    A template references a placeholder that has no binding.

    Attributes
    ----------
    placeholder : str
        The first (leftmost) unresolved placeholder name.
    template : str | None
        The template identifier, when known.
    """

    def __init__(self, placeholder: str, template: str | None = None) -> None:
        where = f" in template '{template}'" if template else ""
        super().__init__(f"Unbound placeholder '{placeholder}'{where}")
        self.placeholder = placeholder
        self.template = template


class WriteError(ScaffoldError):
    """A destination file could not be written."""

    def __init__(self, path: Path | str, cause: Exception | str) -> None:
        super().__init__(f"Cannot write {path}: {cause}")
        self.path = Path(path)


class ExternalToolWarning(UserWarning):
    """
    A best-effort external step (git, dependency sync) failed or was skipped.

    Parameters
    ----------
    tool : str
        The external tool involved (e.g. ``"git"``, ``"uv"``).
    message : str
        Human-readable description of what went wrong.
    """

    def __init__(self, tool: str, message: str) -> None:
        super().__init__(f"{tool}: {message}")
        self.tool = tool
        self.message = message
