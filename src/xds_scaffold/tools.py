"""
xds_scaffold.tools - External Tool Capabilities
===============================================

The optional post-steps of a scaffold (git repository, dependency sync)
go through the ``ExternalTools`` interface. Each action returns a
``ToolResult`` instead of raising: these steps are best effort and a
failure only becomes a warning in the run summary.

Implementations
---------------
SubprocessTools
    Runs the real ``git`` and dependency-sync commands.

NullTools
    Reports every tool as unavailable. Used when the steps are disabled
    and in tests.
"""

from __future__ import annotations

import os
import shutil
import subprocess
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from xds_scaffold.errors import ExternalToolWarning
from xds_scaffold.models import StepStatus


# =============================================================================
# Results
# =============================================================================

@dataclass(frozen=True)
class ToolResult:
    """
    Outcome of one external action.

    Attributes
    ----------
    status : StepStatus
        SUCCEEDED, SKIPPED or FAILED.
    warning : ExternalToolWarning | None
        Set when the action failed or was skipped.
    """

    status: StepStatus
    warning: ExternalToolWarning | None = None

    @property
    def ok(self) -> bool:
        return self.status == StepStatus.SUCCEEDED

    @classmethod
    def succeeded(cls) -> ToolResult:
        return cls(StepStatus.SUCCEEDED)

    @classmethod
    def skipped(cls, tool: str, message: str) -> ToolResult:
        return cls(StepStatus.SKIPPED, ExternalToolWarning(tool, message))

    @classmethod
    def failed(cls, tool: str, message: str) -> ToolResult:
        return cls(StepStatus.FAILED, ExternalToolWarning(tool, message))


# =============================================================================
# Working Directory
# =============================================================================

@contextmanager
def working_directory(path: Path) -> Iterator[Path]:
    """
    Temporarily change the process working directory.

    The previous working directory is restored on every exit path,
    including exceptions raised inside the block.
    """
    previous = Path.cwd()
    os.chdir(path)
    try:
        yield path
    finally:
        os.chdir(previous)


# =============================================================================
# Interface
# =============================================================================

class ExternalTools(Protocol):
    """Capability interface for the scaffold's external commands."""

    def is_available(self, tool: str) -> bool: ...

    def init_repo(self, path: Path) -> ToolResult: ...

    def commit_all(self, path: Path, message: str) -> ToolResult: ...

    def sync_dependencies(self, path: Path) -> ToolResult: ...


class NullTools:
    """External tools that are never available."""

    def is_available(self, tool: str) -> bool:
        return False

    def init_repo(self, path: Path) -> ToolResult:
        return ToolResult.skipped("git", "git not found")

    def commit_all(self, path: Path, message: str) -> ToolResult:
        return ToolResult.skipped("git", "git not found")

    def sync_dependencies(self, path: Path) -> ToolResult:
        return ToolResult.skipped("uv", "uv not found")


class SubprocessTools:
    """
    External tools backed by ``subprocess``.

    Commands block until the tool exits; there is no timeout.

    Parameters
    ----------
    sync_command : list[str] | None
        Dependency-sync command. Defaults to ``uv sync --dev``.
    """

    def __init__(self, sync_command: list[str] | None = None) -> None:
        self.sync_command = list(sync_command or ["uv", "sync", "--dev"])

    @property
    def sync_tool(self) -> str:
        return self.sync_command[0]

    def is_available(self, tool: str) -> bool:
        return shutil.which(tool) is not None

    def _run(self, tool: str, args: list[str], cwd: Path | None = None) -> ToolResult:
        try:
            subprocess.run(
                args,
                cwd=cwd,
                capture_output=True,
                text=True,
                check=True,
            )
        except FileNotFoundError:
            return ToolResult.skipped(tool, f"{tool} not found")
        except subprocess.CalledProcessError as e:
            detail = (e.stderr or e.stdout or "").strip().splitlines()
            reason = detail[-1] if detail else f"exit status {e.returncode}"
            return ToolResult.failed(tool, f"'{' '.join(args)}' failed: {reason}")

        return ToolResult.succeeded()

    def init_repo(self, path: Path) -> ToolResult:
        return self._run("git", ["git", "init"], cwd=path)

    def commit_all(self, path: Path, message: str) -> ToolResult:
        staged = self._run("git", ["git", "add", "."], cwd=path)
        if not staged.ok:
            return staged
        return self._run("git", ["git", "commit", "-m", message], cwd=path)

    def sync_dependencies(self, path: Path) -> ToolResult:
        with working_directory(path):
            return self._run(self.sync_tool, self.sync_command)
