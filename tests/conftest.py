"""
pytest configuration and shared fixtures for xds_scaffold tests.

Fixtures defined here are automatically available to all tests.

Fixtures
--------
isolated_settings : None (autouse)
    Hides the user's scaffold settings file and environment overrides.

configs_root : Path
    A writable copy of the bundled templates, for tests that break them.

fake_tools : FakeTools
    External tools that record calls instead of running git or uv.

reporter : Reporter
    A quiet reporter that only records messages.
"""

from __future__ import annotations

import shutil
from pathlib import Path

import pytest

from xds_scaffold.models import ProjectDescriptor
from xds_scaffold.reporter import Reporter
from xds_scaffold.scaffolder import Scaffolder
from xds_scaffold.store import BUNDLED_TEMPLATES_DIR, TemplateStore
from xds_scaffold.tools import ToolResult


# =============================================================================
# Test Doubles
# =============================================================================

class FakeTools:
    """
    External tools that record calls.

    Parameters
    ----------
    available : set[str]
        Tools reported as installed.
    failing : set[str]
        Actions (``init_repo``, ``commit_all``, ``sync_dependencies``) that fail.
    """

    def __init__(
        self,
        available: set[str] | None = None,
        failing: set[str] | None = None,
    ) -> None:
        self.available = {"git", "uv"} if available is None else available
        self.failing = failing or set()
        self.calls: list[tuple[str, Path]] = []
        self.commit_messages: list[str] = []
        self.files_at_commit: list[str] = []

    def is_available(self, tool: str) -> bool:
        return tool in self.available

    def _outcome(self, action: str, tool: str) -> ToolResult:
        if action in self.failing:
            return ToolResult.failed(tool, f"{action} failed")
        return ToolResult.succeeded()

    def init_repo(self, path: Path) -> ToolResult:
        self.calls.append(("init_repo", path))
        return self._outcome("init_repo", "git")

    def commit_all(self, path: Path, message: str) -> ToolResult:
        self.calls.append(("commit_all", path))
        self.commit_messages.append(message)
        self.files_at_commit = sorted(
            p.relative_to(path).as_posix() for p in path.rglob("*") if p.is_file()
        )
        return self._outcome("commit_all", "git")

    def sync_dependencies(self, path: Path) -> ToolResult:
        self.calls.append(("sync_dependencies", path))
        return self._outcome("sync_dependencies", "uv")

    @property
    def actions(self) -> list[str]:
        return [action for action, _ in self.calls]


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Keep the developer's own scaffold settings out of every test."""
    monkeypatch.delenv("XDS_SCAFFOLD_CONFIG", raising=False)
    monkeypatch.delenv("XDS_CONFIGS_DIR", raising=False)
    monkeypatch.setattr(
        "xds_scaffold.models.DEFAULT_CONFIG_FILE",
        tmp_path / "no-such-config" / "scaffold.toml",
    )


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    """Directory projects are created in."""
    path = tmp_path / "projects"
    path.mkdir()
    return path


@pytest.fixture
def configs_root(tmp_path: Path) -> Path:
    """A writable copy of the bundled configuration root."""
    root = tmp_path / "configs"
    shutil.copytree(BUNDLED_TEMPLATES_DIR, root)
    return root


@pytest.fixture
def fake_tools() -> FakeTools:
    return FakeTools()


@pytest.fixture
def reporter() -> Reporter:
    return Reporter(quiet=True)


@pytest.fixture
def descriptor() -> ProjectDescriptor:
    """A multi-package project descriptor."""
    return ProjectDescriptor(
        name="myapi",
        description="REST API service",
        package_dirs="api,models,services",
    )


@pytest.fixture
def scaffolder(output_dir: Path, fake_tools: FakeTools, reporter: Reporter) -> Scaffolder:
    """A scaffolder on the bundled templates that never runs real tools."""
    return Scaffolder(
        tools=fake_tools,
        reporter=reporter,
        output_dir=output_dir,
        confirm=lambda question: False,
    )


@pytest.fixture
def make_scaffolder(output_dir: Path, fake_tools: FakeTools, reporter: Reporter):
    """Factory for scaffolders with custom collaborators."""

    def factory(**kwargs) -> Scaffolder:
        kwargs.setdefault("tools", fake_tools)
        kwargs.setdefault("reporter", reporter)
        kwargs.setdefault("output_dir", output_dir)
        if "configs_root" in kwargs:
            kwargs["store"] = TemplateStore(kwargs.pop("configs_root"))
        return Scaffolder(**kwargs)

    return factory


# =============================================================================
# pytest Configuration
# =============================================================================

def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers used in the test suite."""
    config.addinivalue_line(
        "markers", "integration: marks tests requiring external tools such as git"
    )

