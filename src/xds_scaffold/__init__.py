"""
xds_scaffold - XDS Framework Project Scaffolder
===============================================

A CLI tool that creates new XDS Framework Python projects from
``{{NAME}}`` templates: it validates the project name, renders the
configuration templates, copies static editor and tooling configuration,
creates the package directories and optionally initializes git and runs
``uv sync --dev``.

Quick Start
-----------
```bash
# Minimal project: ./myapp with package myapp/
scaffold myapp

# Description and several packages
scaffold myapi "REST API service" "api,models,services"
```

Example
-------
>>> from xds_scaffold import Scaffolder
>>> from xds_scaffold.tools import NullTools
>>> result = Scaffolder(tools=NullTools()).run("myapp")
>>> result.success
True

Architecture
------------
- ``store``: Template loading and placeholder scanning
- ``resolver``: Binding set construction and validation
- ``renderer``: Jinja2 substitution and file output
- ``scaffolder``: The scaffold state machine
- ``tools``: git and dependency-sync capabilities
- ``reporter``: Rich console reporting
- ``models``: Pydantic models for input and settings
- ``cli``: Typer command line interface

License
-------
MIT License - see LICENSE file for details.
"""

# =============================================================================
# Package Metadata
# =============================================================================
__version__ = "0.1.0"
__license__ = "MIT"

# =============================================================================
# Public API Exports
# =============================================================================

from xds_scaffold.errors import (
    ExternalToolWarning,
    NotFoundError,
    ReadError,
    RenderError,
    ScaffoldAborted,
    ScaffoldError,
    UnboundPlaceholderError,
    ValidationError,
    WriteError,
)
from xds_scaffold.models import ProjectDescriptor, ScaffoldSettings, ScaffoldState, StepStatus
from xds_scaffold.renderer import copy_verbatim, render
from xds_scaffold.resolver import build_bindings, validate
from xds_scaffold.scaffolder import Scaffolder, ScaffoldResult
from xds_scaffold.store import TemplateStore, placeholders_of


__all__ = [
    "ExternalToolWarning",
    "NotFoundError",
    # Configuration models
    "ProjectDescriptor",
    "ReadError",
    "RenderError",
    "ScaffoldAborted",
    "ScaffoldError",
    "ScaffoldResult",
    "ScaffoldSettings",
    "ScaffoldState",
    # Core API
    "Scaffolder",
    "StepStatus",
    "TemplateStore",
    "UnboundPlaceholderError",
    "ValidationError",
    "WriteError",
    # Version info
    "__version__",
    "build_bindings",
    "copy_verbatim",
    "placeholders_of",
    "render",
    "validate",
]
