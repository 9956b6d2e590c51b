"""
xds_scaffold.renderer - Template Rendering and File Output
=========================================================

Replaces every placeholder in a template with its bound value and writes
the result, or copies static assets byte for byte.

Rendering is done by Jinja2 with ``StrictUndefined``: substitution is a
textual replace (values of any length are fine) and a name without a
binding raises instead of rendering as an empty string. Before Jinja2 runs,
the placeholders found by the store are checked against the bindings so the
error names the leftmost unresolved placeholder.

Usage Example
-------------
>>> from xds_scaffold.renderer import render
>>> render("# {{PROJECT_NAME}}\\n", {"PROJECT_NAME": "myapp"})
'# myapp\\n'
>>> render("{{UNKNOWN_VAR}}", {})
Traceback (most recent call last):
...
xds_scaffold.errors.UnboundPlaceholderError: Unbound placeholder 'UNKNOWN_VAR'
"""

from __future__ import annotations

import re
import shutil
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import TYPE_CHECKING

from jinja2 import Environment, StrictUndefined, TemplateSyntaxError, UndefinedError

from xds_scaffold.errors import NotFoundError, RenderError, UnboundPlaceholderError, WriteError
from xds_scaffold.resolver import validate
from xds_scaffold.store import placeholders_of


if TYPE_CHECKING:
    from collections.abc import Mapping

    from xds_scaffold.store import Template


# Jinja2 reports undefined names as "'NAME' is undefined"
_UNDEFINED_NAME = re.compile(r"'([^']+)' is undefined")

_TOML_ESCAPES = {
    "\b": "\\b",
    "\t": "\\t",
    "\n": "\\n",
    "\f": "\\f",
    "\r": "\\r",
    '"': '\\"',
    "\\": "\\\\",
}
_TOML_NEEDS_ESCAPE = re.compile(r'[\x00-\x1f\x7f"\\]')


def toml_string(value: str) -> str:
    """
    Quote ``value`` as a TOML basic string.

    Examples
    --------
    >>> print(toml_string('My "fast" C:\\\\tool'))
    "My \\"fast\\" C:\\\\tool"
    """
    escaped = _TOML_NEEDS_ESCAPE.sub(
        lambda m: _TOML_ESCAPES.get(m.group(), f"\\u{ord(m.group()):04x}"),
        value,
    )
    return f'"{escaped}"'


@dataclass(frozen=True)
class RenderedFile:
    """Final content for one destination path."""

    path: Path
    content: str


# =============================================================================
# Template Engine Setup
# =============================================================================

@lru_cache(maxsize=1)
def create_jinja_env() -> Environment:
    """
    Create the Jinja2 environment used for all rendering.

    - Autoescaping disabled (we generate code and config, not HTML)
    - ``StrictUndefined`` so unbound names raise
    - Trim/lstrip blocks for clean output around ``{% %}`` tags
    - Trailing newlines preserved
    - ``toml`` filter for values placed inside TOML strings
    """
    env = Environment(
        autoescape=False,
        undefined=StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )

    env.filters["toml"] = toml_string

    return env


# =============================================================================
# Rendering
# =============================================================================

def render(
    template_text: str,
    bindings: Mapping[str, str],
    *,
    template: str | None = None,
) -> str:
    """
    Substitute every placeholder in ``template_text``.

    Parameters
    ----------
    template_text : str
        Template source.
    bindings : Mapping[str, str]
        Placeholder name to value.
    template : str | None
        Template identifier, used in error messages.

    Returns
    -------
    str
        The rendered text.

    Raises
    ------
    UnboundPlaceholderError
        If a placeholder has no binding. Names the leftmost one.
    RenderError
        If the template is not valid Jinja2 source.
    """
    missing = validate(bindings, placeholders_of(template_text))
    if missing:
        raise UnboundPlaceholderError(missing[0], template)

    env = create_jinja_env()
    try:
        return env.from_string(template_text).render(**bindings)
    except UndefinedError as e:
        match = _UNDEFINED_NAME.search(str(e))
        raise UnboundPlaceholderError(match.group(1) if match else str(e), template) from e
    except TemplateSyntaxError as e:
        where = f"'{template}'" if template else "template"
        raise RenderError(f"Invalid syntax in {where} at line {e.lineno}: {e.message}") from e


def render_template(template: Template, bindings: Mapping[str, str]) -> str:
    """Render a loaded ``Template``."""
    return render(template.text, bindings, template=template.path)


# =============================================================================
# File Output
# =============================================================================

def write_rendered(dest: Path, content: str) -> Path:
    """
    Write rendered text to ``dest``.

    The parent directory must already exist.

    Raises
    ------
    WriteError
        Naming ``dest`` if the write fails.
    """
    try:
        dest.write_text(content, encoding="utf-8")
    except OSError as e:
        raise WriteError(dest, e.strerror or e) from e
    return dest


def copy_verbatim(source: Path, dest: Path) -> Path:
    """
    Copy a non-templated asset without scanning it.

    Copying the same source twice yields byte-identical output.

    Raises
    ------
    NotFoundError
        If ``source`` does not exist.
    WriteError
        Naming ``dest`` if the copy fails (missing directory, permissions).
    """
    if not source.is_file():
        raise NotFoundError(source)

    try:
        shutil.copyfile(source, dest)
    except OSError as e:
        raise WriteError(dest, e.strerror or e) from e
    return dest
