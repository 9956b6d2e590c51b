"""
xds_scaffold.store - Template Store
===================================

Loads template text from a configuration root and finds the placeholders
it uses.

A placeholder is ``{{NAME}}``: the open marker, optional whitespace, an
upper-snake-case identifier, any number of ``| filter`` suffixes and the
close marker, so ``{{ PROJECT_DESCRIPTION | toml }}`` still names
``PROJECT_DESCRIPTION``.
Templates are Jinja2 source, so lower-case names inside ``{{ }}`` (for
example loop variables) are template-local expressions and are not part of
the binding vocabulary.

Configuration Root Layout
-------------------------
::

    git/.gitignore.template
    python/.editorconfig.template
    python/mypy.ini.template
    python/pyproject.toml.template
    python/ruff.toml.template
    vscode/extensions.json.template
    vscode/markdown-preview.css
    vscode/settings.json

The bundled root also holds ``project/*.j2`` (README, CLAUDE.md, cli.py and
the starter test). A user root lacking a file falls back to the bundled copy.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from xds_scaffold.errors import NotFoundError, ReadError


if TYPE_CHECKING:
    from collections.abc import Iterable


# Templates shipped inside the package
BUNDLED_TEMPLATES_DIR = Path(__file__).parent / "templates"

PLACEHOLDER_PATTERN = re.compile(
    r"\{\{\s*([A-Z][A-Z0-9_]*)\s*(?:\|\s*[A-Za-z_]\w*\s*)*\}\}"
)


# =============================================================================
# Data Classes
# =============================================================================

@dataclass(frozen=True)
class PlaceholderOccurrence:
    """One placeholder token found in template text."""

    name: str
    offset: int
    length: int


@dataclass(frozen=True)
class Template:
    """
    A loaded template.

    Attributes
    ----------
    path : str
        Identifier of the template: its path relative to the configuration root.
    text : str
        Raw template text.
    occurrences : tuple[PlaceholderOccurrence, ...]
        Every placeholder token, in text order.
    """

    path: str
    text: str
    occurrences: tuple[PlaceholderOccurrence, ...]

    @property
    def placeholders(self) -> list[str]:
        """Distinct placeholder names in order of first appearance."""
        return _distinct(occ.name for occ in self.occurrences)


# =============================================================================
# Scanning
# =============================================================================

def _distinct(names: Iterable[str]) -> list[str]:
    seen: dict[str, None] = {}
    for name in names:
        seen.setdefault(name, None)
    return list(seen)


def scan_placeholders(text: str) -> tuple[PlaceholderOccurrence, ...]:
    """Find every placeholder token in ``text`` with its offset and length."""
    return tuple(
        PlaceholderOccurrence(
            name=match.group(1),
            offset=match.start(),
            length=match.end() - match.start(),
        )
        for match in PLACEHOLDER_PATTERN.finditer(text)
    )


def placeholders_of(text: str) -> list[str]:
    """
    Return the distinct placeholder names used in ``text``.

    Names are deduplicated and kept in order of first appearance so that
    diagnostics can point at the leftmost problem.

    Examples
    --------
    >>> placeholders_of("# {{PROJECT_NAME}}\\n{{ PACKAGE_DIRS }} {{PROJECT_NAME}}")
    ['PROJECT_NAME', 'PACKAGE_DIRS']
    """
    return _distinct(match.group(1) for match in PLACEHOLDER_PATTERN.finditer(text))


# =============================================================================
# Store
# =============================================================================

class TemplateStore:
    """
    Read-only access to the templates under a configuration root.

    Parameters
    ----------
    root : Path | None
        Configuration root. Defaults to the templates bundled with
        xds_scaffold.
    fallback : Path | None
        Root searched for files missing under ``root``.

    Examples
    --------
    >>> store = TemplateStore()
    >>> template = store.load("project/README.md.j2")
    >>> template.placeholders
    ['PROJECT_NAME', 'PROJECT_DESCRIPTION']
    """

    def __init__(self, root: Path | None = None, fallback: Path | None = None) -> None:
        self.root = (root or BUNDLED_TEMPLATES_DIR).expanduser()
        self.fallback = fallback.expanduser() if fallback is not None else None

    def __repr__(self) -> str:
        return f"TemplateStore(root={str(self.root)!r}, fallback={self.fallback!r})"

    def resolve(self, path: str | Path) -> Path:
        """
        Resolve a root-relative path to an existing file.

        A file missing under ``root`` is looked up under ``fallback``.

        Raises
        ------
        NotFoundError
            If the file does not exist, is not a regular file, or the path
            points outside the configuration root.
        """
        root = self.root.resolve()
        full_path = (root / path).resolve()

        if not full_path.is_relative_to(root):
            raise NotFoundError(path, "outside the configuration root")
        if not full_path.exists():
            if self.fallback is not None and (self.fallback / path).is_file():
                return TemplateStore(self.fallback).resolve(path)
            raise NotFoundError(self.root / path)
        if not full_path.is_file():
            raise NotFoundError(self.root / path, "not a file")

        return full_path

    def load(self, path: str | Path) -> Template:
        """
        Load a template and scan it for placeholders.

        Parameters
        ----------
        path : str | Path
            Template path relative to the configuration root.

        Raises
        ------
        NotFoundError
            If the template does not exist.
        ReadError
            If the file cannot be read or is not valid UTF-8.
        """
        full_path = self.resolve(path)

        try:
            text = full_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ReadError(full_path, e) from e

        return Template(
            path=Path(path).as_posix(),
            text=text,
            occurrences=scan_placeholders(text),
        )
