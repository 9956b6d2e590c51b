"""
xds_scaffold.resolver - Placeholder Bindings
============================================

Turns a ``ProjectDescriptor`` into the binding set consumed by templates
and checks that a template's placeholders can all be satisfied.

The binding vocabulary is fixed:

    PROJECT_NAME              project name
    PROJECT_DESCRIPTION       project description
    PACKAGE_DIRS              package directories joined with ","
    PROJECT_SPECIFIC_IGNORES  extra .gitignore content
"""

from __future__ import annotations

from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from xds_scaffold.models import ProjectDescriptor


BINDING_KEYS: tuple[str, ...] = (
    "PROJECT_NAME",
    "PROJECT_DESCRIPTION",
    "PACKAGE_DIRS",
    "PROJECT_SPECIFIC_IGNORES",
)


def split_package_dirs(raw: str) -> tuple[list[str], int]:
    """
    Split a comma-separated package list.

    Each entry is trimmed of surrounding whitespace. Entries that are empty
    after trimming are dropped rather than rejected.

    Parameters
    ----------
    raw : str
        Input such as ``"api, models,services"``.

    Returns
    -------
    tuple[list[str], int]
        The kept entries in input order and the number of dropped entries.

    Examples
    --------
    >>> split_package_dirs("a, ,b")
    (['a', 'b'], 1)
    """
    entries: list[str] = []
    dropped = 0
    for part in raw.split(","):
        entry = part.strip()
        if entry:
            entries.append(entry)
        else:
            dropped += 1
    return entries, dropped


def build_bindings(descriptor: ProjectDescriptor) -> dict[str, str]:
    """
    Build the binding set for one scaffold run.

    Deterministic and free of side effects. The result always holds exactly
    the keys in ``BINDING_KEYS``.
    """
    packages = [entry.strip() for entry in descriptor.package_dirs if entry.strip()]
    return {
        "PROJECT_NAME": descriptor.name,
        "PROJECT_DESCRIPTION": descriptor.description,
        "PACKAGE_DIRS": ",".join(packages),
        "PROJECT_SPECIFIC_IGNORES": descriptor.project_specific_ignores,
    }


def validate(bindings: Mapping[str, str], required: Iterable[str]) -> list[str]:
    """
    Return the required placeholder names that have no binding.

    The order of ``required`` is preserved, so the first element of the
    result is the leftmost unresolved placeholder when ``required`` comes
    from ``placeholders_of``. Missing names never fall back to an empty
    string; callers must treat a non-empty result as a failure.
    """
    missing: list[str] = []
    for name in required:
        if name not in bindings and name not in missing:
            missing.append(name)
    return missing
