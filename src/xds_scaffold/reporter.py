"""
xds_scaffold.reporter - Console Reporting
=========================================

The scaffolder reports progress through a ``Reporter`` it is given, never
through module-level colour state. Each call carries an explicit severity;
how a severity looks on screen is decided here.

    ℹ info     (blue)
    ✓ success  (green)
    ⚠ warning  (yellow)
    ✗ error    (red)
"""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape

from xds_scaffold.models import Severity


SEVERITY_STYLES: dict[Severity, tuple[str, str]] = {
    Severity.INFO: ("ℹ", "blue"),
    Severity.SUCCESS: ("✓", "green"),
    Severity.WARNING: ("⚠", "yellow"),
    Severity.ERROR: ("✗", "red"),
}


class Reporter:
    """
    Severity-tagged messages rendered with Rich.

    Every message is also kept in ``records`` so callers (and tests) can
    inspect what was reported.

    Parameters
    ----------
    console : Console | None
        Console to print to. A new stdout console is created when omitted.
    quiet : bool
        Record messages without printing them.

    Examples
    --------
    >>> reporter = Reporter(quiet=True)
    >>> reporter.warning("uv not found")
    >>> reporter.records
    [(<Severity.WARNING: 'warning'>, 'uv not found')]
    """

    def __init__(self, console: Console | None = None, *, quiet: bool = False) -> None:
        self.console = console or Console()
        self.quiet = quiet
        self.records: list[tuple[Severity, str]] = []

    def log(self, severity: Severity, message: str) -> None:
        """Report ``message`` at ``severity``."""
        self.records.append((severity, message))
        if self.quiet:
            return

        icon, style = SEVERITY_STYLES[severity]
        self.console.print(f"[{style}]{icon}[/] {escape(message)}")

    def info(self, message: str) -> None:
        self.log(Severity.INFO, message)

    def success(self, message: str) -> None:
        self.log(Severity.SUCCESS, message)

    def warning(self, message: str) -> None:
        self.log(Severity.WARNING, message)

    def error(self, message: str) -> None:
        self.log(Severity.ERROR, message)

    def messages(self, severity: Severity) -> list[str]:
        """All recorded messages of one severity, in order."""
        return [message for sev, message in self.records if sev == severity]
