"""
Severity-tagged diagnostics printed to stderr.
"""
from typing import Iterable, List, Optional

from rich.console import Console
from rich.text import Text

from tfviz.models.diagnostic import Diagnostic, Severity

_TAG_STYLES = {
    Severity.ERROR: "bold red",
    Severity.WARNING: "yellow",
    Severity.VERBOSE: "dim",
}


class Diagnostics:
    """Collects diagnostics for one run and echoes the visible ones."""

    def __init__(
        self,
        verbose: bool = False,
        ignore_warnings: bool = False,
        console: Optional[Console] = None,
    ):
        self.verbose_enabled = verbose
        self.ignore_warnings = ignore_warnings
        self.console = console or Console(stderr=True)
        self.records: List[Diagnostic] = []

    def _emit(self, diag: Diagnostic) -> None:
        self.records.append(diag)
        if diag.severity == Severity.VERBOSE and not self.verbose_enabled:
            return
        if diag.severity == Severity.WARNING and self.ignore_warnings:
            return
        line = Text(str(diag))
        line.stylize(_TAG_STYLES[diag.severity], 0, len(diag.severity.value) + 2)
        self.console.print(line, highlight=False)

    def error(self, message: str, subject: str = "") -> None:
        self._emit(Diagnostic(Severity.ERROR, message, subject))

    def warning(self, message: str, subject: str = "") -> None:
        self._emit(Diagnostic(Severity.WARNING, message, subject))

    def verbose(self, message: str, subject: str = "") -> None:
        self._emit(Diagnostic(Severity.VERBOSE, message, subject))

    def warning_list(self, title: str, items: Iterable[str]) -> None:
        items = list(items)
        if not items:
            return
        self.warning(title + "\n" + "\n".join(f" - {i}" for i in items))

    def of(self, severity: Severity) -> List[Diagnostic]:
        return [d for d in self.records if d.severity == severity]

    @property
    def errors(self) -> List[Diagnostic]:
        return self.of(Severity.ERROR)

    @property
    def warnings(self) -> List[Diagnostic]:
        return self.of(Severity.WARNING)
