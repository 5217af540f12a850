"""Terminal output for the bbcreds CLI.

Data and diagnostics never share a stream:

* **stdout** carries records only (credential listings, lookup results,
  endpoint tables), so ``bbcreds --json credentials lookup ...`` can be
  piped straight into ``jq``.
* **stderr** carries everything addressed to a human: confirmations,
  warnings, errors, hints and ``--verbose`` debug lines.

Rich rendering is used when stdout is a terminal; piped output falls back
to tab-separated text.  ``NO_COLOR``, ``TERM=dumb`` and ``--no-color`` all
turn colour off.

Records pass through :func:`redact` before they are rendered, so a field
named like a secret (``token``, ``password``) is masked even if a command
forgets to drop it.

:class:`OutputManager` is installed once per invocation by
:func:`~bbcreds.app.main_callback`; commands use the module-level helpers.
"""

from __future__ import annotations

import json
import os
import sys
from enum import Enum
from typing import Any, Optional

from rich.console import Console
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table


SECRET_FIELDS = frozenset({"token", "password", "secret"})
"""Record keys whose values are always masked on output."""

REDACTED = "********"


class OutputFormat(str, Enum):
    """How records are written to stdout.

    ``AUTO`` picks ``RICH`` for an interactive, colour-capable terminal and
    ``PLAIN`` otherwise.
    """

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


def redact(data: Any) -> Any:
    """Return a copy of *data* with every secret-named field masked."""
    if isinstance(data, dict):
        return {
            key: REDACTED if str(key).lower() in SECRET_FIELDS else redact(value)
            for key, value in data.items()
        }
    if isinstance(data, list):
        return [redact(item) for item in data]
    return data


class OutputManager:
    """Routes records to stdout and diagnostics to stderr.

    Args:
        format: Record format; ``AUTO`` is resolved at construction.
        no_color: Disable colour and markup.
        quiet: Drop informational diagnostics (errors and warnings still
            print).
        verbose: Show debug diagnostics.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
    ) -> None:
        self._no_color = no_color or _should_disable_color()
        self._quiet = quiet
        self._verbose = verbose

        if format is OutputFormat.AUTO:
            interactive = _is_tty() and not self._no_color
            format = OutputFormat.RICH if interactive else OutputFormat.PLAIN
        self._format = format

        self._stdout = Console(
            file=sys.stdout,
            no_color=self._no_color,
            force_terminal=self._format is OutputFormat.RICH,
        )
        self._stderr = Console(file=sys.stderr, no_color=self._no_color, stderr=True)

    @property
    def format(self) -> OutputFormat:
        return self._format

    @property
    def is_quiet(self) -> bool:
        return self._quiet

    @property
    def is_verbose(self) -> bool:
        return self._verbose

    # --- records (stdout) ---

    def format_response(self, data: Any) -> None:
        """Write one record (a dict) or a list of records to stdout."""
        data = redact(data)
        if self._format is OutputFormat.PLAIN:
            for line in _plain_lines(data):
                self.print_data(line)
            return
        text = json.dumps(data, indent=2, ensure_ascii=False, default=str)
        if self._format is OutputFormat.JSON:
            self.print_data(text)
        else:
            self._stdout.print(Syntax(text, "json", theme="monokai", word_wrap=True))

    def print_data(self, text: str) -> None:
        """Write *text* to stdout unchanged."""
        print(text, file=sys.stdout, flush=True)

    def print_table(
        self,
        headers: list[str],
        rows: list[list[str]],
        title: Optional[str] = None,
    ) -> None:
        """Write rows as a Rich table, JSON records keyed by header, or TSV."""
        if self._format is OutputFormat.JSON:
            records = [dict(zip(headers, row)) for row in rows]
            self.print_data(json.dumps(records, indent=2, ensure_ascii=False))
        elif self._format is OutputFormat.PLAIN:
            for row in [headers, *rows]:
                self.print_data("\t".join(row))
        else:
            table = Table(title=title, header_style="bold cyan")
            for header in headers:
                table.add_column(header)
            for row in rows:
                table.add_row(*(escape(cell) for cell in row))
            self._stdout.print(table)

    # --- diagnostics (stderr) ---

    def _diagnostic(self, message: str, prefix: str = "", style: Optional[str] = None) -> None:
        if self._no_color:
            print(f"{prefix}{message}", file=sys.stderr, flush=True)
        elif style is None:
            self._stderr.print(f"{escape(prefix)}{escape(message)}")
        else:
            self._stderr.print(f"[{style}]{escape(prefix)}[/{style}]{escape(message)}")

    def info(self, message: str) -> None:
        if not self._quiet:
            self._diagnostic(message)

    def success(self, message: str) -> None:
        if not self._quiet:
            self._diagnostic(message, style="green")

    def warning(self, message: str) -> None:
        """Always shown, even with ``--quiet``."""
        self._diagnostic(message, prefix="Warning: ", style="yellow")

    def error(self, message: str) -> None:
        """Always shown, even with ``--quiet``."""
        self._diagnostic(message, prefix="Error: ", style="bold red")

    def suggest(self, message: str) -> None:
        """Next-step hint, e.g. the command that grants access."""
        if not self._quiet:
            self._diagnostic(message, prefix="→ ", style="dim")

    def debug(self, message: str) -> None:
        if self._verbose:
            self._diagnostic(message, prefix="[debug] ", style="dim")


def _plain_lines(data: Any) -> list[str]:
    if isinstance(data, dict):
        return [f"{key}\t{value}" for key, value in data.items()]
    if isinstance(data, list):
        return [
            "\t".join(str(v) for v in item.values()) if isinstance(item, dict) else str(item)
            for item in data
        ]
    return [str(data)]


def _is_tty() -> bool:
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    """``NO_COLOR`` set to anything, or ``TERM=dumb``."""
    return "NO_COLOR" in os.environ or os.environ.get("TERM") == "dumb"


# --- process-wide instance ---

_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the installed :class:`OutputManager`, creating a default one if needed."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    """Forget the installed manager so the next call builds a fresh one."""
    global _output
    _output = None


def format_response(data: Any) -> None:
    get_output().format_response(data)


def print_data(text: str) -> None:
    get_output().print_data(text)


def print_table(headers: list[str], rows: list[list[str]], title: Optional[str] = None) -> None:
    get_output().print_table(headers, rows, title)


def info(message: str) -> None:
    get_output().info(message)


def success(message: str) -> None:
    get_output().success(message)


def warning(message: str) -> None:
    get_output().warning(message)


def error(message: str) -> None:
    get_output().error(message)


def suggest(message: str) -> None:
    get_output().suggest(message)


def debug(message: str) -> None:
    get_output().debug(message)
