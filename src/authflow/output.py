"""Result rendering and diagnostics with strict stdout/stderr discipline.

Follows `clig.dev <https://clig.dev/>`_ conventions:

* **stdout** -- the auth result only, so ``authflow --json login ... | jq
  .token`` works.
* **stderr** -- status lines (the result's messages and errors, hints) and
  log records from the library.
* **TTY detection** -- Rich rendering for an interactive terminal, plain
  ``key<TAB>value`` lines when piped.
* **Colour control** -- ``NO_COLOR``, ``TERM=dumb`` and ``--no-color``.

:class:`OutputManager` is built once in :func:`~authflow.app.main_callback`
and installed with :func:`set_output`; the module-level helpers delegate to
it.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from collections.abc import Iterator
from enum import Enum
from typing import Any, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.syntax import Syntax


class OutputFormat(str, Enum):
    """Supported result formats.

    ``AUTO`` resolves to ``RICH`` on an interactive TTY with colour enabled,
    to ``PLAIN`` otherwise.
    """

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


class OutputManager:
    """Routes result data to stdout (or a file) and diagnostics to stderr.

    Args:
        format: Result format; ``AUTO`` resolves from TTY detection.
        no_color: Disable colour and Rich markup.
        quiet: Drop informational and success lines; errors always show.
        verbose: Let debug log records through :meth:`logging_handler`.
        output_file: Write the result to this path instead of stdout.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
        output_file: Optional[str] = None,
    ) -> None:
        self._no_color = no_color or _should_disable_color()
        self._quiet = quiet
        self._verbose = verbose
        self._output_file = output_file

        if format == OutputFormat.AUTO:
            interactive = _is_tty() and not self._no_color
            format = OutputFormat.RICH if interactive else OutputFormat.PLAIN
        self._format = format

        self._stdout = Console(
            file=sys.stdout,
            no_color=self._no_color,
            force_terminal=(self._format == OutputFormat.RICH),
        )
        self._stderr = Console(file=sys.stderr, no_color=self._no_color, stderr=True)

    @property
    def format(self) -> OutputFormat:
        """The resolved output format."""
        return self._format

    # ------------------------------------------------------------------ #
    # Result data
    # ------------------------------------------------------------------ #

    def format_response(self, data: Any) -> None:
        """Render *data* (usually :func:`~authflow.client.response.result_to_dict`).

        With an ``output_file`` the data is written there as JSON (or text)
        and nothing reaches stdout.
        """
        if self._output_file:
            text = data if isinstance(data, str) else _to_json(data)
            with open(self._output_file, "w", encoding="utf-8") as f:
                f.write(text if text.endswith("\n") else text + "\n")
            return

        if self._format == OutputFormat.JSON:
            self.print_data(_reindent_json(data))
        elif self._format == OutputFormat.PLAIN:
            for line in _plain_lines(data):
                self.print_data(line)
        elif isinstance(data, (dict, list)):
            self._stdout.print(Syntax(_to_json(data), "json", theme="monokai", word_wrap=True))
        else:
            self._stdout.print(str(data))

    def print_data(self, text: str) -> None:
        """Print one chunk of data to stdout, or append it to the output file."""
        if not self._output_file:
            print(text, file=sys.stdout, flush=True)
            return
        with open(self._output_file, "a", encoding="utf-8") as f:
            f.write(text if text.endswith("\n") else text + "\n")

    # ------------------------------------------------------------------ #
    # Diagnostics (stderr)
    # ------------------------------------------------------------------ #

    def info(self, message: str) -> None:
        """Status line; suppressed by ``--quiet``."""
        self._diagnostic(message, markup="{}", quiet_ok=True)

    def success(self, message: str) -> None:
        """A result message such as "You have been successfully logged in."."""
        self._diagnostic(message, markup="[green]{}[/green]", quiet_ok=True)

    def error(self, message: str) -> None:
        """A result error or command failure; never suppressed."""
        self._diagnostic(message, prefix="Error: ", markup="[bold red]Error:[/bold red] {}")

    def suggest(self, message: str) -> None:
        """A next-step hint; suppressed by ``--quiet``."""
        self._diagnostic(message, prefix="→ ", markup="[dim]→ {}[/dim]", quiet_ok=True)

    def _diagnostic(
        self,
        message: str,
        *,
        prefix: str = "",
        markup: str,
        quiet_ok: bool = False,
    ) -> None:
        if quiet_ok and self._quiet:
            return
        if self._no_color:
            print(f"{prefix}{message}", file=sys.stderr, flush=True)
        else:
            self._stderr.print(markup.format(message))

    # ------------------------------------------------------------------ #
    # Logging
    # ------------------------------------------------------------------ #

    def logging_handler(self) -> logging.Handler:
        """Return a handler that renders library log records on stderr.

        The level is ``DEBUG`` in verbose mode and ``WARNING`` otherwise, so
        operator diagnostics (such as a missing token key) always surface.
        """
        if self._no_color:
            handler: logging.Handler = logging.StreamHandler(sys.stderr)
            handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
        else:
            handler = RichHandler(console=self._stderr, show_path=False, show_time=False)
        handler.setLevel(logging.DEBUG if self._verbose else logging.WARNING)
        return handler


# ------------------------------------------------------------------ #
# Rendering helpers
# ------------------------------------------------------------------ #


def _to_json(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False, default=str)


def _reindent_json(data: Any) -> str:
    """JSON text for *data*; strings holding JSON are re-indented, other strings pass through."""
    if not isinstance(data, str):
        return _to_json(data)
    try:
        return _to_json(json.loads(data))
    except json.JSONDecodeError:
        return data


def _plain_lines(data: Any) -> Iterator[str]:
    """Yield ``key<TAB>value`` lines for a result mapping.

    List values are joined with ``"; "`` so each key stays on one line,
    nested mappings are inlined as compact JSON, and ``None`` is empty.
    """
    if isinstance(data, dict):
        for key, value in data.items():
            if isinstance(value, (list, tuple)):
                value = "; ".join(str(v) for v in value)
            elif isinstance(value, dict):
                value = json.dumps(value, ensure_ascii=False, default=str)
            elif value is None:
                value = ""
            yield f"{key}\t{value}"
    elif isinstance(data, list):
        for item in data:
            yield str(item)
    else:
        yield str(data)


def _is_tty() -> bool:
    """Check if stdout is a TTY."""
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    """``NO_COLOR`` (any value) or ``TERM=dumb`` disables colour."""
    return os.environ.get("NO_COLOR") is not None or os.environ.get("TERM") == "dumb"


# ------------------------------------------------------------------ #
# Global output instance (set during app startup)
# ------------------------------------------------------------------ #

_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the global :class:`OutputManager`, creating a default one lazily."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    """Drop the global :class:`OutputManager`; tests call this between cases."""
    global _output
    _output = None


def format_response(data: Any) -> None:
    get_output().format_response(data)


def info(message: str) -> None:
    get_output().info(message)


def error(message: str) -> None:
    get_output().error(message)


def suggest(message: str) -> None:
    get_output().suggest(message)
