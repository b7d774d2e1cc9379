"""Output formatting utilities for the CLI."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

import questionary
from rich.console import Console
from rich.table import Table
from rich.theme import Theme

from rdslogs.cli.common.tui_style import QUESTIONARY_STYLE_CONFIRM
from rdslogs.core.logfiles import parse_log_file_name

_THEME = Theme(
    {
        "ok": "bold green",
        "warn": "yellow",
        "err": "bold red",
        "title": "bold cyan",
        "meta": "dim",
    }
)

console = Console(theme=_THEME)

_TS_FORMAT = "%Y-%m-%d %H:%M"


def _human_size(size_bytes: int) -> str:
    size = float(size_bytes)
    for unit in ("B", "KiB", "MiB"):
        if size < 1024:
            return f"{size:.0f} {unit}" if unit == "B" else f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} GiB"


@dataclass(frozen=True)
class Out:
    """Output formatter for CLI messages and tables."""

    def _q_try(self, fn, *args, **kwargs):
        """Call questionary prompts and drop unsupported kwargs on older versions."""
        try:
            return fn(*args, **kwargs)
        except TypeError:
            for k in ("pointer", "auto_enter"):
                kwargs.pop(k, None)
            return fn(*args, **kwargs)

    def _q(self, message: str) -> str:
        """Prefix Questionary prompts with the tool name."""
        return f"[rdslogs] {message}"

    def info(self, msg: str) -> None:
        """Print an info message."""
        console.print(f"[title]›[/] {msg}")

    @contextmanager
    def status(self, msg: str):
        """Show a transient status spinner while work is in progress."""
        with console.status(msg, spinner="dots"):
            yield

    def success(self, msg: str) -> None:
        """Print a success message."""
        console.print(f"[ok]✓[/] {msg}")

    def warn(self, msg: str) -> None:
        """Print a warning message."""
        console.print(f"[warn]⚠[/] {msg}")

    def error(self, msg: str) -> None:
        """Print an error message."""
        console.print(f"[err]✗[/] {msg}")

    def header(self, title: str) -> None:
        """Print a header message."""
        console.print(f"[title]{title}[/]")

    def kv(self, items: Mapping[str, Any]) -> None:
        """Print key-value pairs."""
        for k, v in items.items():
            console.print(f"[meta]{k}[/]: {v}")

    def confirm(self, message: str, *, default: bool = False) -> bool:
        """
        Ask the user for confirmation using a standardized Questionary prompt.

        Args:
            message: Confirmation question shown to the user.
            default: Default answer if the user just presses enter.

        Returns:
            True if the user confirms, False otherwise.
        """
        console.print("[meta]Use y/n then Enter[/]")

        prompt = self._q_try(
            questionary.confirm,
            self._q(message),
            default=default,
            style=QUESTIONARY_STYLE_CONFIRM,
            qmark="✦",
            auto_enter=False,
        )
        return bool(prompt.ask())

    def files_table(self, names: Iterable[str], title: str = "Log files") -> None:
        """
        Render log file names with the granularity and time range parsed
        from each name. Unrecognized names are shown without a range.
        """
        t = Table(title=title, show_lines=False)
        t.add_column("File", style="ok")
        t.add_column("Format", style="meta")
        t.add_column("Granularity", style="meta")
        t.add_column("From (UTC)")
        t.add_column("To (UTC)")

        for name in names:
            log_file = parse_log_file_name(name)
            if log_file is None:
                t.add_row(name, "", "", "[warn]unrecognized[/]", "")
                continue
            t.add_row(
                name,
                log_file.log_format.value,
                log_file.granularity.value,
                log_file.time_range.start.strftime(_TS_FORMAT),
                log_file.time_range.end.strftime(_TS_FORMAT),
            )

        console.print(t)

    def partitions_table(self, partitions: Iterable[Any], title: str = "Partitions") -> None:
        """
        Expects objects with .name, .file_name and optional .constraint
        (like rdslogs.core.catalog.RegisteredPartition)
        """
        t = Table(title=title, show_lines=False)
        t.add_column("Partition", style="ok")
        t.add_column("Log file")
        t.add_column("Constraint (UTC)", style="meta")

        for p in partitions:
            constraint = getattr(p, "constraint", None)
            rendered = (
                f"[{constraint.start.strftime(_TS_FORMAT)}, "
                f"{constraint.end.strftime(_TS_FORMAT)})"
                if constraint
                else "-"
            )
            t.add_row(str(p.name), str(p.file_name), rendered)

        console.print(t)

    def download_results_table(
        self, results: Iterable[Any], title: str = "Download results"
    ) -> None:
        """
        Expects objects with .name, .ok, .size_bytes and optional .error
        (like rdslogs.core.download.LogFileDownloadResult)
        """
        t = Table(title=title, show_lines=False)
        t.add_column("File", style="ok")
        t.add_column("Size", justify="right", style="meta")
        t.add_column("Result")

        for r in results:
            ok = bool(getattr(r, "ok", False))
            size = _human_size(getattr(r, "size_bytes", 0) or 0) if ok else ""
            err = getattr(r, "error", None)
            t.add_row(str(r.name), size, "[ok]OK[/]" if ok else f"[err]FAIL[/] {err}")

        console.print(t)


out = Out()
