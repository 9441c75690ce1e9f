"""Console output for the CLI.

Provides a Console class that wraps rich for consistent output.
All CLI output should go through this module.
"""

from datetime import UTC, datetime
from typing import Any

from rich.console import Console as RichConsole
from rich.panel import Panel
from rich.table import Table

from vidiary.domain.video.model.aggregate import VideoRecord


def relative_time(moment: datetime) -> str:
    """Convert a timestamp to a relative time string (e.g., '2 hours ago')."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    seconds = (datetime.now(UTC) - moment).total_seconds()

    if seconds < 60:
        return "just now"
    elif seconds < 3600:
        mins = int(seconds // 60)
        return f"{mins} minute{'s' if mins != 1 else ''} ago"
    elif seconds < 86400:
        hours = int(seconds // 3600)
        return f"{hours} hour{'s' if hours != 1 else ''} ago"
    elif seconds < 604800:
        days = int(seconds // 86400)
        return f"{days} day{'s' if days != 1 else ''} ago"
    return moment.strftime("%Y-%m-%d %H:%M")


def human_size(size: int) -> str:
    value = float(size)
    for unit in ("B", "KB", "MB"):
        if value < 1024:
            return f"{value:.0f} {unit}" if unit == "B" else f"{value:.1f} {unit}"
        value /= 1024
    return f"{value:.1f} GB"


class Console:
    """CLI output manager wrapping rich."""

    def __init__(
        self,
        *,
        force_terminal: bool | None = None,
        quiet: bool = False,
    ) -> None:
        self._console = RichConsole(force_terminal=force_terminal, stderr=False)
        self._err_console = RichConsole(force_terminal=force_terminal, stderr=True)
        self._quiet = quiet

    # -------------------------------------------------------------------------
    # Status messages
    # -------------------------------------------------------------------------

    def success(self, message: str) -> None:
        self._console.print(f"[green]✓[/green] {message}")

    def error(self, message: str, *, hint: str | None = None) -> None:
        """Print an error message to stderr."""
        self._err_console.print(f"[red]✗[/red] {message}")
        if hint:
            self._err_console.print(f"  [dim]{hint}[/dim]")

    def warning(self, message: str) -> None:
        self._console.print(f"[yellow]⚠[/yellow] {message}")

    def info(self, message: str) -> None:
        """Print an info message (suppressed in quiet mode)."""
        if not self._quiet:
            self._console.print(f"[dim]{message}[/dim]")

    def print(self, *args: Any, **kwargs: Any) -> None:
        self._console.print(*args, **kwargs)

    # -------------------------------------------------------------------------
    # Structured output
    # -------------------------------------------------------------------------

    def table(
        self,
        rows: list[dict[str, Any]],
        columns: list[tuple[str, str]],  # (key, header)
        *,
        title: str | None = None,
        numbered: bool = False,
    ) -> None:
        """Print a table.

        Args:
            rows: List of dicts containing row data.
            columns: List of (key, header) tuples defining columns.
            title: Optional table title.
            numbered: Add a # column with row numbers.
        """
        table = Table(title=title, show_header=True, header_style="bold")

        if numbered:
            table.add_column("#", style="dim", width=3)

        for _, header in columns:
            table.add_column(header)

        for i, row in enumerate(rows, 1):
            values = [str(row.get(key, "")) for key, _ in columns]
            if numbered:
                table.add_row(str(i), *values)
            else:
                table.add_row(*values)

        self._console.print(table)

    def videos(self, records: list[VideoRecord], *, title: str | None = None) -> None:
        """Print clips as a numbered table."""
        if not records:
            self.info("No videos")
            return
        rows = [
            {
                "id": r.id,
                "date": r.date,
                "label": r.label or r.filename or "",
                "origin": r.origin.value,
                "size": human_size(r.size),
                "added": relative_time(r.timestamp),
            }
            for r in records
        ]
        columns = [
            ("id", "ID"),
            ("date", "Date"),
            ("label", "Label"),
            ("origin", "Origin"),
            ("size", "Size"),
            ("added", "Added"),
        ]
        self.table(rows, columns, title=title, numbered=True)

    def video_detail(self, record: VideoRecord, *, url: str | None = None) -> None:
        lines = [
            f"[cyan]Date:[/cyan] {record.date}    [cyan]Origin:[/cyan] {record.origin.value}",
            f"[cyan]Type:[/cyan] {record.mime_type}    [cyan]Size:[/cyan] {human_size(record.size)}",
        ]
        if record.filename:
            lines.append(f"[cyan]File:[/cyan] {record.filename}")
        if url:
            lines.append(f"[cyan]Handle:[/cyan] {url}")
        self._console.print(
            Panel(
                "\n".join(lines),
                title=f"[bold]{record.label or 'Untitled'}[/bold]",
                subtitle=f"[dim]{record.id}[/dim]",
                border_style="blue",
                padding=(1, 2),
            )
        )


# Module-level default instance for convenience
_default: Console | None = None


def get_console() -> Console:
    """Get the default console instance."""
    global _default
    if _default is None:
        _default = Console()
    return _default
