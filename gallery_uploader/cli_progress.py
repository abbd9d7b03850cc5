"""Console rendering and progress helpers for the gallery-up CLI."""
from __future__ import annotations

import time
from typing import Any, Dict, Optional, Sequence

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .models import BatchReport, Notification, Reference, Severity
from .utils.events import CandidateProgress, EventEmitter

console = Console()

_SEVERITY_STYLE = {
    Severity.INFO: "blue",
    Severity.WARNING: "yellow",
    Severity.ERROR: "red",
}


def _human_size(value: int) -> str:
    size = float(max(value, 0))
    units = ["B", "KB", "MB", "GB", "TB"]
    unit_idx = 0
    while size >= 1024.0 and unit_idx < len(units) - 1:
        size /= 1024.0
        unit_idx += 1
    if unit_idx == 0:
        return f"{int(size)} {units[unit_idx]}"
    return f"{size:.2f} {units[unit_idx]}"


def render_configuration_summary(config: Dict[str, Any], target: Optional[Console] = None) -> None:
    """Render startup configuration summary."""
    out = target or console
    table = Table.grid(padding=(0, 2))
    table.add_column(style="bold cyan", justify="right")
    table.add_column(style="white")

    for key, value in config.items():
        rendered = "-" if value is None else str(value)
        table.add_row(key, rendered)

    out.print(
        Panel(
            table,
            title="[bold green]gallery-up[/bold green]",
            subtitle="[dim]gallery uploader CLI[/dim]",
            border_style="blue",
        )
    )


class RichNotificationSink:
    """Prints notifications as coloured console lines."""

    def __init__(self, target: Optional[Console] = None):
        self._console = target or console

    def notify(self, notification: Notification) -> None:
        color = _SEVERITY_STYLE[notification.severity]
        self._console.print(
            f"[bold {color}]{notification.title}[/bold {color}] {notification.message}",
            highlight=False,
        )


class BatchProgressDisplay:
    """Event-based console timeline for one batch."""

    def __init__(self, target: Optional[Console] = None):
        self._console = target or console
        self._stats: Dict[str, int] = {"persisted": 0, "fallback": 0, "rejected": 0}

    @property
    def stats(self) -> Dict[str, int]:
        return dict(self._stats)

    def attach(self, events: EventEmitter) -> None:
        events.on("file_start", self.on_file_start)
        events.on("file_complete", self.on_file_complete)
        events.on("file_fallback", self.on_file_fallback)
        events.on("file_rejected", self.on_file_rejected)

    def detach(self, events: EventEmitter) -> None:
        events.off("file_start", self.on_file_start)
        events.off("file_complete", self.on_file_complete)
        events.off("file_fallback", self.on_file_fallback)
        events.off("file_rejected", self.on_file_rejected)

    def _emit_timeline(self, status: str, color: str, progress: CandidateProgress, detail: str = "") -> None:
        stamp = time.strftime("%H:%M:%S")
        size_label = f" {_human_size(progress.total_bytes)}" if progress.total_bytes > 0 else ""
        detail_label = f" [dim]{detail}[/dim]" if detail else ""
        self._console.print(
            f"[dim]{stamp}[/dim] [{color}]{status:<4}[/{color}] "
            f"[{progress.index}/{progress.total}] {progress.filename}{size_label}{detail_label}",
            highlight=False,
        )

    def on_file_start(self, progress: CandidateProgress) -> None:
        self._emit_timeline("SEND", "cyan", progress)

    def on_file_complete(self, progress: CandidateProgress) -> None:
        self._stats["persisted"] += 1
        self._emit_timeline("DONE", "green", progress, progress.locator or "")

    def on_file_fallback(self, progress: CandidateProgress) -> None:
        self._stats["fallback"] += 1
        self._emit_timeline("PREV", "yellow", progress, f"cause={progress.error}" if progress.error else "")

    def on_file_rejected(self, progress: CandidateProgress) -> None:
        self._stats["rejected"] += 1
        self._emit_timeline("SKIP", "red", progress)


def render_batch_report(report: BatchReport, target: Optional[Console] = None) -> None:
    """Summarize a batch: counts, then one row per warning."""
    out = target or console
    if report.error and not report.outcomes:
        out.print(f"[red]Batch not uploaded:[/red] {report.error}", highlight=False)
        return

    out.print(
        f"[green]{report.accepted_count} uploaded[/green], "
        f"[yellow]{report.fallback_count} preview only[/yellow], "
        f"[red]{report.rejected_count} skipped[/red]"
    )
    if report.warnings:
        table = Table(title="Warnings", show_lines=False)
        table.add_column("File", style="bold")
        table.add_column("Reason")
        table.add_column("Detail", style="dim")
        for warning in report.warnings:
            table.add_row(warning.filename, warning.reason.value, warning.detail or "")
        out.print(table)
    if report.error:
        out.print(f"[red]Batch error:[/red] {report.error}", highlight=False)


def render_references(references: Sequence[Reference], target: Optional[Console] = None) -> None:
    """List the gallery, marking the primary image and preview-only entries."""
    out = target or console
    table = Table(title="Gallery")
    table.add_column("#", justify="right")
    table.add_column("Reference")
    table.add_column("State")
    for index, ref in enumerate(references):
        state = "stored" if ref.is_durable else "[yellow]preview only[/yellow]"
        label = f"{index} (main)" if index == 0 else str(index)
        table.add_row(label, ref.locator, state)
    out.print(table)
