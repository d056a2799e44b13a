"""Console rendering and progress helpers for the ftp-up CLI."""
from __future__ import annotations

import time
from typing import Any, Dict, Optional

from rich.console import Console, Group
from rich.live import Live
from rich.panel import Panel
from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeRemainingColumn,
)
from rich.table import Table

from .models import FileItem, Progress as UploadProgress, TransferStatus

console = Console()


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


def render_configuration_summary(config: Dict[str, Any]) -> None:
    """Render startup configuration summary."""
    table = Table.grid(padding=(0, 2))
    table.add_column(style="bold cyan", justify="right")
    table.add_column(style="white")

    for key, value in config.items():
        rendered = "-" if value is None else str(value)
        table.add_row(key, rendered)

    panel = Panel(
        table,
        title="[bold green]ftp-up[/bold green]",
        subtitle="[dim]sequential FTP uploader[/dim]",
        border_style="blue",
    )
    console.print(panel)


class QueueProgressDisplay:
    """Event-based console display for an upload batch."""

    def __init__(self):
        self._overall_task_id: Optional[TaskID] = None
        self._item_task_id: Optional[TaskID] = None
        self._live: Optional[Live] = None

        self._meta_progress = Progress(
            SpinnerColumn(),
            TextColumn("[bold cyan]{task.fields[label]}", justify="left"),
            BarColumn(bar_width=28),
            TextColumn("{task.completed}/{task.total}"),
            TextColumn("[dim]{task.fields[detail]}", justify="left"),
            expand=False,
            console=console,
        )
        self._file_progress = Progress(
            SpinnerColumn(),
            TextColumn("[bold green]{task.fields[label]}", justify="left"),
            BarColumn(bar_width=42),
            TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
            DownloadColumn(),
            TextColumn("[cyan]{task.fields[speed]}"),
            TimeRemainingColumn(),
            expand=False,
            console=console,
        )

    def attach(self, uploader) -> None:
        """Subscribe to all uploader events."""
        uploader.on_item_start(self.on_item_start)
        uploader.on_item_complete(self.on_item_complete)
        uploader.on_item_fail(self.on_item_fail)
        uploader.on_progress(self.on_progress)
        uploader.on_connection_error(self.on_connection_error)
        uploader.on_connection_end(self.on_connection_end)
        uploader.on_finish(self.on_finish)

    def _emit_timeline(
        self,
        status: str,
        kind: str,
        name: str,
        size_bytes: Optional[int] = None,
        error: Optional[str] = None,
    ) -> None:
        stamp = time.strftime("%H:%M:%S")
        size_label = f" {_human_size(size_bytes)}" if size_bytes and size_bytes > 0 else ""
        error_label = f" cause={error}" if error else ""
        palette = {
            "DONE": "green",
            "FAIL": "red",
            "CONN": "yellow",
            "INFO": "blue",
        }
        color = palette.get(status, "white")
        console.print(
            f"[dim]{stamp}[/dim] [{color}]{status:<4}[/{color}] "
            f"{kind}: {name}{size_label}{error_label}"
        )

    def _start_live(self) -> None:
        if self._live is not None:
            return

        self._live = Live(
            Group(self._meta_progress, self._file_progress),
            console=console,
            refresh_per_second=8,
            vertical_overflow="visible",
        )
        self._live.start()
        self._overall_task_id = self._meta_progress.add_task(
            "overall",
            label="Overall",
            total=1,
            completed=0,
            detail="complete=0 failed=0",
        )

    def _stop_live(self) -> None:
        if self._live is None:
            return
        self._live.stop()
        self._live = None

    def _remove_item_task(self) -> None:
        if self._item_task_id is not None:
            self._file_progress.remove_task(self._item_task_id)
            self._item_task_id = None

    def update_overall(self, status: TransferStatus) -> None:
        if self._overall_task_id is None:
            return
        done = status.finished_count + status.error_count
        total = max(status.total, done, 1)
        self._meta_progress.update(
            self._overall_task_id,
            completed=min(done, total),
            total=total,
            detail=f"complete={status.finished_count} failed={status.error_count}",
        )

    def on_item_start(self, item: FileItem) -> None:
        self._start_live()
        self._remove_item_task()
        if item.is_directory:
            return
        self._item_task_id = self._file_progress.add_task(
            "upload",
            label=item.name[:60],
            total=max(item.size, 1),
            completed=0,
            speed="",
        )

    def on_progress(self, progress: UploadProgress) -> None:
        self.update_overall(progress.transfer_status)
        item = progress.item
        if item is None or self._item_task_id is None:
            return
        speed = f"{_human_size(progress.transfer_status.speed_average)}/s"
        self._file_progress.update(
            self._item_task_id,
            completed=item.transferred,
            total=max(item.size, 1),
            speed=speed,
        )

    def on_item_complete(self, item: Optional[FileItem]) -> None:
        self._remove_item_task()
        if item is None:
            return
        kind = "dir" if item.is_directory else "file"
        self._emit_timeline("DONE", kind, item.server_path, size_bytes=item.size)

    def on_item_fail(self, item: Optional[FileItem]) -> None:
        self._remove_item_task()
        if item is None:
            return
        kind = "dir" if item.is_directory else "file"
        self._emit_timeline("FAIL", kind, item.local_path, error=item.error)

    def on_connection_error(self, error: BaseException) -> None:
        self._emit_timeline("CONN", "connection", "error", error=str(error))

    def on_connection_end(self) -> None:
        self._emit_timeline("CONN", "connection", "closed by server")

    def on_finish(self, status: TransferStatus) -> None:
        self.update_overall(status)
        self._remove_item_task()
        self._stop_live()
        console.print(
            f"[bold]Finished[/bold] complete={status.finished_count} "
            f"failed={status.error_count} total={status.total}"
        )
