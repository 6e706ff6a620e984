"""console output for import and export commands."""

from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TaskID, TextColumn

from dualchat.store import ImportResult


class ProgressHandler:
    """handles spinner display and user-facing messages."""

    def __init__(self, quiet: bool = False, show_progress: bool = False) -> None:
        self.quiet = quiet
        self.show_progress = show_progress
        self._console = Console(stderr=True)
        self._progress: Optional[Progress] = None
        self._task_id: Optional[TaskID] = None

    def __enter__(self) -> "ProgressHandler":
        return self

    def __exit__(
        self,
        exc_type: Optional[type],
        exc_val: Optional[BaseException],
        exc_tb: Optional[object],
    ) -> None:
        self.stop()

    def start_reading(self, name: str) -> None:
        """starts spinner while an import file is read."""
        if not self.show_progress:
            return

        self.stop()
        self._progress = Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=self._console,
            transient=True,
        )
        self._progress.start()
        self._task_id = self._progress.add_task(f"Reading {name}...", total=None)

    def stop(self) -> None:
        """stops the spinner if running."""
        if self._progress is not None:
            self._progress.stop()
            self._progress = None
            self._task_id = None

    def log_error(self, message: str) -> None:
        """prints error message (always shown, even in quiet mode)."""
        self._console.print(f"[red]ERROR:[/red] {message}")

    def log_warning(self, message: str) -> None:
        """prints warning message (always shown, even in quiet mode)."""
        self._console.print(f"[yellow]WARNING:[/yellow] {message}")

    def log_info(self, message: str) -> None:
        """prints info message unless quiet."""
        if self.quiet:
            return

        self._console.print(message)

    def finish_import(self, result: ImportResult) -> None:
        """prints import summary unless quiet."""
        self.log_info(
            f"Imported {result.imported} conversation(s): {result.added} new, "
            f"{result.replaced} replaced, {result.kept} kept; {result.total} total"
        )

    def finish_export(self, path: Optional[Path]) -> None:
        """prints the written path, or that nothing was written."""
        if path is None:
            self.log_info("Nothing written")
        else:
            self.log_info(f"Exported to {escape(str(path))}")
