"""Rich progress reporting for piece hashing."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
    TimeRemainingColumn,
)

if TYPE_CHECKING:  # pragma: no cover - type checking only, not executed at runtime
    from rich.console import Console


def create_hash_progress(console: Console) -> Progress:
    """Create the progress bar shown while hashing pieces."""
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
        TimeElapsedColumn(),
        TimeRemainingColumn(),
        console=console,
    )


class ProgressObserver:
    """Forwards hash scheduler progress to a Rich progress task."""

    def __init__(self, progress: Progress, description: str = "Hashing pieces"):
        """Initialize the observer; the task total is set on the first piece."""
        self.progress = progress
        self.task: TaskID = progress.add_task(description, total=None)

    def on_piece_hashed(self, index: int, completed: int, total: int) -> None:
        """Advance the progress bar to ``completed`` of ``total``."""
        self.progress.update(self.task, completed=completed, total=total)
