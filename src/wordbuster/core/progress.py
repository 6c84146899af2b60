"""Run progress counters with a throttled rich renderer."""

from __future__ import annotations

import time
from typing import Optional

from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)


class ProgressTracker:
    """Shared counters for one run.

    All workers run on one event loop, so plain integer increments are
    atomic with respect to each other. Rendering happens at most once per
    ``min_interval`` seconds, plus a final render in :meth:`finish`.
    """

    def __init__(
        self,
        total: int = 0,
        enabled: bool = True,
        console: Optional[Console] = None,
        min_interval: float = 0.1,
    ):
        self.total = total
        self.done = 0
        self.found = 0
        self.errored = 0
        self.enabled = enabled
        self.console = console or Console(stderr=True)
        self.min_interval = min_interval
        self.render_count = 0

        self._progress: Optional[Progress] = None
        self._task: Optional[TaskID] = None
        self._last_render = 0.0

    @property
    def percent(self) -> float:
        """Percentage of candidates completed, 0-100."""
        if self.total <= 0:
            return 100.0 if self.done else 0.0
        return min(100.0, self.done * 100.0 / self.total)

    def start(self) -> None:
        """Begin rendering (no-op when disabled)."""
        if not self.enabled or self._progress is not None:
            return
        self._progress = Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            TextColumn("[green]found {task.fields[found]}[/green]"),
            TextColumn("[red]errors {task.fields[errored]}[/red]"),
            TimeElapsedColumn(),
            console=self.console,
            auto_refresh=False,
            transient=True,
        )
        self._progress.start()
        self._task = self._progress.add_task(
            "Probing", total=self.total, found=0, errored=0
        )
        self._render(force=True)

    def add_total(self, count: int) -> None:
        """Grow the total when follow-up candidates are scheduled."""
        self.total += count
        self._render(force=True)

    def inc_done(self) -> None:
        self.done += 1
        self._render()

    def inc_found(self) -> None:
        self.found += 1

    def inc_error(self) -> None:
        self.errored += 1

    def finish(self) -> None:
        """Render the final state and stop the renderer."""
        if self._progress is None:
            return
        self._render(force=True)
        self._progress.stop()
        self._progress = None
        self._task = None

    def _render(self, force: bool = False) -> None:
        if self._progress is None or self._task is None:
            return
        now = time.monotonic()
        if not force and now - self._last_render < self.min_interval:
            return
        self._last_render = now
        self.render_count += 1
        self._progress.update(
            self._task,
            total=self.total,
            completed=self.done,
            found=self.found,
            errored=self.errored,
        )
        self._progress.refresh()
