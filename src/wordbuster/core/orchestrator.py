"""Run orchestrator: wires word list, mode, sink and progress into one run."""

from __future__ import annotations

import time
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from rich.console import Console

from wordbuster.core.config import RunConfig, Settings
from wordbuster.core.engine import EnumerationEngine, RunContext
from wordbuster.core.logging import get_logger, log_run_event
from wordbuster.core.models import RunSummary
from wordbuster.core.output import OutputSink
from wordbuster.core.progress import ProgressTracker
from wordbuster.core.wordlist import load_wordlist

if TYPE_CHECKING:
    from wordbuster.modes.base import EnumerationMode

logger = get_logger(__name__)


class ScanOrchestrator:
    """Runs one enumeration mode over one word list.

    Configuration problems (unreadable word list, unwritable output file,
    invalid target) surface as :class:`ConfigurationError` or
    :class:`OutputError` before any probe is sent.
    """

    def __init__(
        self,
        settings: Settings,
        console: Optional[Console] = None,
        run_config: Optional[RunConfig] = None,
    ):
        self.settings = settings
        self.console = console or Console()
        self.run_config = run_config or settings.run_config()

    async def run(self, mode: "EnumerationMode", wordlist: Path) -> RunSummary:
        """Execute a complete run.

        Args:
            mode: Configured mode variant
            wordlist: Path of the word list file
        """
        words = load_wordlist(wordlist)
        output_file = self.settings.output.output_file

        started_at = datetime.utcnow()
        start_time = time.time()

        sink = OutputSink(output_file, console=self.console, verbose=self.run_config.verbose)
        progress = ProgressTracker(enabled=self.run_config.show_progress, console=self.console)
        context = RunContext(config=self.run_config, progress=progress, sink=sink)

        log_run_event(
            "run_started",
            mode=mode.name,
            target=mode.target,
            words=len(words),
            threads=self.run_config.threads,
        )

        try:
            await EnumerationEngine(mode, context).run(words)
        finally:
            await sink.finalize()

        duration = time.time() - start_time

        log_run_event(
            "run_finished",
            mode=mode.name,
            target=mode.target,
            done=progress.done,
            found=progress.found,
            errored=progress.errored,
            duration_seconds=round(duration, 3),
        )

        if sink.writer is not None and sink.writer.failed_writes:
            logger.warning("output_writes_skipped", count=sink.writer.failed_writes)

        return RunSummary(
            mode=mode.name,
            target=mode.target,
            started_at=started_at,
            completed_at=datetime.utcnow(),
            duration_seconds=duration,
            total=progress.total,
            done=progress.done,
            found=progress.found,
            errored=progress.errored,
            wildcard_detected=context.wildcard_detected,
            stopped_on_wildcard=context.stopped_on_wildcard,
            output_file=str(output_file) if output_file else None,
        )
