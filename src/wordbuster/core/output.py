"""Output sink: immediate console printing plus an optional result file."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import IO, Optional

from rich.console import Console
from rich.markup import escape

from wordbuster.core.exceptions import OutputError
from wordbuster.core.logging import get_logger
from wordbuster.core.models import OutputRecord

logger = get_logger(__name__)


class FileWriter:
    """Writes matches to a file, one writer in the critical section at a time.

    A ``.json`` suffix selects JSON-array mode: the opening bracket is
    written on creation, every record but the first is preceded by a
    comma, and :meth:`finalize` closes the array.
    """

    def __init__(self, path: Path):
        self.path = path
        self.json_mode = path.suffix.lower() == ".json"
        self._lock = asyncio.Lock()
        self._first = True
        self._closed = False
        self.failed_writes = 0

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            self._file: IO[str] = open(path, "w", encoding="utf-8")
            if self.json_mode:
                self._file.write("[\n")
                self._file.flush()
        except OSError as e:
            raise OutputError(f"Could not open output file '{path}': {e}") from e

    async def write(self, record: OutputRecord) -> None:
        """Append one record; a failed write is logged and skipped."""
        async with self._lock:
            try:
                if self.json_mode:
                    prefix = "" if self._first else ",\n"
                    self._file.write(prefix + json.dumps(record.model_dump(mode="json"), indent=2))
                    self._first = False
                else:
                    self._file.write(record.to_line() + "\n")
                self._file.flush()
            except OSError as e:
                self.failed_writes += 1
                logger.warning("output_write_failed", path=str(self.path), error=str(e))

    async def finalize(self) -> None:
        """Close the JSON array (if any) and the file."""
        async with self._lock:
            if self._closed:
                return
            try:
                if self.json_mode:
                    self._file.write("\n]\n")
                self._file.close()
            except OSError as e:
                logger.warning("output_finalize_failed", path=str(self.path), error=str(e))
            self._closed = True


class OutputSink:
    """Prints matches to the console and mirrors them to an optional file."""

    def __init__(
        self,
        output_file: Optional[Path] = None,
        console: Optional[Console] = None,
        verbose: bool = False,
    ):
        self.console = console or Console()
        self.verbose = verbose
        self.writer = FileWriter(output_file) if output_file else None

    async def emit(self, record: OutputRecord, rendered: str) -> None:
        """Print ``rendered`` immediately and write ``record`` to the file."""
        self.console.print(rendered, highlight=False, soft_wrap=True)
        if self.writer is not None:
            await self.writer.write(record)

    def error(self, message: str) -> None:
        """Echo a probe error (verbose mode only)."""
        if self.verbose:
            self.console.print(f"[red]Error:[/red] {escape(message)}", highlight=False)

    def warning(self, message: str) -> None:
        self.console.print(f"[yellow][!] {escape(message)}[/yellow]", highlight=False)

    async def finalize(self) -> None:
        if self.writer is not None:
            await self.writer.finalize()
