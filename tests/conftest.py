"""Test configuration and fixtures for wordbuster."""

import asyncio
import io
import tempfile
from pathlib import Path
from typing import Optional

import pytest
from rich.console import Console

from wordbuster.core.config import RunConfig, Settings
from wordbuster.core.engine import RunContext
from wordbuster.core.filters import dir_filter
from wordbuster.core.models import Candidate, Failure, FilterPolicy, Success, TftpRecord
from wordbuster.core.output import OutputSink
from wordbuster.core.progress import ProgressTracker
from wordbuster.core.wildcard import WILDCARD_PREFIX, synthetic_word
from wordbuster.modes.base import EnumerationMode


class FakeMode(EnumerationMode):
    """In-memory mode that records how the engine drives it.

    Words listed in ``found`` answer 200, words in ``errors`` fail with a
    transport error, words in ``raises`` make the probe raise, and
    everything else answers 404. Synthetic wildcard candidates answer
    ``wildcard_outcome``.
    """

    name = "fake"
    supports_wildcard = True

    def __init__(
        self,
        found=(),
        errors=(),
        raises=(),
        absent=(),
        wildcard_outcome=None,
        latency: float = 0.005,
        backups: bool = False,
        max_concurrency: Optional[int] = None,
    ):
        super().__init__(FilterPolicy(allow_status=frozenset({200})))
        self.found = set(found)
        self.errors = set(errors)
        self.raises = set(raises)
        self.absent = set(absent)
        self.wildcard_outcome = wildcard_outcome or Success(status_code=404, byte_size=0)
        self.latency = latency
        self.backups = backups
        self.max_concurrency = max_concurrency

        self.in_flight = 0
        self.high_water = 0
        self.probed: list[str] = []
        self.opened = False
        self.closed = False

    @property
    def target(self) -> str:
        return "memory"

    def generate(self, word):
        yield Candidate(word)

    async def open(self):
        self.opened = True

    async def close(self):
        self.closed = True

    async def probe(self, candidate):
        self.in_flight += 1
        self.high_water = max(self.high_water, self.in_flight)
        try:
            await asyncio.sleep(self.latency)
            self.probed.append(candidate.value)
            if candidate.value.startswith(WILDCARD_PREFIX):
                return self.wildcard_outcome
            if candidate.value in self.raises:
                raise RuntimeError("probe exploded")
            if candidate.value in self.errors:
                return Failure(reason="Connection refused")
            if candidate.value in self.absent:
                return Failure(reason="No such name", absent=True)
            if candidate.value in self.found or candidate.value.endswith(".bak"):
                return Success(status_code=200, byte_size=len(candidate.value))
            return Success(status_code=404, byte_size=0)
        finally:
            self.in_flight -= 1

    def wildcard_candidates(self):
        return [Candidate(synthetic_word())]

    def follow_up(self, matched):
        if not self.backups:
            return []
        return [Candidate(f"{c.value}.bak") for c in matched if not c.value.endswith(".bak")]

    def is_match(self, outcome, baseline):
        return dir_filter(outcome, self.policy, baseline)

    def to_record(self, candidate, outcome):
        return TftpRecord(filename=candidate.value)

    def render(self, record):
        return record.filename


@pytest.fixture
def settings() -> Settings:
    """Default settings for testing."""
    return Settings()


@pytest.fixture
def temp_dir() -> Path:
    """Temporary directory for test outputs."""
    with tempfile.TemporaryDirectory() as tmp:
        yield Path(tmp)


@pytest.fixture
def console() -> Console:
    """Console writing into memory."""
    return Console(file=io.StringIO(), width=200, no_color=True, highlight=False)


@pytest.fixture
def wordlist_file(temp_dir: Path):
    """Factory writing a word list and returning its path."""

    def _write(words, name: str = "words.txt") -> Path:
        path = temp_dir / name
        path.write_text("\n".join(words) + "\n")
        return path

    return _write


@pytest.fixture
def make_context(console: Console):
    """Factory building a run context with progress rendering disabled."""

    def _make(output_file: Optional[Path] = None, verbose: bool = False, **config) -> RunContext:
        run_config = RunConfig(show_progress=False, verbose=verbose, **config)
        return RunContext(
            config=run_config,
            progress=ProgressTracker(enabled=False, console=console),
            sink=OutputSink(output_file, console=console, verbose=verbose),
        )

    return _make


@pytest.fixture
def fake_mode_cls():
    return FakeMode
