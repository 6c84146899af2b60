"""Common capability set of every enumeration mode."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import ClassVar, Iterable, Iterator, Optional

from wordbuster.core.models import (
    BaselineSignature,
    Candidate,
    FilterPolicy,
    OutputRecord,
    ProbeOutcome,
    Success,
)


class EnumerationMode(ABC):
    """
    A mode supplies three operations to the engine:

    - ``generate``: expand one word into candidates
    - ``probe``: perform the network operation for one candidate
    - ``is_match``: decide whether an outcome is reportable

    plus the record shape and console rendering of its matches. Modes that
    need a network client open it in :meth:`open` and release it in
    :meth:`close`; the engine enters the mode as an async context manager.
    """

    name: ClassVar[str] = ""
    supports_wildcard: ClassVar[bool] = False
    max_concurrency: Optional[int] = None

    def __init__(self, policy: Optional[FilterPolicy] = None):
        self.policy = policy or FilterPolicy()

    @property
    def target(self) -> str:
        """Target description for banners and summaries."""
        return ""

    # Candidate generation

    @abstractmethod
    def generate(self, word: str) -> Iterator[Candidate]:
        """Expand ``word`` into an ordered, finite sequence of candidates."""

    def candidate_count(self, word_count: int) -> int:
        """Closed-form number of candidates produced for ``word_count`` words."""
        return word_count

    # Probing

    @abstractmethod
    async def probe(self, candidate: Candidate) -> ProbeOutcome:
        """Perform exactly one probe for ``candidate``."""

    async def open(self) -> None:
        pass

    async def close(self) -> None:
        pass

    async def __aenter__(self) -> "EnumerationMode":
        await self.open()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def prepare(self) -> Optional[BaselineSignature]:
        """Capture a mandatory pre-run baseline (vhost only)."""
        return None

    def wildcard_candidates(self) -> list[Candidate]:
        """Synthetic candidates probed before the run."""
        return []

    def describe_wildcard(self, signature: BaselineSignature) -> str:
        return "Wildcard response detected"

    def follow_up(self, matched: list[Candidate]) -> Iterable[Candidate]:
        """Extra candidates to probe after the main pass."""
        return ()

    # Filtering and reporting

    @abstractmethod
    def is_match(self, outcome: ProbeOutcome, baseline: Optional[BaselineSignature]) -> bool:
        """Apply the mode's result filter."""

    @abstractmethod
    def to_record(self, candidate: Candidate, outcome: Success) -> OutputRecord:
        """Build the output record of a match."""

    @abstractmethod
    def render(self, record: OutputRecord) -> str:
        """Rich markup for the console line of a match."""

    def display_name(self, candidate: Candidate) -> str:
        return candidate.value
