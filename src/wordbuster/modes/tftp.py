"""TFTP file enumeration."""

from __future__ import annotations

from typing import Iterator, Optional

from rich.markup import escape

from wordbuster.core.config import TftpSettings
from wordbuster.core.filters import tftp_filter
from wordbuster.core.models import (
    BaselineSignature,
    Candidate,
    FilterPolicy,
    ProbeOutcome,
    Success,
    TftpRecord,
)
from wordbuster.modes.base import EnumerationMode
from wordbuster.prober.tftp import TftpProber


class TftpMode(EnumerationMode):
    """Send one read request per filename; report files the server serves."""

    name = "tftp"

    def __init__(
        self,
        server: str,
        tftp: TftpSettings,
        policy: Optional[FilterPolicy] = None,
        prober: Optional[TftpProber] = None,
    ):
        super().__init__(policy)
        self.server = server
        self.max_concurrency = tftp.max_concurrency
        self.prober = prober or TftpProber(server, tftp.timeout, tftp.block_size)

    @property
    def target(self) -> str:
        return f"{self.prober.host}:{self.prober.port}"

    def generate(self, word: str) -> Iterator[Candidate]:
        yield Candidate(word)

    async def probe(self, candidate: Candidate) -> ProbeOutcome:
        return await self.prober.check(candidate.value)

    def is_match(self, outcome: ProbeOutcome, baseline: Optional[BaselineSignature]) -> bool:
        return tftp_filter(outcome, self.policy, baseline)

    def to_record(self, candidate: Candidate, outcome: Success) -> TftpRecord:
        return TftpRecord(filename=candidate.value)

    def render(self, record: TftpRecord) -> str:
        return f"[green]Found:[/green] {escape(record.filename)}"
