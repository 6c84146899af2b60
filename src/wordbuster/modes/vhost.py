"""Virtual host discovery by varying the Host header."""

from __future__ import annotations

from typing import Iterator, Optional

from rich.markup import escape

from wordbuster.core.config import HttpSettings
from wordbuster.core.exceptions import ConfigurationError, TargetUnreachableError
from wordbuster.core.filters import vhost_filter
from wordbuster.core.logging import get_logger
from wordbuster.core.models import (
    BaselineSignature,
    Candidate,
    Failure,
    FilterPolicy,
    ProbeOutcome,
    Success,
    VhostRecord,
)
from wordbuster.modes.base import EnumerationMode
from wordbuster.modes.dir import status_style
from wordbuster.prober.http import HttpProber

logger = get_logger(__name__)


class VhostMode(EnumerationMode):
    """
    Send ``GET url`` with ``Host: word`` (or ``word.domain``) for every word.

    A single plain request to the target is taken before the run; a host
    is reported when its response size differs from that baseline.
    """

    name = "vhost"

    def __init__(
        self,
        url: str,
        http: HttpSettings,
        domain: Optional[str] = None,
        append_domain: bool = False,
        policy: Optional[FilterPolicy] = None,
        prober: Optional[HttpProber] = None,
    ):
        super().__init__(policy)
        if append_domain and not domain:
            raise ConfigurationError("--append-domain requires --domain")
        self.url = url
        self.domain = domain.strip().strip(".") if domain else None
        self.append_domain = append_domain
        self.prober = prober or HttpProber(http)

    @property
    def target(self) -> str:
        return self.url

    def generate(self, word: str) -> Iterator[Candidate]:
        host = word.strip()
        if not host:
            return
        if self.append_domain:
            host = f"{host}.{self.domain}"
        yield Candidate(host)

    async def open(self) -> None:
        await self.prober.open()

    async def close(self) -> None:
        await self.prober.close()

    async def prepare(self) -> BaselineSignature:
        """Fetch the target once without a Host override.

        Raises:
            TargetUnreachableError: If the baseline request fails
        """
        outcome = await self.prober.fetch(self.url, method="GET")
        if isinstance(outcome, Failure):
            raise TargetUnreachableError(f"Failed to get baseline response from {self.url}: {outcome.reason}")

        logger.info("vhost_baseline", url=self.url, status=outcome.status_code, size=outcome.byte_size)
        return BaselineSignature(size=outcome.byte_size)

    async def probe(self, candidate: Candidate) -> ProbeOutcome:
        return await self.prober.fetch(self.url, method="GET", headers={"Host": candidate.value})

    def is_match(self, outcome: ProbeOutcome, baseline: Optional[BaselineSignature]) -> bool:
        return vhost_filter(outcome, self.policy, baseline)

    def to_record(self, candidate: Candidate, outcome: Success) -> VhostRecord:
        return VhostRecord(host=candidate.value, status=outcome.status_code, size=outcome.byte_size or 0)

    def render(self, record: VhostRecord) -> str:
        style = status_style(record.status)
        return (
            f"[green]Found:[/green] {escape(record.host)} "
            f"[{style}](Status: {record.status})[/{style}] [Size: {record.size}]"
        )
