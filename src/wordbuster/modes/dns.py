"""Subdomain enumeration over DNS."""

from __future__ import annotations

from typing import Iterator, Optional

from rich.markup import escape

from wordbuster.core.config import DnsSettings
from wordbuster.core.filters import dns_filter
from wordbuster.core.models import (
    BaselineSignature,
    Candidate,
    DnsRecord,
    FilterPolicy,
    ProbeOutcome,
    Success,
)
from wordbuster.core.wildcard import synthetic_word
from wordbuster.modes.base import EnumerationMode
from wordbuster.prober.dns import DnsProber


class DnsMode(EnumerationMode):
    """Resolve ``word.domain`` for every word."""

    name = "dns"
    supports_wildcard = True

    def __init__(
        self,
        domain: str,
        dns: DnsSettings,
        show_ips: bool = False,
        show_cname: bool = False,
        policy: Optional[FilterPolicy] = None,
        prober: Optional[DnsProber] = None,
    ):
        super().__init__(policy)
        self.domain = domain.strip().strip(".")
        self.show_ips = show_ips
        self.show_cname = show_cname
        self.prober = prober or DnsProber(dns.resolver, dns.timeout)

    @property
    def target(self) -> str:
        return self.domain

    def generate(self, word: str) -> Iterator[Candidate]:
        # Exactly one name per word; an all-dot word stays as-is and fails resolution
        label = word.strip().strip(".") or word.strip()
        yield Candidate(f"{label}.{self.domain}")

    async def open(self) -> None:
        await self.prober.open()

    async def close(self) -> None:
        await self.prober.close()

    async def probe(self, candidate: Candidate) -> ProbeOutcome:
        return await self.prober.resolve(candidate.value)

    def wildcard_candidates(self) -> list[Candidate]:
        return [Candidate(f"{synthetic_word()}.{self.domain}")]

    def describe_wildcard(self, signature: BaselineSignature) -> str:
        addresses = ", ".join(sorted(signature.addresses)) or "CNAME only"
        return f"Wildcard DNS detected for *.{self.domain}: {addresses}"

    def is_match(self, outcome: ProbeOutcome, baseline: Optional[BaselineSignature]) -> bool:
        return dns_filter(outcome, self.policy, baseline)

    def to_record(self, candidate: Candidate, outcome: Success) -> DnsRecord:
        return DnsRecord(
            subdomain=candidate.value,
            ips=sorted(outcome.resolved_addresses),
            cnames=list(outcome.cnames),
        )

    def render(self, record: DnsRecord) -> str:
        line = f"[green]Found:[/green] {escape(record.subdomain)}"
        if self.show_ips and record.ips:
            line += " " + escape(f"[{', '.join(record.ips)}]")
        if self.show_cname and record.cnames:
            line += f" [cyan]CNAME: {escape(', '.join(record.cnames))}[/cyan]"
        return line
