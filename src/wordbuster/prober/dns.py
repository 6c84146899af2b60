"""DNS probe executor built on the dnspython async resolver."""

from __future__ import annotations

import ipaddress
from typing import Optional

import dns.exception
import dns.resolver
from dns import asyncresolver

from wordbuster.core.exceptions import InvalidTargetError
from wordbuster.core.logging import get_logger
from wordbuster.core.models import Failure, ProbeOutcome, Success

logger = get_logger(__name__)

DEFAULT_DNS_PORT = 53

# Answers that mean "this name has no such record"
_NEGATIVE = (dns.resolver.NXDOMAIN, dns.resolver.NoAnswer)


def parse_resolver_address(address: str) -> tuple[str, int]:
    """Parse ``IP`` or ``IP:port`` (IPv6 as ``[addr]:port``).

    Raises:
        InvalidTargetError: If the address is not an IP literal or the port is invalid
    """
    address = address.strip()
    host, port = address, DEFAULT_DNS_PORT

    if address.startswith("["):
        host, _, rest = address[1:].partition("]")
        if rest:
            if not rest.startswith(":"):
                raise InvalidTargetError(f"Invalid resolver address '{address}'")
            port = _parse_port(rest[1:], address)
    elif address.count(":") == 1:
        host, _, port_text = address.partition(":")
        port = _parse_port(port_text, address)

    try:
        ipaddress.ip_address(host)
    except ValueError as e:
        raise InvalidTargetError(f"Invalid resolver IP '{address}': {e}") from e

    return host, port


def _parse_port(text: str, address: str) -> int:
    if not text.isdigit() or not 0 < int(text) < 65536:
        raise InvalidTargetError(f"Invalid port in address '{address}'")
    return int(text)


class DnsProber:
    """Resolves A, AAAA and CNAME records for one name per probe."""

    RECORD_TYPES = ("A", "AAAA", "CNAME")

    def __init__(self, resolver_address: Optional[str] = None, timeout: float = 5.0):
        self.resolver_address = resolver_address
        self.timeout = timeout
        self._nameserver = parse_resolver_address(resolver_address) if resolver_address else None
        self._resolver: Optional[asyncresolver.Resolver] = None

    def _build_resolver(self) -> asyncresolver.Resolver:
        if self._nameserver is not None:
            resolver = asyncresolver.Resolver(configure=False)
            # Port first: nameserver entries capture it when assigned
            resolver.port = self._nameserver[1]
            resolver.nameservers = [self._nameserver[0]]
        else:
            try:
                resolver = asyncresolver.Resolver()
            except dns.resolver.NoResolverConfiguration as e:
                raise InvalidTargetError(f"No system DNS resolver configured: {e}") from e
        resolver.timeout = self.timeout
        resolver.lifetime = self.timeout
        return resolver

    async def open(self) -> None:
        if self._resolver is None:
            self._resolver = self._build_resolver()

    async def close(self) -> None:
        self._resolver = None

    @property
    def resolver(self) -> asyncresolver.Resolver:
        if self._resolver is None:
            raise RuntimeError("DnsProber used before open()")
        return self._resolver

    async def resolve(self, name: str) -> ProbeOutcome:
        """
        Resolve ``name`` for addresses and CNAME targets.

        Returns:
            Success with at least one address or CNAME; an absent Failure if
            every lookup was answered negatively; an error Failure otherwise
        """
        addresses: set[str] = set()
        cnames: list[str] = []
        errors: list[str] = []

        for rtype in self.RECORD_TYPES:
            try:
                answer = await self.resolver.resolve(name, rtype)
            except _NEGATIVE:
                continue
            except dns.resolver.NoNameservers as e:
                errors.append(f"{rtype}: no nameservers ({e})")
                continue
            except dns.exception.Timeout:
                errors.append(f"{rtype}: timeout")
                continue
            except dns.exception.DNSException as e:
                errors.append(f"{rtype}: {e}")
                continue

            for rdata in answer:
                if rtype == "CNAME":
                    cnames.append(str(rdata.target).rstrip("."))
                else:
                    addresses.add(str(rdata))

        if addresses or cnames:
            return Success(resolved_addresses=frozenset(addresses), cnames=tuple(cnames))

        if errors:
            return Failure(reason="; ".join(errors))

        return Failure(reason=f"No records found for {name}", absent=True)
