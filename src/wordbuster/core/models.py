"""Data models for wordbuster."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field


@dataclass(frozen=True)
class Candidate:
    """One concrete value to probe, derived from a word list entry."""

    value: str
    tag: Optional[str] = None  # e.g. the extension that produced a path

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Success:
    """A probe that completed its network round trip.

    Fields that do not apply to the mode stay at their defaults.
    """

    status_code: Optional[int] = None
    byte_size: Optional[int] = None
    resolved_addresses: frozenset[str] = frozenset()
    cnames: tuple[str, ...] = ()
    redirect_target: Optional[str] = None
    extra_text: Optional[str] = None
    listing: tuple[str, ...] = ()
    url: Optional[str] = None


@dataclass(frozen=True)
class Failure:
    """A probe that did not produce a usable response.

    ``absent`` marks a definitive negative answer (NXDOMAIN, TFTP error
    reply, TFTP timeout). Absent failures are not counted as errors.
    """

    reason: str
    absent: bool = False


ProbeOutcome = Union[Success, Failure]


@dataclass(frozen=True)
class BaselineSignature:
    """Noise captured before the run from presumed-nonexistent candidates."""

    responses: frozenset[tuple[int, int]] = frozenset()  # (status, size)
    addresses: frozenset[str] = frozenset()
    size: Optional[int] = None  # vhost pre-run response size

    @property
    def is_empty(self) -> bool:
        return not self.responses and not self.addresses and self.size is None

    def merge(self, other: "BaselineSignature | None") -> "BaselineSignature":
        """Combine two signatures, keeping every noise marker from both."""
        if other is None:
            return self
        return BaselineSignature(
            responses=self.responses | other.responses,
            addresses=self.addresses | other.addresses,
            size=self.size if self.size is not None else other.size,
        )


@dataclass(frozen=True)
class FilterPolicy:
    """Allow/deny rules deciding whether an outcome is reportable.

    An empty ``allow_status`` set allows every status.
    """

    allow_status: frozenset[int] = frozenset()
    deny_status: frozenset[int] = frozenset()
    deny_sizes: frozenset[int] = frozenset()
    exclude_text: Optional[str] = None


class OutputRecord(BaseModel):
    """Base class for the mode-specific match shapes."""

    model_config = ConfigDict(frozen=True)

    def to_line(self) -> str:
        """Line-oriented representation for text output files."""
        raise NotImplementedError


class DirRecord(OutputRecord):
    """A discovered path."""

    path: str
    status: int
    size: int
    redirect: Optional[str] = None

    def to_line(self) -> str:
        return f"{self.path} (Status: {self.status}) [Size: {self.size}]"


class DnsRecord(OutputRecord):
    """A subdomain that resolved."""

    subdomain: str
    ips: list[str] = Field(default_factory=list)
    cnames: list[str] = Field(default_factory=list)

    def to_line(self) -> str:
        return f"{self.subdomain} [{', '.join(self.ips)}]"


class VhostRecord(OutputRecord):
    """A virtual host whose response differs from the baseline."""

    host: str
    status: int
    size: int

    def to_line(self) -> str:
        return f"{self.host} (Status: {self.status}) [Size: {self.size}]"


class FuzzRecord(OutputRecord):
    """A payload whose response passed the fuzz filters."""

    payload: str
    status: int
    size: int
    words: int
    lines: int

    def to_line(self) -> str:
        return (
            f"{self.payload} [Status: {self.status}, Size: {self.size}, "
            f"Words: {self.words}, Lines: {self.lines}]"
        )


class BucketRecord(OutputRecord):
    """An existing storage bucket."""

    name: str
    status: str  # "public" or "private"
    files: list[str] = Field(default_factory=list)
    url: Optional[str] = None

    def to_line(self) -> str:
        return f"{self.name} [{self.status}] files: {len(self.files)}"


class TftpRecord(OutputRecord):
    """A file the TFTP server agreed to serve."""

    filename: str

    def to_line(self) -> str:
        return self.filename


class RunSummary(BaseModel):
    """Outcome of a complete run."""

    mode: str
    target: str
    started_at: datetime = Field(default_factory=datetime.utcnow)
    completed_at: datetime | None = None
    duration_seconds: float = 0.0

    total: int = 0
    done: int = 0
    found: int = 0
    errored: int = 0

    wildcard_detected: bool = False
    stopped_on_wildcard: bool = False
    output_file: str | None = None
