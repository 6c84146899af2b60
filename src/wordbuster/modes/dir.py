"""Directory and file busting over HTTP."""

from __future__ import annotations

from typing import Iterable, Iterator, Optional

from rich.markup import escape

from wordbuster.core.config import HttpSettings
from wordbuster.core.filters import dir_filter
from wordbuster.core.models import (
    BaselineSignature,
    Candidate,
    DirRecord,
    FilterPolicy,
    ProbeOutcome,
    Success,
)
from wordbuster.core.wildcard import synthetic_word
from wordbuster.modes.base import EnumerationMode
from wordbuster.prober.http import HttpProber

DEFAULT_STATUS_CODES = frozenset({200, 204, 301, 302, 307, 308, 401, 403, 405})

BACKUP_SUFFIXES = (".bak", ".backup", ".old", ".orig", ".save", "~", ".swp", ".tmp", ".copy")

_STATUS_STYLES = {2: "green", 3: "cyan", 4: "yellow", 5: "red"}


def normalize_extensions(extensions: Iterable[str]) -> list[str]:
    """Strip blanks and ensure a leading dot on every extension."""
    normalized = []
    for ext in extensions:
        ext = ext.strip()
        if not ext:
            continue
        normalized.append(ext if ext.startswith(".") else f".{ext}")
    return normalized


def status_style(status: int) -> str:
    return _STATUS_STYLES.get(status // 100, "white")


class DirMode(EnumerationMode):
    """
    Probe ``base_url + path`` for every word and extension variant.

    Each word yields the bare path, then one path per extension, each
    optionally followed by a trailing-slash twin.
    """

    name = "dir"
    supports_wildcard = True

    def __init__(
        self,
        url: str,
        http: HttpSettings,
        extensions: Iterable[str] = (),
        policy: Optional[FilterPolicy] = None,
        add_slash: bool = False,
        expanded: bool = False,
        show_length: bool = False,
        discover_backup: bool = False,
        prober: Optional[HttpProber] = None,
    ):
        super().__init__(policy or FilterPolicy(allow_status=DEFAULT_STATUS_CODES))
        self.base_url = url.rstrip("/")
        self.extensions = normalize_extensions(extensions)
        self.add_slash = add_slash
        self.expanded = expanded
        self.show_length = show_length
        self.discover_backup = discover_backup
        self.prober = prober or HttpProber(http)

    @property
    def target(self) -> str:
        return self.base_url

    def _variants(self, path: str, tag: Optional[str] = None) -> Iterator[Candidate]:
        yield Candidate(path, tag)
        if self.add_slash:
            yield Candidate(f"{path}/", tag)

    def generate(self, word: str) -> Iterator[Candidate]:
        path = word.strip().rstrip("/")
        if not path.startswith("/"):
            path = f"/{path}"

        yield from self._variants(path)
        for ext in self.extensions:
            yield from self._variants(f"{path}{ext}", ext)

    def candidate_count(self, word_count: int) -> int:
        per_word = len(self.extensions) + 1
        if self.add_slash:
            per_word *= 2
        return word_count * per_word

    async def open(self) -> None:
        await self.prober.open()

    async def close(self) -> None:
        await self.prober.close()

    def url_for(self, candidate: Candidate) -> str:
        return f"{self.base_url}{candidate.value}"

    async def probe(self, candidate: Candidate) -> ProbeOutcome:
        return await self.prober.fetch(self.url_for(candidate))

    def wildcard_candidates(self) -> list[Candidate]:
        word = synthetic_word()
        candidates = [Candidate(f"/{word}")]
        if self.extensions:
            candidates.append(Candidate(f"/{word}{self.extensions[0]}", self.extensions[0]))
        return candidates

    def describe_wildcard(self, signature: BaselineSignature) -> str:
        seen = ", ".join(f"{status} [Size: {size}]" for status, size in sorted(signature.responses))
        return f"Wildcard response detected for non-existent paths: {seen}"

    def follow_up(self, matched: list[Candidate]) -> Iterable[Candidate]:
        if not self.discover_backup:
            return []
        extra = []
        for candidate in matched:
            if candidate.value.endswith("/") or candidate.tag == "backup":
                continue
            for suffix in BACKUP_SUFFIXES:
                extra.append(Candidate(f"{candidate.value}{suffix}", "backup"))
        return extra

    def is_match(self, outcome: ProbeOutcome, baseline: Optional[BaselineSignature]) -> bool:
        return dir_filter(outcome, self.policy, baseline)

    def to_record(self, candidate: Candidate, outcome: Success) -> DirRecord:
        path = self.url_for(candidate) if self.expanded else candidate.value
        return DirRecord(
            path=path,
            status=outcome.status_code,
            size=outcome.byte_size or 0,
            redirect=outcome.redirect_target,
        )

    def render(self, record: DirRecord) -> str:
        style = status_style(record.status)
        line = f"{escape(record.path):<30} [{style}](Status: {record.status})[/{style}]"
        if self.show_length:
            line += f" [Size: {record.size}]"
        if record.redirect:
            line += f" [--> {escape(record.redirect)}]"
        return line
