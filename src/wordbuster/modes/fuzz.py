"""Parameter fuzzing by substituting a placeholder keyword."""

from __future__ import annotations

from typing import Iterator, Optional

from rich.markup import escape

from wordbuster.core.config import HttpSettings
from wordbuster.core.exceptions import MissingPlaceholderError
from wordbuster.core.filters import fuzz_filter
from wordbuster.core.models import (
    BaselineSignature,
    Candidate,
    FilterPolicy,
    FuzzRecord,
    ProbeOutcome,
    Success,
)
from wordbuster.modes.base import EnumerationMode
from wordbuster.modes.dir import status_style
from wordbuster.prober.http import HttpProber, parse_headers

FUZZ_KEYWORD = "FUZZ"

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


class FuzzMode(EnumerationMode):
    """
    Replace every ``FUZZ`` occurrence in the URL, body, headers and cookie
    string with the current word and send one request per word.

    Raises:
        MissingPlaceholderError: If the keyword appears nowhere
    """

    name = "fuzz"

    def __init__(
        self,
        url: str,
        http: HttpSettings,
        data: Optional[str] = None,
        policy: Optional[FilterPolicy] = None,
        prober: Optional[HttpProber] = None,
    ):
        super().__init__(policy)
        self.url = url
        self.data = data
        self.method = http.method.upper()
        self.raw_headers = list(http.headers)
        self.cookies = http.cookies

        if not self.has_placeholder():
            raise MissingPlaceholderError(
                f"{FUZZ_KEYWORD} keyword not found in URL, headers, data or cookies"
            )

        # Headers and cookies are substituted per request, so the client carries none
        self.prober = prober or HttpProber(http, include_default_headers=False)

    def has_placeholder(self) -> bool:
        return (
            FUZZ_KEYWORD in self.url
            or any(FUZZ_KEYWORD in header for header in self.raw_headers)
            or (self.data is not None and FUZZ_KEYWORD in self.data)
            or (self.cookies is not None and FUZZ_KEYWORD in self.cookies)
        )

    @property
    def target(self) -> str:
        return self.url

    def generate(self, word: str) -> Iterator[Candidate]:
        yield Candidate(word)

    async def open(self) -> None:
        await self.prober.open()

    async def close(self) -> None:
        await self.prober.close()

    def build_request(self, payload: str) -> tuple[str, dict[str, str], Optional[str]]:
        """Substitute ``payload`` and return ``(url, headers, body)``."""
        url = self.url.replace(FUZZ_KEYWORD, payload)
        headers = parse_headers([raw.replace(FUZZ_KEYWORD, payload) for raw in self.raw_headers])
        if self.cookies is not None:
            headers["Cookie"] = self.cookies.replace(FUZZ_KEYWORD, payload)

        body = None
        if self.data is not None:
            body = self.data.replace(FUZZ_KEYWORD, payload)
            if self.method == "POST":
                headers["Content-Type"] = FORM_CONTENT_TYPE

        return url, headers, body

    async def probe(self, candidate: Candidate) -> ProbeOutcome:
        url, headers, body = self.build_request(candidate.value)
        return await self.prober.fetch(url, method=self.method, headers=headers, content=body, keep_body=True)

    def is_match(self, outcome: ProbeOutcome, baseline: Optional[BaselineSignature]) -> bool:
        return fuzz_filter(outcome, self.policy, baseline)

    def to_record(self, candidate: Candidate, outcome: Success) -> FuzzRecord:
        body = outcome.extra_text or ""
        return FuzzRecord(
            payload=candidate.value,
            status=outcome.status_code,
            size=outcome.byte_size or 0,
            words=len(body.split()),
            lines=len(body.splitlines()),
        )

    def render(self, record: FuzzRecord) -> str:
        style = status_style(record.status)
        return (
            f"{escape(record.payload):<30} [{style}]\\[Status: {record.status}][/{style}] "
            f"[Size: {record.size}, Words: {record.words}, Lines: {record.lines}]"
        )
