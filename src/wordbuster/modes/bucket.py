"""S3 and GCS bucket enumeration."""

from __future__ import annotations

import html
import re
from typing import Iterator, Literal, Optional

from rich.markup import escape

from wordbuster.core.config import BucketSettings, HttpSettings
from wordbuster.core.exceptions import ProbeError
from wordbuster.core.filters import BUCKET_PRIVATE, BUCKET_PUBLIC, bucket_filter
from wordbuster.core.models import (
    BaselineSignature,
    BucketRecord,
    Candidate,
    Failure,
    FilterPolicy,
    ProbeOutcome,
    Success,
)
from wordbuster.modes.base import EnumerationMode
from wordbuster.prober.http import HttpProber

Provider = Literal["s3", "gcs"]

URL_SHAPES: dict[str, tuple[str, str]] = {
    "s3": ("https://{name}.s3.amazonaws.com", "https://s3.amazonaws.com/{name}"),
    "gcs": ("https://{name}.storage.googleapis.com", "https://storage.googleapis.com/{name}"),
}

_KEY_PATTERN = re.compile(r"<Key>(.*?)</Key>", re.DOTALL)


def parse_listing(xml: str, max_files: int) -> list[str]:
    """Object keys from a bucket listing document, at most ``max_files``."""
    if max_files <= 0:
        return []
    keys = []
    for match in _KEY_PATTERN.finditer(xml):
        keys.append(html.unescape(match.group(1)))
        if len(keys) >= max_files:
            break
    return keys


class BucketMode(EnumerationMode):
    """
    Check whether a bucket named after each word exists.

    Both URL shapes of the provider are tried in order; the first one
    answering 200 (public) or 403 (private) decides.
    """

    name = "bucket"

    def __init__(
        self,
        provider: Provider,
        bucket: BucketSettings,
        http: Optional[HttpSettings] = None,
        policy: Optional[FilterPolicy] = None,
        prober: Optional[HttpProber] = None,
    ):
        super().__init__(policy)
        if provider not in URL_SHAPES:
            raise ValueError(f"Unknown bucket provider: {provider}")
        self.provider = provider
        self.max_files = bucket.max_files

        if prober is None:
            http = http or HttpSettings()
            prober = HttpProber(
                http.model_copy(update={"timeout": bucket.timeout, "method": "GET"}),
                include_default_headers=False,
            )
        self.prober = prober

    @property
    def target(self) -> str:
        return self.provider.upper()

    def generate(self, word: str) -> Iterator[Candidate]:
        name = word.strip()
        if name:
            yield Candidate(name)

    def urls_for(self, candidate: Candidate) -> list[str]:
        return [shape.format(name=candidate.value) for shape in URL_SHAPES[self.provider]]

    async def open(self) -> None:
        await self.prober.open()

    async def close(self) -> None:
        await self.prober.close()

    async def probe(self, candidate: Candidate) -> ProbeOutcome:
        answered: Optional[Success] = None
        error: Optional[Failure] = None

        for url in self.urls_for(candidate):
            try:
                response = await self.prober.request(url, method="GET")
            except ProbeError as e:
                error = Failure(reason=str(e))
                continue

            if response.status_code == BUCKET_PUBLIC:
                return Success(
                    status_code=BUCKET_PUBLIC,
                    byte_size=len(response.content),
                    listing=tuple(parse_listing(response.text, self.max_files)),
                    url=url,
                )
            if response.status_code == BUCKET_PRIVATE:
                return Success(status_code=BUCKET_PRIVATE, byte_size=len(response.content), url=url)

            answered = Success(status_code=response.status_code, byte_size=len(response.content), url=url)

        # Absent bucket unless every URL failed at the transport level
        if answered is not None:
            return answered
        return error or Failure(reason="No URL to probe")

    def is_match(self, outcome: ProbeOutcome, baseline: Optional[BaselineSignature]) -> bool:
        return bucket_filter(outcome, self.policy, baseline)

    def to_record(self, candidate: Candidate, outcome: Success) -> BucketRecord:
        status = "public" if outcome.status_code == BUCKET_PUBLIC else "private"
        return BucketRecord(name=candidate.value, status=status, files=list(outcome.listing), url=outcome.url)

    def render(self, record: BucketRecord) -> str:
        style = "green" if record.status == "public" else "yellow"
        line = f"[green]Found:[/green] {escape(record.name)} [{style}]({record.status})[/{style}]"
        for key in record.files:
            line += f"\n  - {escape(key)}"
        return line
