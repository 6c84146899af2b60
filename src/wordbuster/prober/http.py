"""Async HTTP probe executor."""

from __future__ import annotations

from typing import Optional

import httpx

from wordbuster.core.config import HttpSettings
from wordbuster.core.exceptions import ConfigurationError, ConnectionError, NetworkTimeoutError, ProbeError
from wordbuster.core.logging import get_logger
from wordbuster.core.models import Failure, ProbeOutcome, Success

logger = get_logger(__name__)


def parse_headers(raw_headers: list[str]) -> dict[str, str]:
    """Parse ``Name: value`` strings; entries without a colon are ignored."""
    headers: dict[str, str] = {}
    for raw in raw_headers:
        name, sep, value = raw.partition(":")
        if sep and name.strip():
            headers[name.strip()] = value.strip()
    return headers


def parse_codes(value: Optional[str]) -> frozenset[int]:
    """Parse a comma-separated list of integers, skipping invalid entries."""
    if not value:
        return frozenset()
    codes = set()
    for part in value.split(","):
        part = part.strip()
        if part.isdigit():
            codes.add(int(part))
    return frozenset(codes)


class HttpProber:
    """
    Shared HTTP client performing one request per probe.

    Features:
    - One connection pool shared by every worker
    - Optional proxy, basic auth, cookies and extra headers
    - Redirect targets reported even when redirects are not followed
    """

    def __init__(
        self,
        settings: HttpSettings,
        include_default_headers: bool = True,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings
        self.include_default_headers = include_default_headers
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    def _build_client(self) -> httpx.AsyncClient:
        headers = {"User-Agent": self.settings.user_agent}
        if self.include_default_headers:
            headers.update(parse_headers(self.settings.headers))
            if self.settings.cookies:
                headers["Cookie"] = self.settings.cookies

        auth = None
        if self.settings.username is not None:
            auth = httpx.BasicAuth(self.settings.username, self.settings.password or "")

        try:
            return httpx.AsyncClient(
                http2=True,
                timeout=httpx.Timeout(self.settings.timeout),
                follow_redirects=self.settings.follow_redirects,
                verify=not self.settings.insecure,
                proxy=self.settings.proxy,
                headers=headers,
                auth=auth,
                limits=httpx.Limits(max_keepalive_connections=100),
                transport=self._transport,
            )
        except (ValueError, httpx.InvalidURL) as e:
            raise ConfigurationError(f"Invalid HTTP client configuration: {e}") from e

    async def open(self) -> None:
        if self._client is None:
            self._client = self._build_client()

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "HttpProber":
        await self.open()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            raise RuntimeError("HttpProber used before open()")
        return self._client

    async def request(
        self,
        url: str,
        method: Optional[str] = None,
        headers: Optional[dict[str, str]] = None,
        content: Optional[str] = None,
    ) -> httpx.Response:
        """
        Issue a single request.

        Raises:
            NetworkTimeoutError: If the request times out
            ConnectionError: If the connection cannot be established
            ProbeError: On any other transport error
        """
        method = (method or self.settings.method).upper()

        try:
            return await self.client.request(method, url, headers=headers, content=content)
        except httpx.TimeoutException as e:
            raise NetworkTimeoutError("Request timeout") from e
        except httpx.ConnectError as e:
            raise ConnectionError(f"Connection error: {e}") from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise ProbeError(f"{type(e).__name__}: {e}") from e

    async def fetch(
        self,
        url: str,
        method: Optional[str] = None,
        headers: Optional[dict[str, str]] = None,
        content: Optional[str] = None,
        keep_body: bool = False,
    ) -> ProbeOutcome:
        """
        Issue a single request and normalize the response.

        Args:
            url: Absolute URL to request
            method: HTTP method (defaults to the configured method)
            headers: Per-request headers layered over the client defaults
            content: Optional request body
            keep_body: Keep the decoded body text in ``extra_text``

        Returns:
            Success with status, size and redirect target, or Failure
        """
        try:
            response = await self.request(url, method=method, headers=headers, content=content)
        except ProbeError as e:
            return Failure(reason=str(e))

        redirect = None
        if response.is_redirect:
            redirect = response.headers.get("location")

        return Success(
            status_code=response.status_code,
            byte_size=len(response.content),
            redirect_target=redirect,
            extra_text=response.text if keep_body else None,
            url=url,
        )
