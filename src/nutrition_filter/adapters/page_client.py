"""HTTP client for product and listing pages."""

from dataclasses import dataclass
from typing import Protocol

import httpx


class PageClient(Protocol):
    """Interface for fetching raw page markup."""

    async def fetch_markup(self, url: str) -> str:
        """Fetch a page and return its markup."""


@dataclass
class HttpxPageClient(PageClient):
    """HTTPX-backed page client."""

    http_client: httpx.AsyncClient
    timeout_seconds: float = 15.0

    @classmethod
    def create(cls, timeout_seconds: float = 15.0) -> "HttpxPageClient":
        """Create a page client with a managed httpx session."""
        return cls(
            http_client=httpx.AsyncClient(follow_redirects=True),
            timeout_seconds=timeout_seconds,
        )

    async def fetch_markup(self, url: str) -> str:
        """Fetch a page, raising on non-success status codes."""
        response = await self.http_client.get(url, timeout=self.timeout_seconds)
        response.raise_for_status()
        return response.text

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
