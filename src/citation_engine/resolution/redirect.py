"""Redirect chain resolution.

Grounding sources often arrive as tracking or proxy URLs that redirect to
the real page. RedirectResolver walks the chain with HEAD requests and
returns the terminal URL. It never raises: any network failure returns the
input URL unchanged.
"""

from __future__ import annotations

import httpx

from citation_engine.core.config import Settings, get_settings
from citation_engine.core.constants import LOCATION_HEADER
from citation_engine.core.exceptions import RedirectResolutionError
from citation_engine.core.http import HTTPClientFactory
from citation_engine.core.logging import Logger, get_logger


class RedirectResolver:
    """Follow HTTP redirect chains to their final location.

    Attributes:
        max_hops: Redirects followed before the last URL reached is returned

    Example:
        ```python
        resolver = RedirectResolver()
        try:
            final_url = await resolver.resolve("https://short.example/abc")
        finally:
            await resolver.close()
        ```
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        *,
        max_hops: int | None = None,
        settings: Settings | None = None,
        logger: Logger | None = None,
    ) -> None:
        """Initialize the resolver.

        Args:
            client: HTTP client to use. When omitted one is created lazily
                and owned (closed) by the resolver.
            max_hops: Hop limit. Defaults to settings.redirect_max_hops.
            settings: Application settings. Uses get_settings() if not provided.
            logger: Structured logger. Defaults to the module logger.
        """
        self._settings = settings or get_settings()
        self.max_hops = max_hops if max_hops is not None else self._settings.redirect_max_hops
        self._client = client
        self._owns_client = client is None
        self._logger = logger or get_logger(__name__)

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = HTTPClientFactory(self._settings).create_client()
        return self._client

    async def close(self) -> None:
        """Close the HTTP client if the resolver created it."""
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> RedirectResolver:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def resolve(self, url: str) -> str:
        """Resolve ``url`` to the end of its redirect chain.

        Args:
            url: URL to resolve

        Returns:
            Final URL; the last URL reached when the hop limit is hit;
            ``url`` itself when any request fails
        """
        try:
            return await self._follow(url)
        except RedirectResolutionError as e:
            self._logger.warning(
                "Redirect resolution failed, keeping original URL",
                url=url,
                hops=e.hops,
                error=str(e.cause),
            )
            return url

    async def _follow(self, url: str) -> str:
        """Walk the chain, raising RedirectResolutionError on network failure."""
        client = await self._get_client()
        current = url

        for hop in range(self.max_hops + 1):
            try:
                response = await client.head(current, follow_redirects=False)
            except (httpx.HTTPError, httpx.InvalidURL) as e:
                raise RedirectResolutionError(
                    f"HEAD {current} failed",
                    url=url,
                    hops=hop,
                    cause=e,
                ) from e

            location = response.headers.get(LOCATION_HEADER)
            if not location:
                return str(response.url)

            if hop == self.max_hops:
                break
            try:
                current = str(response.url.join(location))
            except httpx.InvalidURL as e:
                raise RedirectResolutionError(
                    f"Invalid redirect target {location!r}",
                    url=url,
                    hops=hop,
                    cause=e,
                ) from e

        self._logger.warning(
            "Redirect hop limit reached",
            url=url,
            last_url=current,
            max_hops=self.max_hops,
        )
        return current


__all__ = [
    "RedirectResolver",
]
