"""HTTP client factory for outbound redirect resolution.

Clients never follow redirects themselves: RedirectResolver walks each
chain hop by hop so it can bound the hop count and fail open on errors.

Pattern: Factory Pattern
"""

from typing import Any

import httpx

from citation_engine.core.config import Settings, get_settings
from citation_engine.core.logging import get_logger


logger = get_logger(__name__)


class HTTPClientFactory:
    """Build httpx clients configured for HEAD-only redirect probing.

    Every client gets:
    - The per-request timeout from settings.redirect_timeout_seconds
    - follow_redirects=False
    - The configured User-Agent (some shorteners reject anonymous clients)

    Example:
        ```python
        client = HTTPClientFactory().create_client()
        try:
            response = await client.head("https://short.example/abc")
        finally:
            await client.aclose()
        ```
    """

    def __init__(self, settings: Settings | None = None) -> None:
        """Initialize the factory.

        Args:
            settings: Application settings. Uses get_settings() if not provided.
        """
        self._settings = settings or get_settings()

    def create_client(
        self,
        timeout: float | None = None,
        **kwargs: Any,
    ) -> httpx.AsyncClient:
        """Create a client; the caller owns it and must ``aclose()`` it.

        Args:
            timeout: Request timeout in seconds. Defaults to settings.
            **kwargs: Extra httpx.AsyncClient arguments. ``headers`` are
                merged over the default User-Agent.

        Returns:
            Configured httpx.AsyncClient
        """
        headers = {"User-Agent": self._settings.redirect_user_agent}
        headers.update(kwargs.pop("headers", None) or {})
        request_timeout = httpx.Timeout(timeout or self._settings.redirect_timeout_seconds)

        logger.debug("Creating HTTP client", timeout=request_timeout.read)
        return httpx.AsyncClient(
            timeout=request_timeout,
            follow_redirects=False,
            headers=headers,
            **kwargs,
        )
