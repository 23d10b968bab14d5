"""Memoized, throttled resolution of a batch of URLs.

URLs are deduplicated before anything is dispatched, so the throttle never
resolves the same URL twice in one batch. An optional deadline bounds the
whole batch: anything still pending when it expires keeps its original URL.
"""

from __future__ import annotations

import asyncio
import uuid
from collections.abc import Iterable

import structlog

from citation_engine.core.config import Settings, get_settings
from citation_engine.core.logging import Logger, get_logger
from citation_engine.resolution.redirect import RedirectResolver
from citation_engine.resolution.throttle import ConcurrencyThrottle


class BatchResolver:
    """Resolve many URLs through one RedirectResolver and one throttle.

    Example:
        ```python
        async with BatchResolver.from_settings() as batch:
            resolved = await batch.resolve_all(["https://a.example", "https://b.example"])
        ```
    """

    def __init__(
        self,
        resolver: RedirectResolver,
        throttle: ConcurrencyThrottle,
        *,
        deadline_seconds: float | None = None,
        logger: Logger | None = None,
    ) -> None:
        """Initialize the batch resolver.

        Args:
            resolver: Resolver used for every URL
            throttle: Throttle bounding concurrent resolutions
            deadline_seconds: Overall deadline per batch (None = unbounded)
            logger: Structured logger. Defaults to the module logger.
        """
        self._resolver = resolver
        self._throttle = throttle
        self.deadline_seconds = deadline_seconds
        self._logger = logger or get_logger(__name__)

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> BatchResolver:
        """Build a batch resolver with components configured from settings."""
        settings = settings or get_settings()
        return cls(
            RedirectResolver(settings=settings),
            ConcurrencyThrottle(settings=settings),
            deadline_seconds=settings.resolution_deadline_seconds,
        )

    async def close(self) -> None:
        """Release the resolver's HTTP client."""
        await self._resolver.close()

    async def __aenter__(self) -> BatchResolver:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def resolve_all(self, urls: Iterable[str]) -> dict[str, str]:
        """Resolve each distinct URL once.

        Args:
            urls: URLs to resolve; duplicates and empty strings are ignored

        Returns:
            Mapping of every distinct input URL to its resolved URL. Failed
            or timed-out resolutions map to the input URL.
        """
        unique = list(dict.fromkeys(url for url in urls if url))
        if not unique:
            return {}

        resolved: dict[str, str] = {}

        def make_task(url: str):
            async def task() -> str:
                final = await self._resolver.resolve(url)
                resolved[url] = final
                return final

            return task

        with structlog.contextvars.bound_contextvars(batch_id=uuid.uuid4().hex[:12]):
            batch = self._throttle.run_all([make_task(url) for url in unique])
            try:
                if self.deadline_seconds is None:
                    await batch
                else:
                    await asyncio.wait_for(batch, timeout=self.deadline_seconds)
            except TimeoutError:
                pending = [url for url in unique if url not in resolved]
                self._logger.warning(
                    "Resolution deadline reached, keeping original URLs",
                    deadline_seconds=self.deadline_seconds,
                    pending=len(pending),
                )

            result = {url: resolved.get(url) or url for url in unique}
            changed = sum(1 for url, final in result.items() if url != final)
            self._logger.info("Resolved URL batch", urls=len(unique), redirected=changed)
        return result


__all__ = [
    "BatchResolver",
]
