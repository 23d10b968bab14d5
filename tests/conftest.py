"""Test configuration and shared fixtures.

Pattern: Pytest fixtures, conftest.py
"""

from collections.abc import Callable

import httpx
import pytest

from citation_engine.core.config import Settings


# ============================================================================
# Configuration Fixtures
# ============================================================================

@pytest.fixture
def test_settings() -> Settings:
    """Create test settings with safe defaults (no pacing, short timeouts)."""
    return Settings(
        environment="test",
        log_level="DEBUG",
        redirect_max_hops=20,
        redirect_timeout_seconds=1.0,
        throttle_max_concurrent=4,
        throttle_min_spacing_ms=0,
        references_heading="## References",
        default_reference_title="Untitled",
    )


# ============================================================================
# Fake HTTP Fixtures
# ============================================================================

RedirectClientFactory = Callable[..., httpx.AsyncClient]


@pytest.fixture
def redirect_client() -> RedirectClientFactory:
    """Build an AsyncClient backed by an in-memory redirect table.

    Usage:
        client = redirect_client({"https://a.example/x": "https://b.example/y"},
                                 failing={"https://down.example/"})

    Every request is recorded on ``client.requested`` (list of URL strings).
    """

    def factory(
        redirects: dict[str, str] | None = None,
        failing: set[str] | None = None,
    ) -> httpx.AsyncClient:
        redirects = redirects or {}
        failing = failing or set()
        requested: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            url = str(request.url)
            requested.append(url)
            if url in failing:
                raise httpx.ConnectError("connection refused", request=request)
            target = redirects.get(url)
            if target is not None:
                return httpx.Response(301, headers={"Location": target})
            return httpx.Response(200)

        client = httpx.AsyncClient(
            transport=httpx.MockTransport(handler),
            follow_redirects=False,
        )
        client.requested = requested  # type: ignore[attr-defined]
        return client

    return factory


# ============================================================================
# Grounding Payload Fixtures
# ============================================================================

@pytest.fixture
def sample_report() -> str:
    """Two-sentence Japanese report (sentences of 11 and 12 characters)."""
    return "これは最初の文章です。これは二番目の文章です。"


@pytest.fixture
def sample_metadata() -> dict:
    """Grounding payload covering both sentences of sample_report."""
    return {
        "groundingChunks": [
            {"web": {"uri": "https://example.com/1", "title": "例1のタイトル"}},
            {"web": {"uri": "https://example.com/2", "title": "例2のタイトル"}},
        ],
        "groundingSupports": [
            {
                "segment": {"startIndex": 0, "endIndex": 11, "text": "これは最初の文章です。"},
                "groundingChunkIndices": [0],
                "confidenceScores": [0.9],
            },
            {
                "segment": {"startIndex": 11, "endIndex": 23, "text": "これは二番目の文章です。"},
                "groundingChunkIndices": [1],
                "confidenceScores": [0.8],
            },
        ],
    }
