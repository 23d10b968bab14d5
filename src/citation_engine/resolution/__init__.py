"""URL resolution: redirect following, throttling and batch memoization."""

from citation_engine.resolution.batch import BatchResolver
from citation_engine.resolution.redirect import RedirectResolver
from citation_engine.resolution.throttle import ConcurrencyThrottle


__all__ = [
    "BatchResolver",
    "ConcurrencyThrottle",
    "RedirectResolver",
]
