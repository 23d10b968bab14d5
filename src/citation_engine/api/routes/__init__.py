"""API route modules."""

from citation_engine.api.routes.grounding import router as grounding_router
from citation_engine.api.routes.health import router as health_router


__all__ = [
    "grounding_router",
    "health_router",
]
